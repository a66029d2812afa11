"""One-ply greedy opponent for Dots & Boxes."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List

from .dots import COMPUTER, DotsBoard, DotsGame, Edge, legal_moves
from .errors import IllegalMove

logger = logging.getLogger(__name__)


@dataclass
class GreedyDotsAI:
    """Computer player for the "vs computer" mode.

    Move preference, each tier picked uniformly at random:
      1. an edge that closes at least one box right now;
      2. a "safe" edge, after which no open box is left with three sides;
      3. any legal edge.

    There is no lookahead beyond the current move, so long chains are
    sacrificed freely. Pass a seeded ``random.Random`` for reproducible play.
    """

    player: int = COMPUTER
    rng: random.Random = field(default_factory=random.Random, repr=False)

    # ---- public API ----

    def choose(self, game: DotsGame) -> Edge:
        if game.current != self.player:
            raise IllegalMove("It is not this AI player's turn")

        pool = self.candidates(game)
        if not pool:
            raise IllegalMove("No legal edges left")
        move = self.rng.choice(pool)
        logger.debug("AI player %s picked %s from %d candidates", self.player, move, len(pool))
        return move

    def candidates(self, game: DotsGame) -> List[Edge]:
        """The pool ``choose`` draws from in the current position."""

        moves = legal_moves(game)
        capturing = [m for m in moves if self._captures(game.board, m)]
        if capturing:
            return capturing
        safe = [m for m in moves if not self._gifts_box(game.board, m)]
        return safe or moves

    # ---- heuristics ----

    def _captures(self, board: DotsBoard, edge: Edge) -> bool:
        return any(
            board.boxes[r][c] == 0 and board.sides(r, c) == 3
            for r, c in board.adjacent_boxes(*edge)
        )

    def _gifts_box(self, board: DotsBoard, edge: Edge) -> bool:
        after, _ = board.apply_edge(edge.orientation, edge.row, edge.col, self.player)
        return any(
            after.boxes[r][c] == 0 and after.sides(r, c) == 3
            for r in range(after.rows)
            for c in range(after.cols)
        )
