"""Dots & Boxes rules: edge grids, box completion and turn rotation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, NamedTuple, Optional, Tuple

from .engine import Event, MoveResult
from .errors import IllegalMove, InvalidConfiguration

Orientation = str  # "h" or "v"
Grid = Tuple[Tuple[int, ...], ...]

HORIZONTAL: Orientation = "h"
VERTICAL: Orientation = "v"

MIN_SIDE = 2
MAX_SIDE = 12
PLAYER_COUNTS: Tuple[int, ...] = (2, 3, 4)
# Seat taken by the computer in "vs computer" mode
COMPUTER = 2

DIFFICULTIES: Dict[str, Tuple[int, int]] = {
    "easy": (6, 6),
    "medium": (8, 8),
    "hard": (8, 10),
    "large": (10, 10),
}


class Edge(NamedTuple):
    orientation: Orientation
    row: int
    col: int


def _grid(rows: int, cols: int) -> Grid:
    return tuple((0,) * cols for _ in range(rows))


def _with(grid: Grid, row: int, col: int, value: int) -> Grid:
    line = grid[row]
    return grid[:row] + (line[:col] + (value,) + line[col + 1 :],) + grid[row + 1 :]


# ---------- Configuration ----------


@dataclass(frozen=True)
class DotsConfig:
    rows: int = 6
    cols: int = 6
    players: int = 2
    opponent: bool = False

    def __post_init__(self) -> None:
        for name, value in (("rows", self.rows), ("cols", self.cols)):
            if not MIN_SIDE <= value <= MAX_SIDE:
                raise InvalidConfiguration(
                    f"Unsupported board {name} {value}; "
                    f"expected {MIN_SIDE}..{MAX_SIDE}"
                )
        if self.players not in PLAYER_COUNTS:
            raise InvalidConfiguration(
                f"Unsupported player count {self.players}. "
                f"Choose one of {', '.join(map(str, PLAYER_COUNTS))}."
            )
        if self.opponent and self.players != 2:
            raise InvalidConfiguration("The computer opponent only plays two-player games")

    @classmethod
    def preset(
        cls, difficulty: str, players: int = 2, opponent: bool = False
    ) -> "DotsConfig":
        try:
            rows, cols = DIFFICULTIES[difficulty]
        except KeyError as exc:
            raise InvalidConfiguration(f"Unknown difficulty {difficulty!r}") from exc
        return cls(rows=rows, cols=cols, players=players, opponent=opponent)


# ---------- Board ----------


@dataclass(frozen=True)
class DotsBoard:
    """Immutable edge/box grids. Every cell holds 0 or the owning player id."""

    rows: int
    cols: int
    horizontal: Grid
    vertical: Grid
    boxes: Grid

    @classmethod
    def empty(cls, rows: int, cols: int) -> "DotsBoard":
        return cls(
            rows=rows,
            cols=cols,
            horizontal=_grid(rows + 1, cols),
            vertical=_grid(rows, cols + 1),
            boxes=_grid(rows, cols),
        )

    def edge_shape(self, orientation: Orientation) -> Tuple[int, int]:
        if orientation == HORIZONTAL:
            return self.rows + 1, self.cols
        if orientation == VERTICAL:
            return self.rows, self.cols + 1
        raise IllegalMove(f"Unknown edge orientation {orientation!r}")

    def edge_owner(self, orientation: Orientation, row: int, col: int) -> int:
        grid = self.horizontal if orientation == HORIZONTAL else self.vertical
        return grid[row][col]

    def check_edge(self, orientation: Orientation, row: int, col: int) -> None:
        height, width = self.edge_shape(orientation)
        if not (0 <= row < height and 0 <= col < width):
            raise IllegalMove(f"Edge {orientation}({row}, {col}) is off the board")
        if self.edge_owner(orientation, row, col):
            raise IllegalMove(f"Edge {orientation}({row}, {col}) is already drawn")

    def sides(self, row: int, col: int) -> int:
        return sum(
            1
            for owner in (
                self.horizontal[row][col],
                self.horizontal[row + 1][col],
                self.vertical[row][col],
                self.vertical[row][col + 1],
            )
            if owner
        )

    def adjacent_boxes(
        self, orientation: Orientation, row: int, col: int
    ) -> List[Tuple[int, int]]:
        """Boxes an edge can close: two for interior edges, one on the boundary."""

        out: List[Tuple[int, int]] = []
        if orientation == HORIZONTAL:
            if row > 0:
                out.append((row - 1, col))
            if row < self.rows:
                out.append((row, col))
        else:
            if col > 0:
                out.append((row, col - 1))
            if col < self.cols:
                out.append((row, col))
        return out

    def apply_edge(
        self, orientation: Orientation, row: int, col: int, player: int
    ) -> Tuple["DotsBoard", List[Tuple[int, int]]]:
        """Draw an edge for ``player`` and claim any box it completes.

        Returns the new board and the boxes claimed by this edge (0, 1 or 2).
        """

        self.check_edge(orientation, row, col)
        if player < 1:
            raise IllegalMove(f"Invalid player id {player}")

        if orientation == HORIZONTAL:
            board = replace(self, horizontal=_with(self.horizontal, row, col, player))
        else:
            board = replace(self, vertical=_with(self.vertical, row, col, player))

        boxes = board.boxes
        claimed: List[Tuple[int, int]] = []
        for r, c in board.adjacent_boxes(orientation, row, col):
            # A box is claimed once; an already owned box is never reassigned
            if boxes[r][c] == 0 and board.sides(r, c) == 4:
                boxes = _with(boxes, r, c, player)
                claimed.append((r, c))
        return replace(board, boxes=boxes), claimed

    def open_edges(self) -> List[Edge]:
        edges: List[Edge] = []
        for r, line in enumerate(self.horizontal):
            for c, owner in enumerate(line):
                if not owner:
                    edges.append(Edge(HORIZONTAL, r, c))
        for r, line in enumerate(self.vertical):
            for c, owner in enumerate(line):
                if not owner:
                    edges.append(Edge(VERTICAL, r, c))
        return edges

    def claimed_count(self) -> int:
        return sum(1 for line in self.boxes for owner in line if owner)


# ---------- Game ----------


@dataclass(frozen=True)
class DotsGame:
    config: DotsConfig
    board: DotsBoard
    scores: Tuple[int, ...]
    current: int = 1
    version: int = 0

    @property
    def total_boxes(self) -> int:
        return self.config.rows * self.config.cols

    @property
    def claimed(self) -> int:
        return sum(self.scores)

    @property
    def game_over(self) -> bool:
        return self.claimed == self.total_boxes

    @property
    def winners(self) -> List[int]:
        """Players holding the top score once the board is full; several on a tie."""

        if not self.game_over:
            return []
        best = max(self.scores)
        return [i + 1 for i, s in enumerate(self.scores) if s == best]

    @property
    def computer_to_move(self) -> bool:
        return self.config.opponent and self.current == COMPUTER and not self.game_over


def new_game(config: Optional[DotsConfig] = None) -> DotsGame:
    config = config or DotsConfig()
    return DotsGame(
        config=config,
        board=DotsBoard.empty(config.rows, config.cols),
        scores=(0,) * config.players,
    )


def next_player(current: int, players: int) -> int:
    return 1 if current == players else current + 1


def legal_moves(game: DotsGame) -> List[Edge]:
    if game.game_over:
        return []
    return game.board.open_edges()


def _is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate(game: DotsGame, move: Tuple[str, int, int], player: Optional[int]) -> Edge:
    if game.game_over:
        raise IllegalMove("Game already finished")
    if player is not None and player != game.current:
        raise IllegalMove(f"It is player {game.current}'s turn, not player {player}'s")
    try:
        edge = Edge(*move)
    except TypeError as exc:
        raise IllegalMove(f"Malformed edge {move!r}") from exc
    if not all(_is_index(v) for v in (edge.row, edge.col)):
        raise IllegalMove(f"Edge indices must be integers, got {move!r}")
    game.board.check_edge(*edge)
    return edge


def is_legal_move(
    game: DotsGame, move: Tuple[str, int, int], player: Optional[int] = None
) -> bool:
    try:
        _validate(game, move, player)
    except IllegalMove:
        return False
    return True


def apply_move(
    game: DotsGame, move: Tuple[str, int, int], player: Optional[int] = None
) -> MoveResult[DotsGame]:
    """Draw ``move`` for the player to move; a player who closes a box moves again."""

    edge = _validate(game, move, player)
    mover = game.current
    board, claimed = game.board.apply_edge(edge.orientation, edge.row, edge.col, mover)

    scores = list(game.scores)
    scores[mover - 1] += len(claimed)

    events: List[Event] = [
        {"type": "edge", "orientation": edge.orientation, "row": edge.row, "col": edge.col, "player": mover}
    ]
    events.extend({"type": "box", "row": r, "col": c, "player": mover} for r, c in claimed)

    following = mover if claimed else next_player(mover, game.config.players)
    state = replace(
        game,
        board=board,
        scores=tuple(scores),
        current=following,
        version=game.version + 1,
    )
    if state.game_over:
        events.append({"type": "game_over", "winners": state.winners, "scores": list(state.scores)})
    else:
        events.append({"type": "turn", "player": following})
    return MoveResult(state=state, events=events)
