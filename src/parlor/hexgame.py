"""Hex rules: stone placement and edge-to-edge connection search."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace
from typing import Iterator, List, NamedTuple, Optional, Set, Tuple

from .engine import Event, MoveResult
from .errors import IllegalMove, InvalidConfiguration

EMPTY = 0
# Player 1 joins the top row to the bottom row, player 2 the left column to the right
TOP_BOTTOM = 1
LEFT_RIGHT = 2
PLAYERS: Tuple[int, ...] = (TOP_BOTTOM, LEFT_RIGHT)

MIN_SIZE = 2
MAX_SIZE = 11

NEIGHBOURS: Tuple[Tuple[int, int], ...] = (
    (-1, 0),
    (-1, 1),
    (0, 1),
    (1, 0),
    (1, -1),
    (0, -1),
)


class Cell(NamedTuple):
    row: int
    col: int


@dataclass(frozen=True)
class HexConfig:
    size: int = 11

    def __post_init__(self) -> None:
        if not MIN_SIZE <= self.size <= MAX_SIZE:
            raise InvalidConfiguration(
                f"Unsupported Hex board size {self.size}; expected {MIN_SIZE}..{MAX_SIZE}"
            )


# ---------- Board ----------


@dataclass(frozen=True)
class HexBoard:
    size: int
    cells: Tuple[Tuple[int, ...], ...]

    @classmethod
    def empty(cls, size: int) -> "HexBoard":
        return cls(size=size, cells=tuple((EMPTY,) * size for _ in range(size)))

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def neighbours(self, row: int, col: int) -> Iterator[Tuple[int, int]]:
        for dr, dc in NEIGHBOURS:
            r, c = row + dr, col + dc
            if self.in_bounds(r, c):
                yield r, c

    def check_cell(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise IllegalMove(f"Cell ({row}, {col}) is off the board")
        if self.cells[row][col] != EMPTY:
            raise IllegalMove(f"Cell ({row}, {col}) is already occupied")

    def apply_cell(self, row: int, col: int, player: int) -> "HexBoard":
        self.check_cell(row, col)
        if player not in PLAYERS:
            raise IllegalMove(f"Invalid player id {player}")
        line = self.cells[row]
        updated = line[:col] + (player,) + line[col + 1 :]
        return replace(self, cells=self.cells[:row] + (updated,) + self.cells[row + 1 :])

    def empty_cells(self) -> List[Cell]:
        return [
            Cell(r, c)
            for r in range(self.size)
            for c in range(self.size)
            if self.cells[r][c] == EMPTY
        ]

    def is_full(self) -> bool:
        return all(v != EMPTY for line in self.cells for v in line)


def connects(board: HexBoard, player: int) -> bool:
    """Breadth-first search from the player's start edge to the opposite edge."""

    n = board.size
    if player == TOP_BOTTOM:
        start = [(0, c) for c in range(n)]

        def on_goal(r: int, c: int) -> bool:
            return r == n - 1

    else:
        start = [(r, 0) for r in range(n)]

        def on_goal(r: int, c: int) -> bool:
            return c == n - 1

    seen: Set[Tuple[int, int]] = set()
    queue: deque = deque()
    for r, c in start:
        if board.cells[r][c] == player:
            seen.add((r, c))
            queue.append((r, c))

    while queue:
        r, c = queue.popleft()
        if on_goal(r, c):
            return True
        for nr, nc in board.neighbours(r, c):
            if (nr, nc) not in seen and board.cells[nr][nc] == player:
                seen.add((nr, nc))
                queue.append((nr, nc))
    return False


# ---------- Game ----------


@dataclass(frozen=True)
class HexGame:
    config: HexConfig
    board: HexBoard
    current: int = TOP_BOTTOM
    winner: int = EMPTY
    last_move: Optional[Cell] = None
    version: int = 0

    @property
    def game_over(self) -> bool:
        return self.winner != EMPTY

    @property
    def moves_played(self) -> int:
        return sum(1 for line in self.board.cells for v in line if v != EMPTY)


def new_game(config: Optional[HexConfig] = None) -> HexGame:
    config = config or HexConfig()
    return HexGame(config=config, board=HexBoard.empty(config.size))


def other(player: int) -> int:
    return LEFT_RIGHT if player == TOP_BOTTOM else TOP_BOTTOM


def legal_moves(game: HexGame) -> List[Cell]:
    if game.game_over:
        return []
    return game.board.empty_cells()


def _is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate(game: HexGame, move: Tuple[int, int], player: Optional[int]) -> Cell:
    if game.game_over:
        raise IllegalMove("Game already finished")
    if player is not None and player != game.current:
        raise IllegalMove(f"It is player {game.current}'s turn, not player {player}'s")
    try:
        cell = Cell(*move)
    except TypeError as exc:
        raise IllegalMove(f"Malformed cell {move!r}") from exc
    if not all(_is_index(v) for v in cell):
        raise IllegalMove(f"Cell indices must be integers, got {move!r}")
    game.board.check_cell(cell.row, cell.col)
    return cell


def is_legal_move(
    game: HexGame, move: Tuple[int, int], player: Optional[int] = None
) -> bool:
    try:
        _validate(game, move, player)
    except IllegalMove:
        return False
    return True


def apply_move(
    game: HexGame, move: Tuple[int, int], player: Optional[int] = None
) -> MoveResult[HexGame]:
    cell = _validate(game, move, player)
    mover = game.current
    board = game.board.apply_cell(cell.row, cell.col, mover)

    events: List[Event] = [{"type": "stone", "row": cell.row, "col": cell.col, "player": mover}]
    # Only the mover can have completed a chain with this stone
    if connects(board, mover):
        state = replace(
            game, board=board, winner=mover, last_move=cell, version=game.version + 1
        )
        events.append({"type": "game_over", "winner": mover})
    else:
        following = other(mover)
        state = replace(
            game, board=board, current=following, last_move=cell, version=game.version + 1
        )
        events.append({"type": "turn", "player": following})
    return MoveResult(state=state, events=events)
