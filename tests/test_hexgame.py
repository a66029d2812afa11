"""Unit tests for the Hex rules and connection search."""

import random

import pytest

from parlor import hexgame
from parlor.errors import IllegalMove, InvalidConfiguration
from parlor.hexgame import HexBoard, HexConfig, LEFT_RIGHT, TOP_BOTTOM, connects


def test_corner_has_two_neighbours():
    board = HexBoard.empty(3)
    assert sorted(board.neighbours(0, 0)) == [(0, 1), (1, 0)]
    assert sorted(board.neighbours(1, 1)) == [(0, 1), (0, 2), (1, 0), (1, 2), (2, 0), (2, 1)]


def test_anti_diagonal_is_adjacent_but_main_diagonal_is_not():
    board = HexBoard.empty(2)
    linked = board.apply_cell(1, 0, LEFT_RIGHT).apply_cell(0, 1, LEFT_RIGHT)
    assert connects(linked, LEFT_RIGHT)

    split = board.apply_cell(0, 0, LEFT_RIGHT).apply_cell(1, 1, LEFT_RIGHT)
    assert not connects(split, LEFT_RIGHT)


def test_occupied_and_off_board_cells_rejected():
    game = hexgame.apply_move(hexgame.new_game(HexConfig(size=5)), (2, 2)).state
    for move in [(2, 2), (5, 0), (0, -1), (1,), ("a", 0), (0.5, 1), (True, 0), None]:
        assert not hexgame.is_legal_move(game, move)
        with pytest.raises(IllegalMove):
            hexgame.apply_move(game, move)
    assert game.board.cells[2][2] == TOP_BOTTOM
    assert game.current == LEFT_RIGHT


def test_wrong_mover_rejected():
    game = hexgame.new_game(HexConfig(size=5))
    with pytest.raises(IllegalMove):
        hexgame.apply_move(game, (0, 0), player=LEFT_RIGHT)


@pytest.mark.parametrize("size", [1, 12])
def test_unsupported_size(size):
    with pytest.raises(InvalidConfiguration):
        HexConfig(size=size)


def test_top_bottom_chain_wins_immediately():
    game = hexgame.new_game(HexConfig(size=3))
    for move in [(0, 0), (0, 2), (1, 0), (1, 2)]:
        game = hexgame.apply_move(game, move).state
        assert not game.game_over

    result = hexgame.apply_move(game, (2, 0))
    assert result.state.winner == TOP_BOTTOM
    assert result.state.game_over
    assert result.events[-1] == {"type": "game_over", "winner": TOP_BOTTOM}
    assert hexgame.legal_moves(result.state) == []
    with pytest.raises(IllegalMove):
        hexgame.apply_move(result.state, (2, 2))


def test_left_right_chain_wins():
    game = hexgame.new_game(HexConfig(size=3))
    for move in [(0, 0), (1, 0), (0, 1), (1, 1), (2, 2)]:
        game = hexgame.apply_move(game, move).state
    assert not game.game_over
    game = hexgame.apply_move(game, (1, 2)).state
    assert game.winner == LEFT_RIGHT
    assert game.moves_played == 6


@pytest.mark.parametrize("seed", range(40))
def test_full_board_has_exactly_one_winner(seed):
    rng = random.Random(seed)
    size = rng.randint(2, 11)
    board = HexBoard.empty(size)
    for r in range(size):
        for c in range(size):
            board = board.apply_cell(r, c, rng.choice((TOP_BOTTOM, LEFT_RIGHT)))
    assert board.is_full()
    assert connects(board, TOP_BOTTOM) != connects(board, LEFT_RIGHT)


def test_random_games_always_end_with_a_winner():
    rng = random.Random(11)
    for _ in range(10):
        game = hexgame.new_game(HexConfig(size=7))
        while not game.game_over:
            game = hexgame.apply_move(game, rng.choice(hexgame.legal_moves(game))).state
        assert game.winner in (TOP_BOTTOM, LEFT_RIGHT)
        assert connects(game.board, game.winner)
        assert not connects(game.board, hexgame.other(game.winner))
