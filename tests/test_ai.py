"""Tests for the greedy Dots & Boxes opponent."""

import random

import pytest

from parlor import dots
from parlor.ai import GreedyDotsAI
from parlor.dots import DotsConfig, Edge
from parlor.errors import IllegalMove


def _play(game, *edges):
    for edge in edges:
        game = dots.apply_move(game, edge).state
    return game


def _three_sided_boxes(board):
    return [
        (r, c)
        for r in range(board.rows)
        for c in range(board.cols)
        if board.boxes[r][c] == 0 and board.sides(r, c) == 3
    ]


def test_ai_takes_available_box():
    game = _play(dots.new_game(DotsConfig(rows=2, cols=2)), ("h", 0, 0), ("h", 1, 0), ("v", 0, 0))
    ai = GreedyDotsAI(player=2, rng=random.Random(0))

    assert ai.choose(game) == Edge("v", 0, 1)


@pytest.mark.parametrize("seed", range(10))
def test_ai_avoids_handing_over_boxes(seed):
    game = _play(
        dots.new_game(DotsConfig(rows=3, cols=3)),
        ("h", 0, 0), ("v", 0, 0), ("h", 3, 2), ("v", 2, 3), ("h", 1, 1),
    )
    assert game.current == 2
    assert game.board.sides(0, 0) == 2
    assert _three_sided_boxes(game.board) == []
    ai = GreedyDotsAI(player=2, rng=random.Random(seed))

    move = ai.choose(game)
    after = dots.apply_move(game, move).state
    assert _three_sided_boxes(after.board) == []


def test_ai_falls_back_to_any_edge_when_nothing_is_safe():
    boundary = [
        ("h", 0, 0), ("h", 0, 1), ("h", 2, 0), ("h", 2, 1),
        ("v", 0, 0), ("v", 1, 0), ("v", 0, 2), ("v", 1, 2),
    ]
    game = _play(dots.new_game(DotsConfig(rows=2, cols=2)), *boundary)
    assert game.current == 1
    ai = GreedyDotsAI(player=1, rng=random.Random(4))

    pool = ai.candidates(game)
    assert sorted(pool) == sorted(dots.legal_moves(game))
    assert len(pool) == 4
    assert ai.choose(game) in pool


def test_ai_refuses_to_move_out_of_turn():
    ai = GreedyDotsAI(player=2)
    with pytest.raises(IllegalMove):
        ai.choose(dots.new_game())


def _self_play(seed):
    players = {1: GreedyDotsAI(player=1, rng=random.Random(seed)),
               2: GreedyDotsAI(player=2, rng=random.Random(seed + 1))}
    game = dots.new_game(DotsConfig(rows=3, cols=3))
    log = []
    while not game.game_over:
        move = players[game.current].choose(game)
        log.append(move)
        game = dots.apply_move(game, move).state
    return log, game


def test_seeded_ai_is_reproducible():
    first_log, first = _self_play(21)
    second_log, second = _self_play(21)
    assert first_log == second_log
    assert first.scores == second.scores
    assert sum(first.scores) == 9
