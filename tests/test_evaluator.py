from __future__ import annotations

import math

import pytest

from game2048 import Evaluator, GameState, HeuristicWeights

_ = None


def _state(first_row, score=0) -> GameState:
    return GameState(grid=[list(first_row), [_] * 4, [_] * 4, [_] * 4], score=score)


def test_empty_cells_and_score_terms():
    terms = Evaluator().breakdown(_state([2, 4, _, _], score=20))
    assert terms["empty"] == 14
    assert terms["score"] == 20
    assert terms["log_score"] == pytest.approx(math.log(20))


def test_log_score_is_zero_without_score():
    assert Evaluator().breakdown(_state([2, _, _, _]))["log_score"] == 0.0


def test_duplication_ignores_spawnable_tiles():
    grid = [
        [8, 8, 4, 4],
        [16, 16, 16, 2],
        [2, 2, _, _],
        [32, _, _, _],
    ]
    assert Evaluator.duplication_penalty(grid) == 8 * 1 + 16 * 2


def test_friendliness_rewards_monotone_row():
    # lone tiles in their column score their full rank on the column pass
    assert Evaluator.friendliness(_state([2, 4, 8, 16]).grid) == 1 + 2 + 3 + 4
    assert Evaluator.friendliness(_state([16, 8, 4, 2]).grid) == 4 + 3 + 2 + 1


def test_friendliness_penalises_slope_reversal():
    # ranks 1, 3, 2: the peak in the middle counts against the board
    assert Evaluator.friendliness(_state([2, 8, 4, _]).grid) == 1 - 3 + 2


def test_friendliness_edge_tile_mirrors_its_neighbour():
    assert Evaluator._line_scores([8, 4, _, _]) == [3, 2, 0, 0]
    assert Evaluator._line_scores([_, 4, _, 8]) == [0, 2, 0, 3]


def test_friendliness_equal_neighbour_inherits_other_slope():
    assert Evaluator._line_scores([4, 4, 8, _]) == [2, 2, 3, 0]
    assert Evaluator._line_scores([8, 4, 4, 8]) == [3, 2, 2, 3]


def test_friendliness_takes_the_smaller_axis():
    grid = [
        [2, 8, 4, _],
        [_, 16, _, _],
        [_, _, _, _],
        [_, _, _, _],
    ]
    # (0, 1) is monotone down its column (+3) but a peak on its row (-3)
    assert Evaluator.friendliness(grid) == 1 + (-3) + 2 + 4


def test_weights_scale_terms():
    state = _state([2, 4, 8, _], score=12)
    only_empty = Evaluator(HeuristicWeights(empty=1, score=0, log_score=0, duplication=0, friendliness=0))
    assert only_empty.evaluate(state) == 13

    only_score = Evaluator(HeuristicWeights(empty=0, score=0.5, log_score=0, duplication=0, friendliness=0))
    assert only_score.evaluate(state) == pytest.approx(6)


def test_duplication_is_subtracted():
    state = _state([16, 16, _, _])
    weights = HeuristicWeights(empty=0, score=0, log_score=0, duplication=1.0, friendliness=0)
    assert Evaluator(weights).evaluate(state) == -16


def test_default_weights_are_named_and_overridable():
    weights = HeuristicWeights()
    assert set(weights.to_dict()) == {"empty", "score", "log_score", "duplication", "friendliness"}
    tuned = HeuristicWeights(friendliness=2.0)
    state = _state([2, 4, 8, 16], score=40)
    assert Evaluator(tuned).evaluate(state) > Evaluator(weights).evaluate(state)
