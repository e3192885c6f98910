import itertools
import math
from types import SimpleNamespace

import pytest

from scoreline.utils.scoring import (
    EXACT_SCORE_AWARDS,
    Outcome,
    calculate_points,
    classify_outcome,
    is_valid_goal_count,
)


def predicted(home, away, joker=False):
    return SimpleNamespace(predicted_home_goals=home, predicted_away_goals=away, is_joker=joker)


def result(home, away):
    return SimpleNamespace(home_score=home, away_score=away)


def test_exact_score_is_worth_three():
    assert calculate_points(predicted(2, 1), result(2, 1)) == 3
    assert calculate_points(predicted(0, 0), result(0, 0)) == 3


def test_correct_outcome_is_worth_one():
    assert calculate_points(predicted(2, 1), result(3, 0)) == 1
    assert calculate_points(predicted(1, 1), result(2, 2)) == 1
    assert calculate_points(predicted(0, 2), result(1, 4)) == 1


def test_wrong_outcome_is_worth_nothing():
    assert calculate_points(predicted(1, 1), result(2, 0)) == 0
    assert calculate_points(predicted(3, 0), result(0, 1)) == 0


def test_joker_doubles_points():
    assert calculate_points(predicted(2, 1, joker=True), result(2, 1)) == 6
    assert calculate_points(predicted(2, 1, joker=True), result(1, 0)) == 2
    assert calculate_points(predicted(1, 1, joker=True), result(2, 0)) == 0


@pytest.mark.parametrize(
    'bad',
    [None, -1, '2', 1.0, True, math.nan],
)
def test_invalid_goal_counts_score_zero(bad):
    assert calculate_points(predicted(bad, 1), result(2, 1)) == 0
    assert calculate_points(predicted(2, 1, joker=True), result(2, bad)) == 0


def test_classify_outcome():
    assert classify_outcome(2, 0) == Outcome.HOME_WIN
    assert classify_outcome(1, 1) == Outcome.DRAW
    assert classify_outcome(0, 3) == Outcome.AWAY_WIN


def test_is_valid_goal_count():
    assert is_valid_goal_count(0)
    assert is_valid_goal_count(7)
    assert not is_valid_goal_count(-1)
    assert not is_valid_goal_count(False)
    assert not is_valid_goal_count(2.0)
    assert not is_valid_goal_count('3')
    assert not is_valid_goal_count(None)


def sign(value):
    return (value > 0) - (value < 0)


@pytest.mark.parametrize('joker', [False, True])
def test_points_over_every_small_scoreline(joker):
    for ph, pa, ah, aa in itertools.product(range(5), repeat=4):
        exact = (ph, pa) == (ah, aa)
        if exact:
            expected = 3
        elif sign(ph - pa) == sign(ah - aa):
            expected = 1
        else:
            expected = 0
        if joker:
            expected *= 2

        points = calculate_points(predicted(ph, pa, joker), result(ah, aa))

        assert points == expected, (ph, pa, ah, aa, joker)
        # Standings count exact scores by these point values
        assert (points in EXACT_SCORE_AWARDS) == exact
