"""
Scoring rules for Scoreline

Converts a single prediction plus the actual result into points. Pure
functions only; aggregation lives in scoreline/services/standings_service.py.

    exact score        3
    correct outcome    1
    anything else      0
    joker              doubles the above
"""

import enum

EXACT_SCORE_POINTS = 3
CORRECT_OUTCOME_POINTS = 1
JOKER_MULTIPLIER = 2

# Point values only an exact score can produce
EXACT_SCORE_AWARDS = (EXACT_SCORE_POINTS, EXACT_SCORE_POINTS * JOKER_MULTIPLIER)


class Outcome(enum.Enum):
    HOME_WIN = "HOME_WIN"
    DRAW = "DRAW"
    AWAY_WIN = "AWAY_WIN"


def is_valid_goal_count(value):
    """True for a non-negative int (bools are not goal counts)"""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def classify_outcome(home_goals, away_goals):
    """Classify a scoreline as HOME_WIN, DRAW or AWAY_WIN"""
    if home_goals > away_goals:
        return Outcome.HOME_WIN
    if home_goals < away_goals:
        return Outcome.AWAY_WIN
    return Outcome.DRAW


def calculate_points(prediction, actual_result):
    """
    Calculate points for a single prediction.

    Args:
        prediction: object with predicted_home_goals, predicted_away_goals
            and is_joker (a Prediction row)
        actual_result: object with home_score and away_score (a Fixture row)

    Returns:
        int: 0, 1 or 3, doubled for a joker. Any goal count that is not a
        non-negative integer yields 0; callers check is_valid_goal_count to
        log the anomaly.
    """
    goals = (
        prediction.predicted_home_goals,
        prediction.predicted_away_goals,
        actual_result.home_score,
        actual_result.away_score,
    )
    if not all(is_valid_goal_count(value) for value in goals):
        return 0

    predicted_home, predicted_away, actual_home, actual_away = goals

    if predicted_home == actual_home and predicted_away == actual_away:
        base = EXACT_SCORE_POINTS
    elif classify_outcome(predicted_home, predicted_away) == classify_outcome(actual_home, actual_away):
        base = CORRECT_OUTCOME_POINTS
    else:
        base = 0

    return base * JOKER_MULTIPLIER if prediction.is_joker else base
