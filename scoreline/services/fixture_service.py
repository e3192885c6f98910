"""
Fixture setup and result entry

Result entry is where raw goal counts enter the system, so it is the one
place they are validated. Scoring trusts what is stored here and only logs
rows that turn out to be corrupt anyway.
"""

import logging

from scoreline.exceptions import InvalidState, NotFound, ScorelineError
from scoreline.models import Fixture, RoundStatus
from scoreline.utils.locks import with_round_lock
from scoreline.utils.scoring import is_valid_goal_count

logger = logging.getLogger(__name__)


def parse_goal_count(value, field):
    """Accept non-negative ints only; strings, floats and bools are rejected"""
    if not is_valid_goal_count(value):
        raise ScorelineError(f"{field} must be a non-negative integer, got {value!r}")
    return value


def add_fixture(session, round_id, home_team, away_team, match_time=None):
    """Add a fixture to a round that has not closed yet"""
    try:
        round_obj = with_round_lock(session, round_id).first()
        if round_obj is None:
            raise NotFound("Round", round_id)
        if round_obj.status not in (RoundStatus.SETUP, RoundStatus.OPEN):
            raise InvalidState(
                f"Fixtures cannot be added to round {round_id} while it is "
                f"{round_obj.status.value}"
            )

        fixture = Fixture(
            round_id=round_id,
            home_team=home_team,
            away_team=away_team,
            match_time=match_time,
        )
        session.add(fixture)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Added fixture {fixture.id} {home_team} v {away_team} to round {round_id}")
    return fixture


def enter_result(session, fixture_id, home_score, away_score):
    """
    Record or correct the final score of a fixture.

    Only allowed while the owning round is CLOSED: predictions are frozen
    and points have not been written yet.
    """
    home_score = parse_goal_count(home_score, "home_score")
    away_score = parse_goal_count(away_score, "away_score")

    fixture = session.get(Fixture, fixture_id)
    if fixture is None:
        raise NotFound("Fixture", fixture_id)

    try:
        round_obj = with_round_lock(session, fixture.round_id).first()
        if round_obj.status != RoundStatus.CLOSED:
            raise InvalidState(
                f"Results can only be entered while round {round_obj.id} is CLOSED "
                f"(currently {round_obj.status.value})"
            )

        fixture.record_result(home_score, away_score)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Result for fixture {fixture_id}: {home_score}-{away_score}")
    return fixture
