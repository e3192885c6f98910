"""
Standings aggregation

Only points from COMPLETED rounds count. Every PLAYER appears in the table,
players without scored predictions on 0. Ranking is competition ranking:
points descending, then name and id for a stable order, and tied players
share the rank of the first of them ([10, 10, 7] -> [1, 1, 3]).
"""

import logging

from sqlalchemy import case, func

from scoreline.exceptions import InvalidState, NotFound
from scoreline.models import Prediction, Round, RoundStatus, User
from scoreline.models.user import ROLE_PLAYER
from scoreline.utils.performance import timer
from scoreline.utils.scoring import EXACT_SCORE_AWARDS

logger = logging.getLogger(__name__)

OVERALL = "overall"


def rank_entries(entries):
    """
    Sort entries and assign competition ranks in place.

    Args:
        entries: dicts with user_id, name and total_points

    Returns:
        list: the same dicts, ordered, each with a "rank" key
    """
    ordered = sorted(entries, key=lambda e: (-e["total_points"], e["name"], e["user_id"]))

    previous_points = None
    rank = 0
    for position, entry in enumerate(ordered, start=1):
        if entry["total_points"] != previous_points:
            rank = position
            previous_points = entry["total_points"]
        entry["rank"] = rank

    return ordered


def _accuracy(correct, made):
    if not made:
        return None
    return round(correct / made * 100, 1)


def _aggregate(session, round_filters, member_filter=None):
    """Build ranked entries from predictions matching round_filters"""
    players = session.query(User).filter(User.role == ROLE_PLAYER)
    if member_filter is not None:
        member_ids = set(member_filter)
        if not member_ids:
            return []
        players = players.filter(User.id.in_(member_ids))

    # Points above 0 mean the outcome was right; EXACT_SCORE_AWARDS only come from exact scores
    totals = (
        session.query(
            Prediction.user_id,
            func.coalesce(func.sum(Prediction.points_awarded), 0),
            func.count(Prediction.id),
            func.sum(case((Prediction.points_awarded > 0, 1), else_=0)),
            func.sum(case((Prediction.points_awarded.in_(EXACT_SCORE_AWARDS), 1), else_=0)),
        )
        .join(Round, Round.id == Prediction.round_id)
        .filter(Round.status == RoundStatus.COMPLETED, *round_filters)
        .group_by(Prediction.user_id)
    )
    by_user = {row[0]: row[1:] for row in totals.all()}

    entries = []
    for user in players.all():
        points, made, correct, exact = by_user.get(user.id, (0, 0, 0, 0))
        entries.append(
            {
                "user_id": user.id,
                "name": user.name,
                "total_points": int(points or 0),
                "predictions_made": made,
                "correct_outcomes": int(correct or 0),
                "exact_scores": int(exact or 0),
                "accuracy": _accuracy(correct or 0, made),
            }
        )

    return rank_entries(entries)


@timer
def calculate_standings(session, scope=OVERALL, member_filter=None):
    """
    Calculate a ranked standings table.

    Args:
        session: SQLAlchemy session
        scope: OVERALL, or the id of a COMPLETED round
        member_filter: optional collection of user ids; empty gives an
            empty table

    Returns:
        list of dicts: user_id, name, total_points, rank, predictions_made,
        correct_outcomes, exact_scores, accuracy

    Raises:
        NotFound: scope names a round that does not exist
        InvalidState: scope names a round that is not COMPLETED
    """
    if scope == OVERALL:
        return _aggregate(session, [], member_filter)

    round_obj = session.get(Round, scope)
    if round_obj is None:
        raise NotFound("Round", scope)
    if not round_obj.is_completed:
        raise InvalidState(
            f"Round {scope} has no standings while {round_obj.status.value}"
        )

    return _aggregate(session, [Prediction.round_id == round_obj.id], member_filter)


def cumulative_totals_through(session, round_obj):
    """Overall standings counting completed rounds up to round_obj in schedule order"""
    return _aggregate(session, [Round.scheduled_before(round_obj, inclusive=True)])
