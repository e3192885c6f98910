"""
Rank movement between two standings tables

Positive movement means the player climbed. Players missing from the
previous table get None, never 0.
"""

import logging

from scoreline.models import Round, StandingsSnapshot
from scoreline.services.standings_service import OVERALL, calculate_standings

logger = logging.getLogger(__name__)


def movement(current, previous):
    """
    Diff two rank maps.

    Args:
        current: {user_id: rank} for the table being shown
        previous: {user_id: rank} for the table it is compared with

    Returns:
        dict: {user_id: previous rank - current rank, or None}
    """
    return {
        user_id: (previous[user_id] - rank) if user_id in previous else None
        for user_id, rank in current.items()
    }


def _rank_map(entries):
    return {entry["user_id"]: entry["rank"] for entry in entries}


def _previous_rank_map(session, scope, member_filter):
    """Find the table to compare against; returns (round_id, rank map)"""
    if scope == OVERALL:
        latest = Round.latest_completed(session)
        if latest is None:
            return None, {}
        previous_round = Round.previous_completed(session, latest)
        if previous_round is None:
            return None, {}
        # Cumulative table as it stood before the latest round was added
        return previous_round.id, StandingsSnapshot.get_rank_map(
            session, previous_round.id, member_filter
        )

    round_obj = session.get(Round, scope)
    previous_round = Round.previous_completed(session, round_obj)
    if previous_round is None:
        return None, {}
    previous = calculate_standings(session, previous_round.id, member_filter)
    return previous_round.id, _rank_map(previous)


def standings_with_movement(session, scope=OVERALL, member_filter=None):
    """
    Standings for scope with a "movement" key on every entry.

    Returns:
        dict: scope, previous_round_id (None when there is nothing to
        compare with) and standings
    """
    standings = calculate_standings(session, scope, member_filter)

    previous_round_id, previous = _previous_rank_map(session, scope, member_filter)
    deltas = movement(_rank_map(standings), previous)
    for entry in standings:
        entry["movement"] = deltas[entry["user_id"]]

    logger.debug(
        f"Standings for {scope}: {len(standings)} entries, compared with round {previous_round_id}"
    )
    return {
        "scope": scope,
        "previous_round_id": previous_round_id,
        "standings": standings,
    }
