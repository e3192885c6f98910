"""
Round lifecycle: SETUP -> OPEN -> CLOSED -> COMPLETED

No skips and no backward moves. COMPLETED is terminal and is only reached
through scoring_service.score_round, never through transition_round.
Every change locks the round row and commits on success.
"""

import logging

from scoreline.exceptions import InvalidState, NotFound, ScorelineError
from scoreline.models import Round, RoundStatus
from scoreline.utils.locks import with_round_lock

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    RoundStatus.SETUP: RoundStatus.OPEN,
    RoundStatus.OPEN: RoundStatus.CLOSED,
}


def parse_status(value):
    """Coerce a status name into RoundStatus"""
    if isinstance(value, RoundStatus):
        return value
    try:
        return RoundStatus(str(value).upper())
    except ValueError:
        raise ScorelineError(f"Unknown round status: {value}")


def _get_locked_round(session, round_id):
    round_obj = with_round_lock(session, round_id).first()
    if round_obj is None:
        raise NotFound("Round", round_id)
    return round_obj


def create_round(session, name, deadline=None):
    """Create a round in SETUP"""
    if not name or not name.strip():
        raise ScorelineError("Round name cannot be empty")

    round_obj = Round(name=name.strip(), deadline=deadline, status=RoundStatus.SETUP)
    session.add(round_obj)
    session.commit()
    logger.info(f"Created round {round_obj.id} '{round_obj.name}'")
    return round_obj


def transition_round(session, round_id, target):
    """
    Move a round one step forward in its lifecycle.

    Raises:
        NotFound: the round does not exist
        InvalidState: the move skips a state, goes backwards, leaves
            COMPLETED, or targets COMPLETED (scoring owns that step)
    """
    target = parse_status(target)

    try:
        round_obj = _get_locked_round(session, round_id)
        current = round_obj.status

        if target == RoundStatus.COMPLETED:
            raise InvalidState(
                f"Round {round_id} can only be completed by scoring it"
            )
        if current == RoundStatus.COMPLETED:
            raise InvalidState(f"Round {round_id} is already completed")
        if ALLOWED_TRANSITIONS.get(current) != target:
            raise InvalidState(
                f"Cannot move round {round_id} from {current.value} to {target.value}"
            )
        if target == RoundStatus.OPEN and round_obj.deadline is None:
            raise InvalidState(f"Round {round_id} needs a deadline before it can open")

        round_obj.status = target
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Round {round_id} moved from {current.value} to {target.value}")
    return round_obj


def open_round(session, round_id):
    return transition_round(session, round_id, RoundStatus.OPEN)


def close_round(session, round_id):
    """Close a round; its predictions are frozen from here on"""
    return transition_round(session, round_id, RoundStatus.CLOSED)


def update_round_details(session, round_id, name=None, deadline=None):
    """
    Rename or reschedule a round.

    The deadline fixes a round's place in the schedule, so it cannot change
    once the round is CLOSED or COMPLETED.
    """
    try:
        round_obj = _get_locked_round(session, round_id)

        if name is not None:
            if not name.strip():
                raise ScorelineError("Round name cannot be empty")
            round_obj.name = name.strip()

        if deadline is not None and deadline != round_obj.deadline:
            if round_obj.status in (RoundStatus.CLOSED, RoundStatus.COMPLETED):
                raise InvalidState(
                    f"Deadline of round {round_id} cannot change once it is "
                    f"{round_obj.status.value}"
                )
            round_obj.deadline = deadline

        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Updated round {round_id}")
    return round_obj


def delete_round(session, round_id):
    """Delete a round and its fixtures; refused once it has predictions"""
    try:
        round_obj = _get_locked_round(session, round_id)

        prediction_count = round_obj.predictions.count()
        if prediction_count:
            raise InvalidState(
                f"Round {round_id} has {prediction_count} predictions and cannot be deleted"
            )

        session.delete(round_obj)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Deleted round {round_id}")
