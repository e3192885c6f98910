"""
Round scoring

score_round turns every prediction of a CLOSED round into points, marks the
round COMPLETED and refreshes the standings snapshots, all in one commit.
Readers see either the unscored CLOSED round or the fully scored COMPLETED
one, never anything in between.
"""

import logging
from dataclasses import dataclass, field

from scoreline.exceptions import DataCorruption, IncompleteData, InvalidState, NotFound
from scoreline.models import Fixture, Prediction, Round, RoundStatus, StandingsSnapshot
from scoreline.utils.locks import with_round_lock
from scoreline.utils.performance import timer
from scoreline.utils.scoring import calculate_points, is_valid_goal_count

logger = logging.getLogger(__name__)


@dataclass
class ScoringReport:
    round_id: int
    predictions_scored: int = 0
    skipped: list = field(default_factory=list)
    corrupt: list = field(default_factory=list)
    snapshot_rounds: list = field(default_factory=list)

    def to_dict(self):
        return {
            "round_id": self.round_id,
            "predictions_scored": self.predictions_scored,
            "skipped": self.skipped,
            "corrupt": self.corrupt,
            "snapshot_rounds": self.snapshot_rounds,
        }


def _check_prediction(prediction, fixture):
    """Raise DataCorruption when either side of the comparison is unusable"""
    values = {
        "predicted_home_goals": prediction.predicted_home_goals,
        "predicted_away_goals": prediction.predicted_away_goals,
        "home_score": fixture.home_score,
        "away_score": fixture.away_score,
    }
    bad = {name: value for name, value in values.items() if not is_valid_goal_count(value)}
    if bad:
        raise DataCorruption(prediction.id, bad)


@timer
def score_round(session, round_id):
    """
    Score every prediction in a round and complete it.

    Args:
        session: SQLAlchemy session; committed on success, rolled back on
            any failure
        round_id: id of a CLOSED round

    Returns:
        ScoringReport

    Raises:
        NotFound: no such round
        InvalidState: the round is not CLOSED (including already COMPLETED)
        IncompleteData: fixtures without a result; carries their ids
    """
    report = ScoringReport(round_id=round_id)

    try:
        # Blocks while another transaction holds the round
        round_obj = with_round_lock(session, round_id).first()
        if round_obj is None:
            raise NotFound("Round", round_id)

        if round_obj.status != RoundStatus.CLOSED:
            raise InvalidState(
                f"Round {round_id} cannot be scored while {round_obj.status.value}"
            )

        fixtures = {
            fixture.id: fixture
            for fixture in session.query(Fixture).filter(Fixture.round_id == round_id).all()
        }
        missing = [fixture_id for fixture_id, fixture in fixtures.items() if not fixture.has_result]
        if missing:
            raise IncompleteData(round_id, missing)

        predictions = (
            session.query(Prediction)
            .filter(Prediction.round_id == round_id)
            .order_by(Prediction.id)
            .all()
        )

        for prediction in predictions:
            fixture = fixtures.get(prediction.fixture_id)
            if fixture is None:
                # Prediction points at a fixture outside this round
                logger.warning(
                    f"Skipping prediction {prediction.id}: fixture {prediction.fixture_id} "
                    f"is not part of round {round_id}"
                )
                report.skipped.append(prediction.id)
                continue

            try:
                _check_prediction(prediction, fixture)
                points = calculate_points(prediction, fixture)
            except DataCorruption as e:
                logger.error(f"{e}; scoring it 0")
                report.corrupt.append(prediction.id)
                points = 0

            prediction.points_awarded = points
            report.predictions_scored += 1

        round_obj.status = RoundStatus.COMPLETED
        session.flush()

        report.snapshot_rounds = StandingsSnapshot.refresh_from(session, round_obj)

        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Scored round {round_id}: {report.predictions_scored} predictions, "
        f"{len(report.skipped)} skipped, {len(report.corrupt)} corrupt"
    )
    return report


def find_scoring_inconsistencies(session):
    """
    Check that points exist exactly for predictions in COMPLETED rounds.

    Returns:
        dict: "scored_outside_completed" holds ids of predictions with points
        in a round that is not COMPLETED (always a fault);
        "unscored_in_completed" holds ids left without points inside a
        COMPLETED round (rows skipped during scoring)
    """
    scored_outside = (
        session.query(Prediction.id)
        .join(Round, Round.id == Prediction.round_id)
        .filter(Round.status != RoundStatus.COMPLETED, Prediction.points_awarded.isnot(None))
        .order_by(Prediction.id)
        .all()
    )
    unscored_inside = (
        session.query(Prediction.id)
        .join(Round, Round.id == Prediction.round_id)
        .filter(Round.status == RoundStatus.COMPLETED, Prediction.points_awarded.is_(None))
        .order_by(Prediction.id)
        .all()
    )
    return {
        "scored_outside_completed": [row.id for row in scored_outside],
        "unscored_in_completed": [row.id for row in unscored_inside],
    }
