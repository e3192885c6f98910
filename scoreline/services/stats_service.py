"""
Player statistics and league highlights built on top of the standings
"""

from sqlalchemy import case, func

from scoreline.exceptions import NotFound
from scoreline.models import Prediction, Round, RoundStatus, User
from scoreline.services.standings_service import OVERALL, calculate_standings
from scoreline.utils.scoring import EXACT_SCORE_AWARDS


def get_user_stats(session, user_id):
    """Get a player's statistics over completed rounds

    Args:
        session: SQLAlchemy session
        user_id: User ID

    Returns:
        dict with totals, current overall rank, best round and per-round history
    """
    user = session.get(User, user_id)
    if user is None:
        raise NotFound("User", user_id)

    rows = (
        session.query(
            Round,
            func.coalesce(func.sum(Prediction.points_awarded), 0),
            func.count(Prediction.id),
            func.sum(case((Prediction.points_awarded > 0, 1), else_=0)),
            func.sum(case((Prediction.points_awarded.in_(EXACT_SCORE_AWARDS), 1), else_=0)),
        )
        .join(Prediction, Prediction.round_id == Round.id)
        .filter(Prediction.user_id == user_id, Round.status == RoundStatus.COMPLETED)
        .group_by(Round.id)
        .order_by(Round.deadline, Round.id)
        .all()
    )

    history = [
        {
            "round_id": round_obj.id,
            "name": round_obj.name,
            "points": int(points or 0),
            "predictions_made": made,
            "correct_outcomes": int(correct or 0),
            "exact_scores": int(exact or 0),
        }
        for round_obj, points, made, correct, exact in rows
    ]

    total_points = sum(r["points"] for r in history)
    predictions_made = sum(r["predictions_made"] for r in history)
    correct_outcomes = sum(r["correct_outcomes"] for r in history)

    best_round = None
    if history:
        # max keeps the earliest round on ties
        best = max(history, key=lambda r: r["points"])
        best_round = {"round_id": best["round_id"], "name": best["name"], "points": best["points"]}

    # Admins are not ranked
    rank = None
    if user.is_player:
        overall = calculate_standings(session, OVERALL)
        rank = next((e["rank"] for e in overall if e["user_id"] == user_id), None)

    return {
        "user": user.to_dict(),
        "rank": rank,
        "total_points": total_points,
        "rounds_played": len(history),
        "predictions_made": predictions_made,
        "correct_outcomes": correct_outcomes,
        "exact_scores": sum(r["exact_scores"] for r in history),
        "accuracy": round(correct_outcomes / predictions_made * 100, 1) if predictions_made else None,
        "average_points_per_round": round(total_points / len(history), 1) if history else None,
        "best_round": best_round,
        "history": history,
    }


def get_highlights(session, limit=3):
    """Overall leaders plus the top scorers of the latest completed round"""
    leaders = calculate_standings(session, OVERALL)[:limit]

    latest = Round.latest_completed(session)
    latest_round = None
    if latest is not None:
        round_standings = calculate_standings(session, latest.id)
        latest_round = {
            "round": latest.to_dict(),
            "top_scorers": [
                entry for entry in round_standings
                if entry["rank"] == 1 and entry["total_points"] > 0
            ],
        }

    return {"leaders": leaders, "latest_round": latest_round}
