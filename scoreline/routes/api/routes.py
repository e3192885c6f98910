from flask import current_app, jsonify, request

from scoreline import db, limiter
from scoreline.exceptions import NotFound, ScorelineError
from scoreline.models import Group
from scoreline.routes.api import bp
from scoreline.services import round_lifecycle
from scoreline.services.fixture_service import enter_result
from scoreline.services.movement_service import standings_with_movement
from scoreline.services.scoring_service import score_round
from scoreline.services.standings_service import OVERALL
from scoreline.services.stats_service import get_highlights, get_user_stats
from scoreline.utils.cache_utils import cached_route, invalidate_cache_pattern
from scoreline.utils.timezone_utils import parse_datetime


def get_json_body():
    """Request body as a dict; anything else is a bad request"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ScorelineError("Request body must be a JSON object")
    return data


def get_int_arg(name):
    """Optional positive integer query argument"""
    value = request.args.get(name)
    if value is None or value == "":
        return None
    if not value.isdigit():
        raise ScorelineError(f"{name} must be an integer")
    return int(value)


def scoring_rate_limit():
    return current_app.config.get("SCORING_RATE_LIMIT", "10 per minute")


# Round lifecycle


@bp.route("/rounds/<int:round_id>/status", methods=["POST"])
def change_round_status(round_id):
    """Open or close a round"""
    data = get_json_body()
    status = data.get("status")
    if not status:
        raise ScorelineError("status is required")

    round_obj = round_lifecycle.transition_round(db.session, round_id, status)
    return jsonify(round_obj.to_dict())


@bp.route("/rounds/<int:round_id>", methods=["PATCH"])
def update_round(round_id):
    """Rename or reschedule a round"""
    data = get_json_body()

    deadline = data.get("deadline")
    if deadline is not None:
        deadline = parse_datetime(deadline)

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        raise ScorelineError("name must be a string")

    round_obj = round_lifecycle.update_round_details(
        db.session, round_id, name=name, deadline=deadline
    )
    return jsonify(round_obj.to_dict())


@bp.route("/rounds/<int:round_id>", methods=["DELETE"])
def delete_round(round_id):
    round_lifecycle.delete_round(db.session, round_id)
    invalidate_cache_pattern("standings*")
    return jsonify({"deleted": round_id})


# Results and scoring


@bp.route("/fixtures/<int:fixture_id>/result", methods=["PUT"])
def fixture_result(fixture_id):
    """Enter or correct a fixture's final score"""
    data = get_json_body()
    if "home_score" not in data or "away_score" not in data:
        raise ScorelineError("home_score and away_score are required")

    fixture = enter_result(db.session, fixture_id, data["home_score"], data["away_score"])
    return jsonify(fixture.to_dict())


@bp.route("/rounds/<int:round_id>/score", methods=["POST"])
@limiter.limit(scoring_rate_limit)
def score(round_id):
    """Score a closed round and complete it"""
    report = score_round(db.session, round_id)

    invalidate_cache_pattern("standings*")
    return jsonify(report.to_dict())


# Standings


@bp.route("/standings")
@cached_route(timeout="STANDINGS_CACHE_TIMEOUT", key_prefix="standings")
def standings():
    """Overall or per-round standings with rank movement, optionally for one group"""
    round_id = get_int_arg("round_id")
    group_id = get_int_arg("group_id")

    group = None
    member_filter = None
    if group_id is not None:
        group = db.session.get(Group, group_id)
        if group is None:
            raise NotFound("Group", group_id)
        member_filter = group.get_member_ids()

    scope = round_id if round_id is not None else OVERALL
    result = standings_with_movement(db.session, scope, member_filter)
    result["group_id"] = group_id
    result["group"] = group.to_dict() if group else None

    # Plain dict so the cached value stays serializable
    return result


@bp.route("/users/<int:user_id>/stats")
def user_stats(user_id):
    return jsonify(get_user_stats(db.session, user_id))


@bp.route("/highlights")
@cached_route(timeout="STANDINGS_CACHE_TIMEOUT", key_prefix="standings_highlights")
def highlights():
    """Overall leaders and the latest round's top scorers"""
    limit = get_int_arg("limit")
    return get_highlights(db.session, limit=3 if limit is None else limit)
