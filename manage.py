#!/usr/bin/env python3
"""
Scoreline Management CLI

Command-line management for rounds, fixtures, scoring and standings.
"""

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from scoreline import create_app, db
from scoreline.exceptions import ScorelineError
from scoreline.models import Fixture, Group, Prediction, Round, RoundStatus, User
from scoreline.models.user import ROLE_ADMIN, ROLE_PLAYER
from scoreline.services import round_lifecycle
from scoreline.services.fixture_service import add_fixture, enter_result
from scoreline.services.movement_service import standings_with_movement
from scoreline.services.scoring_service import find_scoring_inconsistencies, score_round
from scoreline.services.standings_service import OVERALL
from scoreline.utils.cache_utils import invalidate_cache_pattern
from scoreline.utils.timezone_utils import parse_datetime


def fail(message):
    """Print an error and exit non-zero"""
    click.echo(f"❌ {message}")
    click.get_current_context().exit(1)


@click.group()
def cli():
    """Scoreline Management CLI"""
    pass


# User Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("create")
@click.argument("name")
@click.option("--email", help="Optional unique email address")
@click.option("--admin", is_flag=True, help="Create an admin (not ranked)")
@with_appcontext
def create_user(name, email, admin):
    """Create a user"""
    try:
        new_user = User(name=name, email=email, role=ROLE_ADMIN if admin else ROLE_PLAYER)
        db.session.add(new_user)
        db.session.commit()
        invalidate_cache_pattern("standings*")
        click.echo(f"✅ Created {new_user.role.lower()} {new_user.name} (id {new_user.id})")
    except IntegrityError as e:
        db.session.rollback()
        logging.error(f"User creation failed - integrity error: {e}")
        fail(f"Email {email} is already in use!")


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.name).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        click.echo(f"  {u.id}: {u.name} [{u.role}]{' <' + u.email + '>' if u.email else ''}")


# Round Commands
@cli.group(name="round")
def round_cmd():
    """Round lifecycle commands"""
    pass


@round_cmd.command("create")
@click.argument("name")
@click.option("--deadline", help="Prediction deadline (ISO 8601)")
@with_appcontext
def create_round(name, deadline):
    """Create a round in SETUP"""
    try:
        round_obj = round_lifecycle.create_round(
            db.session, name, parse_datetime(deadline) if deadline else None
        )
        click.echo(f"✅ Created round {round_obj.id} '{round_obj.name}'")
    except ScorelineError as e:
        fail(str(e))


@round_cmd.command("open")
@click.argument("round_id", type=int)
@with_appcontext
def open_round(round_id):
    """Open a round for predictions"""
    try:
        round_lifecycle.open_round(db.session, round_id)
        click.echo(f"✅ Round {round_id} is open")
    except ScorelineError as e:
        fail(str(e))


@round_cmd.command("close")
@click.argument("round_id", type=int)
@with_appcontext
def close_round(round_id):
    """Close a round; predictions are frozen"""
    try:
        round_lifecycle.close_round(db.session, round_id)
        click.echo(f"✅ Round {round_id} is closed")
    except ScorelineError as e:
        fail(str(e))


@round_cmd.command("score")
@click.argument("round_id", type=int)
@with_appcontext
def score(round_id):
    """Score a closed round and complete it"""
    try:
        report = score_round(db.session, round_id)
    except ScorelineError as e:
        fail(str(e))
    except SQLAlchemyError as e:
        logging.error(f"Scoring round {round_id} failed - SQL error: {e}")
        fail(f"Database error scoring round {round_id}: {str(e)}")
    else:
        invalidate_cache_pattern("standings*")
        click.echo(
            f"✅ Scored round {round_id}: {report.predictions_scored} predictions"
        )
        if report.skipped:
            click.echo(f"⚠️  Skipped predictions: {', '.join(map(str, report.skipped))}")
        if report.corrupt:
            click.echo(f"⚠️  Corrupt predictions scored 0: {', '.join(map(str, report.corrupt))}")


@round_cmd.command("delete")
@click.argument("round_id", type=int)
@with_appcontext
def delete_round(round_id):
    """Delete a round without predictions"""
    try:
        round_lifecycle.delete_round(db.session, round_id)
        invalidate_cache_pattern("standings*")
        click.echo(f"✅ Deleted round {round_id}")
    except ScorelineError as e:
        fail(str(e))


@round_cmd.command("list")
@with_appcontext
def list_rounds():
    """List all rounds in schedule order"""
    rounds = Round.query.order_by(Round.deadline, Round.id).all()
    if not rounds:
        click.echo("No rounds found.")
        return

    click.echo("Rounds:")
    for r in rounds:
        deadline = r.deadline.strftime("%Y-%m-%d %H:%M") if r.deadline else "no deadline"
        click.echo(
            f"  {r.id}: {r.name} [{r.status.value}] - {deadline} - "
            f"{r.fixtures.count()} fixtures, {r.predictions.count()} predictions"
        )


# Fixture Commands
@cli.group()
def fixture():
    """Fixture commands"""
    pass


@fixture.command("add")
@click.argument("round_id", type=int)
@click.argument("home_team")
@click.argument("away_team")
@click.option("--match-time", help="Kick-off time (ISO 8601)")
@with_appcontext
def add(round_id, home_team, away_team, match_time):
    """Add a fixture to a round"""
    try:
        new_fixture = add_fixture(
            db.session,
            round_id,
            home_team,
            away_team,
            parse_datetime(match_time, "match_time") if match_time else None,
        )
        click.echo(f"✅ Added fixture {new_fixture.id}: {home_team} v {away_team}")
    except ScorelineError as e:
        fail(str(e))


@fixture.command("result")
@click.argument("fixture_id", type=int)
@click.argument("home_score", type=int)
@click.argument("away_score", type=int)
@with_appcontext
def result(fixture_id, home_score, away_score):
    """Enter a fixture's final score"""
    try:
        updated = enter_result(db.session, fixture_id, home_score, away_score)
        click.echo(
            f"✅ {updated.home_team} {updated.home_score}-{updated.away_score} {updated.away_team}"
        )
    except ScorelineError as e:
        fail(str(e))


# Standings Commands
@cli.group()
def standings():
    """Standings commands"""
    pass


def format_movement(value):
    if value is None:
        return "new"
    if value > 0:
        return f"▲{value}"
    if value < 0:
        return f"▼{-value}"
    return "="


@standings.command("show")
@click.option("--round-id", type=int, help="Show a single completed round")
@click.option("--group-id", type=int, help="Only members of this group")
@with_appcontext
def show(round_id, group_id):
    """Show standings with rank movement"""
    member_filter = None
    if group_id is not None:
        group = db.session.get(Group, group_id)
        if group is None:
            fail(f"Group {group_id} not found!")
        member_filter = group.get_member_ids()

    try:
        table = standings_with_movement(
            db.session, round_id if round_id is not None else OVERALL, member_filter
        )
    except ScorelineError as e:
        fail(str(e))

    if not table["standings"]:
        click.echo("No players to rank.")
        return

    title = f"Round {round_id}" if round_id is not None else "Overall"
    click.echo(f"🏆 {title} standings")
    click.echo("=" * 40)
    for entry in table["standings"]:
        click.echo(
            f"  {entry['rank']:>3}. {entry['name']:<20} {entry['total_points']:>4} pts  "
            f"{format_movement(entry['movement'])}"
        )


# Maintenance Commands
@cli.command()
@with_appcontext
def verify():
    """Check that points exist only for predictions in completed rounds"""
    problems = find_scoring_inconsistencies(db.session)

    if problems["unscored_in_completed"]:
        click.echo(
            "⚠️  Predictions skipped during scoring: "
            + ", ".join(map(str, problems["unscored_in_completed"]))
        )

    if problems["scored_outside_completed"]:
        fail(
            "Predictions with points outside completed rounds: "
            + ", ".join(map(str, problems["scored_outside_completed"]))
        )

    click.echo("✅ Scoring data is consistent")


@cli.group(name="db")
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    db.create_all()
    click.echo("✅ Database tables created successfully!")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    db.drop_all()
    db.create_all()
    click.echo("✅ Database reset successfully!")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("⚽ Scoreline Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    player_count = User.query.filter_by(role=ROLE_PLAYER).count()
    click.echo(f"👥 Players: {player_count}")

    group_count = Group.query.filter_by(is_active=True).count()
    click.echo(f"🏆 Active Groups: {group_count}")

    for round_status in RoundStatus:
        count = Round.query.filter(Round.status == round_status).count()
        click.echo(f"📅 {round_status.value.title()} rounds: {count}")

    click.echo(f"🎯 Fixtures: {Fixture.query.count()}")
    click.echo(f"📝 Predictions: {Prediction.query.count()}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
