import os
import sys
from datetime import datetime, timedelta

import pytest

# Ensure the project root (containing `config.py` and `scoreline`) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault('SECRET_KEY', 'test-secret')

from scoreline import create_app, db
from scoreline.models import (
    Fixture,
    Group,
    GroupMember,
    Prediction,
    Round,
    RoundStatus,
    User,
)
from scoreline.models.fixture import FIXTURE_FINISHED
from scoreline.models.user import ROLE_ADMIN, ROLE_PLAYER

BASE_DEADLINE = datetime(2026, 8, 1, 12, 0)


@pytest.fixture()
def app():
    application = create_app('testing')
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def session(app):
    return db.session


class Factory:
    """Builds rows directly, bypassing the services under test"""

    def __init__(self, session):
        self.session = session
        self._rounds = 0

    def user(self, name, admin=False, email=None):
        user = User(name=name, email=email, role=ROLE_ADMIN if admin else ROLE_PLAYER)
        self.session.add(user)
        self.session.commit()
        return user

    def round(self, name=None, status=RoundStatus.SETUP, deadline=None, offset_days=None):
        self._rounds += 1
        if deadline is None and offset_days is None:
            offset_days = self._rounds * 7
        if deadline is None:
            deadline = BASE_DEADLINE + timedelta(days=offset_days)
        round_obj = Round(
            name=name or f'Round {self._rounds}',
            status=status,
            deadline=deadline,
        )
        self.session.add(round_obj)
        self.session.commit()
        return round_obj

    def fixture(self, round_obj, home='Home FC', away='Away FC', result=None):
        fixture = Fixture(round_id=round_obj.id, home_team=home, away_team=away)
        if result is not None:
            fixture.home_score, fixture.away_score = result
            fixture.status = FIXTURE_FINISHED
        self.session.add(fixture)
        self.session.commit()
        return fixture

    def prediction(self, user, fixture, home, away, joker=False, points=None, round_obj=None):
        prediction = Prediction(
            user_id=user.id,
            fixture_id=fixture.id,
            round_id=round_obj.id if round_obj is not None else fixture.round_id,
            predicted_home_goals=home,
            predicted_away_goals=away,
            is_joker=joker,
            points_awarded=points,
        )
        self.session.add(prediction)
        self.session.commit()
        return prediction

    def scored_round(self, points_by_user, **kwargs):
        """A COMPLETED round with one prediction per user carrying the given points"""
        round_obj = self.round(status=RoundStatus.COMPLETED, **kwargs)
        fixture = self.fixture(round_obj, result=(1, 0))
        for user, points in points_by_user.items():
            self.prediction(user, fixture, 1, 0, points=points)
        return round_obj

    def group(self, name, members=(), inactive=()):
        group = Group(name=name)
        self.session.add(group)
        self.session.flush()
        for user in members:
            self.session.add(GroupMember(user_id=user.id, group_id=group.id))
        for user in inactive:
            membership = GroupMember(user_id=user.id, group_id=group.id)
            membership.deactivate()
            self.session.add(membership)
        self.session.commit()
        return group


@pytest.fixture()
def make(session):
    return Factory(session)
