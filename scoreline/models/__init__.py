from scoreline import db  # noqa: F401 - imported for model imports

from .fixture import Fixture
from .group import Group
from .group_member import GroupMember
from .prediction import Prediction
from .round import Round, RoundStatus
from .standings_snapshot import StandingsSnapshot
from .user import User

__all__ = [
    "User",
    "Round",
    "RoundStatus",
    "Fixture",
    "Prediction",
    "Group",
    "GroupMember",
    "StandingsSnapshot",
]
