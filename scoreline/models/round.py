import enum
from datetime import datetime, timezone

from scoreline import db


class RoundStatus(str, enum.Enum):
    SETUP = "SETUP"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    COMPLETED = "COMPLETED"


class Round(db.Model):
    __tablename__ = "rounds"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)

    # Lifecycle
    status = db.Column(
        db.Enum(RoundStatus, native_enum=False, length=20),
        nullable=False,
        default=RoundStatus.SETUP,
    )
    deadline = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    fixtures = db.relationship(
        "Fixture", backref="round", lazy="dynamic", cascade="all, delete-orphan"
    )
    predictions = db.relationship("Prediction", backref="round", lazy="dynamic")

    __table_args__ = (
        db.Index("idx_round_status", "status"),
        db.Index("idx_round_schedule", "deadline", "id"),
    )

    def __repr__(self):
        return f"<Round {self.id} {self.name} [{self.status.value}]>"

    @property
    def is_completed(self):
        return self.status == RoundStatus.COMPLETED

    # Schedule order: deadline ascending, id ascending as tie-break

    @staticmethod
    def scheduled_before(round_obj, inclusive=False):
        """SQL clause for rounds scheduled before (or up to) round_obj"""
        if inclusive:
            same_deadline = Round.id <= round_obj.id
        else:
            same_deadline = Round.id < round_obj.id
        return db.or_(
            Round.deadline < round_obj.deadline,
            db.and_(Round.deadline == round_obj.deadline, same_deadline),
        )

    @staticmethod
    def scheduled_after(round_obj):
        """SQL clause for rounds scheduled strictly after round_obj"""
        return db.or_(
            Round.deadline > round_obj.deadline,
            db.and_(Round.deadline == round_obj.deadline, Round.id > round_obj.id),
        )

    @staticmethod
    def latest_completed(session):
        """Most recently scheduled completed round, or None"""
        return (
            session.query(Round)
            .filter(Round.status == RoundStatus.COMPLETED)
            .order_by(Round.deadline.desc(), Round.id.desc())
            .first()
        )

    @staticmethod
    def previous_completed(session, round_obj):
        """Most recent completed round scheduled strictly before round_obj"""
        if round_obj.deadline is None:
            return None
        return (
            session.query(Round)
            .filter(
                Round.status == RoundStatus.COMPLETED,
                Round.scheduled_before(round_obj),
            )
            .order_by(Round.deadline.desc(), Round.id.desc())
            .first()
        )

    @staticmethod
    def completed_after(session, round_obj):
        """Completed rounds scheduled after round_obj, in schedule order"""
        if round_obj.deadline is None:
            return []
        return (
            session.query(Round)
            .filter(
                Round.status == RoundStatus.COMPLETED,
                Round.scheduled_after(round_obj),
            )
            .order_by(Round.deadline.asc(), Round.id.asc())
            .all()
        )

    def to_dict(self):
        """Convert round to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "deadline": self.deadline.isoformat() if self.deadline else None,
        }
