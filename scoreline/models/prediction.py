from datetime import datetime, timezone

from scoreline import db


class Prediction(db.Model):
    __tablename__ = "predictions"

    id = db.Column(db.Integer, primary_key=True)

    # Prediction identification
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    fixture_id = db.Column(db.Integer, db.ForeignKey("fixtures.id"), nullable=False)
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)

    # Prediction details
    predicted_home_goals = db.Column(db.Integer, nullable=False)
    predicted_away_goals = db.Column(db.Integer, nullable=False)
    is_joker = db.Column(db.Boolean, nullable=False, default=False)

    # Result (null until the owning round is scored)
    points_awarded = db.Column(db.Integer)

    # Timestamps
    submitted_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_id", "fixture_id", name="unique_user_fixture_prediction"),
        # One joker per user per round
        db.Index(
            "unique_user_round_joker",
            "user_id",
            "round_id",
            unique=True,
            sqlite_where=db.text("is_joker = 1"),
            postgresql_where=db.text("is_joker"),
        ),
        db.Index("idx_prediction_round", "round_id"),
        db.Index("idx_prediction_user", "user_id"),
    )

    def __repr__(self):
        joker = " joker" if self.is_joker else ""
        return (
            f"<Prediction user_id={self.user_id} fixture_id={self.fixture_id} "
            f"{self.predicted_home_goals}-{self.predicted_away_goals}{joker}>"
        )
