from datetime import datetime, timezone

from scoreline import db

FIXTURE_SCHEDULED = "SCHEDULED"
FIXTURE_FINISHED = "FINISHED"


class Fixture(db.Model):
    __tablename__ = "fixtures"

    id = db.Column(db.Integer, primary_key=True)
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)

    # Teams
    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)

    # Game timing
    match_time = db.Column(db.DateTime)

    # Scores (null until a result is entered)
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)

    # Result-entry status
    status = db.Column(db.String(20), nullable=False, default=FIXTURE_SCHEDULED)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    predictions = db.relationship(
        "Prediction", backref="fixture", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (db.Index("idx_fixture_round", "round_id"),)

    def __repr__(self):
        return f"<Fixture {self.home_team} v {self.away_team} Round {self.round_id}>"

    @property
    def has_result(self):
        """Check if both scores have been entered"""
        return self.home_score is not None and self.away_score is not None

    def record_result(self, home_score, away_score):
        """Store the final score; callers validate the values first"""
        self.home_score = home_score
        self.away_score = away_score
        self.status = FIXTURE_FINISHED

    def to_dict(self):
        """Convert fixture to dictionary for API responses"""
        return {
            "id": self.id,
            "round_id": self.round_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "match_time": self.match_time.isoformat() if self.match_time else None,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "status": self.status,
        }
