from datetime import datetime, timezone
import logging

from scoreline import db

logger = logging.getLogger(__name__)


class StandingsSnapshot(db.Model):
    """Cumulative standings as they stood once a round was completed

    One row per player per completed round. Totals cover every completed
    round up to and including this one in schedule order, so the snapshot of
    the round before the latest one is the "previous" overall table used for
    rank movement.
    """
    __tablename__ = "standings_snapshots"

    id = db.Column(db.Integer, primary_key=True)

    # Links
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    # Standing at that point
    rank = db.Column(db.Integer, nullable=False)
    total_points = db.Column(db.Integer, nullable=False, default=0)

    # Snapshot metadata
    snapshot_date = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    round = db.relationship("Round", backref=db.backref("snapshots", lazy="dynamic", cascade="all, delete-orphan"))
    user = db.relationship("User", backref=db.backref("standings_snapshots", lazy="dynamic"))

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("round_id", "user_id", name="unique_round_user_snapshot"),
        db.Index("idx_snapshot_round", "round_id"),
    )

    def __repr__(self):
        return f'<StandingsSnapshot round={self.round_id} user={self.user_id} rank={self.rank}>'

    @staticmethod
    def capture(session, round_obj):
        """Write the cumulative standings through round_obj

        Replaces any rows already stored for the round. Does not commit; the
        caller owns the transaction.
        """
        from scoreline.services.standings_service import cumulative_totals_through

        session.query(StandingsSnapshot).filter_by(round_id=round_obj.id).delete()

        standings = cumulative_totals_through(session, round_obj)
        snapshots = []
        for entry in standings:
            snapshot = StandingsSnapshot(
                round_id=round_obj.id,
                user_id=entry["user_id"],
                rank=entry["rank"],
                total_points=entry["total_points"],
            )
            session.add(snapshot)
            snapshots.append(snapshot)

        logger.info(f"Captured standings snapshot for round {round_obj.id} ({len(snapshots)} players)")
        return snapshots

    @staticmethod
    def refresh_from(session, round_obj):
        """Capture round_obj and re-capture every completed round scheduled after it

        A round completed out of schedule order changes the cumulative totals
        of all later rounds.
        """
        rounds = [round_obj] + round_obj.completed_after(session, round_obj)
        for snapshot_round in rounds:
            StandingsSnapshot.capture(session, snapshot_round)
        return [r.id for r in rounds]

    @staticmethod
    def get_rank_map(session, round_id, member_filter=None):
        """Map user_id -> rank from the snapshot of round_id

        With a member filter the stored totals are re-ranked within that
        subset, so ranks are comparable with a filtered live table.
        """
        from scoreline.services.standings_service import rank_entries
        from .user import User

        query = (
            session.query(StandingsSnapshot, User.name)
            .join(User, User.id == StandingsSnapshot.user_id)
            .filter(StandingsSnapshot.round_id == round_id)
        )

        if member_filter is None:
            return {snapshot.user_id: snapshot.rank for snapshot, _ in query.all()}

        member_ids = set(member_filter)
        if not member_ids:
            return {}

        entries = [
            {"user_id": snapshot.user_id, "name": name, "total_points": snapshot.total_points}
            for snapshot, name in query.filter(StandingsSnapshot.user_id.in_(member_ids)).all()
        ]
        return {entry["user_id"]: entry["rank"] for entry in rank_entries(entries)}
