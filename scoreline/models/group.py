from datetime import datetime, timezone

from scoreline import db


class Group(db.Model):
    """A sub-league of players; membership is managed elsewhere"""

    __tablename__ = "groups"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    members = db.relationship(
        "GroupMember", backref="group", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (db.Index("idx_group_active", "is_active"),)

    def __repr__(self):
        return f"<Group {self.name}>"

    def get_member_ids(self):
        """Ids of active members, used as a standings member filter"""
        from .group_member import GroupMember

        return {
            membership.user_id
            for membership in self.members.filter(GroupMember.is_active.is_(True)).all()
        }

    def to_dict(self):
        """Convert group to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "member_count": len(self.get_member_ids()),
        }
