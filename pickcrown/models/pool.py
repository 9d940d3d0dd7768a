from datetime import datetime, timezone

from pickcrown import db

POOL_STATUSES = ("active", "archived")


class Pool(db.Model):
    __tablename__ = "pools"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    name = db.Column(db.String(200), nullable=False)

    # Commissioner running the pool
    commissioner_name = db.Column(db.String(100))
    commissioner_email = db.Column(db.String(120), index=True)

    status = db.Column(db.String(20), nullable=False, default="active")
    is_private = db.Column(db.Boolean, default=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    entries = db.relationship("PoolEntry", backref="pool", lazy="dynamic")

    __table_args__ = (
        db.Index("idx_pool_event", "event_id"),
        db.Index("idx_pool_status", "status"),
    )

    def __repr__(self):
        return f"<Pool {self.name}>"

    def get_entry_count(self):
        return self.entries.count()

    def has_participant(self, email):
        """Check if an email belongs to an entry in this pool"""
        if not email:
            return False
        from .entry import PoolEntry

        return (
            self.entries.filter(
                db.func.lower(PoolEntry.email) == email.strip().lower()
            ).first()
            is not None
        )

    def to_dict(self, include_entry_count=False):
        """Convert pool to dictionary for API responses"""
        data = {
            "id": self.id,
            "event_id": self.event_id,
            "name": self.name,
            "commissioner_name": self.commissioner_name,
            "commissioner_email": self.commissioner_email,
            "status": self.status,
            "is_private": self.is_private,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

        if include_entry_count:
            data["entry_count"] = self.get_entry_count()

        return data
