import logging
from datetime import datetime, timezone

from pickcrown import db

logger = logging.getLogger(__name__)


class AuditLog(db.Model):
    """Append-only record of administrative actions"""

    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)

    actor_email = db.Column(db.String(120), nullable=False, default="system")
    action = db.Column(db.String(50), nullable=False)

    # What was acted upon
    target_type = db.Column(db.String(30))
    target_id = db.Column(db.String(50))

    audit_metadata = db.Column("metadata", db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("idx_audit_action", "action"),
        db.Index("idx_audit_actor", "actor_email"),
        db.Index("idx_audit_created", "created_at"),
    )

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.actor_email}>"

    @staticmethod
    def log_action(action, actor_email=None, target_type=None, target_id=None, metadata=None):
        """Add an audit entry to the session; the caller commits"""
        entry = AuditLog(
            actor_email=actor_email or "system",
            action=action,
            target_type=target_type,
            target_id=str(target_id) if target_id is not None else None,
            audit_metadata=metadata or {},
        )
        db.session.add(entry)
        logger.info(
            f"Audit: {entry.action} by {entry.actor_email} on {target_type} {target_id}"
        )
        return entry

    @staticmethod
    def recent(limit=50, action=None, actor_email=None):
        query = AuditLog.query

        if action:
            query = query.filter_by(action=action)
        if actor_email:
            query = query.filter_by(actor_email=actor_email)

        return (
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )

    def to_dict(self):
        return {
            "id": self.id,
            "actor_email": self.actor_email,
            "action": self.action,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "metadata": self.audit_metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
