from datetime import datetime, timezone

from pickcrown import db


class EmailLog(db.Model):
    __tablename__ = "email_log"

    id = db.Column(db.Integer, primary_key=True)
    pool_id = db.Column(db.Integer, db.ForeignKey("pools.id"), nullable=False)
    email_type = db.Column(db.String(30), nullable=False)  # 'invite', 'reminder', 'reminder_incomplete', 'results'
    recipient_email = db.Column(db.String(120), nullable=False)
    status = db.Column(db.String(20), nullable=False)  # 'sent', 'failed'

    email_metadata = db.Column("metadata", db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("idx_email_log_lookup", "pool_id", "email_type", "recipient_email"),
    )

    def __repr__(self):
        return f"<EmailLog {self.email_type} to {self.recipient_email}: {self.status}>"

    @staticmethod
    def already_sent(pool_id, email_type, recipient_email):
        return (
            EmailLog.query.filter_by(
                pool_id=pool_id,
                email_type=email_type,
                recipient_email=recipient_email,
                status="sent",
            ).first()
            is not None
        )

    @staticmethod
    def record(pool_id, email_type, recipient_email, status, metadata=None):
        entry = EmailLog(
            pool_id=pool_id,
            email_type=email_type,
            recipient_email=recipient_email,
            status=status,
            email_metadata=metadata,
        )
        db.session.add(entry)
        return entry
