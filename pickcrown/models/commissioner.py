from datetime import datetime, timezone

from pickcrown import db


class Commissioner(db.Model):
    __tablename__ = "commissioners"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<Commissioner {self.email}>"

    @staticmethod
    def get_by_email(email):
        if not email:
            return None
        return Commissioner.query.filter_by(email=email.strip().lower()).first()

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
