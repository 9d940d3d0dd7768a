from datetime import datetime, timezone

from pickcrown import db


class Season(db.Model):
    __tablename__ = "seasons"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    year = db.Column(db.Integer, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # No cascade: deleting a season only detaches its events
    events = db.relationship("Event", backref="season", lazy="dynamic")

    def __repr__(self):
        return f"<Season {self.name} ({self.year})>"

    @staticmethod
    def create_season(name, description=None, year=None):
        """Create a new season, defaulting to the current year"""
        season = Season(
            name=name,
            description=description or None,
            year=year or datetime.now(timezone.utc).year,
        )
        db.session.add(season)
        return season

    def detach_events(self):
        """Clear season_id on every member event"""
        from .event import Event

        return Event.query.filter_by(season_id=self.id).update(
            {"season_id": None}, synchronize_session=False
        )

    def delete(self):
        """Delete the season after detaching its events"""
        detached = self.detach_events()
        db.session.delete(self)
        return detached

    def to_dict(self, include_events=False):
        """Convert season to dictionary for API responses"""
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "year": self.year,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

        if include_events:
            data["events"] = [event.to_dict() for event in self.events.all()]

        return data
