from datetime import datetime, timezone

from pickcrown import db

EVENT_TYPES = ("bracket", "pick_one", "hybrid")
EVENT_STATUSES = ("upcoming", "active", "completed")


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    year = db.Column(db.Integer, nullable=False, index=True)
    event_type = db.Column(db.String(20), nullable=False, default="pick_one")

    # Picks lock once start_time has passed
    start_time = db.Column(db.DateTime)
    status = db.Column(db.String(20), nullable=False, default="upcoming")

    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=True)

    # "metadata" is reserved on declarative models
    event_metadata = db.Column("metadata", db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    pools = db.relationship("Pool", backref="event", lazy="dynamic")
    categories = db.relationship(
        "Category",
        backref="event",
        lazy="dynamic",
        order_by="Category.order_index",
    )
    teams = db.relationship("Team", backref="event", lazy="dynamic")
    rounds = db.relationship(
        "Round", backref="event", lazy="dynamic", order_by="Round.round_order"
    )
    matchups = db.relationship("Matchup", backref="event", lazy="dynamic")

    __table_args__ = (
        db.Index("idx_event_status", "status"),
        db.Index("idx_event_season", "season_id"),
    )

    def __repr__(self):
        return f"<Event {self.name} {self.year}>"

    def has_started(self):
        """Check if the event has started"""
        if not self.start_time:
            return False
        now_utc = datetime.now(timezone.utc)
        start_time = self.start_time

        # If start_time is timezone-naive, assume it's in UTC
        if start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=timezone.utc)

        return now_utc >= start_time

    @property
    def is_completed(self):
        return self.status == "completed"

    def mark_completed(self):
        """Mark the event completed, returning the previous status"""
        previous_status = self.status
        self.status = "completed"
        return previous_status

    def to_dict(self, include_details=False):
        """Convert event to dictionary for API responses"""
        data = {
            "id": self.id,
            "name": self.name,
            "year": self.year,
            "event_type": self.event_type,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "status": self.status,
            "season_id": self.season_id,
            "metadata": self.event_metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

        if include_details:
            data["categories"] = [
                category.to_dict(include_options=True)
                for category in self.categories.all()
            ]
            data["rounds"] = [round_.to_dict() for round_ in self.rounds.all()]
            data["teams"] = [team.to_dict() for team in self.teams.all()]

        return data
