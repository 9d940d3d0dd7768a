from pickcrown import db


class Round(db.Model):
    __tablename__ = "rounds"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    round_order = db.Column(db.Integer, nullable=False)

    # Points awarded for each correct bracket pick in this round
    points = db.Column(db.Integer, nullable=False, default=1)

    matchups = db.relationship("Matchup", backref="round", lazy="dynamic")

    __table_args__ = (db.Index("idx_round_event_order", "event_id", "round_order"),)

    def __repr__(self):
        return f"<Round {self.name} ({self.points} pts)>"

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "name": self.name,
            "round_order": self.round_order,
            "points": self.points,
        }
