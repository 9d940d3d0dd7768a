from datetime import datetime, timezone

from pickcrown import db


class Matchup(db.Model):
    __tablename__ = "matchups"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)

    team_a_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    team_b_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    winner_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    team_a = db.relationship("Team", foreign_keys=[team_a_id])
    team_b = db.relationship("Team", foreign_keys=[team_b_id])
    winner = db.relationship("Team", foreign_keys=[winner_id])

    __table_args__ = (
        db.Index("idx_matchup_event", "event_id"),
        db.Index("idx_matchup_round", "round_id"),
    )

    def __repr__(self):
        return f"<Matchup {self.team_a_id} vs {self.team_b_id}>"

    @property
    def is_decided(self):
        return self.winner_id is not None

    def involves_team(self, team_id):
        return team_id in (self.team_a_id, self.team_b_id)

    def set_winner(self, winner_id):
        """
        Record the winner, or clear it with None.

        Returns:
            tuple: (ok, message)
        """
        if winner_id is not None and not self.involves_team(winner_id):
            return False, f"Team {winner_id} is not part of matchup {self.id}"

        self.winner_id = winner_id
        return True, "Winner updated"

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "round_id": self.round_id,
            "round": self.round.to_dict() if self.round else None,
            "team_a": self.team_a.to_dict() if self.team_a else None,
            "team_b": self.team_b.to_dict() if self.team_b else None,
            "winner_id": self.winner_id,
            "is_decided": self.is_decided,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
