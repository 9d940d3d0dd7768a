from datetime import datetime, timezone

from pickcrown import db


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    seed = db.Column(db.Integer)
    conference = db.Column(db.String(50))

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (db.Index("idx_team_event", "event_id"),)

    def __repr__(self):
        return f"<Team {self.display_name}>"

    @property
    def display_name(self):
        """Name prefixed with the seed when there is one"""
        return f"#{self.seed} {self.name}" if self.seed else self.name

    @staticmethod
    def get_all_for_event(event_id):
        return (
            Team.query.filter_by(event_id=event_id)
            .order_by(Team.seed.is_(None), Team.seed, Team.name)
            .all()
        )

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "name": self.name,
            "seed": self.seed,
            "conference": self.conference,
            "display_name": self.display_name,
        }


class TeamElimination(db.Model):
    __tablename__ = "team_eliminations"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    eliminated_in_round_id = db.Column(
        db.Integer, db.ForeignKey("rounds.id"), nullable=False
    )

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("event_id", "team_id", name="unique_event_team_elimination"),
    )

    def __repr__(self):
        return f"<TeamElimination team={self.team_id} round={self.eliminated_in_round_id}>"

    @staticmethod
    def set_elimination(event_id, team_id, eliminated_in_round_id=None):
        """
        Record or clear a team's elimination.

        With a round id the (event, team) record is created or updated.
        Without one the record is removed, meaning the team is still alive.

        Returns:
            The elimination record, or None when it was cleared
        """
        existing = TeamElimination.query.filter_by(
            event_id=event_id, team_id=team_id
        ).first()

        if not eliminated_in_round_id:
            if existing:
                db.session.delete(existing)
            return None

        if existing:
            existing.eliminated_in_round_id = eliminated_in_round_id
            return existing

        elimination = TeamElimination(
            event_id=event_id,
            team_id=team_id,
            eliminated_in_round_id=eliminated_in_round_id,
        )
        db.session.add(elimination)
        return elimination

    @staticmethod
    def clear_for_event(event_id):
        return TeamElimination.query.filter_by(event_id=event_id).delete(
            synchronize_session=False
        )

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "team_id": self.team_id,
            "eliminated_in_round_id": self.eliminated_in_round_id,
        }
