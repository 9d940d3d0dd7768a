from datetime import datetime, timezone

from pickcrown import db


class PoolEntry(db.Model):
    __tablename__ = "pool_entries"

    id = db.Column(db.Integer, primary_key=True)
    pool_id = db.Column(db.Integer, db.ForeignKey("pools.id"), nullable=False)
    entry_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Picks are removed explicitly before the entry (see delete_with_picks)
    bracket_picks = db.relationship("BracketPick", backref="entry", lazy="dynamic")
    category_picks = db.relationship("CategoryPick", backref="entry", lazy="dynamic")

    __table_args__ = (
        db.UniqueConstraint("pool_id", "email", name="unique_pool_entry_email"),
        db.Index("idx_entry_pool", "pool_id"),
    )

    def __repr__(self):
        return f"<PoolEntry {self.entry_name} in pool {self.pool_id}>"

    @staticmethod
    def delete_picks_for(entry_ids):
        """Delete bracket and category picks for the given entry ids"""
        if not entry_ids:
            return 0, 0

        bracket_deleted = BracketPick.query.filter(
            BracketPick.pool_entry_id.in_(entry_ids)
        ).delete(synchronize_session=False)
        category_deleted = CategoryPick.query.filter(
            CategoryPick.pool_entry_id.in_(entry_ids)
        ).delete(synchronize_session=False)

        return bracket_deleted, category_deleted

    def delete_with_picks(self):
        """Delete this entry, removing its picks first"""
        PoolEntry.delete_picks_for([self.id])
        db.session.delete(self)

    def to_dict(self, include_picks=False):
        """Convert entry to dictionary for API responses"""
        data = {
            "id": self.id,
            "pool_id": self.pool_id,
            "entry_name": self.entry_name,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

        if include_picks:
            data["bracket_picks"] = [pick.to_dict() for pick in self.bracket_picks]
            data["category_picks"] = [pick.to_dict() for pick in self.category_picks]

        return data


class BracketPick(db.Model):
    __tablename__ = "bracket_picks"

    id = db.Column(db.Integer, primary_key=True)
    pool_entry_id = db.Column(
        db.Integer, db.ForeignKey("pool_entries.id"), nullable=False
    )
    matchup_id = db.Column(db.Integer, db.ForeignKey("matchups.id"), nullable=False)
    picked_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    matchup = db.relationship("Matchup")

    __table_args__ = (
        db.UniqueConstraint(
            "pool_entry_id", "matchup_id", name="unique_entry_matchup_pick"
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "pool_entry_id": self.pool_entry_id,
            "matchup_id": self.matchup_id,
            "picked_team_id": self.picked_team_id,
        }


class CategoryPick(db.Model):
    __tablename__ = "category_picks"

    id = db.Column(db.Integer, primary_key=True)
    pool_entry_id = db.Column(
        db.Integer, db.ForeignKey("pool_entries.id"), nullable=False
    )
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    option_id = db.Column(
        db.Integer, db.ForeignKey("category_options.id"), nullable=False
    )

    category = db.relationship("Category")
    option = db.relationship("CategoryOption")

    __table_args__ = (
        db.UniqueConstraint(
            "pool_entry_id", "category_id", name="unique_entry_category_pick"
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "pool_entry_id": self.pool_entry_id,
            "category_id": self.category_id,
            "option_id": self.option_id,
        }
