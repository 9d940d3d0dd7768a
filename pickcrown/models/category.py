from datetime import datetime, timezone

from pickcrown import db


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(30), nullable=False, default="single_select")
    order_index = db.Column(db.Integer, nullable=False, default=0)
    points = db.Column(db.Integer, nullable=False, default=1)

    # Phases are configured by hand per event; never cloned
    phase_id = db.Column(db.Integer, nullable=True)

    # Plain column: a foreign key here would make categories and options
    # depend on each other at table creation
    correct_option_id = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    options = db.relationship(
        "CategoryOption",
        backref="category",
        lazy="dynamic",
        order_by="CategoryOption.order_index",
    )

    __table_args__ = (db.Index("idx_category_event_order", "event_id", "order_index"),)

    def __repr__(self):
        return f"<Category {self.name}>"

    @staticmethod
    def next_order_index(event_id):
        """Order index following the highest one already used by the event"""
        current_max = (
            db.session.query(db.func.max(Category.order_index))
            .filter(Category.event_id == event_id)
            .scalar()
        )
        return (current_max or 0) + 1

    def set_correct_option(self, option):
        """Mark one option correct and every sibling incorrect"""
        CategoryOption.query.filter_by(category_id=self.id).update(
            {"is_correct": False}, synchronize_session="fetch"
        )
        option.is_correct = True
        self.correct_option_id = option.id

    def clear_result(self):
        CategoryOption.query.filter_by(category_id=self.id).update(
            {"is_correct": None}, synchronize_session="fetch"
        )
        self.correct_option_id = None

    def delete_with_options(self):
        CategoryOption.query.filter_by(category_id=self.id).delete(
            synchronize_session=False
        )
        db.session.delete(self)

    def to_dict(self, include_options=False):
        data = {
            "id": self.id,
            "event_id": self.event_id,
            "name": self.name,
            "type": self.type,
            "order_index": self.order_index,
            "points": self.points,
            "phase_id": self.phase_id,
            "correct_option_id": self.correct_option_id,
        }

        if include_options:
            data["options"] = [option.to_dict() for option in self.options.all()]

        return data


class CategoryOption(db.Model):
    __tablename__ = "category_options"

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    # None until results are entered
    is_correct = db.Column(db.Boolean, nullable=True)

    __table_args__ = (db.Index("idx_option_category", "category_id"),)

    def __repr__(self):
        return f"<CategoryOption {self.name}>"

    def to_dict(self):
        return {
            "id": self.id,
            "category_id": self.category_id,
            "name": self.name,
            "order_index": self.order_index,
            "is_correct": self.is_correct,
        }
