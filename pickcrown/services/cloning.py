"""
Event cloning

Copies an event's categories and options into a fresh upcoming event.
Results never carry over: options start with is_correct unset, categories
without a correct option, and phase and season assignments are left for
the admin to set up again.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.models import Category, CategoryOption, Event

logger = logging.getLogger(__name__)


def clone_event(source_event_id, new_year=None, new_start_time=None, new_name=None):
    """
    Clone an event with its categories and options.

    Each category is copied inside its own savepoint. A category that fails
    to copy is logged and skipped; the rest of the clone goes ahead.

    Args:
        source_event_id: Event to copy
        new_year: Year of the clone (defaults to the source year + 1)
        new_start_time: Start time of the clone (defaults to the source's)
        new_name: Name of the clone (defaults to the source's)

    Returns:
        tuple: (result dict or None, message)
    """
    source = db.session.get(Event, source_event_id)
    if not source:
        return None, "Event not found"

    new_event = Event(
        name=new_name or source.name,
        year=new_year or source.year + 1,
        event_type=source.event_type,
        start_time=new_start_time or source.start_time,
        status="upcoming",
        event_metadata=source.event_metadata,
        season_id=None,
    )
    db.session.add(new_event)
    db.session.commit()

    categories = (
        Category.query.filter_by(event_id=source.id)
        .order_by(Category.order_index, Category.id)
        .all()
    )

    cloned = 0
    failed = 0
    for category in categories:
        try:
            with db.session.begin_nested():
                _clone_category(category, new_event.id)
            db.session.commit()
            cloned += 1
        except SQLAlchemyError as e:
            db.session.rollback()
            failed += 1
            logger.error(
                f"Error cloning category {category.id} ({category.name}) "
                f"into event {new_event.id}: {e}"
            )

    logger.info(
        f"Cloned event {source.id} into {new_event.id}: "
        f"{cloned} categories cloned, {failed} failed"
    )

    return {
        "event": new_event,
        "categories_cloned": cloned,
        "categories_failed": failed,
    }, "Event cloned"


def _clone_category(category, new_event_id):
    new_category = Category(
        event_id=new_event_id,
        name=category.name,
        type=category.type,
        order_index=category.order_index,
        points=category.points,
    )
    db.session.add(new_category)
    db.session.flush()

    for option in category.options.all():
        db.session.add(
            CategoryOption(
                category_id=new_category.id,
                name=option.name,
                order_index=option.order_index,
                is_correct=None,
            )
        )
    db.session.flush()

    return new_category
