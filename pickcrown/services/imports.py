"""Bulk import of categories and their options into an event"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.models import Category, CategoryOption

logger = logging.getLogger(__name__)


def import_categories(event_id, categories):
    """
    Append categories after the event's existing ones.

    Each item is {"name": str, "options": [str, ...]}. Items are imported
    one at a time; a failing item is logged and skipped.

    Returns:
        dict with categories_created, options_created and skipped counts
    """
    next_index = Category.next_order_index(event_id)
    categories_created = 0
    options_created = 0
    skipped = 0

    for item in categories:
        name = item.get("name") if isinstance(item, dict) else None
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            skipped += 1
            continue

        options = item.get("options") or []
        if not isinstance(options, list):
            skipped += 1
            logger.warning(f"Skipping category '{name}': options must be a list")
            continue

        option_names = [str(option).strip() for option in options if str(option).strip()]

        try:
            with db.session.begin_nested():
                category = Category(
                    event_id=event_id,
                    name=name,
                    order_index=next_index,
                    type="single_select",
                )
                db.session.add(category)
                db.session.flush()

                for idx, option_name in enumerate(option_names, start=1):
                    db.session.add(
                        CategoryOption(
                            category_id=category.id,
                            name=option_name,
                            order_index=idx,
                        )
                    )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            skipped += 1
            logger.error(f"Error importing category '{name}' into event {event_id}: {e}")
            continue

        next_index += 1
        categories_created += 1
        options_created += len(option_names)

    return {
        "categories_created": categories_created,
        "options_created": options_created,
        "skipped": skipped,
    }
