"""
Results entry for matchups and categories

Bulk entry is best-effort: every item is applied and committed on its own,
failures are collected as messages and never undo earlier items.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.models import Category, CategoryOption, Matchup
from pickcrown.utils.api_helpers import parse_int

logger = logging.getLogger(__name__)


def set_matchup_winner(matchup_id, winner_id, event_id=None):
    """
    Record (or clear, with None) the winner of a matchup.

    Returns:
        tuple: (matchup or None, message)
    """
    matchup = db.session.get(Matchup, matchup_id)
    if not matchup:
        return None, "not found"

    if event_id is not None and matchup.event_id != event_id:
        return None, f"not part of event {event_id}"

    ok, message = matchup.set_winner(winner_id)
    if not ok:
        return None, message

    return matchup, message


def set_category_result(category_id, option_id, event_id=None):
    """
    Record (or clear, with None) the correct option of a category.

    The chosen option is marked correct and its siblings incorrect.

    Returns:
        tuple: (category or None, message)
    """
    category = db.session.get(Category, category_id)
    if not category:
        return None, "not found"

    if event_id is not None and category.event_id != event_id:
        return None, f"not part of event {event_id}"

    if option_id is None:
        category.clear_result()
        return category, "Result cleared"

    option = db.session.get(CategoryOption, option_id)
    if not option or option.category_id != category.id:
        return None, f"option {option_id} does not belong to this category"

    category.set_correct_option(option)
    return category, "Result updated"


def _apply_result(index, result, event_id):
    """Apply one bulk item. Returns (label or None, error message or None)."""
    if not isinstance(result, dict):
        return None, f"Result {index}: invalid result item"

    winner_id = parse_int(result.get("winnerId"))
    if result.get("winnerId") is not None and winner_id is None:
        return None, f"Result {index}: winnerId must be an integer"

    if result.get("matchupId") is not None:
        matchup_id = parse_int(result.get("matchupId"))
        if matchup_id is None:
            return None, f"Matchup {result.get('matchupId')}: invalid id"

        matchup, message = set_matchup_winner(matchup_id, winner_id, event_id)
        if not matchup:
            return None, f"Matchup {matchup_id}: {message}"
        return f"matchup:{matchup_id}", None

    if result.get("categoryId") is not None:
        category_id = parse_int(result.get("categoryId"))
        if category_id is None:
            return None, f"Category {result.get('categoryId')}: invalid id"

        category, message = set_category_result(category_id, winner_id, event_id)
        if not category:
            return None, f"Category {category_id}: {message}"
        return f"category:{category_id}", None

    return None, f"Result {index}: missing matchupId or categoryId"


def apply_bulk_results(event_id, results):
    """
    Apply a list of result updates independently.

    Args:
        event_id: Event the results belong to (None skips the check)
        results: list of {"matchupId", "winnerId"} or {"categoryId", "winnerId"}

    Returns:
        tuple: (list of updated labels, list of error messages)
    """
    updated = []
    errors = []

    for index, result in enumerate(results or []):
        try:
            label, error = _apply_result(index, result, event_id)
            if error:
                db.session.rollback()
                errors.append(error)
                continue

            db.session.commit()
            updated.append(label)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Bulk results item {index} failed: {e}")
            errors.append(f"Result {index}: database error")

    logger.info(
        f"Bulk results for event {event_id}: {len(updated)} updated, {len(errors)} errors"
    )
    return updated, errors
