import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.models import AuditLog, Event
from pickcrown.routes.results import bp
from pickcrown.services.results import apply_bulk_results, set_category_result
from pickcrown.utils.api_helpers import (
    error_response,
    get_actor_email,
    get_json_body,
    parse_int,
)
from pickcrown.utils.cache_utils import invalidate_results_cache

logger = logging.getLogger(__name__)


@bp.route("/results", methods=["PUT"])
def update_category_result():
    """Set the correct option of a category; a null optionId clears it"""
    data = get_json_body()
    category_id = parse_int(data.get("categoryId"))
    if category_id is None:
        return error_response("categoryId is required", 400)

    option_id = parse_int(data.get("optionId"))
    if data.get("optionId") is not None and option_id is None:
        return error_response("optionId must be an integer", 400)

    try:
        category, message = set_category_result(category_id, option_id)
        if not category:
            if message == "not found":
                return error_response("Category not found", 404)
            return error_response(f"Option {option_id} does not belong to this category", 400)

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error setting result for category {category_id}: {e}")
        return error_response("Failed to update result", 500)

    invalidate_results_cache(f"category {category_id} result updated")
    return jsonify({"success": True, "category": category.to_dict(include_options=True)})


@bp.route("/results/bulk", methods=["POST"])
def bulk_results():
    """
    Enter many results at once.

    Every item is applied on its own; the response lists what failed and
    is 200 even when some items did.
    """
    data = get_json_body()
    results = data.get("results")
    if not isinstance(results, list):
        return error_response("results must be a list", 400)

    event_id = parse_int(data.get("eventId"))
    if event_id is not None and not db.session.get(Event, event_id):
        return error_response("Event not found", 404)

    updated, errors = apply_bulk_results(event_id, results)

    try:
        AuditLog.log_action(
            "bulk_results_entry",
            actor_email=get_actor_email(),
            target_type="event",
            target_id=event_id,
            metadata={
                "submitted": len(results),
                "updated": len(updated),
                "errors": len(errors),
            },
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error writing audit entry for bulk results: {e}")

    if updated:
        invalidate_results_cache(f"bulk results for event {event_id}")

    return jsonify({"success": len(errors) == 0, "updated": len(updated), "errors": errors})
