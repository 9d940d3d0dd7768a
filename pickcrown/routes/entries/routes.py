import logging

from flask import jsonify, request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pickcrown import db
from pickcrown.forms.entries import EntryForm
from pickcrown.models import Pool, PoolEntry
from pickcrown.routes.entries import bp
from pickcrown.services.entries import create_entry
from pickcrown.utils.api_helpers import (
    error_response,
    first_form_error,
    get_json_body,
    invalid_body_response,
)
from pickcrown.utils.cache_utils import invalidate_results_cache

logger = logging.getLogger(__name__)

DUPLICATE_ENTRY_MESSAGE = "An entry with this email already exists in this pool"


@bp.route("/pools/<int:pool_id>/entries")
def list_entries(pool_id):
    pool = db.session.get(Pool, pool_id)
    if not pool:
        return error_response("Pool not found", 404)

    include_picks = request.args.get("includePicks", "").lower() in ("1", "true", "yes")
    entries = pool.entries.order_by(PoolEntry.created_at, PoolEntry.id).all()
    return jsonify(
        {"entries": [entry.to_dict(include_picks=include_picks) for entry in entries]}
    )


@bp.route("/pools/<int:pool_id>/entries", methods=["POST"])
def submit_entry(pool_id):
    """Join a pool with a set of picks"""
    pool = db.session.get(Pool, pool_id)
    if not pool:
        return error_response("Pool not found", 404)

    invalid = invalid_body_response()
    if invalid:
        return invalid

    form = EntryForm()
    if not form.validate():
        return error_response(first_form_error(form), 400)

    if pool.has_participant(form.email.data):
        return error_response(DUPLICATE_ENTRY_MESSAGE, 409)

    data = get_json_body()
    bracket_picks = data.get("bracket_picks") or []
    category_picks = data.get("category_picks") or []
    if not isinstance(bracket_picks, list) or not isinstance(category_picks, list):
        return error_response("Picks must be lists", 400)

    try:
        entry, message = create_entry(
            pool,
            form.entry_name.data,
            form.email.data,
            bracket_picks=bracket_picks,
            category_picks=category_picks,
        )
        if not entry:
            db.session.rollback()
            return error_response(message, 400)

        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return error_response(DUPLICATE_ENTRY_MESSAGE, 409)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating entry in pool {pool_id}: {e}")
        return error_response("Failed to submit entry", 500)

    invalidate_results_cache(f"entry added to pool {pool_id}")
    return jsonify({"success": True, "entry": entry.to_dict(include_picks=True)}), 201


@bp.route("/entries/<int:entry_id>", methods=["PATCH"])
def update_entry(entry_id):
    """Rename an entry or change its email"""
    data = get_json_body()

    entry_name = data.get("entry_name")
    entry_name = entry_name.strip() if isinstance(entry_name, str) else ""
    if not entry_name:
        return error_response("Entry name is required", 400)

    email = data.get("email")
    email = email.strip().lower() if isinstance(email, str) else ""
    if "@" not in email:
        return error_response("Valid email is required", 400)

    entry = db.session.get(PoolEntry, entry_id)
    if not entry:
        return error_response("Entry not found", 404)

    duplicate = PoolEntry.query.filter(
        PoolEntry.pool_id == entry.pool_id,
        PoolEntry.email == email,
        PoolEntry.id != entry.id,
    ).first()
    if duplicate:
        return error_response(DUPLICATE_ENTRY_MESSAGE, 409)

    try:
        entry.entry_name = entry_name
        entry.email = email
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return error_response(DUPLICATE_ENTRY_MESSAGE, 409)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating entry {entry_id}: {e}")
        return error_response("Failed to update entry", 500)

    invalidate_results_cache(f"entry {entry_id} updated")
    return jsonify({"success": True, "entry": entry.to_dict()})


@bp.route("/entries/<int:entry_id>", methods=["DELETE"])
def delete_entry(entry_id):
    entry = db.session.get(PoolEntry, entry_id)
    if not entry:
        return error_response("Entry not found", 404)

    try:
        entry.delete_with_picks()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting entry {entry_id}: {e}")
        return error_response("Failed to delete entry", 500)

    invalidate_results_cache(f"entry {entry_id} deleted")
    return jsonify({"success": True})
