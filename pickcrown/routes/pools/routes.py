import logging

from flask import Response, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.forms.admin import PoolForm
from pickcrown.models import AuditLog, Event, Pool
from pickcrown.models.pool import POOL_STATUSES
from pickcrown.routes.pools import bp
from pickcrown.services.pools import delete_pool, reinvite_pool
from pickcrown.services.standings import (
    calculate_standings,
    export_filename,
    standings_to_csv,
)
from pickcrown.utils.api_helpers import (
    error_response,
    first_form_error,
    get_actor_email,
    get_json_body,
    invalid_body_response,
    parse_int,
)
from pickcrown.utils.cache_utils import invalidate_results_cache

logger = logging.getLogger(__name__)


@bp.route("/pools")
def list_pools():
    query = Pool.query

    event_id = parse_int(request.args.get("eventId"))
    if event_id is not None:
        query = query.filter_by(event_id=event_id)

    pools = query.order_by(Pool.created_at.desc(), Pool.id.desc()).all()
    return jsonify({"pools": [pool.to_dict(include_entry_count=True) for pool in pools]})


@bp.route("/pools/<int:pool_id>")
def get_pool(pool_id):
    pool = db.session.get(Pool, pool_id)
    if not pool:
        return error_response("Pool not found", 404)

    data = pool.to_dict(include_entry_count=True)
    data["event"] = pool.event.to_dict() if pool.event else None
    return jsonify({"pool": data})


@bp.route("/pools", methods=["POST"])
def create_pool():
    invalid = invalid_body_response()
    if invalid:
        return invalid

    form = PoolForm()
    if not form.validate():
        return error_response(first_form_error(form), 400)

    if not db.session.get(Event, form.event_id.data):
        return error_response("Event not found", 404)

    pool = Pool(
        event_id=form.event_id.data,
        name=form.name.data,
        commissioner_name=form.commissioner_name.data or None,
        commissioner_email=(form.commissioner_email.data or "").strip().lower() or None,
        is_private=bool(get_json_body().get("is_private", False)),
        status="active",
    )

    try:
        db.session.add(pool)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating pool: {e}")
        return error_response("Failed to create pool", 500)

    logger.info(f"Created pool {pool.id} for event {pool.event_id}")
    return jsonify({"success": True, "pool": pool.to_dict()}), 201


@bp.route("/pools", methods=["PUT"])
def update_pool():
    data = get_json_body()
    pool_id = parse_int(data.get("id"))
    if pool_id is None:
        return error_response("Pool id is required", 400)

    pool = db.session.get(Pool, pool_id)
    if not pool:
        return error_response("Pool not found", 404)

    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            return error_response("Pool name is required", 400)
        pool.name = name

    if "commissioner_name" in data:
        pool.commissioner_name = (data.get("commissioner_name") or "").strip() or None

    if "commissioner_email" in data:
        email = (data.get("commissioner_email") or "").strip().lower()
        if email and "@" not in email:
            return error_response("Valid email is required", 400)
        pool.commissioner_email = email or None

    if "is_private" in data:
        pool.is_private = bool(data.get("is_private"))

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating pool {pool_id}: {e}")
        return error_response("Failed to update pool", 500)

    return jsonify({"success": True, "pool": pool.to_dict()})


@bp.route("/pools/<int:pool_id>", methods=["DELETE"])
def remove_pool(pool_id):
    """Delete a pool together with its entries and picks"""
    try:
        counts, message = delete_pool(pool_id)
        if counts is None:
            return error_response(message, 404)

        AuditLog.log_action(
            "delete_pool",
            actor_email=get_actor_email(),
            target_type="pool",
            target_id=pool_id,
            metadata=counts,
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting pool {pool_id}: {e}")
        return error_response("Failed to delete pool", 500)

    invalidate_results_cache(f"pool {pool_id} deleted")
    return jsonify({"success": True, "deleted": counts})


@bp.route("/pools/<int:pool_id>/archive", methods=["PATCH"])
def archive_pool(pool_id):
    data = get_json_body()
    status = data.get("status", "archived")
    if status not in POOL_STATUSES:
        return error_response(f"status must be one of {', '.join(POOL_STATUSES)}", 400)

    pool = db.session.get(Pool, pool_id)
    if not pool:
        return error_response("Pool not found", 404)

    try:
        previous_status = pool.status
        pool.status = status
        AuditLog.log_action(
            "archive_pool" if status == "archived" else "unarchive_pool",
            actor_email=get_actor_email(),
            target_type="pool",
            target_id=pool.id,
            metadata={"previous_status": previous_status, "status": status},
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error archiving pool {pool_id}: {e}")
        return error_response("Failed to update pool status", 500)

    return jsonify({"success": True, "pool": pool.to_dict()})


@bp.route("/pools/<int:pool_id>/reinvite", methods=["POST"])
def reinvite(pool_id):
    """Open a new pool for another event with the same participants"""
    data = get_json_body()
    new_event_id = parse_int(data.get("newEventId"))
    if new_event_id is None:
        return error_response("newEventId is required", 400)

    try:
        new_pool, message = reinvite_pool(pool_id, new_event_id)
        if not new_pool:
            return error_response(message, 404)

        entry_count = new_pool.get_entry_count()
        AuditLog.log_action(
            "reinvite_pool",
            actor_email=get_actor_email(),
            target_type="pool",
            target_id=new_pool.id,
            metadata={
                "source_pool_id": pool_id,
                "new_event_id": new_event_id,
                "entries_copied": entry_count,
            },
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error reinviting pool {pool_id}: {e}")
        return error_response("Failed to reinvite pool", 500)

    return (
        jsonify(
            {
                "success": True,
                "pool": new_pool.to_dict(),
                "entriesCopied": entry_count,
            }
        ),
        201,
    )


@bp.route("/pools/<int:pool_id>/standings")
def standings(pool_id):
    pool = db.session.get(Pool, pool_id)
    if not pool:
        return error_response("Pool not found", 404)

    return jsonify({"pool": pool.to_dict(), "standings": calculate_standings(pool_id)})


@bp.route("/pools/<int:pool_id>/export")
def export_standings(pool_id):
    """Standings as a CSV download"""
    pool = db.session.get(Pool, pool_id)
    if not pool:
        return error_response("Pool not found", 404)

    csv_text = standings_to_csv(pool, calculate_standings(pool_id))
    filename = export_filename(pool.name)

    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
