import logging

from flask import jsonify, request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pickcrown import db
from pickcrown.forms.admin import CommissionerForm
from pickcrown.models import AuditLog, Commissioner
from pickcrown.routes.admin import bp
from pickcrown.services.pools import delete_event, delete_pool
from pickcrown.utils.api_helpers import (
    error_response,
    first_form_error,
    get_actor_email,
    invalid_body_response,
    parse_int,
)
from pickcrown.utils.cache_utils import invalidate_results_cache

logger = logging.getLogger(__name__)

DELETE_HANDLERS = {
    "pool": delete_pool,
    "event": delete_event,
}


@bp.route("/commissioners")
def commissioners():
    """List commissioners, or check one email with ?email="""
    email = request.args.get("email")
    if email is not None:
        commissioner = Commissioner.get_by_email(email)
        return jsonify(
            {
                "isCommissioner": commissioner is not None,
                "commissioner": commissioner.to_dict() if commissioner else None,
            }
        )

    rows = Commissioner.query.order_by(Commissioner.name).all()
    return jsonify({"commissioners": [row.to_dict() for row in rows]})


@bp.route("/commissioners", methods=["POST"])
def create_commissioner():
    invalid = invalid_body_response()
    if invalid:
        return invalid

    form = CommissionerForm()
    if not form.validate():
        return error_response(first_form_error(form), 400)

    email = form.email.data.strip().lower()
    if Commissioner.get_by_email(email):
        return error_response("Commissioner already exists", 409)

    commissioner = Commissioner(name=form.name.data, email=email)

    try:
        db.session.add(commissioner)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return error_response("Commissioner already exists", 409)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating commissioner: {e}")
        return error_response("Failed to create commissioner", 500)

    return jsonify({"success": True, "commissioner": commissioner.to_dict()}), 201


@bp.route("/audit-log")
def audit_log():
    limit = parse_int(request.args.get("limit")) or 50
    limit = max(1, min(limit, 500))

    logs = AuditLog.recent(
        limit=limit,
        action=request.args.get("action") or None,
        actor_email=request.args.get("actor_email") or None,
    )
    return jsonify({"logs": [log.to_dict() for log in logs]})


@bp.route("/admin/delete", methods=["DELETE"])
def admin_delete():
    """Delete a pool or an event with everything that hangs off it"""
    target_type = request.args.get("type")
    target_id = parse_int(request.args.get("id"))

    if target_type not in DELETE_HANDLERS:
        return error_response("type must be 'pool' or 'event'", 400)
    if target_id is None:
        return error_response("id is required", 400)

    try:
        counts, message = DELETE_HANDLERS[target_type](target_id)
        if counts is None:
            return error_response(message, 404)

        AuditLog.log_action(
            f"delete_{target_type}",
            actor_email=get_actor_email(),
            target_type=target_type,
            target_id=target_id,
            metadata=counts,
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting {target_type} {target_id}: {e}")
        return error_response(f"Failed to delete {target_type}", 500)

    invalidate_results_cache(f"{target_type} {target_id} deleted")
    return jsonify({"success": True, "deleted": counts})
