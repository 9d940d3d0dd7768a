import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db, limiter
from pickcrown.forms.entries import FeedbackForm, clean_email_list
from pickcrown.models import Event, Pool
from pickcrown.routes.email import bp
from pickcrown.services.notifications import (
    send_incomplete_reminders,
    send_invites,
    send_reminders,
    send_results_emails,
)
from pickcrown.utils.api_helpers import (
    error_response,
    first_form_error,
    get_json_body,
    invalid_body_response,
    parse_int,
)
from pickcrown.utils.email_service import EmailService

logger = logging.getLogger(__name__)


def _pool_from_body():
    pool_id = parse_int(get_json_body().get("poolId"))
    if pool_id is None:
        return None, error_response("poolId is required", 400)

    pool = db.session.get(Pool, pool_id)
    if not pool:
        return None, error_response("Pool not found", 404)
    return pool, None


def _report_response(report):
    return jsonify(
        {
            "success": len(report["failed"]) == 0,
            "sent": len(report["sent"]),
            "skipped": len(report["skipped"]),
            "failed": len(report["failed"]),
            "recipients": report,
        }
    )


@bp.route("/email/send-reminders", methods=["POST"])
def reminders():
    pool, error = _pool_from_body()
    if error:
        return error

    try:
        report, message = send_reminders(pool)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error sending reminders for pool {pool.id}: {e}")
        return error_response("Failed to send reminders", 500)

    if report is None:
        return error_response(message, 400)
    return _report_response(report)


@bp.route("/email/send-reminder-incomplete", methods=["POST"])
def incomplete_reminders():
    pool, error = _pool_from_body()
    if error:
        return error

    try:
        report, message = send_incomplete_reminders(pool)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error sending incomplete-pick reminders for pool {pool.id}: {e}")
        return error_response("Failed to send reminders", 500)

    if report is None:
        return error_response(message, 400)
    return _report_response(report)


@bp.route("/email/send-invites", methods=["POST"])
def invites():
    emails = get_json_body().get("emails")
    if not isinstance(emails, list) or not emails:
        return error_response("No emails provided", 400)

    valid, invalid = clean_email_list(emails)
    if invalid:
        return error_response(f"Invalid email addresses: {', '.join(map(str, invalid))}", 400)

    pool, error = _pool_from_body()
    if error:
        return error

    try:
        report, message = send_invites(pool, valid)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error sending invites for pool {pool.id}: {e}")
        return error_response("Failed to send invites", 500)

    if report is None:
        return error_response(message, 400)
    return _report_response(report)


@bp.route("/email/send-results", methods=["POST"])
def results():
    """Results for one pool (poolId) or every pool of an event (eventId)"""
    data = get_json_body()
    pool_id = parse_int(data.get("poolId"))
    event_id = parse_int(data.get("eventId"))
    if pool_id is None and event_id is None:
        return error_response("eventId or poolId required", 400)

    if pool_id is not None:
        pool = db.session.get(Pool, pool_id)
        if not pool:
            return error_response("Pool not found", 404)
        event = pool.event
        pools = [pool]
    else:
        event = db.session.get(Event, event_id)
        if not event:
            return error_response("Event not found", 404)
        pools = Pool.query.filter_by(event_id=event.id).order_by(Pool.id).all()
        if not pools:
            return error_response("No pools found", 404)

    try:
        report, message = send_results_emails(event, pools)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error sending results for event {event.id if event else None}: {e}")
        return error_response("Failed to send results", 500)

    if report is None:
        return error_response(message, 400)
    return _report_response(report)


@bp.route("/feedback", methods=["POST"])
@limiter.limit("5 per hour")
def feedback():
    invalid = invalid_body_response()
    if invalid:
        return invalid

    form = FeedbackForm()
    if not form.validate():
        return error_response(first_form_error(form), 400)

    sent = EmailService().send_feedback(form.message.data, form.email.data or None)
    if not sent:
        return error_response("Failed to send feedback", 500)

    return jsonify({"success": True})
