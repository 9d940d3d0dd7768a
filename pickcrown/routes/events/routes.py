import logging

from flask import jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.forms.admin import EventForm
from pickcrown.models import AuditLog, Event, Round, Team, TeamElimination
from pickcrown.models.event import EVENT_STATUSES, EVENT_TYPES
from pickcrown.routes.events import bp
from pickcrown.services.cloning import clone_event
from pickcrown.services.standings import get_event_podium
from pickcrown.utils.api_helpers import (
    error_response,
    first_form_error,
    get_actor_email,
    get_json_body,
    invalid_body_response,
    parse_int,
)
from pickcrown.utils.cache_utils import cached_route, invalidate_results_cache
from pickcrown.utils.timezone_utils import parse_datetime

logger = logging.getLogger(__name__)


@bp.route("/events")
def list_events():
    """List events, newest year first"""
    query = Event.query

    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)

    season_id = parse_int(request.args.get("season_id"))
    if season_id is not None:
        query = query.filter_by(season_id=season_id)

    events = query.order_by(Event.year.desc(), Event.start_time, Event.id).all()
    return jsonify({"events": [event.to_dict() for event in events]})


@bp.route("/events/<int:event_id>")
def get_event(event_id):
    """Event with its categories, rounds and teams"""
    event = db.session.get(Event, event_id)
    if not event:
        return error_response("Event not found", 404)

    return jsonify({"event": event.to_dict(include_details=True)})


@bp.route("/events", methods=["POST"])
def create_event():
    invalid = invalid_body_response()
    if invalid:
        return invalid

    form = EventForm()
    if not form.validate():
        return error_response(first_form_error(form), 400)

    try:
        start_time = parse_datetime(form.start_time.data)
    except ValueError:
        return error_response("Invalid start_time", 400)

    event = Event(
        name=form.name.data,
        year=form.year.data,
        event_type=form.event_type.data or "pick_one",
        start_time=start_time,
        status=form.status.data or "upcoming",
        event_metadata=get_json_body().get("metadata"),
    )

    try:
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating event: {e}")
        return error_response("Failed to create event", 500)

    logger.info(f"Created event {event.id} ({event.name} {event.year})")
    return jsonify({"success": True, "event": event.to_dict()}), 201


@bp.route("/events", methods=["PUT"])
def update_event():
    data = get_json_body()
    event_id = parse_int(data.get("id"))
    if event_id is None:
        return error_response("Event id is required", 400)

    event = db.session.get(Event, event_id)
    if not event:
        return error_response("Event not found", 404)

    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            return error_response("Event name is required", 400)
        event.name = name

    if "year" in data:
        year = parse_int(data.get("year"))
        if year is None:
            return error_response("Year must be an integer", 400)
        event.year = year

    if "event_type" in data:
        if data["event_type"] not in EVENT_TYPES:
            return error_response(f"event_type must be one of {', '.join(EVENT_TYPES)}", 400)
        event.event_type = data["event_type"]

    if "status" in data:
        if data["status"] not in EVENT_STATUSES:
            return error_response(f"status must be one of {', '.join(EVENT_STATUSES)}", 400)
        event.status = data["status"]

    if "start_time" in data:
        try:
            event.start_time = parse_datetime(data.get("start_time"))
        except ValueError:
            return error_response("Invalid start_time", 400)

    if "metadata" in data:
        event.event_metadata = data.get("metadata")

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating event {event_id}: {e}")
        return error_response("Failed to update event", 500)

    return jsonify({"success": True, "event": event.to_dict()})


@bp.route("/events/<int:event_id>/complete", methods=["POST"])
def complete_event(event_id):
    event = db.session.get(Event, event_id)
    if not event:
        return error_response("Event not found", 404)

    try:
        previous_status = event.mark_completed()
        AuditLog.log_action(
            "mark_event_complete",
            actor_email=get_actor_email(),
            target_type="event",
            target_id=event.id,
            metadata={"previous_status": previous_status},
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error completing event {event_id}: {e}")
        return error_response("Failed to mark event complete", 500)

    invalidate_results_cache(f"event {event_id} completed")
    return jsonify({"success": True, "event": event.to_dict()})


@bp.route("/events/clone", methods=["POST"])
def clone():
    """Copy an event's categories and options into a new upcoming event"""
    data = get_json_body()

    source_id = parse_int(data.get("eventId"))
    if source_id is None:
        return error_response("eventId is required", 400)

    new_year = None
    if data.get("newYear") is not None:
        new_year = parse_int(data.get("newYear"))
        if new_year is None:
            return error_response("newYear must be an integer", 400)

    try:
        new_start_time = parse_datetime(data.get("newStartTime"))
    except ValueError:
        return error_response("Invalid newStartTime", 400)

    new_name = (data.get("newName") or "").strip() or None

    try:
        result, message = clone_event(
            source_id,
            new_year=new_year,
            new_start_time=new_start_time,
            new_name=new_name,
        )
        if not result:
            return error_response(message, 404)

        new_event = result["event"]
        AuditLog.log_action(
            "clone_event",
            actor_email=get_actor_email(),
            target_type="event",
            target_id=new_event.id,
            metadata={
                "source_event_id": source_id,
                "categories_cloned": result["categories_cloned"],
                "categories_failed": result["categories_failed"],
            },
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error cloning event {source_id}: {e}")
        return error_response("Failed to clone event", 500)

    return jsonify(
        {
            "success": True,
            "event": new_event.to_dict(),
            "categoriesCloned": result["categories_cloned"],
            "categoriesFailed": result["categories_failed"],
        }
    )


@bp.route("/events/<int:event_id>/eliminations")
def list_eliminations(event_id):
    eliminations = TeamElimination.query.filter_by(event_id=event_id).all()
    return jsonify({"eliminations": [e.to_dict() for e in eliminations]})


@bp.route("/events/<int:event_id>/eliminations", methods=["POST"])
def set_elimination(event_id):
    """Mark a team eliminated in a round, or alive again without a round"""
    data = get_json_body()

    team_id = parse_int(data.get("team_id"))
    if team_id is None:
        return error_response("team_id is required", 400)

    event = db.session.get(Event, event_id)
    if not event:
        return error_response("Event not found", 404)

    team = db.session.get(Team, team_id)
    if not team or team.event_id != event_id:
        return error_response("Team not found", 404)

    round_id = parse_int(data.get("eliminated_in_round_id"))
    if round_id is not None:
        round_ = db.session.get(Round, round_id)
        if not round_ or round_.event_id != event_id:
            return error_response("Round not found", 404)

    try:
        elimination = TeamElimination.set_elimination(event_id, team_id, round_id)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating elimination for team {team_id}: {e}")
        return error_response("Failed to update elimination", 500)

    return jsonify(
        {
            "success": True,
            "elimination": elimination.to_dict() if elimination else None,
        }
    )


@bp.route("/events/<int:event_id>/eliminations", methods=["DELETE"])
def clear_eliminations(event_id):
    try:
        cleared = TeamElimination.clear_for_event(event_id)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error clearing eliminations for event {event_id}: {e}")
        return error_response("Failed to clear eliminations", 500)

    return jsonify({"success": True, "cleared": cleared})


@bp.route("/events/<int:event_id>/podium")
@cached_route(timeout=300, key_prefix="podium")
def podium(event_id):
    """Top three entries across every pool of the event"""
    if not db.session.get(Event, event_id):
        return {"error": "Event not found"}, 404

    return {"eventId": event_id, "podium": get_event_podium(event_id)}
