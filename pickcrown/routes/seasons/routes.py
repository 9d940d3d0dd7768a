import logging

from flask import jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.forms.admin import SeasonForm
from pickcrown.models import Event, Season
from pickcrown.routes.seasons import bp
from pickcrown.services.standings import calculate_season_standings
from pickcrown.utils.api_helpers import (
    error_response,
    first_form_error,
    get_json_body,
    invalid_body_response,
    parse_int,
)

logger = logging.getLogger(__name__)


@bp.route("/seasons")
def list_seasons():
    """All seasons, or one season with its events when ?id= is given"""
    season_id = request.args.get("id")
    if season_id is not None:
        season = db.session.get(Season, parse_int(season_id) or 0)
        if not season:
            return error_response("Season not found", 404)
        return jsonify({"season": season.to_dict(include_events=True)})

    seasons = Season.query.order_by(Season.year.desc(), Season.id.desc()).all()
    return jsonify({"seasons": [season.to_dict() for season in seasons]})


@bp.route("/seasons/<int:season_id>/standings")
def season_standings(season_id):
    """Leaderboard totalled across the season's events"""
    season = db.session.get(Season, season_id)
    if not season:
        return error_response("Season not found", 404)

    return jsonify(
        {
            "season": season.to_dict(),
            "standings": calculate_season_standings(season_id),
        }
    )


@bp.route("/seasons", methods=["POST"])
def create_season():
    invalid = invalid_body_response()
    if invalid:
        return invalid

    form = SeasonForm()
    if not form.validate():
        return error_response(first_form_error(form), 400)

    try:
        season = Season.create_season(
            form.name.data, description=form.description.data, year=form.year.data
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating season: {e}")
        return error_response("Failed to create season", 500)

    return jsonify({"success": True, "season": season.to_dict()}), 201


@bp.route("/seasons", methods=["DELETE"])
def delete_season():
    """Delete a season; its events stay and lose their season"""
    season_id = parse_int(request.args.get("id"))
    if season_id is None:
        return error_response("Season id is required", 400)

    season = db.session.get(Season, season_id)
    if not season:
        return error_response("Season not found", 404)

    try:
        detached = season.delete()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting season {season_id}: {e}")
        return error_response("Failed to delete season", 500)

    logger.info(f"Deleted season {season_id}, detached {detached} events")
    return jsonify({"success": True, "eventsDetached": detached})


@bp.route("/seasons/events", methods=["POST"])
def add_event_to_season():
    data = get_json_body()
    season_id = parse_int(data.get("seasonId"))
    event_id = parse_int(data.get("eventId"))
    if season_id is None or event_id is None:
        return error_response("seasonId and eventId are required", 400)

    season = db.session.get(Season, season_id)
    if not season:
        return error_response("Season not found", 404)

    event = db.session.get(Event, event_id)
    if not event:
        return error_response("Event not found", 404)

    try:
        event.season_id = season.id
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error adding event {event_id} to season {season_id}: {e}")
        return error_response("Failed to add event to season", 500)

    return jsonify({"success": True, "event": event.to_dict()})


@bp.route("/seasons/events", methods=["DELETE"])
def remove_event_from_season():
    data = get_json_body()
    event_id = parse_int(data.get("eventId"))
    if event_id is None:
        return error_response("eventId is required", 400)

    event = db.session.get(Event, event_id)
    if not event:
        return error_response("Event not found", 404)

    try:
        event.season_id = None
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error removing event {event_id} from season: {e}")
        return error_response("Failed to remove event from season", 500)

    return jsonify({"success": True, "event": event.to_dict()})
