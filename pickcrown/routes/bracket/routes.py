import logging

from flask import jsonify, request
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.forms.admin import RoundForm
from pickcrown.models import BracketPick, Event, Matchup, Round, Team, TeamElimination
from pickcrown.routes.bracket import bp
from pickcrown.services.results import set_matchup_winner
from pickcrown.utils.api_helpers import (
    error_response,
    first_form_error,
    get_json_body,
    invalid_body_response,
    parse_int,
)
from pickcrown.utils.cache_utils import invalidate_results_cache

logger = logging.getLogger(__name__)


def _required_event_id():
    event_id = parse_int(request.args.get("eventId"))
    if event_id is None:
        return None, error_response("eventId is required", 400)
    return event_id, None


# Teams


@bp.route("/teams")
def list_teams():
    event_id, error = _required_event_id()
    if error:
        return error

    teams = Team.get_all_for_event(event_id)
    return jsonify({"teams": [team.to_dict() for team in teams]})


@bp.route("/teams", methods=["POST"])
def create_team():
    data = get_json_body()
    event_id = parse_int(data.get("eventId"))
    name = (data.get("name") or "").strip()
    if event_id is None or not name:
        return error_response("eventId and name are required", 400)

    if not db.session.get(Event, event_id):
        return error_response("Event not found", 404)

    team = Team(
        event_id=event_id,
        name=name,
        seed=parse_int(data.get("seed")),
        conference=(data.get("conference") or "").strip() or None,
    )

    try:
        db.session.add(team)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating team: {e}")
        return error_response("Failed to create team", 500)

    return jsonify({"success": True, "team": team.to_dict()}), 201


@bp.route("/teams", methods=["PUT"])
def update_team():
    data = get_json_body()
    team_id = parse_int(data.get("id"))
    if team_id is None:
        return error_response("Team id is required", 400)

    team = db.session.get(Team, team_id)
    if not team:
        return error_response("Team not found", 404)

    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            return error_response("Team name is required", 400)
        team.name = name
    if "seed" in data:
        team.seed = parse_int(data.get("seed"))
    if "conference" in data:
        team.conference = (data.get("conference") or "").strip() or None

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating team {team_id}: {e}")
        return error_response("Failed to update team", 500)

    return jsonify({"success": True, "team": team.to_dict()})


@bp.route("/teams", methods=["DELETE"])
def delete_team():
    team_id = parse_int(request.args.get("id"))
    if team_id is None:
        return error_response("Team id is required", 400)

    team = db.session.get(Team, team_id)
    if not team:
        return error_response("Team not found", 404)

    in_matchup = Matchup.query.filter(
        or_(Matchup.team_a_id == team_id, Matchup.team_b_id == team_id)
    ).first()
    if in_matchup:
        return error_response("Team is still part of a matchup", 409)

    try:
        TeamElimination.query.filter_by(team_id=team_id).delete(synchronize_session=False)
        db.session.delete(team)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting team {team_id}: {e}")
        return error_response("Failed to delete team", 500)

    return jsonify({"success": True})


# Rounds


@bp.route("/rounds")
def list_rounds():
    event_id, error = _required_event_id()
    if error:
        return error

    rounds = Round.query.filter_by(event_id=event_id).order_by(Round.round_order).all()
    return jsonify({"rounds": [round_.to_dict() for round_ in rounds]})


@bp.route("/rounds", methods=["POST"])
def create_round():
    invalid = invalid_body_response()
    if invalid:
        return invalid

    form = RoundForm()
    if not form.validate():
        return error_response(first_form_error(form), 400)

    if not db.session.get(Event, form.eventId.data):
        return error_response("Event not found", 404)

    round_ = Round(
        event_id=form.eventId.data,
        name=form.name.data,
        round_order=form.round_order.data,
        points=form.points.data,
    )

    try:
        db.session.add(round_)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating round: {e}")
        return error_response("Failed to create round", 500)

    return jsonify({"success": True, "round": round_.to_dict()}), 201


@bp.route("/rounds", methods=["DELETE"])
def delete_round():
    round_id = parse_int(request.args.get("id"))
    if round_id is None:
        return error_response("Round id is required", 400)

    round_ = db.session.get(Round, round_id)
    if not round_:
        return error_response("Round not found", 404)

    if round_.matchups.first() is not None:
        return error_response("Round still has matchups", 409)

    try:
        TeamElimination.query.filter_by(eliminated_in_round_id=round_id).delete(
            synchronize_session=False
        )
        db.session.delete(round_)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting round {round_id}: {e}")
        return error_response("Failed to delete round", 500)

    return jsonify({"success": True})


# Matchups


@bp.route("/matchups")
def list_matchups():
    event_id, error = _required_event_id()
    if error:
        return error

    matchups = (
        Matchup.query.filter(Matchup.event_id == event_id)
        .join(Round, Round.id == Matchup.round_id)
        .order_by(Round.round_order, Matchup.id)
        .all()
    )
    return jsonify({"matchups": [matchup.to_dict() for matchup in matchups]})


@bp.route("/matchups", methods=["POST"])
def create_matchup():
    data = get_json_body()
    event_id = parse_int(data.get("eventId"))
    round_id = parse_int(data.get("roundId"))
    team_a_id = parse_int(data.get("teamAId"))
    team_b_id = parse_int(data.get("teamBId"))

    if None in (event_id, round_id, team_a_id, team_b_id):
        return error_response("All fields required", 400)

    if team_a_id == team_b_id:
        return error_response("A matchup needs two different teams", 400)

    if not db.session.get(Event, event_id):
        return error_response("Event not found", 404)

    round_ = db.session.get(Round, round_id)
    if not round_ or round_.event_id != event_id:
        return error_response("Round not found", 404)

    for team_id in (team_a_id, team_b_id):
        team = db.session.get(Team, team_id)
        if not team or team.event_id != event_id:
            return error_response(f"Team {team_id} not found", 404)

    matchup = Matchup(
        event_id=event_id,
        round_id=round_id,
        team_a_id=team_a_id,
        team_b_id=team_b_id,
    )

    try:
        db.session.add(matchup)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating matchup: {e}")
        return error_response("Failed to create matchup", 500)

    return jsonify({"success": True, "matchup": matchup.to_dict()}), 201


@bp.route("/matchups", methods=["PUT"])
def update_matchup():
    """Enter or clear the winner of a matchup"""
    data = get_json_body()
    matchup_id = parse_int(data.get("id"))
    if matchup_id is None:
        return error_response("Matchup id is required", 400)

    winner_id = parse_int(data.get("winnerTeamId"))
    if data.get("winnerTeamId") is not None and winner_id is None:
        return error_response("winnerTeamId must be an integer", 400)

    try:
        matchup, message = set_matchup_winner(matchup_id, winner_id)
        if not matchup:
            status = 404 if message == "not found" else 400
            return error_response(
                "Matchup not found" if status == 404 else message, status
            )

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating matchup {matchup_id}: {e}")
        return error_response("Failed to update matchup", 500)

    invalidate_results_cache(f"matchup {matchup_id} winner updated")
    return jsonify({"success": True, "matchup": matchup.to_dict()})


@bp.route("/matchups", methods=["DELETE"])
def delete_matchup():
    matchup_id = parse_int(request.args.get("id"))
    if matchup_id is None:
        return error_response("Matchup id is required", 400)

    matchup = db.session.get(Matchup, matchup_id)
    if not matchup:
        return error_response("Matchup not found", 404)

    try:
        BracketPick.query.filter_by(matchup_id=matchup_id).delete(
            synchronize_session=False
        )
        db.session.delete(matchup)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting matchup {matchup_id}: {e}")
        return error_response("Failed to delete matchup", 500)

    invalidate_results_cache(f"matchup {matchup_id} deleted")
    return jsonify({"success": True})
