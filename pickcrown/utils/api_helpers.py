"""Small helpers shared by the API blueprints"""

from flask import jsonify, request


def get_actor_email():
    """Email of the admin performing the request, for the audit log"""
    return (request.headers.get("X-User-Email") or "system").strip().lower()


def get_json_body():
    """Request body as a dict; anything else becomes an empty dict"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def invalid_body_response():
    """400 response when a JSON body is not an object, otherwise None"""
    if request.is_json and not isinstance(request.get_json(silent=True), dict):
        return error_response("Invalid JSON body", 400)
    return None


def error_response(message, status):
    return jsonify({"error": message}), status


def first_form_error(form):
    """First validation message of a WTForms form"""
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return "Invalid input"


def parse_int(value):
    """Parse an id or number from JSON/query input, None when not an integer"""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
