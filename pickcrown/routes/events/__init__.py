from flask import Blueprint

bp = Blueprint("events", __name__)

from pickcrown.routes.events import routes  # noqa: F401, E402
