from flask import Blueprint

bp = Blueprint("seasons", __name__)

from pickcrown.routes.seasons import routes  # noqa: F401, E402
