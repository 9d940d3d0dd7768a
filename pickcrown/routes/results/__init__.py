from flask import Blueprint

bp = Blueprint("results", __name__)

from pickcrown.routes.results import routes  # noqa: F401, E402
