from flask import Blueprint

bp = Blueprint("bracket", __name__)

from pickcrown.routes.bracket import routes  # noqa: F401, E402
