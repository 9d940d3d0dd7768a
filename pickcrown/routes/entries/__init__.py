from flask import Blueprint

bp = Blueprint("entries", __name__)

from pickcrown.routes.entries import routes  # noqa: F401, E402
