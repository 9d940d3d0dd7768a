from flask import Blueprint

bp = Blueprint("pools", __name__)

from pickcrown.routes.pools import routes  # noqa: F401, E402
