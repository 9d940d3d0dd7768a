from flask import Blueprint

bp = Blueprint("email", __name__)

from pickcrown.routes.email import routes  # noqa: F401, E402
