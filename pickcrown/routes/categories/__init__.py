from flask import Blueprint

bp = Blueprint("categories", __name__)

from pickcrown.routes.categories import routes  # noqa: F401, E402
