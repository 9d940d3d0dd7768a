import logging
import os

import redis
from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
cache = Cache()
migrate = Migrate()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    if request.headers.get("X-Forwarded-For"):
        # Leftmost address is the original client
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


# Use Redis for shared rate limiting across workers when it is reachable
limiter_storage_uri = "memory://"
redis_url = os.environ.get("REDIS_URL")
if redis_url:
    try:
        redis_client = redis.Redis.from_url(redis_url)
        redis_client.ping()
        limiter_storage_uri = redis_url
    except redis.exceptions.ConnectionError as e:
        logger.warning(f"Redis not available for rate limiter, using memory storage: {e}")

limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
    storage_uri=limiter_storage_uri,
)


def create_app(config_name=None):
    app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # Initialize extensions
    db.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Import and register blueprints
    from pickcrown.routes.events import bp as events_bp

    app.register_blueprint(events_bp, url_prefix="/api")

    from pickcrown.routes.pools import bp as pools_bp

    app.register_blueprint(pools_bp, url_prefix="/api")

    from pickcrown.routes.entries import bp as entries_bp

    app.register_blueprint(entries_bp, url_prefix="/api")

    from pickcrown.routes.bracket import bp as bracket_bp

    app.register_blueprint(bracket_bp, url_prefix="/api")

    from pickcrown.routes.categories import bp as categories_bp

    app.register_blueprint(categories_bp, url_prefix="/api")

    from pickcrown.routes.results import bp as results_bp

    app.register_blueprint(results_bp, url_prefix="/api")

    from pickcrown.routes.seasons import bp as seasons_bp

    app.register_blueprint(seasons_bp, url_prefix="/api")

    from pickcrown.routes.admin import bp as admin_bp

    app.register_blueprint(admin_bp, url_prefix="/api")

    from pickcrown.routes.email import bp as email_bp

    app.register_blueprint(email_bp, url_prefix="/api")

    register_error_handlers(app)

    from pickcrown.utils.logging_config import setup_logging

    setup_logging(app)

    show_config_warnings(app)

    with app.app_context():
        db.create_all()

    return app


def show_config_warnings(app):
    """Log configuration status at startup"""
    config_name = os.environ.get("FLASK_CONFIG", "default")

    app.logger.info(f"PickCrown starting with '{config_name}' configuration")

    if config_name == "production" and app.config.get("DEBUG"):
        app.logger.warning("DEBUG mode is enabled in production!")

    if not app.config.get("MAIL_SERVER"):
        app.logger.warning("MAIL_SERVER not configured - emails will not be sent")

    db_url = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if "sqlite" in db_url:
        app.logger.info("Using SQLite database")
    elif "postgresql" in db_url:
        app.logger.info("Using PostgreSQL database")
    else:
        app.logger.info(
            f"Using database: {db_url.split('://')[0] if '://' in db_url else 'Unknown'}"
        )


def register_error_handlers(app):
    """Register global error handlers"""

    @app.after_request
    def after_request(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        if not app.config.get("DEBUG"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        return jsonify({"error": "Bad request"}), 400

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return jsonify({"error": "Too many requests"}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500


from pickcrown import models  # noqa: F401, E402 - imported for model registration
