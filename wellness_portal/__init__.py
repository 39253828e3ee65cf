"""
Application factory for the Student Wellness Portal.

This module provides a function to create and configure the Flask
application. All extensions (SQLAlchemy, Migrate, JWT) are initialised
here. Individual blueprints for the different parts of the API are
registered inside the factory to allow for modular development and
unit testing.

Environment variables control the database connection, the secret key
and logging. In production set ``DATABASE_URL`` and ``JWT_SECRET_KEY``
in your environment. A default configuration is provided for
development, using SQLite when no database URL is available.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta

from flask import Flask
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager

# instantiate extensions without binding them to an app yet.  They will
# be bound in create_app().
from .db import db  # use shared db object from db.py
migrate = Migrate()
jwt = JWTManager()


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("wellness_portal").setLevel(level)


def create_app(test_config: dict | None = None) -> Flask:
    """Create and configure a Flask application.

    Parameters
    ----------
    test_config: dict | None, optional
        Optional configuration overrides used when running tests.

    Returns
    -------
    Flask
        A configured Flask application instance.
    """
    app = Flask(__name__)

    # Default configuration. Override using environment variables or
    # by passing a ``test_config`` mapping.
    app.config.update(
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", "sqlite:///wellness_portal.db"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JWT_SECRET_KEY=os.environ.get("JWT_SECRET_KEY", "please-change-this-secret-key"),
        JWT_ACCESS_TOKEN_EXPIRES=timedelta(days=int(os.environ.get("JWT_ACCESS_TOKEN_DAYS", "7"))),
        NOTIFICATION_COOLDOWN_HOURS=float(os.environ.get("NOTIFICATION_COOLDOWN_HOURS", "4")),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
    )

    if test_config:
        app.config.update(test_config)

    _configure_logging(app.config["LOG_LEVEL"])

    # Initialise extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # Register custom error handlers and JWT callbacks
    from .errors import register_error_handlers
    from .security import register_jwt_callbacks
    register_error_handlers(app)
    register_jwt_callbacks(jwt)

    # Register blueprints. Importing here avoids circular imports.
    from .routes.auth import auth_bp
    from .routes.profile import profile_bp
    from .routes.users import users_bp
    from .routes.appointments import appointments_bp
    from .routes.goals import goals_bp
    from .routes.mood import mood_bp
    from .routes.notifications import notifications_bp
    from .routes.resources import resources_bp
    from .routes.analytics import analytics_bp

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(profile_bp, url_prefix="/api")
    app.register_blueprint(users_bp, url_prefix="/api")
    app.register_blueprint(appointments_bp, url_prefix="/api")
    app.register_blueprint(goals_bp, url_prefix="/api")
    app.register_blueprint(mood_bp, url_prefix="/api")
    app.register_blueprint(notifications_bp, url_prefix="/api")
    app.register_blueprint(resources_bp, url_prefix="/api")
    app.register_blueprint(analytics_bp, url_prefix="/api")

    # Provide a simple health check route
    @app.route("/api/health")
    def health_check() -> dict[str, str]:
        """Return a simple health check response.

        This endpoint can be used by deployment platforms to verify
        that the application has started correctly.
        """
        return {"status": "ok"}

    return app
