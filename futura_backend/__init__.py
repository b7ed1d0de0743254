# futura_backend/__init__.py
from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Optional

import click
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from .errors import register_error_handlers
from .extensions import db, jwt, migrate
from .services.broadcast import broadcaster
from .utils.formatting import format_currency, formatted_date, humanize_key, short_date


# --- Config ------------------------------------------------------------------
def _get_allowed_origins() -> list[str]:
    """Allowed CORS origins from env plus the local dev servers."""
    default = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    extra = os.getenv("CORS_ALLOWED_ORIGINS", "")
    extra_list = [o.strip() for o in extra.split(",") if o.strip()]
    return sorted(set(default + extra_list))


def _configure_logging(app: Flask) -> None:
    """JSON logs to stdout."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    app.logger.setLevel(level)
    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers in reloaders
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='{"ts":"%(asctime)s","level":"%(levelname)s","msg":"%(message)s","name":"%(name)s"}',
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)


def _configure_cors(app: Flask) -> None:
    CORS(
        app,
        resources={r"/api/*": {"origins": _get_allowed_origins()}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        expose_headers=["Content-Type", "Content-Disposition"],
        max_age=86400,
    )


def _configure_proxy(app: Flask) -> None:
    """Respect X-Forwarded-* from the hosting proxy."""
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore


def _init_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    broadcaster.init_app(app)

    # make sure every model is registered on the metadata
    from . import models  # noqa: F401


def _register_blueprints(app: Flask) -> None:
    """Register all API blueprints under /api."""
    from .routes import (
        announcements_bp, appointments_bp, auth_bp, billing_bp, complaints_bp,
        contracts_bp, homeowners_bp, inquiries_bp, notifications_bp, properties_bp,
        reports_bp, reservations_bp, service_requests_bp, transactions_bp, users_bp,
    )

    prefix = app.config["API_PREFIX"]
    for bp in (
        auth_bp, users_bp, homeowners_bp, properties_bp, contracts_bp,
        billing_bp, complaints_bp, service_requests_bp, inquiries_bp,
        announcements_bp, appointments_bp, reservations_bp,
        transactions_bp, reports_bp, notifications_bp,
    ):
        app.register_blueprint(bp, url_prefix=prefix)
        app.logger.debug("Registered blueprint %s at %s", bp.name, prefix)


def _register_template_filters(app: Flask) -> None:
    app.add_template_filter(short_date, "short_date")
    app.add_template_filter(formatted_date, "formatted_date")
    app.add_template_filter(humanize_key, "humanize")
    app.add_template_filter(format_currency, "currency")


def _register_cli(app: Flask) -> None:
    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("password")
    @click.option("--name", default="Administrator")
    def create_admin(email, password, name):
        """Create or reset an admin account."""
        from .models import User

        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email)
            db.session.add(user)
        user.full_name = name
        user.role = "admin"
        user.is_active = True
        user.set_password(password)
        db.session.commit()
        click.echo(f"Admin ensured: {email}")


# --- Application Factory ------------------------------------------------------
def create_app(config_object: Optional[str | Any] = None) -> Flask:
    """
    Standard Flask application factory.

    `config_object` may be:
      - a config class
      - dotted path to a config class (e.g., "futura_backend.config.TestingConfig")
      - None (then CONFIG_CLASS env or futura_backend.config.Config)
    """
    app = Flask(__name__)

    if config_object is None:
        config_object = os.getenv("CONFIG_CLASS", "futura_backend.config.Config")
    app.config.from_object(config_object)
    app.config.setdefault("API_PREFIX", "/api")

    # Core middleware/logging/CORS
    _configure_logging(app)
    _configure_proxy(app)
    _configure_cors(app)

    _init_extensions(app)
    _register_blueprints(app)
    _register_template_filters(app)
    _register_cli(app)
    register_error_handlers(app)

    @app.get(app.config["API_PREFIX"] + "/health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "time": datetime.utcnow().isoformat() + "Z",
                "service": "futura-backend",
            }
        ), 200

    @app.get("/")
    def root():
        return jsonify({"service": "futura-backend", "message": "See /api/health"}), 200

    return app
