"""Initialize the Flask app and its extensions."""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any, Optional

import firebase_admin
from firebase_admin import credentials
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .constants import DEFAULT_BIRTHDAY_LOCATION, DEFAULT_BIRTHDAY_LEAD_DAYS
from .extensions import cors

if TYPE_CHECKING:
    from .auth.services import Authenticator


def _split_env_list(value: Optional[str], default: list[str]) -> list[str]:
    """Split a comma-separated environment value, ignoring blank entries."""
    if not value:
        return default
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or default


def _initialize_firebase(app: Flask) -> None:
    """Initialize the Firebase Admin SDK from env, file or default credentials."""
    cred = None
    project_id = None
    cred_info: dict[str, Any] = {}

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # If both methods fail, fallback to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )

    if cred and not firebase_admin._apps:
        try:
            storage_bucket = os.environ.get("FIREBASE_STORAGE_BUCKET")
            if not storage_bucket and project_id:
                storage_bucket = f"{project_id}.firebasestorage.app"

            firebase_options = {"storageBucket": storage_bucket}
            if project_id:
                firebase_options["projectId"] = project_id

            firebase_admin.initialize_app(cred, firebase_options)
        except ValueError:
            # This can happen if the app is already initialized, which is fine.
            app.logger.info("Firebase app already initialized.")


def create_app(
    test_config: Optional[dict[str, Any]] = None,
    authenticator: Optional[Authenticator] = None,
) -> Flask:
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__, instance_relative_config=True)
    app.url_map.strict_slashes = False

    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        APP_ENV=os.environ.get("APP_ENV") or "development",
        LOG_LEVEL=(os.environ.get("LOG_LEVEL") or "INFO").upper(),
        CORS_ORIGINS=_split_env_list(os.environ.get("CORS_ORIGINS"), ["*"]),
        CHURCH_BRANCHES=_split_env_list(os.environ.get("CHURCH_BRANCHES"), ["main"]),
        AUTH_BACKEND=(os.environ.get("AUTH_BACKEND") or "static").lower(),
        AUTH_USERS_JSON=os.environ.get("AUTH_USERS_JSON"),
        AUTH_USERS_FILE=os.environ.get("AUTH_USERS_FILE"),
        BIRTHDAY_LEAD_DAYS=int(
            os.environ.get("BIRTHDAY_LEAD_DAYS") or DEFAULT_BIRTHDAY_LEAD_DAYS
        ),
        BIRTHDAY_EVENT_LOCATION=os.environ.get("BIRTHDAY_EVENT_LOCATION")
        or DEFAULT_BIRTHDAY_LOCATION,
        BIRTHDAY_SCHEDULE_TIMEZONE=os.environ.get("BIRTHDAY_SCHEDULE_TIMEZONE")
        or "UTC",
    )

    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize Firebase Admin SDK only if not in testing mode
    if not app.config.get("TESTING"):
        _initialize_firebase(app)

    cors.init_app(
        app,
        origins=app.config["CORS_ORIGINS"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        supports_credentials=True,
    )

    from .auth.services import build_authenticator

    if authenticator is None:
        authenticator = build_authenticator(app)
    app.extensions["authenticator"] = authenticator

    # Register blueprints
    from . import main as main_bp

    app.register_blueprint(main_bp.bp)

    from . import auth as auth_bp

    app.register_blueprint(auth_bp.bp)

    from . import members as members_bp

    app.register_blueprint(members_bp.bp)

    from .crud import create_collection_blueprint
    from .registry import collection_services

    for service in collection_services():
        app.register_blueprint(create_collection_blueprint(service))

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app
