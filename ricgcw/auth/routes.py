from __future__ import annotations

from typing import Any

from flask import current_app, jsonify, request

from ricgcw.errors import AuthenticationError

from . import bp
from .services import Authenticator


def get_authenticator() -> Authenticator:
    """Return the authenticator installed on the running app."""
    return current_app.extensions["authenticator"]


@bp.route("/login", methods=["POST"])
def login() -> Any:
    """Check an email/password pair against the configured credential store."""
    data = request.get_json(silent=True) or {}
    email = data.get("email") if isinstance(data, dict) else None
    password = data.get("password") if isinstance(data, dict) else None

    account = None
    if isinstance(email, str) and isinstance(password, str):
        account = get_authenticator().authenticate(email, password)
    if account is None:
        raise AuthenticationError("Invalid credentials")

    current_app.logger.info(f"Login succeeded for {account.email} ({account.role})")
    return jsonify(account.to_login_response()), 200
