"""Routes for the main blueprint."""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify

from ricgcw.registry import collection_services
from ricgcw.utils import utcnow_iso

from . import bp


@bp.route("/health")
def health_check() -> Any:
    """Perform a simple health check."""
    return jsonify(
        {
            "status": "ok",
            "timestamp": utcnow_iso(),
            "env": current_app.config["APP_ENV"],
        }
    )


@bp.route("/")
def index() -> Any:
    """Describe the service and the collections it serves."""
    return jsonify(
        {
            "service": "RICGCW Backend",
            "status": "online",
            "collections": [service.collection for service in collection_services()],
        }
    )
