"""The auth blueprint."""

from flask import Blueprint

bp = Blueprint("auth", __name__)

from . import routes  # noqa: E402

__all__ = ["routes"]
