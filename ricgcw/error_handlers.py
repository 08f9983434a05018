from flask import Blueprint, current_app, jsonify
from werkzeug.exceptions import HTTPException

from .errors import (
    AppError,
    AuthenticationError,
    DuplicateResourceError,
    NotFoundError,
    ValidationError,
)

error_handlers_bp = Blueprint("error_handlers", __name__)


@error_handlers_bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    """Handles validation errors with a JSON error body."""
    current_app.logger.warning(f"Validation Error: {error.message}")
    return jsonify({"error": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(AuthenticationError)
def handle_authentication_error(error):
    """Handles failed logins; the SPA reads the message key."""
    current_app.logger.warning(f"Authentication Error: {error.message}")
    return jsonify({"message": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(DuplicateResourceError)
def handle_duplicate_resource_error(error):
    """Handles duplicate resource errors."""
    current_app.logger.warning(f"Duplicate Resource Error: {error.message}")
    return jsonify({"error": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(NotFoundError)
def handle_not_found_error(error):
    """Handles not found errors."""
    current_app.logger.warning(f"Not Found Error: {error.message}")
    return jsonify({"error": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles generic application errors."""
    current_app.logger.error(f"Application Error: {error.message}")
    return jsonify({"error": error.message}), error.status_code


@error_handlers_bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    """Handles werkzeug errors such as unknown routes or bad methods."""
    return jsonify({"error": e.description}), e.code


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors."""
    current_app.logger.error(f"Internal Server Error: {e}")
    return jsonify({"error": "Internal Server Error"}), 500
