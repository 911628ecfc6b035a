"""API routes for the application."""

from flask import Blueprint, jsonify, current_app, g
from datetime import datetime

from app.schemas import HealthCheckSchema, AppInfoSchema

bp = Blueprint("api", __name__, url_prefix="/api")

APP_NAME = "HireFlow Server"
APP_VERSION = "0.1.0"


def error_response(message: str, status: int = 400, details=None):
    """Create a standardized error response."""
    return jsonify({
        "error": "Error",
        "message": message,
        "status": status,
        "details": details,
    }), status


def validation_error_response(error):
    """400 response for a pydantic ValidationError."""
    return error_response(
        "Validation error",
        400,
        error.errors(include_url=False, include_context=False, include_input=False),
    )


@bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    schema = HealthCheckSchema(
        status="healthy",
        timestamp=datetime.utcnow(),
        environment=current_app.config.get("ENV", "development"),
    )
    return jsonify(schema.model_dump()), 200


@bp.route("/info", methods=["GET"])
def app_info():
    """Get application information."""
    schema = AppInfoSchema(
        name=APP_NAME,
        version=APP_VERSION,
        environment=current_app.config.get("ENV", "development"),
        debug=current_app.debug,
        timestamp=datetime.utcnow(),
    )
    return jsonify(schema.model_dump()), 200


@bp.route("/", methods=["GET"])
def root():
    """Root API endpoint."""
    return jsonify({
        "message": "Welcome to HireFlow API",
        "version": APP_VERSION,
        "endpoints": {
            "health": "/api/health",
            "info": "/api/info",
            "recruitment": "/api/recruitment",
            "salary": "/api/salary",
            "letters": "/api/letters",
        },
    }), 200


def internal_error_response(action: str, error: Exception):
    """Log an unexpected failure and answer with a generic 500 and correlation id."""
    correlation_id = getattr(g, "request_id", None)
    current_app.logger.error(f"Error {action} [{correlation_id}]: {error}", exc_info=True)
    return jsonify({
        "error": "Internal Server Error",
        "message": f"Failed {action}",
        "status": 500,
        "correlation_id": correlation_id,
    }), 500
