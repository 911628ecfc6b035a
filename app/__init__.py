"""Flask application factory and initialization."""

import logging
import logging.config
from typing import Type

from flask import Flask, g
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import redis

from config.base import BaseConfig

# Initialize extensions
db = SQLAlchemy()
cors = CORS()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)
redis_client = None

INFRA_ERROR_MESSAGE = "Letter generation failed"


def setup_logging(app: Flask, log_format: str = "json") -> None:
    """Setup logging configuration for the application."""
    log_level = app.config.get("LOG_LEVEL", "INFO")

    if log_format == "json":
        # Structured JSON logging
        from pythonjsonlogger import jsonlogger

        handler = logging.StreamHandler()
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        # Service modules log through logging.getLogger(__name__)
        package_logger = logging.getLogger("app")
        if not package_logger.handlers:
            package_logger.addHandler(handler)
        package_logger.setLevel(getattr(logging, log_level))

    # Set log level
    app.logger.setLevel(getattr(logging, log_level))

    # Log application startup information
    app.logger.info(
        "Application initialized",
        extra={
            "environment": app.config.get("ENV", "development"),
            "debug": app.debug,
            "testing": app.testing,
        }
    )


def setup_redis(app: Flask) -> redis.Redis:
    """Setup Redis connection."""
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        app.logger.info("Redis disabled: no REDIS_URL configured")
        return None

    try:
        redis_conn = redis.from_url(redis_url, decode_responses=True)
        redis_conn.ping()
        app.logger.info(f"Redis connected: {redis_url}")
        return redis_conn
    except Exception as e:
        app.logger.error(f"Failed to connect to Redis: {e}")
        if app.config.get("ENV") == "production":
            raise
        return None


def setup_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from app.exceptions import RecruitmentError

    @app.errorhandler(RecruitmentError)
    def recruitment_error(error: RecruitmentError):
        """
        Domain errors. Guard failures return their own message; file and
        converter failures are logged in full and answered generically.
        """
        correlation_id = getattr(g, "request_id", None)

        if error.infrastructure:
            app.logger.error(
                f"{error.kind} [{correlation_id}]: {error.message}",
                extra={"correlation_id": correlation_id, "code": error.code, "details": error.details},
                exc_info=True,
            )
            return {
                "error": error.kind,
                "code": error.code,
                "message": INFRA_ERROR_MESSAGE,
                "status": error.status_code,
                "retryable": error.retryable,
                "correlation_id": correlation_id,
            }, error.status_code

        app.logger.warning(f"{error.kind} ({error.code}): {error.message}")
        return {
            "error": error.kind,
            "code": error.code,
            "message": error.message,
            "status": error.status_code,
            "details": error.details,
            "retryable": error.retryable,
        }, error.status_code

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return {
            "error": "Not Found",
            "message": "The requested resource was not found",
            "status": 404,
        }, 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        correlation_id = getattr(g, "request_id", None)
        original = getattr(error, "original_exception", None) or error
        app.logger.error(
            f"Internal server error [{correlation_id}]: {original}",
            exc_info=original if isinstance(original, BaseException) else True,
        )
        return {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "status": 500,
            "correlation_id": correlation_id,
        }, 500

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors."""
        return {
            "error": "Method Not Allowed",
            "message": "The HTTP method is not allowed for this resource",
            "status": 405,
        }, 405

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 errors."""
        return {
            "error": "Bad Request",
            "message": "The request was invalid",
            "status": 400,
        }, 400

    @app.errorhandler(413)
    def payload_too_large(error):
        return {
            "error": "Payload Too Large",
            "message": "Uploaded file exceeds the maximum request size",
            "status": 413,
        }, 413


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    from app.routes import api
    from app.routes import recruitment_routes
    from app.routes import salary_routes
    from app.routes import letter_routes

    # Health check, info
    app.register_blueprint(api.bp)

    # Hiring pipeline: jobs, applications, interviews, offers, employees
    app.register_blueprint(recruitment_routes.recruitment_bp)

    # Salary structures and snapshots
    app.register_blueprint(salary_routes.salary_bp)

    # Letter templates and generation
    app.register_blueprint(letter_routes.letter_bp)
    app.register_blueprint(letter_routes.uploads_bp)


def create_app(config: Type[BaseConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Configuration class to use. If None, uses environment-based config.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Load configuration
    if config is None:
        from config.settings import settings

        if settings.is_production:
            from config.production import ProductionConfig
            config = ProductionConfig
        elif settings.is_testing:
            from config.testing import TestingConfig
            config = TestingConfig
        else:
            from config.development import DevelopmentConfig
            config = DevelopmentConfig

    app.config.from_object(config)

    # Setup logging
    setup_logging(app, app.config.get("LOG_FORMAT", "json"))

    # Initialize extensions
    db.init_app(app)
    limiter.init_app(app)

    cors.init_app(app, resources={
        r"/*": {
            "origins": app.config.get("CORS_ORIGINS", ["*"]),
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": app.config.get("CORS_ALLOW_HEADERS", ["*"]),
            "expose_headers": app.config.get("CORS_EXPOSE_HEADERS", ["*"]),
            "supports_credentials": app.config.get("CORS_SUPPORTS_CREDENTIALS", True),
        }
    })

    # Setup Redis
    global redis_client
    redis_client = setup_redis(app)

    # Request id and request logging
    from app.middleware import register_middleware
    register_middleware(app)

    # Setup error handlers
    setup_error_handlers(app)

    # Register blueprints
    register_blueprints(app)

    # Note: Database tables are managed via Alembic migrations (python manage.py migrate)

    app.logger.info(
        "Flask application created",
        extra={
            "config": config.__name__,
            "database": app.config.get("SQLALCHEMY_DATABASE_URI", "").split("://")[0],
        }
    )

    return app


def get_db():
    """Get database instance."""
    return db


def get_redis():
    """Get Redis client instance."""
    return redis_client
