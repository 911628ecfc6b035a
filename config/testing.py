"""Testing environment configuration."""

import os
import tempfile

from .base import BaseConfig


class TestingConfig(BaseConfig):
    """Testing environment configuration."""

    DEBUG = True
    TESTING = True

    SECRET_KEY = "test-secret-key"

    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    # SQLite uses a static pool; pool sizing options do not apply
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Session
    SESSION_COOKIE_SECURE = False

    # CORS - Allow all for testing
    CORS_ORIGINS = ["*"]

    # Logging
    LOG_LEVEL = "DEBUG"
    LOG_FORMAT = "text"

    # Rate limiting off so test suites can hammer endpoints
    RATELIMIT_ENABLED = False

    # Redis off unless a test database is given explicitly; locks and the
    # pipeline cache are skipped without it
    REDIS_URL = os.getenv("TEST_REDIS_URL", "")

    # Letter files go to a throwaway directory
    STORAGE_LOCAL_PATH = os.path.join(tempfile.gettempdir(), "hireflow-test-uploads")

    # Allowed Hosts
    ALLOWED_HOSTS = ["*"]
