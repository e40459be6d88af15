"""
Centralized configuration for all environments.

Select a config by setting:
  APP_CONFIG=plantpal.config.DevConfig      # local dev
  APP_CONFIG=plantpal.config.ProdConfig     # production (default if unset)
  APP_CONFIG=plantpal.config.TestConfig     # pytest

Notes:
- SECRET_KEY is read from FLASK_SECRET_KEY
- Rate limiting uses Flask-Limiter v3 keys (RATELIMIT_*).
- Plants are stored in PLANTPAL_DATA_FILE (defaults to instance/plantpal.json)
"""

from __future__ import annotations
import os
import secrets

class BaseConfig:
    # Secrets & basics: generate a random key if env var is missing so dev/test
    # never runs with an empty string (production enforces a real key at startup)
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY") or secrets.token_hex(32)
    DEBUG = False
    TESTING = False

    # Session configuration (flash messages only, no login)
    SESSION_COOKIE_SECURE = True  # Only send cookies over HTTPS (overridden in dev)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Storage: "file" (JSON file on disk) or "memory" (lost on exit)
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file")
    PLANTPAL_DATA_FILE = os.getenv("PLANTPAL_DATA_FILE", "")

    # Flask-Limiter v3
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "120 per minute; 5000 per day")

    # Import uploads
    MAX_CONTENT_LENGTH = 4 * 1024 * 1024  # Hard request cap
    IMPORT_MAX_BYTES = 2 * 1024 * 1024  # Import files larger than this are rejected
    IMPORT_RATE_LIMIT = "20 per hour"

    # Misc
    PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "https")
    SEND_FILE_MAX_AGE_DEFAULT = int(os.getenv("SEND_FILE_MAX_AGE_DEFAULT", "3600"))

class ProdConfig(BaseConfig):
    """Production settings (selected by default if APP_CONFIG is unset)."""
    pass

class DevConfig(BaseConfig):
    """Developer-friendly settings."""
    ENV = "development"
    DEBUG = True
    TEMPLATES_AUTO_RELOAD = True
    # Disable aggressive static caching in dev
    SEND_FILE_MAX_AGE_DEFAULT = 0
    PREFERRED_URL_SCHEME = "http"
    # Allow cookies over HTTP in dev
    SESSION_COOKIE_SECURE = False
    IMPORT_RATE_LIMIT = "200 per hour"

class TestConfig(BaseConfig):
    """CI/pytest settings."""
    TESTING = True
    DEBUG = True
    # Usually disable the limiter in tests to avoid flakiness
    RATELIMIT_ENABLED = False
    # Form posts in tests don't carry a CSRF token
    WTF_CSRF_ENABLED = False
    STORAGE_BACKEND = "memory"
    SESSION_COOKIE_SECURE = False
    TEMPLATES_AUTO_RELOAD = True
    SEND_FILE_MAX_AGE_DEFAULT = 0
