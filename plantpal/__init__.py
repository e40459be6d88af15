"""
Application factory and global configuration.

Creates the Flask app, applies security headers (CSP), configures rate limiting
and CSRF, loads the plant store, registers blueprints, template filters and
CLI commands. This file keeps startup/config concerns together and avoids
domain logic here.
"""

from __future__ import annotations
import os
from flask import Flask, Response
from dotenv import load_dotenv  # <-- ensure .env is loaded for local dev
from .constants import MAX_WATERING_FREQUENCY, SAMPLE_IMAGES
from .extensions import csrf, limiter
from .routes.api import api_bp
from .routes.web import web_bp
from .services.persistence import Persistence
from .services.storage import get_store, init_storage


def _validate_production_security(app: Flask, cfg_path: str) -> None:
    """
    Validate critical security settings in production environments.

    Raises RuntimeError if production security requirements are not met.
    This prevents the app from starting with insecure configurations.

    Checks:
    - SESSION_COOKIE_SECURE must be True (cookies only over HTTPS)
    - SECRET_KEY must be set and strong (>= 32 characters)
    - DEBUG must be False (no debug mode in production)
    """
    is_production = "ProdConfig" in cfg_path
    is_test = app.config.get("TESTING", False)

    # Skip validation in test/dev environments
    if not is_production or is_test:
        return

    errors = []

    if not app.config.get("SESSION_COOKIE_SECURE", False):
        errors.append(
            "SESSION_COOKIE_SECURE must be True in production. "
            "Cookies must only be sent over HTTPS."
        )

    secret_key = app.config.get("SECRET_KEY", "")
    if not secret_key:
        errors.append(
            "SECRET_KEY is not set. Set FLASK_SECRET_KEY environment variable. "
            "Generate with: python -c 'import secrets; print(secrets.token_hex(32))'"
        )
    elif len(secret_key) < 32:
        errors.append(
            f"SECRET_KEY is too weak ({len(secret_key)} chars). "
            "Must be at least 32 characters for production security."
        )

    if app.config.get("DEBUG", False):
        errors.append(
            "DEBUG must be False in production. Debug mode exposes sensitive information."
        )

    if errors:
        error_msg = "\n\n[ERROR] PRODUCTION SECURITY VALIDATION FAILED:\n\n" + "\n\n".join(f"  * {err}" for err in errors)
        error_msg += "\n\n[WARNING] The application will not start until these security issues are resolved.\n"
        raise RuntimeError(error_msg)

    app.logger.info("[OK] Production security validation passed")


def create_app(config_object: str | None = None, backend: Persistence | None = None) -> Flask:
    # Load .env early (for local dev)
    # override=False so production env vars are not overwritten by a stale .env file
    load_dotenv(override=False)

    app = Flask(
        __name__,
        static_folder="static",
        template_folder="templates",
    )

    # --- Load central config.py first ---
    # Allow APP_CONFIG to override (e.g., plantpal.config.DevConfig)
    cfg_path = config_object or os.getenv("APP_CONFIG", "plantpal.config.ProdConfig")
    try:
        app.config.from_object(cfg_path)
    except (ImportError, AttributeError) as e:
        app.logger.warning(f"Could not load config object {cfg_path}: {e}")

    _validate_production_security(app, cfg_path)

    limiter.init_app(app)

    if not app.config.get("RATELIMIT_ENABLED", True):
        limiter.enabled = False

    if not app.secret_key:
        app.secret_key = app.config.get("SECRET_KEY", "")

    csrf.init_app(app)
    # JSON API relies on the X-Requested-With check in routes/api.py instead of form tokens
    csrf.exempt(api_bp)

    # Load plants and theme from the configured key-value backend
    init_storage(app, backend)

    @app.context_processor
    def inject_theme():
        return {
            "theme": get_store().theme,
            "fallback_image": SAMPLE_IMAGES["default"],
            "max_frequency": MAX_WATERING_FREQUENCY,
        }

    # ---- Content Security Policy ----
    # Plant images are arbitrary user-supplied HTTPS URLs
    csp = (
        "default-src 'self'; "
        "script-src 'self'; "
        "style-src 'self'; "
        "img-src 'self' data: https:; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'; "
        "form-action 'self'"
    )

    @app.after_request
    def apply_security_headers(resp: Response) -> Response:
        resp.headers["Content-Security-Policy"] = csp
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        resp.headers["X-Frame-Options"] = "DENY"
        return resp

    # Blueprints
    app.register_blueprint(web_bp)
    app.register_blueprint(api_bp, url_prefix="/api/v1")

    # Register Jinja filters (defined in plantpal/utils/filters.py for testability)
    from .utils.filters import pluralize_days, relative_date, watering_status
    app.jinja_env.filters["relative_date"] = relative_date
    app.jinja_env.filters["watering_status"] = watering_status
    app.jinja_env.filters["pluralize_days"] = pluralize_days

    # Register CLI commands
    from .cli import due_plants_command, export_plants_command, import_plants_command
    app.cli.add_command(export_plants_command)
    app.cli.add_command(import_plants_command)
    app.cli.add_command(due_plants_command)

    return app
