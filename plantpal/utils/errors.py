"""
Error taxonomy and logging helpers.

Provides consistent error handling across the application:
- Typed errors raised by the store and import/export layer
- User-facing messages that never leak internal details
- Context-aware logging that works with or without an app context
"""

from __future__ import annotations
import logging
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

# User-friendly generic error messages
GENERIC_MESSAGES = {
    "storage": "Your plants could not be saved. Changes are kept until you close the app.",
    "validation": "The information provided is invalid. Please check and try again.",
    "import": "Failed to import plants. Please check the file and try again.",
}


class PlantPalError(Exception):
    """Base error carrying a message that is safe to show to the user."""

    error_type = "validation"

    def __init__(self, message: str | None = None):
        self.message = message or GENERIC_MESSAGES.get(self.error_type, GENERIC_MESSAGES["validation"])
        super().__init__(self.message)


class ValidationError(PlantPalError):
    """Required field missing or invalid when creating a record."""

    error_type = "validation"


class ParseError(PlantPalError):
    """Imported document is not well-formed JSON."""

    error_type = "import"


class ShapeError(PlantPalError):
    """Imported document is valid JSON but its top level is not an array."""

    error_type = "import"


class PersistenceError(PlantPalError):
    """Key-value backend failed to read or write."""

    error_type = "storage"


def _logger() -> logging.Logger:
    return current_app.logger if has_app_context() else logger


def sanitize_error(
    error: Exception,
    error_type: str = "storage",
    log_prefix: str = ""
) -> str:
    """
    Sanitize error message for user display and log full details.

    PlantPalError subclasses already carry a user-safe message and are
    returned as-is. Anything else is logged with its traceback and replaced by
    the generic message for ``error_type``.

    Args:
        error: The exception that occurred
        error_type: Type of error (storage, validation, import)
        log_prefix: Optional prefix for log message context

    Returns:
        User-friendly error message

    Examples:
        >>> try:
        ...     store.import_plants(raw)
        ... except Exception as e:
        ...     flash(sanitize_error(e, "import", "Import failed"), "error")
    """
    error_message = str(error)
    log_message = f"{log_prefix}: {error_message}" if log_prefix else error_message

    if isinstance(error, PlantPalError):
        # Expected errors (user mistakes), log as info
        _logger().info(f"Expected error - {log_message}")
        return error.message

    _logger().error(f"Unexpected error - {log_message}", exc_info=True)
    return GENERIC_MESSAGES.get(error_type, GENERIC_MESSAGES["storage"])


def _with_context(message: str, context: dict) -> str:
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        message = f"{message} | Context: {context_str}"
    return message


def log_warning(message: str, **context) -> None:
    """
    Log a warning with optional context.

    Examples:
        >>> log_warning("[Store] Snapshot write failed", key="plantpal_plants_v1")
    """
    _logger().warning(_with_context(message, context))


def log_info(message: str, **context) -> None:
    """
    Log an info message with optional context.

    Examples:
        >>> log_info("[Store] Plant added", plant_id="abc123", plant_name="Monstera")
    """
    _logger().info(_with_context(message, context))
