"""
Input validation and normalization.

Every path that creates a plant record (the add form, the import file and the
snapshot restored at startup) goes through ``normalize_plant`` so defaults and
coercions are applied in exactly one place.
"""

from __future__ import annotations
import math
import re
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from plantpal.constants import (
    DEFAULT_SUNLIGHT,
    DEFAULT_TYPE,
    DEFAULT_WATERING_FREQUENCY,
    MAX_WATERING_FREQUENCY,
    SAMPLE_IMAGES,
    UNNAMED_PLANT,
)
from plantpal.services.schedule import to_local_date
from plantpal.utils.errors import ValidationError

_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

MAX_NAME_LEN = 80
MAX_TYPE_LEN = 40
MAX_SUNLIGHT_LEN = 40
MAX_IMAGE_URL_LEN = 2048


def _soft_sanitize(text: Any, max_len: int) -> str:
    """
    Normalizes short free-text fields:
    - coerce to string and strip whitespace
    - bound length
    - remove control chars
    - collapse double spaces
    """
    if text is None:
        return ""
    t = str(text).strip()
    if not t:
        return ""
    t = t[:max_len]
    t = _CONTROL_CHARS_PATTERN.sub("", t)
    t = re.sub(r"[ \t]{2,}", " ", t)
    return t.strip()


def new_plant_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def coerce_frequency(value: Any) -> int:
    """
    Coerce to a positive whole number of days, falling back to the default.

    Values above MAX_WATERING_FREQUENCY are clamped to it.
    """
    if isinstance(value, bool) or value is None:
        return DEFAULT_WATERING_FREQUENCY
    if isinstance(value, int):
        days = value
    else:
        try:
            number = float(str(value).strip()) if isinstance(value, str) else float(value)
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_WATERING_FREQUENCY
        if not math.isfinite(number):
            return DEFAULT_WATERING_FREQUENCY
        days = int(number)
    if days < 1:
        return DEFAULT_WATERING_FREQUENCY
    return min(days, MAX_WATERING_FREQUENCY)


def coerce_timestamp(value: Any, fallback: str) -> str:
    """
    Keep a parseable date/timestamp as-is, otherwise use ``fallback``.

    Dates so close to the ends of the calendar that adding a watering interval
    (or shifting to local time) would overflow are treated as unparseable.
    """
    if isinstance(value, str) and value.strip():
        try:
            to_local_date(value) + timedelta(days=MAX_WATERING_FREQUENCY)
        except (ValueError, OverflowError, OSError):
            return fallback
        return value.strip()
    return fallback


def default_image(plant_type: str) -> str:
    return SAMPLE_IMAGES.get(plant_type, SAMPLE_IMAGES["default"])


def normalize_plant(partial: Mapping[str, Any], now: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a complete plant record from a loosely-typed mapping.

    Missing or invalid fields get defaults: a generated id, "Unnamed",
    type "unknown", a 7-day frequency, the current instant for
    ``lastWatered``/``createdAt`` and a type-keyed sample image. Unknown
    extra fields are dropped.

    Args:
        partial: Raw record (form data, imported element, restored snapshot)
        now: ISO timestamp used for missing dates (defaults to the current UTC instant)
    """
    now = now or utc_now_iso()

    raw_id = partial.get("id")
    plant_id = str(raw_id).strip() if raw_id not in (None, "") else ""

    plant_type = _soft_sanitize(partial.get("type"), MAX_TYPE_LEN).lower() or DEFAULT_TYPE
    image = _soft_sanitize(partial.get("image"), MAX_IMAGE_URL_LEN)

    return {
        "id": plant_id or new_plant_id(),
        "name": _soft_sanitize(partial.get("name"), MAX_NAME_LEN) or UNNAMED_PLANT,
        "type": plant_type,
        "wateringFrequency": coerce_frequency(partial.get("wateringFrequency")),
        "sunlight": _soft_sanitize(partial.get("sunlight"), MAX_SUNLIGHT_LEN),
        "lastWatered": coerce_timestamp(partial.get("lastWatered"), now),
        "image": image or default_image(plant_type),
        "createdAt": coerce_timestamp(partial.get("createdAt"), now),
    }


def validate_plant_form(form: Mapping[str, Any], now: Optional[str] = None) -> Dict[str, Any]:
    """
    Validate add-plant form data and return a normalized record.

    The form never supplies ``id`` or ``createdAt``; both are generated here.

    Raises:
        ValidationError: If the name is missing or blank.
    """
    name = _soft_sanitize(form.get("name"), MAX_NAME_LEN)
    if not name:
        raise ValidationError("Please give your plant a name.")

    now = now or utc_now_iso()
    return normalize_plant(
        {
            "name": name,
            "type": form.get("type"),
            "wateringFrequency": form.get("wateringFrequency"),
            "sunlight": form.get("sunlight") or DEFAULT_SUNLIGHT,
            "lastWatered": form.get("lastWatered") or date.today().isoformat(),
            "image": form.get("image"),
        },
        now=now,
    )
