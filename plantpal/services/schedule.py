"""
Watering schedule calculations.

Pure date arithmetic over plant records: when a plant next needs water,
how many days remain, and whether it is due. All comparisons happen on local
calendar dates. A ``lastWatered`` timestamp is truncated to its local date
before the watering interval is added, so date-only values (from the add form)
and full timestamps (from "mark watered") behave the same way.

Callers guarantee ``wateringFrequency`` is a positive integer; see
``plantpal.utils.validation.normalize_plant``.
"""

from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Union

TimestampLike = Union[str, date, datetime]


def parse_timestamp(value: TimestampLike) -> datetime:
    """
    Parse an ISO date or timestamp into a timezone-aware datetime.

    Date-only values mean local midnight. Naive timestamps are taken as local
    time. A trailing "Z" means UTC.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Not a timestamp: {value!r}")

    if parsed.tzinfo is None:
        # Naive values are local time
        parsed = parsed.astimezone()
    return parsed


def to_local_date(value: TimestampLike) -> date:
    """Truncate a date or timestamp to its local calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_timestamp(value).astimezone().date()


def _today(today: Optional[date]) -> date:
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return to_local_date(today)
    return today


def next_watering_date(plant: Dict[str, Any], today: Optional[date] = None) -> date:
    """Return the calendar date of the next watering: lastWatered + wateringFrequency days.

    ``today`` is accepted for a uniform signature; the result does not depend on it.
    """
    last = to_local_date(plant["lastWatered"])
    return last + timedelta(days=int(plant["wateringFrequency"]))


def days_until_next_watering(plant: Dict[str, Any], today: Optional[date] = None) -> int:
    """
    Days from ``today`` until the next watering.

    Negative when the plant is overdue, zero when it is due today.
    """
    return (next_watering_date(plant) - _today(today)).days


def needs_watering_today(plant: Dict[str, Any], today: Optional[date] = None) -> bool:
    """True if the next watering date is on or before ``today``."""
    return next_watering_date(plant) <= _today(today)
