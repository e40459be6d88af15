"""
Jinja2 template filters.

Keeps filter logic out of the app factory so it can be unit-tested easily.
"""

from __future__ import annotations
from datetime import date, datetime

from plantpal.services.schedule import to_local_date


def relative_date(value, today: date | None = None):
    """Convert a date/datetime to relative format like 'today', 'yesterday', '3 days ago'."""
    if not value:
        return "Unknown"

    try:
        value = to_local_date(value)
    except (ValueError, TypeError, OverflowError):
        return value[:10] if isinstance(value, str) and len(value) >= 10 else value

    today = today or date.today()
    delta = (today - value).days

    if delta == 0:
        return "Today"
    elif delta == 1:
        return "Yesterday"
    elif delta < 0:
        return value.strftime("%b %d, %Y")
    elif delta < 7:
        return f"{delta} days ago"
    elif delta < 14:
        return "1 week ago"
    elif delta < 30:
        weeks = delta // 7
        return f"{weeks} weeks ago"
    elif delta < 60:
        return "1 month ago"
    else:
        # Fall back to formatted date for older entries
        return value.strftime("%b %d, %Y")


def watering_status(card: dict) -> str:
    """Card caption: 'Needs water today' or 'Next watering in N days'."""
    if card.get("needsWater"):
        return "Needs water today"
    days = max(0, int(card.get("daysLeft", 0)))
    return f"Next watering in {days} day{'' if days == 1 else 's'}"


def pluralize_days(count) -> str:
    """'1 day' / '7 days'."""
    return f"{count} day{'' if count == 1 else 's'}"
