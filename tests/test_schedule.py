from datetime import date, datetime, timedelta, timezone

import pytest

from plantpal.services.schedule import (
    days_until_next_watering,
    needs_watering_today,
    next_watering_date,
    parse_timestamp,
    to_local_date,
)
from tests.conftest import make_plant


def test_due_on_exact_day():
    plant = make_plant(lastWatered="2024-01-01", wateringFrequency=7)
    today = date(2024, 1, 8)
    assert next_watering_date(plant, today) == date(2024, 1, 8)
    assert needs_watering_today(plant, today) is True
    assert days_until_next_watering(plant, today) == 0


def test_not_due_three_days_left():
    plant = make_plant(lastWatered="2024-01-01", wateringFrequency=7)
    today = date(2024, 1, 5)
    assert needs_watering_today(plant, today) is False
    assert days_until_next_watering(plant, today) == 3


def test_overdue_is_negative_and_still_due():
    plant = make_plant(lastWatered="2024-01-01", wateringFrequency=7)
    today = date(2024, 1, 31)
    assert days_until_next_watering(plant, today) == -23
    assert needs_watering_today(plant, today) is True


def test_time_of_day_is_ignored():
    # Watered late in the evening still counts from that calendar day
    plant = make_plant(lastWatered="2024-01-01T23:59:00", wateringFrequency=1)
    assert next_watering_date(plant) == date(2024, 1, 2)
    assert needs_watering_today(plant, date(2024, 1, 2)) is True
    assert needs_watering_today(plant, date(2024, 1, 1)) is False


def test_today_accepts_datetime():
    plant = make_plant(lastWatered="2024-01-01", wateringFrequency=7)
    assert needs_watering_today(plant, datetime(2024, 1, 8, 6, 30)) is True


def test_utc_timestamp_is_truncated_in_local_time():
    value = "2024-03-10T12:00:00Z"
    expected = datetime(2024, 3, 10, 12, tzinfo=timezone.utc).astimezone().date()
    assert to_local_date(value) == expected


def test_parse_timestamp_is_always_aware():
    assert parse_timestamp("2024-01-01").tzinfo is not None
    assert parse_timestamp("2024-01-01T08:00:00.000Z").tzinfo is not None
    assert parse_timestamp(date(2024, 1, 1)).tzinfo is not None


@pytest.mark.parametrize("value", ["", "yesterday", None, 42])
def test_parse_timestamp_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_timestamp(value)


def test_due_matches_days_left_across_a_range_of_days():
    start = date(2024, 1, 1)
    for frequency in (1, 2, 7, 14, 30):
        plant = make_plant(lastWatered=start.isoformat(), wateringFrequency=frequency)
        for offset in range(-3, 40):
            today = start + timedelta(days=offset)
            assert needs_watering_today(plant, today) == (days_until_next_watering(plant, today) <= 0)


def test_next_date_increases_with_frequency():
    today = date(2024, 2, 1)
    dates = [
        next_watering_date(make_plant(wateringFrequency=f), today)
        for f in range(1, 31)
    ]
    assert all(a < b for a, b in zip(dates, dates[1:]))
