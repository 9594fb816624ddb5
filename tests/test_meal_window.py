from datetime import datetime, timedelta, timezone

import pytest

from conftest import at
from dispatch_console.meal_window import (
    formatted_end_time,
    has_window_ended,
    minutes_remaining,
    service_day_bounds,
    time_remaining,
    window_end_time,
)
from dispatch_console.models import ClockTime, MealWindow, OperatingHours


def test_window_end_time_reads_configured_window(full_hours):
    assert window_end_time(full_hours, MealWindow.LUNCH) == ClockTime(15, 0)
    assert window_end_time(full_hours, MealWindow.DINNER) == ClockTime(21, 30)


def test_window_end_time_absent_for_missing_window(lunch_only_hours):
    assert window_end_time(lunch_only_hours, MealWindow.DINNER) is None
    assert window_end_time(None, MealWindow.LUNCH) is None
    assert window_end_time(OperatingHours(), MealWindow.LUNCH) is None


def test_lunch_one_minute_before_end(lunch_only_hours):
    now = at(14, 59)
    assert has_window_ended(lunch_only_hours, MealWindow.LUNCH, now) is False
    assert time_remaining(lunch_only_hours, MealWindow.LUNCH, now) == "1m"


def test_lunch_at_end_time(lunch_only_hours):
    now = at(15, 0)
    assert has_window_ended(lunch_only_hours, MealWindow.LUNCH, now) is True
    assert time_remaining(lunch_only_hours, MealWindow.LUNCH, now) == "Now"


def test_time_remaining_with_hours(lunch_only_hours):
    assert time_remaining(lunch_only_hours, MealWindow.LUNCH, at(12, 45)) == "2h 15m"
    assert time_remaining(lunch_only_hours, MealWindow.LUNCH, at(13, 0)) == "2h 0m"


def test_time_remaining_after_end_is_now_not_negative(lunch_only_hours):
    assert time_remaining(lunch_only_hours, MealWindow.LUNCH, at(23, 10)) == "Now"
    assert minutes_remaining(lunch_only_hours, MealWindow.LUNCH, at(23, 10)) == 0


@pytest.mark.parametrize("hour", range(24))
def test_missing_window_never_ends(lunch_only_hours, hour):
    for minute in (0, 30, 59):
        now = at(hour, minute)
        assert has_window_ended(lunch_only_hours, MealWindow.DINNER, now) is False
        assert has_window_ended(None, MealWindow.LUNCH, now) is False


def test_missing_window_renders_not_available(lunch_only_hours):
    assert formatted_end_time(lunch_only_hours, MealWindow.DINNER) == "N/A"
    assert time_remaining(lunch_only_hours, MealWindow.DINNER, at(20, 0)) == "N/A"
    assert minutes_remaining(lunch_only_hours, MealWindow.DINNER, at(20, 0)) is None


def test_remaining_never_increases_and_is_now_exactly_when_ended(full_hours):
    previous = None
    now = at(0, 0)
    while now.date() == at(0, 0).date():
        remaining = minutes_remaining(full_hours, MealWindow.DINNER, now)
        if previous is not None:
            assert remaining <= previous
        previous = remaining

        ended = has_window_ended(full_hours, MealWindow.DINNER, now)
        assert (time_remaining(full_hours, MealWindow.DINNER, now) == "Now") is ended
        now += timedelta(minutes=7)


@pytest.mark.parametrize(
    "end_time, expected",
    [
        ("15:00", "3:00 PM"),
        ("12:00", "12:00 PM"),
        ("00:05", "12:05 AM"),
        ("09:30", "9:30 AM"),
        ("23:59", "11:59 PM"),
    ],
)
def test_formatted_end_time_uses_twelve_hour_clock(end_time, expected):
    hours = OperatingHours.model_validate({"lunch": {"startTime": "00:00", "endTime": end_time}})
    assert formatted_end_time(hours, MealWindow.LUNCH) == expected


def test_service_day_bounds_keeps_timezone():
    tz = timezone(timedelta(hours=5, minutes=30))
    now = datetime(2026, 10, 19, 14, 5, 33, tzinfo=tz)
    start, end = service_day_bounds(now)
    assert start == datetime(2026, 10, 19, tzinfo=tz)
    assert end == datetime(2026, 10, 20, tzinfo=tz)


def test_always_open_on_demand_hours_do_not_affect_meal_windows():
    hours = OperatingHours.model_validate(
        {
            "lunch": {"startTime": "11:00", "endTime": "15:00"},
            "onDemand": {"startTime": "", "endTime": "", "isAlwaysOpen": True},
        }
    )
    assert hours.on_demand.end_time is None
    assert window_end_time(hours, MealWindow.LUNCH) == ClockTime(15, 0)
    assert has_window_ended(hours, MealWindow.LUNCH, at(15, 0)) is True
    assert window_end_time(hours, MealWindow.DINNER) is None
    assert time_remaining(hours, MealWindow.DINNER, at(23, 0)) == "N/A"
