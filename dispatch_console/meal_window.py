"""Meal-window clock: when does a kitchen's order-acceptance window end.

Every function takes ``now`` explicitly and never reads the wall clock.
A window without a configured end time never ends, so absent
configuration keeps dispatch closed.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta

from dispatch_console.constant import NOT_AVAILABLE, WINDOW_ENDED
from dispatch_console.models import ClockTime, MealWindow, OperatingHours, WindowHours


def _window_hours(hours: OperatingHours | None, window: MealWindow) -> WindowHours | None:
    if hours is None:
        return None
    if window is MealWindow.LUNCH:
        return hours.lunch
    return hours.dinner


def _now_minutes(now: datetime) -> int:
    return now.hour * 60 + now.minute


def window_end_time(hours: OperatingHours | None, window: MealWindow) -> ClockTime | None:
    """Return the configured end time for the window, or None."""
    configured = _window_hours(hours, window)
    if configured is None:
        return None
    hour_text, minute_text = configured.end_time.split(":")
    return ClockTime(hour=int(hour_text), minute=int(minute_text))


def has_window_ended(hours: OperatingHours | None, window: MealWindow, now: datetime) -> bool:
    end = window_end_time(hours, window)
    if end is None:
        return False
    return _now_minutes(now) >= end.minutes_since_midnight


def minutes_remaining(hours: OperatingHours | None, window: MealWindow, now: datetime) -> int | None:
    """Whole minutes until the window ends (0 once ended), None when unconfigured."""
    end = window_end_time(hours, window)
    if end is None:
        return None
    return max(0, end.minutes_since_midnight - _now_minutes(now))


def time_remaining(hours: OperatingHours | None, window: MealWindow, now: datetime) -> str:
    """Compact countdown such as ``"2h 15m"`` or ``"15m"``; ``"Now"`` once ended."""
    remaining = minutes_remaining(hours, window, now)
    if remaining is None:
        return NOT_AVAILABLE
    if remaining == 0:
        return WINDOW_ENDED

    hours_left, mins_left = divmod(remaining, 60)
    if hours_left > 0:
        return f"{hours_left}h {mins_left}m"
    return f"{mins_left}m"


def formatted_end_time(hours: OperatingHours | None, window: MealWindow) -> str:
    """12-hour rendering of the end time (``"3:00 PM"``), ``"N/A"`` when absent."""
    end = window_end_time(hours, window)
    if end is None:
        return NOT_AVAILABLE

    period = "PM" if end.hour >= 12 else "AM"
    display_hour = end.hour % 12 or 12
    return f"{display_hour}:{end.minute:02d} {period}"


def service_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Midnight at the start of ``now``'s day and the following midnight."""
    start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    return (start, start + timedelta(days=1))
