"""Dispatch gate: may a dispatch for (kitchen, meal window) proceed now."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from dispatch_console.constant import TIMING_REJECTION_MARKERS, TIMING_REJECTION_STATUS
from dispatch_console.meal_window import formatted_end_time, has_window_ended, time_remaining
from dispatch_console.models import MealWindow, OperatingHours


@dataclass(frozen=True)
class DispatchDecision:
    """Outcome of the gate plus the text needed to explain a block."""

    allowed: bool
    forced: bool
    end_time: str
    remaining: str


def can_dispatch(hours: OperatingHours | None, window: MealWindow, now: datetime, force_dispatch: bool) -> bool:
    """The only place the operator override is applied."""
    return force_dispatch or has_window_ended(hours, window, now)


def evaluate_dispatch(
    hours: OperatingHours | None, window: MealWindow, now: datetime, force_dispatch: bool = False
) -> DispatchDecision:
    return DispatchDecision(
        allowed=can_dispatch(hours, window, now, force_dispatch),
        forced=force_dispatch,
        end_time=formatted_end_time(hours, window),
        remaining=time_remaining(hours, window, now),
    )


def block_message(decision: DispatchDecision, window: MealWindow) -> str:
    return (
        f"Batches can only be dispatched after {decision.end_time} "
        f"({window.value.lower()} window end time).\n"
        f"Time remaining: {decision.remaining}"
    )


def is_timing_rejection(status_code: int | None, message: str | None) -> bool:
    """True when the backend refused a dispatch because the window is still open."""
    if status_code != TIMING_REJECTION_STATUS or not message:
        return False
    return all(marker in message for marker in TIMING_REJECTION_MARKERS)
