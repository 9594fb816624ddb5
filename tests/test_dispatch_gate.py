import pytest

from conftest import at
from dispatch_console.dispatch_gate import block_message, can_dispatch, evaluate_dispatch, is_timing_rejection
from dispatch_console.meal_window import has_window_ended
from dispatch_console.models import MealWindow

TIMES = [at(h, m) for h in range(0, 24, 3) for m in (0, 59)] + [at(14, 59), at(15, 0)]


@pytest.mark.parametrize("now", TIMES)
@pytest.mark.parametrize("window", list(MealWindow))
def test_force_always_allows(lunch_only_hours, window, now):
    assert can_dispatch(lunch_only_hours, window, now, True) is True


@pytest.mark.parametrize("now", TIMES)
def test_without_force_gate_follows_clock(full_hours, now):
    for window in MealWindow:
        assert can_dispatch(full_hours, window, now, False) == has_window_ended(full_hours, window, now)


def test_lunch_before_end_is_blocked(lunch_only_hours):
    assert can_dispatch(lunch_only_hours, MealWindow.LUNCH, at(14, 59), False) is False


def test_lunch_at_end_is_allowed(lunch_only_hours):
    assert can_dispatch(lunch_only_hours, MealWindow.LUNCH, at(15, 0), False) is True


def test_unconfigured_dinner_is_closed_unless_forced(lunch_only_hours):
    now = at(23, 30)
    assert can_dispatch(lunch_only_hours, MealWindow.DINNER, now, False) is False
    assert can_dispatch(lunch_only_hours, MealWindow.DINNER, now, True) is True


def test_evaluate_dispatch_carries_block_details(lunch_only_hours):
    decision = evaluate_dispatch(lunch_only_hours, MealWindow.LUNCH, at(14, 45))
    assert decision.allowed is False
    assert decision.forced is False
    assert decision.end_time == "3:00 PM"
    assert decision.remaining == "15m"

    message = block_message(decision, MealWindow.LUNCH)
    assert "after 3:00 PM (lunch window end time)" in message
    assert "Time remaining: 15m" in message


def test_evaluate_dispatch_forced(lunch_only_hours):
    decision = evaluate_dispatch(lunch_only_hours, MealWindow.LUNCH, at(12, 0), force_dispatch=True)
    assert decision.allowed is True
    assert decision.forced is True


def test_timing_rejection_requires_both_markers_and_400():
    message = "Meal window ends in 25 minutes. Use forceDispatch to override."
    assert is_timing_rejection(400, message) is True
    assert is_timing_rejection(500, message) is False
    assert is_timing_rejection(None, message) is False
    assert is_timing_rejection(400, "Meal window ends in 25 minutes") is False
    assert is_timing_rejection(400, "No batches to dispatch") is False
    assert is_timing_rejection(400, None) is False
