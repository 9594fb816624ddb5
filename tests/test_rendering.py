from datetime import datetime

from conftest import at, make_batch
from dispatch_console.aggregator import summarize
from dispatch_console.dispatch_gate import evaluate_dispatch
from dispatch_console.models import DeliveryStats, MealWindow
from dispatch_console.rendering import (
    format_batch_details,
    format_batch_label,
    format_stats_panel,
    format_timestamp,
    status_label,
    window_bounds,
)


def test_format_timestamp_relative_days():
    now = datetime(2026, 10, 19, 18, 0)
    assert format_timestamp(datetime(2026, 10, 19, 14, 15), now) == "Today 02:15 PM"
    assert format_timestamp(datetime(2026, 10, 18, 9, 5), now) == "Yesterday 09:05 AM"
    assert format_timestamp(datetime(2026, 3, 4, 14, 15), now) == "Mar 04 02:15 PM"


def test_batch_details_lists_references_and_optional_timestamps():
    batch = make_batch(
        "DISPATCHED",
        "DINNER",
        orderIds=["o1", "o2", "o3"],
        totalDelivered=1,
        kitchenId={"_id": "k1", "name": "Central Kitchen"},
        driverId={"_id": "d1", "name": "Ravi", "phone": "555-0101"},
        createdAt="2026-10-19T18:05:00",
        dispatchedAt="2026-10-19T19:40:00",
    )

    details = format_batch_details(batch, datetime(2026, 10, 19, 20, 0))

    assert "Status: Dispatched" in details
    assert "Kitchen: Central Kitchen" in details
    assert "Zone: N/A" in details
    assert "Driver: Ravi" in details
    assert "Orders: 3" in details
    assert "Dispatched: Today 07:40 PM" in details
    assert "Completed:" not in details


def test_batch_label_shows_status_and_driver():
    batch = make_batch("PARTIAL_COMPLETE", "LUNCH", driverId={"_id": "d1", "name": "Asha"})
    plain = format_batch_label(batch).plain
    assert "Partial" in plain
    assert batch.batch_number in plain
    assert "Asha" in plain


def test_status_label_falls_back_to_raw_value():
    assert status_label("READY_FOR_DISPATCH") == "Ready"
    assert status_label("SOMETHING_NEW") == "SOMETHING_NEW"


def test_stats_panel_shows_countdown_only_while_blocked(lunch_only_hours):
    batches = [make_batch("COLLECTING", "LUNCH"), make_batch("CANCELLED", "LUNCH")]
    summary = summarize([], batches, MealWindow.LUNCH)
    stats = DeliveryStats(total_orders=10, successful_deliveries=9, failed_deliveries=1, success_rate=90.0)

    blocked = format_stats_panel(summary, evaluate_dispatch(lunch_only_hours, MealWindow.LUNCH, at(14, 0)), stats).plain
    assert "(in 1h 0m)" in blocked
    assert "Cancelled" in blocked
    assert "Success 90%" in blocked

    open_panel = format_stats_panel(summary, evaluate_dispatch(lunch_only_hours, MealWindow.LUNCH, at(16, 0)), None).plain
    assert "(in " not in open_panel
    assert "Delivery Performance" not in open_panel


def test_window_bounds_keeps_selection_visible():
    assert window_bounds(0, 5, None) == (0, 0)
    assert window_bounds(3, 5, 2) == (0, 3)
    assert window_bounds(20, 5, None) == (0, 5)
    assert window_bounds(20, 5, 10) == (8, 13)
    assert window_bounds(20, 5, 19) == (15, 20)
