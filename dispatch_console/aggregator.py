"""Client-side batch and order counts for one kitchen's day.

Pure reductions over already-fetched snapshots. Batch status is taken
verbatim from the server; no transition order is assumed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from dispatch_console.constant import READY_ORDER_STATUSES
from dispatch_console.models import Batch, BatchStatus, MealWindow, Order

TOTAL_KEY = "total"


@dataclass(frozen=True)
class WindowSummary:
    """Everything the statistics panel shows for one meal window."""

    window: MealWindow
    available_for_batching: int
    ready_to_dispatch: int
    by_status: dict[str, int]
    delivered: int
    failed: int


def batches_for_window(batches: Iterable[Batch], window: MealWindow) -> list[Batch]:
    return [batch for batch in batches if batch.meal_window == window]


def orders_available_for_batching(orders: Iterable[Order], window: MealWindow) -> int:
    return sum(
        1
        for order in orders
        if order.meal_window == window and order.status.value in READY_ORDER_STATUSES and not order.batch_id
    )


def batches_by_status(batches: Iterable[Batch], window: MealWindow) -> dict[str, int]:
    """Count per status for the window, zero counts included, plus ``total``."""
    counts = Counter(batch.status for batch in batches_for_window(batches, window))
    result = {status.value: counts.get(status, 0) for status in BatchStatus}
    result[TOTAL_KEY] = sum(counts.values())
    return result


def ready_to_dispatch_count(batches: Iterable[Batch], window: MealWindow) -> int:
    return sum(1 for batch in batches_for_window(batches, window) if batch.status is BatchStatus.COLLECTING)


def delivery_totals(batches: Iterable[Batch], window: MealWindow) -> tuple[int, int]:
    """Delivered and failed order totals across the window's batches."""
    delivered = 0
    failed = 0
    for batch in batches_for_window(batches, window):
        delivered += batch.total_delivered
        failed += batch.total_failed
    return (delivered, failed)


def window_breakdown(batches: Iterable[Batch]) -> dict[MealWindow, int]:
    counts = Counter(batch.meal_window for batch in batches)
    return {window: counts.get(window, 0) for window in MealWindow}


def summarize(orders: Iterable[Order], batches: Iterable[Batch], window: MealWindow) -> WindowSummary:
    batch_list = list(batches)
    delivered, failed = delivery_totals(batch_list, window)
    return WindowSummary(
        window=window,
        available_for_batching=orders_available_for_batching(orders, window),
        ready_to_dispatch=ready_to_dispatch_count(batch_list, window),
        by_status=batches_by_status(batch_list, window),
        delivered=delivered,
        failed=failed,
    )
