"""Rendering helpers for batch, kitchen and statistics text."""

from __future__ import annotations

from datetime import datetime, timedelta

from rich.text import Text

from dispatch_console.aggregator import TOTAL_KEY, WindowSummary
from dispatch_console.constant import (
    BATCH_STATUS_LABELS,
    BATCH_STATUS_ORDER,
    BATCH_STATUS_STYLES,
    MEAL_WINDOW_STYLES,
)
from dispatch_console.dispatch_gate import DispatchDecision
from dispatch_console.models import Batch, DeliveryStats, Kitchen, MealWindow


def badge_style(status: str) -> str:
    """Return a consistent badge style for a batch status."""
    return BATCH_STATUS_STYLES.get(status, "bold #ffffff on #4b5563")


def status_label(status: str) -> str:
    return BATCH_STATUS_LABELS.get(status, status)


def window_badge(window: MealWindow) -> Text:
    return Text(f" {window.value} ", style=MEAL_WINDOW_STYLES[window.value])


def format_kitchen_label(kitchen: Kitchen) -> Text:
    text = Text(kitchen.name, style="bold")
    if kitchen.code:
        text.append(f"  {kitchen.code}", style="dim")
    return text


def format_batch_label(batch: Batch) -> Text:
    """Render a batch row with a colored status tag."""
    text = Text()
    text.append(f" {status_label(batch.status.value)} ", style=badge_style(batch.status.value))
    text.append(f" {batch.batch_number}", style="dim" if batch.status.is_terminal else "bold")
    text.append(f"  {batch.meal_window.value.title()}", style="dim")
    text.append(f"  {len(batch.order_ids)} orders")
    if batch.driver_id is not None and batch.driver_id.name:
        text.append(f"  {batch.driver_id.name}", style="italic")
    return text


def format_timestamp(value: datetime, now: datetime) -> str:
    """``Today 02:15 PM``, ``Yesterday 09:05 AM`` or ``Mar 04 02:15 PM``."""
    if value.tzinfo is not None and now.tzinfo is not None:
        value = value.astimezone(now.tzinfo)
    clock = value.strftime("%I:%M %p")
    if value.date() == now.date():
        return f"Today {clock}"
    if value.date() == (now - timedelta(days=1)).date():
        return f"Yesterday {clock}"
    return value.strftime("%b %d %I:%M %p")


def format_batch_details(batch: Batch, now: datetime) -> str:
    kitchen_name = batch.kitchen_id.name if batch.kitchen_id and batch.kitchen_id.name else "N/A"
    zone_name = batch.zone_id.name if batch.zone_id and batch.zone_id.name else "N/A"
    driver_name = batch.driver_id.name if batch.driver_id and batch.driver_id.name else "Not Assigned"

    lines = [
        f"Status: {status_label(batch.status.value)}",
        f"Meal Window: {batch.meal_window.value}",
        f"Kitchen: {kitchen_name}",
        f"Zone: {zone_name}",
        f"Driver: {driver_name}",
        f"Orders: {len(batch.order_ids)}",
        f"Delivered: {batch.total_delivered}",
        f"Failed: {batch.total_failed}",
        f"Created: {format_timestamp(batch.created_at, now)}",
    ]
    if batch.dispatched_at is not None:
        lines.append(f"Dispatched: {format_timestamp(batch.dispatched_at, now)}")
    if batch.completed_at is not None:
        lines.append(f"Completed: {format_timestamp(batch.completed_at, now)}")
    return "\n".join(lines)


def format_stats_panel(
    summary: WindowSummary,
    decision: DispatchDecision,
    stats: DeliveryStats | None,
) -> Text:
    """Availability tiles, the per-status grid and delivery performance."""
    text = Text()
    text.append_text(window_badge(summary.window))
    text.append(" Statistics\n\n", style="bold")

    text.append(f"Available for batching: {summary.available_for_batching}\n")
    text.append(f"Ready to dispatch:      {summary.ready_to_dispatch}")
    if not decision.allowed:
        text.append(f"  (in {decision.remaining})", style="dim")
    text.append("\n")
    text.append(f"Window ends:            {decision.end_time}\n\n")

    text.append(f"{summary.window.value} Batches (Today)\n", style="bold")
    for status in BATCH_STATUS_ORDER:
        text.append(" ● ", style=badge_style(status))
        text.append(f" {status_label(status):<12}{summary.by_status[status]:>4}\n")
    text.append(f"   {'Total':<12}{summary.by_status[TOTAL_KEY]:>4}\n", style="bold")
    text.append(f"   Delivered {summary.delivered}  Failed {summary.failed}\n")

    if stats is not None:
        text.append("\nDelivery Performance\n", style="bold")
        text.append(f"Orders {stats.total_orders}  ")
        text.append(f"Delivered {stats.successful_deliveries}  ", style="green")
        text.append(f"Failed {stats.failed_deliveries}  ", style="red")
        text.append(f"Success {round(stats.success_rate)}%\n")
        text.append(f"Avg {stats.avg_deliveries_per_batch:.1f} orders per batch", style="dim")
    return text


def window_bounds(total: int, rows: int, selected: int | None) -> tuple[int, int]:
    """Visible slice of a list that keeps the selected row near the middle."""
    if total <= 0:
        return (0, 0)

    rows = max(1, rows)
    if total <= rows:
        return (0, total)

    if selected is None:
        start = 0
    else:
        half = rows // 2
        start = selected - half
        start = max(0, start)
        start = min(start, total - rows)

    return (start, start + rows)
