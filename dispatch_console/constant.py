"""Editable static display and status configuration."""

from __future__ import annotations

# Order statuses eligible for inclusion in a new batch.
READY_ORDER_STATUSES: tuple[str, ...] = ("PLACED", "ACCEPTED", "PREPARING", "READY")

# Display order for status tiles and history filters.
BATCH_STATUS_ORDER: tuple[str, ...] = (
    "COLLECTING",
    "READY_FOR_DISPATCH",
    "DISPATCHED",
    "IN_PROGRESS",
    "COMPLETED",
    "PARTIAL_COMPLETE",
    "CANCELLED",
)

BATCH_STATUS_LABELS: dict[str, str] = {
    "COLLECTING": "Collecting",
    "READY_FOR_DISPATCH": "Ready",
    "DISPATCHED": "Dispatched",
    "IN_PROGRESS": "In Progress",
    "COMPLETED": "Completed",
    "PARTIAL_COMPLETE": "Partial",
    "CANCELLED": "Cancelled",
}

BATCH_STATUS_STYLES: dict[str, str] = {
    "COLLECTING": "bold #3d2e00 on #fef3c7",
    "READY_FOR_DISPATCH": "bold #0b1f0f on #dcfce7",
    "DISPATCHED": "bold #0b1f3d on #dbeafe",
    "IN_PROGRESS": "bold #1e1b4b on #e0e7ff",
    "COMPLETED": "bold #064e3b on #d1fae5",
    "PARTIAL_COMPLETE": "bold #431407 on #fed7aa",
    "CANCELLED": "bold #450a0a on #fecaca",
}

MEAL_WINDOW_STYLES: dict[str, str] = {
    "LUNCH": "bold #0b1f0f on #5fbf72",
    "DINNER": "bold #ffffff on #b23a48",
}

# Filter chips for the history screen: (label, value). "ALL" means no filter.
HISTORY_STATUS_FILTERS: tuple[tuple[str, str], ...] = (("All", "ALL"),) + tuple(
    (BATCH_STATUS_LABELS[status], status) for status in BATCH_STATUS_ORDER
)

HISTORY_MEAL_WINDOW_FILTERS: tuple[tuple[str, str], ...] = (
    ("All", "ALL"),
    ("Lunch", "LUNCH"),
    ("Dinner", "DINNER"),
)

# The backend's dispatch timing rejection is recognised by these fragments.
TIMING_REJECTION_STATUS = 400
TIMING_REJECTION_MARKERS: tuple[str, ...] = ("Meal window ends in", "forceDispatch")

NOT_AVAILABLE = "N/A"
WINDOW_ENDED = "Now"
