"""Shared fixtures and wire-shaped factories for the console tests."""

from __future__ import annotations

import itertools
from datetime import datetime

import pytest

from dispatch_console.models import Batch, Kitchen, OperatingHours, Order

_ids = itertools.count(1)


def at(hour: int, minute: int) -> datetime:
    """A fixed local wall-clock time on one service day."""
    return datetime(2026, 10, 19, hour, minute)


def make_batch(status: str, meal_window: str, **fields) -> Batch:
    n = next(_ids)
    payload = {
        "_id": f"batch-{n}",
        "batchNumber": f"B-{n:04d}",
        "status": status,
        "mealWindow": meal_window,
        "orderIds": [],
        "createdAt": "2026-10-19T11:30:00+00:00",
    }
    payload.update(fields)
    return Batch.model_validate(payload)


def make_order(status: str, meal_window: str | None, batch_id: str | None = None) -> Order:
    n = next(_ids)
    return Order.model_validate(
        {"_id": f"order-{n}", "orderNumber": f"ORD-{n}", "status": status, "mealWindow": meal_window, "batchId": batch_id}
    )


@pytest.fixture
def lunch_only_hours() -> OperatingHours:
    return OperatingHours.model_validate({"lunch": {"startTime": "11:00", "endTime": "15:00"}})


@pytest.fixture
def full_hours() -> OperatingHours:
    return OperatingHours.model_validate(
        {
            "lunch": {"startTime": "11:00", "endTime": "15:00"},
            "dinner": {"startTime": "18:00", "endTime": "21:30"},
            "onDemand": {"startTime": "00:00", "endTime": "23:59", "isAlwaysOpen": True},
        }
    )


@pytest.fixture
def kitchen(lunch_only_hours) -> Kitchen:
    return Kitchen.model_validate(
        {
            "_id": "kitchen-1",
            "name": "Central Kitchen",
            "code": "CK01",
            "status": "ACTIVE",
            "operatingHours": lunch_only_hours.model_dump(by_alias=True),
        }
    )
