"""Per-kitchen snapshots and the batch/dispatch action flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from dispatch_console.aggregator import WindowSummary, summarize
from dispatch_console.api import ApiError, DeliveryApiClient
from dispatch_console.dispatch_gate import DispatchDecision, block_message, evaluate_dispatch, is_timing_rejection
from dispatch_console.meal_window import service_day_bounds
from dispatch_console.models import Batch, DeliveryStats, Kitchen, MealWindow, Order

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    SUCCESS = "SUCCESS"
    TIMING_BLOCKED = "TIMING_BLOCKED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ActionOutcome:
    """How a mutating action ended. Exactly one kind per attempt."""

    kind: OutcomeKind
    title: str
    message: str
    decision: DispatchDecision | None = None

    @property
    def needs_refresh(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def can_force(self) -> bool:
        return self.kind is OutcomeKind.TIMING_BLOCKED


def auto_batch_message(batches_created: int, batches_updated: int, orders_processed: int) -> str:
    if batches_updated > 0:
        return (
            f"{batches_created} new batches created, "
            f"{batches_updated} batches updated with {orders_processed} orders"
        )
    return f"{batches_created} batches created with {orders_processed} orders"


class KitchenSession:
    """Latest fetched orders, batches and stats for one kitchen.

    The refresh methods each replace one snapshot and may run
    concurrently with one another.
    """

    def __init__(self, client: DeliveryApiClient, kitchen: Kitchen) -> None:
        self.client = client
        self.kitchen = kitchen
        self.orders: list[Order] = []
        self.batches: list[Batch] = []
        self.stats: DeliveryStats | None = None

    @property
    def kitchen_id(self) -> str:
        return self.kitchen.id

    def reload_kitchen(self) -> Kitchen:
        self.kitchen = self.client.get_kitchen(self.kitchen_id)
        return self.kitchen

    def refresh_orders(self, now: datetime) -> list[Order]:
        day_start, day_end = service_day_bounds(now)
        orders: list[Order] = []
        page_number = 1
        while True:
            page = self.client.get_orders(self.kitchen_id, date_from=day_start, date_to=day_end, page=page_number)
            orders.extend(page.orders)
            if not page.orders or page.pagination is None or page_number >= page.pagination.pages:
                break
            page_number += 1
        self.orders = orders
        logger.debug("orders_refreshed kitchen=%s count=%d", self.kitchen_id, len(self.orders))
        return self.orders

    def refresh_batches(self, now: datetime) -> list[Batch]:
        # Both windows are fetched together so switching windows needs no round-trip.
        day_start, day_end = service_day_bounds(now)
        page = self.client.get_batches(kitchen_id=self.kitchen_id, date_from=day_start, date_to=day_end)
        self.batches = page.batches
        logger.debug("batches_refreshed kitchen=%s count=%d", self.kitchen_id, len(self.batches))
        return self.batches

    def refresh_stats(self, now: datetime) -> DeliveryStats:
        day_start, day_end = service_day_bounds(now)
        self.stats = self.client.get_delivery_stats(kitchen_id=self.kitchen_id, date_from=day_start, date_to=day_end)
        return self.stats

    def summary(self, window: MealWindow) -> WindowSummary:
        return summarize(self.orders, self.batches, window)

    def dispatch_decision(self, window: MealWindow, now: datetime, force_dispatch: bool = False) -> DispatchDecision:
        return evaluate_dispatch(self.kitchen.operating_hours, window, now, force_dispatch)

    def auto_batch(self, window: MealWindow) -> ActionOutcome:
        logger.info("auto_batch_request kitchen=%s window=%s", self.kitchen_id, window.value)
        try:
            result = self.client.auto_batch_orders(window, self.kitchen_id)
        except ApiError as exc:
            logger.warning("auto_batch_failed kitchen=%s error=%r", self.kitchen_id, exc.message)
            return ActionOutcome(OutcomeKind.FAILED, "Error", exc.message or "Failed to create batches")

        logger.info(
            "auto_batch_done kitchen=%s created=%d updated=%d processed=%d",
            self.kitchen_id,
            result.batches_created,
            result.batches_updated,
            result.orders_processed,
        )
        message = auto_batch_message(result.batches_created, result.batches_updated, result.orders_processed)
        return ActionOutcome(OutcomeKind.SUCCESS, "Success", message)

    def dispatch(self, window: MealWindow, now: datetime, force_dispatch: bool = False) -> ActionOutcome:
        decision = self.dispatch_decision(window, now, force_dispatch)
        if not decision.allowed:
            logger.info(
                "dispatch_blocked kitchen=%s window=%s remaining=%r", self.kitchen_id, window.value, decision.remaining
            )
            return ActionOutcome(OutcomeKind.TIMING_BLOCKED, "Cannot Dispatch Yet", block_message(decision, window), decision)

        logger.info("dispatch_request kitchen=%s window=%s force=%s", self.kitchen_id, window.value, force_dispatch)
        try:
            result = self.client.dispatch_batches(window, self.kitchen_id, force_dispatch=force_dispatch)
        except ApiError as exc:
            if is_timing_rejection(exc.status_code, exc.message):
                logger.info("dispatch_rejected_timing kitchen=%s message=%r", self.kitchen_id, exc.message)
                return ActionOutcome(OutcomeKind.TIMING_BLOCKED, "Cannot Dispatch Yet", exc.message, decision)
            logger.warning("dispatch_failed kitchen=%s error=%r", self.kitchen_id, exc.message)
            return ActionOutcome(OutcomeKind.FAILED, "Error", exc.message or "Failed to dispatch batches")

        logger.info("dispatch_done kitchen=%s dispatched=%d", self.kitchen_id, result.batches_dispatched)
        return ActionOutcome(
            OutcomeKind.SUCCESS, "Success", f"{result.batches_dispatched} batches dispatched to drivers"
        )
