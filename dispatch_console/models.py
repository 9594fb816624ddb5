"""Domain models for the dispatch console.

Wire models mirror the delivery API's JSON (camelCase keys, ``_id``
identifiers) and are validated on the way in, so a payload that does not
match raises instead of being half-read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")

_HHMM_PATTERN = r"^([01]?\d|2[0-3]):[0-5]\d$"


class MealWindow(str, Enum):
    LUNCH = "LUNCH"
    DINNER = "DINNER"


class BatchStatus(str, Enum):
    COLLECTING = "COLLECTING"
    READY_FOR_DISPATCH = "READY_FOR_DISPATCH"
    DISPATCHED = "DISPATCHED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    PARTIAL_COMPLETE = "PARTIAL_COMPLETE"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_BATCH_STATUSES


TERMINAL_BATCH_STATUSES = frozenset(
    {BatchStatus.COMPLETED, BatchStatus.PARTIAL_COMPLETE, BatchStatus.CANCELLED}
)


class OrderStatus(str, Enum):
    PLACED = "PLACED"
    SCHEDULED = "SCHEDULED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    PREPARING = "PREPARING"
    READY = "READY"
    PICKED_UP = "PICKED_UP"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ClockTime:
    """A wall-clock time of day without a date."""

    hour: int
    minute: int

    @property
    def minutes_since_midnight(self) -> int:
        return self.hour * 60 + self.minute


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class WindowHours(WireModel):
    start_time: str = Field(pattern=_HHMM_PATTERN)
    end_time: str = Field(pattern=_HHMM_PATTERN)


class OnDemandHours(WireModel):
    """Always-open kitchens may save blank or missing times."""

    start_time: str | None = None
    end_time: str | None = None
    is_always_open: bool = False

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _times_when_scheduled(self) -> OnDemandHours:
        if self.is_always_open:
            return self
        for value in (self.start_time, self.end_time):
            if value is None or not re.match(_HHMM_PATTERN, value):
                raise ValueError("on-demand hours need HH:MM start and end times unless always open")
        return self


class OperatingHours(WireModel):
    lunch: WindowHours | None = None
    dinner: WindowHours | None = None
    on_demand: OnDemandHours | None = None


class Kitchen(WireModel):
    id: str = Field(alias="_id")
    name: str
    code: str = ""
    status: str | None = None
    operating_hours: OperatingHours = Field(default_factory=OperatingHours)


class EntityRef(WireModel):
    """A populated reference to another resource (kitchen, zone, driver)."""

    id: str = Field(alias="_id")
    name: str | None = None
    phone: str | None = None


class Batch(WireModel):
    id: str = Field(alias="_id")
    batch_number: str
    status: BatchStatus
    meal_window: MealWindow
    order_ids: list[str] = Field(default_factory=list)
    total_delivered: int = 0
    total_failed: int = 0
    kitchen_id: EntityRef | None = None
    zone_id: EntityRef | None = None
    driver_id: EntityRef | None = None
    created_at: datetime
    dispatched_at: datetime | None = None
    completed_at: datetime | None = None


class Order(WireModel):
    id: str = Field(alias="_id")
    order_number: str | None = None
    status: OrderStatus
    meal_window: MealWindow | None = None
    batch_id: str | None = None


class DeliveryStats(WireModel):
    total_orders: int = 0
    successful_deliveries: int = 0
    failed_deliveries: int = 0
    success_rate: float = 0.0
    avg_deliveries_per_batch: float = 0.0


class AutoBatchResult(WireModel):
    batches_created: int
    batches_updated: int = 0
    orders_processed: int


class DispatchResult(WireModel):
    batches_dispatched: int


class Pagination(WireModel):
    page: int
    limit: int
    total: int
    pages: int

    @property
    def has_more(self) -> bool:
        return self.page < self.pages


class KitchenPage(WireModel):
    kitchens: list[Kitchen]
    pagination: Pagination | None = None


class KitchenDetails(WireModel):
    kitchen: Kitchen


class OrderPage(WireModel):
    orders: list[Order]
    pagination: Pagination | None = None


class BatchPage(WireModel):
    batches: list[Batch]
    pagination: Pagination | None = None


class Envelope(WireModel, Generic[DataT]):
    """The ``{success, message, data, error}`` wrapper every endpoint returns."""

    success: bool = True
    message: str | None = None
    data: DataT
    error: Any = None
