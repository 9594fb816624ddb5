"""HTTP client for the delivery backend's kitchen, order and batch endpoints."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from dispatch_console.config import API_TIMEOUT_SECONDS, BATCH_FETCH_LIMIT, KITCHEN_FETCH_LIMIT, ORDER_FETCH_LIMIT
from dispatch_console.models import (
    AutoBatchResult,
    BatchPage,
    BatchStatus,
    DeliveryStats,
    DispatchResult,
    Envelope,
    Kitchen,
    KitchenDetails,
    KitchenPage,
    MealWindow,
    OrderPage,
    OrderStatus,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiError(Exception):
    """A request to the backend failed.

    ``status_code`` is None when no HTTP response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SchemaError(ApiError):
    """The backend answered, but not in the shape the endpoint promises."""


def _query_value(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _clean_params(params: dict[str, Any]) -> dict[str, str]:
    return {key: _query_value(value) for key, value in params.items() if value is not None}


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Request failed with status {response.status_code}"
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return f"Request failed with status {response.status_code}"


class DeliveryApiClient:
    """
    Typed access to the delivery REST API.

    Every endpoint answers with an envelope whose ``data`` member is
    validated against one model per endpoint.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = API_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(
        self,
        method: str,
        endpoint: str,
        model: type[ModelT],
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> ModelT:
        url = f"{self.base_url}{endpoint}"
        logger.debug("api_request method=%s url=%s params=%r body=%r", method, url, params, body)

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=_clean_params(params or {}),
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("api_transport_failed method=%s url=%s error=%r", method, url, exc)
            raise ApiError(f"Network error: {exc}") from exc

        if not response.ok:
            message = _error_message(response)
            logger.warning(
                "api_error method=%s url=%s status=%s message=%r", method, url, response.status_code, message
            )
            raise ApiError(message, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise SchemaError(f"{endpoint} returned a non-JSON body", status_code=response.status_code) from exc

        try:
            envelope = Envelope[model].model_validate(payload)
        except ValidationError as exc:
            logger.error("api_schema_mismatch url=%s errors=%s", url, exc.errors())
            raise SchemaError(
                f"{endpoint} returned an unexpected response: {exc.error_count()} validation error(s)",
                status_code=response.status_code,
            ) from exc

        return envelope.data

    def list_kitchens(self, status: str | None = "ACTIVE", limit: int = KITCHEN_FETCH_LIMIT) -> list[Kitchen]:
        page = self._request("GET", "/api/kitchens", KitchenPage, params={"status": status, "limit": limit})
        return page.kitchens

    def get_kitchen(self, kitchen_id: str) -> Kitchen:
        details = self._request("GET", f"/api/kitchens/{kitchen_id}", KitchenDetails)
        return details.kitchen

    def get_orders(
        self,
        kitchen_id: str,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        status: OrderStatus | None = None,
        meal_window: MealWindow | None = None,
        page: int | None = None,
        limit: int = ORDER_FETCH_LIMIT,
    ) -> OrderPage:
        params = {
            "kitchenId": kitchen_id,
            "dateFrom": date_from,
            "dateTo": date_to,
            "status": status,
            "mealWindow": meal_window,
            "page": page,
            "limit": limit,
        }
        return self._request("GET", "/api/orders/admin/all", OrderPage, params=params)

    def get_batches(
        self,
        kitchen_id: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        status: BatchStatus | None = None,
        meal_window: MealWindow | None = None,
        page: int | None = None,
        limit: int = BATCH_FETCH_LIMIT,
    ) -> BatchPage:
        params = {
            "kitchenId": kitchen_id,
            "dateFrom": date_from,
            "dateTo": date_to,
            "status": status,
            "mealWindow": meal_window,
            "page": page,
            "limit": limit,
        }
        return self._request("GET", "/api/delivery/admin/batches", BatchPage, params=params)

    def auto_batch_orders(self, meal_window: MealWindow, kitchen_id: str) -> AutoBatchResult:
        body = {"mealWindow": meal_window.value, "kitchenId": kitchen_id}
        return self._request("POST", "/api/delivery/auto-batch", AutoBatchResult, body=body)

    def dispatch_batches(
        self, meal_window: MealWindow, kitchen_id: str, force_dispatch: bool = False
    ) -> DispatchResult:
        body = {"mealWindow": meal_window.value, "kitchenId": kitchen_id, "forceDispatch": force_dispatch}
        return self._request("POST", "/api/delivery/dispatch", DispatchResult, body=body)

    def get_delivery_stats(
        self,
        kitchen_id: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> DeliveryStats:
        params = {"kitchenId": kitchen_id, "dateFrom": date_from, "dateTo": date_to}
        return self._request("GET", "/api/delivery/admin/stats", DeliveryStats, params=params)
