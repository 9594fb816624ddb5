"""Paginated batch history screen for one kitchen."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.screen import Screen
from textual.widgets import Header, Static
from textual.worker import get_current_worker

from dispatch_console.api import ApiError, DeliveryApiClient
from dispatch_console.config import HISTORY_PAGE_SIZE
from dispatch_console.constant import HISTORY_MEAL_WINDOW_FILTERS, HISTORY_STATUS_FILTERS
from dispatch_console.details_modal import DetailsModal
from dispatch_console.models import Batch, BatchPage, BatchStatus, Kitchen, MealWindow
from dispatch_console.rendering import format_batch_details, format_batch_label, window_bounds

logger = logging.getLogger(__name__)


class BatchHistoryScreen(Screen):
    """Browse a kitchen's batches with status and meal-window filters."""

    CSS = """
    #history-pane {
        height: 1fr;
        border: round $primary;
        padding: 1;
    }

    #history-filters {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #history-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        ("s", "cycle_status(1)", "Status filter"),
        ("w", "cycle_window(1)", "Window filter"),
        ("j", "move_selection(1)", "Next"),
        ("k", "move_selection(-1)", "Previous"),
        ("down", "move_selection(1)", "Next"),
        ("up", "move_selection(-1)", "Previous"),
        ("enter", "show_details", "Details"),
        ("m", "load_more", "Load more"),
        ("r", "reload", "Refresh"),
        ("escape", "back", "Back"),
    ]

    status_filter_index = reactive(0)
    window_filter_index = reactive(0)
    selected_index = reactive(None)

    def __init__(self, client: DeliveryApiClient, kitchen: Kitchen, clock: Callable[[], datetime]) -> None:
        super().__init__()
        self.client = client
        self.kitchen = kitchen
        self.clock = clock
        self.batches: list[Batch] = []
        self.page = 1
        self.has_more = False
        self.loading = False
        self._closed = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="history-pane"):
            yield Static(f"Batch History: {self.kitchen.name}", classes="pane-title")
            yield Static(id="history-filters")
            yield Static(id="history-list")

    def on_mount(self) -> None:
        self._reload()

    def on_unmount(self) -> None:
        self._closed = True

    def action_back(self) -> None:
        self.app.pop_screen()

    def action_cycle_status(self, delta: int) -> None:
        self.status_filter_index = (self.status_filter_index + delta) % len(HISTORY_STATUS_FILTERS)
        self._reload()

    def action_cycle_window(self, delta: int) -> None:
        self.window_filter_index = (self.window_filter_index + delta) % len(HISTORY_MEAL_WINDOW_FILTERS)
        self._reload()

    def action_reload(self) -> None:
        self._reload()

    def action_load_more(self) -> None:
        if self.loading or not self.has_more:
            return
        self.loading = True
        self._fetch_page(self.page + 1, False)
        self._refresh_view()

    def action_move_selection(self, delta: int) -> None:
        if not self.batches:
            return
        if self.selected_index is None:
            self.selected_index = 0 if delta > 0 else len(self.batches) - 1
        else:
            self.selected_index = (self.selected_index + delta) % len(self.batches)
        self._refresh_view()

    def action_show_details(self) -> None:
        batch = self._selected_batch()
        if batch is None:
            return
        self.app.push_screen(DetailsModal(batch.batch_number, format_batch_details(batch, self.clock())))

    def _selected_batch(self) -> Batch | None:
        if self.selected_index is None:
            return None
        if not (0 <= self.selected_index < len(self.batches)):
            return None
        return self.batches[self.selected_index]

    def _status_filter(self) -> BatchStatus | None:
        value = HISTORY_STATUS_FILTERS[self.status_filter_index][1]
        return None if value == "ALL" else BatchStatus(value)

    def _window_filter(self) -> MealWindow | None:
        value = HISTORY_MEAL_WINDOW_FILTERS[self.window_filter_index][1]
        return None if value == "ALL" else MealWindow(value)

    def _reload(self) -> None:
        self.loading = True
        self.batches = []
        self.selected_index = None
        self.page = 1
        self.has_more = False
        self._fetch_page(1, True)
        self._refresh_view()

    @work(thread=True, exclusive=True, group="history")
    def _fetch_page(self, page: int, reset: bool) -> None:
        status = self._status_filter()
        window = self._window_filter()
        try:
            result = self.client.get_batches(
                kitchen_id=self.kitchen.id,
                status=status,
                meal_window=window,
                page=page,
                limit=HISTORY_PAGE_SIZE,
            )
        except ApiError as exc:
            if not get_current_worker().is_cancelled:
                self.app.call_from_thread(self._fetch_failed, exc.message)
            return
        # A filter change started a newer fetch; this page belongs to the old filter.
        if get_current_worker().is_cancelled:
            return
        self.app.call_from_thread(self._apply_page, result, reset)

    def _apply_page(self, result: BatchPage, reset: bool) -> None:
        if self._closed:
            return
        self.loading = False
        if reset:
            self.batches = list(result.batches)
        else:
            self.batches.extend(result.batches)

        if result.pagination is not None:
            self.page = result.pagination.page
            self.has_more = result.pagination.has_more
        else:
            self.has_more = False
        logger.debug("history_page_loaded page=%d rows=%d has_more=%s", self.page, len(self.batches), self.has_more)
        self._refresh_view()

    def _fetch_failed(self, message: str) -> None:
        if self._closed:
            return
        self.loading = False
        self.notify(message, title="Failed to load batch history", severity="error")
        self._refresh_view()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _refresh_view(self) -> None:
        try:
            filters = self.query_one("#history-filters", Static)
            listing = self.query_one("#history-list", Static)
        except NoMatches:
            return

        status_label = HISTORY_STATUS_FILTERS[self.status_filter_index][0]
        window_label = HISTORY_MEAL_WINDOW_FILTERS[self.window_filter_index][0]
        filters.update(
            f"Status: {status_label}   Window: {window_label}\n"
            "S status  W window  J/K move  Enter details  M more  R refresh  Esc back"
        )

        if not self.batches:
            listing.update("Loading batches..." if self.loading else "No batches found")
            return

        visible_rows = self._visible_rows(listing)
        start, end = window_bounds(len(self.batches), visible_rows, self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(pointer)
            lines.append_text(format_batch_label(self.batches[idx]))
        if end < len(self.batches):
            lines.append("\n⋮", style="dim")
        if self.loading:
            lines.append("\nLoading more...", style="dim")
        elif self.has_more:
            lines.append("\nM to load more", style="dim")
        listing.update(lines)
