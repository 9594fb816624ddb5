"""Batch operations screen for one kitchen."""

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

from dispatch_console.api import ApiError, DeliveryApiClient
from dispatch_console.confirm_modal import ConfirmModal
from dispatch_console.dispatch_gate import block_message
from dispatch_console.history_screen import BatchHistoryScreen
from dispatch_console.models import Kitchen, MealWindow
from dispatch_console.aggregator import window_breakdown
from dispatch_console.rendering import format_kitchen_label, format_stats_panel, window_badge
from dispatch_console.session import ActionOutcome, KitchenSession, OutcomeKind

logger = logging.getLogger(__name__)

_RESOURCES = ("orders", "batches", "stats")
_FORCE_PROMPT = "\n\nWould you like to force dispatch anyway?"
_COUNTDOWN_TICK_SECONDS = 30


class KitchenBatchScreen(Screen):
    """Batch orders and dispatch batches for one kitchen and meal window."""

    CSS = """
    #kitchen-pane {
        height: 1fr;
        border: round $primary;
        padding: 1;
    }

    #kitchen-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #status-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #stats-panel {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("l", "select_window('LUNCH')", "Lunch"),
        ("d", "select_window('DINNER')", "Dinner"),
        ("b", "auto_batch", "Batch orders"),
        ("x", "dispatch", "Dispatch"),
        ("h", "history", "History"),
        ("r", "refresh", "Refresh"),
        ("escape", "back", "Back"),
    ]

    meal_window = reactive(MealWindow.LUNCH)
    processing = reactive(False)

    def __init__(self, client: DeliveryApiClient, kitchen: Kitchen, clock: Callable[[], datetime]) -> None:
        super().__init__()
        self.client = client
        self.session = KitchenSession(client, kitchen)
        self.clock = clock
        self.loading: set[str] = set()
        self.kitchen_loaded = False
        self._closed = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="kitchen-pane"):
            yield Static(id="kitchen-title")
            yield Static(id="status-bar")
            yield Static(id="stats-panel")

    def on_mount(self) -> None:
        self.loading.update(_RESOURCES)
        self._load_kitchen()
        self.set_interval(_COUNTDOWN_TICK_SECONDS, self._refresh_view)
        self._refresh_view()

    def on_unmount(self) -> None:
        self._closed = True

    def watch_meal_window(self) -> None:
        self._refresh_view()

    def watch_processing(self) -> None:
        self._refresh_view()

    def action_select_window(self, window: str) -> None:
        self.meal_window = MealWindow(window)

    def action_back(self) -> None:
        self.app.pop_screen()

    def action_history(self) -> None:
        self.app.push_screen(BatchHistoryScreen(self.client, self.session.kitchen, clock=self.clock))

    def action_refresh(self) -> None:
        self._refresh_all()

    def action_auto_batch(self) -> None:
        if self.processing or not self.kitchen_loaded:
            return
        window = self.meal_window
        self.app.push_screen(
            ConfirmModal(
                "Batch Orders",
                f"Create batches for {window.value} from {self.session.kitchen.name}?",
                confirm_label="Batch",
            ),
            lambda confirmed: self._start_auto_batch(window) if confirmed else None,
        )

    def action_dispatch(self) -> None:
        self._request_dispatch(self.meal_window, force_dispatch=False)

    def _request_dispatch(self, window: MealWindow, force_dispatch: bool) -> None:
        if self.processing or not self.kitchen_loaded:
            return

        decision = self.session.dispatch_decision(window, self.clock(), force_dispatch)
        if not decision.allowed:
            self._offer_force_dispatch(window, "Cannot Dispatch Yet", block_message(decision, window))
            return

        verb = "Force dispatch" if force_dispatch else "Dispatch"
        body = f"{verb} {window.value} batches to drivers?"
        if force_dispatch:
            body += "\n\nWarning: This will bypass the meal window time check."
        self.app.push_screen(
            ConfirmModal(
                "Force Dispatch Batches" if force_dispatch else "Dispatch Batches",
                body,
                confirm_label="Dispatch",
                destructive=force_dispatch,
            ),
            lambda confirmed: self._start_dispatch(window, force_dispatch) if confirmed else None,
        )

    def _offer_force_dispatch(self, window: MealWindow, title: str, message: str) -> None:
        """The single escalation path: confirm, then repeat the dispatch with the override."""
        self.app.push_screen(
            ConfirmModal(title, message + _FORCE_PROMPT, confirm_label="Force Dispatch", destructive=True),
            lambda confirmed: self._start_dispatch(window, True) if confirmed else None,
        )

    def _start_auto_batch(self, window: MealWindow) -> None:
        if self.processing:
            return
        self.processing = True
        self._run_auto_batch(window)

    def _start_dispatch(self, window: MealWindow, force_dispatch: bool) -> None:
        if self.processing:
            return
        self.processing = True
        self._run_dispatch(window, force_dispatch)

    @work(thread=True, group="mutation")
    def _run_auto_batch(self, window: MealWindow) -> None:
        outcome = self.session.auto_batch(window)
        self.app.call_from_thread(self._finish_action, outcome, window)

    @work(thread=True, group="mutation")
    def _run_dispatch(self, window: MealWindow, force_dispatch: bool) -> None:
        outcome = self.session.dispatch(window, self.clock(), force_dispatch=force_dispatch)
        self.app.call_from_thread(self._finish_action, outcome, window)

    def _finish_action(self, outcome: ActionOutcome, window: MealWindow) -> None:
        if self._closed:
            return
        self.processing = False
        logger.debug("action_finished kind=%s window=%s", outcome.kind.value, window.value)

        if outcome.kind is OutcomeKind.TIMING_BLOCKED:
            self._offer_force_dispatch(window, outcome.title, outcome.message)
            return

        if outcome.kind is OutcomeKind.FAILED:
            self.notify(outcome.message, title=outcome.title, severity="error")
            return

        self.notify(outcome.message, title=outcome.title)
        if outcome.needs_refresh:
            self._refresh_all()

    @work(thread=True, exclusive=True, group="kitchen")
    def _load_kitchen(self) -> None:
        try:
            self.session.reload_kitchen()
        except ApiError as exc:
            self.app.call_from_thread(self._kitchen_failed, exc.message)
            return
        self.app.call_from_thread(self._kitchen_ready)

    def _kitchen_ready(self) -> None:
        if self._closed:
            return
        self.kitchen_loaded = True
        self._refresh_all()

    def _kitchen_failed(self, message: str) -> None:
        if self._closed:
            return
        self.loading.clear()
        self.notify(message, title="Failed to load kitchen data", severity="error")
        self._refresh_view()

    def _refresh_all(self) -> None:
        if not self.kitchen_loaded:
            self._load_kitchen()
            return
        for resource in _RESOURCES:
            self.loading.add(resource)
            self._fetch(resource)
        self._refresh_view()

    @work(thread=True, group="refresh")
    def _fetch(self, resource: str) -> None:
        now = self.clock()
        try:
            if resource == "orders":
                self.session.refresh_orders(now)
            elif resource == "batches":
                self.session.refresh_batches(now)
            else:
                self.session.refresh_stats(now)
        except ApiError as exc:
            logger.warning("fetch_failed resource=%s error=%r", resource, exc.message)
            self.app.call_from_thread(self._fetch_finished, resource, exc.message)
            return
        self.app.call_from_thread(self._fetch_finished, resource, None)

    def _fetch_finished(self, resource: str, error: str | None) -> None:
        if self._closed:
            return
        self.loading.discard(resource)
        if error is not None:
            self.notify(error, title=f"Failed to load {resource}", severity="error")
        self._refresh_view()

    def _refresh_view(self) -> None:
        try:
            title = self.query_one("#kitchen-title", Static)
            status_bar = self.query_one("#status-bar", Static)
            stats_panel = self.query_one("#stats-panel", Static)
        except NoMatches:
            return

        title.update(format_kitchen_label(self.session.kitchen))

        window = self.meal_window
        decision = self.session.dispatch_decision(window, self.clock())

        bar = Text()
        bar.append_text(window_badge(window))
        if self.processing:
            bar.append("  Processing...", style="bold yellow")
        elif decision.allowed:
            bar.append("  Dispatch open", style="green")
        else:
            bar.append(f"  Dispatch opens after {decision.end_time} (in {decision.remaining})", style="dim")
        counts = window_breakdown(self.session.batches)
        bar.append(f"   Today: LUNCH {counts[MealWindow.LUNCH]}  DINNER {counts[MealWindow.DINNER]}", style="dim")
        bar.append("\nL/D window  B batch orders  X dispatch  H history  R refresh  Esc back")
        status_bar.update(bar)

        if self.loading:
            stats_panel.update("Loading statistics...")
            return
        stats_panel.update(format_stats_panel(self.session.summary(window), decision, self.session.stats))
