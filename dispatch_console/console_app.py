"""Main Textual app class."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.widgets import Header, Static

from dispatch_console.api import ApiError, DeliveryApiClient
from dispatch_console.batch_screen import KitchenBatchScreen
from dispatch_console.models import Kitchen
from dispatch_console.rendering import format_kitchen_label, window_bounds

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    """Timezone-aware local wall-clock time."""
    return datetime.now().astimezone()


def filter_kitchens(kitchens: list[Kitchen], search: str) -> list[Kitchen]:
    """Kitchens whose name or code contains the search text."""
    needle = search.strip().lower()
    if not needle:
        return list(kitchens)
    return [kitchen for kitchen in kitchens if needle in kitchen.name.lower() or needle in kitchen.code.lower()]


class DispatchConsoleApp(App):
    """A Textual app for batching kitchen orders and dispatching batches to drivers."""

    TITLE = "Dispatch Console"
    SUB_TITLE = "Kitchen Batches"

    CSS = """
    Screen {
        layout: vertical;
    }

    #kitchens-pane {
        height: 1fr;
        border: round $primary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #kitchens-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    search_text = reactive("")
    selected_index = reactive(0)

    BINDINGS = [
        ("up", "move_selection(-1)", "Previous kitchen"),
        ("down", "move_selection(1)", "Next kitchen"),
        ("tab", "move_selection(1)", "Next kitchen"),
        ("enter", "open_selected", "Open kitchen"),
        ("backspace", "backspace_search", "Delete search char"),
        ("ctrl+r", "reload_kitchens", "Reload"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, client: DeliveryApiClient, clock: Callable[[], datetime] = local_now) -> None:
        super().__init__()
        self.client = client
        self.clock = clock
        self.kitchens: list[Kitchen] = []
        self.loading_kitchens = False
        self.system_status = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="kitchens-pane"):
            yield Static("Select Kitchen", classes="pane-title")
            yield Static(id="search-bar")
            yield Static(id="kitchens-list")

    def on_mount(self) -> None:
        self.action_reload_kitchens()

    def _picker_active(self) -> bool:
        return len(self.screen_stack) == 1

    def on_key(self, event: Key) -> None:
        # Pushed screens and modals own their keyboard handling.
        if not self._picker_active():
            return
        if not event.is_printable or not event.character or len(event.character) != 1:
            return
        if not (event.character.isalnum() or event.character in " -_"):
            return

        self.search_text += event.character
        self.selected_index = 0
        self._refresh_all()
        event.stop()

    def action_move_selection(self, delta: int) -> None:
        if not self._picker_active():
            return
        results = self._filtered_kitchens()
        if not results:
            self.selected_index = 0
        else:
            self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_all()

    def action_backspace_search(self) -> None:
        if not self._picker_active() or not self.search_text:
            return
        self.search_text = self.search_text[:-1]
        self.selected_index = 0
        self._refresh_all()

    def action_open_selected(self) -> None:
        if not self._picker_active():
            return
        results = self._filtered_kitchens()
        if not results:
            return
        kitchen = results[min(self.selected_index, len(results) - 1)]
        logger.debug("open_kitchen id=%s name=%r", kitchen.id, kitchen.name)
        self.push_screen(KitchenBatchScreen(self.client, kitchen, clock=self.clock))

    def action_reload_kitchens(self) -> None:
        if not self._picker_active() or self.loading_kitchens:
            return
        self.loading_kitchens = True
        self.system_status = "Loading kitchens..."
        self._load_kitchens()
        self._refresh_all()

    @work(thread=True, exclusive=True, group="kitchens")
    def _load_kitchens(self) -> None:
        try:
            kitchens = self.client.list_kitchens()
        except ApiError as exc:
            logger.error("load_kitchens_failed error=%r", exc.message)
            self.call_from_thread(self._kitchens_failed, exc.message)
            return
        self.call_from_thread(self._apply_kitchens, kitchens)

    def _apply_kitchens(self, kitchens: list[Kitchen]) -> None:
        self.loading_kitchens = False
        self.kitchens = kitchens
        self.selected_index = 0
        self.system_status = f"{len(kitchens)} active kitchens"
        logger.debug("kitchens_loaded count=%d", len(kitchens))
        self._refresh_all()

    def _kitchens_failed(self, message: str) -> None:
        self.loading_kitchens = False
        self.system_status = "Failed to load kitchens (Ctrl+R to retry)"
        self.notify(message, title="Error", severity="error")
        self._refresh_all()

    def _filtered_kitchens(self) -> list[Kitchen]:
        return filter_kitchens(self.kitchens, self.search_text)

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _refresh_all(self) -> None:
        self._refresh_search_bar()
        self._refresh_kitchens()

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return
        text = Text()
        text.append("Search: ", style="bold")
        text.append(self.search_text or "(type a name or code)", style="" if self.search_text else "dim")
        text.append(f"\n{self.system_status or 'Ready'}  ↑/↓ move  Enter open  Ctrl+R reload  Ctrl+Q quit")
        bar.update(text)

    def _refresh_kitchens(self) -> None:
        try:
            listing = self.query_one("#kitchens-list", Static)
        except NoMatches:
            return

        results = self._filtered_kitchens()
        if not results:
            listing.update("Loading..." if self.loading_kitchens else "No kitchens found")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        visible_rows = self._visible_rows(listing)
        start, end = window_bounds(len(results), visible_rows, self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(pointer)
            lines.append_text(format_kitchen_label(results[idx]))
        if end < len(results):
            lines.append("\n⋮", style="dim")
        listing.update(lines)
