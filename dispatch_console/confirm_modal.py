"""Yes/no confirmation modal screen."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static


class ConfirmModal(ModalScreen[bool]):
    """Ask the operator to confirm an action. Dismisses with True or False."""

    CSS = """
    ConfirmModal {
        align: center middle;
        background: $background 60%;
    }

    #confirm-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #confirm-dialog.destructive {
        border: round $error;
    }

    #confirm-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #confirm-body {
        color: white;
        margin-bottom: 1;
    }

    #confirm-help {
        color: #dddddd;
    }
    """

    def __init__(self, title: str, body: str, confirm_label: str = "Confirm", destructive: bool = False) -> None:
        super().__init__()
        self.title_text = title
        self.body_text = body
        self.confirm_label = confirm_label
        self.destructive = destructive

    def compose(self) -> ComposeResult:
        with Container(id="confirm-dialog", classes="destructive" if self.destructive else ""):
            yield Static(self.title_text, id="confirm-title")
            yield Static(self.body_text, id="confirm-body")
            yield Static(f"Enter/y {self.confirm_label}. Esc/n/q cancel.", id="confirm-help")

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "n", "q", "ctrl+c"}:
            self.dismiss(False)
            event.stop()
            return

        if event.key in {"enter", "y"}:
            self.dismiss(True)
            event.stop()
