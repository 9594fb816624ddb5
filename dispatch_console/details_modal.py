"""Read-only details modal screen."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static


class DetailsModal(ModalScreen[None]):
    """Centered modal showing one record's fields."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("enter", "close", "Close"),
        ("ctrl+c", "close", "Close"),
    ]

    CSS = """
    DetailsModal {
        align: center middle;
        background: $background 60%;
    }

    #details-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #details-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #details-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, title: str, body: str) -> None:
        super().__init__()
        self.title_text = title
        self.body_text = body

    def compose(self) -> ComposeResult:
        with Container(id="details-dialog"):
            yield Static(self.title_text, id="details-title")
            yield Static(self.body_text, id="details-body")
            yield Static("Enter/Esc/q to close", id="details-help")

    def action_close(self) -> None:
        self.dismiss()
