"""Waiter selection modal shown before printing a bill."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_admin.models import Waiter


class WaiterModal(ModalScreen[str | None]):
    """Pick the waiter credited with a bill.

    Dismisses with the waiter id, ``""`` for no waiter, or ``None`` on cancel.
    """

    CSS = """
    WaiterModal {
        align: center middle;
        background: $background 60%;
    }

    #waiter-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #waiter-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #waiter-list {
        color: white;
        margin-bottom: 1;
    }

    #waiter-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #waiter-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #waiter-help {
        color: #dddddd;
    }
    """

    def __init__(self, table_label: str, total: str, waiters: list[Waiter]) -> None:
        super().__init__()
        self.table_label = table_label
        self.total = total
        self.waiters = [waiter for waiter in waiters if waiter.status == "active"]
        self.value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="waiter-dialog"):
            yield Static(f"Print bill: {self.table_label}  {self.total}", id="waiter-title")
            yield Static(id="waiter-list")
            yield Static(id="waiter-value")
            yield Static(id="waiter-error")
            yield Static("Waiter number, 0 or empty for none. Enter print. Esc/q cancel.", id="waiter-help")

    def on_mount(self) -> None:
        lines = Text()
        lines.append("0. (no waiter)")
        for idx, waiter in enumerate(self.waiters, start=1):
            lines.append(f"\n{idx}. {waiter.name}")
        self.query_one("#waiter-list", Static).update(lines)
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "q", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and event.character.isdigit():
            if len(self.value) < 3:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        choice = int(self.value) if self.value else 0
        if choice == 0:
            self.dismiss("")
            return
        if not (1 <= choice <= len(self.waiters)):
            self.error = f"Pick a number from 0 to {len(self.waiters)}."
            self._refresh_content()
            return
        self.dismiss(self.waiters[choice - 1].id)

    def _refresh_content(self) -> None:
        self.query_one("#waiter-value", Static).update(self.value or "")
        self.query_one("#waiter-error", Static).update(self.error or "")
