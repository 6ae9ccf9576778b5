"""Small keyboard-driven form modal screen."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_admin.errors import PosError

# (key, label, initial value)
FormField = tuple[str, str, str]


class FormModal(ModalScreen[bool]):
    """Collect a few text fields and hand them to ``on_submit``.

    ``on_submit`` raising a ``PosError`` keeps the form open and shows the
    message inline; returning normally closes the form.
    """

    CSS = """
    FormModal {
        align: center middle;
        background: $background 60%;
    }

    #form-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #form-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #form-body {
        color: white;
        margin-bottom: 1;
    }

    #form-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #form-help {
        color: #dddddd;
    }
    """

    def __init__(self, title: str, fields: list[FormField], on_submit: Callable[[dict[str, str]], None]) -> None:
        super().__init__()
        self.form_title = title
        self.fields = fields
        self.values = {key: value for key, _, value in fields}
        self.on_submit = on_submit
        self.cursor_index = 0
        self.error = ""
        self.closed = False

    def compose(self) -> ComposeResult:
        with Container(id="form-dialog"):
            yield Static(self.form_title, id="form-title")
            yield Static(id="form-body")
            yield Static(id="form-error")
            yield Static("Tab/↑/↓ move. Enter next/save. Backspace delete. Esc cancel.", id="form-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        key = self.fields[self.cursor_index][0]

        if event.key == "escape":
            self.closed = True
            self.dismiss(False)
        elif event.key in {"tab", "down"}:
            self.cursor_index = (self.cursor_index + 1) % len(self.fields)
        elif event.key == "up":
            self.cursor_index = (self.cursor_index - 1) % len(self.fields)
        elif event.key == "enter":
            if self.cursor_index < len(self.fields) - 1:
                self.cursor_index += 1
            else:
                self._submit()
        elif event.key == "backspace":
            self.values[key] = self.values[key][:-1]
            self.error = ""
        elif event.is_printable and event.character:
            self.values[key] += event.character
            self.error = ""
        else:
            return

        event.stop()
        if not self.closed:
            self._refresh_content()

    def _submit(self) -> None:
        try:
            self.on_submit(dict(self.values))
        except PosError as exc:
            self.error = str(exc)
            return
        self.closed = True
        self.dismiss(True)

    def _refresh_content(self) -> None:
        body = Text(style="white")
        for idx, (key, label, _) in enumerate(self.fields):
            if idx > 0:
                body.append("\n")
            active = idx == self.cursor_index
            pointer = "➤ " if active else "  "
            body.append(f"{pointer}{label}: ", style="bold white" if active else "white")
            body.append(self.values[key] + ("|" if active else ""))
        self.query_one("#form-body", Static).update(body)
        self.query_one("#form-error", Static).update(self.error)
