"""Sales report modal for one calendar date."""

from __future__ import annotations

from datetime import date, timedelta

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_admin.manager import StateManager
from pos_admin.rendering import format_sales_report


class AnalyticsModal(ModalScreen[None]):
    """Show the day's revenue, top products, categories and unsold products."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("h", "shift_day(-1)", "Previous day"),
        ("left", "shift_day(-1)", "Previous day"),
        ("l", "shift_day(1)", "Next day"),
        ("right", "shift_day(1)", "Next day"),
        ("t", "today", "Today"),
    ]

    CSS = """
    AnalyticsModal {
        align: center middle;
        background: $background 60%;
    }

    #analytics-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #analytics-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #analytics-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, manager: StateManager, day: date) -> None:
        super().__init__()
        self.manager = manager
        self.today = day
        self.day = day

    def compose(self) -> ComposeResult:
        with Container(id="analytics-dialog"):
            yield Static("Sales Analytics", id="analytics-title")
            yield Static(id="analytics-body")
            yield Static("H/← previous day, L/→ next day, T today, Esc close", id="analytics-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()

    def action_shift_day(self, delta: int) -> None:
        self.day = self.day + timedelta(days=delta)
        self._refresh_content()

    def action_today(self) -> None:
        self.day = self.today
        self._refresh_content()

    def _refresh_content(self) -> None:
        report = self.manager.sales_report(self.day)
        self.query_one("#analytics-body", Static).update(format_sales_report(report))
