"""Bill history modal: one calendar date of printed bills."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable

from rich.text import Text
from textual.widgets import Static

from pos_admin.config import SHOP_NAME
from pos_admin.list_modal import ListModal
from pos_admin.manager import StateManager
from pos_admin.models import HistoryEntry
from pos_admin.printer import format_money, print_bill_receipt
from pos_admin.rendering import format_bill_row

logger = logging.getLogger(__name__)


class HistoryModal(ListModal):
    """List the day's bills; Enter expands a bill into its items, P reprints it."""

    BINDINGS = ListModal.BINDINGS + [
        ("h", "shift_day(-1)", "Previous day"),
        ("left", "shift_day(-1)", "Previous day"),
        ("l", "shift_day(1)", "Next day"),
        ("right", "shift_day(1)", "Next day"),
        ("t", "today", "Today"),
        ("enter", "toggle_expand", "Items"),
        ("space", "toggle_expand", "Items"),
        ("p", "reprint", "Reprint"),
    ]

    TITLE_TEXT = "Bill History"
    EMPTY_TEXT = "No bills found for this date"
    HELP_TEXT = "J/K move, Enter items, P reprint, H/← previous day, L/→ next day, T today, Esc close"

    def __init__(self, manager: StateManager, on_change: Callable[[], None], day: date) -> None:
        super().__init__(manager, on_change)
        self.today = day
        self.day = day
        self.expanded: set[str] = set()

    def _bills(self) -> list[HistoryEntry]:
        return self.manager.bills_on(self.day)

    def _selected(self) -> HistoryEntry | None:
        bills = self._bills()
        if not bills:
            return None
        return bills[min(self.cursor_index, len(bills) - 1)]

    def rows(self) -> list[Text]:
        return [format_bill_row(entry, entry.id in self.expanded) for entry in self._bills()]

    def action_shift_day(self, delta: int) -> None:
        self.day = self.day + timedelta(days=delta)
        self.cursor_index = 0
        self._refresh_content()

    def action_today(self) -> None:
        self.day = self.today
        self.cursor_index = 0
        self._refresh_content()

    def action_toggle_expand(self) -> None:
        entry = self._selected()
        if entry is None:
            return
        self.expanded ^= {entry.id}
        self._refresh_content()

    def action_reprint(self) -> None:
        entry = self._selected()
        if entry is None:
            return
        try:
            print_bill_receipt(entry, self.manager.shop_name(SHOP_NAME))
        except Exception as exc:
            logger.warning("receipt_reprint_failed entry=%s error=%r", entry.id, exc)
            self.app.notify(f"Reprint failed: {exc}", title="Printer", severity="error")
            return
        self.app.notify(f"Reprinted bill {entry.id[:8]}", title="Printer")

    def _refresh_content(self) -> None:
        super()._refresh_content()
        bills = self._bills()
        total = sum(entry.total for entry in bills)
        self.query_one("#list-title", Static).update(
            f"{self.TITLE_TEXT}  {self.day:%d %b %Y}  {len(bills)} bill(s)  {format_money(total)}"
        )
