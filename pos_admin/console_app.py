"""Main Textual app class."""

from __future__ import annotations

import logging
from typing import Callable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from pos_admin.analytics_modal import AnalyticsModal
from pos_admin.config import REFRESH_INTERVAL_SECONDS, SHOP_NAME
from pos_admin.data import table_number
from pos_admin.errors import PosError
from pos_admin.form_modal import FormModal
from pos_admin.history_modal import HistoryModal
from pos_admin.list_modal import CatalogModal, RosterModal
from pos_admin.manager import StateManager
from pos_admin.models import Product
from pos_admin.printer import check_printer_dependencies, format_money, print_bill_receipt
from pos_admin.rendering import format_order_line, format_table_label
from pos_admin.roster import validate_hotel
from pos_admin.waiter_modal import WaiterModal

logger = logging.getLogger(__name__)


class PosAdminApp(App):
    """A Textual console for taking table orders and printing bills."""

    TITLE = "POS Admin"
    SUB_TITLE = "Tables / Orders / Bills"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #tables-pane {
        width: 2fr;
        border: round $primary;
        padding: 1;
    }

    #orders-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results, #tables-list, #orders-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    search_query = reactive("")
    selected_index = reactive(0)
    table_index = reactive(0)
    item_index = reactive(None)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "move_up", "Previous"),
        ("down", "move_down", "Next"),
        ("enter", "register_selected", "Add item"),
        ("backspace", "backspace_query", "Delete query char"),
        Binding("ctrl+p", "print_bill", "Print bill", priority=True),
        ("ctrl+c", "cancel_active_mode", "Exit search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, manager: StateManager) -> None:
        super().__init__()
        self.manager = manager
        self.system_status = ""
        # normal-mode letter keys -> handler
        self._normal_keys: dict[str, Callable[[], None]] = {
            "j": lambda: self._move_table(1),
            "k": lambda: self._move_table(-1),
            "+": lambda: self._bump_quantity(1),
            "=": lambda: self._bump_quantity(1),
            "-": lambda: self._bump_quantity(-1),
            "d": self._remove_selected_item,
            "x": self._clear_order,
            "c": self._toggle_completion,
            "p": self.action_print_bill,
            "a": self._open_analytics,
            "b": lambda: self.push_screen(HistoryModal(self.manager, self._refresh_all, self.manager.today())),
            "w": lambda: self.push_screen(RosterModal(self.manager, self._refresh_all)),
            "m": lambda: self.push_screen(CatalogModal(self.manager, self._refresh_all)),
            "h": self._open_shop_settings,
            "r": self._soft_refresh,
        }

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="tables-pane"):
                yield Static("Tables", classes="pane-title")
                yield Static(id="tables-list")
            with Vertical(id="orders-pane"):
                yield Static(id="order-title", classes="pane-title")
                yield Static("(no items yet)", id="orders-list")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")

    def on_mount(self) -> None:
        _, msg = check_printer_dependencies()
        self.system_status = msg
        logger.debug("on_mount printer_status=%r", msg)
        self._run(self.manager.reload)
        self.set_interval(REFRESH_INTERVAL_SECONDS, self._soft_refresh)
        self._refresh_all()

    @property
    def current_table(self) -> str:
        tables = self.manager.tables
        return tables[min(self.table_index, len(tables) - 1)]

    def _run(self, operation: Callable[[], object]) -> object | None:
        """Run a manager operation; storage and validation errors become notifications."""
        try:
            return operation()
        except PosError as exc:
            logger.warning("operation_failed error=%r", exc)
            self.notify(str(exc), title="Error", severity="error")
            return None

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return

        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        if self.input_state == "normal":
            key = event.character.lower() if event.character.isalpha() else event.character
            if key in {"/", "s"}:
                self.input_state = "active"
                self.search_query = ""
                self.selected_index = 0
                self._refresh_search()
                event.stop()
                return
            handler = self._normal_keys.get(key)
            if handler is not None:
                handler()
                event.stop()
            return

        self.search_query += event.character
        self.selected_index = 0
        self._refresh_search()
        event.stop()

    def action_cancel_active_mode(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state == "normal":
            return

        self.input_state = "normal"
        self.search_query = ""
        self.selected_index = 0
        self._refresh_search()

    def action_cycle_results(self, delta: int) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "active":
            return

        results = self._filtered_results()
        if not results:
            self.selected_index = 0
            self._refresh_results(results)
            return
        self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def action_move_up(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state == "active":
            self.action_cycle_results(-1)
        else:
            self._move_item(-1)

    def action_move_down(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state == "active":
            self.action_cycle_results(1)
        else:
            self._move_item(1)

    def action_register_selected(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "active":
            return

        results = self._filtered_results()
        if not results:
            return

        product = results[self.selected_index]
        table_id = self.current_table
        self._run(lambda: self.manager.add_product_to_order(table_id, product))
        items = self.manager.items(table_id)
        self.item_index = next((idx for idx, item in enumerate(items) if item.product_id == product.id), None)
        self.system_status = f"Added {product.name} to table {table_number(table_id)}"
        self._refresh_all()

    def action_backspace_query(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "active":
            return

        if not self.search_query:
            return
        self.search_query = self.search_query[:-1]
        self.selected_index = 0
        self._refresh_search()

    def action_print_bill(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "normal":
            self.system_status = "Print only in NORMAL mode (Ctrl+C to leave search)"
            self._refresh_search()
            return

        table_id = self.current_table
        if not self.manager.items(table_id):
            self.system_status = "Cannot print an empty bill"
            self._refresh_search()
            logger.debug("print_blocked table=%s reason=empty", table_id)
            return

        modal = WaiterModal(
            f"Table {table_number(table_id)}",
            format_money(self.manager.order_total(table_id)),
            list(self.manager.state.waiters),
        )
        self.push_screen(modal, lambda choice: self._finish_print(table_id, choice))

    def _finish_print(self, table_id: str, waiter_choice: str | None) -> None:
        if waiter_choice is None:
            return

        entry = self._run(lambda: self.manager.print_bill(table_id, waiter_choice or None))
        if entry is None:
            self._refresh_all()
            return

        self.item_index = None
        shop_name = self.manager.shop_name(SHOP_NAME)
        try:
            print_bill_receipt(entry, shop_name)
        except Exception as exc:
            self.system_status = f"Bill {entry.id[:8]} saved but print failed: {exc}"
            logger.warning("receipt_print_failed entry=%s error=%r", entry.id, exc)
        else:
            self.system_status = f"Bill saved + printed: {entry.id[:8]}"
        self._refresh_all()

    def _filtered_results(self) -> list[Product]:
        source = list(self.manager.state.products)
        if not self.search_query:
            return source
        q = self.search_query.lower()
        return [product for product in source if q in product.name.lower()]

    def _move_table(self, delta: int) -> None:
        count = len(self.manager.tables)
        self.table_index = (self.table_index + delta) % count
        self.item_index = None
        self._refresh_all()

    def _move_item(self, delta: int) -> None:
        items = self.manager.items(self.current_table)
        if not items:
            return
        if self.item_index is None:
            self.item_index = 0 if delta > 0 else len(items) - 1
        else:
            self.item_index = (self.item_index + delta) % len(items)
        self._refresh_orders()

    def _selected_item_product(self) -> str | None:
        items = self.manager.items(self.current_table)
        if self.item_index is None or not (0 <= self.item_index < len(items)):
            return None
        return items[self.item_index].product_id

    def _bump_quantity(self, delta: int) -> None:
        product_id = self._selected_item_product()
        if product_id is None:
            return
        table_id = self.current_table
        current = next(item.quantity for item in self.manager.items(table_id) if item.product_id == product_id)
        self._run(lambda: self.manager.set_quantity(table_id, product_id, current + delta))
        self._refresh_all()

    def _remove_selected_item(self) -> None:
        product_id = self._selected_item_product()
        if product_id is None:
            return
        table_id = self.current_table
        self._run(lambda: self.manager.remove_item(table_id, product_id))
        self._refresh_all()

    def _clear_order(self) -> None:
        table_id = self.current_table
        self._run(lambda: self.manager.clear_order(table_id))
        self.item_index = None
        self.system_status = f"Cleared table {table_number(table_id)}"
        self._refresh_all()

    def _toggle_completion(self) -> None:
        table_id = self.current_table
        self._run(lambda: self.manager.toggle_completion(table_id))
        self._refresh_all()

    def _open_analytics(self) -> None:
        self.push_screen(AnalyticsModal(self.manager, self.manager.today()))

    def _open_shop_settings(self) -> None:
        hotels = self.manager.state.hotels
        current = hotels[0] if hotels else None

        def submit(values: dict[str, str]) -> None:
            cleaned = validate_hotel(values["shop_name"], values["shop_address"], values["shop_description"], values["tables"])
            if current is None:
                self.manager.add_hotel(**cleaned)
            else:
                self.manager.update_hotel(current.id, **cleaned)

        fields = [
            ("shop_name", "Shop name", current.shop_name if current else SHOP_NAME),
            ("shop_address", "Address", current.shop_address if current else ""),
            ("shop_description", "Description", current.shop_description if current else ""),
            ("tables", "Tables", str(current.no_of_tables if current else len(self.manager.tables))),
        ]
        self.push_screen(FormModal("Shop settings", fields, submit), lambda _: self._refresh_all())

    def _soft_refresh(self) -> None:
        self._run(self.manager.reload)
        self._refresh_all()

    def _refresh_all(self) -> None:
        self._refresh_tables()
        self._refresh_orders()
        self._refresh_search()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            half = rows // 2
            start = selected - half
            start = max(0, start)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_tables(self) -> None:
        try:
            widget = self.query_one("#tables-list", Static)
        except NoMatches:
            return
        tables = self.manager.tables
        start, end = self._window_bounds(len(tables), self._visible_rows(widget), self.table_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            table_id = tables[idx]
            lines.append("➤ " if idx == self.table_index else "  ")
            lines.append_text(
                format_table_label(
                    table_id,
                    self.manager.order_count(table_id),
                    self.manager.order_total(table_id),
                    self.manager.is_completed(table_id),
                )
            )
        if end < len(tables):
            lines.append("\n⋮", style="dim")
        widget.update(lines)

    def _refresh_orders(self) -> None:
        try:
            orders_widget = self.query_one("#orders-list", Static)
            title_widget = self.query_one("#order-title", Static)
        except NoMatches:
            return

        table_id = self.current_table
        items = self.manager.items(table_id)
        title = Text(f"Table {table_number(table_id)}")
        title.append(f"   {self.manager.order_count(table_id)} items   total {format_money(self.manager.order_total(table_id))}")
        if self.manager.is_completed(table_id):
            title.append("   COMPLETED", style="bold #5fbf72")
        title_widget.update(title)

        if not items:
            self.item_index = None
            orders_widget.update("(no items yet)")
            return

        if self.item_index is not None and self.item_index >= len(items):
            self.item_index = len(items) - 1

        start, end = self._window_bounds(len(items), self._visible_rows(orders_widget), self.item_index)
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            lines.append("➤ " if idx == self.item_index else "  ")
            lines.append_text(format_order_line(items[idx]))
        if end < len(items):
            lines.append("\n⋮", style="dim")
        orders_widget.update(lines)

    def _refresh_search(self) -> None:
        self._refresh_search_bar()
        if self.input_state == "normal":
            self._refresh_results([])
            return
        self._refresh_results(self._filtered_results())

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            status = self.system_status or "Ready"
            bar.update(
                "S search, J/K table, ↑/↓ item, +/- qty, D remove, X clear, C done, P print\n"
                "M menu, W waiters, B bills, A analytics, H shop, R reload\n"
                f"{status}"
            )
            return

        text = Text()
        text.append(" / ", style="bold #ffffff on #2f6db5")
        text.append(f" {self.search_query}")
        bar.update(text)

    def _refresh_results(self, results: list[Product]) -> None:
        try:
            results_widget = self.query_one("#results", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            results_widget.update("")
            return

        if not results:
            results_widget.update("No results")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        start, end = self._window_bounds(len(results), self._visible_rows(results_widget), self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(f"{pointer}{results[idx].name}  {format_money(results[idx].price)}")
        if end < len(results):
            lines.append("\n⋮", style="dim")
        results_widget.update(lines)
