"""Cursor-driven list modals for the waiter roster and the catalog."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_admin import catalog
from pos_admin.errors import PosError
from pos_admin.form_modal import FormModal
from pos_admin.manager import StateManager
from pos_admin.models import Category, Product, Waiter
from pos_admin.printer import format_money
from pos_admin.records import require_text
from pos_admin.rendering import format_waiter_line
from pos_admin.roster import validate_credentials, validate_waiter


class ListModal(ModalScreen[None]):
    """Base list screen: J/K move, Esc closes, subclasses add actions."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("up", "move_cursor(-1)", "Previous"),
    ]

    CSS = """
    ListModal {
        align: center middle;
        background: $background 60%;
    }

    #list-dialog {
        width: 90;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #list-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #list-body {
        color: white;
        margin-bottom: 1;
    }

    #list-help {
        color: #dddddd;
    }
    """

    TITLE_TEXT = ""
    HELP_TEXT = "J/K/↑/↓ move, Esc/q close"
    EMPTY_TEXT = "(empty)"

    def __init__(self, manager: StateManager, on_change: Callable[[], None]) -> None:
        super().__init__()
        self.manager = manager
        self.on_change = on_change
        self.cursor_index = 0

    def compose(self) -> ComposeResult:
        with Container(id="list-dialog"):
            yield Static(self.TITLE_TEXT, id="list-title")
            yield Static(id="list-body")
            yield Static(self.HELP_TEXT, id="list-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def rows(self) -> list[Text]:
        raise NotImplementedError

    def action_close(self) -> None:
        self.dismiss()
        self.on_change()

    def action_move_cursor(self, delta: int) -> None:
        count = len(self.rows())
        if not count:
            return
        self.cursor_index = (self.cursor_index + delta) % count
        self._refresh_content()

    def _run(self, operation: Callable[[], object]) -> None:
        """Run a manager operation, reporting storage errors as a notification."""
        try:
            operation()
        except PosError as exc:
            self.app.notify(str(exc), title="Error", severity="error")
        self._refresh_content()

    def _open_form(self, title: str, fields, on_submit: Callable[[dict[str, str]], None]) -> None:
        self.app.push_screen(FormModal(title, fields, on_submit), lambda _: self._refresh_content())

    def _refresh_content(self) -> None:
        rows = self.rows()
        if self.cursor_index >= len(rows):
            self.cursor_index = max(0, len(rows) - 1)
        body = Text(style="white")
        if not rows:
            body.append(self.EMPTY_TEXT, style="dim")
        for idx, row in enumerate(rows):
            if idx > 0:
                body.append("\n")
            body.append("➤ " if idx == self.cursor_index else "  ")
            body.append_text(row)
        self.query_one("#list-body", Static).update(body)


class RosterModal(ListModal):
    """Waiter roster: add, toggle status, record issues, set credentials, delete."""

    BINDINGS = ListModal.BINDINGS + [
        ("n", "new_waiter", "New waiter"),
        ("e", "edit_waiter", "Edit"),
        ("s", "toggle_status", "Toggle status"),
        ("i", "add_issue", "Add issue"),
        ("c", "credentials", "Credentials"),
        ("d", "delete", "Delete"),
    ]

    TITLE_TEXT = "Waiters"
    HELP_TEXT = "N new, E edit, S active/inactive, I add issue, C credentials, D delete, Esc close"

    def _waiters(self) -> list[Waiter]:
        return list(self.manager.state.waiters)

    def _selected(self) -> Waiter | None:
        waiters = self._waiters()
        if not waiters:
            return None
        return waiters[min(self.cursor_index, len(waiters) - 1)]

    def rows(self) -> list[Text]:
        rows = []
        for waiter in self._waiters():
            row = format_waiter_line(waiter, self.manager.completed_today(waiter.id))
            if waiter.issues:
                latest = waiter.issues[-1]
                row.append(f"\n      last issue {latest.date.astimezone():%d/%m %H:%M}: {latest.description}", style="dim")
            rows.append(row)
        return rows

    def action_new_waiter(self) -> None:
        def submit(values: dict[str, str]) -> None:
            cleaned = validate_waiter(values["name"], values["phone"], values["email"], values["status"])
            credentials = None
            if values["username"] or values["password"]:
                credentials = validate_credentials(values["username"], values["password"])
            self.manager.add_waiter(credentials=credentials, **cleaned)

        fields = [
            ("name", "Name", ""),
            ("phone", "Phone", ""),
            ("email", "Email", ""),
            ("status", "Status", "active"),
            ("username", "Username", ""),
            ("password", "Password", ""),
        ]
        self._open_form("New waiter", fields, submit)

    def action_edit_waiter(self) -> None:
        waiter = self._selected()
        if waiter is None:
            return

        def submit(values: dict[str, str]) -> None:
            self.manager.update_waiter(
                waiter.id, **validate_waiter(values["name"], values["phone"], values["email"], values["status"])
            )

        fields = [
            ("name", "Name", waiter.name),
            ("phone", "Phone", waiter.phone),
            ("email", "Email", waiter.email),
            ("status", "Status", waiter.status),
        ]
        self._open_form(f"Edit {waiter.name}", fields, submit)

    def action_toggle_status(self) -> None:
        waiter = self._selected()
        if waiter is None:
            return
        status = "inactive" if waiter.status == "active" else "active"
        self._run(lambda: self.manager.update_waiter(waiter.id, status=status))

    def action_add_issue(self) -> None:
        waiter = self._selected()
        if waiter is None:
            return

        def submit(values: dict[str, str]) -> None:
            self.manager.add_issue(waiter.id, require_text(values["description"], "Description"))

        self._open_form(f"Issue for {waiter.name}", [("description", "Description", "")], submit)

    def action_credentials(self) -> None:
        waiter = self._selected()
        if waiter is None:
            return
        current = waiter.credentials

        def submit(values: dict[str, str]) -> None:
            credentials = validate_credentials(values["username"], values["password"])
            self.manager.update_credentials(waiter.id, credentials.username, credentials.password)

        fields = [
            ("username", "Username", current.username if current else ""),
            ("password", "Password", current.password if current else ""),
        ]
        self._open_form(f"Credentials for {waiter.name}", fields, submit)

    def action_delete(self) -> None:
        waiter = self._selected()
        if waiter is not None:
            self._run(lambda: self.manager.delete_waiter(waiter.id))


class CatalogModal(ListModal):
    """Products grouped by category with add, edit and delete actions."""

    BINDINGS = ListModal.BINDINGS + [
        ("n", "new_product", "New product"),
        ("e", "edit_row", "Edit"),
        ("c", "new_category", "New category"),
        ("d", "delete_row", "Delete"),
    ]

    TITLE_TEXT = "Catalog"
    HELP_TEXT = "N new product, C new category, E edit, D delete, Esc close"

    def _entries(self) -> list[Category | Product]:
        state = self.manager.state
        entries: list[Category | Product] = []
        known = set()
        for category in state.categories:
            known.add(category.id)
            entries.append(category)
            entries.extend(catalog.products_in_category(state, category.id))
        orphans = [product for product in state.products if product.category_id not in known]
        if orphans:
            entries.append(Category(id="", name="Uncategorized"))
            entries.extend(orphans)
        return entries

    def _selected(self) -> Category | Product | None:
        entries = self._entries()
        if not entries:
            return None
        return entries[min(self.cursor_index, len(entries) - 1)]

    def rows(self) -> list[Text]:
        rows = []
        for entry in self._entries():
            if isinstance(entry, Category):
                rows.append(Text(entry.name, style="bold"))
            else:
                rows.append(Text(f"    {entry.name:<24} {format_money(entry.price):>8}"))
        return rows

    def _product_form(self, title: str, product: Product | None, category_id: str) -> None:
        def submit(values: dict[str, str]) -> None:
            cleaned = catalog.validate_product(values["name"], values["price"], values["category"])
            match = [c for c in self.manager.state.categories if c.name.lower() == cleaned["category_id"].lower()]
            if match:
                cleaned["category_id"] = match[0].id
            if product is None:
                self.manager.add_product(**cleaned)
            else:
                self.manager.update_product(product.id, **cleaned)

        category_label = catalog.category_name(self.manager.state, category_id) if category_id else ""
        fields = [
            ("name", "Name", product.name if product else ""),
            ("price", "Price", f"{product.price:g}" if product else ""),
            ("category", "Category", category_label),
        ]
        self._open_form(title, fields, submit)

    def action_new_product(self) -> None:
        selected = self._selected()
        category_id = ""
        if isinstance(selected, Category):
            category_id = selected.id
        elif isinstance(selected, Product):
            category_id = selected.category_id
        self._product_form("New product", None, category_id)

    def action_new_category(self) -> None:
        def submit(values: dict[str, str]) -> None:
            self.manager.add_category(**catalog.validate_category(values["name"]))

        self._open_form("New category", [("name", "Name", "")], submit)

    def action_edit_row(self) -> None:
        selected = self._selected()
        if isinstance(selected, Product):
            self._product_form("Edit product", selected, selected.category_id)
        elif isinstance(selected, Category) and selected.id:

            def submit(values: dict[str, str]) -> None:
                self.manager.update_category(selected.id, **catalog.validate_category(values["name"]))

            self._open_form("Rename category", [("name", "Name", selected.name)], submit)

    def action_delete_row(self) -> None:
        selected = self._selected()
        if isinstance(selected, Product):
            self._run(lambda: self.manager.delete_product(selected.id))
        elif isinstance(selected, Category) and selected.id:
            self._run(lambda: self.manager.delete_category(selected.id))
