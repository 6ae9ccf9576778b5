"""Application state manager: the only place state is changed.

Each operation computes the next ``AppState`` with the pure helpers in
``orders``, ``catalog`` and ``roster``, hands the change to the configured
store, and only then publishes the new state. A store failure therefore leaves
the in-memory state exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable
from uuid import uuid4

from pos_admin import catalog, orders, roster
from pos_admin.analytics import SalesReport, entries_on, sales_report
from pos_admin.config import CATEGORY_DELETE_POLICY, TABLE_COUNT
from pos_admin.data import table_ids
from pos_admin.errors import UnknownTableError
from pos_admin.models import (
    AppState,
    Category,
    HistoryEntry,
    HotelProfile,
    OrderItem,
    Product,
    Waiter,
    WaiterCredentials,
    WaiterIssue,
    local_date,
    utc_now,
)
from pos_admin.persistence import Change, StoragePort
from pos_admin.records import find_by_id

logger = logging.getLogger(__name__)

_WAITER_WIRE_FIELDS = ("name", "phone", "email", "joinDate", "status")


def _new_id() -> str:
    return uuid4().hex


def _issue_id(stored: dict[str, Any] | None, description: str) -> str | None:
    """Pick the issue id out of a server reply carrying either the issue or its waiter."""
    if not stored:
        return None
    if isinstance(stored.get("issues"), list):
        for raw in reversed(stored["issues"]):
            if isinstance(raw, dict) and raw.get("description") == description and raw.get("id"):
                return str(raw["id"])
        return None
    return str(stored["id"]) if stored.get("id") else None


class StateManager:
    """Owns the console's ``AppState`` and persists every mutation."""

    def __init__(
        self,
        storage: StoragePort,
        table_count: int = TABLE_COUNT,
        category_delete_policy: str = CATEGORY_DELETE_POLICY,
        clock: Callable[[], datetime] = utc_now,
        new_id: Callable[[], str] = _new_id,
    ) -> None:
        self._storage = storage
        self._state = AppState()
        self._tables = table_ids(table_count)
        self._category_delete_policy = category_delete_policy
        self._clock = clock
        self._new_id = new_id

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def tables(self) -> list[str]:
        return list(self._tables)

    def reload(self) -> AppState:
        """Replace in-memory state with whatever the store holds."""
        self._state = self._storage.load()
        logger.debug(
            "state_reloaded products=%d history=%d waiters=%d",
            len(self._state.products),
            len(self._state.history),
            len(self._state.waiters),
        )
        return self._state

    def _commit(self, state: AppState, change: Change, adopt: tuple[str, str] | None = None) -> dict[str, Any] | None:
        stored = self._storage.apply(change, state)
        if adopt is not None and stored and stored.get("id") and str(stored["id"]) != adopt[1]:
            state = self._adopt_id(state, adopt[0], adopt[1], str(stored["id"]))
        self._state = state
        logger.debug("state_committed kind=%s params=%s", change.kind, change.params)
        return stored

    @staticmethod
    def _adopt_id(state: AppState, collection: str, local_id: str, server_id: str) -> AppState:
        records = tuple(
            replace(record, id=server_id) if record.id == local_id else record for record in getattr(state, collection)
        )
        return replace(state, **{collection: records})

    def _check_table(self, table_id: str) -> None:
        if table_id not in self._tables:
            raise UnknownTableError(table_id)

    # Orders and billing

    def items(self, table_id: str) -> tuple[OrderItem, ...]:
        self._check_table(table_id)
        return orders.items_for(self._state, table_id)

    def order_count(self, table_id: str) -> int:
        self._check_table(table_id)
        return orders.order_count(self._state, table_id)

    def order_total(self, table_id: str) -> float:
        self._check_table(table_id)
        return orders.order_total(self._state, table_id)

    def is_completed(self, table_id: str) -> bool:
        self._check_table(table_id)
        return self._state.completions.get(table_id, False)

    def add_item(self, table_id: str, item: OrderItem) -> None:
        self._check_table(table_id)
        state = orders.add_item(self._state, table_id, item)
        self._commit(state, Change("item_added", ("orders",), {"table_id": table_id}, item.to_dict()))

    def add_product_to_order(self, table_id: str, product: Product, quantity: int = 1) -> None:
        self.add_item(table_id, OrderItem.for_product(product, quantity))

    def remove_item(self, table_id: str, product_id: str) -> bool:
        self._check_table(table_id)
        state, found = orders.remove_item(self._state, table_id, product_id)
        if found:
            params = {"table_id": table_id, "product_id": product_id}
            self._commit(state, Change("item_removed", ("orders",), params))
        return found

    def set_quantity(self, table_id: str, product_id: str, quantity: int) -> bool:
        self._check_table(table_id)
        if quantity <= 0:
            return self.remove_item(table_id, product_id)
        state, found = orders.set_quantity(self._state, table_id, product_id, quantity)
        if found:
            params = {"table_id": table_id, "product_id": product_id}
            self._commit(state, Change("quantity_set", ("orders",), params, {"quantity": quantity}))
        return found

    def clear_order(self, table_id: str) -> None:
        self._check_table(table_id)
        state = orders.clear_order(self._state, table_id)
        self._commit(state, Change("order_cleared", ("orders",), {"table_id": table_id}))

    def toggle_completion(self, table_id: str) -> bool:
        """Flip the table's completion flag and return the new value."""
        self._check_table(table_id)
        state = orders.toggle_completion(self._state, table_id)
        completed = state.completions[table_id]
        self._commit(state, Change("completion_toggled", ("completions",), {"table_id": table_id}, {"completed": completed}))
        return completed

    def print_bill(self, table_id: str, waiter_id: str | None = None) -> HistoryEntry | None:
        """Record the table's order as a bill.

        Returns ``None`` without changing anything when the order is empty.
        """
        self._check_table(table_id)
        state, entry = orders.print_bill(self._state, table_id, self._new_id(), self._clock(), waiter_id)
        if entry is None:
            logger.info("bill_skipped table=%s reason=empty_order", table_id)
            return None

        payload: dict[str, Any] = {
            "kudilId": table_id,
            "items": [item.to_dict() for item in entry.items],
            "total": entry.total,
        }
        if entry.waiter_id is not None:
            payload["waiterId"] = entry.waiter_id
        change = Change("bill_printed", ("history", "orders", "completions", "waiters"), {"table_id": table_id}, payload)
        self._commit(state, change, adopt=("history", entry.id))
        entry = self._state.history[0]
        logger.info("bill_printed table=%s entry=%s total=%s waiter=%s", table_id, entry.id, entry.total, entry.waiter_id)
        return entry

    # Catalog

    def add_product(self, name: str, price: float, category_id: str) -> Product:
        product = Product(id=self._new_id(), name=name, price=price, category_id=category_id)
        payload = {"name": name, "price": price, "categoryId": category_id}
        self._commit(
            catalog.add_product(self._state, product),
            Change("product_created", ("products",), payload=payload),
            adopt=("products", product.id),
        )
        return self._state.products[-1]

    def update_product(self, product_id: str, name: str, price: float, category_id: str) -> bool:
        state, found = catalog.update_product(self._state, product_id, name, price, category_id)
        if found:
            payload = {"name": name, "price": price, "categoryId": category_id}
            self._commit(state, Change("product_updated", ("products",), {"id": product_id}, payload))
        return found

    def delete_product(self, product_id: str) -> bool:
        state, found = catalog.delete_product(self._state, product_id)
        if found:
            self._commit(state, Change("product_deleted", ("products",), {"id": product_id}))
        return found

    def add_category(self, name: str) -> Category:
        category = Category(id=self._new_id(), name=name)
        self._commit(
            catalog.add_category(self._state, category),
            Change("category_created", ("categories",), payload={"name": name}),
            adopt=("categories", category.id),
        )
        return self._state.categories[-1]

    def update_category(self, category_id: str, name: str) -> bool:
        state, found = catalog.update_category(self._state, category_id, name)
        if found:
            self._commit(state, Change("category_updated", ("categories",), {"id": category_id}, {"name": name}))
        return found

    def delete_category(self, category_id: str) -> bool:
        state, found = catalog.delete_category(self._state, category_id, self._category_delete_policy)
        if found:
            self._commit(state, Change("category_deleted", ("categories",), {"id": category_id}))
        return found

    # Waiters

    def add_waiter(
        self,
        name: str,
        phone: str,
        email: str = "",
        status: str = "active",
        join_date: datetime | None = None,
        credentials: WaiterCredentials | None = None,
    ) -> Waiter:
        waiter = Waiter(
            id=self._new_id(),
            name=name,
            phone=phone,
            email=email,
            join_date=join_date or self._clock(),
            status=status,
            credentials=credentials,
        )
        payload = {key: value for key, value in waiter.to_dict().items() if key not in ("id", "ordersCompleted", "issues")}
        self._commit(
            roster.add_waiter(self._state, waiter),
            Change("waiter_created", ("waiters",), payload=payload),
            adopt=("waiters", waiter.id),
        )
        return self._state.waiters[-1]

    def update_waiter(self, waiter_id: str, **changes: Any) -> bool:
        state, found = roster.update_waiter(self._state, waiter_id, **changes)
        if found:
            updated = find_by_id(state.waiters, waiter_id).to_dict()
            payload = {key: updated[key] for key in _WAITER_WIRE_FIELDS}
            self._commit(state, Change("waiter_updated", ("waiters",), {"id": waiter_id}, payload))
        return found

    def delete_waiter(self, waiter_id: str) -> bool:
        state, found = roster.delete_waiter(self._state, waiter_id)
        if found:
            self._commit(state, Change("waiter_deleted", ("waiters",), {"id": waiter_id}))
        return found

    def add_issue(self, waiter_id: str, description: str) -> WaiterIssue | None:
        issue = WaiterIssue(id=self._new_id(), date=self._clock(), description=description)
        state, found = roster.add_issue(self._state, waiter_id, issue)
        if not found:
            return None
        stored = self._commit(state, Change("issue_added", ("waiters",), {"id": waiter_id}, {"description": description}))
        server_id = _issue_id(stored, description)
        if server_id and server_id != issue.id:
            self._state = roster.replace_issue_id(self._state, waiter_id, issue.id, server_id)
            issue = replace(issue, id=server_id)
        return issue

    def update_credentials(self, waiter_id: str, username: str, password: str) -> bool:
        credentials = WaiterCredentials(username=username, password=password)
        state, found = roster.set_credentials(self._state, waiter_id, credentials)
        if found:
            change = Change("credentials_updated", ("waiters",), {"id": waiter_id}, credentials.to_dict())
            self._commit(state, change)
        return found

    def today(self) -> date:
        """Current local calendar date according to the manager clock."""
        return local_date(self._clock())

    def completed_today(self, waiter_id: str, today: date | None = None) -> int:
        """Bills printed today (local calendar date) that name ``waiter_id``."""
        return roster.completed_on(self._state, waiter_id, today or self.today())

    # Shop profiles

    def add_hotel(self, shop_name: str, shop_address: str = "", shop_description: str = "", no_of_tables: int = 0) -> HotelProfile:
        hotel = HotelProfile(
            id=self._new_id(),
            shop_name=shop_name,
            shop_address=shop_address,
            shop_description=shop_description,
            no_of_tables=no_of_tables,
        )
        payload = {key: value for key, value in hotel.to_dict().items() if key != "id"}
        self._commit(
            roster.add_hotel(self._state, hotel),
            Change("hotel_created", ("hotels",), payload=payload),
            adopt=("hotels", hotel.id),
        )
        return self._state.hotels[-1]

    def update_hotel(self, hotel_id: str, **changes: Any) -> bool:
        state, found = roster.update_hotel(self._state, hotel_id, **changes)
        if found:
            payload = {key: value for key, value in find_by_id(state.hotels, hotel_id).to_dict().items() if key != "id"}
            self._commit(state, Change("hotel_updated", ("hotels",), {"id": hotel_id}, payload))
        return found

    def delete_hotel(self, hotel_id: str) -> bool:
        state, found = roster.delete_hotel(self._state, hotel_id)
        if found:
            self._commit(state, Change("hotel_deleted", ("hotels",), {"id": hotel_id}))
        return found

    def shop_name(self, default: str) -> str:
        return self._state.hotels[0].shop_name if self._state.hotels else default

    # Analytics

    def sales_report(self, day: date | None = None) -> SalesReport:
        state = self._state
        return sales_report(state.history, state.products, state.categories, day or self.today())

    def bills_on(self, day: date | None = None) -> list[HistoryEntry]:
        """Bills printed on ``day`` (local calendar date), newest first."""
        return entries_on(self._state.history, day or self.today())
