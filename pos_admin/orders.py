"""Per-table order operations and bill creation.

Every function here is pure: it takes an ``AppState`` and returns a new one,
leaving the input untouched. The manager publishes the returned state in a
single assignment, so a bill's history append, order clear, completion reset
and waiter increment are never observed half-applied.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from pos_admin.models import AppState, HistoryEntry, OrderItem


def items_for(state: AppState, table_id: str) -> tuple[OrderItem, ...]:
    return state.orders.get(table_id, ())


def order_count(state: AppState, table_id: str) -> int:
    """Total quantity across the table's live order."""
    return sum(item.quantity for item in items_for(state, table_id))


def order_total(state: AppState, table_id: str) -> float:
    """Sum of price x quantity across the table's live order."""
    return sum(item.line_total for item in items_for(state, table_id))


def _with_items(state: AppState, table_id: str, items: tuple[OrderItem, ...]) -> AppState:
    orders = dict(state.orders)
    orders[table_id] = items
    return replace(state, orders=orders)


def add_item(state: AppState, table_id: str, item: OrderItem) -> AppState:
    """Append ``item`` or, if the product is already ordered, add to its quantity."""
    items = items_for(state, table_id)
    for idx, existing in enumerate(items):
        if existing.product_id == item.product_id:
            merged = replace(existing, quantity=existing.quantity + item.quantity)
            return _with_items(state, table_id, items[:idx] + (merged,) + items[idx + 1 :])
    return _with_items(state, table_id, items + (item,))


def remove_item(state: AppState, table_id: str, product_id: str) -> tuple[AppState, bool]:
    items = items_for(state, table_id)
    kept = tuple(item for item in items if item.product_id != product_id)
    if len(kept) == len(items):
        return state, False
    return _with_items(state, table_id, kept), True


def set_quantity(state: AppState, table_id: str, product_id: str, quantity: int) -> tuple[AppState, bool]:
    """Replace an item's quantity; zero or less removes the item."""
    if quantity <= 0:
        return remove_item(state, table_id, product_id)

    items = items_for(state, table_id)
    found = False
    updated = []
    for item in items:
        if item.product_id == product_id:
            found = True
            item = replace(item, quantity=quantity)
        updated.append(item)
    if not found:
        return state, False
    return _with_items(state, table_id, tuple(updated)), True


def clear_order(state: AppState, table_id: str) -> AppState:
    return _with_items(state, table_id, ())


def toggle_completion(state: AppState, table_id: str) -> AppState:
    completions = dict(state.completions)
    completions[table_id] = not completions.get(table_id, False)
    return replace(state, completions=completions)


def print_bill(
    state: AppState,
    table_id: str,
    entry_id: str,
    timestamp: datetime,
    waiter_id: str | None = None,
) -> tuple[AppState, HistoryEntry | None]:
    """Turn the table's order into a history entry.

    Returns the input state and ``None`` when the order is empty.
    """
    items = items_for(state, table_id)
    if not items:
        return state, None

    entry = HistoryEntry(
        id=entry_id,
        table_id=table_id,
        items=tuple(items),
        total=sum(item.line_total for item in items),
        timestamp=timestamp,
        waiter_id=waiter_id or None,
    )

    waiters = state.waiters
    if entry.waiter_id is not None:
        waiters = tuple(
            replace(waiter, orders_completed=waiter.orders_completed + 1) if waiter.id == entry.waiter_id else waiter
            for waiter in waiters
        )

    orders = dict(state.orders)
    orders[table_id] = ()
    completions = dict(state.completions)
    completions[table_id] = False

    next_state = replace(
        state,
        history=(entry,) + state.history,
        orders=orders,
        completions=completions,
        waiters=waiters,
    )
    return next_state, entry
