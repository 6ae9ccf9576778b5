"""Sample data wrapped into model instances and table id helpers."""

from __future__ import annotations

from datetime import datetime, timedelta

from pos_admin.config import TABLE_PREFIX
from pos_admin.constant import SAMPLE_CATEGORIES, SAMPLE_OPEN_ORDERS, SAMPLE_PRODUCTS, SAMPLE_WAITERS
from pos_admin.models import AppState, Category, OrderItem, Product, Waiter, utc_now


def table_ids(count: int) -> list[str]:
    """Return the fixed table keys ``table1`` .. ``tableN``."""
    return [f"{TABLE_PREFIX}{number}" for number in range(1, count + 1)]


def table_number(table_id: str) -> str:
    """Strip the table prefix for display (``table3`` -> ``3``)."""
    if table_id.startswith(TABLE_PREFIX):
        return table_id[len(TABLE_PREFIX) :]
    return table_id


def sample_state(table_count: int, now: datetime | None = None) -> AppState:
    """Build the first-run state: sample catalog, waiters and a few open orders."""
    now = now or utc_now()
    categories = tuple(Category(id=cid, name=name) for cid, name in SAMPLE_CATEGORIES.items())
    products = tuple(
        Product(id=pid, name=name, price=float(price), category_id=cid)
        for pid, (name, price, cid) in SAMPLE_PRODUCTS.items()
    )
    by_id = {product.id: product for product in products}
    waiters = tuple(
        Waiter(
            id=str(raw["id"]),
            name=str(raw["name"]),
            phone=str(raw["phone"]),
            email=str(raw["email"]),
            join_date=now - timedelta(days=int(raw["joined_days_ago"])),
            orders_completed=int(raw["orders_completed"]),
        )
        for raw in SAMPLE_WAITERS
    )

    known_tables = set(table_ids(table_count))
    orders = {table_id: () for table_id in table_ids(table_count)}
    for table_id, lines in SAMPLE_OPEN_ORDERS.items():
        if table_id not in known_tables:
            continue
        orders[table_id] = tuple(OrderItem.for_product(by_id[pid], qty) for pid, qty in lines if pid in by_id)

    return AppState(products=products, categories=categories, orders=orders, waiters=waiters)
