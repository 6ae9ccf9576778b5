from datetime import datetime, time, timedelta
import itertools

import pytest

from pos_admin.errors import StorageError
from pos_admin.manager import StateManager
from pos_admin.models import AppState, Category, OrderItem, Product, Waiter
from pos_admin.persistence import StoragePort


class MemoryStore(StoragePort):
    """In-memory store that records every change and can be told to fail."""

    def __init__(self, state=None):
        self.state = state or AppState()
        self.changes = []
        self.fail_with = None
        self.response = None

    def load(self):
        return self.state

    def apply(self, change, state):
        if self.fail_with is not None:
            raise self.fail_with
        self.changes.append(change)
        self.state = state
        return self.response


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def local_noon(day):
    return datetime.combine(day, time(12, 0)).astimezone()


@pytest.fixture
def clock():
    return Clock(local_noon(datetime(2024, 3, 15).date()))


@pytest.fixture
def ids():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def seeded_state(clock):
    return AppState(
        categories=(Category("c1", "Starters"), Category("c2", "Beverages")),
        products=(
            Product("p1", "Chicken 65", 180.0, "c1"),
            Product("p2", "Paneer Tikka", 160.0, "c1"),
            Product("p3", "Mango Lassi", 80.0, "c2"),
        ),
        waiters=(
            Waiter("w1", "Ravi Kumar", "9876543210", "ravi@aruvi.com", clock.now, orders_completed=45),
            Waiter("w2", "Priya Sharma", "9876543211", "priya@aruvi.com", clock.now, orders_completed=32),
        ),
    )


@pytest.fixture
def store(seeded_state):
    return MemoryStore(seeded_state)


@pytest.fixture
def manager(store, clock, ids):
    mgr = StateManager(store, table_count=8, clock=clock, new_id=ids)
    mgr.reload()
    return mgr


@pytest.fixture
def failing_error():
    return StorageError("backend down")


def item(product_id, quantity, price, name=None):
    return OrderItem(product_id=product_id, product_name=name or product_id, quantity=quantity, price=price)
