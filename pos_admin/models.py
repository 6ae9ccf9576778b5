"""Domain models for the admin console."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

WAITER_STATUSES = ("active", "inactive")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string or epoch milliseconds into an aware datetime."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def local_date(value: datetime) -> date:
    """Calendar date of a timestamp in the machine's local time zone."""
    return value.astimezone().date()


@dataclass(frozen=True)
class Category:
    """A menu section such as Starters or Beverages."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Category:
        return cls(id=str(raw["id"]), name=str(raw["name"]))


@dataclass(frozen=True)
class Product:
    """A sellable menu item."""

    id: str
    name: str
    price: float
    category_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": self.price, "categoryId": self.category_id}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Product:
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            price=float(raw["price"]),
            category_id=str(raw.get("categoryId", "")),
        )


@dataclass(frozen=True)
class OrderItem:
    """An order line; name and unit price are copied from the product when added."""

    product_id: str
    product_name: str
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> OrderItem:
        return cls(
            product_id=str(raw["productId"]),
            product_name=str(raw.get("productName", "")),
            quantity=int(raw["quantity"]),
            price=float(raw["price"]),
        )

    @classmethod
    def for_product(cls, product: Product, quantity: int = 1) -> OrderItem:
        return cls(product_id=product.id, product_name=product.name, quantity=quantity, price=product.price)


@dataclass(frozen=True)
class HistoryEntry:
    """A printed bill. Never modified after it is created."""

    id: str
    table_id: str
    items: tuple[OrderItem, ...]
    total: float
    timestamp: datetime
    waiter_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "tableId": self.table_id,
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.waiter_id is not None:
            data["waiterId"] = self.waiter_id
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> HistoryEntry:
        waiter_id = raw.get("waiterId")
        return cls(
            id=str(raw["id"]),
            table_id=str(raw.get("tableId", raw.get("kudilId", ""))),
            items=tuple(OrderItem.from_dict(item) for item in raw.get("items", [])),
            total=float(raw["total"]),
            timestamp=parse_timestamp(raw["timestamp"]),
            waiter_id=str(waiter_id) if waiter_id else None,
        )


@dataclass(frozen=True)
class WaiterIssue:
    """A timestamped note attached to a waiter."""

    id: str
    date: datetime
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "date": self.date.isoformat(), "description": self.description}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> WaiterIssue:
        return cls(id=str(raw["id"]), date=parse_timestamp(raw["date"]), description=str(raw["description"]))


@dataclass(frozen=True)
class WaiterCredentials:
    username: str
    password: str

    def to_dict(self) -> dict[str, Any]:
        return {"username": self.username, "password": self.password}


@dataclass(frozen=True)
class Waiter:
    """A waiter profile with its issue log and completed-bill counter."""

    id: str
    name: str
    phone: str
    email: str
    join_date: datetime
    status: str = "active"
    orders_completed: int = 0
    issues: tuple[WaiterIssue, ...] = ()
    credentials: WaiterCredentials | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "joinDate": self.join_date.isoformat(),
            "status": self.status,
            "ordersCompleted": self.orders_completed,
            "issues": [issue.to_dict() for issue in self.issues],
        }
        if self.credentials is not None:
            data.update(self.credentials.to_dict())
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Waiter:
        credentials = None
        if raw.get("username"):
            credentials = WaiterCredentials(username=str(raw["username"]), password=str(raw.get("password", "")))
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            phone=str(raw.get("phone", "")),
            email=str(raw.get("email", "")),
            join_date=parse_timestamp(raw["joinDate"]),
            status=str(raw.get("status", "active")),
            orders_completed=int(raw.get("ordersCompleted", 0)),
            issues=tuple(WaiterIssue.from_dict(issue) for issue in raw.get("issues", [])),
            credentials=credentials,
        )


@dataclass(frozen=True)
class HotelProfile:
    """Shop details shown on receipts and the settings screen."""

    id: str
    shop_name: str
    shop_address: str = ""
    shop_description: str = ""
    no_of_tables: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "shopName": self.shop_name,
            "shopAddress": self.shop_address,
            "shopDescription": self.shop_description,
            "noOfTables": self.no_of_tables,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> HotelProfile:
        return cls(
            id=str(raw["id"]),
            shop_name=str(raw["shopName"]),
            shop_address=str(raw.get("shopAddress", "")),
            shop_description=str(raw.get("shopDescription", "")),
            no_of_tables=int(raw.get("noOfTables", 0)),
        )


@dataclass(frozen=True)
class AppState:
    """Every collection the console works with, replaced wholesale on each change."""

    products: tuple[Product, ...] = ()
    categories: tuple[Category, ...] = ()
    orders: dict[str, tuple[OrderItem, ...]] = field(default_factory=dict)
    history: tuple[HistoryEntry, ...] = ()
    waiters: tuple[Waiter, ...] = ()
    completions: dict[str, bool] = field(default_factory=dict)
    hotels: tuple[HotelProfile, ...] = ()

    def collection_to_json(self, name: str) -> Any:
        """Serialize one collection to its JSON-compatible form."""
        if name == "orders":
            return {table_id: [item.to_dict() for item in items] for table_id, items in self.orders.items()}
        if name == "completions":
            return dict(self.completions)
        return [record.to_dict() for record in getattr(self, name)]

    def to_dict(self) -> dict[str, Any]:
        return {name: self.collection_to_json(name) for name in COLLECTIONS}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> AppState:
        return cls(
            products=tuple(Product.from_dict(item) for item in raw.get("products") or []),
            categories=tuple(Category.from_dict(item) for item in raw.get("categories") or []),
            orders={
                str(table_id): tuple(OrderItem.from_dict(item) for item in items)
                for table_id, items in (raw.get("orders") or {}).items()
            },
            history=tuple(HistoryEntry.from_dict(item) for item in raw.get("history") or []),
            waiters=tuple(Waiter.from_dict(item) for item in raw.get("waiters") or []),
            completions={str(k): bool(v) for k, v in (raw.get("completions") or {}).items()},
            hotels=tuple(HotelProfile.from_dict(item) for item in raw.get("hotels") or []),
        )


COLLECTIONS = ("products", "categories", "orders", "history", "waiters", "completions", "hotels")
