"""REST backend store: one request per change, full refetch on load."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import quote

import requests

from pos_admin.config import API_BASE_URL, API_TIMEOUT_SECONDS
from pos_admin.errors import ApiError
from pos_admin.models import AppState, Category, HistoryEntry, HotelProfile, OrderItem, Product, Waiter
from pos_admin.persistence import Change, StoragePort

logger = logging.getLogger(__name__)

# change kind -> (HTTP method, path template filled from Change.params)
ROUTES: dict[str, tuple[str, str]] = {
    "item_added": ("POST", "/orders/{table_id}/items"),
    "item_removed": ("DELETE", "/orders/{table_id}/items/{product_id}"),
    "quantity_set": ("PUT", "/orders/{table_id}/items/{product_id}"),
    "order_cleared": ("DELETE", "/orders/{table_id}"),
    "completion_toggled": ("POST", "/orders/{table_id}/complete"),
    "bill_printed": ("POST", "/bills/print"),
    "product_created": ("POST", "/products"),
    "product_updated": ("PUT", "/products/{id}"),
    "product_deleted": ("DELETE", "/products/{id}"),
    "category_created": ("POST", "/categories"),
    "category_updated": ("PUT", "/categories/{id}"),
    "category_deleted": ("DELETE", "/categories/{id}"),
    "waiter_created": ("POST", "/waiters"),
    "waiter_updated": ("PUT", "/waiters/{id}"),
    "waiter_deleted": ("DELETE", "/waiters/{id}"),
    "issue_added": ("POST", "/waiters/{id}/issues"),
    "credentials_updated": ("PUT", "/waiters/{id}/credentials"),
    "hotel_created": ("POST", "/hotels"),
    "hotel_updated": ("PUT", "/hotels/{id}"),
    "hotel_deleted": ("DELETE", "/hotels/{id}"),
}


@contextmanager
def _decoding(collection: str) -> Iterator[None]:
    """Turn a record the models cannot read into an ``ApiError``."""
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.warning("api_malformed collection=%s error=%r", collection, exc)
        raise ApiError(f"Malformed {collection} from server: {exc!r}") from exc


def _decode(collection: str, model: Any, records: list[Any]) -> tuple[Any, ...]:
    with _decoding(collection):
        return tuple(model.from_dict(raw) for raw in records)


class RemoteStore(StoragePort):
    """Talks to the ``/v1`` REST API; responses are ``{success, data, message, error}``."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        """Send one request and unwrap the response envelope."""
        url = f"{self.base_url}{path}"
        logger.debug("api_request method=%s path=%s", method, path)
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            logger.warning("api_unreachable method=%s path=%s error=%r", method, path, exc)
            raise ApiError(f"Could not reach server: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not response.ok or not body.get("success"):
            error = body.get("error") if isinstance(body.get("error"), dict) else {}
            message = error.get("message") or body.get("message") or "API request failed"
            logger.warning("api_failed method=%s path=%s status=%s message=%r", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code, code=error.get("code"))
        return body.get("data")

    def load(self) -> AppState:
        products = self.request("GET", "/products") or []
        categories = self.request("GET", "/categories") or []
        orders_raw = self.request("GET", "/orders") or []
        history = self.request("GET", "/history") or []
        waiters = self.request("GET", "/waiters") or []
        hotels = self.request("GET", "/hotels") or []

        orders: dict[str, tuple[OrderItem, ...]] = {}
        completions: dict[str, bool] = {}
        with _decoding("orders"):
            for order in orders_raw:
                table_id = str(order.get("tableId") or order.get("kudilId"))
                orders[table_id] = tuple(OrderItem.from_dict(item) for item in order.get("items", []))
                completions[table_id] = bool(order.get("completed", False))

        return AppState(
            products=_decode("products", Product, products),
            categories=_decode("categories", Category, categories),
            orders=orders,
            history=_decode("history", HistoryEntry, history),
            waiters=_decode("waiters", Waiter, waiters),
            completions=completions,
            hotels=_decode("hotels", HotelProfile, hotels),
        )

    def apply(self, change: Change, state: AppState) -> dict[str, Any] | None:
        try:
            method, template = ROUTES[change.kind]
        except KeyError:
            raise ApiError(f"No route for change {change.kind!r}") from None
        path = template.format(**{key: quote(str(value), safe="") for key, value in change.params.items()})
        data = self.request(method, path, change.payload or None)
        return data if isinstance(data, dict) else None
