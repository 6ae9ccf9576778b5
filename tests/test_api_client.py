import pytest
import requests

from pos_admin.api_client import ROUTES, RemoteStore
from pos_admin.errors import ApiError, ValidationError
from pos_admin.manager import StateManager
from pos_admin.models import AppState, WaiterCredentials
from pos_admin.persistence import Change

from conftest import item


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeSession:
    """Replays canned responses keyed by (method, path) and records calls."""

    def __init__(self, responses=None, raise_exc=None):
        self.headers = {}
        self.responses = responses or {}
        self.raise_exc = raise_exc
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        self.calls.append((method, url, json, timeout))
        if self.raise_exc is not None:
            raise self.raise_exc
        path = url.split("/v1", 1)[1]
        return self.responses.get((method, path), FakeResponse(200, {"success": True, "data": []}))


def make_store(**kwargs):
    session = FakeSession(**kwargs)
    return RemoteStore("http://pos.test/v1/", timeout=3, session=session), session


def test_request_unwraps_data():
    store, session = make_store(
        responses={("GET", "/products"): FakeResponse(200, {"success": True, "data": [{"id": "1"}]})}
    )

    assert store.request("GET", "/products") == [{"id": "1"}]
    assert session.calls == [("GET", "http://pos.test/v1/products", None, 3)]
    assert session.headers["Content-Type"] == "application/json"


def test_error_envelope_message_is_surfaced():
    body = {"success": False, "error": {"code": "NOT_FOUND", "message": "Product not found"}}
    store, _ = make_store(responses={("DELETE", "/products/9"): FakeResponse(404, body)})

    with pytest.raises(ApiError) as excinfo:
        store.request("DELETE", "/products/9")

    assert excinfo.value.message == "Product not found"
    assert excinfo.value.status_code == 404
    assert excinfo.value.code == "NOT_FOUND"


def test_ok_status_without_success_flag_fails():
    body = {"success": False, "message": "Table is locked"}
    store, _ = make_store(responses={("POST", "/bills/print"): FakeResponse(200, body)})

    with pytest.raises(ApiError, match="Table is locked"):
        store.request("POST", "/bills/print", {"tableId": "table1"})


def test_non_json_error_uses_generic_message():
    store, _ = make_store(responses={("GET", "/waiters"): FakeResponse(502, None)})

    with pytest.raises(ApiError, match="API request failed"):
        store.request("GET", "/waiters")


def test_transport_error_becomes_api_error():
    store, _ = make_store(raise_exc=requests.exceptions.ConnectionError("refused"))

    with pytest.raises(ApiError, match="Could not reach server"):
        store.request("GET", "/products")


def test_apply_fills_route_and_quotes_params():
    store, session = make_store()
    change = Change("quantity_set", ("orders",), {"table_id": "table 1", "product_id": "p/1"}, {"quantity": 3})

    store.apply(change, AppState())

    method, url, payload, _ = session.calls[-1]
    assert (method, url, payload) == ("PUT", "http://pos.test/v1/orders/table%201/items/p%2F1", {"quantity": 3})


def test_apply_returns_created_record():
    created = {"id": "srv-1", "name": "Desserts"}
    store, _ = make_store(responses={("POST", "/categories"): FakeResponse(201, {"success": True, "data": created})})

    assert store.apply(Change("category_created", ("categories",), payload={"name": "Desserts"}), AppState()) == created


def test_apply_sends_no_body_for_deletes():
    store, session = make_store()

    assert store.apply(Change("order_cleared", ("orders",), {"table_id": "table2"}), AppState()) is None
    assert session.calls[-1][:3] == ("DELETE", "http://pos.test/v1/orders/table2", None)


def test_unknown_change_kind_is_rejected():
    store, session = make_store()

    with pytest.raises(ApiError):
        store.apply(Change("nonsense", ()), AppState())
    assert session.calls == []


def test_every_manager_change_kind_has_a_route():
    kinds = {
        "item_added", "item_removed", "quantity_set", "order_cleared", "completion_toggled", "bill_printed",
        "product_created", "product_updated", "product_deleted",
        "category_created", "category_updated", "category_deleted",
        "waiter_created", "waiter_updated", "waiter_deleted", "issue_added", "credentials_updated",
        "hotel_created", "hotel_updated", "hotel_deleted",
    }
    assert kinds <= set(ROUTES)


def test_load_builds_state_from_collections():
    store, _ = make_store(
        responses={
            ("GET", "/products"): ok([{"id": "1", "name": "Chicken 65", "price": 180, "categoryId": "1"}]),
            ("GET", "/categories"): ok([{"id": "1", "name": "Starters"}]),
            ("GET", "/orders"): ok(
                [
                    {
                        "kudilId": "table2",
                        "items": [{"productId": "1", "productName": "Chicken 65", "quantity": 2, "price": 180}],
                        "completed": True,
                    },
                    {"tableId": "table3", "items": []},
                ]
            ),
            ("GET", "/history"): ok(
                [
                    {
                        "id": "h1",
                        "kudilId": "table1",
                        "items": [{"productId": "1", "productName": "Chicken 65", "quantity": 1, "price": 180}],
                        "total": 180,
                        "timestamp": "2024-03-15T06:30:00Z",
                        "waiterId": "w1",
                    }
                ]
            ),
            ("GET", "/waiters"): ok([]),
            ("GET", "/hotels"): ok([{"id": "x", "shopName": "Aruvi", "noOfTables": 8}]),
        }
    )

    state = store.load()

    assert state.products[0].price == 180.0
    assert state.orders["table2"][0].quantity == 2
    assert state.completions == {"table2": True, "table3": False}
    assert state.history[0].table_id == "table1"
    assert state.history[0].waiter_id == "w1"
    assert state.hotels[0].no_of_tables == 8


WAITER_RAVI = {
    "id": "w1",
    "name": "Ravi Kumar",
    "phone": "9876543210",
    "email": "",
    "joinDate": "2024-03-01T00:00:00Z",
    "status": "active",
    "ordersCompleted": 45,
    "issues": [],
}


def ok(data):
    return FakeResponse(200, {"success": True, "data": data})


def remote_manager(clock, ids, responses=None):
    store, session = make_store(responses={("GET", "/waiters"): ok([WAITER_RAVI]), **(responses or {})})
    manager = StateManager(store, table_count=8, clock=clock, new_id=ids)
    manager.reload()
    return manager, session


def test_bill_request_names_table_as_kudil_id(clock, ids):
    manager, session = remote_manager(clock, ids)
    manager.add_item("table1", item("p1", 2, 180.0, "Chicken 65"))

    manager.print_bill("table1", "w1")

    method, url, body, _ = session.calls[-1]
    assert (method, url) == ("POST", "http://pos.test/v1/bills/print")
    assert body["kudilId"] == "table1"
    assert body["waiterId"] == "w1"
    assert body["total"] == 360.0
    assert body["items"][0]["productId"] == "p1"


def test_credentials_only_change_through_credentials_route(clock, ids):
    manager, session = remote_manager(clock, ids)

    with pytest.raises(ValidationError):
        manager.update_waiter("w1", credentials=WaiterCredentials("ravi", "pw"))
    assert manager.state.waiters[0].credentials is None

    assert manager.update_credentials("w1", "ravi", "pw") is True
    method, url, body, _ = session.calls[-1]
    assert (method, url) == ("PUT", "http://pos.test/v1/waiters/w1/credentials")
    assert body == {"username": "ravi", "password": "pw"}


def test_malformed_server_record_is_an_api_error(clock, ids):
    store, _ = make_store(
        responses={("GET", "/waiters"): ok([{"id": "1", "name": "Ravi", "status": "active"}])}
    )
    manager = StateManager(store, table_count=8, clock=clock, new_id=ids)

    with pytest.raises(ApiError, match="Malformed waiters"):
        manager.reload()
    assert manager.state == AppState()


def test_bill_without_timestamp_is_an_api_error():
    bill = {"id": "h1", "kudilId": "table1", "items": [], "total": 0}
    store, _ = make_store(responses={("GET", "/history"): ok([bill])})

    with pytest.raises(ApiError, match="Malformed history"):
        store.load()


def test_server_issue_id_is_adopted_from_waiter_reply(clock, ids):
    reply = dict(WAITER_RAVI, issues=[{"id": "srv-i1", "date": "2024-03-15T06:30:00Z", "description": "Late"}])
    manager, _ = remote_manager(clock, ids, {("POST", "/waiters/w1/issues"): ok(reply)})

    issue = manager.add_issue("w1", "Late")

    assert issue.id == "srv-i1"
    assert [i.id for i in manager.state.waiters[0].issues] == ["srv-i1"]


def test_server_issue_id_is_adopted_from_issue_reply(clock, ids):
    reply = {"id": "srv-i2", "date": "2024-03-15T06:30:00Z", "description": "Late"}
    manager, _ = remote_manager(clock, ids, {("POST", "/waiters/w1/issues"): ok(reply)})

    issue = manager.add_issue("w1", "Late")

    assert issue.id == "srv-i2"
    assert manager.state.waiters[0].issues[0].id == "srv-i2"
