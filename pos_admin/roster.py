"""Waiter roster and shop profile operations."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any

from pos_admin.errors import ValidationError
from pos_admin.models import (
    WAITER_STATUSES,
    AppState,
    HotelProfile,
    Waiter,
    WaiterCredentials,
    WaiterIssue,
    local_date,
)
from pos_admin.records import find_by_id, parse_number, remove_by_id, replace_by_id, require_text

# Fields callers may change through update_waiter; the counter, issue log and
# credentials each have their own operation.
WAITER_EDITABLE_FIELDS = frozenset({"name", "phone", "email", "join_date", "status"})
HOTEL_EDITABLE_FIELDS = frozenset({"shop_name", "shop_address", "shop_description", "no_of_tables"})


def validate_waiter(name: Any, phone: Any, email: Any = "", status: Any = "active") -> dict[str, Any]:
    status_text = str(status or "active").strip().lower()
    if status_text not in WAITER_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(WAITER_STATUSES)}")
    return {
        "name": require_text(name, "Name"),
        "phone": require_text(phone, "Phone"),
        "email": str(email or "").strip(),
        "status": status_text,
    }


def validate_credentials(username: Any, password: Any) -> WaiterCredentials:
    return WaiterCredentials(username=require_text(username, "Username"), password=require_text(password, "Password"))


def validate_hotel(shop_name: Any, shop_address: Any = "", shop_description: Any = "", no_of_tables: Any = 0) -> dict[str, Any]:
    tables = parse_number(no_of_tables, "Number of tables")
    if tables != int(tables):
        raise ValidationError("Number of tables must be a whole number")
    return {
        "shop_name": require_text(shop_name, "Shop name"),
        "shop_address": str(shop_address or "").strip(),
        "shop_description": str(shop_description or "").strip(),
        "no_of_tables": int(tables),
    }


def add_waiter(state: AppState, waiter: Waiter) -> AppState:
    return replace(state, waiters=state.waiters + (waiter,))


def update_waiter(state: AppState, waiter_id: str, **changes: Any) -> tuple[AppState, bool]:
    """Partially update a waiter profile."""
    unknown = set(changes) - WAITER_EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update waiter field(s): {', '.join(sorted(unknown))}")
    waiters, found = replace_by_id(state.waiters, waiter_id, **changes)
    if not found:
        return state, False
    return replace(state, waiters=waiters), True


def set_credentials(state: AppState, waiter_id: str, credentials: WaiterCredentials) -> tuple[AppState, bool]:
    waiters, found = replace_by_id(state.waiters, waiter_id, credentials=credentials)
    if not found:
        return state, False
    return replace(state, waiters=waiters), True


def delete_waiter(state: AppState, waiter_id: str) -> tuple[AppState, bool]:
    waiters, found = remove_by_id(state.waiters, waiter_id)
    if not found:
        return state, False
    return replace(state, waiters=waiters), True


def add_issue(state: AppState, waiter_id: str, issue: WaiterIssue) -> tuple[AppState, bool]:
    waiter = find_by_id(state.waiters, waiter_id)
    if waiter is None:
        return state, False
    waiters, _ = replace_by_id(state.waiters, waiter_id, issues=waiter.issues + (issue,))
    return replace(state, waiters=waiters), True


def replace_issue_id(state: AppState, waiter_id: str, local_id: str, server_id: str) -> AppState:
    waiter = find_by_id(state.waiters, waiter_id)
    if waiter is None:
        return state
    issues, _ = replace_by_id(waiter.issues, local_id, id=server_id)
    waiters, _ = replace_by_id(state.waiters, waiter_id, issues=issues)
    return replace(state, waiters=waiters)


def completed_on(state: AppState, waiter_id: str, day: date) -> int:
    """Count bills printed for ``waiter_id`` on ``day`` (local calendar date)."""
    return sum(1 for entry in state.history if entry.waiter_id == waiter_id and local_date(entry.timestamp) == day)


def add_hotel(state: AppState, hotel: HotelProfile) -> AppState:
    return replace(state, hotels=state.hotels + (hotel,))


def update_hotel(state: AppState, hotel_id: str, **changes: Any) -> tuple[AppState, bool]:
    unknown = set(changes) - HOTEL_EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update shop field(s): {', '.join(sorted(unknown))}")
    hotels, found = replace_by_id(state.hotels, hotel_id, **changes)
    if not found:
        return state, False
    return replace(state, hotels=hotels), True


def delete_hotel(state: AppState, hotel_id: str) -> tuple[AppState, bool]:
    hotels, found = remove_by_id(state.hotels, hotel_id)
    if not found:
        return state, False
    return replace(state, hotels=hotels), True
