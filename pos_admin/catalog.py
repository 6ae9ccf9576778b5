"""Product and category operations plus their form validation."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from pos_admin.errors import CategoryInUseError, ValidationError
from pos_admin.models import AppState, Category, Product
from pos_admin.records import parse_number, remove_by_id, replace_by_id, require_text

DELETE_POLICIES = ("orphan", "restrict")


def validate_product(name: Any, price: Any, category_id: Any) -> dict[str, Any]:
    """Return cleaned product fields or raise ``ValidationError``."""
    return {
        "name": require_text(name, "Product name"),
        "price": parse_number(price, "Price"),
        "category_id": require_text(category_id, "Category"),
    }


def validate_category(name: Any) -> dict[str, Any]:
    return {"name": require_text(name, "Category name")}


def add_product(state: AppState, product: Product) -> AppState:
    return replace(state, products=state.products + (product,))


def update_product(state: AppState, product_id: str, name: str, price: float, category_id: str) -> tuple[AppState, bool]:
    products, found = replace_by_id(state.products, product_id, name=name, price=price, category_id=category_id)
    if not found:
        return state, False
    return replace(state, products=products), True


def delete_product(state: AppState, product_id: str) -> tuple[AppState, bool]:
    products, found = remove_by_id(state.products, product_id)
    if not found:
        return state, False
    return replace(state, products=products), True


def add_category(state: AppState, category: Category) -> AppState:
    return replace(state, categories=state.categories + (category,))


def update_category(state: AppState, category_id: str, name: str) -> tuple[AppState, bool]:
    categories, found = replace_by_id(state.categories, category_id, name=name)
    if not found:
        return state, False
    return replace(state, categories=categories), True


def products_in_category(state: AppState, category_id: str) -> list[Product]:
    return [product for product in state.products if product.category_id == category_id]


def delete_category(state: AppState, category_id: str, policy: str = "orphan") -> tuple[AppState, bool]:
    """Remove a category.

    With ``policy="orphan"`` referencing products keep the stale category id.
    With ``policy="restrict"`` the delete is refused while any product uses it.
    """
    if policy not in DELETE_POLICIES:
        raise ValidationError(f"Unknown category delete policy: {policy}")

    categories, found = remove_by_id(state.categories, category_id)
    if not found:
        return state, False
    if policy == "restrict":
        in_use = products_in_category(state, category_id)
        if in_use:
            raise CategoryInUseError(category_id, [product.id for product in in_use])
    return replace(state, categories=categories), True


def category_name(state: AppState, category_id: str) -> str:
    for category in state.categories:
        if category.id == category_id:
            return category.name
    return "Uncategorized"
