"""Sales aggregates derived from the bill history for one calendar date."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from pos_admin.models import Category, HistoryEntry, Product, local_date


@dataclass
class SalesLine:
    """Quantity and revenue accumulated for one product or category."""

    key: str
    name: str
    quantity: int = 0
    revenue: float = 0.0


@dataclass
class SalesReport:
    day: date
    products: list[SalesLine] = field(default_factory=list)
    categories: list[SalesLine] = field(default_factory=list)
    non_selling: list[Product] = field(default_factory=list)
    total_revenue: float = 0.0
    total_orders: int = 0
    total_items: int = 0

    def top_products(self, limit: int = 10) -> list[SalesLine]:
        return self.products[:limit]


def entries_on(history: Iterable[HistoryEntry], day: date) -> list[HistoryEntry]:
    return [entry for entry in history if local_date(entry.timestamp) == day]


def sales_report(
    history: Iterable[HistoryEntry],
    products: Iterable[Product],
    categories: Iterable[Category],
    day: date,
) -> SalesReport:
    """Aggregate the bills printed on ``day``.

    Product lines are sorted by quantity, category lines by revenue, both
    descending. Items whose product or category no longer exists only count
    toward the product lines and the totals.
    """
    catalog = list(products)
    product_by_id = {product.id: product for product in catalog}
    category_by_id = {category.id: category for category in categories}
    filtered = entries_on(history, day)

    product_lines: dict[str, SalesLine] = {}
    category_lines: dict[str, SalesLine] = {}
    for entry in filtered:
        for item in entry.items:
            line = product_lines.get(item.product_id)
            if line is None:
                line = product_lines[item.product_id] = SalesLine(key=item.product_id, name=item.product_name)
            line.quantity += item.quantity
            line.revenue += item.line_total

            product = product_by_id.get(item.product_id)
            if product is None:
                continue
            category = category_by_id.get(product.category_id)
            if category is None:
                continue
            cat_line = category_lines.get(category.id)
            if cat_line is None:
                cat_line = category_lines[category.id] = SalesLine(key=category.id, name=category.name)
            cat_line.quantity += item.quantity
            cat_line.revenue += item.line_total

    return SalesReport(
        day=day,
        products=sorted(product_lines.values(), key=lambda line: line.quantity, reverse=True),
        categories=sorted(category_lines.values(), key=lambda line: line.revenue, reverse=True),
        non_selling=[product for product in catalog if product.id not in product_lines],
        total_revenue=sum(entry.total for entry in filtered),
        total_orders=len(filtered),
        total_items=sum(item.quantity for entry in filtered for item in entry.items),
    )
