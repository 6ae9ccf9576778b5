"""Rendering helpers for tables, order lines and reports."""

from __future__ import annotations

from rich.text import Text

from pos_admin.analytics import SalesLine, SalesReport
from pos_admin.data import table_number
from pos_admin.models import HistoryEntry, OrderItem, Waiter
from pos_admin.printer import format_money


def badge_style(completed: bool) -> str:
    """Return a consistent badge style for table state tags."""
    if completed:
        return "bold #0b1f0f on #5fbf72"
    return "bold #ffffff on #b23a48"


def format_table_label(table_id: str, count: int, total: float, completed: bool) -> Text:
    text = Text()
    text.append(" ✓ " if completed else " • ", style=badge_style(completed))
    text.append(f" Table {table_number(table_id):<3}")
    if count:
        text.append(f"{count:>3} items  {format_money(total)}")
    else:
        text.append("  free", style="dim")
    return text


def format_order_line(item: OrderItem) -> Text:
    text = Text()
    text.append(f"{item.quantity:>3} x ", style="bold")
    text.append(item.product_name)
    text.append(f"  @{format_money(item.price)}", style="dim")
    text.append(f"  {format_money(item.line_total)}")
    return text


def format_waiter_line(waiter: Waiter, today_count: int) -> Text:
    text = Text()
    text.append(" A " if waiter.status == "active" else " I ", style=badge_style(waiter.status == "active"))
    text.append(f" {waiter.name}  {waiter.phone}")
    text.append(f"  total {waiter.orders_completed}  today {today_count}", style="dim")
    if waiter.issues:
        text.append(f"  issues {len(waiter.issues)}", style="bold #ffb3b3")
    return text


def format_bill_row(entry: HistoryEntry, expanded: bool = False) -> Text:
    """One history line: table, time, item count and total, plus item lines when expanded."""
    count = sum(item.quantity for item in entry.items)
    text = Text()
    text.append(f"Table {table_number(entry.table_id):<3}", style="bold")
    text.append(f" {entry.timestamp.astimezone():%H:%M}  {count:>3} items  ")
    text.append(format_money(entry.total), style="bold")
    text.append(" ▲" if expanded else " ▼", style="dim")
    if expanded:
        for item in entry.items:
            text.append(f"\n      {item.product_name:<20} {item.quantity:>3} x {format_money(item.price):>7} {format_money(item.line_total):>8}")
    return text


def _sales_lines(title: str, lines: list[SalesLine], out: Text) -> None:
    out.append(f"\n{title}\n", style="bold")
    if not lines:
        out.append("  (none)\n", style="dim")
        return
    for line in lines:
        out.append(f"  {line.name:<20} {line.quantity:>4}  {format_money(line.revenue):>10}\n")


def format_sales_report(report: SalesReport) -> Text:
    out = Text()
    out.append(f"{report.day.isoformat()}\n", style="bold")
    out.append(f"Revenue {format_money(report.total_revenue)}   Orders {report.total_orders}   Items {report.total_items}\n")
    _sales_lines("Top products", report.top_products(), out)
    _sales_lines("Categories", report.categories, out)
    out.append("\nNot sold\n", style="bold")
    if report.non_selling:
        out.append("  " + ", ".join(product.name for product in report.non_selling) + "\n")
    else:
        out.append("  (every product sold)\n", style="dim")
    return out
