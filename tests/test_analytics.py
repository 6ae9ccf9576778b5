from datetime import date, timedelta

from pos_admin.analytics import sales_report
from pos_admin.models import Category, HistoryEntry, Product

from conftest import item, local_noon

DAY = date(2024, 3, 15)

PRODUCTS = (
    Product("a", "Product A", 100.0, "c1"),
    Product("b", "Product B", 50.0, "c2"),
    Product("c", "Product C", 30.0, "c2"),
)
CATEGORIES = (Category("c1", "Main Course"), Category("c2", "Beverages"))


def bill(entry_id, day, *items):
    return HistoryEntry(
        id=entry_id,
        table_id="table1",
        items=tuple(items),
        total=sum(line.line_total for line in items),
        timestamp=local_noon(day),
    )


def test_report_for_fixed_date():
    history = (
        bill("2", DAY, item("a", 1, 100.0, "Product A"), item("b", 1, 50.0, "Product B")),
        bill("1", DAY, item("a", 1, 100.0, "Product A")),
        bill("0", DAY - timedelta(days=1), item("c", 9, 30.0, "Product C")),
    )

    report = sales_report(history, PRODUCTS, CATEGORIES, DAY)

    assert report.total_revenue == 250.0
    assert report.total_items == 3
    assert report.total_orders == 2
    assert [line.key for line in report.products] == ["a", "b"]
    assert report.products[0].quantity == 2
    assert report.products[0].revenue == 200.0


def test_categories_sorted_by_revenue():
    history = (
        bill("1", DAY, item("b", 5, 50.0), item("a", 1, 100.0)),
        bill("2", DAY, item("c", 2, 30.0)),
    )

    report = sales_report(history, PRODUCTS, CATEGORIES, DAY)

    assert [(line.key, line.quantity, line.revenue) for line in report.categories] == [
        ("c2", 7, 310.0),
        ("c1", 1, 100.0),
    ]


def test_non_selling_products_are_catalog_minus_sold():
    history = (bill("1", DAY, item("b", 1, 50.0)),)

    report = sales_report(history, PRODUCTS, CATEGORIES, DAY)

    assert [product.id for product in report.non_selling] == ["a", "c"]


def test_deleted_products_count_toward_totals_but_not_categories():
    history = (bill("1", DAY, item("gone", 2, 40.0, "Old Special"), item("a", 1, 100.0)),)

    report = sales_report(history, PRODUCTS, CATEGORIES, DAY)

    assert report.total_items == 3
    assert {line.key for line in report.products} == {"gone", "a"}
    assert [line.key for line in report.categories] == ["c1"]


def test_empty_day():
    report = sales_report((), PRODUCTS, CATEGORIES, DAY)

    assert report.total_revenue == 0
    assert report.total_orders == 0
    assert report.products == []
    assert len(report.non_selling) == 3


def test_top_products_limit():
    history = (bill("1", DAY, item("a", 3, 100.0), item("b", 2, 50.0), item("c", 1, 30.0)),)

    report = sales_report(history, PRODUCTS, CATEGORIES, DAY)

    assert [line.key for line in report.top_products(2)] == ["a", "b"]


def test_manager_report_defaults_to_today(manager):
    manager.add_item("table1", item("p1", 2, 180.0, "Chicken 65"))
    manager.print_bill("table1")

    report = manager.sales_report()

    assert report.day == manager.today()
    assert report.total_revenue == 360.0
    assert [product.id for product in report.non_selling] == ["p2", "p3"]
