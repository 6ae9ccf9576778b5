from datetime import date, timedelta

from pos_admin.models import HistoryEntry
from pos_admin.rendering import format_bill_row

from conftest import item, local_noon


def bill_table(manager, table_id, *lines):
    for line in lines:
        manager.add_item(table_id, line)
    return manager.print_bill(table_id)


def test_bills_on_lists_only_that_day_newest_first(manager, clock):
    clock.advance(days=-1)
    yesterday = bill_table(manager, "table1", item("p1", 1, 180.0, "Chicken 65"))
    clock.advance(days=1)
    first = bill_table(manager, "table2", item("p2", 1, 160.0, "Paneer Tikka"))
    clock.advance(minutes=30)
    second = bill_table(manager, "table3", item("p3", 2, 80.0, "Mango Lassi"))

    assert [entry.id for entry in manager.bills_on()] == [second.id, first.id]
    assert [entry.id for entry in manager.bills_on(manager.today() - timedelta(days=1))] == [yesterday.id]
    assert manager.bills_on(manager.today() + timedelta(days=1)) == []


def test_bill_row_collapsed_shows_summary_only():
    entry = HistoryEntry(
        id="h1",
        table_id="table4",
        items=(item("p1", 2, 180.0, "Chicken 65"), item("p3", 1, 80.0, "Mango Lassi")),
        total=440.0,
        timestamp=local_noon(date(2024, 3, 15)),
    )

    row = format_bill_row(entry).plain

    assert row.startswith("Table 4")
    assert "12:00" in row
    assert "3 items" in row
    assert "₹440" in row
    assert "Chicken 65" not in row


def test_bill_row_expanded_lists_items():
    entry = HistoryEntry(
        id="h1",
        table_id="table4",
        items=(item("p1", 2, 180.0, "Chicken 65"), item("p3", 1, 80.0, "Mango Lassi")),
        total=440.0,
        timestamp=local_noon(date(2024, 3, 15)),
    )

    lines = format_bill_row(entry, expanded=True).plain.splitlines()

    assert len(lines) == 3
    assert "Chicken 65" in lines[1] and lines[1].endswith("₹360")
    assert "Mango Lassi" in lines[2] and lines[2].endswith("₹80")
