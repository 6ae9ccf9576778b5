import pytest

from pos_admin.errors import StorageError

from conftest import item


def fill_table(manager, table_id="table3"):
    manager.add_item(table_id, item("p1", 2, 180.0, "Chicken 65"))
    manager.add_item(table_id, item("p3", 1, 80.0, "Mango Lassi"))


def waiter(manager, waiter_id):
    return next(w for w in manager.state.waiters if w.id == waiter_id)


def test_print_bill_records_entry_and_resets_table(manager, clock):
    fill_table(manager)
    manager.toggle_completion("table3")
    total_before = manager.order_total("table3")
    history_before = len(manager.state.history)

    entry = manager.print_bill("table3", "w1")

    assert entry is not None
    assert len(manager.state.history) == history_before + 1
    assert manager.state.history[0] == entry
    assert entry.total == total_before == 440.0
    assert entry.table_id == "table3"
    assert entry.waiter_id == "w1"
    assert entry.timestamp == clock.now
    assert manager.order_count("table3") == 0
    assert manager.is_completed("table3") is False
    assert waiter(manager, "w1").orders_completed == 46
    assert waiter(manager, "w2").orders_completed == 32


def test_print_bill_is_persisted_as_one_change(manager, store):
    fill_table(manager)
    store.changes.clear()

    manager.print_bill("table3", "w2")

    assert len(store.changes) == 1
    change = store.changes[0]
    assert change.kind == "bill_printed"
    assert set(change.collections) == {"history", "orders", "completions", "waiters"}
    assert change.payload["waiterId"] == "w2"
    assert change.payload["total"] == 440.0


def test_print_bill_keeps_history_newest_first(manager, clock):
    manager.add_item("table1", item("p1", 1, 180.0))
    first = manager.print_bill("table1")
    clock.advance(minutes=5)
    manager.add_item("table2", item("p2", 1, 160.0))
    second = manager.print_bill("table2")

    assert [entry.id for entry in manager.state.history] == [second.id, first.id]
    assert first.waiter_id is None


def test_history_snapshot_survives_later_edits(manager):
    fill_table(manager)
    entry = manager.print_bill("table3")

    manager.add_item("table3", item("p1", 5, 180.0))
    manager.update_product("p1", "Chicken 65", 999.0, "c1")

    assert manager.state.history[0].items == entry.items
    assert manager.state.history[0].total == 440.0


def test_print_bill_on_empty_order_changes_nothing(manager, store):
    before = manager.state
    changes_before = len(store.changes)

    assert manager.print_bill("table4", "w1") is None

    assert manager.state is before
    assert len(store.changes) == changes_before
    assert waiter(manager, "w1").orders_completed == 45


def test_storage_failure_leaves_state_unchanged(manager, store, failing_error):
    fill_table(manager)
    before = manager.state
    store.fail_with = failing_error

    with pytest.raises(StorageError):
        manager.print_bill("table3", "w1")
    with pytest.raises(StorageError):
        manager.add_item("table1", item("p2", 1, 160.0))

    assert manager.state is before
    assert manager.order_count("table3") == 3
    assert waiter(manager, "w1").orders_completed == 45


def test_server_assigned_ids_are_adopted(manager, store):
    store.response = {"id": "srv-42", "name": "Desserts"}

    category = manager.add_category("Desserts")

    assert category.id == "srv-42"
    assert manager.state.categories[-1].id == "srv-42"


def test_server_bill_id_is_adopted(manager, store):
    fill_table(manager)
    store.response = {"id": "bill-7"}

    entry = manager.print_bill("table3")

    assert entry.id == "bill-7"
    assert manager.state.history[0].id == "bill-7"


def test_set_quantity_through_manager(manager, store):
    fill_table(manager)

    assert manager.set_quantity("table3", "p1", 4) is True
    assert store.changes[-1].kind == "quantity_set"
    assert manager.order_total("table3") == 4 * 180.0 + 80.0

    assert manager.set_quantity("table3", "p1", 0) is True
    assert store.changes[-1].kind == "item_removed"
    assert manager.order_count("table3") == 1

    assert manager.set_quantity("table3", "missing", 2) is False
    assert manager.remove_item("table3", "missing") is False


def test_clear_order_keeps_history_and_completion(manager):
    fill_table(manager)
    manager.add_item("table1", item("p1", 1, 180.0))
    manager.print_bill("table1")
    manager.toggle_completion("table3")

    manager.clear_order("table3")

    assert manager.order_count("table3") == 0
    assert manager.is_completed("table3") is True
    assert len(manager.state.history) == 1


def test_toggle_completion_returns_new_flag(manager, store):
    assert manager.toggle_completion("table5") is True
    assert store.changes[-1].payload == {"completed": True}
    assert manager.toggle_completion("table5") is False


def test_add_product_to_order_copies_name_and_price(manager):
    product = manager.state.products[0]

    manager.add_product_to_order("table6", product, 2)

    line = manager.items("table6")[0]
    assert (line.product_id, line.product_name, line.price, line.quantity) == ("p1", "Chicken 65", 180.0, 2)


def test_tables_come_from_configured_count(manager):
    assert manager.tables == [f"table{n}" for n in range(1, 9)]
