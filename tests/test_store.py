import json
import logging
from datetime import date, datetime

from finance_tracker.storage import BaseStorage, MemoryStorage
from finance_tracker.store import STORAGE_KEY, FinanceStore

NOW = datetime(2024, 3, 15, 12, 0, 0)


def _ids(*values):
    it = iter(values)
    return lambda: next(it)


def _counter():
    state = {"n": 0}

    def next_id():
        state["n"] += 1
        return f"id{state['n']}"
    return next_id


def _store(storage=None, id_factory=None):
    storage = storage if storage is not None else MemoryStorage({STORAGE_KEY: "[]"})
    store = FinanceStore(storage, clock=lambda: NOW, id_factory=id_factory or _counter())
    store.load_data()
    return store


def _data(**overrides):
    data = {
        "type": "expense",
        "amount": "42.5",
        "category": "Transport",
        "description": "Taxi",
        "date": "2024-03-02",
    }
    data.update(overrides)
    return data


class BrokenStorage(BaseStorage):
    def get_item(self, key):
        raise OSError("disk unavailable")

    def set_item(self, key, value):
        raise OSError("disk full")


def test_load_seeds_sample_data_when_nothing_saved():
    storage = MemoryStorage()
    store = _store(storage)

    assert [tx.description for tx in store.transactions] == [
        "Salaire mensuel", "Loyer", "Courses alimentaires",
    ]
    assert [tx.date for tx in store.transactions] == [
        date(2024, 3, 1), date(2024, 3, 5), date(2024, 3, 10),
    ]
    assert len(json.loads(storage.get_item(STORAGE_KEY))) == 3


def test_load_seeds_sample_data_when_blob_is_corrupt(caplog):
    storage = MemoryStorage({STORAGE_KEY: "{not json"})
    with caplog.at_level(logging.ERROR):
        store = _store(storage)

    assert len(store.transactions) == 3
    assert "Could not load saved transactions" in caplog.text


def test_load_keeps_an_empty_saved_collection():
    assert _store().transactions == []


def test_add_then_get_returns_input_plus_id_and_timestamp():
    store = _store()
    tx = store.add_transaction(_data())

    fetched = store.get_transaction(tx.id)
    assert fetched.id == "id1"
    assert fetched.type == "expense"
    assert fetched.amount == 42.5
    assert fetched.category == "Transport"
    assert fetched.description == "Taxi"
    assert fetched.date == date(2024, 3, 2)
    assert fetched.created_at == "2024-03-15T12:00:00"
    assert fetched.updated_at is None


def test_mutations_are_persisted():
    storage = MemoryStorage({STORAGE_KEY: "[]"})
    store = _store(storage)
    tx = store.add_transaction(_data())

    reloaded = _store(storage)
    assert [t.to_dict() for t in reloaded.transactions] == [tx.to_dict()]
    assert json.loads(storage.get_item(STORAGE_KEY))[0]["createdAt"] == "2024-03-15T12:00:00"


def test_same_date_records_list_newest_addition_first():
    store = _store()
    first = store.add_transaction(_data(description="first"))
    second = store.add_transaction(_data(description="second"))
    older = store.add_transaction(_data(description="older", date="2024-01-01"))

    assert [tx.id for tx in store.get_all_transactions()] == [second.id, first.id, older.id]


def test_update_merges_fields_and_stamps_updated_at():
    store = _store()
    tx = store.add_transaction(_data())

    updated = store.update_transaction(tx.id, {"amount": "50", "description": "Taxi aéroport"})

    assert updated.amount == 50.0
    assert updated.description == "Taxi aéroport"
    assert updated.category == "Transport"
    assert updated.created_at == tx.created_at
    assert updated.updated_at == "2024-03-15T12:00:00"
    assert store.get_transaction(tx.id) == updated


def test_update_and_delete_miss_leave_collection_unchanged():
    store = _store()
    store.add_transaction(_data())
    before = list(store.transactions)

    assert store.update_transaction("missing", _data()) is None
    assert store.delete_transaction("missing") is False
    assert store.transactions == before


def test_delete_then_get_is_absent():
    store = _store()
    tx = store.add_transaction(_data())

    assert store.delete_transaction(tx.id) is True
    assert store.get_transaction(tx.id) is None


def test_new_ids_are_unique():
    store = _store(id_factory=_ids("dup", "dup", "fresh"))
    a = store.add_transaction(_data())
    b = store.add_transaction(_data())
    assert (a.id, b.id) == ("dup", "fresh")


def test_filters_combine_with_and():
    store = _store()
    store.add_transaction(_data(description="Taxi", category="Transport", date="2024-03-01"))
    store.add_transaction(_data(description="Cinéma", category="Loisirs", date="2024-03-03"))
    store.add_transaction(_data(type="income", description="Prime", category="Salaire", date="2024-03-02"))

    assert [tx.description for tx in store.get_filtered_transactions({})] == ["Cinéma", "Prime", "Taxi"]
    assert [tx.description for tx in store.get_filtered_transactions({"type": "expense"})] == [
        "Cinéma", "Taxi",
    ]
    assert [tx.description for tx in store.get_filtered_transactions({"category": "Loisirs"})] == ["Cinéma"]
    # search matches the description or the category, ignoring case
    assert [tx.description for tx in store.get_filtered_transactions({"search": "TRANS"})] == ["Taxi"]
    assert [tx.description for tx in store.get_filtered_transactions({"search": "prime"})] == ["Prime"]
    assert store.get_filtered_transactions({"type": "income", "category": "Loisirs"}) == []


def test_stats_balance_matches_totals():
    store = _store()
    store.add_transaction(_data(type="income", amount="1000", category="Salaire", date="2024-01-01"))
    store.add_transaction(_data(amount="300", date="2024-01-02"))
    store.add_transaction(_data(amount="300", date="2024-01-02"))

    stats = store.get_stats(date(2024, 1, 31))
    assert stats["balance"] == 400.0
    assert stats["balance"] == stats["total_income"] - stats["total_expense"]
    assert stats["monthly_expense"] == 600.0

    # defaults to the clock's current month
    assert store.get_stats()["monthly_expense"] == 0


def test_monthly_and_category_data():
    store = _store()
    store.add_transaction(_data(type="income", amount="1000", category="Salaire", date="2024-01-01"))
    store.add_transaction(_data(amount="300", category="Logement", date="2024-02-02"))

    monthly = store.get_monthly_data()
    assert [m.key for m in monthly] == ["2024-01", "2024-02"]
    assert [c.category for c in store.get_category_data()] == ["Logement"]


def test_save_failure_is_logged_not_raised(caplog):
    store = FinanceStore(BrokenStorage(), clock=lambda: NOW)
    with caplog.at_level(logging.ERROR):
        store.load_data()
        store.add_transaction(_data())

    assert len(store.transactions) == 4
    assert "Could not save transactions" in caplog.text
