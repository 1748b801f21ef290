from finance_tracker.storage import FileStorage, MemoryStorage


def test_file_storage_round_trip(tmp_path):
    storage = FileStorage(tmp_path / "data")

    assert storage.get_item("financeTrackerData") is None

    storage.set_item("financeTrackerData", '[{"id": "x"}]')
    assert storage.path_for("financeTrackerData") == tmp_path / "data" / "financeTrackerData.json"
    assert storage.get_item("financeTrackerData") == '[{"id": "x"}]'

    storage.set_item("financeTrackerData", "[]")
    assert storage.get_item("financeTrackerData") == "[]"
    assert sorted(p.name for p in (tmp_path / "data").iterdir()) == ["financeTrackerData.json"]


def test_memory_storage():
    storage = MemoryStorage({"a": "1"})
    assert storage.get_item("a") == "1"
    storage.set_item("b", "2")
    assert storage.get_item("b") == "2"
