"""Tests for the JSON file task store."""

import json
from datetime import date, datetime

import pytest

from weekplan.adapters.json_store import JsonTaskStore, StoreError
from weekplan.core.tasks import Status, Task
from weekplan.core.undo import UndoEntry, UndoLedger


@pytest.fixture
def store(tmp_path):
    return JsonTaskStore(tmp_path / "data" / "tasks.json")


@pytest.fixture
def seeded(store):
    store.create_task(Task(id="a", text="Write brief"))
    store.create_task(Task(id="b", text="Call bank", planned_day=date(2025, 1, 15), day_order=1))
    return store


class TestJsonTaskStore:
    def test_missing_file_is_empty(self, store):
        assert store.fetch_all() == []
        assert len(store.load_ledger()) == 0

    def test_create_and_fetch(self, seeded):
        tasks = seeded.fetch_all()
        assert [t.id for t in tasks] == ["a", "b"]
        assert tasks[1].planned_day == date(2025, 1, 15)

    def test_creates_parent_directory(self, seeded):
        assert seeded.path.exists()

    def test_update_merges_serialized_fields(self, seeded):
        seeded.update_task(
            "a",
            {
                "planned_day": date(2025, 1, 17),
                "day_order": 2,
                "status": Status.SCHEDULED,
                "time_block_start": "2025-01-17T09:00:00",
                "time_block_end": "2025-01-17T10:00:00",
            },
        )
        record = json.loads(seeded.path.read_text())["tasks"][0]
        assert record["planned_day"] == "2025-01-17"
        assert record["status"] == "scheduled"
        assert record["task_text"] == "Write brief"

        task = seeded.fetch_all()[0]
        assert task.planned_day == date(2025, 1, 17)
        assert task.time_block_start == "2025-01-17T09:00:00"

    def test_update_unknown_task(self, seeded):
        with pytest.raises(StoreError):
            seeded.update_task("missing", {"day_order": 1})

    def test_corrupt_file(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{broken")
        with pytest.raises(StoreError):
            store.fetch_all()

    def test_unexpected_layout(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[]")
        with pytest.raises(StoreError):
            store.fetch_all()

    def test_skips_unreadable_records(self, store, caplog):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(
            json.dumps(
                {
                    "tasks": [
                        {"task_id": "ok", "task_text": "Fine"},
                        {"task_text": "No id"},
                        {"task_id": "bad", "planned_day": "someday"},
                    ]
                }
            )
        )
        assert [t.id for t in store.fetch_all()] == ["ok"]
        assert "Skipping unreadable task record" in caplog.text

    def test_ledger_round_trip(self, seeded):
        ledger = UndoLedger()
        ledger.push(
            UndoEntry(
                task_id="a",
                task_text="Write brief",
                previous_state={"planned_day": None, "day_order": 0},
                new_state={"planned_day": date(2025, 1, 17), "day_order": 1},
                timestamp=datetime(2025, 1, 15, 9, 0),
            )
        )
        seeded.save_ledger(ledger)

        loaded = seeded.load_ledger()
        assert len(loaded) == 1
        assert loaded.peek().new_state["planned_day"] == date(2025, 1, 17)
        assert len(seeded.fetch_all()) == 2

    def test_unreadable_ledger_is_discarded(self, seeded, caplog):
        data = json.loads(seeded.path.read_text())
        data["undo"] = [{"task_text": "missing id"}]
        seeded.path.write_text(json.dumps(data))

        assert len(seeded.load_ledger()) == 0
        assert "Discarding unreadable undo history" in caplog.text
