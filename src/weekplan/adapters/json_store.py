"""JSON file task store adapter."""

import json
import logging
from pathlib import Path
from typing import Any

from weekplan.core.scheduling import serialize_updates
from weekplan.core.tasks import Task
from weekplan.core.undo import DEFAULT_UNDO_LIMIT, UndoLedger

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the store can't be read or rejects an update."""

    pass


class JsonTaskStore:
    """
    File-based task storage.

    Implements TaskRepository protocol. One JSON file holds the task records
    and the serialized undo ledger, so undo survives between CLI runs.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read(self) -> dict:
        if not self.path.exists():
            return {"tasks": [], "undo": []}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt task file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Unexpected task file layout in {self.path}")
        data.setdefault("tasks", [])
        data.setdefault("undo", [])
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))

    def fetch_all(self) -> list[Task]:
        """Fetch all tasks."""
        tasks = []
        for record in self._read()["tasks"]:
            try:
                tasks.append(Task.from_record(record))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping unreadable task record: {e}")
        return tasks

    def update_task(self, task_id: str, updates: dict[str, Any]) -> None:
        """Merge a partial update into one task record."""
        data = self._read()
        for record in data["tasks"]:
            if str(record.get("task_id") or record.get("id")) == task_id:
                record.update(serialize_updates(updates))
                self._write(data)
                return
        raise StoreError(f"No task with id {task_id}")

    def create_task(self, task: Task) -> None:
        """Store a new task."""
        data = self._read()
        data["tasks"].append(task.to_record())
        self._write(data)

    def load_ledger(self, limit: int | None = DEFAULT_UNDO_LIMIT) -> UndoLedger:
        """Restore the undo ledger saved by the previous session."""
        try:
            return UndoLedger.from_records(self._read()["undo"], limit=limit)
        except (KeyError, ValueError) as e:
            logger.warning(f"Discarding unreadable undo history: {e}")
            return UndoLedger(limit=limit)

    def save_ledger(self, ledger: UndoLedger) -> None:
        data = self._read()
        data["undo"] = ledger.to_records()
        self._write(data)
