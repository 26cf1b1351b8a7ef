"""Single-level undo for scheduling mutations."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .scheduling import ScheduleResult, deserialize_state, serialize_updates

DEFAULT_UNDO_LIMIT = 20


@dataclass
class UndoEntry:
    """One reversible scheduling change."""

    task_id: str
    task_text: str
    previous_state: dict[str, Any]
    new_state: dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_result(cls, result: ScheduleResult, task_text: str = "", timestamp: datetime | None = None) -> "UndoEntry":
        return cls(
            task_id=result.task_id,
            task_text=task_text,
            previous_state=dict(result.previous_state),
            new_state=dict(result.updates),
            timestamp=timestamp or datetime.now(),
        )

    def to_record(self) -> dict:
        return {
            "task_id": self.task_id,
            "task_text": self.task_text,
            "previous_state": serialize_updates(self.previous_state),
            "new_state": serialize_updates(self.new_state),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_record(cls, data: dict) -> "UndoEntry":
        return cls(
            task_id=data["task_id"],
            task_text=data.get("task_text", ""),
            previous_state=deserialize_state(data.get("previous_state", {})),
            new_state=deserialize_state(data.get("new_state", {})),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


class UndoLedger:
    """
    Caller-owned stack of undo entries.

    Bounded: once full, pushing drops the oldest entry. Entries never expire
    on their own; they stay until popped, cleared or pushed out.
    """

    def __init__(self, limit: int | None = DEFAULT_UNDO_LIMIT):
        if limit is not None and limit < 1:
            raise ValueError("Undo limit must be at least 1")
        self.limit = limit
        self._entries: deque[UndoEntry] = deque(maxlen=limit)

    def push(self, entry: UndoEntry) -> None:
        self._entries.append(entry)

    def pop(self) -> UndoEntry | None:
        """Remove and return the latest entry, or None when empty."""
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> UndoEntry | None:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def to_records(self) -> list[dict]:
        return [entry.to_record() for entry in self._entries]

    @classmethod
    def from_records(cls, records: list[dict], limit: int | None = DEFAULT_UNDO_LIMIT) -> "UndoLedger":
        ledger = cls(limit=limit)
        for record in records:
            ledger.push(UndoEntry.from_record(record))
        return ledger
