"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable


class Status(Enum):
    """Triage status of a task."""

    FOCUS = "focus"
    SCHEDULED = "scheduled"
    BACKLOG = "backlog"
    WAITING = "waiting"
    SOMEDAY = "someday"

    @classmethod
    def parse(cls, value: "str | Status | None") -> "Status":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.BACKLOG


# Fields the scheduling engine reads and writes. Everything else is payload.
SCHEDULING_FIELDS = (
    "scheduled_date",
    "planned_day",
    "day_order",
    "time_block_start",
    "time_block_end",
    "status",
)


@dataclass
class Task:
    """A schedulable unit of work."""

    id: str
    text: str = ""
    is_completed: bool = False
    scheduled_date: date | None = None
    planned_day: date | None = None
    day_order: int | None = 0
    time_block_start: str | None = None
    time_block_end: str | None = None
    estimated_minutes: int | None = None
    status: Status = Status.BACKLOG
    parent_task_id: str | None = None
    is_recurring_parent: bool = False
    priority: int = 0
    tags: list[str] = field(default_factory=list)
    completed_at: datetime | None = None

    @property
    def is_unscheduled(self) -> bool:
        return self.planned_day is None

    @property
    def is_timed(self) -> bool:
        return bool(self.time_block_start)

    def day_for(self, day_field: str) -> date | None:
        """The task's date under the given view field (planned_day or scheduled_date)."""
        return getattr(self, day_field)

    @classmethod
    def from_record(cls, data: dict) -> "Task":
        """Create a Task from an external store record."""
        completed_at = data.get("completed_at")
        return cls(
            id=str(data.get("task_id") or data["id"]),
            text=data.get("task_text") or data.get("text") or "",
            is_completed=bool(data.get("is_completed", False)),
            scheduled_date=_parse_date(data.get("scheduled_date")),
            planned_day=_parse_date(data.get("planned_day")),
            day_order=data.get("day_order", 0),
            time_block_start=_parse_time_block(data.get("time_block_start")),
            time_block_end=_parse_time_block(data.get("time_block_end")),
            estimated_minutes=data.get("estimated_minutes"),
            status=Status.parse(data.get("status")),
            parent_task_id=data.get("parent_task_id"),
            is_recurring_parent=bool(data.get("is_recurring_parent", False)),
            priority=data.get("priority") or 0,
            tags=list(data.get("tags") or []),
            completed_at=datetime.fromisoformat(completed_at) if completed_at else None,
        )

    def to_record(self) -> dict:
        """Serialize to the store's plain record shape."""
        return {
            "task_id": self.id,
            "task_text": self.text,
            "is_completed": self.is_completed,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "planned_day": self.planned_day.isoformat() if self.planned_day else None,
            "day_order": self.day_order,
            "time_block_start": self.time_block_start,
            "time_block_end": self.time_block_end,
            "estimated_minutes": self.estimated_minutes,
            "status": self.status.value,
            "parent_task_id": self.parent_task_id,
            "is_recurring_parent": self.is_recurring_parent,
            "priority": self.priority,
            "tags": list(self.tags),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Accept full timestamps too; only the calendar date matters
    return date.fromisoformat(str(value)[:10])


def _parse_time_block(value: Any) -> str | None:
    # Kept as text so hour extraction never goes through a timezone conversion
    if not value:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None).isoformat(timespec="seconds")
    return str(value)


def filter_schedulable(tasks: Iterable[Task]) -> list[Task]:
    """Drop recurring-template parents; they never appear in schedulable views."""
    return [t for t in tasks if not t.is_recurring_parent]


def next_day_order(tasks_on_day: Iterable[Task], exclude_id: str | None = None) -> int:
    """Append-to-end order for a day: one past the largest existing day_order."""
    orders = [t.day_order or 0 for t in tasks_on_day if t.id != exclude_id]
    return 1 + max([0, *orders])


def new_task(
    text: str,
    planned_day: date | None = None,
    tasks_on_day: Iterable[Task] = (),
    estimated_minutes: int | None = None,
    task_id: str | None = None,
) -> Task:
    """
    Quick-add a task.

    Inbox tasks start at day_order 0; tasks added straight onto a day go to
    the end of that day.
    """
    return Task(
        id=task_id or uuid.uuid4().hex,
        text=text.strip(),
        planned_day=planned_day,
        day_order=next_day_order(tasks_on_day) if planned_day else 0,
        estimated_minutes=estimated_minutes,
        status=Status.BACKLOG,
    )


def toggle_complete(task: Task, now: datetime | None = None) -> dict:
    """Partial update flipping completion. Completed tasks leave all active buckets."""
    now = now or datetime.now()
    completed = not task.is_completed
    return {
        "is_completed": completed,
        "completed_at": now if completed else None,
    }


def with_updates(task: Task, updates: dict) -> Task:
    """Return a copy of the task with a partial update applied."""
    return replace(task, **updates)
