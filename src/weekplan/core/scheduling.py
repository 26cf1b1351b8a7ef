"""Scheduling mutations - pure update payloads for moving tasks between days and slots.

Nothing here touches storage. Every function returns the partial update the
caller should send to the task store, plus the state needed to reverse it.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from .index import DAY_FIELDS, PLANNED_DAY, cell_key
from .tasks import Status, Task, next_day_order, with_updates

logger = logging.getLogger(__name__)

# Block length is a property of the view the task was dropped on
TIMELINE_BLOCK_MINUTES = 60
CONDENSED_BLOCK_MINUTES = 120


@dataclass(frozen=True)
class Target:
    """Where a task is being moved: a day, and optionally an hour slot on it."""

    day: date
    hour: int | None = None
    block_minutes: int = TIMELINE_BLOCK_MINUTES
    day_field: str = PLANNED_DAY

    @property
    def cell(self) -> str:
        return cell_key(self.day, self.hour)


@dataclass
class ScheduleResult:
    """An update to persist and the prior values it overwrites."""

    task_id: str
    updates: dict[str, Any]
    previous_state: dict[str, Any]
    cell: str | None = None

    @property
    def is_noop(self) -> bool:
        return all(self.previous_state.get(k) == v for k, v in self.updates.items())


@dataclass(frozen=True)
class DragPayload:
    """What a drag source hands to a drop target."""

    task_id: str
    from_planned_day: date | None = None

    def encode(self) -> str:
        return json.dumps(
            {
                "taskId": self.task_id,
                "fromPlannedDay": self.from_planned_day.isoformat() if self.from_planned_day else None,
            }
        )


def time_block(day: date, hour: int, block_minutes: int) -> tuple[str, str]:
    """Start and end of a block as naive local ISO text. Always built together."""
    start = datetime.combine(day, time(hour, 0))
    end = start + timedelta(minutes=block_minutes)
    return start.isoformat(timespec="seconds"), end.isoformat(timespec="seconds")


def snapshot(task: Task, day_field: str = PLANNED_DAY) -> dict[str, Any]:
    """The scheduling state of a task, captured before it is mutated."""
    return {
        day_field: task.day_for(day_field),
        "day_order": task.day_order,
        "time_block_start": task.time_block_start,
        "time_block_end": task.time_block_end,
        "status": task.status,
    }


def schedule(task: Task, target: Target, tasks_on_target_day: list[Task]) -> ScheduleResult:
    """
    Place a task on a day, or on an hour slot of that day.

    The task goes to the end of the target day. It is left out of the max
    day_order computation, so dropping it back where it already is can't
    duplicate it or push the order past its own. A day-level drop clears any
    time block; an hour drop sets start and end together.
    """
    if target.day_field not in DAY_FIELDS:
        raise ValueError(f"Unknown day field: {target.day_field}")

    previous = snapshot(task, target.day_field)
    updates: dict[str, Any] = {
        target.day_field: target.day,
        "day_order": next_day_order(tasks_on_target_day, exclude_id=task.id),
        "status": Status.SCHEDULED,
    }
    if target.hour is not None:
        start, end = time_block(target.day, target.hour, target.block_minutes)
        updates["time_block_start"] = start
        updates["time_block_end"] = end
    else:
        updates["time_block_start"] = None
        updates["time_block_end"] = None

    return ScheduleResult(task_id=task.id, updates=updates, previous_state=previous, cell=target.cell)


def unschedule(task: Task, day_field: str = PLANNED_DAY) -> ScheduleResult:
    """Move a task back to the inbox. Status is left as it is."""
    previous = snapshot(task, day_field)
    updates = {
        day_field: None,
        "day_order": 0,
        "time_block_start": None,
        "time_block_end": None,
    }
    return ScheduleResult(task_id=task.id, updates=updates, previous_state=previous)


def restore(task: Task, state: dict[str, Any]) -> ScheduleResult:
    """Re-apply an earlier scheduling state, capturing the current one for reversal."""
    state = dict(state)
    # A time block is only ever restored as a pair
    if "time_block_start" in state and "time_block_end" not in state:
        state["time_block_end"] = None
    previous = {key: getattr(task, key) for key in state}
    return ScheduleResult(task_id=task.id, updates=state, previous_state=previous)


def apply_updates(task: Task, updates: dict[str, Any]) -> Task:
    """The task as it looks once the update has been applied."""
    return with_updates(task, updates)


def serialize_updates(updates: dict[str, Any]) -> dict[str, Any]:
    """Plain JSON-able form of an update for the external task API."""
    result = {}
    for key, value in updates.items():
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        elif isinstance(value, Status):
            value = value.value
        result[key] = value
    return result


def deserialize_state(state: dict[str, Any]) -> dict[str, Any]:
    """Inverse of serialize_updates for scheduling fields."""
    result = {}
    for key, value in state.items():
        if key in DAY_FIELDS and isinstance(value, str):
            value = date.fromisoformat(value)
        elif key == "status" and value is not None:
            value = Status.parse(value)
        result[key] = value
    return result


def decode_drop_payload(raw: Any) -> DragPayload | None:
    """
    Read a drop payload.

    Accepts a dict or a JSON object with taskId/fromPlannedDay, or a plain-text
    task id (which loses fromPlannedDay). Anything else returns None.
    """
    if raw is None:
        return None

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        if not text.startswith("{"):
            if any(c.isspace() for c in text):
                logger.debug(f"Ignoring garbled drop payload: {text!r}")
                return None
            return DragPayload(task_id=text)
        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            logger.debug(f"Ignoring malformed drop payload: {text!r}")
            return None

    if not isinstance(raw, dict):
        return None

    task_id = raw.get("taskId") or raw.get("task_id")
    if not task_id or not isinstance(task_id, str):
        return None

    from_day = raw.get("fromPlannedDay") or raw.get("from_planned_day")
    try:
        from_planned_day = date.fromisoformat(from_day) if isinstance(from_day, str) else None
    except ValueError:
        from_planned_day = None
    return DragPayload(task_id=task_id, from_planned_day=from_planned_day)
