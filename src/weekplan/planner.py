"""Planner session - the in-memory task snapshot plus undo and drag state.

The session applies scheduling mutations to its own snapshot and hands back
the update payload. Sending that payload to the task store is the caller's
job; the session never does I/O.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from .core.index import PLANNED_DAY
from .core.scheduling import (
    ScheduleResult,
    Target,
    apply_updates,
    decode_drop_payload,
    restore,
    schedule,
    unschedule,
)
from .core.tasks import Task
from .core.undo import UndoEntry, UndoLedger

logger = logging.getLogger(__name__)


@dataclass
class DragState:
    """Ephemeral drag-over state for one interaction."""

    is_drag_over: bool = False
    over_cell: str | None = None

    def reset(self) -> None:
        self.is_drag_over = False
        self.over_cell = None


class PlannerSession:
    """
    One planner session over a task snapshot.

    Owns the undo ledger and the highlighted-cell marker for its lifetime.
    Every successful single-task move pushes exactly one undo entry.
    Clearing a week is a bulk reset and records nothing.
    """

    def __init__(self, tasks: list[Task], ledger: UndoLedger | None = None):
        self._tasks: dict[str, Task] = {t.id: t for t in tasks}
        self.ledger = ledger if ledger is not None else UndoLedger()
        self.highlighted_cell: str | None = None
        self.drag = DragState()

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def replace_tasks(self, tasks: list[Task]) -> None:
        """Reconcile with the store's canonical list. Last write wins."""
        self._tasks = {t.id: t for t in tasks}

    def tasks_on(self, day: date, day_field: str = PLANNED_DAY) -> list[Task]:
        return [t for t in self._tasks.values() if t.day_for(day_field) == day]

    def _commit(self, task: Task, result: ScheduleResult, record: bool = True) -> ScheduleResult:
        self._tasks[task.id] = apply_updates(task, result.updates)
        if record:
            self.ledger.push(UndoEntry.from_result(result, task_text=task.text))
        return result

    def request_move(self, task_id: str, target: Target) -> ScheduleResult | None:
        """
        Move a task to a day or hour slot, whatever triggered the move.

        Unknown task ids are ignored and return None.
        """
        task = self._tasks.get(task_id)
        if task is None:
            logger.debug(f"Ignoring move of unknown task {task_id!r}")
            return None

        result = schedule(task, target, self.tasks_on(target.day, target.day_field))
        self._commit(task, result)
        self.highlighted_cell = result.cell
        logger.debug(f"Moved {task_id} to {result.cell}")
        return result

    def drop(self, raw_payload: Any, target: Target) -> ScheduleResult | None:
        """Handle a drop: decode the payload, move the task, end the drag."""
        try:
            payload = decode_drop_payload(raw_payload)
            if payload is None:
                return None
            return self.request_move(payload.task_id, target)
        finally:
            self.drag_end()

    def move_to_inbox(self, task_id: str, day_field: str = PLANNED_DAY) -> ScheduleResult | None:
        task = self._tasks.get(task_id)
        if task is None:
            return None
        return self._commit(task, unschedule(task, day_field))

    def clear_week(self, week_start_day: date) -> list[ScheduleResult]:
        """
        Send every task planned in the 7 days from week_start_day back to the inbox.

        Not undoable: no ledger entries are pushed.
        """
        week_end = week_start_day + timedelta(days=6)
        results = []
        for task in self.tasks:
            if task.planned_day and week_start_day <= task.planned_day <= week_end:
                results.append(self._commit(task, unschedule(task), record=False))
        logger.info(f"Cleared {len(results)} task(s) from week of {week_start_day.isoformat()}")
        return results

    def undo(self) -> ScheduleResult | None:
        """
        Reverse the latest move through the same mutation path.

        The reversal itself is not recorded, so undo goes back one level.
        Returns None when there is nothing to undo or the task is gone.
        """
        entry = self.ledger.pop()
        if entry is None:
            return None
        task = self._tasks.get(entry.task_id)
        if task is None:
            logger.warning(f"Undo target {entry.task_id!r} is no longer in the snapshot")
            return None
        return self._commit(task, restore(task, entry.previous_state), record=False)

    def drag_over(self, cell: str) -> None:
        self.drag.is_drag_over = True
        self.drag.over_cell = cell

    def drag_end(self) -> None:
        """Global drag-end signal. Always clears drag state, drop or not."""
        self.drag.reset()

    def clear_highlight(self) -> None:
        self.highlighted_cell = None
