"""Functional core - pure scheduling logic with no I/O."""

from .tasks import Task, Status, filter_schedulable, new_task
from .classify import Bucket, Buckets, classify, format_due_date, group_for_list
from .index import (
    extract_local_hour,
    index_by_day,
    index_by_day_and_hour,
    untimed_by_day,
    sort_cell,
)
from .capacity import Capacity, CapacityLevel, capacity
from .scheduling import Target, ScheduleResult, schedule, unschedule, restore, decode_drop_payload
from .undo import UndoEntry, UndoLedger
from .calendar import Event, TimeSlot, find_free_slots

__all__ = [
    # Tasks
    "Task",
    "Status",
    "filter_schedulable",
    "new_task",
    # Classification
    "Bucket",
    "Buckets",
    "classify",
    "format_due_date",
    "group_for_list",
    # Day/slot index
    "extract_local_hour",
    "index_by_day",
    "index_by_day_and_hour",
    "untimed_by_day",
    "sort_cell",
    # Capacity
    "Capacity",
    "CapacityLevel",
    "capacity",
    # Scheduling
    "Target",
    "ScheduleResult",
    "schedule",
    "unschedule",
    "restore",
    "decode_drop_payload",
    # Undo
    "UndoEntry",
    "UndoLedger",
    # Calendar
    "Event",
    "TimeSlot",
    "find_free_slots",
]
