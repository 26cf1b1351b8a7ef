"""View assembly - pure data for list and board views, no rendering, no I/O."""

from dataclasses import dataclass, field
from datetime import date, datetime

from .calendar import (
    Event,
    TimeSlot,
    all_day_events_by_day,
    filter_events_by_date,
    find_free_slots,
    index_events_by_day_and_hour,
    sort_events_by_start,
)
from .capacity import Capacity, capacity
from .classify import BUCKET_LABELS, Bucket, format_due_date, group_for_list
from .index import (
    PLANNED_DAY,
    date_key,
    extract_local_hour,
    index_by_day,
    index_by_day_and_hour,
    sort_cell,
    tasks_for_date,
)
from .tasks import Task


@dataclass
class DayColumn:
    """Everything one day of a timeline board shows."""

    day: date
    key: str
    hours: dict[int, list[Task]]
    untimed: list[Task]
    off_grid: list[Task]
    capacity: Capacity
    events: dict[int, list[Event]] = field(default_factory=dict)
    all_day_events: list[Event] = field(default_factory=list)

    @property
    def task_count(self) -> int:
        return sum(len(cell) for cell in self.hours.values()) + len(self.untimed) + len(self.off_grid)


def build_week_board(
    tasks: list[Task],
    events: list[Event],
    days: list[date],
    hour_slots: list[int],
    capacity_minutes: int,
    day_field: str = PLANNED_DAY,
    snap_to_nearest: bool = False,
) -> list[DayColumn]:
    """
    Assemble the weekly timeline board.

    Pure function - no I/O. Each active task on a shown day lands in exactly
    one of: an hour cell, the untimed row, or the off-grid list.
    """
    by_day = index_by_day(tasks, days, day_field)
    by_hour = index_by_day_and_hour(tasks, days, hour_slots, day_field, snap_to_nearest)
    event_cells = index_events_by_day_and_hour(events, days, hour_slots)
    all_day = all_day_events_by_day(events, days)

    columns = []
    for day in days:
        key = date_key(day)
        day_tasks = by_day[key]
        placed = {t.id for cell in by_hour[key].values() for t in cell}
        untimed = [t for t in day_tasks if not t.is_timed]
        off_grid = [t for t in day_tasks if t.is_timed and t.id not in placed]
        columns.append(
            DayColumn(
                day=day,
                key=key,
                hours=by_hour[key],
                untimed=untimed,
                off_grid=off_grid,
                capacity=capacity(day_tasks, capacity_minutes),
                events=event_cells[key],
                all_day_events=all_day[key],
            )
        )
    return columns


@dataclass
class ListSection:
    """One titled group of the task list."""

    bucket: Bucket
    label: str
    tasks: list[Task]


def build_list_view(tasks: list[Task], now: date | datetime, week_start: int = 0) -> list[ListSection]:
    """Bucketed list sections in display order; empty sections are omitted."""
    buckets = group_for_list(tasks, now, week_start)
    return [
        ListSection(bucket=bucket, label=BUCKET_LABELS[bucket], tasks=buckets.get(bucket))
        for bucket in Bucket
        if buckets.get(bucket)
    ]


def format_task_line(task: Task, now: date | datetime) -> str:
    """
    Format a single task for display in a list.

    Pure function - no I/O.
    """
    parts = []
    if task.scheduled_date:
        parts.append(format_due_date(task.scheduled_date, now))
    if task.planned_day:
        parts.append(f"planned {task.planned_day.strftime('%a')}")
    hour = extract_local_hour(task.time_block_start)
    if hour is not None:
        parts.append(f"{hour:02d}:00")
    if task.estimated_minutes:
        parts.append(f"{task.estimated_minutes}m")

    mark = "x" if task.is_completed else " "
    detail = f" ({', '.join(parts)})" if parts else ""
    return f"- [{mark}] {task.text}{detail}  #{task.id}"


@dataclass
class DayAgenda:
    """One day at a glance: its tasks, events, free time and load."""

    day: date
    tasks: list[Task]
    events: list[Event]
    free_slots: list[TimeSlot]
    capacity: Capacity


def build_day_agenda(
    tasks: list[Task],
    events: list[Event],
    day: date,
    capacity_minutes: int,
    office_start: int = 9,
    office_end: int = 17,
) -> DayAgenda:
    """
    Assemble a single-day agenda.

    Tasks scheduled, planned or time-blocked on the day are listed (open ones
    only); capacity counts only tasks planned on it.
    """
    open_tasks = [t for t in tasks if not t.is_completed]
    planned = index_by_day(open_tasks, [day])[date_key(day)]
    return DayAgenda(
        day=day,
        tasks=sort_cell(tasks_for_date(open_tasks, day)),
        events=sort_events_by_start(filter_events_by_date(events, day)),
        free_slots=find_free_slots(events, open_tasks, day, office_start, office_end),
        capacity=capacity(planned, capacity_minutes),
    )
