"""Day and hour-slot indexing of tasks for board and timeline views - no I/O."""

import re
from datetime import date, datetime, timedelta
from typing import Iterable

from .classify import start_of_week
from .tasks import Status, Task, filter_schedulable

PLANNED_DAY = "planned_day"
SCHEDULED_DATE = "scheduled_date"
DAY_FIELDS = (PLANNED_DAY, SCHEDULED_DATE)

# 2-hour blocks, 6 AM to 8 PM, used by the condensed three-day grid
CONDENSED_HOURS = (6, 8, 10, 12, 14, 16, 18, 20)

_TIMESTAMP = re.compile(r"^\s*\d{4}-\d{2}-\d{2}[T ](\d{2}):(\d{2})")
_CLOCK = re.compile(r"^\s*(\d{1,2}):(\d{2})")


def date_key(day: date) -> str:
    """Grid key for a day: yyyy-MM-dd."""
    return day.isoformat()


def cell_key(day: date, hour: int | None = None) -> str:
    """Key for one cell of the grid; untimed cells use the 'allday' suffix."""
    suffix = "allday" if hour is None else str(hour)
    return f"{date_key(day)}-{suffix}"


def extract_local_time(value: str | datetime | None) -> tuple[int, int] | None:
    """
    Wall-clock (hour, minute) of a time block value.

    The hour is read straight from the stored text. Full timestamps such as
    "2026-01-09T09:00:00", "2026-01-09T09:00:00+00:00" or the space-separated
    "2026-01-09 09:00:00" yield 9 whatever the host timezone is; legacy
    "HH:MM" values are read directly. A datetime is read from its own fields
    without conversion.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.hour, value.minute

    match = _TIMESTAMP.match(value) or _CLOCK.match(value)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def extract_local_hour(value: str | datetime | None) -> int | None:
    """Wall-clock hour of a time block value, or None when it can't be read."""
    parsed = extract_local_time(value)
    return parsed[0] if parsed else None


def nearest_hour(hour: int, hours: Iterable[int]) -> int:
    """Closest representative hour; ties go to the lower hour."""
    return min(sorted(hours), key=lambda h: abs(h - hour))


def _cell_sort_key(task: Task) -> tuple:
    # Timed tasks first, by wall-clock start; untimed after, by day_order
    start = extract_local_time(task.time_block_start)
    if start is not None:
        return (0, start, 0)
    return (1, (0, 0), task.day_order or 0)


def sort_cell(tasks: Iterable[Task]) -> list[Task]:
    """Order tasks within one day or hour cell. Stable for equal keys."""
    return sorted(tasks, key=_cell_sort_key)


def _active(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in filter_schedulable(tasks) if not t.is_completed]


def _check_field(day_field: str) -> None:
    if day_field not in DAY_FIELDS:
        raise ValueError(f"Unknown day field: {day_field}")


def index_by_day(
    tasks: Iterable[Task],
    days: Iterable[date],
    day_field: str = PLANNED_DAY,
) -> dict[str, list[Task]]:
    """
    Group active tasks by the day they sit on.

    Every requested day gets a key, even when empty. Tasks on other days are
    left out. Each list is sorted with sort_cell.
    """
    _check_field(day_field)
    index: dict[str, list[Task]] = {date_key(d): [] for d in days}
    for task in _active(tasks):
        day = task.day_for(day_field)
        if day is None:
            continue
        bucket = index.get(date_key(day))
        if bucket is not None:
            bucket.append(task)
    return {key: sort_cell(cell) for key, cell in index.items()}


def index_by_day_and_hour(
    tasks: Iterable[Task],
    days: Iterable[date],
    hour_slots: Iterable[int],
    day_field: str = PLANNED_DAY,
    snap_to_nearest: bool = False,
) -> dict[str, dict[int, list[Task]]]:
    """
    Group timed tasks into (day, hour) cells.

    With snap_to_nearest the task's hour maps to the closest slot (for coarse
    grids); otherwise a task whose hour is not a slot is left off the grid.
    Untimed tasks never land in an hour cell - see untimed_by_day.
    """
    _check_field(day_field)
    slots = list(hour_slots)
    index: dict[str, dict[int, list[Task]]] = {
        date_key(d): {h: [] for h in slots} for d in days
    }
    for task in _active(tasks):
        day = task.day_for(day_field)
        if day is None or date_key(day) not in index:
            continue
        hour = extract_local_hour(task.time_block_start)
        if hour is None:
            continue
        if snap_to_nearest and slots:
            hour = nearest_hour(hour, slots)
        cell = index[date_key(day)].get(hour)
        if cell is not None:
            cell.append(task)

    for row in index.values():
        for hour, cell in row.items():
            row[hour] = sort_cell(cell)
    return index


def untimed_by_day(
    tasks: Iterable[Task],
    days: Iterable[date],
    day_field: str = PLANNED_DAY,
) -> dict[str, list[Task]]:
    """The all-day row: tasks on a day without a time block, by day_order."""
    by_day = index_by_day(tasks, days, day_field)
    return {key: [t for t in cell if not t.is_timed] for key, cell in by_day.items()}


def off_grid_by_day(
    tasks: Iterable[Task],
    days: Iterable[date],
    hour_slots: Iterable[int],
    day_field: str = PLANNED_DAY,
) -> dict[str, list[Task]]:
    """Timed tasks whose hour falls outside the grid (e.g. before office hours)."""
    slots = set(hour_slots)
    by_day = index_by_day(tasks, days, day_field)
    return {
        key: [
            t for t in cell
            if t.is_timed and extract_local_hour(t.time_block_start) not in slots
        ]
        for key, cell in by_day.items()
    }


def tasks_for_date(tasks: Iterable[Task], day: date) -> list[Task]:
    """Tasks scheduled, planned, or time-blocked on a date."""
    key = date_key(day)
    return [
        t
        for t in filter_schedulable(tasks)
        if t.scheduled_date == day
        or t.planned_day == day
        or (t.time_block_start or "").startswith(key)
    ]


def tasks_for_week(tasks: Iterable[Task], week_start_day: date) -> list[Task]:
    """Tasks planned within the 7 days starting at week_start_day."""
    week_end = week_start_day + timedelta(days=6)
    return [
        t
        for t in filter_schedulable(tasks)
        if t.planned_day is not None and week_start_day <= t.planned_day <= week_end
    ]


def inbox_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Open tasks not yet placed on a day. Someday tasks stay out of the inbox."""
    return [
        t
        for t in _active(tasks)
        if t.planned_day is None and t.status != Status.SOMEDAY
    ]


def week_days(anchor: date, week_start: int = 0, show_weekend: bool = True) -> list[date]:
    """The seven days of the week containing anchor, optionally without Sat/Sun."""
    first = start_of_week(anchor, week_start)
    days = [first + timedelta(days=i) for i in range(7)]
    if not show_weekend:
        days = [d for d in days if d.weekday() < 5]
    return days


def office_hour_slots(start: str = "09:00", end: str = "17:00") -> list[int]:
    """Hourly slots covering office hours, end hour exclusive."""
    start_hour = extract_local_hour(start)
    end_hour = extract_local_hour(end)
    if start_hour is None or end_hour is None:
        raise ValueError(f"Invalid office hours: {start}-{end}")
    return list(range(start_hour, end_hour))
