"""Per-day time capacity utilization - no I/O."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable

from .index import PLANNED_DAY, index_by_day
from .tasks import Task

# Raw percent is kept up to this ceiling so "way over" stays distinguishable
PERCENT_CEILING = 150.0
WARN_PERCENT = 80.0
OVER_PERCENT = 100.0


class CapacityLevel(Enum):
    OK = "ok"
    WARN = "warn"
    OVER = "over"


@dataclass(frozen=True)
class Capacity:
    """Committed minutes for one day against its capacity."""

    used_minutes: int
    capacity_minutes: int
    percent: float
    level: CapacityLevel

    @property
    def display_percent(self) -> float:
        """Percent for progress bars, never past 100."""
        return min(self.percent, OVER_PERCENT)

    @property
    def remaining_minutes(self) -> int:
        return max(self.capacity_minutes - self.used_minutes, 0)

    def format(self) -> str:
        return (
            f"{format_minutes(self.used_minutes)} / {format_minutes(self.capacity_minutes)}"
            f" ({self.percent:.0f}%, {self.level.value})"
        )


def level_for(percent: float) -> CapacityLevel:
    if percent > OVER_PERCENT:
        return CapacityLevel.OVER
    if percent > WARN_PERCENT:
        return CapacityLevel.WARN
    return CapacityLevel.OK


def capacity(day_tasks: Iterable[Task], capacity_minutes: int) -> Capacity:
    """
    Utilization of one day.

    Completed tasks don't count. Level is always computed from the same
    clamped percent that is returned, so a day is "over" exactly when
    percent > 100.
    """
    used = sum(t.estimated_minutes or 0 for t in day_tasks if not t.is_completed)
    if used <= 0 or capacity_minutes <= 0:
        percent = 0.0
    else:
        percent = min(used / capacity_minutes * 100, PERCENT_CEILING)
    return Capacity(
        used_minutes=used,
        capacity_minutes=capacity_minutes,
        percent=percent,
        level=level_for(percent),
    )


def week_capacity(
    tasks: Iterable[Task],
    days: Iterable[date],
    capacity_minutes: int,
    day_field: str = PLANNED_DAY,
) -> dict[str, Capacity]:
    """Capacity for each day of a week, keyed by date key."""
    by_day = index_by_day(tasks, days, day_field)
    return {key: capacity(day_tasks, capacity_minutes) for key, day_tasks in by_day.items()}


def format_minutes(minutes: int) -> str:
    """Human duration: 45m, 2h, 2h 30m."""
    hours, mins = divmod(max(minutes, 0), 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"
