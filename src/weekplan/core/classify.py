"""Temporal classification of tasks into display buckets - no I/O."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from .tasks import Task, filter_schedulable


class Bucket(Enum):
    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    LATER = "later"
    UNSCHEDULED = "unscheduled"
    COMPLETED = "completed"


BUCKET_LABELS = {
    Bucket.OVERDUE: "Overdue",
    Bucket.TODAY: "Today",
    Bucket.TOMORROW: "Tomorrow",
    Bucket.THIS_WEEK: "This Week",
    Bucket.LATER: "Later",
    Bucket.UNSCHEDULED: "Unscheduled",
    Bucket.COMPLETED: "Completed",
}


@dataclass
class Buckets:
    """A partition of a task list. No task appears in more than one list."""

    overdue: list[Task] = field(default_factory=list)
    today: list[Task] = field(default_factory=list)
    tomorrow: list[Task] = field(default_factory=list)
    this_week: list[Task] = field(default_factory=list)
    later: list[Task] = field(default_factory=list)
    unscheduled: list[Task] = field(default_factory=list)
    completed: list[Task] = field(default_factory=list)

    def get(self, bucket: Bucket) -> list[Task]:
        return getattr(self, bucket.value)

    def all(self) -> list[Task]:
        """Flatten back into one list, in bucket order."""
        return [t for bucket in Bucket for t in self.get(bucket)]

    def counts(self) -> dict[str, int]:
        return {bucket.value: len(self.get(bucket)) for bucket in Bucket}


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def days_between(later: date | datetime, earlier: date | datetime) -> int:
    """Whole calendar days from earlier to later (start of day on both sides)."""
    return (_as_date(later) - _as_date(earlier)).days


def start_of_week(day: date | datetime, week_start: int = 0) -> date:
    """First day of the week containing day. week_start uses weekday() numbering (0 = Monday)."""
    d = _as_date(day)
    return d - timedelta(days=(d.weekday() - week_start) % 7)


def is_same_week(a: date | datetime, b: date | datetime, week_start: int = 0) -> bool:
    return start_of_week(a, week_start) == start_of_week(b, week_start)


def bucket_for(task: Task, now: date | datetime, week_start: int = 0) -> Bucket:
    """Classify a single task. First matching rule wins."""
    if task.is_completed:
        return Bucket.COMPLETED
    if task.scheduled_date is None:
        return Bucket.UNSCHEDULED

    diff = days_between(task.scheduled_date, now)
    if diff < 0:
        return Bucket.OVERDUE
    if diff == 0:
        return Bucket.TODAY
    if diff == 1:
        return Bucket.TOMORROW
    if is_same_week(task.scheduled_date, now, week_start):
        return Bucket.THIS_WEEK
    return Bucket.LATER


def classify(tasks: list[Task], now: date | datetime, week_start: int = 0) -> Buckets:
    """
    Partition tasks into temporal buckets relative to now.

    Pure function - no I/O. Input order is preserved within each bucket.
    """
    buckets = Buckets()
    for task in tasks:
        buckets.get(bucket_for(task, now, week_start)).append(task)
    return buckets


def group_for_list(tasks: list[Task], now: date | datetime, week_start: int = 0) -> Buckets:
    """List-view entry point: recurring parents are dropped before classification."""
    return classify(filter_schedulable(tasks), now, week_start)


def format_due_date(scheduled_date: date, now: date | datetime) -> str:
    """Relative due-date label derived from the same day difference as bucket_for."""
    diff = days_between(scheduled_date, now)
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff == -1:
        return "Yesterday"
    if 1 < diff <= 7:
        return f"In {diff} days"
    if diff < -1:
        return f"{-diff} days ago"
    return f"{scheduled_date.strftime('%b')} {scheduled_date.day}"


HORIZON_GROUPS = (
    "overdue",
    "today",
    "tomorrow",
    "this_week",
    "next_week",
    "later",
    "unscheduled",
)


def group_by_horizon(
    tasks: list[Task],
    now: date | datetime,
    include_completed: bool = False,
) -> dict[str, list[Task]]:
    """
    Rolling-horizon grouping for the all-tasks page.

    Unlike classify, "this week" means within 7 days and "next week" within
    14, regardless of calendar week boundaries.
    """
    groups: dict[str, list[Task]] = {name: [] for name in HORIZON_GROUPS}
    for task in filter_schedulable(tasks):
        if task.is_completed and not include_completed:
            continue
        if task.scheduled_date is None:
            groups["unscheduled"].append(task)
            continue

        diff = days_between(task.scheduled_date, now)
        if diff < 0:
            groups["overdue"].append(task)
        elif diff == 0:
            groups["today"].append(task)
        elif diff == 1:
            groups["tomorrow"].append(task)
        elif diff <= 7:
            groups["this_week"].append(task)
        elif diff <= 14:
            groups["next_week"].append(task)
        else:
            groups["later"].append(task)
    return groups
