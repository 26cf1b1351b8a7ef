"""Pure calendar domain logic - no I/O dependencies.

Calendar events come from an external read-only feed. They are shown next to
tasks on the grid but are never mutated and never count toward capacity.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Iterable

from .index import date_key, extract_local_time
from .tasks import Task


@dataclass
class Event:
    """A calendar event from the external feed."""

    id: str
    summary: str
    start: datetime
    end: datetime | None
    location: str = ""
    attendees: list[str] = field(default_factory=list)
    all_day: bool = False

    def format_time(self) -> str:
        """Format the event time for display."""
        if self.all_day:
            return "All day"
        return self.start.strftime("%H:%M")

    def duration_minutes(self) -> int | None:
        """Event duration in minutes, or None if no end time."""
        if not self.end:
            return None
        return int((self.end - self.start).total_seconds() / 60)

    @classmethod
    def from_feed(cls, item: dict) -> "Event | None":
        """
        Create an Event from a Google-style feed item.

        Timed events carry start.dateTime, all-day events start.date. Items
        with neither, or that aren't shaped like feed objects, are skipped
        (None). Times keep the wall clock the feed reports.
        """
        if not isinstance(item, dict):
            return None
        start_raw = item.get("start") or {}
        end_raw = item.get("end") or {}
        if not isinstance(start_raw, dict) or not isinstance(end_raw, dict):
            return None
        try:
            if start_raw.get("dateTime"):
                start = _wall_clock(datetime.fromisoformat(start_raw["dateTime"]))
                end = _wall_clock(datetime.fromisoformat(end_raw["dateTime"])) if end_raw.get("dateTime") else None
                all_day = False
            elif start_raw.get("date"):
                start = datetime.combine(date.fromisoformat(start_raw["date"]), time(0, 0))
                end = datetime.combine(date.fromisoformat(end_raw["date"]), time(0, 0)) if end_raw.get("date") else None
                all_day = True
            else:
                return None
        except (TypeError, ValueError):
            return None

        raw_attendees = item.get("attendees")
        attendees = [
            a.get("email", "") if isinstance(a, dict) else str(a)
            for a in (raw_attendees if isinstance(raw_attendees, list) else [])
        ]
        return cls(
            id=str(item.get("id", "")),
            summary=item.get("summary") or "Untitled",
            start=start,
            end=end,
            location=item.get("location") or "",
            attendees=attendees,
            all_day=all_day,
        )


def _wall_clock(dt: datetime) -> datetime:
    # Drop the offset without converting so the displayed hour is the feed's hour
    return dt.replace(tzinfo=None)


@dataclass
class TimeSlot:
    """A free time slot."""

    start: datetime
    end: datetime

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def format(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')} ({self.duration_minutes()} min)"

    def contains(self, dt: datetime) -> bool:
        """Check if a datetime falls within this slot."""
        return self.start <= dt < self.end


def filter_events_by_date(
    events: list[Event],
    start_date: date,
    end_date: date | None = None,
) -> list[Event]:
    """Filter events to those within a date range."""
    end_date = end_date or start_date
    return [e for e in events if start_date <= e.start.date() <= end_date]


def sort_events_by_start(events: list[Event]) -> list[Event]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: e.start)


def index_events_by_day_and_hour(
    events: Iterable[Event],
    days: Iterable[date],
    hour_slots: Iterable[int],
) -> dict[str, dict[int, list[Event]]]:
    """Timed events per (day, hour) cell. All-day events are left out."""
    slots = list(hour_slots)
    index: dict[str, dict[int, list[Event]]] = {date_key(d): {h: [] for h in slots} for d in days}
    for event in sort_events_by_start(list(events)):
        if event.all_day:
            continue
        row = index.get(date_key(event.start.date()))
        if row is None:
            continue
        cell = row.get(event.start.hour)
        if cell is not None:
            cell.append(event)
    return index


def all_day_events_by_day(events: Iterable[Event], days: Iterable[date]) -> dict[str, list[Event]]:
    """All-day events per day."""
    index: dict[str, list[Event]] = {date_key(d): [] for d in days}
    for event in events:
        if not event.all_day:
            continue
        bucket = index.get(date_key(event.start.date()))
        if bucket is not None:
            bucket.append(event)
    return index


def _task_block(task: Task, day: date) -> tuple[datetime, datetime] | None:
    start = extract_local_time(task.time_block_start)
    if start is None:
        return None
    end = extract_local_time(task.time_block_end)
    start_dt = datetime.combine(day, time(*start))
    end_dt = datetime.combine(day, time(*end)) if end else start_dt
    # Blocks running past midnight end at the day boundary
    if end_dt < start_dt:
        end_dt = datetime.combine(day, time.max)
    return start_dt, end_dt


def find_free_slots(
    events: list[Event],
    tasks: list[Task],
    day: date,
    office_start: int = 9,
    office_end: int = 17,
    min_duration: int = 30,
) -> list[TimeSlot]:
    """
    Find free time during office hours, between events and time-blocked tasks.

    Pure function - no I/O. Only events on `day` and open tasks planned on
    `day` with a time block are treated as busy.

    Args:
        events: Calendar events (any days; others are ignored)
        tasks: Tasks (only timed, open tasks planned on `day` count)
        day: Date to find slots for
        office_start: Start of office hours (hour, 24h format)
        office_end: End of office hours (hour, 24h format)
        min_duration: Minimum slot duration in minutes

    Returns:
        List of free TimeSlots
    """
    busy: list[tuple[datetime, datetime]] = []
    for e in events:
        if e.all_day or e.end is None or e.start.date() != day:
            continue
        busy.append((e.start, e.end))
    for t in tasks:
        if t.is_completed or t.planned_day != day:
            continue
        block = _task_block(t, day)
        if block:
            busy.append(block)
    busy.sort()

    day_start = datetime.combine(day, time(office_start, 0))
    day_end = datetime.combine(day, time(office_end, 0)) if office_end < 24 else datetime.combine(day, time.max)

    free_slots = []
    current_time = day_start

    for busy_start, busy_end in busy:
        # Skip blocks outside office hours
        if busy_end <= day_start or busy_start >= day_end:
            continue

        busy_start = max(busy_start, day_start)
        busy_end = min(busy_end, day_end)

        if busy_start > current_time:
            gap = TimeSlot(start=current_time, end=busy_start)
            if gap.duration_minutes() >= min_duration:
                free_slots.append(gap)

        current_time = max(current_time, busy_end)

    if current_time < day_end:
        gap = TimeSlot(start=current_time, end=day_end)
        if gap.duration_minutes() >= min_duration:
            free_slots.append(gap)

    return free_slots
