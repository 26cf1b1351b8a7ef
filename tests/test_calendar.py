"""Tests for core calendar logic."""

from datetime import date, datetime, time, timedelta

import pytest

from weekplan.core.calendar import (
    Event,
    TimeSlot,
    all_day_events_by_day,
    filter_events_by_date,
    find_free_slots,
    index_events_by_day_and_hour,
    sort_events_by_start,
)
from weekplan.core.tasks import Task


# Fixtures
@pytest.fixture
def today():
    return date(2025, 1, 15)


@pytest.fixture
def make_event(today):
    """Factory for creating events."""
    def _make(
        summary: str,
        start_hour: int,
        end_hour: int,
        all_day: bool = False,
        day: date | None = None,
    ) -> Event:
        day = day or today
        start = datetime.combine(day, time(start_hour, 0))
        end = datetime.combine(day, time(end_hour, 0)) if end_hour else None
        return Event(
            id=summary.lower(),
            summary=summary,
            start=start,
            end=end,
            all_day=all_day,
        )
    return _make


@pytest.fixture
def make_block(today):
    """Factory for time-blocked tasks."""
    def _make(task_id: str, start_hour: int, end_hour: int, **kwargs) -> Task:
        return Task(
            id=task_id,
            planned_day=kwargs.pop("planned_day", today),
            time_block_start=datetime.combine(today, time(start_hour, 0)).isoformat(),
            time_block_end=datetime.combine(today, time(end_hour, 0)).isoformat(),
            **kwargs,
        )
    return _make


# Event class tests
class TestEvent:
    def test_format_time_regular(self, today):
        event = Event(
            id="1",
            summary="Meeting",
            start=datetime.combine(today, time(14, 30)),
            end=datetime.combine(today, time(15, 30)),
        )
        assert event.format_time() == "14:30"

    def test_format_time_all_day(self, today):
        event = Event(
            id="1",
            summary="Holiday",
            start=datetime.combine(today, time(0, 0)),
            end=datetime.combine(today + timedelta(days=1), time(0, 0)),
            all_day=True,
        )
        assert event.format_time() == "All day"

    def test_duration_minutes(self, make_event):
        assert make_event("Meeting", 14, 16).duration_minutes() == 120

    def test_duration_minutes_no_end(self, make_event):
        assert make_event("Meeting", 14, 0).duration_minutes() is None


class TestFromFeed:
    def test_timed_event(self):
        event = Event.from_feed(
            {
                "id": "evt1",
                "summary": "Design review",
                "start": {"dateTime": "2025-01-15T14:00:00"},
                "end": {"dateTime": "2025-01-15T15:00:00"},
                "location": "Room 4",
                "attendees": [{"email": "ana@example.com"}, "bo@example.com"],
            }
        )
        assert event.id == "evt1"
        assert event.start == datetime(2025, 1, 15, 14, 0)
        assert event.duration_minutes() == 60
        assert event.all_day is False
        assert event.location == "Room 4"
        assert event.attendees == ["ana@example.com", "bo@example.com"]

    def test_offset_keeps_wall_clock(self):
        event = Event.from_feed(
            {
                "id": "evt1",
                "summary": "Call",
                "start": {"dateTime": "2025-01-15T09:00:00-08:00"},
                "end": {"dateTime": "2025-01-15T09:30:00-08:00"},
            }
        )
        assert event.start.hour == 9
        assert event.start.tzinfo is None

    def test_all_day_event(self):
        event = Event.from_feed(
            {
                "id": "evt2",
                "summary": "Offsite",
                "start": {"date": "2025-01-16"},
                "end": {"date": "2025-01-17"},
            }
        )
        assert event.all_day is True
        assert event.start == datetime(2025, 1, 16, 0, 0)
        assert event.format_time() == "All day"

    def test_missing_summary(self):
        event = Event.from_feed({"id": "x", "start": {"date": "2025-01-16"}})
        assert event.summary == "Untitled"
        assert event.end is None

    @pytest.mark.parametrize(
        "item",
        [
            {"id": "x"},
            {"id": "x", "start": {}},
            {"id": "x", "start": {"dateTime": "not a time"}},
            {"id": "x", "start": "2026-01-09T09:00:00"},
            {"id": "x", "start": {"dateTime": "2026-01-09T09:00:00"}, "end": "2026-01-09T10:00:00"},
            {"id": "x", "start": {"dateTime": 1736413200}},
            "oops",
            None,
        ],
    )
    def test_unreadable_items_skipped(self, item):
        assert Event.from_feed(item) is None


# TimeSlot class tests
class TestTimeSlot:
    def test_duration_minutes(self, today):
        slot = TimeSlot(
            start=datetime.combine(today, time(9, 0)),
            end=datetime.combine(today, time(10, 30)),
        )
        assert slot.duration_minutes() == 90

    def test_format(self, today):
        slot = TimeSlot(
            start=datetime.combine(today, time(9, 0)),
            end=datetime.combine(today, time(10, 30)),
        )
        assert slot.format() == "09:00-10:30 (90 min)"

    def test_contains(self, today):
        slot = TimeSlot(
            start=datetime.combine(today, time(9, 0)),
            end=datetime.combine(today, time(12, 0)),
        )
        assert slot.contains(datetime.combine(today, time(10, 0))) is True
        assert slot.contains(datetime.combine(today, time(9, 0))) is True
        assert slot.contains(datetime.combine(today, time(12, 0))) is False
        assert slot.contains(datetime.combine(today, time(8, 0))) is False


# find_free_slots tests
class TestFindFreeSlots:
    def test_no_events_returns_full_day(self, today):
        """With nothing booked, all of office hours is free."""
        slots = find_free_slots([], [], today)
        assert len(slots) == 1
        assert slots[0].start.hour == 9
        assert slots[0].end.hour == 17

    def test_event_splits_day(self, today, make_event):
        slots = find_free_slots([make_event("Lunch", 12, 13)], [], today)
        assert [(s.start.hour, s.end.hour) for s in slots] == [(9, 12), (13, 17)]

    def test_time_blocked_task_is_busy(self, today, make_block):
        slots = find_free_slots([], [make_block("t", 9, 11)], today)
        assert [(s.start.hour, s.end.hour) for s in slots] == [(11, 17)]

    def test_space_separated_block_is_busy(self, today):
        task = Task(
            id="t",
            planned_day=today,
            time_block_start=f"{today.isoformat()} 09:00:00",
            time_block_end=f"{today.isoformat()} 11:00:00",
        )
        slots = find_free_slots([], [task], today)
        assert [(s.start.hour, s.end.hour) for s in slots] == [(11, 17)]

    def test_completed_and_other_day_tasks_ignored(self, today, make_block):
        tasks = [
            make_block("done", 9, 11, is_completed=True),
            make_block("elsewhere", 13, 14, planned_day=today + timedelta(days=1)),
        ]
        assert len(find_free_slots([], tasks, today)) == 1

    def test_overlapping_busy_blocks(self, today, make_event, make_block):
        slots = find_free_slots([make_event("Review", 10, 12)], [make_block("t", 11, 13)], today)
        assert [(s.start.hour, s.end.hour) for s in slots] == [(9, 10), (13, 17)]

    def test_short_gaps_dropped(self, today, make_event):
        events = [
            make_event("A", 9, 10),
            Event(
                id="b",
                summary="B",
                start=datetime.combine(today, time(10, 15)),
                end=datetime.combine(today, time(17, 0)),
            ),
        ]
        assert find_free_slots(events, [], today) == []
        assert len(find_free_slots(events, [], today, min_duration=15)) == 1

    def test_all_day_and_other_days_ignored(self, today, make_event):
        events = [
            make_event("Holiday", 0, 0, all_day=True),
            make_event("Tomorrow", 9, 17, day=today + timedelta(days=1)),
        ]
        assert len(find_free_slots(events, [], today)) == 1

    def test_custom_office_hours(self, today, make_event):
        slots = find_free_slots([make_event("Early", 7, 9)], [], today, office_start=8, office_end=12)
        assert [(s.start.hour, s.end.hour) for s in slots] == [(9, 12)]

    def test_events_outside_hours(self, today, make_event):
        slots = find_free_slots([make_event("Evening", 18, 20)], [], today)
        assert [(s.start.hour, s.end.hour) for s in slots] == [(9, 17)]


class TestFilterAndSort:
    def test_filter_events_by_date(self, today, make_event):
        events = [
            make_event("Today", 9, 10),
            make_event("Tomorrow", 9, 10, day=today + timedelta(days=1)),
            make_event("Later", 9, 10, day=today + timedelta(days=5)),
        ]
        assert [e.summary for e in filter_events_by_date(events, today)] == ["Today"]
        in_range = filter_events_by_date(events, today, today + timedelta(days=1))
        assert [e.summary for e in in_range] == ["Today", "Tomorrow"]

    def test_sort_events_by_start(self, make_event):
        events = [make_event("C", 15, 16), make_event("A", 9, 10), make_event("B", 11, 12)]
        assert [e.summary for e in sort_events_by_start(events)] == ["A", "B", "C"]


class TestEventIndexing:
    def test_events_by_day_and_hour(self, today, make_event):
        events = [
            make_event("Standup", 9, 10),
            make_event("Holiday", 0, 0, all_day=True),
            make_event("Early", 6, 7),
        ]
        index = index_events_by_day_and_hour(events, [today], range(9, 17))
        row = index["2025-01-15"]
        assert [e.summary for e in row[9]] == ["Standup"]
        assert sum(len(cell) for cell in row.values()) == 1

    def test_all_day_events_by_day(self, today, make_event):
        events = [make_event("Holiday", 0, 0, all_day=True), make_event("Standup", 9, 10)]
        index = all_day_events_by_day(events, [today, today + timedelta(days=1)])
        assert [e.summary for e in index["2025-01-15"]] == ["Holiday"]
        assert index["2025-01-16"] == []
