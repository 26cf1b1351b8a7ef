"""Shared workflow layer between the CLI and the task store.

Each function loads a planner session from the store, runs one engine
operation, and persists the resulting update payloads plus undo history.
"""

import logging
from datetime import date, datetime

from .adapters.http_calendar import HttpCalendarFeed
from .adapters.json_store import JsonTaskStore, StoreError
from .config import Config
from .core.calendar import Event
from .core.capacity import Capacity, week_capacity
from .core.index import PLANNED_DAY, date_key, week_days
from .core.scheduling import ScheduleResult, Target
from .core.tasks import Task, new_task, toggle_complete, with_updates
from .core.undo import UndoEntry
from .core.views import (
    DayAgenda,
    DayColumn,
    ListSection,
    build_day_agenda,
    build_list_view,
    build_week_board,
)
from .planner import PlannerSession
from .ports import CalendarFeed, TaskRepository

logger = logging.getLogger(__name__)


class TaskNotFoundError(LookupError):
    """Raised when a command names a task the store doesn't have."""

    pass


def get_store(config: Config) -> JsonTaskStore:
    """Resolve the task file from config."""
    return JsonTaskStore(config.tasks_path())


def get_calendar_feed(config: Config) -> CalendarFeed | None:
    if not config.calendar_feed_url:
        return None
    return HttpCalendarFeed(config.calendar_feed_url, token=config.calendar_feed_token)


def open_session(store: JsonTaskStore, config: Config) -> PlannerSession:
    return PlannerSession(store.fetch_all(), ledger=store.load_ledger(config.undo_limit))


def persist(store: JsonTaskStore, session: PlannerSession, results: list[ScheduleResult]) -> None:
    """Send update payloads to the store, then save undo history."""
    for result in results:
        try:
            store.update_task(result.task_id, result.updates)
        except StoreError:
            logger.error(f"Store rejected update for {result.task_id}")
            raise
    store.save_ledger(session.ledger)


def move_task(
    config: Config,
    task_id: str,
    day: date,
    hour: int | None = None,
    condensed: bool = False,
    day_field: str = PLANNED_DAY,
) -> ScheduleResult:
    """Move a task onto a day, or an hour slot of it, and persist the change."""
    store = get_store(config)
    session = open_session(store, config)
    block_minutes = config.condensed_block_minutes if condensed else config.timeline_block_minutes
    target = Target(day=day, hour=hour, block_minutes=block_minutes, day_field=day_field)

    result = session.request_move(task_id, target)
    if result is None:
        raise TaskNotFoundError(f"No task with id {task_id}")
    persist(store, session, [result])
    return result


def move_to_inbox(config: Config, task_id: str) -> ScheduleResult:
    store = get_store(config)
    session = open_session(store, config)
    result = session.move_to_inbox(task_id)
    if result is None:
        raise TaskNotFoundError(f"No task with id {task_id}")
    persist(store, session, [result])
    return result


def clear_week(config: Config, anchor: date) -> list[ScheduleResult]:
    """Move every task planned in anchor's week back to the inbox."""
    store = get_store(config)
    session = open_session(store, config)
    first_day = week_days(anchor, config.week_start)[0]
    results = session.clear_week(first_day)
    persist(store, session, results)
    return results


def undo_last(config: Config) -> tuple[UndoEntry, ScheduleResult] | None:
    """Reverse the most recent move. Returns None when there is nothing to undo."""
    store = get_store(config)
    session = open_session(store, config)
    entry = session.ledger.peek()
    result = session.undo()
    if entry is None:
        return None
    if result is None:
        # The entry was popped even though its task is gone
        store.save_ledger(session.ledger)
        return None
    persist(store, session, [result])
    return entry, result


def add_task(
    config: Config,
    text: str,
    day: date | None = None,
    estimated_minutes: int | None = None,
) -> Task:
    """Quick-add a task to the inbox or straight onto a day."""
    store = get_store(config)
    tasks = store.fetch_all()
    on_day = [t for t in tasks if day and t.planned_day == day]
    task = new_task(text, planned_day=day, tasks_on_day=on_day, estimated_minutes=estimated_minutes)
    store.create_task(task)
    return task


def find_task(store: TaskRepository, task_id: str) -> Task:
    task = next((t for t in store.fetch_all() if t.id == task_id), None)
    if task is None:
        raise TaskNotFoundError(f"No task with id {task_id}")
    return task


def complete_task(config: Config, task_id: str, now: datetime | None = None) -> Task:
    """Toggle completion of a task."""
    store = get_store(config)
    task = find_task(store, task_id)
    updates = toggle_complete(task, now)
    store.update_task(task_id, updates)
    return with_updates(task, updates)


def fetch_events(config: Config, days: list[date]) -> list[Event]:
    feed = get_calendar_feed(config)
    if feed is None or not days:
        return []
    return feed.fetch_range(days[0], days[-1])


def week_board(
    config: Config,
    anchor: date,
    condensed: bool = False,
    day_field: str = PLANNED_DAY,
) -> list[DayColumn]:
    """
    Assemble the weekly board for the week containing anchor.

    The condensed board uses the coarse configured hours and snaps each task
    to its nearest one; the full board uses office hours.
    """
    store = get_store(config)
    days = week_days(anchor, config.week_start, config.show_weekend)
    hour_slots = config.condensed_hours if condensed else config.hour_slots()
    return build_week_board(
        store.fetch_all(),
        fetch_events(config, days),
        days,
        hour_slots,
        config.capacity_minutes,
        day_field=day_field,
        snap_to_nearest=condensed,
    )


def week_capacity_report(config: Config, anchor: date) -> list[tuple[date, Capacity]]:
    """Capacity per shown day of anchor's week, without reading the calendar feed."""
    store = get_store(config)
    days = week_days(anchor, config.week_start, config.show_weekend)
    by_day = week_capacity(store.fetch_all(), days, config.capacity_minutes)
    return [(d, by_day[date_key(d)]) for d in days]


def list_view(config: Config, now: date | datetime) -> list[ListSection]:
    store = get_store(config)
    return build_list_view(store.fetch_all(), now, config.week_start)


def day_agenda(config: Config, day: date) -> DayAgenda:
    """Tasks, events and free office-hour slots for one day."""
    store = get_store(config)
    return build_day_agenda(
        store.fetch_all(),
        fetch_events(config, [day]),
        day,
        config.capacity_minutes,
        config.office_start,
        config.office_end,
    )
