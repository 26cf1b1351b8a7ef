"""weekplan CLI - task triage and weekly planning."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .adapters.json_store import StoreError
from .config import load_config
from .core.capacity import format_minutes
from .core.index import SCHEDULED_DATE, PLANNED_DAY, extract_local_hour, week_days
from .core.scheduling import serialize_updates
from .core.views import format_task_line
from .workflows import (
    TaskNotFoundError,
    add_task,
    clear_week,
    complete_task,
    day_agenda,
    list_view,
    move_task,
    move_to_inbox,
    undo_last,
    week_board,
    week_capacity_report,
)

logger = logging.getLogger(__name__)

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _day(value: datetime | None) -> date:
    return value.date() if value else date.today()


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="weekplan")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """weekplan - triage tasks and plan your week."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_tasks(as_json: bool):
    """List tasks grouped by when they are due."""
    config = load_config()
    now = datetime.now()
    try:
        sections = list_view(config, now)
    except StoreError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                {s.bucket.value: [t.to_record() for t in s.tasks] for s in sections},
                indent=2,
            )
        )
        return

    if not sections:
        click.echo("No tasks.")
        return

    for i, section in enumerate(sections):
        if i:
            click.echo()
        click.echo(f"### {section.label} ({len(section.tasks)})")
        for task in section.tasks:
            click.echo(format_task_line(task, now))


@main.command()
@click.option("--date", "on", type=DATE, help="Any day in the week (default: today)")
@click.option("--condensed", is_flag=True, help="Use the condensed hour grid")
@click.option(
    "--field",
    "day_field",
    type=click.Choice([PLANNED_DAY, SCHEDULED_DATE]),
    default=PLANNED_DAY,
    show_default=True,
    help="Which date places tasks on the board",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def week(on: datetime | None, condensed: bool, day_field: str, as_json: bool):
    """Show the weekly board."""
    config = load_config()
    try:
        columns = week_board(config, _day(on), condensed, day_field)
    except StoreError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "date": c.key,
                        "untimed": [t.id for t in c.untimed],
                        "hours": {str(h): [t.id for t in cell] for h, cell in c.hours.items() if cell},
                        "off_grid": [t.id for t in c.off_grid],
                        "used_minutes": c.capacity.used_minutes,
                        "percent": round(c.capacity.percent, 1),
                        "level": c.capacity.level.value,
                    }
                    for c in columns
                ],
                indent=2,
            )
        )
        return

    for i, column in enumerate(columns):
        if i:
            click.echo()
        click.echo(f"### {column.day.strftime('%A, %B %d')}  [{column.capacity.format()}]")
        for event in column.all_day_events:
            click.echo(f"  {'All day':8} * {event.summary}")
        for task in column.untimed:
            click.echo(f"  {'All day':8} {task.text}  #{task.id}")
        for hour, cell in column.hours.items():
            for event in column.events.get(hour, []):
                click.echo(f"  {event.format_time():8} * {event.summary}")
            for task in cell:
                click.echo(f"  {hour:02d}:00    {task.text}  #{task.id}")
        for task in column.off_grid:
            click.echo(f"  {'(off)':8} {task.text}  #{task.id}")


@main.command()
@click.option("--date", "on", type=DATE, help="Day to show (default: today)")
def day(on: datetime | None):
    """Show one day's tasks, events and free time."""
    config = load_config()
    try:
        agenda = day_agenda(config, _day(on))
    except StoreError as e:
        _fail(e)

    click.echo(f"### {agenda.day.strftime('%A, %B %d')}  [{agenda.capacity.format()}]")
    if agenda.events:
        click.echo()
        click.echo("Events:")
        for event in agenda.events:
            click.echo(f"  {event.format_time():8} {event.summary}")
    click.echo()
    click.echo("Tasks:")
    if not agenda.tasks:
        click.echo("  (none)")
    for task in agenda.tasks:
        hour = extract_local_hour(task.time_block_start)
        when = f"{hour:02d}:00" if hour is not None else ""
        click.echo(f"  {when:8} {task.text}  #{task.id}")
    click.echo()
    click.echo("Free:")
    if not agenda.free_slots:
        click.echo("  (no free time)")
    for slot in agenda.free_slots:
        click.echo(f"  {slot.format()}")


@main.command()
@click.option("--date", "on", type=DATE, help="Day to show (default: today)")
def capacity(on: datetime | None):
    """Show committed time per day for the week."""
    config = load_config()
    try:
        report = week_capacity_report(config, _day(on))
    except StoreError as e:
        _fail(e)

    for shown_day, cap in report:
        bar = "#" * int(cap.display_percent // 10)
        click.echo(
            f"{shown_day.strftime('%a %d')}  {bar:10}  {format_minutes(cap.used_minutes):>7}"
            f" / {format_minutes(cap.capacity_minutes)}  {cap.level.value}"
        )


@main.command()
@click.argument("text")
@click.option("--day", type=DATE, help="Plan straight onto this day")
@click.option("--minutes", type=int, help="Estimated minutes")
def add(text: str, day: datetime | None, minutes: int | None):
    """Quick-add a task (inbox unless --day is given)."""
    config = load_config()
    if not text.strip():
        _fail(ValueError("Task text is empty"))
    try:
        task = add_task(config, text, day.date() if day else None, minutes)
    except StoreError as e:
        _fail(e)
    where = task.planned_day.strftime("%a") if task.planned_day else "inbox"
    click.echo(f"Added to {where}: {task.text}  #{task.id}")


@main.command()
@click.argument("task_id")
@click.argument("day", type=DATE)
@click.option("--hour", type=click.IntRange(0, 23), help="Hour slot (omit for all-day)")
@click.option("--condensed", is_flag=True, help="Use the condensed grid's block length")
@click.option(
    "--field",
    "day_field",
    type=click.Choice([PLANNED_DAY, SCHEDULED_DATE]),
    default=PLANNED_DAY,
    show_default=True,
    help="Which date the view schedules by",
)
def move(task_id: str, day: datetime, hour: int | None, condensed: bool, day_field: str):
    """Move a task onto a day or an hour slot."""
    config = load_config()
    try:
        result = move_task(config, task_id, day.date(), hour, condensed, day_field)
    except (TaskNotFoundError, StoreError) as e:
        _fail(e)

    when = day.strftime("%a")
    if hour is not None:
        when += f" at {hour:02d}:00"
    click.echo(f"Scheduled for {when}")
    logger.debug(f"Update payload: {json.dumps(serialize_updates(result.updates))}")


@main.command()
@click.argument("task_id")
def inbox(task_id: str):
    """Move a task back to the inbox."""
    config = load_config()
    try:
        move_to_inbox(config, task_id)
    except (TaskNotFoundError, StoreError) as e:
        _fail(e)
    click.echo("Moved to inbox")


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Toggle a task's completion."""
    config = load_config()
    try:
        task = complete_task(config, task_id)
    except (TaskNotFoundError, StoreError) as e:
        _fail(e)
    click.echo(f"{'Completed' if task.is_completed else 'Reopened'}: {task.text}")


@main.command()
def undo():
    """Undo the last scheduling change."""
    config = load_config()
    try:
        undone = undo_last(config)
    except StoreError as e:
        _fail(e)
    if undone is None:
        click.echo("Nothing to undo.")
        return
    entry, _ = undone
    click.echo(f"Undid move of: {entry.task_text or entry.task_id}")


@main.command("clear-week")
@click.option("--date", "on", type=DATE, help="Any day in the week (default: today)")
@click.confirmation_option(prompt="Move every task planned this week back to the inbox? This can't be undone.")
def clear_week_cmd(on: datetime | None):
    """Move all of a week's planned tasks back to the inbox."""
    config = load_config()
    anchor = _day(on)
    try:
        results = clear_week(config, anchor)
    except StoreError as e:
        _fail(e)
    first = week_days(anchor, config.week_start)[0]
    click.echo(f"Moved {len(results)} tasks to inbox (week of {first.isoformat()})")


if __name__ == "__main__":
    main()
