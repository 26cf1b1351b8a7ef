"""Tests for the weekplan CLI."""

import json
from datetime import date
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from weekplan.cli import main
from weekplan.config import Config
from weekplan.core.tasks import Task
from weekplan.workflows import get_store


@pytest.fixture
def config(tmp_path):
    config = Config(tasks_file=str(tmp_path / "tasks.json"))
    store = get_store(config)
    store.create_task(Task(id="x", text="Write brief", scheduled_date=date(2025, 1, 10)))
    store.create_task(Task(id="a", text="Standup notes", planned_day=date(2025, 1, 17), day_order=1))
    return config


@pytest.fixture
def run(config):
    runner = CliRunner()

    def _run(*args: str):
        with patch("weekplan.cli.load_config", return_value=config):
            return runner.invoke(main, list(args))

    return _run


class TestListCommand:
    def test_lists_sections(self, run):
        result = run("list")
        assert result.exit_code == 0
        assert "### Overdue (1)" in result.output
        assert "Write brief" in result.output
        assert "### Unscheduled (1)" in result.output

    def test_json(self, run):
        result = run("list", "--json")
        data = json.loads(result.output)
        assert [t["task_id"] for t in data["unscheduled"]] == ["a"]

    def test_empty(self, tmp_path):
        config = Config(tasks_file=str(tmp_path / "empty.json"))
        with patch("weekplan.cli.load_config", return_value=config):
            result = CliRunner().invoke(main, ["list"])
        assert "No tasks." in result.output


class TestMoveCommand:
    def test_move_to_hour(self, run, config):
        result = run("move", "x", "2025-01-17", "--hour", "9")
        assert result.exit_code == 0
        assert "Scheduled for Fri at 09:00" in result.output

        task = next(t for t in get_store(config).fetch_all() if t.id == "x")
        assert task.planned_day == date(2025, 1, 17)
        assert task.day_order == 2

    def test_unknown_task(self, run):
        result = run("move", "missing", "2025-01-17")
        assert result.exit_code == 1
        assert "Error: No task with id missing" in result.output

    def test_hour_out_of_range(self, run):
        result = run("move", "x", "2025-01-17", "--hour", "24")
        assert result.exit_code == 2

    def test_bad_date(self, run):
        assert run("move", "x", "Friday").exit_code == 2


class TestUndoCommand:
    def test_undo_after_move(self, run, config):
        run("move", "x", "2025-01-17")
        result = run("undo")
        assert result.exit_code == 0
        assert "Undid move of: Write brief" in result.output

        task = next(t for t in get_store(config).fetch_all() if t.id == "x")
        assert task.planned_day is None

    def test_nothing_to_undo(self, run):
        assert "Nothing to undo." in run("undo").output


class TestOtherCommands:
    def test_add(self, run):
        result = run("add", "Buy stamps", "--day", "2025-01-17", "--minutes", "15")
        assert result.exit_code == 0
        assert "Added to Fri: Buy stamps" in result.output

    def test_add_to_inbox(self, run):
        assert "Added to inbox: Buy stamps" in run("add", "Buy stamps").output

    def test_add_empty_text(self, run):
        result = run("add", "   ")
        assert result.exit_code == 1
        assert "Task text is empty" in result.output

    def test_inbox(self, run, config):
        assert "Moved to inbox" in run("inbox", "a").output
        task = next(t for t in get_store(config).fetch_all() if t.id == "a")
        assert task.planned_day is None

    def test_done(self, run):
        assert "Completed: Write brief" in run("done", "x").output
        assert "Reopened: Write brief" in run("done", "x").output

    def test_clear_week(self, run):
        result = run("clear-week", "--date", "2025-01-15", "--yes")
        assert result.exit_code == 0
        assert "Moved 1 tasks to inbox (week of 2025-01-13)" in result.output
        assert "Nothing to undo." in run("undo").output

    def test_clear_week_needs_confirmation(self, run, config):
        with patch("weekplan.cli.load_config", return_value=config):
            result = CliRunner().invoke(main, ["clear-week", "--date", "2025-01-15"], input="n\n")
        assert result.exit_code == 1
        task = next(t for t in get_store(config).fetch_all() if t.id == "a")
        assert task.planned_day == date(2025, 1, 17)

    def test_week(self, run):
        result = run("week", "--date", "2025-01-15")
        assert result.exit_code == 0
        assert "### Friday, January 17" in result.output
        assert "Standup notes  #a" in result.output

    def test_week_json(self, run):
        data = json.loads(run("week", "--date", "2025-01-15", "--json").output)
        friday = next(d for d in data if d["date"] == "2025-01-17")
        assert friday["untimed"] == ["a"]
        assert friday["level"] == "ok"

    def test_capacity(self, run):
        result = run("capacity", "--date", "2025-01-15")
        assert result.exit_code == 0
        assert "Fri 17" in result.output
        assert "0m / 4h" in result.output

    def test_capacity_does_not_fetch_events(self, tmp_path):
        config = Config(tasks_file=str(tmp_path / "tasks.json"), calendar_feed_url="https://calendar.example.com")
        with patch("weekplan.cli.load_config", return_value=config), patch(
            "weekplan.workflows.HttpCalendarFeed"
        ) as mock_feed:
            result = CliRunner().invoke(main, ["capacity", "--date", "2025-01-15"])
        assert result.exit_code == 0
        mock_feed.assert_not_called()

    def test_week_condensed(self, run):
        run("move", "x", "2025-01-17", "--hour", "11")
        data = json.loads(run("week", "--date", "2025-01-15", "--condensed", "--json").output)
        friday = next(d for d in data if d["date"] == "2025-01-17")
        assert friday["hours"] == {"10": ["x"]}

    def test_day(self, run):
        run("move", "x", "2025-01-17", "--hour", "9")
        result = run("day", "--date", "2025-01-17")
        assert result.exit_code == 0
        assert "### Friday, January 17" in result.output
        assert "09:00    Write brief  #x" in result.output
        assert "10:00-17:00 (420 min)" in result.output
