"""Configuration management for weekplan."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.index import CONDENSED_HOURS, office_hour_slots
from .core.undo import DEFAULT_UNDO_LIMIT

logger = logging.getLogger(__name__)

WEEKPLAN_HOME = Path(os.environ.get("WEEKPLAN_HOME", Path.home() / "weekplan"))
CONFIG_FILE = WEEKPLAN_HOME / "config" / "weekplan.conf"
DATA_DIR = WEEKPLAN_HOME / "data"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


@dataclass
class Config:
    """weekplan configuration."""

    capacity_minutes: int = 240
    week_start_day: str = "Monday"
    office_hours: str = "09:00-17:00"
    show_weekend: bool = True
    timeline_block_minutes: int = 60
    condensed_block_minutes: int = 120
    condensed_hours: list[int] = field(default_factory=lambda: list(CONDENSED_HOURS))
    undo_limit: int = DEFAULT_UNDO_LIMIT
    tasks_file: str = ""
    calendar_feed_url: str = ""
    calendar_feed_token: str = ""

    @property
    def week_start(self) -> int:
        """Week start as a weekday() number (0 = Monday)."""
        return WEEKDAYS.index(self.week_start_day.lower())

    @property
    def office_start(self) -> int:
        return int(self.office_hours.split("-")[0].split(":")[0])

    @property
    def office_end(self) -> int:
        return int(self.office_hours.split("-")[1].split(":")[0])

    def hour_slots(self) -> list[int]:
        start, _, end = self.office_hours.partition("-")
        return office_hour_slots(start.strip(), end.strip())

    def tasks_path(self) -> Path:
        if self.tasks_file:
            return Path(self.tasks_file).expanduser()
        return DATA_DIR / "tasks.json"


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default


def _parse_office_hours(value: str, default: str) -> str:
    try:
        start, _, end = value.partition("-")
        slots = office_hour_slots(start.strip(), end.strip())
    except ValueError:
        slots = []
    if not slots:
        logger.warning(f"Invalid OFFICE_HOURS: {value!r}, using {default}")
        return default
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from weekplan.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value.startswith('"') or value.startswith("'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "capacity_minutes":
                config.capacity_minutes = _parse_int(key, value, config.capacity_minutes)
            case "week_start_day":
                if value.lower() in WEEKDAYS:
                    config.week_start_day = value.capitalize()
                else:
                    logger.warning(f"Invalid WEEK_START_DAY: {value!r}, using {config.week_start_day}")
            case "office_hours":
                config.office_hours = _parse_office_hours(value, config.office_hours)
            case "show_weekend":
                config.show_weekend = value.lower() in ("1", "true", "yes", "on")
            case "timeline_block_minutes":
                config.timeline_block_minutes = _parse_int(key, value, config.timeline_block_minutes)
            case "condensed_block_minutes":
                config.condensed_block_minutes = _parse_int(key, value, config.condensed_block_minutes)
            case "condensed_hours":
                try:
                    hours = [int(h.strip()) for h in value.split(",") if h.strip()]
                except ValueError:
                    hours = []
                if hours:
                    config.condensed_hours = sorted(hours)
                else:
                    logger.warning(f"Invalid CONDENSED_HOURS: {value!r}")
            case "undo_limit":
                config.undo_limit = max(1, _parse_int(key, value, config.undo_limit))
            case "tasks_file":
                config.tasks_file = value
            case "calendar_feed_url":
                config.calendar_feed_url = value
            case "calendar_feed_token":
                config.calendar_feed_token = value

    return config
