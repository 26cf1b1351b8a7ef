"""Calendar feed interface."""

from datetime import date
from typing import Protocol

from weekplan.core.calendar import Event


class CalendarFeed(Protocol):
    """Interface for the read-only third-party calendar feed."""

    def fetch_range(self, start_date: date, end_date: date) -> list[Event]:
        """Fetch events from start_date through end_date inclusive."""
        ...
