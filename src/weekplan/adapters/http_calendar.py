"""HTTP calendar feed adapter - read-only third-party events."""

import logging
from datetime import date, timedelta

import requests

from weekplan.core.calendar import Event, filter_events_by_date, sort_events_by_start

logger = logging.getLogger(__name__)


class HttpCalendarFeed:
    """
    Calendar feed over HTTP.

    Implements CalendarFeed protocol. GETs the configured URL with
    startDate/endDate and reads a {"events": [...]} body of Google-style
    items. Feed failures never break the planner: they are logged and an
    empty list is returned.
    """

    def __init__(self, url: str, token: str = "", timeout: int = 15):
        self.url = url
        self.token = token
        self.timeout = timeout
        self._session = requests.Session()

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def fetch_range(self, start_date: date, end_date: date) -> list[Event]:
        """Fetch events from start_date through end_date inclusive."""
        try:
            resp = self._session.get(
                self.url,
                params={
                    "startDate": start_date.isoformat(),
                    "endDate": (end_date + timedelta(days=1)).isoformat(),
                },
                headers=self._headers(),
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Calendar feed error: {e}")
            return []

        items = data.get("events") if isinstance(data, dict) else None
        if not isinstance(items, list):
            if items is not None:
                logger.warning(f"Calendar feed returned unexpected events: {type(items).__name__}")
            items = []
        events = [e for e in (Event.from_feed(item) for item in items) if e is not None]
        return sort_events_by_start(filter_events_by_date(events, start_date, end_date))
