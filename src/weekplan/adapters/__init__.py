"""Adapters - I/O implementations of ports."""

from .json_store import JsonTaskStore, StoreError
from .http_calendar import HttpCalendarFeed

__all__ = [
    "JsonTaskStore",
    "StoreError",
    "HttpCalendarFeed",
]
