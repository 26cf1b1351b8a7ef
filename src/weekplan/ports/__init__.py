"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .calendar_feed import CalendarFeed

__all__ = [
    "TaskRepository",
    "CalendarFeed",
]
