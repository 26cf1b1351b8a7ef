"""Task repository interface."""

from typing import Any, Protocol

from weekplan.core.tasks import Task


class TaskRepository(Protocol):
    """Interface for the external transactional task store."""

    def fetch_all(self) -> list[Task]:
        """Fetch all tasks."""
        ...

    def update_task(self, task_id: str, updates: dict[str, Any]) -> None:
        """Apply a partial update to one task."""
        ...

    def create_task(self, task: Task) -> None:
        """Store a new task."""
        ...
