from __future__ import annotations

from typing import Optional, Protocol

from .model import Task


class TaskRepository(Protocol):
    def find_task(self, task_id: int) -> Optional[Task]:
        """Task with its project's reporting type, or None."""

        raise NotImplementedError
