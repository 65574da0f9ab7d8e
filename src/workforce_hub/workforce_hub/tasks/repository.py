from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TaskPriority, TaskStatus
from .model import Task


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_tasks(self, *, assigned_to: Optional[int] = None) -> Sequence[Task]:
        """Tasks ordered by due date; history and comments are not loaded."""

        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        category: Optional[str],
        priority: TaskPriority,
        due_date: date,
        assigned_to: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_details(
        self,
        *,
        task_id: int,
        title: str,
        description: Optional[str],
        category: Optional[str],
        priority: TaskPriority,
        due_date: date,
        assigned_to: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def update_status(
        self,
        *,
        task_id: int,
        status: TaskStatus,
        progress: int,
        completed_at: Optional[datetime],
    ) -> bool:
        raise NotImplementedError

    def add_history(self, *, task_id: int, status: TaskStatus, changed_by: Optional[int], comment: Optional[str]) -> None:
        raise NotImplementedError

    def add_comment(self, *, task_id: int, author_id: int, text: str) -> int:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> bool:
        raise NotImplementedError
