from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class TaskStatusChange:
    status: TaskStatus
    changed_at: datetime
    changed_by: Optional[int] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class TaskComment:
    comment_id: int
    task_id: int
    author_id: int
    author_name: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class Task:
    """Domain entity: a task assigned to an employee."""

    task_id: int
    title: str
    description: Optional[str]
    category: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: date
    assigned_to: Optional[int]
    progress: int = 0
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    history: tuple[TaskStatusChange, ...] = ()
    comments: tuple[TaskComment, ...] = ()

    def days_remaining(self, today: date) -> int:
        return (self.due_date - today).days

    def is_overdue(self, today: date) -> bool:
        return self.due_date < today and self.status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


@dataclass(frozen=True)
class TaskListRow:
    """Read-model for task grids."""

    task_id: int
    title: str
    category: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: date
    assigned_to: Optional[int]
    assignee_name: str
    progress: int
    days_remaining: int
    updated_at: Optional[datetime] = None
