from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import TASK_CATEGORIES
from ..core.enums import Role, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import Task, TaskListRow
from .repository import TaskRepository

logger = logging.getLogger(__name__)


def progress_for(status: TaskStatus, current: int) -> int:
    """Progress implied by a status change."""
    if status == TaskStatus.COMPLETED:
        return 100
    if status == TaskStatus.IN_PROGRESS:
        return max(int(current), 10)
    if status == TaskStatus.PENDING:
        return 0
    return int(current)


def parse_status(value: Optional[str]) -> Optional[TaskStatus]:
    """Status from a query argument; anything unknown means no filter."""
    try:
        return TaskStatus(value) if value else None
    except ValueError:
        return None


def count_by_status(tasks: Iterable[Task]) -> dict[str, int]:
    counts = {s.value: 0 for s in TaskStatus}
    for t in tasks:
        counts[t.status.value] += 1
    return counts


class TaskService:
    def __init__(self, tasks: TaskRepository, employees: EmployeeRepository):
        self._tasks = tasks
        self._employees = employees

    def _require_admin(self, current_role: Role, action: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError(f"Only administrators can {action} tasks")

    def _validate(
        self,
        *,
        title: Optional[str],
        category: Optional[str],
        priority: Optional[str],
        due_date: Optional[date],
        assigned_to: Optional[int],
    ) -> tuple[str, Optional[str], TaskPriority]:
        title = require_non_empty(title, "Title")
        if due_date is None:
            raise ValidationError("Due date is required")

        try:
            parsed_priority = TaskPriority(priority or TaskPriority.MEDIUM.value)
        except ValueError:
            raise ValidationError("Task priority is not valid")

        category = optional_text(category)
        if category and category not in TASK_CATEGORIES:
            raise ValidationError("Task category is not valid")

        if assigned_to is not None and not self._employees.get_by_id(int(assigned_to)):
            raise ValidationError("Assigned employee does not exist")
        return title, category, parsed_priority

    def get(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def get_for_user(self, *, current_role: Role, user_id: int, task_id: int) -> Task:
        task = self.get(task_id)
        if current_role != Role.ADMIN and task.assigned_to != int(user_id):
            raise AuthorizationError("This task is not assigned to you")
        return task

    def create_task(
        self,
        *,
        current_role: Role,
        actor_id: int,
        title: Optional[str],
        description: Optional[str],
        category: Optional[str],
        priority: Optional[str],
        due_date: Optional[date],
        assigned_to: Optional[int],
    ) -> int:
        self._require_admin(current_role, "create")
        title, category, parsed_priority = self._validate(
            title=title,
            category=category,
            priority=priority,
            due_date=due_date,
            assigned_to=assigned_to,
        )

        task_id = self._tasks.create(
            title=title,
            description=optional_text(description),
            category=category,
            priority=parsed_priority,
            due_date=due_date,
            assigned_to=assigned_to,
        )
        self._tasks.add_history(task_id=task_id, status=TaskStatus.PENDING, changed_by=int(actor_id), comment="Task created")
        logger.info("Task %s created", task_id)
        return task_id

    def update_task(
        self,
        *,
        current_role: Role,
        actor_id: int,
        task_id: int,
        title: Optional[str],
        description: Optional[str],
        category: Optional[str],
        priority: Optional[str],
        due_date: Optional[date],
        assigned_to: Optional[int],
        status: Optional[str] = None,
        now: datetime | None = None,
    ) -> None:
        self._require_admin(current_role, "edit")
        task = self.get(task_id)
        title, category, parsed_priority = self._validate(
            title=title,
            category=category,
            priority=priority,
            due_date=due_date,
            assigned_to=assigned_to,
        )

        self._tasks.update_details(
            task_id=task.task_id,
            title=title,
            description=optional_text(description),
            category=category,
            priority=parsed_priority,
            due_date=due_date,
            assigned_to=assigned_to,
        )

        if status:
            try:
                new_status = TaskStatus(status)
            except ValueError:
                raise ValidationError("Task status is not valid")
            if new_status != task.status:
                self._change_status(task, new_status, actor_id=actor_id, comment=None, now=now)

    def delete_task(self, *, current_role: Role, task_id: int) -> None:
        self._require_admin(current_role, "delete")
        task = self.get(task_id)
        if not self._tasks.delete_by_id(task.task_id):
            raise ValidationError("Failed to delete task")
        logger.info("Task %s deleted", task.task_id)

    def _change_status(
        self,
        task: Task,
        status: TaskStatus,
        *,
        actor_id: int,
        comment: Optional[str],
        now: datetime | None,
    ) -> None:
        now = now or now_local()
        completed_at = now if status == TaskStatus.COMPLETED else None
        self._tasks.update_status(
            task_id=task.task_id,
            status=status,
            progress=progress_for(status, task.progress),
            completed_at=completed_at,
        )
        self._tasks.add_history(task_id=task.task_id, status=status, changed_by=int(actor_id), comment=comment)
        logger.info("Task %s moved to %s", task.task_id, status.value)

    def update_status(
        self,
        *,
        current_role: Role,
        user_id: int,
        task_id: int,
        status: Optional[str],
        comment: Optional[str] = None,
        now: datetime | None = None,
    ) -> None:
        """Employee moves one of their own tasks along."""

        task = self.get_for_user(current_role=current_role, user_id=user_id, task_id=task_id)
        if task.status == TaskStatus.CANCELLED:
            raise ValidationError("Cancelled tasks cannot be updated")

        try:
            new_status = TaskStatus(status or "")
        except ValueError:
            raise ValidationError("Task status is not valid")
        if new_status == TaskStatus.CANCELLED and current_role != Role.ADMIN:
            raise ValidationError("Only administrators can cancel tasks")

        self._change_status(task, new_status, actor_id=user_id, comment=optional_text(comment), now=now)

    def add_comment(self, *, current_role: Role, user_id: int, task_id: int, text: str) -> int:
        task = self.get_for_user(current_role=current_role, user_id=user_id, task_id=task_id)
        text = require_non_empty(text, "Comment")
        return self._tasks.add_comment(task_id=task.task_id, author_id=int(user_id), text=text)

    def list_tasks(self, *, assigned_to: Optional[int] = None) -> list[Task]:
        return list(self._tasks.list_tasks(assigned_to=assigned_to))

    def _rows(self, tasks: Iterable[Task], today: date) -> list[TaskListRow]:
        names = {e.employee_id: e.full_name for e in self._employees.list_all()}
        return [
            TaskListRow(
                task_id=t.task_id,
                title=t.title,
                category=t.category,
                status=t.status,
                priority=t.priority,
                due_date=t.due_date,
                assigned_to=t.assigned_to,
                assignee_name=names.get(t.assigned_to, "Unassigned") if t.assigned_to else "Unassigned",
                progress=t.progress,
                days_remaining=t.days_remaining(today),
                updated_at=t.updated_at,
            )
            for t in tasks
        ]

    def admin_list(self, *, today: date, status: Optional[str] = None, category: Optional[str] = None) -> list[TaskListRow]:
        tasks = self.list_tasks()
        wanted = parse_status(status)
        if wanted:
            tasks = [t for t in tasks if t.status == wanted]
        if category and category != "all":
            tasks = [t for t in tasks if t.category == category]
        return self._rows(tasks, today)

    def employee_list(
        self,
        *,
        employee_id: int,
        today: date,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> list[TaskListRow]:
        tasks = self.list_tasks(assigned_to=int(employee_id))
        wanted = parse_status(status)
        if wanted:
            tasks = [t for t in tasks if t.status == wanted]
        if priority and priority != "all":
            tasks = [t for t in tasks if t.priority.value == priority]
        return self._rows(tasks, today)

    def overdue(self, *, today: date) -> list[TaskListRow]:
        return self._rows([t for t in self.list_tasks() if t.is_overdue(today)], today)

    def recently_updated(self, *, today: date, limit: int) -> list[TaskListRow]:
        tasks = sorted(
            self.list_tasks(),
            key=lambda t: t.updated_at or t.created_at or datetime.min,
            reverse=True,
        )
        return self._rows(tasks[:limit], today)
