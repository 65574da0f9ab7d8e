from __future__ import annotations

from datetime import date, datetime

import pytest

from src.workforce_hub.workforce_hub.core.enums import Role, TaskPriority, TaskStatus
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.workforce_hub.workforce_hub.tasks.service import TaskService, count_by_status, parse_status, progress_for
from tests.fakes import FakeEmployeesRepo, FakeTasksRepo

TODAY = date(2026, 3, 10)
NOW = datetime(2026, 3, 10, 15, 0)


@pytest.fixture
def employees():
    repo = FakeEmployeesRepo()
    repo.add(first_name="Ada", last_name="Admin", role=Role.ADMIN)
    repo.add(first_name="Eve", last_name="Worker")
    repo.add(first_name="Bob", last_name="Other")
    return repo


@pytest.fixture
def tasks(employees):
    return FakeTasksRepo(employees)


@pytest.fixture
def svc(tasks, employees):
    return TaskService(tasks, employees)


def _create(svc, **overrides):
    values = dict(
        current_role=Role.ADMIN,
        actor_id=1,
        title="Write report",
        description="Quarterly numbers",
        category="Development",
        priority="high",
        due_date=date(2026, 3, 12),
        assigned_to=2,
    )
    values.update(overrides)
    return svc.create_task(**values)


def test_progress_for_each_status():
    assert progress_for(TaskStatus.COMPLETED, 40) == 100
    assert progress_for(TaskStatus.IN_PROGRESS, 0) == 10
    assert progress_for(TaskStatus.IN_PROGRESS, 60) == 60
    assert progress_for(TaskStatus.PENDING, 60) == 0
    assert progress_for(TaskStatus.CANCELLED, 30) == 30


def test_parse_status_ignores_unknown_values():
    assert parse_status("in-progress") == TaskStatus.IN_PROGRESS
    assert parse_status("done") is None
    assert parse_status(None) is None


def test_create_task_records_history(svc, tasks):
    task_id = _create(svc)
    task = tasks.get_by_id(task_id)

    assert task.status == TaskStatus.PENDING
    assert task.priority == TaskPriority.HIGH
    assert [(h.status, h.comment) for h in task.history] == [(TaskStatus.PENDING, "Task created")]


def test_create_task_defaults_priority_to_medium(svc, tasks):
    task_id = _create(svc, priority=None, category=None)
    assert tasks.get_by_id(task_id).priority == TaskPriority.MEDIUM


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"title": " "}, "Title"),
        ({"due_date": None}, "Due date"),
        ({"priority": "critical"}, "priority"),
        ({"category": "Gardening"}, "category"),
        ({"assigned_to": 99}, "does not exist"),
    ],
)
def test_create_task_validation(svc, overrides, message):
    with pytest.raises(ValidationError, match=message):
        _create(svc, **overrides)


def test_only_admin_manages_tasks(svc):
    with pytest.raises(AuthorizationError):
        _create(svc, current_role=Role.EMPLOYEE)
    task_id = _create(svc)
    with pytest.raises(AuthorizationError):
        svc.delete_task(current_role=Role.EMPLOYEE, task_id=task_id)


def test_update_task_details_and_status(svc, tasks):
    task_id = _create(svc)
    svc.update_task(
        current_role=Role.ADMIN,
        actor_id=1,
        task_id=task_id,
        title="Write final report",
        description="",
        category="Custom",
        priority="urgent",
        due_date=date(2026, 3, 15),
        assigned_to=3,
        status="completed",
        now=NOW,
    )

    task = tasks.get_by_id(task_id)
    assert task.title == "Write final report"
    assert task.description is None
    assert task.assigned_to == 3
    assert task.status == TaskStatus.COMPLETED
    assert task.progress == 100
    assert task.completed_at == NOW
    assert len(task.history) == 2


def test_update_task_same_status_adds_no_history(svc, tasks):
    task_id = _create(svc)
    svc.update_task(
        current_role=Role.ADMIN,
        actor_id=1,
        task_id=task_id,
        title="Write report",
        description=None,
        category=None,
        priority="low",
        due_date=date(2026, 3, 12),
        assigned_to=None,
        status="pending",
    )
    assert len(tasks.get_by_id(task_id).history) == 1


def test_delete_task(svc, tasks):
    task_id = _create(svc)
    svc.delete_task(current_role=Role.ADMIN, task_id=task_id)
    assert tasks.get_by_id(task_id) is None
    with pytest.raises(NotFoundError):
        svc.delete_task(current_role=Role.ADMIN, task_id=task_id)


def test_employee_moves_own_task_through_statuses(svc, tasks):
    task_id = _create(svc)

    svc.update_status(current_role=Role.EMPLOYEE, user_id=2, task_id=task_id, status="in-progress", comment="Started", now=NOW)
    task = tasks.get_by_id(task_id)
    assert (task.status, task.progress, task.completed_at) == (TaskStatus.IN_PROGRESS, 10, None)

    svc.update_status(current_role=Role.EMPLOYEE, user_id=2, task_id=task_id, status="completed", now=NOW)
    assert tasks.get_by_id(task_id).completed_at == NOW

    svc.update_status(current_role=Role.EMPLOYEE, user_id=2, task_id=task_id, status="in-progress", now=NOW)
    task = tasks.get_by_id(task_id)
    assert task.completed_at is None
    assert task.progress == 100
    assert [h.comment for h in task.history] == ["Task created", "Started", None, None]


def test_update_status_rules(svc, tasks):
    task_id = _create(svc)

    with pytest.raises(AuthorizationError):
        svc.update_status(current_role=Role.EMPLOYEE, user_id=3, task_id=task_id, status="completed")
    with pytest.raises(ValidationError, match="not valid"):
        svc.update_status(current_role=Role.EMPLOYEE, user_id=2, task_id=task_id, status="done")
    with pytest.raises(ValidationError, match="cancel"):
        svc.update_status(current_role=Role.EMPLOYEE, user_id=2, task_id=task_id, status="cancelled")

    svc.update_status(current_role=Role.ADMIN, user_id=1, task_id=task_id, status="cancelled")
    with pytest.raises(ValidationError, match="Cancelled tasks"):
        svc.update_status(current_role=Role.EMPLOYEE, user_id=2, task_id=task_id, status="in-progress")


def test_comments_are_limited_to_assignee_and_admin(svc, tasks):
    task_id = _create(svc)
    svc.add_comment(current_role=Role.EMPLOYEE, user_id=2, task_id=task_id, text="On it")
    svc.add_comment(current_role=Role.ADMIN, user_id=1, task_id=task_id, text="Thanks")

    assert [(c.author_name, c.text) for c in tasks.get_by_id(task_id).comments] == [("Eve Worker", "On it"), ("Ada Admin", "Thanks")]
    with pytest.raises(AuthorizationError):
        svc.add_comment(current_role=Role.EMPLOYEE, user_id=3, task_id=task_id, text="Hi")
    with pytest.raises(ValidationError):
        svc.add_comment(current_role=Role.EMPLOYEE, user_id=2, task_id=task_id, text="")


def test_lists_filter_and_compute_days_remaining(svc):
    first = _create(svc, title="Overdue", due_date=date(2026, 3, 8), category="Design")
    second = _create(svc, title="Soon", due_date=date(2026, 3, 11), priority="low")
    third = _create(svc, title="Unassigned", due_date=date(2026, 3, 9), assigned_to=None)
    svc.update_status(current_role=Role.ADMIN, user_id=1, task_id=third, status="completed", now=NOW)

    rows = svc.admin_list(today=TODAY)
    assert [r.title for r in rows] == ["Overdue", "Unassigned", "Soon"]
    assert [r.days_remaining for r in rows] == [-2, -1, 1]
    assert rows[1].assignee_name == "Unassigned"

    assert [r.task_id for r in svc.admin_list(today=TODAY, category="Design")] == [first]
    assert [r.task_id for r in svc.admin_list(today=TODAY, status="completed")] == [third]
    assert len(svc.admin_list(today=TODAY, status="nonsense", category="all")) == 3

    assert [r.task_id for r in svc.employee_list(employee_id=2, today=TODAY, priority="low")] == [second]
    assert [r.task_id for r in svc.overdue(today=TODAY)] == [first]


def test_count_by_status(svc):
    _create(svc)
    _create(svc)
    counts = count_by_status(svc.list_tasks())
    assert counts == {"pending": 2, "in-progress": 0, "completed": 0, "cancelled": 0}
