from __future__ import annotations

from datetime import date, datetime

from src.workforce_hub.workforce_hub.core.enums import AttendanceStatus, EmployeeStatus, Role, TaskPriority, TaskStatus
from src.workforce_hub.workforce_hub.dashboard.service import overall_progress
from src.workforce_hub.workforce_hub.tasks.model import Task

TODAY = date(2026, 3, 2)


def _task(progress):
    return Task(
        task_id=1,
        title="t",
        description=None,
        category=None,
        status=TaskStatus.IN_PROGRESS,
        priority=TaskPriority.LOW,
        due_date=TODAY,
        assigned_to=None,
        progress=progress,
    )


def test_overall_progress_averages_and_rounds():
    assert overall_progress([]) == 0
    assert overall_progress([_task(100), _task(0), _task(50)]) == 50
    assert overall_progress([_task(10), _task(15)]) == 13


def _seed(container):
    repo = container.employees_repo
    repo.add(first_name="Ada", last_name="Admin", role=Role.ADMIN)
    repo.add(first_name="Eve", last_name="Worker")
    repo.add(first_name="Lou", last_name="Late")
    repo.add(first_name="Olly", last_name="Onleave", status=EmployeeStatus.ON_LEAVE)
    repo.add(first_name="Nia", last_name="Notin")

    container.attendance_repo.add(employee_id=2, work_date=TODAY, clock_in=datetime(2026, 3, 2, 8, 55), status=AttendanceStatus.PRESENT)
    container.attendance_repo.add(employee_id=3, work_date=TODAY, clock_in=datetime(2026, 3, 2, 9, 40), status=AttendanceStatus.LATE)

    tasks = container.task_service
    for title, due, assignee in (("Past", date(2026, 2, 27), 2), ("Today", TODAY, 2), ("Later", date(2026, 3, 9), 3)):
        tasks.create_task(
            current_role=Role.ADMIN,
            actor_id=1,
            title=title,
            description=None,
            category=None,
            priority="medium",
            due_date=due,
            assigned_to=assignee,
        )

    container.leave_service.create_leave(
        current_role=Role.EMPLOYEE,
        employee_id=2,
        leave_type="vacation",
        start_date=date(2026, 3, 20),
        end_date=date(2026, 3, 21),
        reason="Trip",
    )


def test_admin_dashboard(container):
    _seed(container)
    data = container.dashboard_service.admin(today=TODAY)

    assert data.employee_counts == {"active": 3, "inactive": 0, "on-leave": 1, "total": 4}
    assert data.attendance_today["present"] == 1
    assert data.attendance_today["late"] == 1
    assert data.attendance_today["not-clocked-in"] == 1
    assert data.present_rate == 50
    assert data.pending_leaves == 1
    assert data.task_counts["pending"] == 3
    assert [t.title for t in data.overdue_tasks] == ["Past"]
    assert len(data.recent_leaves) == 1
    assert len(data.recent_tasks) == 3


def test_employee_dashboard(container):
    _seed(container)
    container.task_service.update_status(current_role=Role.EMPLOYEE, user_id=2, task_id=1, status="completed", now=datetime(2026, 3, 2, 10))

    data = container.dashboard_service.employee(employee_id=2, today=TODAY)

    assert data.clocked_in and not data.clocked_out
    assert [t.title for t in data.tasks_due_today] == ["Today"]
    assert data.task_counts["completed"] == 1
    assert data.progress == 50
    assert [l.start_date for l in data.upcoming_leaves] == [date(2026, 3, 20)]


def test_employee_dashboard_without_attendance(container):
    _seed(container)
    data = container.dashboard_service.employee(employee_id=5, today=TODAY)

    assert data.today_record is None
    assert not data.clocked_in and not data.clocked_out
    assert data.progress == 0
