from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.workforce_hub.workforce_hub.core.enums import LeaveStatus, Role, TaskStatus


@pytest.fixture
def seeded(container, admin, employee):
    tasks = container.task_service
    task_id = tasks.create_task(
        current_role=Role.ADMIN,
        actor_id=admin.employee_id,
        title="Prepare onboarding",
        description="Slides and checklist",
        category="HR",
        priority="high",
        due_date=date.today() + timedelta(days=3),
        assigned_to=employee.employee_id,
    )
    leave_id = container.leave_service.create_leave(
        current_role=Role.EMPLOYEE,
        employee_id=employee.employee_id,
        leave_type="vacation",
        start_date=date.today() + timedelta(days=10),
        end_date=date.today() + timedelta(days=12),
        reason="Family trip",
    )
    return {"task_id": task_id, "leave_id": leave_id}


@pytest.mark.parametrize(
    "path",
    [
        "/admin/dashboard",
        "/admin/employees",
        "/admin/employees?department=Engineering",
        "/admin/employees?sort=name&dir=desc&q=eve&filter=department:equals:engineering",
        "/admin/employees/new",
        "/admin/attendance",
        "/admin/leave-requests",
        "/admin/leave-requests?tab=pending",
        "/admin/tasks",
        "/admin/tasks?category=HR&status=pending",
        "/admin/tasks/new",
        "/admin/performance",
        "/admin/settings",
    ],
)
def test_admin_pages_render(login, admin, seeded, path):
    resp = login(admin).get(path)
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "path",
    [
        "/employee/dashboard",
        "/employee/attendance",
        "/employee/attendance?month=2026-01",
        "/employee/leave-requests",
        "/employee/tasks",
        "/employee/tasks?priority=high&sort=due&dir=asc",
    ],
)
def test_employee_pages_render(login, employee, seeded, path):
    resp = login(employee).get(path)
    assert resp.status_code == 200


def test_detail_pages_render(login, admin, employee, seeded):
    task_path = f"/tasks/{seeded['task_id']}"
    assert login(employee).get(task_path).status_code == 200
    assert login(employee).get(f"/employee/leave-requests/{seeded['leave_id']}").status_code == 200
    assert login(admin).get(task_path).status_code == 200
    assert login(admin).get(f"/admin/leave-requests/{seeded['leave_id']}").status_code == 200
    assert login(admin).get(f"/admin/employees/{employee.employee_id}/edit").status_code == 200
    assert login(admin).get(f"/admin/tasks/{seeded['task_id']}/edit").status_code == 200


def test_employee_search_narrows_directory(login, admin, employee):
    resp = login(admin).get("/admin/employees?q=worker")
    assert b"Eve Worker" in resp.data
    assert b"<span class=\"avatar\">EW</span>" in resp.data
    assert b"admin@example.com" not in resp.data


def test_bad_month_falls_back_to_current_month(login, employee):
    resp = login(employee).get("/employee/attendance?month=March", follow_redirects=True)
    assert resp.status_code == 200
    assert b"Month must use the YYYY-MM format" in resp.data


def test_clock_in_and_out_redirect_to_next(login, employee, container):
    client = login(employee)

    resp = client.post("/employee/attendance/clock-in", data={"next": "/employee/dashboard"})
    assert resp.headers["Location"].endswith("/employee/dashboard")
    assert container.attendance_service.get_today_record(employee.employee_id, date.today()) is not None

    resp = client.post("/employee/attendance/clock-out", data={"next": "//evil.example.com/"})
    assert resp.headers["Location"].endswith("/employee/attendance")
    record = container.attendance_service.get_today_record(employee.employee_id, date.today())
    assert record.clock_out is not None


def test_leave_decision_flow(login, admin, seeded, container):
    client = login(admin)
    leave_id = seeded["leave_id"]

    resp = client.post(f"/admin/leave-requests/{leave_id}/reject", data={"comment": ""}, follow_redirects=True)
    assert b"Comment required" in resp.data
    assert container.leaves_repo.get_by_id(leave_id).status == LeaveStatus.PENDING

    client.post(f"/admin/leave-requests/{leave_id}/reject", data={"comment": "Peak season"})
    leave = container.leaves_repo.get_by_id(leave_id)
    assert leave.status == LeaveStatus.REJECTED
    assert [c.text for c in leave.comments] == ["Peak season"]


def test_employee_submits_leave(login, employee, container):
    start = date.today() + timedelta(days=5)
    resp = login(employee).post(
        "/employee/leave-requests",
        data={
            "leave_type": "sick",
            "start_date": start.isoformat(),
            "end_date": start.isoformat(),
            "reason": "Doctor",
        },
    )
    assert resp.headers["Location"].endswith("/employee/leave-requests")
    rows = container.leave_service.employee_list(employee_id=employee.employee_id)
    assert [r.total_days for r in rows] == [1]


def test_employee_updates_task_status(login, employee, seeded, container):
    task_id = seeded["task_id"]
    resp = login(employee).post(f"/employee/tasks/{task_id}/status", data={"status": "in-progress", "comment": "Started"})
    assert resp.headers["Location"].endswith(f"/tasks/{task_id}")

    task = container.tasks_repo.get_by_id(task_id)
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.progress == 10


def test_other_employee_cannot_open_task(login, container, seeded):
    stranger = container.employees_repo.add(first_name="Sue", last_name="Stranger", email="sue@example.com")
    resp = login(stranger).get(f"/tasks/{seeded['task_id']}")
    assert resp.headers["Location"].endswith("/employee/tasks")


def test_admin_deletes_employee_but_not_admin(login, admin, employee, container):
    client = login(admin)
    client.post(f"/admin/employees/{admin.employee_id}/delete")
    assert container.employees_repo.get_by_id(admin.employee_id) is not None

    client.post(f"/admin/employees/{employee.employee_id}/delete")
    assert container.employees_repo.get_by_id(employee.employee_id) is None


def test_attendance_export_is_xlsx(login, admin):
    resp = login(admin).get("/admin/attendance/export")
    assert resp.status_code == 200
    assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert resp.data[:2] == b"PK"
