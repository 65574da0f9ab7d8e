from __future__ import annotations

VALID_BODY = {
    "first_name": "Api",
    "last_name": "Made",
    "email": "api@example.com",
    "password": "password123",
    "department": "Sales",
}


def test_create_employee_requires_login(client):
    resp = client.post("/api/employees", json=VALID_BODY)
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Unauthorized"}


def test_create_employee_requires_admin(login, employee):
    resp = login(employee).post("/api/employees", json=VALID_BODY)
    assert resp.status_code == 403
    assert resp.get_json()["success"] is False


def test_create_employee_validation_error(login, admin):
    resp = login(admin).post("/api/employees", json={**VALID_BODY, "email": "nope"})
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "Email address is not valid"}


def test_create_employee_without_body(login, admin):
    resp = login(admin).post("/api/employees", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_create_employee(login, admin, container):
    resp = login(admin).post("/api/employees", json=VALID_BODY)
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}

    created = container.employees_repo.get_by_email("api@example.com")
    assert created.department == "Sales"
    assert created.role.value == "employee"


def test_attendance_stats(login, admin):
    resp = login(admin).get("/api/attendance/stats")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert set(body["today"]) == {"present", "late", "half-day", "absent"}
    assert len(body["daily"]) == 7


def test_attendance_stats_forbidden_for_employees(login, employee):
    assert login(employee).get("/api/attendance/stats").status_code == 403
