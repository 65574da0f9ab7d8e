from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.workforce_hub.workforce_hub.attendance.service import AttendanceService, compute_total_hours
from src.workforce_hub.workforce_hub.core.enums import AttendanceStatus, EmployeeStatus, Role
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from tests.fakes import FakeAttendanceRepo, FakeEmployeesRepo


@pytest.fixture
def employees():
    repo = FakeEmployeesRepo()
    repo.add(first_name="Ada", last_name="Admin", role=Role.ADMIN)
    repo.add(first_name="Eve", last_name="Worker", department="Engineering")
    repo.add(first_name="Ina", last_name="Inactive", status=EmployeeStatus.INACTIVE)
    repo.add(first_name="Olly", last_name="Onleave", status=EmployeeStatus.ON_LEAVE)
    return repo


@pytest.fixture
def attendance():
    return FakeAttendanceRepo()


@pytest.fixture
def svc(attendance, employees):
    return AttendanceService(attendance, employees, work_start=time(9, 0), work_end=time(17, 0), grace_minutes=15, half_day_hours=4)


def test_compute_total_hours_rounds_to_two_decimals():
    assert compute_total_hours(datetime(2026, 3, 2, 9, 0), datetime(2026, 3, 2, 17, 20)) == 8.33
    assert compute_total_hours(datetime(2026, 3, 2, 9, 0), datetime(2026, 3, 2, 9, 0, 59)) == 0.0
    assert compute_total_hours(datetime(2026, 3, 2, 9, 0), None) is None


def test_work_hours_label(svc):
    assert svc.work_hours_label == "09:00 - 17:00"


def test_clock_in_on_time(svc, fixed_now):
    record = svc.clock_in(2, now=fixed_now)

    assert record.status == AttendanceStatus.PRESENT
    assert record.clock_in == fixed_now
    assert record.is_open


def test_clock_in_late_records_note(svc):
    record = svc.clock_in(2, now=datetime(2026, 3, 2, 9, 30))

    assert record.status == AttendanceStatus.LATE
    assert record.notes == "Clocked in 30 min late"


def test_clock_in_twice_is_rejected(svc, fixed_now):
    svc.clock_in(2, now=fixed_now)
    with pytest.raises(ValidationError, match="already clocked in"):
        svc.clock_in(2, now=fixed_now.replace(hour=10))


def test_clock_in_unknown_employee(svc, fixed_now):
    with pytest.raises(NotFoundError):
        svc.clock_in(42, now=fixed_now)


def test_clock_out_full_day(svc, fixed_now):
    svc.clock_in(2, now=fixed_now)
    record = svc.clock_out(2, now=datetime(2026, 3, 2, 17, 5))

    assert record.status == AttendanceStatus.PRESENT
    assert record.total_hours == 8.25
    assert not record.is_open


def test_clock_out_early_turns_present_into_half_day(svc, fixed_now):
    svc.clock_in(2, now=fixed_now)
    record = svc.clock_out(2, now=datetime(2026, 3, 2, 11, 0))

    assert record.status == AttendanceStatus.HALF_DAY
    assert record.total_hours == 2.17


def test_clock_out_keeps_late_status_and_note(svc):
    svc.clock_in(2, now=datetime(2026, 3, 2, 9, 30))
    record = svc.clock_out(2, now=datetime(2026, 3, 2, 10, 0))

    assert record.status == AttendanceStatus.LATE
    assert record.notes == "Clocked in 30 min late"


def test_clock_out_requires_open_record(svc, fixed_now):
    with pytest.raises(ValidationError, match="not clocked in"):
        svc.clock_out(2, now=fixed_now)

    svc.clock_in(2, now=fixed_now)
    svc.clock_out(2, now=fixed_now.replace(hour=17))
    with pytest.raises(ValidationError, match="already clocked out"):
        svc.clock_out(2, now=fixed_now.replace(hour=18))


def test_admin_update_recomputes_hours(svc, attendance, fixed_now):
    record = svc.clock_in(2, now=fixed_now)
    svc.admin_update(
        current_role=Role.ADMIN,
        attendance_id=record.attendance_id,
        clock_in="09:00",
        clock_out="13:30",
        status="half-day",
        notes="  fixed by HR ",
    )

    updated = attendance.get_by_id(record.attendance_id)
    assert updated.clock_in == datetime(2026, 3, 2, 9, 0)
    assert updated.clock_out == datetime(2026, 3, 2, 13, 30)
    assert updated.total_hours == 4.5
    assert updated.status == AttendanceStatus.HALF_DAY
    assert updated.notes == "fixed by HR"


@pytest.mark.parametrize(
    "clock_in,clock_out,status,message",
    [
        ("10:00", "09:00", "present", "must not be before"),
        ("", "17:00", "present", "requires a clock-in"),
        ("9am", "", "present", "HH:MM"),
        ("09:00", "17:00", "holiday", "not valid"),
    ],
)
def test_admin_update_validation(svc, fixed_now, clock_in, clock_out, status, message):
    record = svc.clock_in(2, now=fixed_now)
    with pytest.raises(ValidationError, match=message):
        svc.admin_update(
            current_role=Role.ADMIN,
            attendance_id=record.attendance_id,
            clock_in=clock_in,
            clock_out=clock_out,
            status=status,
        )


def test_admin_update_requires_admin(svc, fixed_now):
    record = svc.clock_in(2, now=fixed_now)
    with pytest.raises(AuthorizationError):
        svc.admin_update(current_role=Role.EMPLOYEE, attendance_id=record.attendance_id, clock_in="09:00", clock_out="", status="present")


def test_mark_absentees_only_touches_active_employees_without_record(svc, attendance, fixed_now):
    svc.clock_in(2, now=fixed_now)
    created = svc.mark_absentees(current_role=Role.ADMIN, work_date=fixed_now.date())

    assert created == 1
    absent = [r for r in attendance.list_for_date(fixed_now.date()) if r.status == AttendanceStatus.ABSENT]
    assert [r.employee_id for r in absent] == [1]
    assert svc.mark_absentees(current_role=Role.ADMIN, work_date=fixed_now.date()) == 0


def test_admin_list_filters_and_joins_employee(svc, attendance):
    attendance.add(employee_id=2, work_date=date(2026, 3, 1), clock_in=None, status=AttendanceStatus.ABSENT)
    attendance.add(employee_id=2, work_date=date(2026, 3, 2), clock_in=datetime(2026, 3, 2, 9), status=AttendanceStatus.PRESENT)
    attendance.add(employee_id=2, work_date=date(2026, 2, 20), clock_in=None, status=AttendanceStatus.PRESENT)

    rows = svc.admin_list(start_date=date(2026, 3, 1), end_date=date(2026, 3, 2), status="present")
    assert [(r.employee_name, r.department, r.work_date) for r in rows] == [("Eve Worker", "Engineering", date(2026, 3, 2))]

    with pytest.raises(ValidationError):
        svc.admin_list(start_date=date(2026, 3, 2), end_date=date(2026, 3, 1))


def test_monthly_summary(svc, attendance):
    attendance.add(employee_id=2, work_date=date(2026, 3, 2), clock_in=datetime(2026, 3, 2, 9), status=AttendanceStatus.PRESENT, total_hours=8.0)
    attendance.add(employee_id=2, work_date=date(2026, 3, 3), clock_in=datetime(2026, 3, 3, 9, 30), status=AttendanceStatus.LATE, total_hours=7.5)
    attendance.add(employee_id=2, work_date=date(2026, 3, 4), clock_in=None, status=AttendanceStatus.ABSENT)
    attendance.add(employee_id=2, work_date=date(2026, 2, 27), clock_in=None, status=AttendanceStatus.PRESENT, total_hours=8.0)

    summary = svc.monthly_summary(2, year=2026, month=3, today=date(2026, 3, 4))

    assert [r.work_date.day for r in summary.records] == [2, 3, 4]
    assert summary.counts == {"present": 1, "late": 1, "half-day": 0, "absent": 1}
    assert summary.attendance_rate == 67
    assert summary.total_hours == 15.5
    assert summary.week_hours == 15.5
    assert (summary.previous_month, summary.next_month) == ("2026-02", "2026-04")

    # March 2026 starts on a Sunday
    first_week = summary.weeks[0]
    assert first_week[0].day == date(2026, 3, 1)
    assert all(len(w) == 7 for w in summary.weeks)
    assert first_week[1].record.status == AttendanceStatus.PRESENT


def test_monthly_summary_year_boundary(svc):
    summary = svc.monthly_summary(2, year=2026, month=1, today=date(2026, 1, 15))

    assert summary.previous_month == "2025-12"
    assert summary.attendance_rate == 0
    assert not summary.weeks[0][0].in_month


def test_stats_counts_today_and_recent_days(svc, attendance):
    attendance.add(employee_id=1, work_date=date(2026, 3, 2), clock_in=None, status=AttendanceStatus.ABSENT)
    attendance.add(employee_id=2, work_date=date(2026, 3, 2), clock_in=datetime(2026, 3, 2, 9), status=AttendanceStatus.PRESENT)
    attendance.add(employee_id=2, work_date=date(2026, 2, 28), clock_in=datetime(2026, 2, 28, 9), status=AttendanceStatus.LATE)

    stats = svc.stats(today=date(2026, 3, 2), days=3)

    assert stats["today"] == {"present": 1, "late": 0, "half-day": 0, "absent": 1}
    assert stats["daily"] == [
        {"date": "2026-02-28", "count": 1},
        {"date": "2026-03-01", "count": 0},
        {"date": "2026-03-02", "count": 2},
    ]


def test_clock_in_fills_an_absent_placeholder(svc, attendance):
    svc.mark_absentees(current_role=Role.ADMIN, work_date=date(2026, 3, 2))
    placeholder = attendance.get_for_employee_and_date(2, date(2026, 3, 2))
    assert placeholder.status == AttendanceStatus.ABSENT

    record = svc.clock_in(2, now=datetime(2026, 3, 2, 9, 40))

    assert record.attendance_id == placeholder.attendance_id
    assert record.status == AttendanceStatus.LATE
    assert record.clock_in == datetime(2026, 3, 2, 9, 40)
    assert len(attendance.list_for_date(date(2026, 3, 2))) == 2
    with pytest.raises(ValidationError, match="already clocked in"):
        svc.clock_in(2, now=datetime(2026, 3, 2, 10, 0))


def test_admin_update_to_absent_clears_times(svc, attendance, fixed_now):
    record = svc.clock_in(2, now=fixed_now)
    svc.admin_update(
        current_role=Role.ADMIN,
        attendance_id=record.attendance_id,
        clock_in="09:00",
        clock_out="17:00",
        status="absent",
    )

    updated = attendance.get_by_id(record.attendance_id)
    assert updated.status == AttendanceStatus.ABSENT
    assert updated.clock_in is None
    assert updated.clock_out is None
    assert updated.total_hours is None
