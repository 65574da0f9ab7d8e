from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import parse_hhmm
from .core.constants import (
    DEFAULT_HALF_DAY_HOURS,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_WORK_END,
    DEFAULT_WORK_START,
)
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .performance.service import PerformanceService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository
    tasks_repo: TaskRepository

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveService
    task_service: TaskService
    performance_service: PerformanceService
    dashboard_service: DashboardService


def wire(
    *,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRepository,
    tasks_repo: TaskRepository,
    conn: Optional[DatabaseConnection] = None,
    work_start: str = DEFAULT_WORK_START,
    work_end: str = DEFAULT_WORK_END,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    half_day_hours: float = DEFAULT_HALF_DAY_HOURS,
) -> Container:
    """Build services on top of any repository implementations."""

    auth_service = AuthService(employees_repo)
    employee_service = EmployeeService(employees_repo, attendance_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        strategy_factory=AttendanceStrategyFactory(),
        work_start=parse_hhmm(work_start) or time(9, 0),
        work_end=parse_hhmm(work_end) or time(17, 0),
        grace_minutes=grace_minutes,
        half_day_hours=half_day_hours,
    )
    leave_service = LeaveService(leaves_repo, employees_repo)
    task_service = TaskService(tasks_repo, employees_repo)
    performance_service = PerformanceService(tasks_repo, employees_repo)
    dashboard_service = DashboardService(employee_service, attendance_service, leave_service, task_service)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        tasks_repo=tasks_repo,
        auth_service=auth_service,
        employee_service=employee_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        task_service=task_service,
        performance_service=performance_service,
        dashboard_service=dashboard_service,
    )


def build_container(*, db_config: dict, **options) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        conn=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        **options,
    )
