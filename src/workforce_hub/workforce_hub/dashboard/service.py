from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceService
from ..common.datetime_utils import round_half_up
from ..core.constants import RECENT_ACTIVITY_LIMIT
from ..core.enums import AttendanceStatus, EmployeeStatus, Role
from ..employees.service import EmployeeService
from ..leaves.model import LeaveListRow, LeaveRequest
from ..leaves.service import LeaveService
from ..tasks.model import Task, TaskListRow
from ..tasks.service import TaskService, count_by_status


def overall_progress(tasks: list[Task]) -> int:
    """Average task progress in percent; 0 without tasks."""
    if not tasks:
        return 0
    return int(round_half_up(sum(t.progress for t in tasks) / (len(tasks) * 100) * 100))


@dataclass(frozen=True)
class AdminDashboard:
    employee_counts: dict[str, int]
    attendance_today: dict[str, int]
    pending_leaves: int
    task_counts: dict[str, int]
    overdue_tasks: list[TaskListRow]
    recent_leaves: list[LeaveListRow]
    recent_tasks: list[TaskListRow]

    @property
    def present_rate(self) -> int:
        total = self.employee_counts.get("total", 0)
        attended = sum(
            self.attendance_today.get(s.value, 0)
            for s in (AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY)
        )
        return int(round_half_up(attended / total * 100)) if total else 0


@dataclass(frozen=True)
class EmployeeDashboard:
    today_record: Optional[AttendanceRecord]
    tasks_due_today: list[Task]
    task_counts: dict[str, int]
    progress: int
    upcoming_leaves: list[LeaveRequest] = field(default_factory=list)

    @property
    def clocked_in(self) -> bool:
        return bool(self.today_record and self.today_record.is_open)

    @property
    def clocked_out(self) -> bool:
        return bool(self.today_record and self.today_record.clock_out)


class DashboardService:
    """Read-only summaries assembled from the feature services."""

    def __init__(
        self,
        employees: EmployeeService,
        attendance: AttendanceService,
        leaves: LeaveService,
        tasks: TaskService,
    ):
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._tasks = tasks

    def admin(self, *, today: date) -> AdminDashboard:
        staff = [e for e in self._employees.list_all() if e.role == Role.EMPLOYEE]
        employee_counts = {s.value: 0 for s in EmployeeStatus}
        for e in staff:
            employee_counts[e.status.value] += 1
        employee_counts["total"] = len(staff)

        attendance_today = {s.value: 0 for s in AttendanceStatus}
        records = self._attendance.list_for_date(today)
        for r in records:
            attendance_today[r.status.value] += 1
        recorded = {r.employee_id for r in records}
        attendance_today["not-clocked-in"] = sum(
            1 for e in staff if e.status == EmployeeStatus.ACTIVE and e.employee_id not in recorded
        )

        return AdminDashboard(
            employee_counts=employee_counts,
            attendance_today=attendance_today,
            pending_leaves=self._leaves.pending_count(),
            task_counts=count_by_status(self._tasks.list_tasks()),
            overdue_tasks=self._tasks.overdue(today=today),
            recent_leaves=self._leaves.recent(limit=RECENT_ACTIVITY_LIMIT),
            recent_tasks=self._tasks.recently_updated(today=today, limit=RECENT_ACTIVITY_LIMIT),
        )

    def employee(self, *, employee_id: int, today: date) -> EmployeeDashboard:
        tasks = self._tasks.list_tasks(assigned_to=employee_id)
        return EmployeeDashboard(
            today_record=self._attendance.get_today_record(employee_id, today),
            tasks_due_today=[t for t in tasks if t.due_date == today],
            task_counts=count_by_status(tasks),
            progress=overall_progress(tasks),
            upcoming_leaves=self._leaves.upcoming(employee_id=employee_id, today=today),
        )
