from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one day."""

    attendance_id: int
    employee_id: int
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceStatus
    total_hours: Optional[float] = None
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None


@dataclass(frozen=True)
class AttendanceListRow:
    """Read-model for the admin grid and the Excel export."""

    attendance_id: int
    employee_id: int
    employee_name: str
    department: Optional[str]
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    total_hours: Optional[float]
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class CalendarDay:
    day: date
    in_month: bool
    record: Optional[AttendanceRecord] = None


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    records: list[AttendanceRecord]
    weeks: list[list[CalendarDay]]
    counts: dict[str, int] = field(default_factory=dict)
    total_hours: float = 0.0
    week_hours: float = 0.0
    attendance_rate: int = 0
    previous_month: str = ""
    next_month: str = ""
