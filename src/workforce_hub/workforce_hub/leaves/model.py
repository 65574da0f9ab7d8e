from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveComment:
    comment_id: int
    leave_id: int
    author_id: int
    author_name: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: a leave request and its discussion."""

    leave_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    comments: tuple[LeaveComment, ...] = ()

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING


@dataclass(frozen=True)
class LeaveListRow:
    """Read-model for leave grids."""

    leave_id: int
    employee_id: int
    employee_name: str
    department: Optional[str]
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: LeaveStatus
    created_at: datetime
    comment_count: int = 0
