from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import EmployeeStatus, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee account.

    Plain data object, no database access.
    """

    employee_id: int
    first_name: str
    last_name: str
    email: str
    password_hash: str
    role: Role
    status: EmployeeStatus
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    join_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()

    @property
    def is_active(self) -> bool:
        return self.status != EmployeeStatus.INACTIVE


@dataclass(frozen=True)
class EmployeeDraft:
    """Validated input for creating or editing an employee."""

    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    join_date: Optional[date] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class EmployeeListRow:
    """Read-model for the admin employee grid."""

    employee_id: int
    full_name: str
    email: str
    department: Optional[str]
    position: Optional[str]
    role: Role
    status: EmployeeStatus
    join_date: Optional[date]
    todays_attendance: str
    initials: str = ""
