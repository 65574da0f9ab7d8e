from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..attendance.repository import AttendanceRepository
from ..common.validators import optional_text, require_email, require_min_length, require_non_empty
from ..core.constants import DEPARTMENTS, MIN_PASSWORD_LENGTH
from ..core.enums import AttendanceStatus, EmployeeStatus, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import Employee, EmployeeDraft, EmployeeListRow
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    email: str
    role: Role


def _to_session_user(employee: Employee) -> SessionUser:
    return SessionUser(
        user_id=employee.employee_id,
        full_name=employee.full_name,
        email=employee.email,
        role=employee.role,
    )


def _check_password(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password or "")
    except ValueError:
        # placeholder or corrupted hashes never match
        return False


def build_draft(
    *,
    first_name: Optional[str],
    last_name: Optional[str],
    email: Optional[str],
    phone: Optional[str] = None,
    department: Optional[str] = None,
    position: Optional[str] = None,
    status: Optional[str] = None,
    join_date: Optional[date] = None,
    address: Optional[str] = None,
) -> EmployeeDraft:
    """Validate raw form values into an EmployeeDraft."""

    try:
        parsed_status = EmployeeStatus(status or EmployeeStatus.ACTIVE.value)
    except ValueError:
        raise ValidationError("Employee status is not valid")

    return EmployeeDraft(
        first_name=require_non_empty(first_name, "First name"),
        last_name=require_non_empty(last_name, "Last name"),
        email=require_email(email),
        phone=optional_text(phone),
        department=optional_text(department),
        position=optional_text(position),
        status=parsed_status,
        join_date=join_date,
        address=optional_text(address),
    )


class AuthService:
    """Use case: sign in and self-service sign up."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def authenticate(self, email: str, password: str) -> SessionUser:
        employee = self._employees.get_by_email((email or "").strip().lower())
        if not employee or not employee.is_active:
            raise AuthenticationError("Invalid email or password")
        if not _check_password(employee.password_hash, password):
            raise AuthenticationError("Invalid email or password")

        logger.info("Employee %s signed in", employee.employee_id)
        return _to_session_user(employee)

    def signup(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        confirm_password: Optional[str] = None,
    ) -> int:
        draft = build_draft(first_name=first_name, last_name=last_name, email=email, join_date=date.today())
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if confirm_password is not None and password != confirm_password:
            raise ValidationError("Passwords do not match")
        if self._employees.get_by_email(draft.email):
            raise ValidationError("An account with this email already exists")

        employee_id = self._employees.create(
            draft=draft,
            password_hash=generate_password_hash(password),
            role=Role.EMPLOYEE,
        )
        logger.info("Employee %s signed up", employee_id)
        return employee_id


class EmployeeService:
    """Use case: manage employees (admin) and own profile (everyone)."""

    def __init__(self, employees: EmployeeRepository, attendance: AttendanceRepository):
        self._employees = employees
        self._attendance = attendance

    @staticmethod
    def departments() -> Sequence[str]:
        return DEPARTMENTS

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def list_all(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def list_directory(self, *, today: date, department: Optional[str] = None) -> list[EmployeeListRow]:
        """Employees with today's attendance; ``department`` narrows to one tab."""

        today_status = {r.employee_id: r.status for r in self._attendance.list_for_date(today)}
        rows = []
        for e in self._employees.list_all():
            if department and e.department != department:
                continue
            rows.append(
                EmployeeListRow(
                    employee_id=e.employee_id,
                    full_name=e.full_name,
                    email=e.email,
                    department=e.department,
                    position=e.position,
                    role=e.role,
                    status=e.status,
                    join_date=e.join_date,
                    todays_attendance=self._attendance_label(today_status.get(e.employee_id)),
                    initials=e.initials,
                )
            )
        return rows

    @staticmethod
    def _attendance_label(status: Optional[AttendanceStatus]) -> str:
        if status in (AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY):
            return AttendanceStatus.PRESENT.value
        if status == AttendanceStatus.LATE:
            return AttendanceStatus.LATE.value
        return AttendanceStatus.ABSENT.value

    def create_employee(self, *, current_role: Role, draft: EmployeeDraft, password: str) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can add employees")

        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if self._employees.get_by_email(draft.email):
            raise ValidationError("An account with this email already exists")

        employee_id = self._employees.create(
            draft=draft,
            password_hash=generate_password_hash(password),
            role=Role.EMPLOYEE,
        )
        logger.info("Employee %s created", employee_id)
        return employee_id

    def update_employee(self, *, current_role: Role, employee_id: int, draft: EmployeeDraft) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can edit employees")

        self.get(employee_id)
        other = self._employees.get_by_email(draft.email)
        if other and other.employee_id != int(employee_id):
            raise ValidationError("An account with this email already exists")

        self._employees.update(int(employee_id), draft=draft)

    def delete_employee(self, *, current_role: Role, employee_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can delete employees")

        employee = self.get(employee_id)
        if employee.role == Role.ADMIN:
            raise ValidationError("Administrator accounts cannot be deleted")

        if not self._employees.delete_by_id(employee.employee_id):
            raise ValidationError("Failed to delete employee")
        logger.info("Employee %s deleted", employee.employee_id)

    def update_profile(
        self,
        *,
        employee_id: int,
        first_name: str,
        last_name: str,
        email: str,
        phone: Optional[str],
    ) -> Employee:
        current = self.get(employee_id)
        draft = build_draft(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            department=current.department,
            position=current.position,
            status=current.status.value,
            join_date=current.join_date,
            address=current.address,
        )
        other = self._employees.get_by_email(draft.email)
        if other and other.employee_id != current.employee_id:
            raise ValidationError("An account with this email already exists")

        self._employees.update(current.employee_id, draft=draft)
        return self.get(current.employee_id)

    def change_password(
        self,
        *,
        employee_id: int,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        employee = self.get(employee_id)
        if not _check_password(employee.password_hash, current_password):
            raise ValidationError("Current password is incorrect")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        if new_password != confirm_password:
            raise ValidationError("New passwords do not match")

        self._employees.update_password(employee.employee_id, password_hash=generate_password_hash(new_password))
        logger.info("Employee %s changed password", employee.employee_id)
