from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee, EmployeeDraft


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def create(self, *, draft: EmployeeDraft, password_hash: str, role: Role) -> int:
        raise NotImplementedError

    def update(self, employee_id: int, *, draft: EmployeeDraft) -> bool:
        raise NotImplementedError

    def update_password(self, employee_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, employee_id: int) -> bool:
        raise NotImplementedError
