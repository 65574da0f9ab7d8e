from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EmployeeStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee, EmployeeDraft
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, first_name, last_name, email, password_hash, role, status,
    department, position, phone, address, join_date, created_at, updated_at
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        status=EmployeeStatus(r["status"]),
        department=r.get("department"),
        position=r.get("position"),
        phone=r.get("phone"),
        address=r.get("address"),
        join_date=r.get("join_date"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY last_name, first_name")
            return [_to_employee(r) for r in fetchall(cur)]

    def create(self, *, draft: EmployeeDraft, password_hash: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(first_name, last_name, email, password_hash, role, status,
                                      department, position, phone, address, join_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    draft.first_name,
                    draft.last_name,
                    draft.email,
                    password_hash,
                    role.value,
                    draft.status.value,
                    draft.department,
                    draft.position,
                    draft.phone,
                    draft.address,
                    draft.join_date,
                ),
            )
            return int(cur.lastrowid)

    def update(self, employee_id: int, *, draft: EmployeeDraft) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET first_name=%s, last_name=%s, email=%s, status=%s, department=%s,
                    position=%s, phone=%s, address=%s, join_date=%s
                WHERE employee_id=%s
                """,
                (
                    draft.first_name,
                    draft.last_name,
                    draft.email,
                    draft.status.value,
                    draft.department,
                    draft.position,
                    draft.phone,
                    draft.address,
                    draft.join_date,
                    int(employee_id),
                ),
            )
            return cur.rowcount > 0

    def update_password(self, employee_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET password_hash=%s WHERE employee_id=%s",
                (password_hash, int(employee_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
