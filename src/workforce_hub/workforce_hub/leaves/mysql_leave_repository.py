from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall
from .model import LeaveComment, LeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT leave_id, employee_id, leave_type, start_date, end_date, reason, status,
           created_at, updated_at, decided_by
    FROM leave_requests
"""

_SELECT_COMMENTS = """
    SELECT c.comment_id, c.leave_id, c.author_id, c.text, c.created_at,
           CONCAT(e.first_name, ' ', e.last_name) AS author_name
    FROM leave_comments c
    LEFT JOIN employees e ON e.employee_id = c.author_id
"""


def _to_comment(r: dict) -> LeaveComment:
    return LeaveComment(
        comment_id=int(r["comment_id"]),
        leave_id=int(r["leave_id"]),
        author_id=int(r["author_id"]),
        author_name=r.get("author_name") or "",
        text=r["text"],
        created_at=r["created_at"],
    )


def _to_request(r: dict, comments: Sequence[LeaveComment]) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        updated_at=r.get("updated_at"),
        decided_by=r.get("decided_by"),
        comments=tuple(comments),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, where: str, params: list) -> list[LeaveRequest]:
        cur.execute(f"{_SELECT} WHERE {where} ORDER BY created_at DESC, leave_id DESC", tuple(params))
        rows = fetchall(cur)
        if not rows:
            return []

        ids = [int(r["leave_id"]) for r in rows]
        placeholders = ",".join(["%s"] * len(ids))
        cur.execute(
            f"{_SELECT_COMMENTS} WHERE c.leave_id IN ({placeholders}) ORDER BY c.created_at, c.comment_id",
            tuple(ids),
        )
        comments = defaultdict(list)
        for c in fetchall(cur):
            comments[int(c["leave_id"])].append(_to_comment(c))

        return [_to_request(r, comments[int(r["leave_id"])]) for r in rows]

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            found = self._load(cur, "leave_id=%s", [int(leave_id)])
            return found[0] if found else None

    def list_requests(self, *, employee_id: Optional[int] = None) -> Sequence[LeaveRequest]:
        where, params = build_where([("employee_id=%s", employee_id)])
        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, where, params)

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(employee_id, leave_type, start_date, end_date, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), leave_type.value, start_date, end_date, reason, LeaveStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def decide(self, *, leave_id: int, status: LeaveStatus, decided_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s
                WHERE leave_id=%s AND status=%s
                """,
                (status.value, int(decided_by), int(leave_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def add_comment(self, *, leave_id: int, author_id: int, text: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO leave_comments(leave_id, author_id, text) VALUES(%s,%s,%s)",
                (int(leave_id), int(author_id), text),
            )
            return int(cur.lastrowid)
