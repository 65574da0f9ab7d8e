from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Task, TaskComment, TaskStatusChange
from .repository import TaskRepository

_COLUMNS = """
    task_id, title, description, category, status, priority, due_date, assigned_to,
    progress, completed_at, created_at, updated_at
"""


def _to_task(r: dict, history=(), comments=()) -> Task:
    return Task(
        task_id=int(r["task_id"]),
        title=r["title"],
        description=r.get("description"),
        category=r.get("category"),
        status=TaskStatus(r["status"]),
        priority=TaskPriority(r["priority"]),
        due_date=r["due_date"],
        assigned_to=r.get("assigned_to"),
        progress=int(r.get("progress") or 0),
        completed_at=r.get("completed_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        history=tuple(history),
        comments=tuple(comments),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE task_id=%s", (int(task_id),))
            r = fetchone(cur)
            if not r:
                return None

            cur.execute(
                """
                SELECT status, changed_at, changed_by, comment
                FROM task_status_history
                WHERE task_id=%s
                ORDER BY changed_at, history_id
                """,
                (int(task_id),),
            )
            history = [
                TaskStatusChange(
                    status=TaskStatus(h["status"]),
                    changed_at=h["changed_at"],
                    changed_by=h.get("changed_by"),
                    comment=h.get("comment"),
                )
                for h in fetchall(cur)
            ]

            cur.execute(
                """
                SELECT c.comment_id, c.task_id, c.author_id, c.text, c.created_at,
                       CONCAT(e.first_name, ' ', e.last_name) AS author_name
                FROM task_comments c
                LEFT JOIN employees e ON e.employee_id = c.author_id
                WHERE c.task_id=%s
                ORDER BY c.created_at, c.comment_id
                """,
                (int(task_id),),
            )
            comments = [
                TaskComment(
                    comment_id=int(c["comment_id"]),
                    task_id=int(c["task_id"]),
                    author_id=int(c["author_id"]),
                    author_name=c.get("author_name") or "",
                    text=c["text"],
                    created_at=c["created_at"],
                )
                for c in fetchall(cur)
            ]
            return _to_task(r, history, comments)

    def list_tasks(self, *, assigned_to: Optional[int] = None) -> Sequence[Task]:
        where, params = build_where([("assigned_to=%s", assigned_to)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE {where} ORDER BY due_date, task_id", tuple(params))
            return [_to_task(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        category: Optional[str],
        priority: TaskPriority,
        due_date: date,
        assigned_to: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(title, description, category, status, priority, due_date, assigned_to, progress)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (title, description, category, TaskStatus.PENDING.value, priority.value, due_date, assigned_to),
            )
            return int(cur.lastrowid)

    def update_details(
        self,
        *,
        task_id: int,
        title: str,
        description: Optional[str],
        category: Optional[str],
        priority: TaskPriority,
        due_date: date,
        assigned_to: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET title=%s, description=%s, category=%s, priority=%s, due_date=%s, assigned_to=%s
                WHERE task_id=%s
                """,
                (title, description, category, priority.value, due_date, assigned_to, int(task_id)),
            )
            return cur.rowcount > 0

    def update_status(
        self,
        *,
        task_id: int,
        status: TaskStatus,
        progress: int,
        completed_at: Optional[datetime],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE tasks SET status=%s, progress=%s, completed_at=%s WHERE task_id=%s",
                (status.value, int(progress), completed_at, int(task_id)),
            )
            return cur.rowcount > 0

    def add_history(self, *, task_id: int, status: TaskStatus, changed_by: Optional[int], comment: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO task_status_history(task_id, status, changed_by, comment) VALUES(%s,%s,%s,%s)",
                (int(task_id), status.value, changed_by, comment),
            )

    def add_comment(self, *, task_id: int, author_id: int, text: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO task_comments(task_id, author_id, text) VALUES(%s,%s,%s)",
                (int(task_id), int(author_id), text),
            )
            return int(cur.lastrowid)

    def delete_by_id(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (int(task_id),))
            return cur.rowcount > 0
