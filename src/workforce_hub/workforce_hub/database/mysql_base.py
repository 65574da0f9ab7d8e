from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def build_where(clauses: Sequence[Tuple[str, Any]]) -> Tuple[str, list]:
    """Join optional ``(sql, param)`` pairs into a WHERE body.

    Pairs whose param is None are skipped, so callers can pass every optional
    filter unconditionally.
    """

    parts = ["1=1"]
    params: list = []
    for sql, param in clauses:
        if param is None:
            continue
        parts.append(sql)
        params.append(param)
    return " AND ".join(parts), params
