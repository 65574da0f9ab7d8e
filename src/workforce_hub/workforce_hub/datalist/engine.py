"""Search, filter, sort and paginate an in-memory list of rows.

Every list page of the app runs its rows through ``process``. Rows can be
dicts or objects; columns say how to read each cell.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import cmp_to_key
from typing import Any, Iterable, Optional, Sequence

from ..core.constants import PAGE_WINDOW_SIZE
from .model import ColumnDef, DataListPage, FilterDef, FilterOperator, SortDirection, get_value, row_fields


def to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)


def to_number(value: Any) -> Optional[float]:
    """Numeric reading of a cell or filter value; None when it is not a number."""
    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def _columns_by_id(columns: Sequence[ColumnDef]) -> dict[str, ColumnDef]:
    return {c.id: c for c in columns}


def search(rows: Iterable[Any], query: str, fields: Optional[Sequence[Any]] = None) -> list:
    if not query or not query.strip():
        return list(rows)

    needle = query.lower()
    out = []
    for row in rows:
        names = fields if fields is not None else row_fields(row)
        for name in names:
            value = get_value(row, name)
            if value is None:
                continue
            if needle in to_text(value).lower():
                out.append(row)
                break
    return out


def matches(value: Any, operator: FilterOperator, expected: Any) -> bool:
    if value is None:
        return False

    if operator.is_numeric:
        left = to_number(value)
        right = to_number(expected)
        if left is None or right is None:
            return False
        if operator is FilterOperator.GT:
            return left > right
        if operator is FilterOperator.LT:
            return left < right
        if operator is FilterOperator.GTE:
            return left >= right
        return left <= right

    text = to_text(value).lower()
    wanted = to_text(expected).lower()
    if operator is FilterOperator.EQUALS:
        return text == wanted
    if operator is FilterOperator.CONTAINS:
        return wanted in text
    if operator is FilterOperator.STARTS_WITH:
        return text.startswith(wanted)
    if operator is FilterOperator.ENDS_WITH:
        return text.endswith(wanted)
    return True


def apply_filters(rows: Iterable[Any], filters: Sequence[FilterDef], columns: Sequence[ColumnDef]) -> list:
    rows = list(rows)
    if not filters:
        return rows

    by_id = _columns_by_id(columns)

    def keep(row: Any) -> bool:
        for f in filters:
            column = by_id.get(f.column_id)
            if column is None:
                continue
            if not matches(column.value_of(row), f.operator, f.value):
                return False
        return True

    return [r for r in rows if keep(r)]


def _compare_text(a: str, b: str) -> int:
    ka, kb = a.casefold(), b.casefold()
    return (ka > kb) - (ka < kb)


def compare_values(a: Any, b: Any, direction: SortDirection) -> int:
    ascending = direction is SortDirection.ASC
    if a is None and b is None:
        return 0
    # None sorts last ascending, first descending
    if a is None:
        return 1 if ascending else -1
    if b is None:
        return -1 if ascending else 1

    if isinstance(a, str) and isinstance(b, str):
        result = _compare_text(a, b)
    else:
        try:
            result = (a > b) - (a < b)
        except TypeError:
            result = _compare_text(to_text(a), to_text(b))
    return result if ascending else -result


def sort_rows(
    rows: Iterable[Any],
    column_id: Optional[str],
    direction: Optional[SortDirection],
    columns: Sequence[ColumnDef],
) -> list:
    rows = list(rows)
    if not column_id or direction is None:
        return rows

    column = _columns_by_id(columns).get(column_id)
    if column is None:
        return rows

    def cmp(a: Any, b: Any) -> int:
        return compare_values(column.value_of(a), column.value_of(b), direction)

    return sorted(rows, key=cmp_to_key(cmp))


def page_window(current: int, total_pages: int, size: int = PAGE_WINDOW_SIZE) -> list[int]:
    """Page numbers shown around the current page (at most ``size``)."""
    if total_pages <= 0:
        return []
    half = size // 2
    if total_pages <= size or current <= half + 1:
        first = 1
    elif current >= total_pages - half:
        first = total_pages - size + 1
    else:
        first = current - half
    return list(range(first, min(first + size, total_pages + 1)))


def paginate(rows: Sequence[Any], page: int, page_size: int) -> DataListPage:
    rows = list(rows)
    total = len(rows)
    page_size = max(int(page_size), 1)
    total_pages = math.ceil(total / page_size)
    page = min(max(int(page), 1), max(total_pages, 1))

    start = (page - 1) * page_size
    visible = rows[start:start + page_size]

    return DataListPage(
        rows=visible,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        showing_from=min(start + 1, total),
        showing_to=min(page * page_size, total),
        pages=page_window(page, total_pages),
    )


def process(rows: Iterable[Any], columns: Sequence[ColumnDef], state, *, search_fields=None) -> DataListPage:
    """Search, then filter, then sort, then paginate."""
    result = search(rows, state.search, search_fields)
    result = apply_filters(result, state.filters, columns)
    result = sort_rows(result, state.sort_column, state.sort_direction, columns)
    return paginate(result, state.page, state.page_size)
