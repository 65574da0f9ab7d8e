from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

Accessor = Union[str, Callable[[Any], Any]]


class FilterOperator(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"

    @property
    def label(self) -> str:
        return _OPERATOR_LABELS[self]

    @property
    def is_numeric(self) -> bool:
        return self in {FilterOperator.GT, FilterOperator.LT, FilterOperator.GTE, FilterOperator.LTE}


_OPERATOR_LABELS = {
    FilterOperator.EQUALS: "equals",
    FilterOperator.CONTAINS: "contains",
    FilterOperator.STARTS_WITH: "starts with",
    FilterOperator.ENDS_WITH: "ends with",
    FilterOperator.GT: "greater than",
    FilterOperator.LT: "less than",
    FilterOperator.GTE: "greater than or equal",
    FilterOperator.LTE: "less than or equal",
}


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def get_value(row: Any, accessor: Accessor) -> Any:
    """Read a cell from a row that may be a mapping or a plain object."""
    if callable(accessor):
        return accessor(row)
    if isinstance(row, Mapping):
        return row.get(accessor)
    return getattr(row, accessor, None)


def row_fields(row: Any) -> Sequence[str]:
    """Field names searched when a list does not name its search fields."""
    if isinstance(row, Mapping):
        return [str(k) for k in row.keys()]
    if dataclasses.is_dataclass(row):
        return [f.name for f in dataclasses.fields(row)]
    return [k for k in vars(row) if not k.startswith("_")]


@dataclass(frozen=True)
class ColumnDef:
    """A grid column: how to read the cell and what the user may do with it."""

    id: str
    header: str
    accessor: Accessor
    enable_sorting: bool = True
    enable_filtering: bool = True
    filter_operators: Optional[tuple[FilterOperator, ...]] = None
    css_class: str = ""

    def value_of(self, row: Any) -> Any:
        return get_value(row, self.accessor)

    def allows(self, operator: FilterOperator) -> bool:
        if not self.enable_filtering:
            return False
        return self.filter_operators is None or operator in self.filter_operators


@dataclass(frozen=True)
class FilterDef:
    id: str
    column_id: str
    operator: FilterOperator
    value: str

    def to_arg(self) -> str:
        return f"{self.column_id}:{self.operator.value}:{self.value}"


@dataclass(frozen=True)
class DataListPage:
    """One visible page of a processed list."""

    rows: list
    total: int
    page: int
    page_size: int
    total_pages: int
    showing_from: int
    showing_to: int
    pages: list[int] = field(default_factory=list)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
