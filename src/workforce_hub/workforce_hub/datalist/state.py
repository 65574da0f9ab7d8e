from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.constants import DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS
from .engine import process
from .model import ColumnDef, DataListPage, FilterDef, FilterOperator, SortDirection

logger = logging.getLogger(__name__)

STATE_ARGS = frozenset(
    {"q", "filter", "filter_column", "filter_operator", "filter_value", "sort", "dir", "page", "page_size"}
)


def _columns_by_id(columns: Sequence[ColumnDef]) -> dict[str, ColumnDef]:
    return {c.id: c for c in columns}


def _next_filter_seq(filters: Sequence[FilterDef]) -> int:
    seq = 0
    for f in filters:
        suffix = f.id.rsplit("-", 1)[-1]
        if suffix.isdigit():
            seq = max(seq, int(suffix))
    return seq + 1


@dataclass(frozen=True)
class DataListState:
    """What the user asked for: search, filters, sort and page.

    Transitions return a new state. Changing the search, the filters or the
    page size sends the user back to page 1.
    """

    search: str = ""
    filters: tuple[FilterDef, ...] = ()
    sort_column: Optional[str] = None
    sort_direction: Optional[SortDirection] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def with_search(self, query: str) -> "DataListState":
        return replace(self, search=query or "", page=1)

    def toggle_sort(self, column_id: str, columns: Sequence[ColumnDef], *, sortable: bool = True) -> "DataListState":
        column = _columns_by_id(columns).get(column_id)
        if not sortable or column is None or not column.enable_sorting:
            return self

        if self.sort_column != column_id:
            return replace(self, sort_column=column_id, sort_direction=SortDirection.ASC)
        if self.sort_direction is SortDirection.ASC:
            return replace(self, sort_direction=SortDirection.DESC)
        if self.sort_direction is SortDirection.DESC:
            return replace(self, sort_column=None, sort_direction=None)
        return replace(self, sort_direction=SortDirection.ASC)

    def add_filter(
        self,
        column_id: str,
        operator: FilterOperator | str,
        value: Any,
        columns: Sequence[ColumnDef],
    ) -> "DataListState":
        text = "" if value is None else str(value)
        if not text.strip():
            return self

        try:
            op = FilterOperator(operator)
        except ValueError:
            logger.debug("Ignoring filter with unknown operator %r", operator)
            return self

        column = _columns_by_id(columns).get(column_id)
        if column is None or not column.allows(op):
            logger.debug("Ignoring filter on %r with operator %s", column_id, op.value)
            return self

        new_filter = FilterDef(
            id=f"{column_id}-{_next_filter_seq(self.filters)}",
            column_id=column_id,
            operator=op,
            value=text,
        )
        return replace(self, filters=self.filters + (new_filter,), page=1)

    def remove_filter(self, filter_id: str) -> "DataListState":
        return replace(self, filters=tuple(f for f in self.filters if f.id != filter_id), page=1)

    def clear_filters(self) -> "DataListState":
        return replace(self, filters=(), page=1)

    def with_page_size(self, size: Any) -> "DataListState":
        try:
            size = int(size)
        except (TypeError, ValueError):
            size = DEFAULT_PAGE_SIZE
        if size not in PAGE_SIZE_OPTIONS:
            size = DEFAULT_PAGE_SIZE
        return replace(self, page_size=size, page=1)

    def go_to_page(self, page: Any) -> "DataListState":
        try:
            page = int(page)
        except (TypeError, ValueError):
            page = 1
        return replace(self, page=max(page, 1))

    def to_args(self) -> dict[str, Any]:
        args: dict[str, Any] = {}
        if self.search:
            args["q"] = self.search
        if self.filters:
            args["filter"] = [f.to_arg() for f in self.filters]
        if self.sort_column and self.sort_direction:
            args["sort"] = self.sort_column
            args["dir"] = self.sort_direction.value
        if self.page != 1:
            args["page"] = self.page
        if self.page_size != DEFAULT_PAGE_SIZE:
            args["page_size"] = self.page_size
        return args

    @classmethod
    def from_args(cls, args: Mapping[str, Any], columns: Sequence[ColumnDef]) -> "DataListState":
        """Rebuild the state from request query arguments.

        ``filter`` values are ``column:operator:value`` and may repeat.
        Anything malformed is dropped rather than rejected.
        """

        getlist = getattr(args, "getlist", None)
        if getlist is not None:
            raw_filters = getlist("filter")
        else:
            raw = args.get("filter")
            raw_filters = raw if isinstance(raw, (list, tuple)) else ([raw] if raw else [])

        state = cls().with_search(args.get("q") or "")
        for raw in raw_filters:
            parts = str(raw).split(":", 2)
            if len(parts) != 3:
                continue
            state = state.add_filter(parts[0], parts[1], parts[2], columns)

        # the add-filter form submits its three fields separately
        if args.get("filter_column"):
            state = state.add_filter(
                args.get("filter_column"),
                args.get("filter_operator") or FilterOperator.EQUALS.value,
                args.get("filter_value"),
                columns,
            )

        sort_column = args.get("sort")
        if sort_column:
            column = _columns_by_id(columns).get(sort_column)
            try:
                direction = SortDirection(args.get("dir") or SortDirection.ASC.value)
            except ValueError:
                direction = None
            if column is not None and column.enable_sorting and direction is not None:
                state = replace(state, sort_column=sort_column, sort_direction=direction)

        state = state.with_page_size(args.get("page_size") or DEFAULT_PAGE_SIZE)
        return state.go_to_page(args.get("page") or 1)


@dataclass(frozen=True)
class DataListView:
    """A processed list plus everything a template needs to draw its controls."""

    columns: tuple[ColumnDef, ...]
    state: DataListState
    page: DataListPage
    extra_args: dict = field(default_factory=dict)
    searchable: bool = True
    filterable: bool = True
    sortable: bool = True
    empty_message: str = "No data found"

    @property
    def rows(self) -> list:
        return self.page.rows

    @property
    def filterable_columns(self) -> list[ColumnDef]:
        return [c for c in self.columns if c.enable_filtering]

    @property
    def page_size_options(self) -> tuple[int, ...]:
        return PAGE_SIZE_OPTIONS

    @property
    def operators(self) -> list[FilterOperator]:
        return list(FilterOperator)

    def column_header(self, column_id: str) -> str:
        column = _columns_by_id(self.columns).get(column_id)
        return column.header if column else column_id

    def is_sortable(self, column: ColumnDef) -> bool:
        return self.sortable and column.enable_sorting

    def sort_indicator(self, column_id: str) -> str:
        if self.state.sort_column != column_id:
            return ""
        return "asc" if self.state.sort_direction is SortDirection.ASC else "desc"

    def _args(self, state: DataListState) -> dict[str, Any]:
        args = dict(self.extra_args)
        args.update(state.to_args())
        return args

    def sort_args(self, column_id: str) -> dict[str, Any]:
        return self._args(self.state.toggle_sort(column_id, self.columns, sortable=self.sortable))

    def page_args(self, page: int) -> dict[str, Any]:
        return self._args(self.state.go_to_page(page))

    def remove_filter_args(self, filter_id: str) -> dict[str, Any]:
        return self._args(self.state.remove_filter(filter_id))

    def clear_filters_args(self) -> dict[str, Any]:
        return self._args(self.state.clear_filters())

    def hidden_args(self, *, exclude: Iterable[str] = ()) -> list[tuple[str, Any]]:
        """Flattened args for hidden form inputs (search and filter forms)."""
        skip = set(exclude)
        out: list[tuple[str, Any]] = []
        for key, value in self._args(self.state.go_to_page(1)).items():
            if key in skip or key == "page":
                continue
            if isinstance(value, (list, tuple)):
                out.extend((key, v) for v in value)
            else:
                out.append((key, value))
        return out


def build_view(
    rows: Iterable[Any],
    columns: Sequence[ColumnDef],
    args: Mapping[str, Any],
    *,
    search_fields: Optional[Sequence[Any]] = None,
    searchable: bool = True,
    filterable: bool = True,
    sortable: bool = True,
    empty_message: str = "No data found",
) -> DataListView:
    """Read the grid state from ``args`` and run ``rows`` through it.

    Query arguments that do not belong to the grid (tabs, page-level filters)
    are carried into every link the view builds.
    """

    columns = tuple(columns)
    state = DataListState.from_args(args, columns)
    if not searchable:
        state = state.with_search("")
    if not filterable:
        state = replace(state, filters=())
    if not sortable:
        state = replace(state, sort_column=None, sort_direction=None)

    extra = {k: v for k, v in args.items() if k not in STATE_ARGS and v not in (None, "")}
    page = process(rows, columns, state, search_fields=search_fields)
    return DataListView(
        columns=columns,
        state=replace(state, page=page.page),
        page=page,
        extra_args=extra,
        searchable=searchable,
        filterable=filterable,
        sortable=sortable,
        empty_message=empty_message,
    )
