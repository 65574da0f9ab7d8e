from __future__ import annotations

from werkzeug.datastructures import MultiDict

from src.workforce_hub.workforce_hub.datalist.model import ColumnDef, FilterOperator, SortDirection
from src.workforce_hub.workforce_hub.datalist.state import DataListState, build_view

COLUMNS = (
    ColumnDef("name", "Name", "name", filter_operators=(FilterOperator.CONTAINS, FilterOperator.EQUALS)),
    ColumnDef("age", "Age", "age"),
    ColumnDef("actions", "", "id", enable_sorting=False, enable_filtering=False),
)


def _rows(n):
    return [{"id": i, "name": f"person {i:02d}", "age": 20 + i} for i in range(1, n + 1)]


def test_sort_cycles_through_asc_desc_and_off():
    state = DataListState()
    state = state.toggle_sort("age", COLUMNS)
    assert (state.sort_column, state.sort_direction) == ("age", SortDirection.ASC)
    state = state.toggle_sort("age", COLUMNS)
    assert state.sort_direction is SortDirection.DESC
    state = state.toggle_sort("age", COLUMNS)
    assert state.sort_column is None and state.sort_direction is None


def test_sort_on_unsortable_column_is_ignored():
    state = DataListState().toggle_sort("actions", COLUMNS)
    assert state.sort_column is None


def test_add_filter_rejects_blank_values_and_disallowed_operators():
    state = DataListState()
    assert state.add_filter("name", "contains", "  ", COLUMNS) == state
    assert state.add_filter("name", "gt", "3", COLUMNS) == state
    assert state.add_filter("actions", "equals", "1", COLUMNS) == state
    assert state.add_filter("name", "nope", "x", COLUMNS) == state


def test_filter_changes_reset_to_first_page():
    state = DataListState(page=3).add_filter("name", "contains", "1", COLUMNS)
    assert state.page == 1
    assert state.filters[0].id == "name-1"

    state = state.add_filter("age", "gte", "25", COLUMNS).go_to_page(2)
    state = state.remove_filter("name-1")
    assert [f.id for f in state.filters] == ["age-2"]
    assert state.page == 1
    assert state.go_to_page(4).clear_filters().filters == ()


def test_new_search_resets_to_first_page():
    state = DataListState(page=4).with_search("person")
    assert state.search == "person"
    assert state.page == 1
    assert DataListState(page=2).with_search(None).search == ""


def test_page_size_outside_options_falls_back_to_default():
    assert DataListState().with_page_size(20).page_size == 20
    assert DataListState().with_page_size(7).page_size == 10
    assert DataListState().with_page_size("x").page_size == 10


def test_from_args_reads_repeated_filters_and_add_form():
    args = MultiDict(
        [
            ("q", "person"),
            ("filter", "age:gt:22"),
            ("filter", "broken"),
            ("filter_column", "name"),
            ("filter_operator", "contains"),
            ("filter_value", "0"),
            ("sort", "age"),
            ("dir", "desc"),
            ("page", "2"),
            ("page_size", "5"),
        ]
    )
    state = DataListState.from_args(args, COLUMNS)
    assert state.search == "person"
    assert [(f.column_id, f.operator, f.value) for f in state.filters] == [
        ("age", FilterOperator.GT, "22"),
        ("name", FilterOperator.CONTAINS, "0"),
    ]
    assert (state.sort_column, state.sort_direction) == ("age", SortDirection.DESC)
    assert (state.page, state.page_size) == (2, 5)


def test_to_args_round_trips_through_from_args():
    state = (
        DataListState()
        .with_search("x")
        .add_filter("age", "lt", "30", COLUMNS)
        .toggle_sort("name", COLUMNS)
        .with_page_size(20)
        .go_to_page(2)
    )
    assert DataListState.from_args(MultiDict(_flatten(state.to_args())), COLUMNS) == state


def _flatten(args):
    out = []
    for key, value in args.items():
        if isinstance(value, list):
            out.extend((key, v) for v in value)
        else:
            out.append((key, str(value)))
    return out


def test_build_view_runs_the_pipeline_and_keeps_page_arguments():
    args = MultiDict([("tab", "pending"), ("sort", "age"), ("dir", "desc"), ("page_size", "5"), ("page", "2")])
    view = build_view(_rows(12), COLUMNS, args)

    assert view.page.total == 12
    assert [r["id"] for r in view.rows] == [7, 6, 5, 4, 3]
    assert view.extra_args == {"tab": "pending"}
    assert view.page_args(3) == {"tab": "pending", "sort": "age", "dir": "desc", "page": 3, "page_size": 5}
    assert view.sort_args("age") == {"tab": "pending", "page": 2, "page_size": 5}
    assert view.sort_indicator("age") == "desc"
    assert ("tab", "pending") in view.hidden_args()


def test_build_view_with_filtering_disabled_drops_filters():
    args = MultiDict([("filter", "name:contains:01")])
    view = build_view(_rows(3), COLUMNS, args, filterable=False)
    assert view.state.filters == ()
    assert view.page.total == 3


def test_build_view_clamps_page_beyond_the_end():
    view = build_view(_rows(3), COLUMNS, MultiDict([("page", "9")]))
    assert view.state.page == 1
    assert len(view.rows) == 3
