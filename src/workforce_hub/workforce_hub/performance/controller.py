from __future__ import annotations

from datetime import date

from flask import Flask, flash, render_template, request

from ..common.datetime_utils import parse_month
from ..common.guards import admin_required
from ..container import Container
from ..core.exceptions import ValidationError
from ..datalist.model import ColumnDef, FilterOperator
from ..datalist.state import build_view

NUMERIC_OPERATORS = (
    FilterOperator.EQUALS,
    FilterOperator.GT,
    FilterOperator.LT,
    FilterOperator.GTE,
    FilterOperator.LTE,
)

PERFORMANCE_COLUMNS = (
    ColumnDef("employee", "Employee", "employee_name", filter_operators=(FilterOperator.CONTAINS, FilterOperator.STARTS_WITH)),
    ColumnDef("department", "Department", "department", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("completed", "Completed", "total_completed", filter_operators=NUMERIC_OPERATORS),
    ColumnDef("on_time", "On time", "on_time_percent", filter_operators=NUMERIC_OPERATORS),
    ColumnDef("avg_delta", "Avg. completion", lambda r: r.tally.average_delta_days, enable_filtering=False),
    ColumnDef("score", "Score", "score", filter_operators=NUMERIC_OPERATORS),
    ColumnDef("rating", "Rating", "rating", filter_operators=(FilterOperator.EQUALS,)),
)


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/performance", endpoint="admin_performance")
    @admin_required
    def admin_performance():
        today = date.today()
        try:
            year, month = parse_month(request.args.get("month"), default=today)
        except ValidationError as e:
            flash(str(e), "warning")
            year, month = today.year, today.month

        overview = container.performance_service.overview(
            year=year,
            month=month,
            department=request.args.get("department") or None,
        )
        view = build_view(
            overview.rows,
            PERFORMANCE_COLUMNS,
            request.args,
            search_fields=("employee_name", "department"),
            empty_message="No employees to rate",
        )
        return render_template(
            "admin/performance.html",
            overview=overview,
            view=view,
            active_page="admin_performance",
        )
