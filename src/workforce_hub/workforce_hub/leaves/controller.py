from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import parse_optional_date
from ..common.guards import admin_required, current_role, current_user_id, employee_required, login_required
from ..container import Container
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..datalist.model import ColumnDef, FilterOperator
from ..datalist.state import build_view
from .service import ADMIN_TABS

logger = logging.getLogger(__name__)

LEAVE_COLUMNS = (
    ColumnDef("employee", "Employee", "employee_name", filter_operators=(FilterOperator.EQUALS, FilterOperator.CONTAINS)),
    ColumnDef("type", "Type", "leave_type", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("start", "From", "start_date", enable_filtering=False),
    ColumnDef("end", "To", "end_date", enable_filtering=False),
    ColumnDef(
        "days",
        "Days",
        "total_days",
        filter_operators=(FilterOperator.EQUALS, FilterOperator.GT, FilterOperator.LT, FilterOperator.GTE, FilterOperator.LTE),
    ),
    ColumnDef("status", "Status", "status", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("actions", "", "leave_id", enable_sorting=False, enable_filtering=False),
)

MY_LEAVE_COLUMNS = tuple(c for c in LEAVE_COLUMNS if c.id != "employee")


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/leave-requests", endpoint="admin_leaves")
    @admin_required
    def admin_leaves():
        today = date.today()
        tab = request.args.get("tab") or "all"
        if tab not in ADMIN_TABS:
            tab = "all"
        employee = (request.args.get("employee") or "").strip()
        employee_id = int(employee) if employee.isdigit() else None

        rows = container.leave_service.admin_list(tab=tab, today=today, employee_id=employee_id)
        view = build_view(
            rows,
            LEAVE_COLUMNS,
            request.args,
            search_fields=("employee_name", "leave_type", "reason"),
            empty_message="No leave requests found",
        )
        return render_template(
            "admin/leave_requests.html",
            view=view,
            tab=tab,
            tabs=ADMIN_TABS,
            tab_counts=container.leave_service.tab_counts(today=today),
            employees=container.employee_service.list_all(),
            employee_id=employee_id,
            active_page="admin_leaves",
        )

    @app.route("/admin/leave-requests/<int:leave_id>", endpoint="admin_leave_detail")
    @admin_required
    def admin_leave_detail(leave_id: int):
        try:
            leave = container.leave_service.get(current_role=current_role(), user_id=current_user_id(), leave_id=leave_id)
        except (NotFoundError, AuthorizationError) as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_leaves"))

        return render_template(
            "admin/leave_detail.html",
            leave=leave,
            employee=container.employees_repo.get_by_id(leave.employee_id),
            active_page="admin_leaves",
        )

    def _decide(leave_id: int, action: str):
        comment = request.form.get("comment", "")
        try:
            if action == "approve":
                container.leave_service.approve(
                    current_role=current_role(),
                    admin_user_id=current_user_id(),
                    leave_id=leave_id,
                    comment=comment,
                )
                flash("Leave request approved.", "success")
            else:
                container.leave_service.reject(
                    current_role=current_role(),
                    admin_user_id=current_user_id(),
                    leave_id=leave_id,
                    comment=comment,
                )
                flash("Leave request rejected.", "info")
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Deciding leave request %s failed", leave_id)
            flash("System error while updating the leave request", "danger")
        return redirect(url_for("admin_leave_detail", leave_id=leave_id))

    @app.route("/admin/leave-requests/<int:leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    @admin_required
    def approve_leave(leave_id: int):
        return _decide(leave_id, "approve")

    @app.route("/admin/leave-requests/<int:leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    @admin_required
    def reject_leave(leave_id: int):
        return _decide(leave_id, "reject")

    @app.route("/leave-requests/<int:leave_id>/comments", methods=["POST"], endpoint="comment_leave")
    @login_required
    def comment_leave(leave_id: int):
        try:
            container.leave_service.add_comment(
                current_role=current_role(),
                user_id=current_user_id(),
                leave_id=leave_id,
                text=request.form.get("comment", ""),
            )
            flash("Comment added.", "success")
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Commenting on leave request %s failed", leave_id)
            flash("System error while adding the comment", "danger")

        endpoint = "admin_leave_detail" if current_role() == Role.ADMIN else "employee_leave_detail"
        return redirect(url_for(endpoint, leave_id=leave_id))

    @app.route("/employee/leave-requests", methods=["GET", "POST"], endpoint="employee_leaves")
    @employee_required
    def employee_leaves():
        if request.method == "POST":
            try:
                container.leave_service.create_leave(
                    current_role=current_role(),
                    employee_id=current_user_id(),
                    leave_type=request.form.get("leave_type"),
                    start_date=parse_optional_date(request.form.get("start_date")),
                    end_date=parse_optional_date(request.form.get("end_date")),
                    reason=request.form.get("reason"),
                )
                flash("Leave request submitted.", "success")
                return redirect(url_for("employee_leaves"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Submitting leave request failed")
                flash("System error while submitting the leave request", "danger")

        rows = container.leave_service.employee_list(
            employee_id=current_user_id(),
            status=request.args.get("status"),
            leave_type=request.args.get("type"),
        )
        view = build_view(
            rows,
            MY_LEAVE_COLUMNS,
            request.args,
            search_fields=("reason", "leave_type"),
            empty_message="No leave requests found",
        )
        return render_template(
            "employee/leave_requests.html",
            view=view,
            form=request.form,
            leave_types=list(LeaveType),
            statuses=list(LeaveStatus),
            active_page="employee_leaves",
        )

    @app.route("/employee/leave-requests/<int:leave_id>", endpoint="employee_leave_detail")
    @employee_required
    def employee_leave_detail(leave_id: int):
        try:
            leave = container.leave_service.get(current_role=current_role(), user_id=current_user_id(), leave_id=leave_id)
        except (NotFoundError, AuthorizationError) as e:
            flash(str(e), "danger")
            return redirect(url_for("employee_leaves"))

        return render_template("employee/leave_detail.html", leave=leave, active_page="employee_leaves")
