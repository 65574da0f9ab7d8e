from __future__ import annotations

import logging
from datetime import date, timedelta

from flask import Flask, flash, jsonify, redirect, render_template, request, send_file, url_for

from ..common.datetime_utils import parse_month, parse_optional_date
from ..common.guards import (
    admin_required,
    api_admin_required,
    current_role,
    current_user_id,
    employee_required,
    local_redirect,
)
from ..container import Container
from ..core.constants import DEFAULT_STATS_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..datalist.model import ColumnDef, FilterOperator
from ..datalist.state import build_view
from .export import XLSX_MIMETYPE, export_workbook

logger = logging.getLogger(__name__)

ATTENDANCE_COLUMNS = (
    ColumnDef("date", "Date", "work_date", enable_filtering=False),
    ColumnDef(
        "employee",
        "Employee",
        "employee_name",
        filter_operators=(FilterOperator.EQUALS, FilterOperator.CONTAINS, FilterOperator.STARTS_WITH),
    ),
    ColumnDef("department", "Department", "department", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("clock_in", "Clock in", "clock_in", enable_filtering=False),
    ColumnDef("clock_out", "Clock out", "clock_out", enable_filtering=False),
    ColumnDef(
        "hours",
        "Hours",
        "total_hours",
        filter_operators=(FilterOperator.GT, FilterOperator.LT, FilterOperator.GTE, FilterOperator.LTE),
    ),
    ColumnDef("status", "Status", "status", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("actions", "", "attendance_id", enable_sorting=False, enable_filtering=False),
)


def _date_range(args) -> tuple[date, date]:
    today = date.today()
    start = parse_optional_date(args.get("start")) or today - timedelta(days=DEFAULT_STATS_DAYS - 1)
    end = parse_optional_date(args.get("end")) or today
    return start, end


def _employee_arg(args):
    value = (args.get("employee") or "").strip()
    return int(value) if value.isdigit() else None


def register(app: Flask, container: Container) -> None:
    @app.route("/employee/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @employee_required
    def clock_in():
        try:
            record = container.attendance_service.clock_in(current_user_id())
            if record and record.status == AttendanceStatus.LATE:
                flash("Clocked in. You are late today.", "warning")
            else:
                flash("Clocked in.", "success")
        except (ValidationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Clock-in failed")
            flash("System error while clocking in", "danger")
        return local_redirect(request.form.get("next"), "employee_attendance")

    @app.route("/employee/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @employee_required
    def clock_out():
        try:
            record = container.attendance_service.clock_out(current_user_id())
            flash(f"Clocked out after {record.total_hours:g} h.", "success")
        except ValidationError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Clock-out failed")
            flash("System error while clocking out", "danger")
        return local_redirect(request.form.get("next"), "employee_attendance")

    @app.route("/employee/attendance", endpoint="employee_attendance")
    @employee_required
    def employee_attendance():
        today = date.today()
        try:
            year, month = parse_month(request.args.get("month"), default=today)
        except ValidationError as e:
            flash(str(e), "warning")
            year, month = today.year, today.month

        summary = container.attendance_service.monthly_summary(current_user_id(), year=year, month=month, today=today)
        return render_template(
            "employee/attendance.html",
            summary=summary,
            today_record=container.attendance_service.get_today_record(current_user_id(), today),
            today=today,
            work_hours=container.attendance_service.work_hours_label,
            active_page="employee_attendance",
        )

    @app.route("/admin/attendance", endpoint="admin_attendance")
    @admin_required
    def admin_attendance():
        try:
            start, end = _date_range(request.args)
            rows = container.attendance_service.admin_list(
                start_date=start,
                end_date=end,
                employee_id=_employee_arg(request.args),
                status=request.args.get("status") or None,
            )
        except ValidationError as e:
            flash(str(e), "danger")
            start = end = date.today()
            rows = []

        view = build_view(
            rows,
            ATTENDANCE_COLUMNS,
            request.args,
            search_fields=("employee_name", "department", "status", "notes"),
            empty_message="No attendance records found",
        )
        return render_template(
            "admin/attendance.html",
            view=view,
            start=start,
            end=end,
            employees=container.employee_service.list_all(),
            statuses=list(AttendanceStatus),
            active_page="admin_attendance",
        )

    @app.route("/admin/attendance/<int:attendance_id>/edit", methods=["GET", "POST"], endpoint="edit_attendance")
    @admin_required
    def edit_attendance(attendance_id: int):
        record = container.attendance_repo.get_by_id(attendance_id)
        if not record:
            flash("Attendance record not found", "danger")
            return redirect(url_for("admin_attendance"))

        if request.method == "POST":
            try:
                container.attendance_service.admin_update(
                    current_role=current_role(),
                    attendance_id=attendance_id,
                    clock_in=request.form.get("clock_in", ""),
                    clock_out=request.form.get("clock_out", ""),
                    status=request.form.get("status", ""),
                    notes=request.form.get("notes"),
                )
                flash("Attendance updated.", "success")
                return redirect(url_for("admin_attendance"))
            except (ValidationError, AuthorizationError, NotFoundError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Updating attendance %s failed", attendance_id)
                flash("System error while updating attendance", "danger")

        return render_template(
            "admin/attendance_form.html",
            record=record,
            employee=container.employees_repo.get_by_id(record.employee_id),
            statuses=list(AttendanceStatus),
            active_page="admin_attendance",
        )

    @app.route("/admin/attendance/mark-absent", methods=["POST"], endpoint="mark_absent")
    @admin_required
    def mark_absent():
        try:
            work_date = parse_optional_date(request.form.get("date")) or date.today()
            created = container.attendance_service.mark_absentees(current_role=current_role(), work_date=work_date)
            flash(f"Marked {created} employee(s) absent for {work_date.isoformat()}.", "info")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Marking absentees failed")
            flash("System error while marking absentees", "danger")
        return redirect(url_for("admin_attendance"))

    @app.route("/admin/attendance/export", endpoint="export_attendance")
    @admin_required
    def export_attendance():
        try:
            start, end = _date_range(request.args)
            rows = container.attendance_service.admin_list(
                start_date=start,
                end_date=end,
                employee_id=_employee_arg(request.args),
                status=request.args.get("status") or None,
            )
            return send_file(
                export_workbook(rows),
                mimetype=XLSX_MIMETYPE,
                as_attachment=True,
                download_name=f"attendance_{start.isoformat()}_{end.isoformat()}.xlsx",
            )
        except ValidationError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Attendance export failed")
            flash("System error while exporting attendance", "danger")
        return redirect(url_for("admin_attendance"))

    @app.route("/api/attendance/stats", endpoint="attendance_stats")
    @api_admin_required
    def attendance_stats():
        return jsonify({"success": True, **container.attendance_service.stats(today=date.today())})
