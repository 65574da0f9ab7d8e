from __future__ import annotations

from datetime import date

from flask import Flask, render_template

from ..common.guards import admin_required, current_user_id, employee_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/dashboard", endpoint="admin_dashboard")
    @admin_required
    def admin_dashboard():
        data = container.dashboard_service.admin(today=date.today())
        return render_template("admin/dashboard.html", data=data, today=date.today(), active_page="admin_dashboard")

    @app.route("/employee/dashboard", endpoint="employee_dashboard")
    @employee_required
    def employee_dashboard():
        data = container.dashboard_service.employee(employee_id=current_user_id(), today=date.today())
        return render_template(
            "employee/dashboard.html",
            data=data,
            today=date.today(),
            work_hours=container.attendance_service.work_hours_label,
            active_page="employee_dashboard",
        )
