from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, jsonify, redirect, render_template, request, session, url_for

from ..common.datetime_utils import parse_optional_date
from ..common.guards import (
    admin_required,
    anonymous_only,
    api_admin_required,
    current_role,
    current_user_id,
    dashboard_endpoint,
    login_required,
    redirect_to_dashboard,
)
from ..container import Container
from ..core.enums import EmployeeStatus
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..datalist.model import ColumnDef, FilterOperator
from ..datalist.state import build_view
from .service import build_draft

logger = logging.getLogger(__name__)

TEXT_OPERATORS = (
    FilterOperator.EQUALS,
    FilterOperator.CONTAINS,
    FilterOperator.STARTS_WITH,
    FilterOperator.ENDS_WITH,
)

EMPLOYEE_COLUMNS = (
    ColumnDef("name", "Name", "full_name", filter_operators=TEXT_OPERATORS),
    ColumnDef("email", "Email", "email", filter_operators=TEXT_OPERATORS),
    ColumnDef("department", "Department", "department", filter_operators=TEXT_OPERATORS),
    ColumnDef("position", "Position", "position", filter_operators=TEXT_OPERATORS),
    ColumnDef("status", "Status", "status", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("attendance", "Today", "todays_attendance", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("join_date", "Joined", "join_date", enable_filtering=False),
    ColumnDef("actions", "", "employee_id", enable_sorting=False, enable_filtering=False),
)


def _draft_from(form):
    return build_draft(
        first_name=form.get("first_name"),
        last_name=form.get("last_name"),
        email=form.get("email"),
        phone=form.get("phone"),
        department=form.get("department"),
        position=form.get("position"),
        status=form.get("status"),
        join_date=parse_optional_date(form.get("join_date")),
        address=form.get("address"),
    )


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_current_user():
        if current_user_id() is None:
            return {"current_user": None}
        role = current_role()
        return {
            "current_user": {
                "id": current_user_id(),
                "full_name": session.get("name"),
                "email": session.get("email"),
                "role": role.value if role else None,
            }
        }

    @app.route("/", endpoint="index")
    def index():
        if current_user_id() is None:
            return redirect(url_for("login"))
        return redirect_to_dashboard()

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    @anonymous_only
    def login():
        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                s_user = container.auth_service.authenticate(email, password)

                session.clear()
                session.permanent = bool(remember)
                session["user_id"] = s_user.user_id
                session["name"] = s_user.full_name
                session["email"] = s_user.email
                session["role"] = s_user.role.value

                flash("Signed in successfully.", "success")
                return redirect(url_for(dashboard_endpoint(s_user.role)))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Login failed")
                flash("System error while signing in", "danger")

        return render_template("login.html", email=request.form.get("email", ""))

    @app.route("/logout", methods=["GET", "POST"], endpoint="logout")
    @login_required
    def logout():
        session.clear()
        flash("You have been signed out.", "info")
        return redirect(url_for("login"))

    @app.route("/signup", methods=["GET", "POST"], endpoint="signup")
    @anonymous_only
    def signup():
        if request.method == "POST":
            try:
                container.auth_service.signup(
                    first_name=request.form.get("first_name", ""),
                    last_name=request.form.get("last_name", ""),
                    email=request.form.get("email", ""),
                    password=request.form.get("password", ""),
                    confirm_password=request.form.get("confirm_password", ""),
                )
                return redirect(url_for("signup_success"))
            except ValidationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Signup failed")
                flash("System error while creating the account", "danger")

        return render_template("signup.html", form=request.form)

    @app.route("/signup-success", endpoint="signup_success")
    @anonymous_only
    def signup_success():
        return render_template("signup_success.html")

    @app.route("/admin/employees", endpoint="admin_employees")
    @admin_required
    def admin_employees():
        department = request.args.get("department") or None
        rows = container.employee_service.list_directory(today=date.today(), department=department)
        view = build_view(
            rows,
            EMPLOYEE_COLUMNS,
            request.args,
            search_fields=("full_name", "email", "department", "position"),
            empty_message="No employees found",
        )
        return render_template(
            "admin/employees.html",
            view=view,
            departments=container.employee_service.departments(),
            active_department=department,
            active_page="admin_employees",
        )

    @app.route("/admin/employees/new", methods=["GET", "POST"], endpoint="add_employee")
    @admin_required
    def add_employee():
        if request.method == "POST":
            try:
                container.employee_service.create_employee(
                    current_role=current_role(),
                    draft=_draft_from(request.form),
                    password=request.form.get("password", ""),
                )
                flash("Employee added.", "success")
                return redirect(url_for("admin_employees"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Adding employee failed")
                flash("System error while adding the employee", "danger")

        return render_template(
            "admin/employee_form.html",
            employee=None,
            form=request.form,
            departments=container.employee_service.departments(),
            statuses=list(EmployeeStatus),
            active_page="admin_employees",
        )

    @app.route("/admin/employees/<int:employee_id>/edit", methods=["GET", "POST"], endpoint="edit_employee")
    @admin_required
    def edit_employee(employee_id: int):
        try:
            employee = container.employee_service.get(employee_id)
        except NotFoundError as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_employees"))

        if request.method == "POST":
            try:
                container.employee_service.update_employee(
                    current_role=current_role(),
                    employee_id=employee_id,
                    draft=_draft_from(request.form),
                )
                flash("Employee updated.", "success")
                return redirect(url_for("admin_employees"))
            except (ValidationError, AuthorizationError, NotFoundError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Updating employee %s failed", employee_id)
                flash("System error while updating the employee", "danger")

        return render_template(
            "admin/employee_form.html",
            employee=employee,
            form=request.form,
            departments=container.employee_service.departments(),
            statuses=list(EmployeeStatus),
            active_page="admin_employees",
        )

    @app.route("/admin/employees/<int:employee_id>/delete", methods=["POST"], endpoint="delete_employee")
    @admin_required
    def delete_employee(employee_id: int):
        try:
            container.employee_service.delete_employee(current_role=current_role(), employee_id=employee_id)
            flash("Employee deleted.", "success")
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Deleting employee %s failed", employee_id)
            flash("System error while deleting the employee", "danger")

        return redirect(url_for("admin_employees"))

    @app.route("/api/employees", methods=["POST"], endpoint="api_create_employee")
    @api_admin_required
    def api_create_employee():
        body = request.get_json(silent=True) or {}
        try:
            container.employee_service.create_employee(
                current_role=current_role(),
                draft=_draft_from(body),
                password=body.get("password") or "",
            )
            return jsonify({"success": True})
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except AuthorizationError as e:
            return jsonify({"success": False, "error": str(e)}), 403
        except Exception:
            logger.exception("API employee creation failed")
            return jsonify({"success": False, "error": "An unexpected error occurred"}), 500

    @app.route("/admin/settings", methods=["GET", "POST"], endpoint="admin_settings")
    @admin_required
    def admin_settings():
        user_id = current_user_id()
        if request.method == "POST":
            action = request.form.get("action", "profile")
            try:
                if action == "password":
                    container.employee_service.change_password(
                        employee_id=user_id,
                        current_password=request.form.get("current_password", ""),
                        new_password=request.form.get("new_password", ""),
                        confirm_password=request.form.get("confirm_password", ""),
                    )
                    flash("Password changed.", "success")
                else:
                    updated = container.employee_service.update_profile(
                        employee_id=user_id,
                        first_name=request.form.get("first_name", ""),
                        last_name=request.form.get("last_name", ""),
                        email=request.form.get("email", ""),
                        phone=request.form.get("phone"),
                    )
                    session["name"] = updated.full_name
                    session["email"] = updated.email
                    flash("Profile updated.", "success")
                return redirect(url_for("admin_settings"))
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Updating settings failed")
                flash("System error while saving settings", "danger")

        employee = container.employee_service.get(user_id)
        return render_template("admin/settings.html", employee=employee, active_page="admin_settings")
