from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import parse_optional_date
from ..common.guards import admin_required, current_role, current_user_id, employee_required, login_required
from ..container import Container
from ..core.constants import TASK_CATEGORIES
from ..core.enums import Role, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..datalist.model import ColumnDef, FilterOperator
from ..datalist.state import build_view
from .service import parse_status

logger = logging.getLogger(__name__)

NUMERIC_OPERATORS = (FilterOperator.GT, FilterOperator.LT, FilterOperator.GTE, FilterOperator.LTE)

TASK_COLUMNS = (
    ColumnDef("title", "Title", "title", filter_operators=(FilterOperator.CONTAINS, FilterOperator.STARTS_WITH)),
    ColumnDef("assignee", "Assignee", "assignee_name", filter_operators=(FilterOperator.EQUALS, FilterOperator.CONTAINS)),
    ColumnDef("category", "Category", "category", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("priority", "Priority", "priority", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("status", "Status", "status", filter_operators=(FilterOperator.EQUALS,)),
    ColumnDef("due", "Due", "due_date", enable_filtering=False),
    ColumnDef("progress", "Progress", "progress", filter_operators=NUMERIC_OPERATORS),
    ColumnDef("actions", "", "task_id", enable_sorting=False, enable_filtering=False),
)

MY_TASK_COLUMNS = (
    ColumnDef("title", "Title", "title", enable_filtering=False),
    ColumnDef("priority", "Priority", "priority", enable_filtering=False),
    ColumnDef("status", "Status", "status", enable_filtering=False),
    ColumnDef("due", "Due", "due_date", enable_filtering=False),
    ColumnDef("days_left", "Days left", "days_remaining", enable_filtering=False),
    ColumnDef("progress", "Progress", "progress", enable_filtering=False),
    ColumnDef("actions", "", "task_id", enable_sorting=False, enable_filtering=False),
)


def _assignee(form):
    value = (form.get("assigned_to") or "").strip()
    if not value:
        return None
    if not value.isdigit():
        raise ValidationError("Assigned employee does not exist")
    return int(value)


def register(app: Flask, container: Container) -> None:
    def _form_context(task=None):
        return {
            "task": task,
            "form": request.form,
            "employees": [e for e in container.employee_service.list_all() if e.role == Role.EMPLOYEE],
            "categories": TASK_CATEGORIES,
            "priorities": list(TaskPriority),
            "statuses": list(TaskStatus),
            "active_page": "admin_tasks",
        }

    @app.route("/admin/tasks", endpoint="admin_tasks")
    @admin_required
    def admin_tasks():
        today = date.today()
        category = request.args.get("category") or "all"
        status = parse_status(request.args.get("status"))

        rows = container.task_service.admin_list(
            today=today,
            status=status.value if status else None,
            category=category,
        )
        view = build_view(
            rows,
            TASK_COLUMNS,
            request.args,
            search_fields=("title", "assignee_name", "category"),
            empty_message="No tasks found",
        )
        return render_template(
            "admin/tasks.html",
            view=view,
            categories=TASK_CATEGORIES,
            active_category=category,
            active_status=status,
            statuses=list(TaskStatus),
            active_page="admin_tasks",
        )

    @app.route("/admin/tasks/new", methods=["GET", "POST"], endpoint="add_task")
    @admin_required
    def add_task():
        if request.method == "POST":
            try:
                container.task_service.create_task(
                    current_role=current_role(),
                    actor_id=current_user_id(),
                    title=request.form.get("title"),
                    description=request.form.get("description"),
                    category=request.form.get("category"),
                    priority=request.form.get("priority"),
                    due_date=parse_optional_date(request.form.get("due_date")),
                    assigned_to=_assignee(request.form),
                )
                flash("Task created.", "success")
                return redirect(url_for("admin_tasks"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Creating task failed")
                flash("System error while creating the task", "danger")

        return render_template("admin/task_form.html", **_form_context())

    @app.route("/admin/tasks/<int:task_id>/edit", methods=["GET", "POST"], endpoint="edit_task")
    @admin_required
    def edit_task(task_id: int):
        try:
            task = container.task_service.get(task_id)
        except NotFoundError as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_tasks"))

        if request.method == "POST":
            try:
                container.task_service.update_task(
                    current_role=current_role(),
                    actor_id=current_user_id(),
                    task_id=task_id,
                    title=request.form.get("title"),
                    description=request.form.get("description"),
                    category=request.form.get("category"),
                    priority=request.form.get("priority"),
                    due_date=parse_optional_date(request.form.get("due_date")),
                    assigned_to=_assignee(request.form),
                    status=request.form.get("status"),
                )
                flash("Task updated.", "success")
                return redirect(url_for("admin_tasks"))
            except (ValidationError, AuthorizationError, NotFoundError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Updating task %s failed", task_id)
                flash("System error while updating the task", "danger")

        return render_template("admin/task_form.html", **_form_context(task))

    @app.route("/admin/tasks/<int:task_id>/delete", methods=["POST"], endpoint="delete_task")
    @admin_required
    def delete_task(task_id: int):
        try:
            container.task_service.delete_task(current_role=current_role(), task_id=task_id)
            flash("Task deleted.", "success")
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Deleting task %s failed", task_id)
            flash("System error while deleting the task", "danger")
        return redirect(url_for("admin_tasks"))

    @app.route("/tasks/<int:task_id>", endpoint="task_detail")
    @login_required
    def task_detail(task_id: int):
        fallback = "admin_tasks" if current_role() == Role.ADMIN else "employee_tasks"
        try:
            task = container.task_service.get_for_user(current_role=current_role(), user_id=current_user_id(), task_id=task_id)
        except (NotFoundError, AuthorizationError) as e:
            flash(str(e), "danger")
            return redirect(url_for(fallback))

        assignee = container.employees_repo.get_by_id(task.assigned_to) if task.assigned_to else None
        return render_template(
            "task_detail.html",
            task=task,
            assignee=assignee,
            today=date.today(),
            statuses=[s for s in TaskStatus if s != TaskStatus.CANCELLED],
            active_page=fallback,
        )

    @app.route("/tasks/<int:task_id>/comments", methods=["POST"], endpoint="comment_task")
    @login_required
    def comment_task(task_id: int):
        try:
            container.task_service.add_comment(
                current_role=current_role(),
                user_id=current_user_id(),
                task_id=task_id,
                text=request.form.get("comment", ""),
            )
            flash("Comment added.", "success")
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Commenting on task %s failed", task_id)
            flash("System error while adding the comment", "danger")
        return redirect(url_for("task_detail", task_id=task_id))

    @app.route("/employee/tasks", endpoint="employee_tasks")
    @employee_required
    def employee_tasks():
        rows = container.task_service.employee_list(
            employee_id=current_user_id(),
            today=date.today(),
            status=request.args.get("status"),
            priority=request.args.get("priority"),
        )
        view = build_view(
            rows,
            MY_TASK_COLUMNS,
            request.args,
            search_fields=("title",),
            filterable=False,
            empty_message="No tasks assigned to you",
        )
        return render_template(
            "employee/tasks.html",
            view=view,
            statuses=list(TaskStatus),
            priorities=list(TaskPriority),
            active_page="employee_tasks",
        )

    @app.route("/employee/tasks/<int:task_id>/status", methods=["POST"], endpoint="update_task_status")
    @employee_required
    def update_task_status(task_id: int):
        try:
            container.task_service.update_status(
                current_role=current_role(),
                user_id=current_user_id(),
                task_id=task_id,
                status=request.form.get("status"),
                comment=request.form.get("comment"),
            )
            flash("Task status updated.", "success")
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Updating status of task %s failed", task_id)
            flash("System error while updating the task", "danger")
        return redirect(url_for("task_detail", task_id=task_id))
