"""Route protection shared by every controller.

Unauthenticated users go to the login page; users who reach the other
role's area are sent back to their own dashboard.
"""
from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import flash, jsonify, redirect, session, url_for

from ..core.enums import Role


def current_user_id() -> Optional[int]:
    value = session.get("user_id")
    return int(value) if value is not None else None


def current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def dashboard_endpoint(role: Optional[Role]) -> str:
    return "admin_dashboard" if role == Role.ADMIN else "employee_dashboard"


def redirect_to_dashboard():
    return redirect(url_for(dashboard_endpoint(current_role())))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user_id() is None:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user_id() is None:
            return redirect(url_for("login"))
        if current_role() != Role.ADMIN:
            return redirect(url_for("employee_dashboard"))
        return view(*args, **kwargs)

    return wrapper


def employee_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user_id() is None:
            return redirect(url_for("login"))
        if current_role() != Role.EMPLOYEE:
            return redirect(url_for("admin_dashboard"))
        return view(*args, **kwargs)

    return wrapper


def anonymous_only(view):
    """Signed-in users skip the login and signup pages."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user_id() is not None:
            return redirect_to_dashboard()
        return view(*args, **kwargs)

    return wrapper


def api_admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user_id() is None:
            return jsonify({"success": False, "error": "Unauthorized"}), 401
        if current_role() != Role.ADMIN:
            return jsonify({"success": False, "error": "Forbidden"}), 403
        return view(*args, **kwargs)

    return wrapper


def local_redirect(target: Optional[str], fallback_endpoint: str):
    """Redirect to a same-site path, else to ``fallback_endpoint``."""
    if target and target.startswith("/") and not target.startswith("//"):
        return redirect(target)
    return redirect(url_for(fallback_endpoint))
