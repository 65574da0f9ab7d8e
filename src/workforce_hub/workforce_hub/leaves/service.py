from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.validators import require_non_empty
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import LeaveListRow, LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

ADMIN_TABS = ("all", "pending", "approved", "rejected", "history")


def is_history(request: LeaveRequest, today: date) -> bool:
    return request.end_date < today


class LeaveService:
    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository):
        self._leaves = leaves
        self._employees = employees

    def get(self, *, current_role: Role, user_id: int, leave_id: int) -> LeaveRequest:
        req = self._leaves.get_by_id(int(leave_id))
        if not req:
            raise NotFoundError("Leave request not found")
        if current_role != Role.ADMIN and req.employee_id != int(user_id):
            raise AuthorizationError("You cannot view this leave request")
        return req

    def create_leave(
        self,
        *,
        current_role: Role,
        employee_id: int,
        leave_type: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
        reason: Optional[str],
    ) -> int:
        if current_role != Role.EMPLOYEE:
            raise AuthorizationError("Only employees can request leave")

        if not leave_type:
            raise ValidationError("Leave type is required")
        try:
            parsed_type = LeaveType(leave_type)
        except ValueError:
            raise ValidationError("Leave type is not valid")
        if start_date is None:
            raise ValidationError("Start date is required")
        if end_date is None:
            raise ValidationError("End date is required")
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")
        reason = require_non_empty(reason, "Reason")

        leave_id = self._leaves.create(
            employee_id=int(employee_id),
            leave_type=parsed_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        logger.info("Leave request %s created by employee %s", leave_id, employee_id)
        return leave_id

    def _decide(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        leave_id: int,
        status: LeaveStatus,
        comment: Optional[str],
    ) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can decide leave requests")

        req = self._leaves.get_by_id(int(leave_id))
        if not req:
            raise NotFoundError("Leave request not found")
        if not req.is_pending:
            raise ValidationError("This leave request has already been decided")

        if not self._leaves.decide(leave_id=req.leave_id, status=status, decided_by=int(admin_user_id)):
            raise ValidationError("This leave request has already been decided")

        text = (comment or "").strip()
        if text:
            self._leaves.add_comment(leave_id=req.leave_id, author_id=int(admin_user_id), text=text)
        logger.info("Leave request %s %s by admin %s", req.leave_id, status.value, admin_user_id)

    def approve(self, *, current_role: Role, admin_user_id: int, leave_id: int, comment: str = "") -> None:
        self._decide(
            current_role=current_role,
            admin_user_id=admin_user_id,
            leave_id=leave_id,
            status=LeaveStatus.APPROVED,
            comment=comment,
        )

    def reject(self, *, current_role: Role, admin_user_id: int, leave_id: int, comment: str = "") -> None:
        if not (comment or "").strip():
            raise ValidationError("Comment required: please explain why the request is rejected")
        self._decide(
            current_role=current_role,
            admin_user_id=admin_user_id,
            leave_id=leave_id,
            status=LeaveStatus.REJECTED,
            comment=comment,
        )

    def add_comment(self, *, current_role: Role, user_id: int, leave_id: int, text: str) -> int:
        req = self.get(current_role=current_role, user_id=user_id, leave_id=leave_id)
        text = require_non_empty(text, "Comment")
        return self._leaves.add_comment(leave_id=req.leave_id, author_id=int(user_id), text=text)

    def _rows(self, requests) -> list[LeaveListRow]:
        employees = {e.employee_id: e for e in self._employees.list_all()}
        rows = []
        for r in requests:
            e = employees.get(r.employee_id)
            rows.append(
                LeaveListRow(
                    leave_id=r.leave_id,
                    employee_id=r.employee_id,
                    employee_name=e.full_name if e else f"#{r.employee_id}",
                    department=e.department if e else None,
                    leave_type=r.leave_type,
                    start_date=r.start_date,
                    end_date=r.end_date,
                    total_days=r.total_days,
                    reason=r.reason,
                    status=r.status,
                    created_at=r.created_at,
                    comment_count=len(r.comments),
                )
            )
        return rows

    def admin_list(self, *, tab: str, today: date, employee_id: Optional[int] = None) -> list[LeaveListRow]:
        """Requests for one admin tab; unknown tabs behave like ``all``."""

        requests = list(self._leaves.list_requests(employee_id=employee_id))
        if tab == "history":
            requests = [r for r in requests if is_history(r, today)]
        elif tab in ("pending", "approved", "rejected"):
            requests = [r for r in requests if r.status.value == tab]
        return self._rows(requests)

    def tab_counts(self, *, today: date) -> dict[str, int]:
        requests = list(self._leaves.list_requests())
        counts = {tab: 0 for tab in ADMIN_TABS}
        counts["all"] = len(requests)
        for r in requests:
            counts[r.status.value] += 1
            if is_history(r, today):
                counts["history"] += 1
        return counts

    def employee_list(
        self,
        *,
        employee_id: int,
        status: Optional[str] = None,
        leave_type: Optional[str] = None,
    ) -> list[LeaveListRow]:
        requests = list(self._leaves.list_requests(employee_id=int(employee_id)))
        if status and status != "all":
            requests = [r for r in requests if r.status.value == status]
        if leave_type and leave_type != "all":
            requests = [r for r in requests if r.leave_type.value == leave_type]
        return self._rows(requests)

    def upcoming(self, *, employee_id: int, today: date) -> list[LeaveRequest]:
        """Future leave that is still pending or already approved, soonest first."""

        requests = [
            r
            for r in self._leaves.list_requests(employee_id=int(employee_id))
            if r.start_date > today and r.status in (LeaveStatus.PENDING, LeaveStatus.APPROVED)
        ]
        return sorted(requests, key=lambda r: r.start_date)

    def recent(self, *, limit: int) -> list[LeaveListRow]:
        return self._rows(list(self._leaves.list_requests())[:limit])

    def pending_count(self) -> int:
        return sum(1 for r in self._leaves.list_requests() if r.is_pending)
