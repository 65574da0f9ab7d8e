from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(self, *, employee_id: Optional[int] = None) -> Sequence[LeaveRequest]:
        """Newest first, comments included."""

        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        raise NotImplementedError

    def decide(self, *, leave_id: int, status: LeaveStatus, decided_by: int) -> bool:
        """Move a pending request to ``status``; False when it was not pending."""

        raise NotImplementedError

    def add_comment(self, *, leave_id: int, author_id: int, text: str) -> int:
        raise NotImplementedError
