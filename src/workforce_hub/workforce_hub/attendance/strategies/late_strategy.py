from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late clock-in."""

    def decide_clock_in(self, *, now: datetime, work_start: datetime) -> StatusDecision:
        minutes = int((now - work_start).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Clocked in {minutes} min late")

    def decide_clock_out(self, *, worked_hours: float, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)
