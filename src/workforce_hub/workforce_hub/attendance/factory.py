from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.enums import AttendanceStatus
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_clock_in(self, *, now: datetime, work_start: datetime, grace_minutes: int) -> AttendanceStrategy:
        if now <= work_start + timedelta(minutes=grace_minutes):
            return PresentStrategy()
        return LateStrategy()

    def for_clock_out(self, *, worked_hours: float, current_status: AttendanceStatus, half_day_hours: float) -> AttendanceStrategy:
        if current_status == AttendanceStatus.LATE:
            return LateStrategy()
        if current_status == AttendanceStatus.PRESENT and worked_hours < half_day_hours:
            return HalfDayStrategy()
        return PresentStrategy()
