from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..common.datetime_utils import round_half_up
from ..core.enums import PerformanceRating


@dataclass(frozen=True)
class TaskTally:
    """Completed-task counts for one employee in one month."""

    total: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    on_time: int = 0
    late: int = 0
    average_delta_days: float = 0.0

    @property
    def on_time_rate(self) -> float:
        done = self.on_time + self.late
        return self.on_time / done if done else 0.0


@dataclass(frozen=True)
class PerformanceRow:
    employee_id: int
    employee_name: str
    department: Optional[str]
    tally: TaskTally
    score: int
    rating: PerformanceRating

    @property
    def total_completed(self) -> int:
        return self.tally.total

    @property
    def on_time_percent(self) -> int:
        return int(round_half_up(self.tally.on_time_rate * 100))


@dataclass(frozen=True)
class PerformanceOverview:
    month: str
    department: Optional[str]
    rows: list[PerformanceRow]
    departments: list[str]
    top_performer: Optional[PerformanceRow] = None
    top_rows: list[PerformanceRow] = field(default_factory=list)
    priority_distribution: dict[str, int] = field(default_factory=dict)
    on_time_total: int = 0
    late_total: int = 0

    @property
    def on_time_percent(self) -> int:
        done = self.on_time_total + self.late_total
        return int(round_half_up(self.on_time_total / done * 100)) if done else 0
