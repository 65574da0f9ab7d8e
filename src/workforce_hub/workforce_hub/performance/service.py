from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import round_half_up
from ..core.constants import TOP_PERFORMERS_LIMIT
from ..core.enums import Role, TaskPriority, TaskStatus
from ..employees.repository import EmployeeRepository
from ..tasks.model import Task
from ..tasks.repository import TaskRepository
from .model import PerformanceOverview, PerformanceRow, TaskTally
from .scoring.base import PerformanceScorer
from .scoring.weighted_scorer import WeightedPerformanceScorer


def tally_tasks(tasks: Iterable[Task]) -> TaskTally:
    """Count completed tasks; urgent work counts as high priority."""

    total = high = medium = low = on_time = late = 0
    deltas = []
    for t in tasks:
        if t.status != TaskStatus.COMPLETED or t.completed_at is None:
            continue
        total += 1
        if t.priority in (TaskPriority.HIGH, TaskPriority.URGENT):
            high += 1
        elif t.priority == TaskPriority.MEDIUM:
            medium += 1
        else:
            low += 1

        delta = (t.completed_at.date() - t.due_date).days
        deltas.append(delta)
        if delta <= 0:
            on_time += 1
        else:
            late += 1

    average = round_half_up(sum(deltas) / len(deltas), 1) if deltas else 0.0
    return TaskTally(
        total=total,
        high=high,
        medium=medium,
        low=low,
        on_time=on_time,
        late=late,
        average_delta_days=average,
    )


class PerformanceService:
    def __init__(self, tasks: TaskRepository, employees: EmployeeRepository, *, scorer: PerformanceScorer | None = None):
        self._tasks = tasks
        self._employees = employees
        self._scorer = scorer or WeightedPerformanceScorer()

    def _completed_in(self, year: int, month: int) -> dict[int, list[Task]]:
        by_employee: dict[int, list[Task]] = defaultdict(list)
        for t in self._tasks.list_tasks():
            if t.assigned_to is None or t.completed_at is None:
                continue
            if (t.completed_at.year, t.completed_at.month) == (year, month):
                by_employee[int(t.assigned_to)].append(t)
        return by_employee

    def monthly_rows(self, *, year: int, month: int) -> list[PerformanceRow]:
        completed = self._completed_in(year, month)
        rows = []
        for e in self._employees.list_all():
            if e.role != Role.EMPLOYEE:
                continue
            tally = tally_tasks(completed.get(e.employee_id, []))
            score = self._scorer.score(tally)
            rows.append(
                PerformanceRow(
                    employee_id=e.employee_id,
                    employee_name=e.full_name,
                    department=e.department,
                    tally=tally,
                    score=score,
                    rating=self._scorer.rating(score),
                )
            )
        return rows

    def overview(self, *, year: int, month: int, department: Optional[str] = None) -> PerformanceOverview:
        all_rows = self.monthly_rows(year=year, month=month)
        departments = sorted({r.department for r in all_rows if r.department})

        rows = [r for r in all_rows if not department or department == "all" or r.department == department]
        rows.sort(key=lambda r: r.score, reverse=True)

        distribution = {
            TaskPriority.HIGH.value: sum(r.tally.high for r in rows),
            TaskPriority.MEDIUM.value: sum(r.tally.medium for r in rows),
            TaskPriority.LOW.value: sum(r.tally.low for r in rows),
        }
        return PerformanceOverview(
            month=date(year, month, 1).strftime("%Y-%m"),
            department=department if department and department != "all" else None,
            rows=rows,
            departments=departments,
            top_performer=rows[0] if rows else None,
            top_rows=rows[:TOP_PERFORMERS_LIMIT],
            priority_distribution=distribution,
            on_time_total=sum(r.tally.on_time for r in rows),
            late_total=sum(r.tally.late for r in rows),
        )
