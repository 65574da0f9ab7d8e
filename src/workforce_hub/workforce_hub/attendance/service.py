from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..common.datetime_utils import month_key, now_local, parse_hhmm, round_half_up
from ..common.validators import optional_text
from ..core.constants import DEFAULT_HALF_DAY_HOURS, DEFAULT_LATE_GRACE_MINUTES, DEFAULT_STATS_DAYS
from ..core.enums import AttendanceStatus, EmployeeStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceListRow, AttendanceRecord, CalendarDay, MonthlySummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ATTENDED = (AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY)


def compute_total_hours(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> Optional[float]:
    """Worked minutes / 60, two decimals; None while either time is missing."""
    if clock_in is None or clock_out is None:
        return None
    minutes = int((clock_out - clock_in).total_seconds() // 60)
    return round_half_up(max(minutes, 0) / 60, 2)


def _add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        work_start: time = time(9, 0),
        work_end: time = time(17, 0),
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        half_day_hours: float = DEFAULT_HALF_DAY_HOURS,
    ):
        self._attendance = attendance
        self._employees = employees
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._work_start = work_start
        self._work_end = work_end
        self._grace_minutes = int(grace_minutes)
        self._half_day_hours = float(half_day_hours)

    @property
    def work_hours_label(self) -> str:
        return f"{self._work_start.strftime('%H:%M')} - {self._work_end.strftime('%H:%M')}"

    def clock_in(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        existing = self._attendance.get_for_employee_and_date(employee_id, today)
        if existing and existing.clock_in is not None:
            raise ValidationError("You have already clocked in today")

        work_start = datetime.combine(today, self._work_start)
        strategy = self._factory.for_clock_in(now=now, work_start=work_start, grace_minutes=self._grace_minutes)
        decision = strategy.decide_clock_in(now=now, work_start=work_start)

        if existing:
            # an absent placeholder from mark_absentees is filled in, not duplicated
            attendance_id = existing.attendance_id
            self._attendance.update(
                attendance_id=attendance_id,
                clock_in=now,
                clock_out=None,
                total_hours=None,
                status=decision.status,
                notes=decision.note,
            )
        else:
            attendance_id = self._attendance.create(
                employee_id=employee_id,
                work_date=today,
                clock_in=now,
                status=decision.status,
                notes=decision.note,
            )
        logger.info("Employee %s clocked in (%s)", employee_id, decision.status.value)
        return self._attendance.get_by_id(attendance_id)

    def clock_out(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        record = self._attendance.get_for_employee_and_date(employee_id, today)
        if not record or record.clock_in is None:
            raise ValidationError("You have not clocked in today")
        if record.clock_out is not None:
            raise ValidationError("You have already clocked out today")

        hours = compute_total_hours(record.clock_in, now) or 0.0
        strategy = self._factory.for_clock_out(
            worked_hours=hours,
            current_status=record.status,
            half_day_hours=self._half_day_hours,
        )
        decision = strategy.decide_clock_out(worked_hours=hours, current=record.status)

        self._attendance.update(
            attendance_id=record.attendance_id,
            clock_in=record.clock_in,
            clock_out=now,
            total_hours=hours,
            status=decision.status,
            notes=record.notes or decision.note,
        )
        logger.info("Employee %s clocked out after %s h", employee_id, hours)
        return self._attendance.get_by_id(record.attendance_id)

    def get_today_record(self, employee_id: int, today: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(employee_id, today)

    def list_for_date(self, work_date: date) -> list[AttendanceRecord]:
        return list(self._attendance.list_for_date(work_date))

    def admin_update(
        self,
        *,
        current_role: Role,
        attendance_id: int,
        clock_in: str,
        clock_out: str,
        status: str,
        notes: Optional[str] = None,
    ) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can edit attendance")

        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")

        try:
            new_status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError("Attendance status is not valid")

        if new_status == AttendanceStatus.ABSENT:
            in_t = out_t = None
        else:
            in_t = parse_hhmm(clock_in)
            out_t = parse_hhmm(clock_out)
        in_dt = datetime.combine(record.work_date, in_t) if in_t else None
        out_dt = datetime.combine(record.work_date, out_t) if out_t else None
        if in_dt and out_dt and out_dt < in_dt:
            raise ValidationError("Clock-out must not be before clock-in")
        if out_dt and not in_dt:
            raise ValidationError("Clock-out requires a clock-in time")

        self._attendance.update(
            attendance_id=record.attendance_id,
            clock_in=in_dt,
            clock_out=out_dt,
            total_hours=compute_total_hours(in_dt, out_dt),
            status=new_status,
            notes=optional_text(notes),
        )
        logger.info("Attendance %s updated by admin", record.attendance_id)

    def mark_absentees(self, *, current_role: Role, work_date: date) -> int:
        """Create absent records for active employees with nothing on ``work_date``."""

        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can mark absentees")

        recorded = {r.employee_id for r in self._attendance.list_for_date(work_date)}
        created = 0
        for e in self._employees.list_all():
            if e.status != EmployeeStatus.ACTIVE or e.employee_id in recorded:
                continue
            self._attendance.create(
                employee_id=e.employee_id,
                work_date=work_date,
                clock_in=None,
                status=AttendanceStatus.ABSENT,
            )
            created += 1

        logger.info("Marked %s absentees for %s", created, work_date.isoformat())
        return created

    def admin_list(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[AttendanceListRow]:
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")

        wanted: Optional[AttendanceStatus] = None
        if status:
            try:
                wanted = AttendanceStatus(status)
            except ValueError:
                raise ValidationError("Attendance status is not valid")

        employees = {e.employee_id: e for e in self._employees.list_all()}
        rows = []
        for r in self._attendance.list_between(start_date=start_date, end_date=end_date, employee_id=employee_id):
            if wanted and r.status != wanted:
                continue
            e = employees.get(r.employee_id)
            rows.append(
                AttendanceListRow(
                    attendance_id=r.attendance_id,
                    employee_id=r.employee_id,
                    employee_name=e.full_name if e else f"#{r.employee_id}",
                    department=e.department if e else None,
                    work_date=r.work_date,
                    clock_in=r.clock_in,
                    clock_out=r.clock_out,
                    total_hours=r.total_hours,
                    status=r.status,
                    notes=r.notes,
                )
            )
        return rows

    def monthly_summary(self, employee_id: int, *, year: int, month: int, today: date) -> MonthlySummary:
        first = date(year, month, 1)
        last = date(year, month, calendar.monthrange(year, month)[1])
        records = sorted(
            self._attendance.list_between(start_date=first, end_date=last, employee_id=employee_id),
            key=lambda r: r.work_date,
        )
        by_day = {r.work_date: r for r in records}

        weeks = [
            [CalendarDay(day=d, in_month=d.month == month, record=by_day.get(d)) for d in week]
            for week in calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month)
        ]

        counts = {s.value: 0 for s in AttendanceStatus}
        for r in records:
            counts[r.status.value] += 1
        attended = sum(counts[s.value] for s in ATTENDED)
        rate = int(round_half_up(attended / len(records) * 100)) if records else 0

        # weeks start on Sunday
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        week_records = self._attendance.list_between(start_date=week_start, end_date=today, employee_id=employee_id)

        prev_y, prev_m = _add_months(year, month, -1)
        next_y, next_m = _add_months(year, month, 1)
        return MonthlySummary(
            year=year,
            month=month,
            records=records,
            weeks=weeks,
            counts=counts,
            total_hours=round_half_up(sum(r.total_hours or 0.0 for r in records), 2),
            week_hours=round_half_up(sum(r.total_hours or 0.0 for r in week_records), 2),
            attendance_rate=rate,
            previous_month=month_key(date(prev_y, prev_m, 1)),
            next_month=month_key(date(next_y, next_m, 1)),
        )

    def stats(self, *, today: date, days: int = DEFAULT_STATS_DAYS) -> dict:
        """Today's counts per status and the record count of each recent day."""

        counts = {s.value: 0 for s in AttendanceStatus}
        for r in self._attendance.list_for_date(today):
            counts[r.status.value] += 1

        start = today - timedelta(days=days - 1)
        per_day = {start + timedelta(days=i): 0 for i in range(days)}
        for r in self._attendance.list_between(start_date=start, end_date=today):
            if r.work_date in per_day:
                per_day[r.work_date] += 1

        return {
            "today": counts,
            "daily": [{"date": d.isoformat(), "count": n} for d, n in per_day.items()],
        }
