"""Excel export of attendance rows (pandas + openpyxl)."""
from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

from .model import AttendanceListRow

EXPORT_COLUMNS = ["Date", "Employee", "Department", "Clock in", "Clock out", "Hours", "Status", "Notes"]
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _fmt_time(value) -> str:
    return value.strftime("%H:%M:%S") if value else ""


def to_dataframe(rows: Sequence[AttendanceListRow]) -> pd.DataFrame:
    data = [
        (
            r.work_date.isoformat(),
            r.employee_name,
            r.department or "",
            _fmt_time(r.clock_in),
            _fmt_time(r.clock_out),
            r.total_hours,
            r.status.value,
            r.notes or "",
        )
        for r in rows
    ]
    return pd.DataFrame(data, columns=EXPORT_COLUMNS)


def export_workbook(rows: Sequence[AttendanceListRow]) -> io.BytesIO:
    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        to_dataframe(rows).to_excel(writer, index=False, sheet_name="Attendance")
    out.seek(0)
    return out
