from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Date must use the YYYY-MM-DD format")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if not value or not value.strip():
        return None
    return parse_iso_date(value)


def parse_hhmm(value: Optional[str]) -> Optional[time]:
    """Parse HH:MM into time; blank means no value."""
    v = (value or "").strip()
    if not v:
        return None
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError("Time must use the HH:MM format")


def parse_month(value: Optional[str], *, default: date) -> tuple[int, int]:
    """Parse YYYY-MM into (year, month), falling back to the month of ``default``."""
    v = (value or "").strip()
    if not v:
        return default.year, default.month
    try:
        parsed = datetime.strptime(v, "%Y-%m")
    except ValueError:
        raise ValidationError("Month must use the YYYY-MM format")
    return parsed.year, parsed.month


def month_key(d: date) -> str:
    return d.strftime("%Y-%m")


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves up instead of to even: 2.5 -> 3, 0.125 -> 0.13."""
    factor = 10 ** digits
    if value >= 0:
        return int(value * factor + 0.5) / factor
    return -int(-value * factor + 0.5) / factor


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
