from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock_time(value: str, field_name: str) -> time:
    """Parse a HH:MM:SS wall clock string."""
    try:
        return datetime.strptime(value.strip(), "%H:%M:%S").time()
    except (AttributeError, ValueError):
        raise ValidationError(f"{field_name} time format must be HH:mm:ss")


def month_bounds(value: str) -> tuple[date, date]:
    """Return the first and last day of a YYYY-MM month."""
    try:
        first = datetime.strptime(value.strip(), "%Y-%m").date()
    except (AttributeError, ValueError):
        raise ValidationError("month must use the YYYY-MM format")
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def format_date(value: Optional[date]) -> Optional[str]:
    return value.strftime("%Y-%m-%d") if value else None


def format_clock(value: Optional[datetime]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(sep=" ", timespec="seconds") if value else None


def now_local() -> datetime:
    """Current local time, truncated to whole seconds."""
    return datetime.now().replace(microsecond=0)
