from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import format_clock, format_date
from ..common.money import money_str
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one staff member's clock record for one calendar date."""

    attendance_id: int
    staff_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    total_hours: Optional[Decimal]
    status: AttendanceStatus

    @property
    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "staff_id": self.staff_id,
            "date": format_date(self.work_date),
            "check_in": format_clock(self.check_in_time),
            "check_out": format_clock(self.check_out_time),
            "total_hours": money_str(self.total_hours),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class AttendanceFilters:
    """Optional list filters; every set field is AND-ed."""

    staff_id: Optional[int] = None
    work_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None


@dataclass(frozen=True)
class AttendancePage:
    rows: Sequence[AttendanceRecord]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
        }


@dataclass(frozen=True)
class AttendanceSummaryRow:
    """Read-model: per-staff aggregate for the attendance report."""

    staff_id: int
    record_count: int
    total_hours: Decimal
    average_hours: Optional[Decimal]
    status_counts: dict[AttendanceStatus, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        counts = self.status_counts
        return {
            "staff_id": self.staff_id,
            "record_count": self.record_count,
            "present_days": counts.get(AttendanceStatus.PRESENT, 0),
            "absent_days": counts.get(AttendanceStatus.ABSENT, 0),
            "late_days": counts.get(AttendanceStatus.LATE, 0),
            "sick_leave_days": counts.get(AttendanceStatus.SICK_LEAVE, 0),
            "annual_leave_days": counts.get(AttendanceStatus.ANNUAL_LEAVE, 0),
            "overtime_days": counts.get(AttendanceStatus.OVERTIME, 0),
            "total_hours": money_str(self.total_hours),
            "average_hours": money_str(self.average_hours),
        }
