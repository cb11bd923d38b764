from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceFilters, AttendanceRecord, AttendanceSummaryRow

HoursFn = Callable[[Optional[datetime], Optional[datetime]], Optional[Decimal]]
MergeFn = Callable[[AttendanceRecord], AttendanceRecord]


class AttendanceRepository(Protocol):
    def insert_record(
        self,
        *,
        staff_id: int,
        work_date: date,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        total_hours: Optional[Decimal],
        status: AttendanceStatus,
    ) -> AttendanceRecord:
        """Insert-or-fail on (staff_id, work_date).

        Raises ConflictError when a record for that staff+date already exists.
        """

        raise NotImplementedError

    def record_checkout(
        self,
        *,
        staff_id: int,
        work_date: date,
        check_out_time: datetime,
        hours_for: HoursFn,
    ) -> AttendanceRecord:
        """Lock the day's checked-in record and close it in one transaction.

        Raises NotFoundError (no check-in) or ConflictError (already closed).
        """

        raise NotImplementedError

    def patch_record(self, attendance_id: int, merge: MergeFn) -> Optional[AttendanceRecord]:
        """Lock the record, store merge(current) and return it, in one transaction.

        Returns None when the record does not exist. An error raised by merge
        rolls the transaction back.
        """

        raise NotImplementedError

    def delete_by_id(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_records(self, filters: AttendanceFilters, *, limit: int, offset: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_records(self, filters: AttendanceFilters) -> int:
        raise NotImplementedError

    def list_for_staff(self, staff_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def summarize(
        self,
        *,
        staff_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceSummaryRow]:
        raise NotImplementedError
