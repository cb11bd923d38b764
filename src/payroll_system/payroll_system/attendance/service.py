from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time
from typing import Any, Mapping, Optional

from ..common.datetime_utils import month_bounds, now_local, parse_clock_time
from ..common.validators import require_enum
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.enums import AttendanceStatus, ClockType
from ..core.exceptions import ConflictError, ForeignKeyError, NotFoundError, ValidationError
from ..staff.repository import StaffDirectory
from .calculator.base import WorkedHoursCalculator
from .calculator.standard_calculator import StandardWorkedHoursCalculator
from .model import AttendanceFilters, AttendancePage, AttendanceRecord, AttendanceSummaryRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_PATCHABLE_FIELDS = ("check_in", "check_out", "status")


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        staff: StaffDirectory,
        *,
        calculator: Optional[WorkedHoursCalculator] = None,
    ):
        self._attendance = attendance
        self._staff = staff
        self._calculator = calculator or StandardWorkedHoursCalculator()

    def _require_staff(self, staff_id: int) -> None:
        if not self._staff.exists(staff_id):
            raise ForeignKeyError(f"Staff member {staff_id} does not exist", reason="StaffNotFound")

    # -------- Clock --------
    def clock_in(self, staff_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        self._require_staff(staff_id)

        try:
            record = self._attendance.insert_record(
                staff_id=staff_id,
                work_date=now.date(),
                check_in_time=now,
                check_out_time=None,
                total_hours=None,
                status=AttendanceStatus.PRESENT,
            )
        except ConflictError as e:
            raise ConflictError("Already clocked in today", reason="DuplicateCheckIn", detail=e.detail) from e

        logger.info("Staff %s clocked in at %s", staff_id, now)
        return record

    def clock_out(self, staff_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()

        record = self._attendance.record_checkout(
            staff_id=staff_id,
            work_date=now.date(),
            check_out_time=now,
            hours_for=self._calculator.worked_hours,
        )
        logger.info("Staff %s clocked out at %s (%s hours)", staff_id, now, record.total_hours)
        return record

    def clock(self, staff_id: int, clock_type: ClockType | str, *, now: datetime | None = None) -> AttendanceRecord:
        clock_type = require_enum(clock_type, ClockType, "clock type")
        if clock_type == ClockType.CHECK_IN:
            return self.clock_in(staff_id, now=now)
        return self.clock_out(staff_id, now=now)

    # -------- Manual maintenance --------
    def create_record(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in: Optional[time] = None,
        check_out: Optional[time] = None,
    ) -> AttendanceRecord:
        if check_out is not None and check_in is None:
            raise ValidationError("check_out requires a check_in time")
        self._require_staff(staff_id)

        check_in_time = datetime.combine(work_date, check_in) if check_in else None
        check_out_time = datetime.combine(work_date, check_out) if check_out else None

        try:
            record = self._attendance.insert_record(
                staff_id=staff_id,
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                total_hours=self._calculator.worked_hours(check_in_time, check_out_time),
                status=status,
            )
        except ConflictError as e:
            raise ConflictError(
                "Attendance record already exists for this employee on this date",
                reason="DuplicateRecord",
                detail=e.detail,
            ) from e

        logger.info("Created attendance record %s for staff %s on %s", record.attendance_id, staff_id, work_date)
        return record

    def _patched_time(self, changes: Mapping[str, Any], key: str, work_date: date, current: Optional[datetime]):
        value = changes.get(key)
        if value is None:
            return current
        if isinstance(value, str) and not value.strip():
            return None
        return datetime.combine(work_date, parse_clock_time(value, key))

    def update_record(self, attendance_id: int, changes: Mapping[str, Any]) -> AttendanceRecord:
        """Partial update.

        Absent or null keys keep the stored value; "" clears a time. The merge
        runs against the locked row, and total hours are recomputed when both
        times are present, otherwise cleared.
        """

        unknown = set(changes) - set(_PATCHABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unsupported fields: {', '.join(sorted(unknown))}")

        status = None
        if changes.get("status") not in (None, ""):
            status = require_enum(changes["status"], AttendanceStatus, "status")

        def merge(record: AttendanceRecord) -> AttendanceRecord:
            check_in_time = self._patched_time(changes, "check_in", record.work_date, record.check_in_time)
            check_out_time = self._patched_time(changes, "check_out", record.work_date, record.check_out_time)
            if check_out_time is not None and check_in_time is None:
                raise ValidationError("check_out requires a check_in time")
            return replace(
                record,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                total_hours=self._calculator.worked_hours(check_in_time, check_out_time),
                status=status or record.status,
            )

        record = self._attendance.patch_record(attendance_id, merge)
        if not record:
            raise NotFoundError("Attendance record does not exist")

        logger.info("Updated attendance record %s", attendance_id)
        return record

    def delete_record(self, attendance_id: int) -> None:
        if not self._attendance.delete_by_id(attendance_id):
            raise NotFoundError("Attendance record not found")
        logger.info("Deleted attendance record %s", attendance_id)

    # -------- Queries --------
    def list_records(
        self,
        filters: AttendanceFilters | None = None,
        *,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> AttendancePage:
        filters = filters or AttendanceFilters()
        if page < 1:
            raise ValidationError("page must be a positive integer")
        if limit < 1 or limit > MAX_PAGE_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")

        rows = self._attendance.list_records(filters, limit=limit, offset=(page - 1) * limit)
        total = self._attendance.count_records(filters)
        return AttendancePage(rows=list(rows), page=page, limit=limit, total=total)

    def list_for_staff(self, staff_id: int) -> list[AttendanceRecord]:
        rows = list(self._attendance.list_for_staff(staff_id))
        if not rows:
            raise NotFoundError("No attendance records found for this employee")
        return rows

    def aggregate_report(
        self,
        *,
        staff_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        month: Optional[str] = None,
    ) -> list[AttendanceSummaryRow]:
        # An explicit date range (either bound) takes precedence over month.
        if start_date is None and end_date is None and month:
            start_date, end_date = month_bounds(month)
        if start_date and end_date and end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        return list(self._attendance.summarize(staff_id=staff_id, start_date=start_date, end_date=end_date))
