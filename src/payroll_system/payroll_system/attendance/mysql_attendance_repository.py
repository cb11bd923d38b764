from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.money import to_money
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceFilters, AttendanceRecord, AttendanceSummaryRow
from .repository import AttendanceRepository, HoursFn, MergeFn

_COLUMNS = "attendance_id, staff_id, work_date, check_in_time, check_out_time, total_hours, status"

_STATUS_COUNT_COLUMNS = {
    AttendanceStatus.PRESENT: "present_days",
    AttendanceStatus.ABSENT: "absent_days",
    AttendanceStatus.LATE: "late_days",
    AttendanceStatus.SICK_LEAVE: "sick_leave_days",
    AttendanceStatus.ANNUAL_LEAVE: "annual_leave_days",
    AttendanceStatus.OVERTIME: "overtime_days",
}


def _row_to_record(r: dict) -> AttendanceRecord:
    hours = r.get("total_hours")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        total_hours=None if hours is None else to_money(hours),
        status=AttendanceStatus(r["status"]),
    )


def _where(filters: AttendanceFilters) -> tuple[str, list[Any]]:
    clauses = ["1=1"]
    params: list[Any] = []

    if filters.work_date is not None:
        clauses.append("work_date=%s")
        params.append(filters.work_date)
    if filters.start_date is not None:
        clauses.append("work_date>=%s")
        params.append(filters.start_date)
    if filters.end_date is not None:
        clauses.append("work_date<=%s")
        params.append(filters.end_date)
    if filters.status is not None:
        clauses.append("status=%s")
        params.append(filters.status.value)
    if filters.staff_id is not None:
        clauses.append("staff_id=%s")
        params.append(int(filters.staff_id))

    return " AND ".join(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        # uq_attendance_staff_date makes this an atomic insert-or-fail (ER_DUP_ENTRY -> ConflictError).
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(staff_id, work_date, check_in_time, check_out_time, total_hours, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(staff_id), work_date, check_in_time, check_out_time, total_hours, status.value),
            )
            return AttendanceRecord(
                attendance_id=int(cur.lastrowid),
                staff_id=int(staff_id),
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                total_hours=total_hours,
                status=status,
            )

    def record_checkout(
        self,
        *,
        staff_id: int,
        work_date: date,
        check_out_time: datetime,
        hours_for: HoursFn,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE staff_id=%s AND work_date=%s AND check_in_time IS NOT NULL
                FOR UPDATE
                """,
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                raise NotFoundError(
                    "No clock-in record found for today, please clock in first",
                    reason="NoCheckInRecord",
                )
            record = _row_to_record(r)
            if record.check_out_time is not None:
                raise ConflictError("Already clocked out today", reason="DuplicateCheckOut")

            total_hours = hours_for(record.check_in_time, check_out_time)
            cur.execute(
                "UPDATE attendance SET check_out_time=%s, total_hours=%s WHERE attendance_id=%s",
                (check_out_time, total_hours, record.attendance_id),
            )
            return AttendanceRecord(
                attendance_id=record.attendance_id,
                staff_id=record.staff_id,
                work_date=record.work_date,
                check_in_time=record.check_in_time,
                check_out_time=check_out_time,
                total_hours=total_hours,
                status=record.status,
            )

    def patch_record(self, attendance_id: int, merge: MergeFn) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s FOR UPDATE", (int(attendance_id),))
            r = fetchone(cur)
            if not r:
                return None
            record = merge(_row_to_record(r))
            cur.execute(
                """
                UPDATE attendance
                SET check_in_time=%s, check_out_time=%s, total_hours=%s, status=%s
                WHERE attendance_id=%s
                """,
                (
                    record.check_in_time,
                    record.check_out_time,
                    record.total_hours,
                    record.status.value,
                    record.attendance_id,
                ),
            )
            return record

    def delete_by_id(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list_records(self, filters: AttendanceFilters, *, limit: int, offset: int) -> Sequence[AttendanceRecord]:
        where, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE {where}
                ORDER BY work_date DESC, check_in_time DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_records(self, filters: AttendanceFilters) -> int:
        where, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def list_for_staff(self, staff_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE staff_id=%s
                ORDER BY work_date DESC, check_in_time DESC
                """,
                (int(staff_id),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def summarize(
        self,
        *,
        staff_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceSummaryRow]:
        where, params = _where(AttendanceFilters(staff_id=staff_id, start_date=start_date, end_date=end_date))
        count_sql = ",\n".join(
            f"SUM(CASE WHEN status=%s THEN 1 ELSE 0 END) AS {column}" for column in _STATUS_COUNT_COLUMNS.values()
        )
        status_params = [status.value for status in _STATUS_COUNT_COLUMNS]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT staff_id,
                       COUNT(*) AS record_count,
                       {count_sql},
                       COALESCE(SUM(total_hours), 0) AS total_hours,
                       AVG(total_hours) AS average_hours
                FROM attendance
                WHERE {where}
                GROUP BY staff_id
                ORDER BY staff_id
                """,
                tuple(status_params + params),
            )
            rows = fetchall(cur)

        out: list[AttendanceSummaryRow] = []
        for r in rows:
            average = r.get("average_hours")
            out.append(
                AttendanceSummaryRow(
                    staff_id=int(r["staff_id"]),
                    record_count=int(r["record_count"]),
                    total_hours=to_money(r.get("total_hours")),
                    average_hours=None if average is None else to_money(average),
                    status_counts={
                        status: int(r.get(column) or 0) for status, column in _STATUS_COUNT_COLUMNS.items()
                    },
                )
            )
        return out
