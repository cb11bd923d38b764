from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional

import pytest

from src.payroll_system.payroll_system.attendance.model import (
    AttendanceFilters,
    AttendanceRecord,
    AttendanceSummaryRow,
)
from src.payroll_system.payroll_system.common.money import to_money
from src.payroll_system.payroll_system.container import wire_services
from src.payroll_system.payroll_system.core.constants import ZERO
from src.payroll_system.payroll_system.core.enums import ComponentType
from src.payroll_system.payroll_system.core.exceptions import ConflictError, ForeignKeyError, NotFoundError
from src.payroll_system.payroll_system.payroll.model import PayrollDetail, PayrollHeader
from src.payroll_system.payroll_system.payslip.model import LegacySalary, PayslipSource
from src.payroll_system.payroll_system.staff.model import StaffProfile


# ---------------- Staff ----------------
@dataclass
class InMemoryStaff:
    profiles: dict[int, StaffProfile] = field(default_factory=dict)

    def exists(self, staff_id: int) -> bool:
        return staff_id in self.profiles

    def get_profile(self, staff_id: int) -> Optional[StaffProfile]:
        return self.profiles.get(staff_id)


# ---------------- Attendance ----------------
class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def _find(self, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for rec in self.records.values():
            if rec.staff_id == staff_id and rec.work_date == work_date:
                return rec
        return None

    def insert_record(self, *, staff_id, work_date, check_in_time, check_out_time, total_hours, status):
        if self._find(staff_id, work_date):
            raise ConflictError("Record already exists", reason="DuplicateRecord", detail="Duplicate entry")
        self._id += 1
        rec = AttendanceRecord(
            attendance_id=self._id,
            staff_id=staff_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            total_hours=total_hours,
            status=status,
        )
        self.records[self._id] = rec
        return rec

    def record_checkout(self, *, staff_id, work_date, check_out_time, hours_for):
        rec = self._find(staff_id, work_date)
        if not rec or rec.check_in_time is None:
            raise NotFoundError("No clock-in record found for today, please clock in first", reason="NoCheckInRecord")
        if rec.check_out_time is not None:
            raise ConflictError("Already clocked out today", reason="DuplicateCheckOut")
        rec = replace(rec, check_out_time=check_out_time, total_hours=hours_for(rec.check_in_time, check_out_time))
        self.records[rec.attendance_id] = rec
        return rec

    def patch_record(self, attendance_id, merge):
        rec = self.records.get(attendance_id)
        if not rec:
            return None
        rec = merge(rec)
        self.records[attendance_id] = rec
        return rec

    def delete_by_id(self, attendance_id: int) -> bool:
        return self.records.pop(attendance_id, None) is not None

    def _matching(self, filters: AttendanceFilters) -> list[AttendanceRecord]:
        out = []
        for rec in self.records.values():
            if filters.staff_id is not None and rec.staff_id != filters.staff_id:
                continue
            if filters.work_date is not None and rec.work_date != filters.work_date:
                continue
            if filters.start_date is not None and rec.work_date < filters.start_date:
                continue
            if filters.end_date is not None and rec.work_date > filters.end_date:
                continue
            if filters.status is not None and rec.status != filters.status:
                continue
            out.append(rec)
        out.sort(key=lambda r: (r.work_date, r.check_in_time or datetime.min), reverse=True)
        return out

    def list_records(self, filters, *, limit, offset):
        return self._matching(filters)[offset:offset + limit]

    def count_records(self, filters) -> int:
        return len(self._matching(filters))

    def list_for_staff(self, staff_id: int):
        return self._matching(AttendanceFilters(staff_id=staff_id))

    def summarize(self, *, staff_id=None, start_date=None, end_date=None):
        rows = self._matching(AttendanceFilters(staff_id=staff_id, start_date=start_date, end_date=end_date))
        by_staff: dict[int, list[AttendanceRecord]] = {}
        for rec in rows:
            by_staff.setdefault(rec.staff_id, []).append(rec)

        out = []
        for sid in sorted(by_staff):
            recs = by_staff[sid]
            hours = [r.total_hours for r in recs if r.total_hours is not None]
            counts: dict = {}
            for r in recs:
                counts[r.status] = counts.get(r.status, 0) + 1
            out.append(
                AttendanceSummaryRow(
                    staff_id=sid,
                    record_count=len(recs),
                    total_hours=to_money(sum(hours, ZERO)),
                    average_hours=to_money(sum(hours, ZERO) / len(hours)) if hours else None,
                    status_counts=counts,
                )
            )
        return out


# ---------------- Payroll ----------------
class InMemoryPayrolls:
    def __init__(self, staff: InMemoryStaff):
        self._staff = staff
        self.headers: dict[int, PayrollHeader] = {}
        self.details: dict[int, list[PayrollDetail]] = {}
        self._next_id = 0
        self._next_detail_id = 0
        self._clock = datetime(2024, 1, 1, 8, 0, 0)

    def _decorate(self, header: PayrollHeader) -> PayrollHeader:
        profile = self._staff.get_profile(header.staff_id)
        return replace(
            header,
            staff_name=profile.name if profile else None,
            position_title=profile.position_title if profile else None,
        )

    def _store_details(self, payroll_id: int, details) -> None:
        stored = []
        for d in details:
            self._next_detail_id += 1
            stored.append(replace(d, detail_id=self._next_detail_id, payroll_id=payroll_id))
        self.details[payroll_id] = stored

    def get_header(self, payroll_id: int):
        header = self.headers.get(payroll_id)
        return self._decorate(header) if header else None

    def list_details(self, payroll_id: int):
        return sorted(
            self.details.get(payroll_id, []),
            key=lambda d: (d.component_type != ComponentType.DEDUCTION, d.component_name),
        )

    def list_headers(self, *, staff_id=None, status=None):
        rows = [
            replace(self._decorate(h), component_count=len(self.details.get(h.payroll_id, [])))
            for h in self.headers.values()
            if (staff_id is None or h.staff_id == staff_id) and (status is None or h.status == status)
        ]
        return sorted(rows, key=lambda h: h.created_at, reverse=True)

    def list_for_staff(self, staff_id: int, *, statuses=None):
        rows = [
            self._decorate(h)
            for h in self.headers.values()
            if h.staff_id == staff_id and (not statuses or h.status in statuses)
        ]
        return sorted(rows, key=lambda h: h.period_start, reverse=True)

    def create_with_details(self, *, staff_id, period_start, period_end, status, total_salary, details) -> int:
        if not self._staff.exists(staff_id):
            raise ForeignKeyError("Referenced record does not exist", reason="ForeignKeyViolation")
        self._next_id += 1
        self._clock += timedelta(minutes=1)
        self.headers[self._next_id] = PayrollHeader(
            payroll_id=self._next_id,
            staff_id=staff_id,
            period_start=period_start,
            period_end=period_end,
            total_salary=total_salary,
            status=status,
            created_at=self._clock,
        )
        self._store_details(self._next_id, details)
        return self._next_id

    def update_with_details(self, payroll_id, merge, details=None, total_salary=None):
        header = self.headers.get(payroll_id)
        if not header:
            raise NotFoundError("Payroll record not found")
        merged = merge(header)
        header = replace(
            header,
            staff_id=merged.staff_id,
            period_start=merged.period_start,
            period_end=merged.period_end,
            status=merged.status,
        )
        if details is not None:
            self._store_details(payroll_id, details)
            header = replace(header, total_salary=total_salary)
        self.headers[payroll_id] = header

    def replace_details(self, payroll_id, details, total_salary) -> None:
        header = self.headers.get(payroll_id)
        if not header:
            raise NotFoundError("Payroll record not found")
        self._store_details(payroll_id, details)
        self.headers[payroll_id] = replace(header, total_salary=total_salary)

    def update_status(self, payroll_id, status) -> bool:
        header = self.headers.get(payroll_id)
        if not header:
            return False
        self.headers[payroll_id] = replace(header, status=status)
        return True

    def delete_with_details(self, payroll_id) -> None:
        self.details.pop(payroll_id, None)
        if self.headers.pop(payroll_id, None) is None:
            raise NotFoundError("Payroll record not found")


# ---------------- Payslip ----------------
@dataclass
class InMemoryPayslips:
    payrolls: InMemoryPayrolls
    staff: InMemoryStaff
    salaries: dict[int, LegacySalary] = field(default_factory=dict)

    def get_source(self, payroll_id: int) -> Optional[PayslipSource]:
        header = self.payrolls.get_header(payroll_id)
        if not header:
            return None
        return PayslipSource(
            header=header,
            profile=self.staff.get_profile(header.staff_id),
            salary=self.salaries.get(header.staff_id),
        )


class FakeRenderer:
    mimetype = "application/pdf"
    extension = "pdf"

    def __init__(self):
        self.rendered = []

    def render(self, view) -> bytes:
        self.rendered.append(view)
        return b"%PDF-1.7 payslip " + str(view.payroll_id).encode()


# ---------------- Scripted MySQL connection ----------------
Responder = Callable[[str, tuple], Optional[dict]]


class ScriptedCursor:
    """Records statements; `respond(sql, params)` returns {rows, rowcount, lastrowid} or raises."""

    def __init__(self, conn: "ScriptedConnection"):
        self._conn = conn
        self._rows: list[dict] = []
        self.rowcount = 0
        self.lastrowid: Optional[int] = None
        self.closed = False

    def execute(self, sql: str, params: tuple = ()):
        sql = " ".join(sql.split())
        self._conn.statements.append((sql, tuple(params)))
        result = self._conn.respond(sql, tuple(params)) or {}
        self._rows = list(result.get("rows", []))
        self.rowcount = result.get("rowcount", len(self._rows))
        self.lastrowid = result.get("lastrowid")

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        self.closed = True


class ScriptedConnection:
    def __init__(self, respond: Responder):
        self.respond = respond
        self.statements: list[tuple[str, tuple]] = []
        self.commits = 0
        self.rollbacks = 0
        self.cursors: list[ScriptedCursor] = []

    def cursor(self, dictionary: bool = True):
        cur = ScriptedCursor(self)
        self.cursors.append(cur)
        return cur

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def sql(self) -> list[str]:
        return [s for s, _ in self.statements]


class ScriptedConnectionFactory:
    """Stands in for DatabaseConnection: hands out one scripted connection."""

    def __init__(self, respond: Responder = lambda sql, params: None):
        self.conn = ScriptedConnection(respond)

    @contextmanager
    def connection(self):
        yield self.conn


# ---------------- Fixtures ----------------
@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 6, 9, 0, 0)


@pytest.fixture
def staff() -> InMemoryStaff:
    return InMemoryStaff(
        {
            1: StaffProfile(
                staff_id=1,
                name="Alice Tran",
                position_id=1,
                position_title="Accountant",
                department_name="Finance",
                date_of_joining=date(2021, 3, 1),
            ),
            2: StaffProfile(staff_id=2, name="Bao Nguyen", position_id=2, position_title="Engineer"),
        }
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def payroll_repo(staff) -> InMemoryPayrolls:
    return InMemoryPayrolls(staff)


@pytest.fixture
def payslip_repo(payroll_repo, staff) -> InMemoryPayslips:
    return InMemoryPayslips(
        payroll_repo,
        staff,
        {1: LegacySalary(basic_salary=Decimal("3000.00"), allowance=Decimal("250.00"), deduction=Decimal("100.00"))},
    )


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def container(staff, attendance_repo, payroll_repo, payslip_repo, renderer):
    return wire_services(
        conn=None,
        staff_repo=staff,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        payslip_repo=payslip_repo,
        renderer=renderer,
    )


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.payroll_system.payroll_system.main import create_app

    app = create_app(container)
    return app.test_client()


@pytest.fixture
def scripted_db() -> Callable[[Responder], ScriptedConnectionFactory]:
    def make(respond: Responder = lambda sql, params: None) -> ScriptedConnectionFactory:
        return ScriptedConnectionFactory(respond)

    return make


def detail(name: str, amount: Any, component_type: str = "earning") -> PayrollDetail:
    return PayrollDetail(component_name=name, amount=to_money(amount), component_type=ComponentType(component_type))


@pytest.fixture
def make_detail():
    return detail
