from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_POOL_SIZE, DEFAULT_POOL_TIMEOUT_SECONDS
from .database.bootstrap import as_db_config
from .database.connection import DatabaseConnection
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .payslip.mysql_payslip_repository import MySQLPayslipRepository
from .payslip.renderer import PayslipRenderer, WeasyPrintPayslipRenderer
from .payslip.repository import PayslipRepository
from .payslip.service import PayslipService
from .staff.mysql_staff_repository import MySQLStaffDirectory
from .staff.repository import StaffDirectory


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    staff_repo: StaffDirectory
    attendance_repo: AttendanceRepository
    payroll_repo: PayrollRepository
    payslip_repo: PayslipRepository

    attendance_service: AttendanceService
    payroll_service: PayrollService
    payslip_service: PayslipService


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    staff_repo: StaffDirectory,
    attendance_repo: AttendanceRepository,
    payroll_repo: PayrollRepository,
    payslip_repo: PayslipRepository,
    renderer: PayslipRenderer,
) -> Container:
    return Container(
        conn=conn,
        staff_repo=staff_repo,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        payslip_repo=payslip_repo,
        attendance_service=AttendanceService(attendance_repo, staff_repo),
        payroll_service=PayrollService(payroll_repo, staff_repo),
        payslip_service=PayslipService(payslip_repo, payroll_repo, renderer),
    )


def build_container(
    *,
    db_config: dict,
    pool_size: int = DEFAULT_POOL_SIZE,
    pool_timeout: float = DEFAULT_POOL_TIMEOUT_SECONDS,
    company: Optional[Mapping[str, Any]] = None,
) -> Container:
    conn = DatabaseConnection(as_db_config(db_config), pool_size=pool_size, acquire_timeout=pool_timeout)

    return wire_services(
        conn=conn,
        staff_repo=MySQLStaffDirectory(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        payslip_repo=MySQLPayslipRepository(conn),
        renderer=WeasyPrintPayslipRenderer(company),
    )
