from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status values as stored in the `attendance` table."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    SICK_LEAVE = "Sick Leave"
    ANNUAL_LEAVE = "Annual Leave"
    OVERTIME = "Overtime"


class PayrollStatus(str, Enum):
    """Payroll header status. Any value may follow any other."""

    DRAFT = "draft"
    CONFIRMED = "confirmed"
    PAID = "paid"


class ComponentType(str, Enum):
    """Payroll line item type."""

    EARNING = "earning"
    DEDUCTION = "deduction"


class ClockType(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


# Statuses exposed through employee self-service payslip listings.
PUBLISHED_PAYROLL_STATUSES = (PayrollStatus.CONFIRMED, PayrollStatus.PAID)
