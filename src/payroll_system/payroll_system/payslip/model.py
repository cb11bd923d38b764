from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import format_date
from ..common.money import money_str
from ..core.enums import PayrollStatus
from ..payroll.model import PayrollHeader
from ..staff.model import StaffProfile


@dataclass(frozen=True)
class LegacySalary:
    """Flat per-staff salary row used when a payroll has no line items."""

    basic_salary: Decimal
    allowance: Decimal
    deduction: Decimal


@dataclass(frozen=True)
class PayslipSource:
    header: PayrollHeader
    profile: StaffProfile
    salary: Optional[LegacySalary] = None


@dataclass(frozen=True)
class PayslipLine:
    name: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {"name": self.name, "amount": money_str(self.amount)}


@dataclass(frozen=True)
class PayslipView:
    payroll_id: int
    staff_id: int
    staff_name: str
    period_start: date
    period_end: date
    status: PayrollStatus
    total_salary: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    amount_in_words: str
    date_of_joining: Optional[date] = None
    position_title: Optional[str] = None
    department_name: Optional[str] = None
    earnings: tuple[PayslipLine, ...] = field(default_factory=tuple)
    deductions: tuple[PayslipLine, ...] = field(default_factory=tuple)
    is_legacy: bool = False

    def to_dict(self) -> dict:
        return {
            "payroll_id": self.payroll_id,
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "date_of_joining": format_date(self.date_of_joining),
            "position_title": self.position_title,
            "department_name": self.department_name,
            "period_start": format_date(self.period_start),
            "period_end": format_date(self.period_end),
            "status": self.status.value,
            "total_salary": money_str(self.total_salary),
            "earnings": [line.to_dict() for line in self.earnings],
            "deductions": [line.to_dict() for line in self.deductions],
            "total_earnings": money_str(self.total_earnings),
            "total_deductions": money_str(self.total_deductions),
            "net_pay": money_str(self.net_pay),
            "amount_in_words": self.amount_in_words,
            "is_legacy": self.is_legacy,
        }


@dataclass(frozen=True)
class RenderedDocument:
    filename: str
    content: bytes
    mimetype: str = "application/pdf"
