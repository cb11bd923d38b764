from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..common.datetime_utils import format_date, format_timestamp
from ..common.money import money_str, to_money
from ..core.constants import ZERO
from ..core.enums import ComponentType, PayrollStatus


@dataclass(frozen=True)
class PayrollDetail:
    """Line item owned by exactly one payroll header."""

    component_name: str
    amount: Decimal
    component_type: ComponentType
    detail_id: Optional[int] = None
    payroll_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "detail_id": self.detail_id,
            "component_name": self.component_name,
            "amount": money_str(self.amount),
            "component_type": self.component_type.value,
        }


@dataclass(frozen=True)
class PayrollHeader:
    """One pay computation for one staff member over one period."""

    payroll_id: int
    staff_id: int
    period_start: date
    period_end: date
    total_salary: Decimal
    status: PayrollStatus
    created_at: Optional[datetime] = None
    staff_name: Optional[str] = None
    position_title: Optional[str] = None
    component_count: Optional[int] = None
    details: tuple[PayrollDetail, ...] = field(default_factory=tuple)

    def with_details(self, details: Iterable[PayrollDetail]) -> "PayrollHeader":
        items = tuple(details)
        return replace(self, details=items, component_count=len(items))

    def to_dict(self, *, include_details: bool = False) -> dict:
        out = {
            "payroll_id": self.payroll_id,
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "position_title": self.position_title,
            "period_start": format_date(self.period_start),
            "period_end": format_date(self.period_end),
            "total_salary": money_str(self.total_salary),
            "status": self.status.value,
            "created_at": format_timestamp(self.created_at),
        }
        if self.component_count is not None:
            out["component_count"] = self.component_count
        if include_details:
            out["details"] = [d.to_dict() for d in self.details]
        return out


@dataclass(frozen=True)
class PayrollChanges:
    """Header fields to patch on update; None keeps the stored value."""

    staff_id: Optional[int] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    status: Optional[PayrollStatus] = None


def compute_total(details: Iterable[PayrollDetail]) -> Decimal:
    """total_salary = sum(earnings) - sum(deductions)."""
    total = ZERO
    for d in details:
        if d.component_type == ComponentType.EARNING:
            total += d.amount
        else:
            total -= d.amount
    return to_money(total)
