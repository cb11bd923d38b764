from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from ..core.constants import ZERO
from ..core.enums import PUBLISHED_PAYROLL_STATUSES, ComponentType
from ..core.exceptions import NotFoundError
from ..common.money import to_money
from ..payroll.model import PayrollDetail, PayrollHeader
from ..payroll.repository import PayrollRepository
from .model import LegacySalary, PayslipLine, PayslipView, RenderedDocument
from .renderer import PayslipRenderer
from .repository import PayslipRepository
from .words import amount_to_words

logger = logging.getLogger(__name__)


def _itemised(details: Iterable[PayrollDetail]) -> tuple[list[PayslipLine], list[PayslipLine]]:
    earnings: list[PayslipLine] = []
    deductions: list[PayslipLine] = []
    for d in details:
        line = PayslipLine(d.component_name, to_money(d.amount))
        if d.component_type == ComponentType.EARNING:
            earnings.append(line)
        else:
            deductions.append(line)
    return earnings, deductions


def _legacy(salary: LegacySalary | None) -> tuple[list[PayslipLine], list[PayslipLine]]:
    basic = salary.basic_salary if salary else ZERO
    allowance = salary.allowance if salary else ZERO
    deduction = salary.deduction if salary else ZERO

    earnings = [PayslipLine("Basic", to_money(basic))]
    if allowance > 0:
        earnings.append(PayslipLine("Allowance", to_money(allowance)))
    deductions = []
    if deduction > 0:
        deductions.append(PayslipLine("Deduction", to_money(deduction)))
    return earnings, deductions


def _sum(lines: Iterable[PayslipLine]) -> Decimal:
    return to_money(sum((line.amount for line in lines), ZERO))


class PayslipService:
    def __init__(self, payslips: PayslipRepository, payrolls: PayrollRepository, renderer: PayslipRenderer):
        self._payslips = payslips
        self._payrolls = payrolls
        self._renderer = renderer

    def compose_payslip(self, payroll_id: int) -> PayslipView:
        """Build the read-only payslip for one payroll header.

        Without line items the legacy salary row is used: Basic, Allowance
        when positive, Deduction when positive.
        """

        source = self._payslips.get_source(payroll_id)
        if not source:
            raise NotFoundError("Payroll record not found")

        details = list(self._payrolls.list_details(payroll_id))
        is_legacy = not details
        earnings, deductions = _legacy(source.salary) if is_legacy else _itemised(details)

        total_earnings = _sum(earnings)
        total_deductions = _sum(deductions)
        net_pay = to_money(total_earnings - total_deductions)

        header = source.header
        profile = source.profile
        return PayslipView(
            payroll_id=header.payroll_id,
            staff_id=header.staff_id,
            staff_name=profile.name or header.staff_name or "",
            date_of_joining=profile.date_of_joining,
            position_title=profile.position_title,
            department_name=profile.department_name,
            period_start=header.period_start,
            period_end=header.period_end,
            status=header.status,
            total_salary=header.total_salary,
            earnings=tuple(earnings),
            deductions=tuple(deductions),
            total_earnings=total_earnings,
            total_deductions=total_deductions,
            net_pay=net_pay,
            amount_in_words=amount_to_words(net_pay),
            is_legacy=is_legacy,
        )

    def render_document(self, view: PayslipView) -> RenderedDocument:
        filename = f"payslip_{view.staff_id}_{view.period_start.strftime('%Y%m%d')}.{self._renderer.extension}"
        content = self._renderer.render(view)
        logger.info("Rendered %s (%d bytes)", filename, len(content))
        return RenderedDocument(filename=filename, content=content, mimetype=self._renderer.mimetype)

    def get_staff_payslips(self, staff_id: int) -> list[PayrollHeader]:
        """Published (confirmed or paid) payrolls only, newest period first."""
        return list(self._payrolls.list_for_staff(staff_id, statuses=PUBLISHED_PAYROLL_STATUSES))
