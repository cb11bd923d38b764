from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..common.validators import require_amount, require_enum, require_non_empty
from ..core.constants import MAX_COMPONENT_NAME_LENGTH
from ..core.enums import ComponentType, PayrollStatus
from ..core.exceptions import ForeignKeyError, NotFoundError, ValidationError
from ..staff.repository import StaffDirectory
from .model import PayrollChanges, PayrollDetail, PayrollHeader, compute_total
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class PayrollService:
    def __init__(self, payrolls: PayrollRepository, staff: StaffDirectory):
        self._payrolls = payrolls
        self._staff = staff

    @staticmethod
    def parse_details(raw: Any) -> list[PayrollDetail]:
        """Validate a JSON list of {component_name, amount, component_type}."""
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ValidationError("details must be a list")

        out: list[PayrollDetail] = []
        for i, item in enumerate(raw):
            if not isinstance(item, dict):
                raise ValidationError(f"details[{i}] must be an object")
            name = require_non_empty(item.get("component_name"), f"details[{i}].component_name")
            if len(name) > MAX_COMPONENT_NAME_LENGTH:
                raise ValidationError(
                    f"details[{i}].component_name must be at most {MAX_COMPONENT_NAME_LENGTH} characters"
                )
            out.append(
                PayrollDetail(
                    component_name=name,
                    amount=require_amount(item.get("amount"), f"details[{i}].amount"),
                    component_type=require_enum(
                        item.get("component_type"), ComponentType, f"details[{i}].component_type"
                    ),
                )
            )
        return out

    @staticmethod
    def _check_period(period_start: date, period_end: date) -> None:
        if period_end < period_start:
            raise ValidationError("period_end must not be before period_start")

    def _require_staff(self, staff_id: int) -> None:
        if not self._staff.exists(staff_id):
            raise ForeignKeyError(f"Staff member {staff_id} does not exist", reason="StaffNotFound")

    def create_payroll(
        self,
        *,
        staff_id: int,
        period_start: date,
        period_end: date,
        status: PayrollStatus = PayrollStatus.DRAFT,
        details: Iterable[PayrollDetail] = (),
    ) -> PayrollHeader:
        details = list(details)
        self._check_period(period_start, period_end)
        self._require_staff(staff_id)

        total_salary = compute_total(details)
        payroll_id = self._payrolls.create_with_details(
            staff_id=staff_id,
            period_start=period_start,
            period_end=period_end,
            status=status,
            total_salary=total_salary,
            details=details,
        )
        logger.info(
            "Created payroll %s for staff %s (%d components, total %s)",
            payroll_id,
            staff_id,
            len(details),
            total_salary,
        )
        return self.get_payroll(payroll_id)

    def update_payroll(
        self,
        payroll_id: int,
        changes: PayrollChanges | None = None,
        details: Optional[Sequence[PayrollDetail]] = None,
    ) -> PayrollHeader:
        """Patch header fields; a non-None details list replaces every line item.

        Field changes are merged over the header as read under its row lock.
        """

        changes = changes or PayrollChanges()
        if changes.staff_id is not None:
            self._require_staff(changes.staff_id)

        def merge(current: PayrollHeader) -> PayrollHeader:
            merged = replace(
                current,
                staff_id=changes.staff_id if changes.staff_id is not None else current.staff_id,
                period_start=changes.period_start or current.period_start,
                period_end=changes.period_end or current.period_end,
                status=changes.status or current.status,
            )
            self._check_period(merged.period_start, merged.period_end)
            return merged

        new_details = None if details is None else list(details)
        self._payrolls.update_with_details(
            payroll_id,
            merge,
            new_details,
            None if new_details is None else compute_total(new_details),
        )
        logger.info(
            "Updated payroll %s (details %s)",
            payroll_id,
            "unchanged" if new_details is None else f"replaced with {len(new_details)}",
        )
        return self.get_payroll(payroll_id)

    def replace_details(self, payroll_id: int, details: Iterable[PayrollDetail]) -> PayrollHeader:
        """Full replace: delete all line items, insert the new set, recompute total.

        This is not a merge; detail ids of the previous set are not preserved.
        """

        new_details = list(details)
        self._payrolls.replace_details(payroll_id, new_details, compute_total(new_details))
        logger.info("Replaced details of payroll %s with %d components", payroll_id, len(new_details))
        return self.get_payroll(payroll_id)

    def delete_payroll(self, payroll_id: int) -> None:
        self._payrolls.delete_with_details(payroll_id)
        logger.info("Deleted payroll %s", payroll_id)

    def update_status(self, payroll_id: int, status: PayrollStatus | str) -> PayrollHeader:
        # No transition rules: any status may follow any other.
        status = require_enum(status, PayrollStatus, "status")
        if not self._payrolls.update_status(payroll_id, status):
            raise NotFoundError("Payroll record not found")
        logger.info("Payroll %s status set to %s", payroll_id, status.value)
        return self.get_payroll(payroll_id)

    def get_payroll(self, payroll_id: int) -> PayrollHeader:
        header = self._payrolls.get_header(payroll_id)
        if not header:
            raise NotFoundError("Payroll record not found")
        return header.with_details(self._payrolls.list_details(payroll_id))

    def list_payrolls(
        self,
        *,
        staff_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> list[PayrollHeader]:
        return list(self._payrolls.list_headers(staff_id=staff_id, status=status))

    def list_by_staff(self, staff_id: int) -> list[PayrollHeader]:
        rows = list(self._payrolls.list_for_staff(staff_id))
        if not rows:
            raise NotFoundError(f"No payroll records found for staff ID {staff_id}")
        return rows
