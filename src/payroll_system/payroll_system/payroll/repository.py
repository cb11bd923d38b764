from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from .model import PayrollDetail, PayrollHeader

HeaderMergeFn = Callable[[PayrollHeader], PayrollHeader]


class PayrollRepository(Protocol):
    """Payroll header + line item storage.

    Every multi-row write is one transaction: it either fully commits or fully
    rolls back and re-raises.
    """

    def get_header(self, payroll_id: int) -> Optional[PayrollHeader]:
        raise NotImplementedError

    def list_details(self, payroll_id: int) -> Sequence[PayrollDetail]:
        """Details ordered by component_type DESC (deductions first), then name."""

        raise NotImplementedError

    def list_headers(
        self,
        *,
        staff_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[PayrollHeader]:
        raise NotImplementedError

    def list_for_staff(
        self,
        staff_id: int,
        *,
        statuses: Optional[Sequence[PayrollStatus]] = None,
    ) -> Sequence[PayrollHeader]:
        raise NotImplementedError

    def create_with_details(
        self,
        *,
        staff_id: int,
        period_start: date,
        period_end: date,
        status: PayrollStatus,
        total_salary: Decimal,
        details: Sequence[PayrollDetail],
    ) -> int:
        raise NotImplementedError

    def update_with_details(
        self,
        payroll_id: int,
        merge: HeaderMergeFn,
        details: Optional[Sequence[PayrollDetail]] = None,
        total_salary: Optional[Decimal] = None,
    ) -> None:
        """Lock the header and store merge(current) in one transaction.

        Only staff, period and status are written from the merged header.
        When details is not None every line item is replaced and total_salary
        stored; otherwise items and total are left as they are. Raises
        NotFoundError if the header does not exist.
        """

        raise NotImplementedError

    def replace_details(self, payroll_id: int, details: Sequence[PayrollDetail], total_salary: Decimal) -> None:
        """Delete every detail of the header, insert the new set, store the total."""

        raise NotImplementedError

    def update_status(self, payroll_id: int, status: PayrollStatus) -> bool:
        raise NotImplementedError

    def delete_with_details(self, payroll_id: int) -> None:
        """Delete details then header. Raises NotFoundError if no header row was deleted."""

        raise NotImplementedError
