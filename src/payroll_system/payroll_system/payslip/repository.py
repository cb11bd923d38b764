from __future__ import annotations

from typing import Optional, Protocol

from .model import PayslipSource


class PayslipRepository(Protocol):
    def get_source(self, payroll_id: int) -> Optional[PayslipSource]:
        """Payroll header joined with staff display fields and the legacy salary row."""

        raise NotImplementedError
