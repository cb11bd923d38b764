from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional


class WorkedHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours)."""

    @abstractmethod
    def worked_hours(self, check_in: Optional[datetime], check_out: Optional[datetime]) -> Optional[Decimal]:
        raise NotImplementedError
