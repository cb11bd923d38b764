from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...core.constants import TWO_PLACES, ZERO
from .base import WorkedHoursCalculator

_SECONDS_PER_HOUR = Decimal(3600)


class StandardWorkedHoursCalculator(WorkedHoursCalculator):
    """Standard rule: (out - in) in hours, 2 decimals, not below 0."""

    def worked_hours(self, check_in: Optional[datetime], check_out: Optional[datetime]) -> Optional[Decimal]:
        if check_in is None or check_out is None:
            return None
        seconds = Decimal(int((check_out - check_in).total_seconds()))
        hours = (seconds / _SECONDS_PER_HOUR).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        return hours if hours > ZERO else ZERO
