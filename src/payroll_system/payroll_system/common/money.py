from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from ..core.constants import TWO_PLACES, ZERO


def to_money(value: Any) -> Decimal:
    """Coerce DECIMAL/float/str column values to a 2-place Decimal (NULL -> 0.00)."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def money_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(to_money(value))
