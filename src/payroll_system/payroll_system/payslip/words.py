from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ..core.constants import TWO_PLACES
from ..core.exceptions import ValidationError

_SMALL = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]
_SCALES = ["", "Thousand", "Million", "Billion"]

UPPER_LIMIT = Decimal(1000) ** len(_SCALES)


def _group_words(n: int) -> str:
    """Words for 1..999."""
    words: list[str] = []
    hundreds, rest = divmod(n, 100)
    if hundreds:
        words += [_SMALL[hundreds], "Hundred"]
    if rest >= 20:
        tens, ones = divmod(rest, 10)
        words.append(_TENS[tens])
        if ones:
            words.append(_SMALL[ones])
    elif rest:
        words.append(_SMALL[rest])
    return " ".join(words)


def integer_to_words(n: int) -> str:
    if n == 0:
        return "Zero"
    parts: list[str] = []
    scale = 0
    while n:
        n, group = divmod(n, 1000)
        if group:
            parts.append(f"{_group_words(group)} {_SCALES[scale]}".rstrip())
        scale += 1
    return " ".join(reversed(parts))


def amount_to_words(amount: Any) -> str:
    """Spell a money amount, e.g. 1234.56 ->
    "One Thousand Two Hundred Thirty Four Dollars and Fifty Six Cents Only".
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError("amount must be a number")
    if not value.is_finite():
        raise ValidationError("amount must be a finite number")

    value = value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if value < 0:
        return "Negative " + amount_to_words(-value)
    if value >= UPPER_LIMIT:
        raise ValidationError("amount is too large to express in words")

    dollars = int(value)
    cents = int((value - dollars) * 100)
    if dollars == 0 and cents == 0:
        return "Zero Dollars Only"

    text = f"{integer_to_words(dollars)} Dollar{'' if dollars == 1 else 's'}"
    if cents:
        text += f" and {integer_to_words(cents)} Cent{'' if cents == 1 else 's'}"
    return text + " Only"
