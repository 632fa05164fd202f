"""Lenient input coercion.

Builder-facing inputs never block an edit: anything that is not a finite
number becomes 0 and anything that is not text becomes an empty string.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def to_number(value: Any) -> float:
    """Coerce a value to float, returning 0.0 for empty or malformed input.

    >>> to_number("12.5")
    12.5
    >>> to_number("abc")
    0.0
    >>> to_number(None)
    0.0
    """
    if value is None or isinstance(value, bool):
        return float(value or 0)
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_optional_number(value: Any) -> float | None:
    """Like to_number() but keeps "no value" distinct from zero."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_number(value)


def to_text(value: Any) -> str:
    """Coerce a value to a stripped string ("" for None)."""
    if value is None:
        return ""
    return str(value).strip()


def round_half_up(value: Any, places: int = 2) -> float:
    """Round like a currency formatter (0.125 -> 0.13), never banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(to_number(value))).quantize(quantum, rounding=ROUND_HALF_UP))
