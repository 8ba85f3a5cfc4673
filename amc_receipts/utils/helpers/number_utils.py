"""Lenient numeric parsing for amounts stored by the backend."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation


def to_number(value) -> float:
    """Parse a stored quantity or amount, returning 0.0 when it is unusable.

    Backends return numeric columns as numbers, strings ("1,250.50") or null
    depending on the table revision. Any value that cannot be read as a finite
    number counts as zero so one bad row cannot break a report.

    Example:
        >>> to_number("1,250.50")
        1250.5
        >>> to_number("n/a")
        0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return 0.0
    else:
        text = str(value).strip().replace(",", "").replace("₹", "")
        if not text:
            return 0.0
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError):
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number
