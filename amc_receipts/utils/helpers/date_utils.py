"""Date helpers shared by aggregation and receipt validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

_DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d")


def parse_receipt_date(value) -> Optional[date]:
    """Parse a stored receipt date.

    Accepts ``date``/``datetime`` objects, ISO 8601 strings (with or without a
    time component) and the day-first formats used on paper receipt books.
    Returns None when the value cannot be interpreted.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
