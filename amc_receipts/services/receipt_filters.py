"""Receipt list filtering and checkpost verification lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

STATUS_GENUINE = "Genuine"
STATUS_NOT_FOUND = "Not Found"

_SEARCH_FIELDS = ("trader_name", "payee_name", "book_number", "receipt_number", "commodity")
_ALL = "all"


def _clean(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _is_unfiltered(value: Optional[str]) -> bool:
    cleaned = _clean(value)
    return not cleaned or cleaned.lower() == _ALL


def filter_receipts(
    receipts: Iterable[Mapping[str, Any]],
    search: Optional[str] = None,
    committee: Optional[str] = None,
    commodity: Optional[str] = None,
) -> List[Mapping[str, Any]]:
    """Narrow an already-scoped receipt list for the list screen.

    Args:
        search: Case-insensitive substring over trader, payee, book number,
            receipt number and commodity
        committee: Exact committee name ("all" or empty for any)
        commodity: Exact commodity ("all" or empty for any)
    """
    needle = _clean(search).lower()
    results = []
    for receipt in receipts:
        if not _is_unfiltered(committee) and _clean(receipt.get("committee_name")) != _clean(committee):
            continue
        if not _is_unfiltered(commodity) and _clean(receipt.get("commodity")) != _clean(commodity):
            continue
        if needle and not any(needle in _clean(receipt.get(f)).lower() for f in _SEARCH_FIELDS):
            continue
        results.append(receipt)
    return results


def distinct_commodities(receipts: Iterable[Mapping[str, Any]]) -> List[str]:
    seen: List[str] = []
    for receipt in receipts:
        commodity = _clean(receipt.get("commodity"))
        if commodity and commodity not in seen:
            seen.append(commodity)
    return seen


@dataclass(frozen=True)
class VerificationResult:
    found: bool
    status: str
    receipt: Optional[Mapping[str, Any]] = None


def verify_receipt(
    receipts: Iterable[Mapping[str, Any]],
    committee: str,
    book_number: str,
    receipt_number: str,
) -> VerificationResult:
    """Find a receipt by committee (name or id), book number and receipt number.

    Matching is exact after trimming whitespace; the committee name comparison
    ignores case.
    """
    wanted_committee = _clean(committee).lower()
    wanted_book = _clean(book_number)
    wanted_number = _clean(receipt_number)
    if not (wanted_committee and wanted_book and wanted_number):
        return VerificationResult(False, STATUS_NOT_FOUND)

    for receipt in receipts:
        committee_matches = wanted_committee in (
            _clean(receipt.get("committee_name")).lower(),
            _clean(receipt.get("committee_id")).lower(),
        )
        if (
            committee_matches
            and _clean(receipt.get("book_number")) == wanted_book
            and _clean(receipt.get("receipt_number")) == wanted_number
        ):
            return VerificationResult(True, STATUS_GENUINE, receipt)
    return VerificationResult(False, STATUS_NOT_FOUND)
