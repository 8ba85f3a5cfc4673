"""Aggregations over visible receipt rows for the reporting screens.

Every function here is a pure reduction over a list of receipt mappings.
Amounts go through ``to_number`` so a malformed row counts toward ``count``
but adds 0 to the totals. Groups come back in discovery order unless a
function says otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from amc_receipts.models.committee import Committee
from amc_receipts.utils.helpers.date_utils import parse_receipt_date
from amc_receipts.utils.helpers.number_utils import to_number

UNKNOWN = "Unknown"
UNKNOWN_TRADER = "Unknown Trader"

Receipt = Mapping[str, Any]


@dataclass
class GroupSummary:
    key: Any
    count: int = 0
    total_value: float = 0.0
    total_quantity: float = 0.0

    @property
    def average_value(self) -> float:
        return self.total_value / self.count if self.count else 0.0

    def as_dict(self) -> Dict[str, Any]:
        key = self.key.label if isinstance(self.key, MonthKey) else self.key
        return {
            "key": key,
            "count": self.count,
            "total_value": self.total_value,
            "total_quantity": self.total_quantity,
        }


@dataclass(frozen=True)
class ReceiptTotals:
    count: int
    total_value: float
    total_quantity: float
    total_fees: float

    @property
    def average_value(self) -> float:
        return self.total_value / self.count if self.count else 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "total_value": self.total_value,
            "total_quantity": self.total_quantity,
            "total_fees": self.total_fees,
            "average_value": self.average_value,
        }


@dataclass(frozen=True, order=True)
class MonthKey:
    """Calendar month; orders chronologically."""

    year: int
    month: int

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%b %Y")

    @property
    def iso(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def month_key(value) -> Optional[MonthKey]:
    parsed = parse_receipt_date(value)
    if parsed is None:
        return None
    return MonthKey(parsed.year, parsed.month)


def _text_or_unknown(value, fallback: str = UNKNOWN) -> str:
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback


def group_receipts(receipts: Iterable[Receipt], key: Callable[[Receipt], Any]) -> List[GroupSummary]:
    """Partition receipts by ``key`` and sum count, value and quantity per group."""
    groups: Dict[Any, GroupSummary] = {}
    for receipt in receipts:
        group_key = key(receipt)
        summary = groups.get(group_key)
        if summary is None:
            summary = groups[group_key] = GroupSummary(group_key)
        summary.count += 1
        summary.total_value += to_number(receipt.get("value"))
        summary.total_quantity += to_number(receipt.get("quantity"))
    return list(groups.values())


def top_n(groups: Sequence[GroupSummary], n: int) -> List[GroupSummary]:
    """Highest ``total_value`` first; ties keep their incoming order."""
    return sorted(groups, key=lambda group: group.total_value, reverse=True)[:n]


def summarize(receipts: Iterable[Receipt]) -> ReceiptTotals:
    count = 0
    total_value = total_quantity = total_fees = 0.0
    for receipt in receipts:
        count += 1
        total_value += to_number(receipt.get("value"))
        total_quantity += to_number(receipt.get("quantity"))
        total_fees += to_number(receipt.get("fees_paid"))
    return ReceiptTotals(count, total_value, total_quantity, total_fees)


# ---------------------------------------------------------------------------
# Built-in groupings
# ---------------------------------------------------------------------------

def by_commodity(receipts: Iterable[Receipt]) -> List[GroupSummary]:
    return group_receipts(receipts, lambda r: _text_or_unknown(r.get("commodity")))


def by_trader(receipts: Iterable[Receipt]) -> List[GroupSummary]:
    return group_receipts(receipts, lambda r: _text_or_unknown(r.get("trader_name"), UNKNOWN_TRADER))


def _committee_lookup(committees: Optional[Iterable[Committee]]) -> Dict[str, Committee]:
    return {committee.id: committee for committee in committees or ()}


def by_committee(receipts: Iterable[Receipt], committees: Optional[Iterable[Committee]] = None) -> List[GroupSummary]:
    lookup = _committee_lookup(committees)

    def _name(receipt: Receipt) -> str:
        committee = lookup.get(str(receipt.get("committee_id")))
        if committee is not None:
            return committee.name
        return _text_or_unknown(receipt.get("committee_name"))

    return group_receipts(receipts, _name)


def by_district(receipts: Iterable[Receipt], committees: Optional[Iterable[Committee]] = None) -> List[GroupSummary]:
    """Group by the origin committee's district (row's joined district as fallback)."""
    lookup = _committee_lookup(committees)

    def _district(receipt: Receipt) -> str:
        committee = lookup.get(str(receipt.get("committee_id")))
        if committee is not None and committee.district:
            return committee.district
        return _text_or_unknown(receipt.get("district"))

    return group_receipts(receipts, _district)


def by_month(receipts: Iterable[Receipt]) -> List[GroupSummary]:
    """Monthly buckets in chronological order; undated rows last under "Unknown"."""
    groups = group_receipts(receipts, lambda r: month_key(r.get("date")) or UNKNOWN)
    return sorted(groups, key=lambda g: (g.key == UNKNOWN, g.key if isinstance(g.key, MonthKey) else MonthKey(0, 0)))


# ---------------------------------------------------------------------------
# Trader analytics
# ---------------------------------------------------------------------------

@dataclass
class TraderProfile:
    name: str
    receipts: List[Receipt] = field(default_factory=list)
    total_value: float = 0.0
    total_quantity: float = 0.0
    commodities: List[str] = field(default_factory=list)
    last_transaction: Optional[date] = None

    @property
    def receipt_count(self) -> int:
        return len(self.receipts)

    @property
    def average_value(self) -> float:
        return self.total_value / self.receipt_count if self.receipt_count else 0.0

    def as_dict(self, include_receipts: bool = False) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "receipt_count": self.receipt_count,
            "total_value": self.total_value,
            "total_quantity": self.total_quantity,
            "commodities": list(self.commodities),
            "average_value": self.average_value,
            "last_transaction": self.last_transaction.isoformat() if self.last_transaction else None,
        }
        if include_receipts:
            data["monthly"] = [group.as_dict() for group in by_month(self.receipts)]
        return data


def trader_profiles(receipts: Iterable[Receipt]) -> Dict[str, TraderProfile]:
    """Per-trader totals keyed by trader name, in discovery order."""
    profiles: Dict[str, TraderProfile] = {}
    for receipt in receipts:
        name = _text_or_unknown(receipt.get("trader_name"), UNKNOWN_TRADER)
        profile = profiles.get(name)
        if profile is None:
            profile = profiles[name] = TraderProfile(name)

        profile.receipts.append(receipt)
        profile.total_value += to_number(receipt.get("value"))
        profile.total_quantity += to_number(receipt.get("quantity"))

        commodity = receipt.get("commodity")
        if commodity and commodity not in profile.commodities:
            profile.commodities.append(commodity)

        when = parse_receipt_date(receipt.get("date"))
        if when is not None and (profile.last_transaction is None or when > profile.last_transaction):
            profile.last_transaction = when
    return profiles


def search_traders(profiles: Mapping[str, TraderProfile], term: str) -> List[TraderProfile]:
    needle = (term or "").strip().lower()
    return [profile for profile in profiles.values() if needle in profile.name.lower()]


def top_traders(profiles: Mapping[str, TraderProfile], n: int = 10) -> List[TraderProfile]:
    return sorted(profiles.values(), key=lambda p: p.total_value, reverse=True)[:n]


def active_traders_in_month(profiles: Mapping[str, TraderProfile], today: Union[date, None] = None) -> int:
    today = today or date.today()
    return sum(
        1
        for profile in profiles.values()
        if profile.last_transaction is not None
        and (profile.last_transaction.year, profile.last_transaction.month) == (today.year, today.month)
    )


def average_receipts_per_trader(profiles: Mapping[str, TraderProfile]) -> int:
    if not profiles:
        return 0
    total = sum(profile.receipt_count for profile in profiles.values())
    return round(total / len(profiles))
