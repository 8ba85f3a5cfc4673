"""Role → feature matrix.

Each dashboard feature is granted to an explicit set of roles. Committee-level
data visibility is decided separately by the access scope resolver; this table
only says which screens and endpoints a role may use at all.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List

from amc_receipts.models.user import UserRole


class Feature(str, Enum):
    OVERVIEW = "overview"
    RECEIPT_ENTRY = "entry"
    RECEIPT_VERIFY = "search"
    RECEIPT_LIST = "list"
    EXPORT = "export"
    ANALYTICS = "analytics"
    TRADER_ANALYTICS = "traders"
    USER_MANAGEMENT = "users"
    AUDIT_TRAIL = "audits"


ROLE_FEATURES: Dict[UserRole, FrozenSet[Feature]] = {
    UserRole.DEO: frozenset({
        Feature.OVERVIEW,
        Feature.RECEIPT_ENTRY,
        Feature.RECEIPT_LIST,
    }),
    UserRole.OFFICER: frozenset({
        Feature.OVERVIEW,
        Feature.RECEIPT_VERIFY,
    }),
    UserRole.SUPERVISOR: frozenset({
        Feature.OVERVIEW,
        Feature.RECEIPT_LIST,
        Feature.RECEIPT_VERIFY,
        Feature.EXPORT,
        Feature.ANALYTICS,
    }),
    UserRole.JD: frozenset({
        Feature.OVERVIEW,
        Feature.RECEIPT_LIST,
        Feature.RECEIPT_VERIFY,
        Feature.EXPORT,
        Feature.ANALYTICS,
        Feature.TRADER_ANALYTICS,
        Feature.USER_MANAGEMENT,
        Feature.AUDIT_TRAIL,
    }),
}

# Navigation labels differ per role for the same feature.
_MENU_LABELS = {
    Feature.OVERVIEW: "Overview",
    Feature.RECEIPT_ENTRY: "New Receipt",
    Feature.RECEIPT_VERIFY: "Verify Receipt",
    Feature.EXPORT: "Export Data",
    Feature.ANALYTICS: "Analytics",
    Feature.TRADER_ANALYTICS: "Trader Analytics",
    Feature.USER_MANAGEMENT: "Manage Users",
    Feature.AUDIT_TRAIL: "Audit Trail",
}
_LIST_LABELS = {
    UserRole.DEO: "My Receipts",
    UserRole.SUPERVISOR: "Committee Receipts",
    UserRole.JD: "All Receipts",
}


def has_feature(role: UserRole, feature: Feature) -> bool:
    return feature in ROLE_FEATURES.get(UserRole(role), frozenset())


def menu_for(role: UserRole) -> List[Dict[str, str]]:
    """Navigation entries for a role, in a stable display order."""
    role = UserRole(role)
    granted = ROLE_FEATURES.get(role, frozenset())
    items = []
    for feature in Feature:
        if feature not in granted:
            continue
        if feature is Feature.RECEIPT_LIST:
            label = _LIST_LABELS.get(role, "Receipts")
        else:
            label = _MENU_LABELS[feature]
        items.append({"id": feature.value, "label": label})
    return items
