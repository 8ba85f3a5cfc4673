"""Access scope resolution: which committees and receipts a principal may see.

The resolver is a pure function of (role, assigned committee label, committee
list, receipt list). Fetching the lists and logging the outcome are caller
concerns.

Committee labels on user accounts are entered by hand ("Tuni AMC", "KKD
market yard") while the backend stores full legal names ("Tuni Agricultural
Market Committee"). A label matches a committee name when, compared
case-insensitively:

1. the two are equal, or
2. one is a substring of the other, or
3. every distinctive token of the label appears among the committee's tokens.
   Tokens are lower-cased words with punctuation removed; generic words
   ("amc", "market", "committee", ...) are dropped and alias tokens ("kkd")
   are replaced by their canonical town token ("kakinada").
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from amc_receipts.models.committee import Committee
from amc_receipts.models.user import AccessTier, UserRole
from amc_receipts.services.config_service import DEFAULT_ALIASES, DEFAULT_GENERIC_TOKENS

_TOKEN_RE = re.compile(r"[a-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")

COMMITTEE_REFERENCE_KEYS = ("committee_id", "counterparty_committee_id")

SCOPE_OK = "ok"
SCOPE_UNASSIGNED = "unassigned"
SCOPE_NO_ACCESS = "no_access"


def _normalize(text: Optional[str]) -> str:
    return _WHITESPACE_RE.sub(" ", (text or "").strip().lower())


class CommitteeMatcher:
    """Matches an assigned committee label against canonical committee names."""

    def __init__(
        self,
        generic_tokens: Iterable[str] = DEFAULT_GENERIC_TOKENS,
        aliases: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.generic_tokens: FrozenSet[str] = frozenset(token.lower() for token in generic_tokens)
        self.aliases: Dict[str, str] = {
            alias.lower(): canonical.lower()
            for alias, canonical in (DEFAULT_ALIASES if aliases is None else aliases).items()
        }

    @classmethod
    def from_config(cls, config) -> CommitteeMatcher:
        return cls(config.get_generic_tokens(), config.get_alias_tokens())

    def tokens(self, name: Optional[str]) -> FrozenSet[str]:
        """Distinctive, alias-canonicalized tokens of a committee name."""
        words = _TOKEN_RE.findall(_normalize(name))
        return frozenset(
            self.aliases.get(word, word)
            for word in words
            if word not in self.generic_tokens
        )

    def matches(self, label: Optional[str], committee_name: Optional[str]) -> bool:
        wanted = _normalize(label)
        candidate = _normalize(committee_name)
        if not wanted or not candidate:
            return False
        if wanted == candidate or wanted in candidate or candidate in wanted:
            return True

        label_tokens = self.tokens(wanted)
        if not label_tokens:
            return False
        return label_tokens <= self.tokens(candidate)


DEFAULT_MATCHER = CommitteeMatcher()


@dataclass(frozen=True)
class AccessScope:
    """Resolved visibility for one principal."""

    tier: AccessTier
    visible_committees: List[Committee] = field(default_factory=list)
    visible_receipts: List[Mapping[str, Any]] = field(default_factory=list)
    unassigned: bool = False

    @property
    def status(self) -> str:
        if self.tier is AccessTier.NONE:
            return SCOPE_NO_ACCESS
        if self.unassigned:
            return SCOPE_UNASSIGNED
        return SCOPE_OK


def committee_refs(receipt: Mapping[str, Any]) -> Tuple[str, ...]:
    """Committee ids a receipt references, origin first; blanks are skipped."""
    refs = []
    for key in COMMITTEE_REFERENCE_KEYS:
        value = receipt.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            refs.append(text)
    return tuple(refs)


def _as_tier(role: Union[UserRole, AccessTier, str]) -> AccessTier:
    if isinstance(role, AccessTier):
        return role
    if isinstance(role, UserRole):
        return role.access_tier
    try:
        return UserRole(role).access_tier
    except ValueError:
        pass
    try:
        return AccessTier(role)
    except ValueError:
        # Unknown roles see nothing
        return AccessTier.NONE


def visible_committees_for(
    tier: AccessTier,
    assigned_label: Optional[str],
    committees: Sequence[Committee],
    matcher: CommitteeMatcher = DEFAULT_MATCHER,
) -> List[Committee]:
    if tier is AccessTier.DIRECTOR_WIDE:
        return list(committees)
    if tier is AccessTier.COMMITTEE_SCOPED:
        if not _normalize(assigned_label):
            return []
        return [c for c in committees if matcher.matches(assigned_label, c.name)]
    return []


def resolve_scope(
    role: Union[UserRole, AccessTier, str],
    assigned_label: Optional[str],
    committees: Sequence[Committee],
    receipts: Sequence[Mapping[str, Any]],
    matcher: CommitteeMatcher = DEFAULT_MATCHER,
) -> AccessScope:
    """Resolve the committees and receipts visible to a principal.

    Args:
        role: UserRole or AccessTier of the principal
        assigned_label: The principal's assigned committee label (may be empty)
        committees: Every committee, in backend order
        receipts: Every receipt row, in backend order
        matcher: Label/name matching policy

    Returns:
        AccessScope with input order preserved in both lists. Director-wide
        principals see every receipt; committee-scoped principals see receipts
        whose referenced committee resolves to a visible committee name;
        everyone else sees nothing. A committee-scoped principal without an
        assigned label gets an empty scope flagged ``unassigned``.
    """
    tier = _as_tier(role)

    if tier is AccessTier.DIRECTOR_WIDE:
        return AccessScope(tier, list(committees), list(receipts))

    if tier is not AccessTier.COMMITTEE_SCOPED:
        return AccessScope(tier)

    if not _normalize(assigned_label):
        return AccessScope(tier, unassigned=True)

    visible = visible_committees_for(tier, assigned_label, committees, matcher)
    names_by_id = {committee.id: committee.name for committee in committees}
    visible_names = {committee.name for committee in visible}

    visible_receipts = [
        receipt
        for receipt in receipts
        if any(names_by_id.get(ref) in visible_names for ref in committee_refs(receipt))
    ]
    return AccessScope(tier, visible, visible_receipts)
