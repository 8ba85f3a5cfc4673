"""Per-request scoped view of backend data.

Loads the committee/receipt snapshot, runs the access scope resolver for the
principal and records the outcome in the event log.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from amc_receipts.models.user import Profile
from amc_receipts.services.access_scope import AccessScope, CommitteeMatcher, resolve_scope
from amc_receipts.services.backend_service import Backend, Snapshot, load_snapshot
from amc_receipts.services.config_service import get_config_service
from amc_receipts.utils.logging_utils import log_scope_event

logger = logging.getLogger(__name__)

_matcher: Optional[CommitteeMatcher] = None


def get_matcher() -> CommitteeMatcher:
    """Get or create the committee matcher built from config/committee_aliases.json."""
    global _matcher
    if _matcher is None:
        _matcher = CommitteeMatcher.from_config(get_config_service())
    return _matcher


@dataclass(frozen=True)
class ScopedView:
    snapshot: Snapshot
    scope: AccessScope

    @property
    def status(self) -> str:
        return self.scope.status


async def load_scoped_view(
    principal: Profile,
    backend: Backend,
    matcher: Optional[CommitteeMatcher] = None,
) -> ScopedView:
    """Fetch the snapshot and resolve what ``principal`` may see.

    Raises:
        BackendError: If either fetch fails
    """
    snapshot = await load_snapshot(backend)
    scope = resolve_scope(
        principal.role,
        principal.committee,
        snapshot.committees,
        snapshot.receipts,
        matcher or get_matcher(),
    )

    if scope.unassigned:
        logger.warning("%s (%s) has no committee assignment", principal.actor, principal.role.value)
    log_scope_event({
        "actor": principal.actor,
        "role": principal.role.value,
        "tier": scope.tier.value,
        "assigned_committee": principal.committee,
        "status": scope.status,
        "visible_committees": len(scope.visible_committees),
        "visible_receipts": len(scope.visible_receipts),
    })
    return ScopedView(snapshot=snapshot, scope=scope)
