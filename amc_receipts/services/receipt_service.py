"""Receipt Service

Business logic for entering a new trade receipt.

Responsibilities:
- Canonicalize the commodity against the configured vocabulary
- Resolve the origin committee from the submitter's scope
- Write once through the backend (no retry)
- Record audit and submission events for both outcomes

A rejected submission raises ReceiptSubmissionError carrying the payload so
the caller can hand it back for correction. ``retryable`` is set when the
backend itself failed rather than the data.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from amc_receipts.models.audit import AuditEventType
from amc_receipts.models.committee import Committee
from amc_receipts.models.receipt import ReceiptCreate
from amc_receipts.models.user import AccessTier, Profile
from amc_receipts.services.access_scope import DEFAULT_MATCHER, CommitteeMatcher, visible_committees_for
from amc_receipts.services.audit_logger import AuditLogger
from amc_receipts.services.config_service import ConfigService, get_config_service
from amc_receipts.utils.helpers.exceptions import BackendError, ReceiptSubmissionError
from amc_receipts.utils.logging_utils import log_submission_event

logger = logging.getLogger(__name__)


class ReceiptService:
    """Validates and stores new receipts for a principal."""

    def __init__(
        self,
        backend,
        audit_logger: Optional[AuditLogger] = None,
        config: Optional[ConfigService] = None,
        matcher: Optional[CommitteeMatcher] = None,
    ):
        self.backend = backend
        self.audit_logger = audit_logger or AuditLogger()
        self.config = config or get_config_service()
        self.matcher = matcher or DEFAULT_MATCHER

    def submit(
        self,
        principal: Profile,
        receipt: ReceiptCreate,
        committees: Sequence[Committee],
    ) -> Dict[str, Any]:
        """Store a receipt entered by ``principal``.

        Args:
            principal: Profile of the submitting user
            receipt: Validated submission payload
            committees: Current committee list from the backend

        Returns:
            The stored receipt row

        Raises:
            ReceiptSubmissionError: If the receipt is invalid for this
                principal or the backend rejected the write
        """
        submitted = receipt.model_dump(mode="json")

        commodity = self.config.canonical_commodity(receipt.commodity)
        if commodity is None:
            self._reject(principal, submitted, f"Unknown commodity: {receipt.commodity}")

        committee_id = self._resolve_committee(principal, receipt, committees, submitted)

        known_ids = {committee.id for committee in committees}
        counterparty = receipt.counterparty_committee_id
        if counterparty and counterparty not in known_ids:
            self._reject(principal, submitted, f"Unknown counterparty committee: {counterparty}")

        payload = receipt.model_copy(update={"commodity": commodity}).to_payload(
            created_by=str(principal.user_id),
            committee_id=committee_id,
        )

        try:
            stored = self.backend.insert_receipt(payload)
        except ReceiptSubmissionError as exc:
            self._reject(principal, submitted, str(exc), cause=exc)
        except BackendError as exc:
            logger.error("Receipt write failed for %s: %s", principal.actor, exc)
            self._reject(principal, submitted, str(exc), retryable=True, cause=exc)

        self.audit_logger.log(
            event_type=AuditEventType.RECEIPT_CREATED,
            actor=principal.actor,
            target_id=stored.get("id"),
            data={
                "committee_id": committee_id,
                "book_number": payload["book_number"],
                "receipt_number": payload["receipt_number"],
                "value": payload["value"],
            },
        )
        log_submission_event({
            "status": "stored",
            "actor": principal.actor,
            "receipt_id": stored.get("id"),
            "committee_id": committee_id,
        })
        logger.info("Receipt %s stored by %s", stored.get("id"), principal.actor)
        return stored

    def _resolve_committee(
        self,
        principal: Profile,
        receipt: ReceiptCreate,
        committees: Sequence[Committee],
        submitted: Dict[str, Any],
    ) -> str:
        tier = principal.access_tier
        if tier is AccessTier.NONE:
            self._reject(principal, submitted, f"Role {principal.role.value} cannot enter receipts")

        visible = visible_committees_for(tier, principal.committee, committees, self.matcher)
        if not visible:
            self._reject(principal, submitted, "No committee is assigned to this account")

        if not receipt.committee_id:
            if tier is AccessTier.DIRECTOR_WIDE:
                self._reject(principal, submitted, "committee_id is required")
            if len(visible) > 1:
                self._reject(
                    principal,
                    submitted,
                    f"committee_id is required: this account covers {len(visible)} committees",
                )
            return visible[0].id

        if receipt.committee_id not in {committee.id for committee in visible}:
            self._reject(
                principal,
                submitted,
                f"Committee {receipt.committee_id} is outside this account's scope",
            )
        return receipt.committee_id

    def _reject(
        self,
        principal: Profile,
        submitted: Dict[str, Any],
        reason: str,
        retryable: bool = False,
        cause: Optional[Exception] = None,
    ) -> None:
        self.audit_logger.log(
            event_type=AuditEventType.RECEIPT_CREATE_FAILED,
            actor=principal.actor,
            data={"reason": reason, "payload": submitted},
        )
        log_submission_event({
            "status": "rejected",
            "actor": principal.actor,
            "reason": reason,
            "retryable": retryable,
        })
        raise ReceiptSubmissionError(reason, payload=submitted, retryable=retryable) from cause
