"""Audit Logger Service

Best-effort audit event logging for logins, receipt writes, verification
lookups, exports and user administration.

Key Principles:
- Audit failures NEVER block business operations
- All exceptions are caught and logged as warnings
- Stores only safe metadata (no passwords, no tokens)
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from amc_receipts.models.audit import AuditEvent, AuditEventType
from amc_receipts.repositories.audit_repository import AuditRepository

logger = logging.getLogger(__name__)

_REDACTED_KEYS = {"password", "password_hash", "access_token"}


def _serialize_for_audit(obj: Any) -> Any:
    """Convert objects to a JSON-serializable form for audit data."""
    if isinstance(obj, Decimal):
        return float(obj)
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, dict):
        return {
            str(key): _serialize_for_audit(value)
            for key, value in obj.items()
            if str(key) not in _REDACTED_KEYS
        }
    elif isinstance(obj, (list, tuple, set, frozenset)):
        return [_serialize_for_audit(item) for item in obj]
    elif hasattr(obj, "value") and isinstance(getattr(obj, "value"), str):
        return obj.value
    else:
        return obj


class AuditLogger:
    """Error boundary around AuditRepository.

    Example:
        audit_logger = AuditLogger()
        audit_logger.log(
            event_type=AuditEventType.RECEIPT_CREATED,
            actor="deo",
            target_id=receipt["id"],
            data={"committee_id": receipt["committee_id"]},
        )
    """

    DEFAULT_ACTOR = "SYSTEM"

    def __init__(self, repository: Optional[AuditRepository] = None):
        self.repository = repository or AuditRepository()

    def log(
        self,
        event_type: AuditEventType,
        actor: Optional[str] = None,
        target_id: Optional[Any] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log an audit event (best-effort, never raises)."""
        try:
            event = AuditEvent(
                event_type=event_type,
                actor=actor or self.DEFAULT_ACTOR,
                target_id=str(target_id) if target_id else None,
                data=_serialize_for_audit(data or {}),
            )
            self.repository.save_event(event)
        except Exception as exc:
            logger.warning(
                "Audit logging failed for event_type=%s target_id=%s: %s",
                event_type, target_id, exc,
            )
