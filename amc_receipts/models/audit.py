"""Audit Event Model

Immutable audit log for logins, receipt entry, verification and user
administration.

Key Principles:
- Append-only (no updates or deletes)
- Events are never modified after creation
- Captures who did what, when, and with what outcome
- Stored in a separate SQLite database (audit.db)
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Audit event types recorded by the service."""

    LOGIN_SUCCEEDED = "LOGIN_SUCCEEDED"
    """Principal authenticated and received a token."""

    LOGIN_FAILED = "LOGIN_FAILED"
    """Unknown login, wrong password or inactive account."""

    RECEIPT_CREATED = "RECEIPT_CREATED"
    """New receipt written to the backend."""

    RECEIPT_CREATE_FAILED = "RECEIPT_CREATE_FAILED"
    """Receipt submission rejected or backend write failed."""

    RECEIPT_VERIFIED = "RECEIPT_VERIFIED"
    """Checkpost verification lookup (found or not found)."""

    RECEIPTS_EXPORTED = "RECEIPTS_EXPORTED"
    """CSV or Excel export of visible receipts."""

    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"


class AuditEvent(BaseModel):
    """Immutable audit event record.

    Attributes:
        event_id: Unique identifier for this audit event
        event_type: Type of operation being audited
        timestamp: When the business event occurred (UTC)
        actor: Who performed this action (login_id or "SYSTEM")
        target_id: Affected receipt/user identifier, if any
        data: Event-specific context (errors, results, changes)
        created_at: When this audit record was persisted

    Example:
        >>> event = AuditEvent(
        ...     event_type=AuditEventType.RECEIPT_CREATED,
        ...     actor="deo",
        ...     target_id="6f1d...",
        ...     data={"committee_id": "c-tuni", "value": 250000.0},
        ... )
        >>> audit_repo.save_event(event)
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique identifier for this audit event"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of operation being audited"
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the business event occurred (UTC timezone)"
    )

    actor: str = Field(
        ...,
        description="Who performed this action (login_id or 'SYSTEM')"
    )

    target_id: Optional[str] = Field(
        None,
        description="Affected receipt or user identifier"
    )

    data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific context"
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When this audit record was persisted to database"
    )
