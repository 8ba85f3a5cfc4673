"""Models package for the AMC receipt service."""

from amc_receipts.models.audit import AuditEvent, AuditEventType
from amc_receipts.models.committee import Committee
from amc_receipts.models.receipt import ReceiptCreate, ReceiptResponse
from amc_receipts.models.user import AccessTier, User, UserRole

__all__ = [
    "AccessTier",
    "AuditEvent",
    "AuditEventType",
    "Committee",
    "ReceiptCreate",
    "ReceiptResponse",
    "User",
    "UserRole",
]
