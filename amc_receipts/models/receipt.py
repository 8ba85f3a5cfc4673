"""Receipt models.

Receipts arrive from the backend as plain mappings (possibly malformed) and are
handled as such by the scope resolver and aggregators. The pydantic models here
cover the two places where shape is enforced: the submission payload and the
public response.

Canonical row keys:
    id, date, committee_id, counterparty_committee_id, committee_name, district,
    trader_name, payee_name, book_number, receipt_number, commodity, quantity,
    value, fees_paid, status, created_by, collected_by, checkpost, created_at
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from amc_receipts.utils.helpers.number_utils import to_number

DEFAULT_STATUS = "Active"


class ReceiptCreate(BaseModel):
    """Payload for entering a new trade receipt."""

    date: dt.date
    committee_id: Optional[str] = Field(
        None,
        description="Origin committee. Defaults to the submitter's committee when omitted.",
    )
    counterparty_committee_id: Optional[str] = Field(None, description="Destination committee, if any")
    trader_name: str = Field(..., min_length=1, max_length=200)
    payee_name: Optional[str] = Field(None, max_length=200)
    book_number: str = Field(..., min_length=1, max_length=50)
    receipt_number: str = Field(..., min_length=1, max_length=50)
    commodity: str = Field(..., min_length=1, max_length=100)
    quantity: float = Field(..., gt=0, description="Quantity in quintals")
    value: float = Field(..., ge=0, description="Trade value in rupees")
    fees_paid: float = Field(..., ge=0, description="Market fee collected in rupees")
    collected_by: Optional[str] = None
    checkpost: Optional[str] = None

    @field_validator("trader_name", "book_number", "receipt_number", "commodity")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    def to_payload(self, created_by: str, committee_id: str) -> Dict[str, Any]:
        """Build the backend insert payload."""
        return {
            "date": self.date.isoformat(),
            "committee_id": committee_id,
            "counterparty_committee_id": self.counterparty_committee_id,
            "trader_name": self.trader_name,
            "payee_name": self.payee_name,
            "book_number": self.book_number,
            "receipt_number": self.receipt_number,
            "commodity": self.commodity,
            "quantity": self.quantity,
            "value": self.value,
            "fees_paid": self.fees_paid,
            "status": DEFAULT_STATUS,
            "created_by": created_by,
            "collected_by": self.collected_by,
            "checkpost": self.checkpost,
        }


class ReceiptResponse(BaseModel):
    """Public view of a receipt row. Amounts are normalized to numbers."""

    id: Optional[str] = None
    date: Optional[str] = None
    committee_id: Optional[str] = None
    counterparty_committee_id: Optional[str] = None
    committee_name: Optional[str] = None
    district: Optional[str] = None
    trader_name: Optional[str] = None
    payee_name: Optional[str] = None
    book_number: Optional[str] = None
    receipt_number: Optional[str] = None
    commodity: Optional[str] = None
    quantity: float = 0.0
    value: float = 0.0
    fees_paid: float = 0.0
    status: Optional[str] = None
    created_by: Optional[str] = None
    collected_by: Optional[str] = None
    checkpost: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ReceiptResponse:
        def _text(key: str) -> Optional[str]:
            value = row.get(key)
            return None if value is None else str(value)

        return cls(
            id=_text("id"),
            date=_text("date"),
            committee_id=_text("committee_id"),
            counterparty_committee_id=_text("counterparty_committee_id"),
            committee_name=_text("committee_name"),
            district=_text("district"),
            trader_name=_text("trader_name"),
            payee_name=_text("payee_name"),
            book_number=_text("book_number"),
            receipt_number=_text("receipt_number"),
            commodity=_text("commodity"),
            quantity=to_number(row.get("quantity")),
            value=to_number(row.get("value")),
            fees_paid=to_number(row.get("fees_paid")),
            status=_text("status"),
            created_by=_text("created_by"),
            collected_by=_text("collected_by"),
            checkpost=_text("checkpost"),
        )
