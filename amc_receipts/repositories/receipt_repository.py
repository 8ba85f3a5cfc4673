"""SQLite persistence for trade receipts (local backend).

Design Decisions:
- Amount columns are declared NUMERIC but SQLite keeps whatever the writer
  stored, so rows are returned as plain dicts and never coerced here
- (committee_id, book_number, receipt_number) is unique: a receipt book page
  can only be entered once
- Listing joins the committee name and district, like the managed backend's
  embedded select
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from amc_receipts.repositories.user_repository import default_db_path

RECEIPT_COLUMNS = (
    "id",
    "date",
    "committee_id",
    "counterparty_committee_id",
    "trader_name",
    "payee_name",
    "book_number",
    "receipt_number",
    "commodity",
    "quantity",
    "value",
    "fees_paid",
    "status",
    "created_by",
    "collected_by",
    "checkpost",
    "created_at",
)

_SELECT_JOINED = """
    SELECT r.*, c.name AS committee_name, c.district AS district
    FROM receipts r
    LEFT JOIN committees c ON c.id = r.committee_id
"""


class DuplicateReceiptError(Exception):
    """A receipt with the same committee, book and receipt number exists."""


class ReceiptRepository:
    """Receipts table in the local database."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or default_db_path()
        self._init_schema()

    def _init_schema(self) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS committees (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    district TEXT,
                    code TEXT
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS receipts (
                    id TEXT PRIMARY KEY,
                    date TEXT,
                    committee_id TEXT,
                    counterparty_committee_id TEXT,
                    trader_name TEXT,
                    payee_name TEXT,
                    book_number TEXT,
                    receipt_number TEXT,
                    commodity TEXT,
                    quantity NUMERIC,
                    value NUMERIC,
                    fees_paid NUMERIC,
                    status TEXT NOT NULL DEFAULT 'Active',
                    created_by TEXT,
                    collected_by TEXT,
                    checkpost TEXT,
                    created_at TEXT NOT NULL,
                    UNIQUE (committee_id, book_number, receipt_number)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_receipts_committee
                ON receipts(committee_id)
            """)
            conn.commit()
        finally:
            conn.close()

    def list_receipts(self) -> List[Dict[str, Any]]:
        """All receipts, newest receipt date first, joined with committee info."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            cursor = conn.execute(
                _SELECT_JOINED + " ORDER BY r.date DESC, r.created_at DESC"
            )
            return [dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_receipt(self, receipt_id: str) -> Optional[Dict[str, Any]]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            row = conn.execute(_SELECT_JOINED + " WHERE r.id = ?", (receipt_id,)).fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    def insert_receipt(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert one receipt and return the stored row.

        Raises:
            DuplicateReceiptError: If the book page was already entered
        """
        record = {column: payload.get(column) for column in RECEIPT_COLUMNS}
        record["id"] = record["id"] or str(uuid4())
        record["status"] = record["status"] or "Active"
        record["created_at"] = record["created_at"] or datetime.now(timezone.utc).isoformat()

        placeholders = ", ".join("?" for _ in RECEIPT_COLUMNS)
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(
                f"INSERT INTO receipts ({', '.join(RECEIPT_COLUMNS)}) VALUES ({placeholders})",
                tuple(record[column] for column in RECEIPT_COLUMNS),
            )
            conn.commit()
        except sqlite3.IntegrityError as exc:
            raise DuplicateReceiptError(
                f"Receipt {record['book_number']}/{record['receipt_number']} already exists "
                f"for committee {record['committee_id']}"
            ) from exc
        finally:
            conn.close()

        return self.get_receipt(record["id"])
