"""Audit Event Persistence Layer

SQLite-based repository for storing and retrieving audit events.

Design Decisions:
- Separate database file (AMC_AUDIT_DB_PATH or data/audit.db) so the
  audit trail survives a reset of the receipts database
- Append-only operations (no updates or deletes)
- Connection-per-operation pattern (thread-safe)
- Retry logic for "database is locked" errors
"""

from __future__ import annotations

import json
import os
import sqlite3
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from uuid import UUID

from amc_receipts.models.audit import AuditEvent, AuditEventType


class AuditRepository:
    """SQLite-based persistence for audit events.

    Immutability:
        - No update() or delete() methods
        - Audit events are write-once, read-many
    """

    MAX_RETRIES = 3
    RETRY_DELAY_MS = 100

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            db_path = os.getenv("AMC_AUDIT_DB_PATH") or None
        if db_path is None:
            data_dir = Path(__file__).parent.parent / "data"
            data_dir.mkdir(exist_ok=True)
            db_path = str(data_dir / "audit.db")

        self.db_path = db_path
        self._init_schema()

    def _init_schema(self) -> None:
        """Create audit_events table and indexes if they don't exist.

        Indexes:
            - idx_audit_target_id: Events for a specific receipt/user
            - idx_audit_event_type: Filter by event type
            - idx_audit_timestamp: Date range queries
            - idx_audit_actor: Principal activity queries
        """
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS audit_events (
                    event_id TEXT PRIMARY KEY,
                    event_type TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    actor TEXT NOT NULL,
                    target_id TEXT,
                    data_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            for column in ("target_id", "event_type", "timestamp", "actor"):
                conn.execute(
                    f"CREATE INDEX IF NOT EXISTS idx_audit_{column} ON audit_events({column})"
                )
            conn.commit()
        finally:
            conn.close()

    def save_event(self, event: AuditEvent) -> None:
        """Append an audit event.

        Raises:
            sqlite3.Error: If database write fails after all retries
        """
        data_json = json.dumps(event.data)

        for attempt in range(self.MAX_RETRIES):
            try:
                conn = sqlite3.connect(self.db_path)
                try:
                    conn.execute("""
                        INSERT INTO audit_events
                        (event_id, event_type, timestamp, actor, target_id, data_json, created_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?)
                    """, (
                        str(event.event_id),
                        event.event_type.value,
                        event.timestamp.isoformat(),
                        event.actor,
                        event.target_id,
                        data_json,
                        event.created_at.isoformat(),
                    ))
                    conn.commit()
                    return
                finally:
                    conn.close()

            except sqlite3.OperationalError as e:
                if "locked" not in str(e).lower():
                    raise
                if attempt < self.MAX_RETRIES - 1:
                    time.sleep(self.RETRY_DELAY_MS / 1000.0)
                    continue
                raise sqlite3.OperationalError(
                    f"Database locked after {self.MAX_RETRIES} attempts: {e}"
                ) from e

    def get_recent_events(self, limit: int = 200) -> List[AuditEvent]:
        """Most recent events first."""
        return self._query(
            "SELECT * FROM audit_events ORDER BY timestamp DESC LIMIT ?",
            (limit,),
        )

    def get_events_by_type(self, event_type: AuditEventType, limit: int = 200) -> List[AuditEvent]:
        return self._query(
            "SELECT * FROM audit_events WHERE event_type = ? ORDER BY timestamp DESC LIMIT ?",
            (event_type.value, limit),
        )

    def get_events_for_target(self, target_id: str, limit: int = 200) -> List[AuditEvent]:
        return self._query(
            "SELECT * FROM audit_events WHERE target_id = ? ORDER BY timestamp DESC LIMIT ?",
            (target_id, limit),
        )

    def count_events(self) -> int:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute("SELECT COUNT(*) FROM audit_events")
            return cursor.fetchone()[0]
        finally:
            conn.close()

    def _query(self, sql: str, params: tuple) -> List[AuditEvent]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            return [self._row_to_event(row) for row in conn.execute(sql, params).fetchall()]
        finally:
            conn.close()

    def _row_to_event(self, row: sqlite3.Row) -> AuditEvent:
        return AuditEvent(
            event_id=UUID(row["event_id"]),
            event_type=AuditEventType(row["event_type"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            actor=row["actor"],
            target_id=row["target_id"],
            data=json.loads(row["data_json"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
