"""SQLite persistence for committees (local backend)."""

from __future__ import annotations

import sqlite3
from typing import Iterable, List, Optional

from amc_receipts.models.committee import Committee
from amc_receipts.repositories.user_repository import default_db_path


class CommitteeRepository:
    """Committees table in the local database.

    The service treats committees as read-only; ``upsert_committees`` exists
    for seeding only. Listing order is insertion order (rowid), which is the
    order the scope resolver preserves.
    """

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
            conn.commit()
        finally:
            conn.close()

    def list_committees(self) -> List[Committee]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            cursor = conn.execute(
                "SELECT id, name, district, code FROM committees ORDER BY rowid"
            )
            return [Committee.from_row(dict(row)) for row in cursor.fetchall()]
        finally:
            conn.close()

    def upsert_committees(self, committees: Iterable[Committee]) -> int:
        conn = sqlite3.connect(self.db_path)
        try:
            count = 0
            for committee in committees:
                conn.execute("""
                    INSERT INTO committees (id, name, district, code)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        name = excluded.name,
                        district = excluded.district,
                        code = excluded.code
                """, (committee.id, committee.name, committee.district, committee.code))
                count += 1
            conn.commit()
            return count
        finally:
            conn.close()
