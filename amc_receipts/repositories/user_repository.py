"""User Repository for SQLite Persistence

SQLite-based persistence for User objects.

Design Decisions:
- Uses the same database as committees and receipts (data/amc.db)
- login_id and email are unique
- Thread-safe with connection-per-operation pattern
"""

from __future__ import annotations

import os
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from uuid import UUID, uuid4

from amc_receipts.models.user import User, UserRole, UserUpdate

_USER_COLUMNS = "user_id, login_id, name, email, password_hash, role, committee, is_active, created_at"


def default_db_path() -> str:
    """Resolve the main database path (AMC_DB_PATH or amc_receipts/data/amc.db)."""
    configured = os.getenv("AMC_DB_PATH")
    if configured:
        return configured
    data_dir = Path(__file__).parent.parent / "data"
    data_dir.mkdir(exist_ok=True)
    return str(data_dir / "amc.db")


class UserRepository:
    """SQLite-based persistence for User objects.

    Storage Strategy:
        - Single table: users
        - login_id and email have UNIQUE constraints
        - Automatic schema creation on first use

    Thread Safety:
        - Connection-per-operation pattern
        - SQLite handles concurrency via file locks
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or default_db_path()
        self._init_schema()

    def _init_schema(self) -> None:
        """Create users table if it doesn't exist.

        Schema:
            user_id: TEXT PRIMARY KEY (UUID as string)
            login_id: TEXT UNIQUE
            name: TEXT NOT NULL
            email: TEXT UNIQUE (nullable)
            password_hash: TEXT NOT NULL
            role: TEXT NOT NULL (DEO, Officer, Supervisor, JD)
            committee: TEXT (assigned committee label, nullable)
            is_active: INTEGER NOT NULL (0 or 1)
            created_at: TEXT NOT NULL (ISO timestamp)
        """
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    user_id TEXT PRIMARY KEY,
                    login_id TEXT UNIQUE,
                    name TEXT NOT NULL,
                    email TEXT UNIQUE,
                    password_hash TEXT NOT NULL,
                    role TEXT NOT NULL,
                    committee TEXT,
                    is_active INTEGER NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_user(row) -> User:
        return User(
            user_id=UUID(row[0]),
            login_id=row[1],
            name=row[2],
            email=row[3],
            password_hash=row[4],
            role=UserRole(row[5]),
            committee=row[6],
            is_active=bool(row[7]),
            created_at=datetime.fromisoformat(row[8])
        )

    def _fetch_one(self, where: str, value: str) -> Optional[User]:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE {where} = ?",
                (value,),
            )
            row = cursor.fetchone()
            return self._row_to_user(row) if row else None
        finally:
            conn.close()

    def create_user(self, user: User) -> User:
        """Create a new user.

        Raises:
            sqlite3.IntegrityError: If login_id or email already exists
        """
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(f"""
                INSERT INTO users ({_USER_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                str(user.user_id),
                user.login_id,
                user.name,
                user.email,
                user.password_hash,
                user.role.value,
                user.committee,
                1 if user.is_active else 0,
                user.created_at.isoformat()
            ))
            conn.commit()
            return user
        finally:
            conn.close()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self._fetch_one("email", email)

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        return self._fetch_one("user_id", str(user_id))

    def get_user_by_login_id(self, login_id: str) -> Optional[User]:
        return self._fetch_one("login_id", login_id)

    def find_for_login(self, identifier: str) -> Optional[User]:
        """Look up a login handle: email first, then login_id (case-insensitive)."""
        user = self.get_user_by_email(identifier)
        if user is None:
            user = self.get_user_by_login_id(identifier.strip().lower())
        return user

    def list_users(self) -> List[User]:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users ORDER BY created_at, login_id"
            )
            return [self._row_to_user(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_user(self, user_id: UUID, changes: UserUpdate) -> Optional[User]:
        """Apply a partial update. Returns the updated user, or None if missing."""
        existing = self.get_user_by_id(user_id)
        if existing is None:
            return None

        # email and committee may be cleared; the rest are NOT NULL columns
        fields = {
            key: value
            for key, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or key in ("email", "committee")
        }
        if not fields:
            return existing

        updated = existing.model_copy(update=fields)
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("""
                UPDATE users
                SET name = ?, email = ?, role = ?, committee = ?, is_active = ?
                WHERE user_id = ?
            """, (
                updated.name,
                updated.email,
                UserRole(updated.role).value,
                updated.committee,
                1 if updated.is_active else 0,
                str(user_id),
            ))
            conn.commit()
        finally:
            conn.close()
        return updated

    def delete_user(self, user_id: UUID) -> bool:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute("DELETE FROM users WHERE user_id = ?", (str(user_id),))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def upsert_user(
        self,
        login_id: str,
        plain_password: str,
        role: str,
        display_name: str,
        committee: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """Create or update a user (for demo seeding).

        - Creates user if not exists (generates UUID for user_id)
        - Updates role/email/name/committee if user exists
        - Only hashes password if user is new
        """
        from amc_receipts.auth.password import hash_password

        if not login_id:
            raise ValueError("login_id is required")

        existing = self.get_user_by_login_id(login_id)
        if existing:
            return self.update_user(
                existing.user_id,
                UserUpdate(name=display_name, email=email, role=UserRole(role), committee=committee),
            )

        user = User(
            user_id=uuid4(),
            login_id=login_id,
            name=display_name,
            email=email,
            password_hash=hash_password(plain_password),
            role=UserRole(role),
            committee=committee,
        )
        return self.create_user(user)
