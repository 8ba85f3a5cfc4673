"""Backend implementation over the local SQLite repositories."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from amc_receipts.models.committee import Committee
from amc_receipts.models.user import Profile
from amc_receipts.repositories.committee_repository import CommitteeRepository
from amc_receipts.repositories.receipt_repository import DuplicateReceiptError, ReceiptRepository
from amc_receipts.repositories.user_repository import UserRepository
from amc_receipts.utils.helpers.exceptions import BackendError, ReceiptSubmissionError

logger = logging.getLogger(__name__)


class LocalBackend:
    """Committees, receipts and profiles from one SQLite file.

    SQLite errors surface as BackendError so callers handle the local and
    managed backends the same way.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        *,
        committees: Optional[CommitteeRepository] = None,
        receipts: Optional[ReceiptRepository] = None,
        users: Optional[UserRepository] = None,
    ) -> None:
        self.users = users or UserRepository(db_path)
        self.committees = committees or CommitteeRepository(self.users.db_path)
        self.receipts = receipts or ReceiptRepository(self.users.db_path)

    def list_committees(self) -> List[Committee]:
        try:
            return self.committees.list_committees()
        except sqlite3.Error as exc:
            raise BackendError(f"Failed to load committees: {exc}", operation="list_committees") from exc

    def list_receipts(self) -> List[Dict[str, Any]]:
        try:
            return self.receipts.list_receipts()
        except sqlite3.Error as exc:
            raise BackendError(f"Failed to load receipts: {exc}", operation="list_receipts") from exc

    def get_profile(self, user_id: UUID) -> Optional[Profile]:
        try:
            user = self.users.get_user_by_id(user_id)
        except sqlite3.Error as exc:
            raise BackendError(f"Failed to load profile: {exc}", operation="get_profile") from exc
        return Profile.from_user(user) if user else None

    def insert_receipt(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            return self.receipts.insert_receipt(payload)
        except DuplicateReceiptError as exc:
            raise ReceiptSubmissionError(str(exc), payload=dict(payload)) from exc
        except sqlite3.Error as exc:
            logger.error("Receipt insert failed: %s", exc)
            raise BackendError(f"Failed to store receipt: {exc}", operation="insert_receipt") from exc
