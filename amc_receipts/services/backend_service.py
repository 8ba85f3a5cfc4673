"""Backend selection and snapshot loading.

The dashboard talks to its data store through the four operations of the
``Backend`` protocol. ``AMC_BACKEND`` picks the implementation:

- ``local`` (default): SQLite repositories under ``AMC_DB_PATH``
- ``rest``: the managed backend at ``AMC_BACKEND_URL``
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol
from uuid import UUID

from fastapi.concurrency import run_in_threadpool

from amc_receipts.integrations.rest_backend import RestBackend
from amc_receipts.models.committee import Committee
from amc_receipts.models.user import Profile
from amc_receipts.repositories.local_backend import LocalBackend
from amc_receipts.repositories.user_repository import UserRepository
from amc_receipts.services.audit_logger import AuditLogger
from amc_receipts.utils.helpers.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Backend(Protocol):
    def list_committees(self) -> List[Committee]: ...

    def list_receipts(self) -> List[Dict[str, Any]]: ...

    def get_profile(self, user_id: UUID) -> Optional[Profile]: ...

    def insert_receipt(self, payload: Mapping[str, Any]) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class Snapshot:
    committees: List[Committee]
    receipts: List[Dict[str, Any]]


async def load_snapshot(backend: Backend) -> Snapshot:
    """Fetch committees and receipts concurrently.

    Either fetch failing fails the whole snapshot; the BackendError from the
    first failure propagates and no partial data is returned.
    """
    committees, receipts = await asyncio.gather(
        run_in_threadpool(backend.list_committees),
        run_in_threadpool(backend.list_receipts),
    )
    logger.debug("Loaded snapshot: %d committees, %d receipts", len(committees), len(receipts))
    return Snapshot(committees=list(committees), receipts=list(receipts))


def build_backend(kind: Optional[str] = None) -> Backend:
    """Create the backend named by ``kind`` (or ``AMC_BACKEND``)."""
    kind = (kind or os.getenv("AMC_BACKEND", "local")).strip().lower()
    if kind == "local":
        return LocalBackend(os.getenv("AMC_DB_PATH") or None)
    if kind == "rest":
        base_url = os.getenv("AMC_BACKEND_URL", "")
        if not base_url:
            raise ConfigurationError("AMC_BACKEND=rest requires AMC_BACKEND_URL")
        try:
            timeout = float(os.getenv("AMC_BACKEND_TIMEOUT", "15"))
        except ValueError as exc:
            raise ConfigurationError("AMC_BACKEND_TIMEOUT must be a number") from exc
        return RestBackend(base_url, os.getenv("AMC_BACKEND_API_KEY", ""), timeout=timeout)
    raise ConfigurationError(f"Unknown AMC_BACKEND: {kind!r} (expected 'local' or 'rest')")


# Singletons used as FastAPI dependencies; tests override them.
_backend: Optional[Backend] = None
_user_repository: Optional[UserRepository] = None
_audit_logger: Optional[AuditLogger] = None


def get_backend() -> Backend:
    """Get or create the configured Backend singleton."""
    global _backend
    if _backend is None:
        _backend = build_backend()
        logger.info("Using %s", type(_backend).__name__)
    return _backend


def get_user_repository() -> UserRepository:
    """Get or create UserRepository singleton.

    Credentials always live in the local store, whichever backend serves the
    receipts.
    """
    global _user_repository
    if _user_repository is None:
        backend = get_backend()
        if isinstance(backend, LocalBackend):
            _user_repository = backend.users
        else:
            _user_repository = UserRepository()
    return _user_repository


def get_audit_logger() -> AuditLogger:
    """Get or create AuditLogger singleton."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
