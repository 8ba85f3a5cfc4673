"""Pytest configuration and shared fixtures for AMC receipt tests.

- Isolated SQLite databases per test (tmp_path)
- A seeded LocalBackend: three committees, four receipts, six accounts
- FastAPI TestClient with backend, user repository and audit logger overridden
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Dict

import pytest

# Keep event logs and default databases out of the working tree
_TEST_ROOT = tempfile.mkdtemp(prefix="amc_tests_")
os.environ.setdefault("AMC_LOG_DIR", os.path.join(_TEST_ROOT, "logs"))
os.environ.setdefault("AMC_DB_PATH", os.path.join(_TEST_ROOT, "amc.db"))
os.environ.setdefault("AMC_AUDIT_DB_PATH", os.path.join(_TEST_ROOT, "audit.db"))

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient

from amc_receipts.auth.jwt import create_access_token
from amc_receipts.auth.password import hash_password
from amc_receipts.models.committee import Committee
from amc_receipts.models.user import User, UserRole
from amc_receipts.repositories.audit_repository import AuditRepository
from amc_receipts.repositories.local_backend import LocalBackend
from amc_receipts.services.audit_logger import AuditLogger

DEMO_PASSWORD = "demo123"

TEST_COMMITTEES = [
    Committee(id="c-tuni", name="Tuni Agricultural Market Committee", district="East Godavari", code="TUN"),
    Committee(id="c-kakinada", name="Kakinada Agricultural Market Committee", district="East Godavari", code="KKD"),
    Committee(id="c-guntur", name="Guntur Agricultural Market Committee", district="Guntur", code="GNT"),
]

TEST_RECEIPTS = [
    {
        "id": "r1", "date": "2024-06-10", "committee_id": "c-tuni",
        "trader_name": "Rajesh Kumar", "payee_name": "Sri Rice Mills",
        "book_number": "B-001", "receipt_number": "0001", "commodity": "Rice",
        "quantity": 500, "value": 250000, "fees_paid": 2500, "checkpost": "Tuni Checkpost",
    },
    {
        "id": "r2", "date": "2024-06-08", "committee_id": "c-tuni",
        "trader_name": "Suresh Reddy", "payee_name": "Godavari Textiles",
        "book_number": "B-001", "receipt_number": "0002", "commodity": "Cotton",
        "quantity": 300, "value": 180000, "fees_paid": 1800,
    },
    {
        "id": "r3", "date": "2024-05-28", "committee_id": "c-kakinada",
        "counterparty_committee_id": "c-tuni",
        "trader_name": "Lakshmi Devi", "payee_name": "Coastal Pulses",
        "book_number": "B-100", "receipt_number": "0001", "commodity": "Gram",
        "quantity": 250, "value": 200000, "fees_paid": 2000,
    },
    {
        "id": "r4", "date": "2024-05-20", "committee_id": "c-guntur",
        "trader_name": "Mohan Rao", "payee_name": "Guntur Feeds",
        "book_number": "B-200", "receipt_number": "0001", "commodity": "Maize",
        "quantity": 600, "value": 300000, "fees_paid": 3000,
    },
]

# login_id -> (role, committee label)
TEST_USERS = {
    "deo": (UserRole.DEO, "Tuni AMC"),
    "officer": (UserRole.OFFICER, "Tuni AMC"),
    "supervisor": (UserRole.SUPERVISOR, "Tuni AMC"),
    "jd": (UserRole.JD, None),
    "newdeo": (UserRole.DEO, None),
    "kkd_sup": (UserRole.SUPERVISOR, "KKD market yard"),
}


@pytest.fixture(scope="session")
def demo_password_hash() -> str:
    """Hash once; bcrypt is deliberately slow."""
    return hash_password(DEMO_PASSWORD)


@pytest.fixture
def test_db_path(tmp_path) -> str:
    return str(tmp_path / "amc.db")


@pytest.fixture
def audit_logger(tmp_path) -> AuditLogger:
    """AuditLogger writing to an isolated audit database."""
    return AuditLogger(AuditRepository(db_path=str(tmp_path / "audit.db")))


@pytest.fixture
def committees():
    return list(TEST_COMMITTEES)


@pytest.fixture
def receipts():
    return [dict(row) for row in TEST_RECEIPTS]


@pytest.fixture
def backend(test_db_path: str, demo_password_hash: str) -> LocalBackend:
    """LocalBackend seeded with the test committees, receipts and users."""
    local = LocalBackend(test_db_path)
    local.committees.upsert_committees(TEST_COMMITTEES)
    for row in TEST_RECEIPTS:
        local.receipts.insert_receipt(row)
    for login_id, (role, committee) in TEST_USERS.items():
        local.users.create_user(User(
            login_id=login_id,
            name=login_id.upper(),
            password_hash=demo_password_hash,
            role=role,
            committee=committee,
        ))
    return local


@pytest.fixture
def users(backend: LocalBackend) -> Dict[str, User]:
    return {user.login_id: user for user in backend.users.list_users()}


@pytest.fixture
def api_client(backend: LocalBackend, audit_logger: AuditLogger):
    """FastAPI test client bound to the seeded backend."""
    from amc_receipts.main import app
    from amc_receipts.services.backend_service import get_audit_logger, get_backend, get_user_repository

    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_user_repository] = lambda: backend.users
    app.dependency_overrides[get_audit_logger] = lambda: audit_logger
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(users: Dict[str, User]) -> Callable[[str], Dict[str, str]]:
    """Build an Authorization header for one of the seeded accounts."""

    def _headers(login_id: str) -> Dict[str, str]:
        user = users[login_id]
        token = create_access_token(
            user_id=user.user_id,
            role=user.role,
            committee=user.committee,
            login_id=user.login_id,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
