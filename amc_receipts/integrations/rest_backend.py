"""
Managed Backend Integration

Client for the hosted backend-as-a-service that stores committees, receipts
and user profiles. The backend exposes PostgREST-style table endpoints:

    GET  {base}/rest/v1/committees?select=id,name,district,code
    GET  {base}/rest/v1/receipts?select=*,committee:committee_id(name,district)
    GET  {base}/rest/v1/profiles?id=eq.<uuid>
    POST {base}/rest/v1/receipts            (Prefer: return=representation)

Every request carries the project API key both as ``apikey`` and as a bearer
token. Nothing is retried: a failed read or write surfaces as BackendError
(or ReceiptSubmissionError when the backend rejects a payload).
"""

from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID
import logging

import requests

from amc_receipts.models.committee import Committee
from amc_receipts.models.user import Profile, UserRole
from amc_receipts.utils.helpers.exceptions import BackendError, ReceiptSubmissionError

logger = logging.getLogger(__name__)

RECEIPT_SELECT = "*,committee:committee_id(name,district)"
COMMITTEE_SELECT = "id,name,district,code"
PROFILE_SELECT = "id,login_id,name,role,committee,is_active"


class RestBackend:
    """Client for the managed backend's REST interface."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required for the REST backend")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _get(self, table: str, params: Dict[str, str], operation: str) -> List[Dict[str, Any]]:
        try:
            response = self.session.get(
                self._url(table),
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Backend %s failed: %s", operation, exc)
            raise BackendError(f"Backend unreachable during {operation}: {exc}", operation=operation) from exc

        if response.status_code >= 400:
            logger.warning("Backend %s returned HTTP %s", operation, response.status_code)
            raise BackendError(
                f"Backend returned HTTP {response.status_code} during {operation}",
                operation=operation,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise BackendError(f"Backend returned invalid JSON during {operation}", operation=operation) from exc
        if not isinstance(data, list):
            raise BackendError(f"Backend returned unexpected payload during {operation}", operation=operation)
        return data

    def list_committees(self) -> List[Committee]:
        rows = self._get("committees", {"select": COMMITTEE_SELECT, "order": "name"}, "list_committees")
        return [Committee.from_row(row) for row in rows if row.get("id") is not None]

    def list_receipts(self) -> List[Dict[str, Any]]:
        rows = self._get("receipts", {"select": RECEIPT_SELECT, "order": "date.desc"}, "list_receipts")
        return [_flatten_receipt(row) for row in rows]

    def get_profile(self, user_id: UUID) -> Optional[Profile]:
        rows = self._get(
            "profiles",
            {"select": PROFILE_SELECT, "id": f"eq.{user_id}"},
            "get_profile",
        )
        if not rows:
            return None
        row = rows[0]
        try:
            return Profile(
                user_id=UUID(str(row["id"])),
                login_id=row.get("login_id"),
                name=row.get("name") or str(row["id"]),
                role=UserRole(row.get("role")),
                committee=row.get("committee") or None,
                is_active=bool(row.get("is_active", True)),
            )
        except (KeyError, ValueError) as exc:
            logger.warning("Profile %s is malformed: %s", user_id, exc)
            return None

    def insert_receipt(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Submit one receipt; returns the stored row."""
        body = {key: value for key, value in payload.items() if value is not None}
        try:
            response = self.session.post(
                self._url("receipts"),
                params={"select": RECEIPT_SELECT},
                json=body,
                headers=self._headers({"Prefer": "return=representation"}),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise BackendError(f"Backend unreachable during insert_receipt: {exc}", operation="insert_receipt") from exc

        if 400 <= response.status_code < 500:
            message = _error_message(response) or f"Backend rejected receipt (HTTP {response.status_code})"
            raise ReceiptSubmissionError(message, payload=dict(payload))
        if response.status_code >= 500:
            raise BackendError(
                f"Backend returned HTTP {response.status_code} during insert_receipt",
                operation="insert_receipt",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise BackendError("Backend returned invalid JSON during insert_receipt", operation="insert_receipt") from exc
        row = data[0] if isinstance(data, list) and data else data
        if not isinstance(row, dict):
            raise BackendError("Backend returned no stored receipt", operation="insert_receipt")
        return _flatten_receipt(row)


def _flatten_receipt(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Lift the embedded committee object into committee_name / district."""
    flat = dict(row)
    embedded = flat.pop("committee", None)
    if isinstance(embedded, dict):
        flat.setdefault("committee_name", embedded.get("name"))
        flat.setdefault("district", embedded.get("district"))
    return flat


def _error_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("details") or body.get("hint")
    return None
