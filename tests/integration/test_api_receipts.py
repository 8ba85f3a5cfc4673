"""Receipt list, entry, verification and export endpoints."""

import pytest

from amc_receipts.models.audit import AuditEventType
from amc_receipts.services.backend_service import get_backend
from amc_receipts.utils.helpers.exceptions import BackendError

NEW_RECEIPT = {
    "date": "2024-06-12",
    "trader_name": "Venkat Rao",
    "payee_name": "Tuni Traders",
    "book_number": "B-002",
    "receipt_number": "0042",
    "commodity": "Rice",
    "quantity": 100,
    "value": 50000,
    "fees_paid": 500,
}


class FailingReceiptsBackend:
    """Wraps a working backend but fails every receipt fetch."""

    def __init__(self, inner):
        self.inner = inner

    def get_profile(self, user_id):
        return self.inner.get_profile(user_id)

    def list_committees(self):
        return self.inner.list_committees()

    def list_receipts(self):
        raise BackendError("backend unreachable", operation="list_receipts")

    def insert_receipt(self, payload):
        raise BackendError("backend unreachable", operation="insert_receipt")


class TestReceiptList:
    def test_supervisor_sees_committee_receipts(self, api_client, auth_headers):
        response = api_client.get("/api/receipts", headers=auth_headers("supervisor"))
        assert response.status_code == 200
        body = response.json()
        assert body["scope_status"] == "ok"
        assert [r["id"] for r in body["receipts"]] == ["r1", "r2", "r3"]
        assert body["total"] == 3
        assert body["total_value"] == 630000
        assert body["commodities"] == ["Rice", "Cotton", "Gram"]

    def test_director_sees_all_receipts(self, api_client, auth_headers):
        body = api_client.get("/api/receipts", headers=auth_headers("jd")).json()
        assert body["count"] == 4

    def test_alias_label_scope(self, api_client, auth_headers):
        body = api_client.get("/api/receipts", headers=auth_headers("kkd_sup")).json()
        assert [r["id"] for r in body["receipts"]] == ["r3"]

    def test_unassigned_account_gets_empty_ok_response(self, api_client, auth_headers):
        response = api_client.get("/api/receipts", headers=auth_headers("newdeo"))
        assert response.status_code == 200
        body = response.json()
        assert body["scope_status"] == "unassigned"
        assert body["receipts"] == []

    def test_filters(self, api_client, auth_headers):
        headers = auth_headers("jd")
        search = api_client.get("/api/receipts", params={"q": "reddy"}, headers=headers).json()
        assert [r["id"] for r in search["receipts"]] == ["r2"]
        assert search["total"] == 4

        by_committee = api_client.get(
            "/api/receipts",
            params={"committee": "Guntur Agricultural Market Committee", "commodity": "all"},
            headers=headers,
        ).json()
        assert [r["id"] for r in by_committee["receipts"]] == ["r4"]

    def test_officer_cannot_list(self, api_client, auth_headers):
        assert api_client.get("/api/receipts", headers=auth_headers("officer")).status_code == 403

    def test_fetch_failure_returns_502(self, api_client, auth_headers, backend):
        api_client.app.dependency_overrides[get_backend] = lambda: FailingReceiptsBackend(backend)
        response = api_client.get("/api/receipts", headers=auth_headers("supervisor"))
        assert response.status_code == 502
        assert response.json()["error"] == "fetch_failed"


class TestReceiptEntry:
    def test_deo_creates_receipt_in_own_committee(self, api_client, auth_headers, audit_logger):
        response = api_client.post("/api/receipts", json=NEW_RECEIPT, headers=auth_headers("deo"))
        assert response.status_code == 201
        stored = response.json()
        assert stored["committee_id"] == "c-tuni"
        assert stored["committee_name"] == "Tuni Agricultural Market Committee"
        assert stored["status"] == "Active"

        listed = api_client.get("/api/receipts", headers=auth_headers("deo")).json()
        assert stored["id"] in [r["id"] for r in listed["receipts"]]
        assert audit_logger.repository.get_events_by_type(AuditEventType.RECEIPT_CREATED)

    def test_rejected_submission_echoes_payload(self, api_client, auth_headers):
        response = api_client.post(
            "/api/receipts",
            json=dict(NEW_RECEIPT, commodity="Saffron"),
            headers=auth_headers("deo"),
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "submission_failed"
        assert body["payload"]["trader_name"] == "Venkat Rao"

    def test_invalid_amount_rejected_by_validation(self, api_client, auth_headers):
        response = api_client.post(
            "/api/receipts",
            json=dict(NEW_RECEIPT, value=-5),
            headers=auth_headers("deo"),
        )
        assert response.status_code == 422

    def test_backend_write_failure_returns_502_with_payload(self, api_client, auth_headers, backend):
        api_client.app.dependency_overrides[get_backend] = lambda: FailingReceiptsBackend(backend)
        response = api_client.post("/api/receipts", json=NEW_RECEIPT, headers=auth_headers("deo"))
        assert response.status_code == 502
        assert response.json()["retryable"] is True
        assert response.json()["payload"]["book_number"] == "B-002"
        assert len(backend.list_receipts()) == 4

    @pytest.mark.parametrize("login_id", ["officer", "supervisor", "jd"])
    def test_only_deo_enters_receipts(self, api_client, auth_headers, login_id):
        response = api_client.post("/api/receipts", json=NEW_RECEIPT, headers=auth_headers(login_id))
        assert response.status_code == 403


class TestVerification:
    def test_officer_verifies_genuine_receipt(self, api_client, auth_headers):
        response = api_client.post(
            "/api/receipts/verify",
            json={"committee": "Tuni Agricultural Market Committee", "book_number": "B-001", "receipt_number": "0001"},
            headers=auth_headers("officer"),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["found"] is True
        assert body["status"] == "Genuine"
        assert body["receipt"]["trader_name"] == "Rajesh Kumar"

    def test_officer_verifies_outside_own_committee(self, api_client, auth_headers):
        body = api_client.post(
            "/api/receipts/verify",
            json={"committee": "c-guntur", "book_number": "B-200", "receipt_number": "0001"},
            headers=auth_headers("officer"),
        ).json()
        assert body["found"] is True

    def test_unknown_receipt_not_found(self, api_client, auth_headers, audit_logger):
        body = api_client.post(
            "/api/receipts/verify",
            json={"committee": "c-tuni", "book_number": "B-001", "receipt_number": "9999"},
            headers=auth_headers("supervisor"),
        ).json()
        assert body == {"found": False, "status": "Not Found", "receipt": None}
        events = audit_logger.repository.get_events_by_type(AuditEventType.RECEIPT_VERIFIED)
        assert events[0].data["status"] == "Not Found"

    def test_deo_cannot_verify(self, api_client, auth_headers):
        response = api_client.post(
            "/api/receipts/verify",
            json={"committee": "c-tuni", "book_number": "B-001", "receipt_number": "0001"},
            headers=auth_headers("deo"),
        )
        assert response.status_code == 403


class TestExport:
    def test_csv_export_of_scope(self, api_client, auth_headers):
        response = api_client.get("/api/receipts/export.csv", headers=auth_headers("supervisor"))
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        lines = response.text.split("\n")
        assert len(lines) == 4
        assert lines[0].startswith("Date,Committee,Trader")

    def test_csv_export_respects_filters(self, api_client, auth_headers):
        response = api_client.get(
            "/api/receipts/export.csv",
            params={"commodity": "Maize"},
            headers=auth_headers("jd"),
        )
        assert len(response.text.split("\n")) == 2

    def test_xlsx_export(self, api_client, auth_headers, audit_logger):
        response = api_client.get("/api/receipts/export.xlsx", headers=auth_headers("jd"))
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert response.content[:2] == b"PK"
        exported = audit_logger.repository.get_events_by_type(AuditEventType.RECEIPTS_EXPORTED)
        assert exported[0].data["format"] == "xlsx"

    def test_deo_cannot_export(self, api_client, auth_headers):
        assert api_client.get("/api/receipts/export.csv", headers=auth_headers("deo")).status_code == 403
