from datetime import date
from unittest.mock import Mock

import pytest

from amc_receipts.models.audit import AuditEventType
from amc_receipts.models.committee import Committee
from amc_receipts.models.receipt import ReceiptCreate
from amc_receipts.models.user import Profile
from amc_receipts.services.receipt_service import ReceiptService
from amc_receipts.utils.helpers.exceptions import BackendError, ReceiptSubmissionError


def _receipt(**overrides) -> ReceiptCreate:
    data = {
        "date": date(2024, 6, 12),
        "trader_name": "Venkat Rao",
        "payee_name": "Tuni Traders",
        "book_number": "B-002",
        "receipt_number": "0042",
        "commodity": "rice",
        "quantity": 100,
        "value": 50000,
        "fees_paid": 500,
    }
    data.update(overrides)
    return ReceiptCreate(**data)


@pytest.fixture
def service(backend, audit_logger):
    return ReceiptService(backend, audit_logger=audit_logger)


def _profile(users, login_id):
    return Profile.from_user(users[login_id])


def test_defaults_to_principal_committee_and_canonical_commodity(service, users, committees, backend):
    principal = _profile(users, "deo")

    stored = service.submit(principal, _receipt(), committees)

    assert stored["committee_id"] == "c-tuni"
    assert stored["commodity"] == "Rice"
    assert stored["created_by"] == str(principal.user_id)
    assert stored["status"] == "Active"
    assert backend.receipts.get_receipt(stored["id"]) is not None


def test_success_is_audited(service, users, committees, audit_logger):
    stored = service.submit(_profile(users, "deo"), _receipt(), committees)
    events = audit_logger.repository.get_events_for_target(stored["id"])
    assert [e.event_type for e in events] == [AuditEventType.RECEIPT_CREATED]
    assert events[0].actor == "deo"


def test_unknown_commodity_rejected_with_payload(service, users, committees, audit_logger):
    with pytest.raises(ReceiptSubmissionError) as exc_info:
        service.submit(_profile(users, "deo"), _receipt(commodity="Saffron"), committees)

    assert exc_info.value.retryable is False
    assert exc_info.value.payload["commodity"] == "Saffron"
    assert exc_info.value.payload["date"] == "2024-06-12"
    failed = audit_logger.repository.get_events_by_type(AuditEventType.RECEIPT_CREATE_FAILED)
    assert len(failed) == 1


def test_committee_outside_scope_rejected(service, users, committees, backend):
    before = len(backend.list_receipts())
    with pytest.raises(ReceiptSubmissionError, match="outside"):
        service.submit(_profile(users, "deo"), _receipt(committee_id="c-guntur"), committees)
    assert len(backend.list_receipts()) == before


def test_label_covering_several_committees_requires_committee_id(service, users, committees, backend):
    yard = Committee(id="c-tuni-yard", name="Tuni Market Yard", district="East Godavari")
    choices = committees + [yard]
    before = len(backend.list_receipts())

    with pytest.raises(ReceiptSubmissionError, match="covers 2 committees"):
        service.submit(_profile(users, "deo"), _receipt(), choices)
    assert len(backend.list_receipts()) == before

    stored = service.submit(_profile(users, "deo"), _receipt(committee_id="c-tuni"), choices)
    assert stored["committee_id"] == "c-tuni"


def test_unassigned_principal_cannot_submit(service, users, committees):
    with pytest.raises(ReceiptSubmissionError, match="No committee"):
        service.submit(_profile(users, "newdeo"), _receipt(), committees)


def test_director_must_name_committee(service, users, committees):
    jd = _profile(users, "jd")
    with pytest.raises(ReceiptSubmissionError, match="committee_id"):
        service.submit(jd, _receipt(), committees)
    stored = service.submit(jd, _receipt(committee_id="c-guntur"), committees)
    assert stored["committee_name"] == "Guntur Agricultural Market Committee"


def test_unknown_counterparty_rejected(service, users, committees):
    with pytest.raises(ReceiptSubmissionError, match="counterparty"):
        service.submit(_profile(users, "deo"), _receipt(counterparty_committee_id="c-nowhere"), committees)


def test_duplicate_book_page_rejected(service, users, committees):
    duplicate = _receipt(book_number="B-001", receipt_number="0001")
    with pytest.raises(ReceiptSubmissionError) as exc_info:
        service.submit(_profile(users, "deo"), duplicate, committees)
    assert exc_info.value.retryable is False


def test_backend_failure_is_retryable_and_written_once(users, committees, audit_logger):
    failing = Mock()
    failing.insert_receipt.side_effect = BackendError("timeout", operation="insert_receipt")
    service = ReceiptService(failing, audit_logger=audit_logger)

    with pytest.raises(ReceiptSubmissionError) as exc_info:
        service.submit(_profile(users, "deo"), _receipt(), committees)

    assert exc_info.value.retryable is True
    assert exc_info.value.payload["book_number"] == "B-002"
    assert failing.insert_receipt.call_count == 1


def test_blank_required_text_fails_validation():
    with pytest.raises(ValueError):
        _receipt(trader_name="   ")
    with pytest.raises(ValueError):
        _receipt(quantity=0)
