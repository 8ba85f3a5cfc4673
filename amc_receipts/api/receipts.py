"""Receipt API Endpoints

Endpoints:
- GET  /api/receipts             - Receipts in the principal's scope (filterable)
- POST /api/receipts             - Enter a new receipt
- POST /api/receipts/verify      - Checkpost verification by book/receipt number
- GET  /api/receipts/export.csv  - CSV export of the (filtered) scoped list
- GET  /api/receipts/export.xlsx - Excel export of the (filtered) scoped list

Scoped reads always answer 200; ``scope_status`` tells an unassigned account
apart from a committee with no receipts.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from amc_receipts.auth.dependencies import require_feature
from amc_receipts.auth.permissions import Feature
from amc_receipts.exporters.csv_exporter import export_receipts_csv
from amc_receipts.exporters.excel_exporter import ExcelExporter
from amc_receipts.models.audit import AuditEventType
from amc_receipts.models.receipt import ReceiptCreate, ReceiptResponse
from amc_receipts.models.user import Profile
from amc_receipts.services.aggregation import summarize
from amc_receipts.services.audit_logger import AuditLogger
from amc_receipts.services.backend_service import Backend, get_audit_logger, get_backend
from amc_receipts.services.dashboard_service import get_matcher, load_scoped_view
from amc_receipts.services.receipt_filters import distinct_commodities, filter_receipts, verify_receipt
from amc_receipts.services.receipt_service import ReceiptService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/receipts", tags=["receipts"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ReceiptListResponse(BaseModel):
    scope_status: str
    total: int = Field(..., description="Receipts visible before filtering")
    count: int = Field(..., description="Receipts after filtering")
    total_value: float
    commodities: List[str]
    receipts: List[ReceiptResponse]


class VerifyRequest(BaseModel):
    committee: str = Field(..., min_length=1, description="Committee name or id")
    book_number: str = Field(..., min_length=1)
    receipt_number: str = Field(..., min_length=1)


class VerifyResponse(BaseModel):
    found: bool
    status: str
    receipt: Optional[ReceiptResponse] = None


async def _filtered_scope(principal, backend, q, committee, commodity):
    view = await load_scoped_view(principal, backend)
    visible = view.scope.visible_receipts
    return view, visible, filter_receipts(visible, search=q, committee=committee, commodity=commodity)


@router.get("", response_model=ReceiptListResponse)
async def list_receipts(
    q: Optional[str] = Query(None, description="Search trader, payee, book/receipt number, commodity"),
    committee: Optional[str] = Query(None, description="Committee name, or 'all'"),
    commodity: Optional[str] = Query(None, description="Commodity, or 'all'"),
    principal: Profile = Depends(require_feature(Feature.RECEIPT_LIST)),
    backend: Backend = Depends(get_backend),
) -> ReceiptListResponse:
    view, visible, filtered = await _filtered_scope(principal, backend, q, committee, commodity)
    return ReceiptListResponse(
        scope_status=view.status,
        total=len(visible),
        count=len(filtered),
        total_value=summarize(filtered).total_value,
        commodities=distinct_commodities(visible),
        receipts=[ReceiptResponse.from_row(row) for row in filtered],
    )


@router.post("", response_model=ReceiptResponse, status_code=status.HTTP_201_CREATED)
async def create_receipt(
    receipt: ReceiptCreate,
    principal: Profile = Depends(require_feature(Feature.RECEIPT_ENTRY)),
    backend: Backend = Depends(get_backend),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> ReceiptResponse:
    """Store a new receipt.

    Raises:
        ReceiptSubmissionError: Rendered as 422 (rejected data) or 502
            (backend failure) with the submitted payload echoed back
    """
    committees = await run_in_threadpool(backend.list_committees)
    service = ReceiptService(backend, audit_logger=audit_logger, matcher=get_matcher())
    stored = await run_in_threadpool(service.submit, principal, receipt, committees)
    return ReceiptResponse.from_row(stored)


@router.post("/verify", response_model=VerifyResponse)
async def verify(
    request: VerifyRequest,
    principal: Profile = Depends(require_feature(Feature.RECEIPT_VERIFY)),
    backend: Backend = Depends(get_backend),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> VerifyResponse:
    """Look a receipt up across all committees for checkpost verification."""
    receipts = await run_in_threadpool(backend.list_receipts)
    result = verify_receipt(receipts, request.committee, request.book_number, request.receipt_number)

    audit_logger.log(
        event_type=AuditEventType.RECEIPT_VERIFIED,
        actor=principal.actor,
        target_id=result.receipt.get("id") if result.receipt else None,
        data={
            "committee": request.committee,
            "book_number": request.book_number,
            "receipt_number": request.receipt_number,
            "status": result.status,
        },
    )
    return VerifyResponse(
        found=result.found,
        status=result.status,
        receipt=ReceiptResponse.from_row(result.receipt) if result.receipt else None,
    )


def _export_filename(extension: str) -> str:
    return f"receipts_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{extension}"


@router.get("/export.csv")
async def export_csv(
    q: Optional[str] = Query(None),
    committee: Optional[str] = Query(None),
    commodity: Optional[str] = Query(None),
    principal: Profile = Depends(require_feature(Feature.EXPORT)),
    backend: Backend = Depends(get_backend),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> Response:
    view, _, filtered = await _filtered_scope(principal, backend, q, committee, commodity)
    audit_logger.log(
        event_type=AuditEventType.RECEIPTS_EXPORTED,
        actor=principal.actor,
        data={"format": "csv", "count": len(filtered), "scope_status": view.status},
    )
    return Response(
        content=export_receipts_csv(filtered),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{_export_filename("csv")}"',
            "X-Scope-Status": view.status,
        },
    )


@router.get("/export.xlsx")
async def export_xlsx(
    q: Optional[str] = Query(None),
    committee: Optional[str] = Query(None),
    commodity: Optional[str] = Query(None),
    principal: Profile = Depends(require_feature(Feature.EXPORT)),
    backend: Backend = Depends(get_backend),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> Response:
    view, _, filtered = await _filtered_scope(principal, backend, q, committee, commodity)
    content = await run_in_threadpool(ExcelExporter().export_to_bytes, filtered)
    audit_logger.log(
        event_type=AuditEventType.RECEIPTS_EXPORTED,
        actor=principal.actor,
        data={"format": "xlsx", "count": len(filtered), "scope_status": view.status},
    )
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{_export_filename("xlsx")}"',
            "X-Scope-Status": view.status,
        },
    )
