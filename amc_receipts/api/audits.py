"""Read-Only Audit API Endpoints (JD only)

Endpoints:
- GET /api/audits/recent             - Get recent audit events
- GET /api/audits/type/{event_type}  - Get events by type
- GET /api/audits/target/{target_id} - Get events for one receipt or user
- GET /api/audits/stats              - Total event count
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from amc_receipts.auth.dependencies import require_feature
from amc_receipts.auth.permissions import Feature
from amc_receipts.models.audit import AuditEvent, AuditEventType
from amc_receipts.repositories.audit_repository import AuditRepository
from amc_receipts.services.audit_logger import AuditLogger
from amc_receipts.services.backend_service import get_audit_logger

router = APIRouter(
    prefix="/api/audits",
    tags=["audit"],
    dependencies=[Depends(require_feature(Feature.AUDIT_TRAIL))],
)


def get_audit_repository(audit_logger: AuditLogger = Depends(get_audit_logger)) -> AuditRepository:
    """Read from the same store the audit logger writes to."""
    return audit_logger.repository


# ============================================================================
# Response Models
# ============================================================================

class AuditEventResponse(BaseModel):
    """Response model for audit event with JSON-safe serialization."""

    event_id: str = Field(..., description="Unique event identifier")
    event_type: str = Field(..., description="Type of audit event")
    timestamp: str = Field(..., description="When event occurred (ISO 8601)")
    actor: str = Field(..., description="Who performed the action")
    target_id: Optional[str] = Field(None, description="Affected receipt or user")
    data: dict = Field(..., description="Event-specific metadata")
    created_at: str = Field(..., description="When event was written to audit log (ISO 8601)")


def _audit_event_to_response(event: AuditEvent) -> AuditEventResponse:
    return AuditEventResponse(
        event_id=str(event.event_id),
        event_type=event.event_type.value,
        timestamp=event.timestamp.isoformat(),
        actor=event.actor,
        target_id=event.target_id,
        data=event.data,
        created_at=event.created_at.isoformat(),
    )


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/recent", response_model=List[AuditEventResponse])
async def get_recent_audit_events(
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of events to return"),
    repository: AuditRepository = Depends(get_audit_repository),
) -> List[AuditEventResponse]:
    """Most recent events first."""
    return [_audit_event_to_response(event) for event in repository.get_recent_events(limit=limit)]


@router.get("/type/{event_type}", response_model=List[AuditEventResponse])
async def get_audit_events_by_type(
    event_type: str,
    limit: int = Query(200, ge=1, le=1000),
    repository: AuditRepository = Depends(get_audit_repository),
) -> List[AuditEventResponse]:
    """Events of one type, newest first.

    Raises:
        HTTPException(400): If event_type is invalid
    """
    try:
        event_type_enum = AuditEventType(event_type)
    except ValueError:
        valid_types = [et.value for et in AuditEventType]
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Invalid event_type: '{event_type}'. "
                f"Valid types: {', '.join(valid_types)}"
            )
        )
    events = repository.get_events_by_type(event_type_enum, limit=limit)
    return [_audit_event_to_response(event) for event in events]


@router.get("/target/{target_id}", response_model=List[AuditEventResponse])
async def get_audit_trail_for_target(
    target_id: str,
    limit: int = Query(200, ge=1, le=1000),
    repository: AuditRepository = Depends(get_audit_repository),
) -> List[AuditEventResponse]:
    events = repository.get_events_for_target(target_id, limit=limit)
    return [_audit_event_to_response(event) for event in events]


@router.get("/stats")
async def get_audit_stats(repository: AuditRepository = Depends(get_audit_repository)) -> dict:
    return {
        "total_events": repository.count_events(),
        "event_types": [et.value for et in AuditEventType],
    }
