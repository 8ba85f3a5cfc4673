"""Dashboard navigation and overview endpoints.

Endpoints:
- GET /api/dashboard/menu     - Navigation entries for the principal's role
- GET /api/dashboard/overview - Headline totals over the principal's scope
"""

from fastapi import APIRouter, Depends, Query

from amc_receipts.auth.dependencies import get_current_principal, require_feature
from amc_receipts.auth.permissions import Feature, menu_for
from amc_receipts.models.receipt import ReceiptResponse
from amc_receipts.models.user import Profile
from amc_receipts.services.aggregation import summarize
from amc_receipts.services.backend_service import Backend, get_backend
from amc_receipts.services.dashboard_service import load_scoped_view

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/menu")
async def get_menu(principal: Profile = Depends(get_current_principal)) -> dict:
    return {
        "role": principal.role.value,
        "access_tier": principal.access_tier.value,
        "menu": menu_for(principal.role),
    }


@router.get("/overview")
async def get_overview(
    recent: int = Query(5, ge=0, le=50, description="Number of latest receipts to include"),
    principal: Profile = Depends(require_feature(Feature.OVERVIEW)),
    backend: Backend = Depends(get_backend),
) -> dict:
    view = await load_scoped_view(principal, backend)
    receipts = view.scope.visible_receipts
    return {
        "scope_status": view.status,
        "committees": [committee.name for committee in view.scope.visible_committees],
        "totals": summarize(receipts).as_dict(),
        "recent": [ReceiptResponse.from_row(row) for row in receipts[:recent]],
    }
