"""Committee listing for the principal's scope."""

from fastapi import APIRouter, Depends

from amc_receipts.auth.dependencies import get_current_principal
from amc_receipts.models.user import Profile
from amc_receipts.services.backend_service import Backend, get_backend
from amc_receipts.services.dashboard_service import load_scoped_view

router = APIRouter(prefix="/api/committees", tags=["committees"])


@router.get("")
async def list_committees(
    principal: Profile = Depends(get_current_principal),
    backend: Backend = Depends(get_backend),
) -> dict:
    """Committees visible to the principal, in backend order.

    ``all_committees`` is the full list for counterparty selection on the
    receipt entry form.
    """
    view = await load_scoped_view(principal, backend)
    return {
        "scope_status": view.status,
        "committees": [committee.model_dump() for committee in view.scope.visible_committees],
        "all_committees": [
            {"id": committee.id, "name": committee.name}
            for committee in view.snapshot.committees
        ],
    }
