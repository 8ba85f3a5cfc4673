"""Analytics API Endpoints

Endpoints:
- GET /api/analytics/summary         - Totals and breakdowns over the scope
- GET /api/analytics/traders         - Trader statistics, top traders, search
- GET /api/analytics/traders/{name}  - One trader's profile and monthly trend
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from amc_receipts.auth.dependencies import require_feature
from amc_receipts.auth.permissions import Feature
from amc_receipts.models.receipt import ReceiptResponse
from amc_receipts.models.user import Profile
from amc_receipts.services.aggregation import (
    active_traders_in_month,
    average_receipts_per_trader,
    by_commodity,
    by_committee,
    by_district,
    by_month,
    search_traders,
    summarize,
    top_n,
    top_traders,
    trader_profiles,
)
from amc_receipts.services.backend_service import Backend, get_backend
from amc_receipts.services.dashboard_service import load_scoped_view

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

TOP_COMMODITIES = 10


@router.get("/summary")
async def get_summary(
    principal: Profile = Depends(require_feature(Feature.ANALYTICS)),
    backend: Backend = Depends(get_backend),
) -> dict:
    view = await load_scoped_view(principal, backend)
    receipts = view.scope.visible_receipts
    committees = view.snapshot.committees
    return {
        "scope_status": view.status,
        "totals": summarize(receipts).as_dict(),
        "by_district": [group.as_dict() for group in by_district(receipts, committees)],
        "by_committee": [group.as_dict() for group in by_committee(receipts, committees)],
        "top_commodities": [group.as_dict() for group in top_n(by_commodity(receipts), TOP_COMMODITIES)],
        "monthly": [group.as_dict() for group in by_month(receipts)],
    }


@router.get("/traders")
async def get_traders(
    q: Optional[str] = Query(None, description="Case-insensitive trader name search"),
    limit: int = Query(10, ge=1, le=100, description="Number of top traders"),
    principal: Profile = Depends(require_feature(Feature.TRADER_ANALYTICS)),
    backend: Backend = Depends(get_backend),
) -> dict:
    view = await load_scoped_view(principal, backend)
    profiles = trader_profiles(view.scope.visible_receipts)
    matches = search_traders(profiles, q) if q else list(profiles.values())
    return {
        "scope_status": view.status,
        "total_traders": len(profiles),
        "active_this_month": active_traders_in_month(profiles),
        "average_receipts_per_trader": average_receipts_per_trader(profiles),
        "top_traders": [profile.as_dict() for profile in top_traders(profiles, limit)],
        "traders": [profile.as_dict() for profile in matches],
    }


@router.get("/traders/{name}")
async def get_trader(
    name: str,
    principal: Profile = Depends(require_feature(Feature.TRADER_ANALYTICS)),
    backend: Backend = Depends(get_backend),
) -> dict:
    view = await load_scoped_view(principal, backend)
    profile = trader_profiles(view.scope.visible_receipts).get(name)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Trader not found: {name}",
        )
    data = profile.as_dict(include_receipts=True)
    data["receipts"] = [ReceiptResponse.from_row(row) for row in profile.receipts]
    return data
