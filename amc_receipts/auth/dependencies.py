"""Authentication Dependencies

FastAPI dependencies for protecting routes and extracting the principal.

Usage:
    @router.get("/protected")
    async def protected_route(principal: Profile = Depends(get_current_principal)):
        return {"user": principal.name}

    @router.get("/export", dependencies=[Depends(require_feature(Feature.EXPORT))])
    async def export(): ...
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from amc_receipts.auth.jwt import verify_access_token
from amc_receipts.auth.permissions import Feature, has_feature
from amc_receipts.models.user import Profile
from amc_receipts.services.backend_service import Backend, get_backend

# HTTP Bearer token security
security = HTTPBearer()


async def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    backend: Backend = Depends(get_backend),
) -> Profile:
    """Verify the bearer token and load the principal's profile.

    The profile (role and committee assignment) is read from the backend on
    every request; the token's role claim is not trusted for scoping.

    Raises:
        HTTPException 401: If token is invalid, expired, or profile missing/inactive
    """
    token_data = verify_access_token(credentials.credentials)
    if not token_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    profile = await run_in_threadpool(backend.get_profile, token_data.user_id)

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"}
        )

    if not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
            headers={"WWW-Authenticate": "Bearer"}
        )

    request.state.principal = profile
    return profile


def require_feature(feature: Feature):
    """Dependency factory: 403 unless the principal's role grants ``feature``."""

    async def _guard(principal: Profile = Depends(get_current_principal)) -> Profile:
        if not has_feature(principal.role, feature):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {principal.role.value} cannot access {feature.value}",
            )
        return principal

    return _guard
