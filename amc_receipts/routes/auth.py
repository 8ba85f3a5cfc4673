"""Authentication API Routes

Endpoints:
- POST /api/auth/login - Login with login ID or email + password
- GET  /api/auth/me    - Current principal and access tier
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from amc_receipts.auth.dependencies import get_current_principal
from amc_receipts.auth.jwt import create_access_token
from amc_receipts.auth.password import verify_password
from amc_receipts.auth.permissions import menu_for
from amc_receipts.models.audit import AuditEventType
from amc_receipts.models.user import AccessTier, Profile, UserResponse, UserRole
from amc_receipts.repositories.user_repository import UserRepository
from amc_receipts.services.audit_logger import AuditLogger
from amc_receipts.services.backend_service import get_audit_logger, get_user_repository

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    """Login request payload.

    Attributes:
        login_id: Login handle (e.g. "deo") or email address
        password: Plain text password
    """
    login_id: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse


class PrincipalResponse(BaseModel):
    user_id: str
    login_id: Optional[str]
    name: str
    role: UserRole
    committee: Optional[str]
    access_tier: AccessTier
    menu: List[dict]


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    repo: UserRepository = Depends(get_user_repository),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> LoginResponse:
    """Authenticate user and return JWT token.

    Lookup priority: 1) email, 2) login_id

    Raises:
        HTTPException 401: If credentials invalid or account inactive
    """
    user = repo.find_for_login(request.login_id)

    if not user or not verify_password(request.password, user.password_hash):
        audit_logger.log(
            event_type=AuditEventType.LOGIN_FAILED,
            actor=request.login_id,
            data={"reason": "invalid_credentials"},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid login ID or password"
        )

    if not user.is_active:
        audit_logger.log(
            event_type=AuditEventType.LOGIN_FAILED,
            actor=user.login_id,
            target_id=user.user_id,
            data={"reason": "inactive"},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is inactive"
        )

    access_token = create_access_token(
        user_id=user.user_id,
        role=user.role,
        committee=user.committee,
        name=user.name,
        login_id=user.login_id
    )
    audit_logger.log(
        event_type=AuditEventType.LOGIN_SUCCEEDED,
        actor=user.login_id,
        target_id=user.user_id,
        data={"role": user.role},
    )

    return LoginResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.from_user(user)
    )


@router.get("/me", response_model=PrincipalResponse)
async def me(principal: Profile = Depends(get_current_principal)) -> PrincipalResponse:
    return PrincipalResponse(
        user_id=str(principal.user_id),
        login_id=principal.login_id,
        name=principal.name,
        role=principal.role,
        committee=principal.committee,
        access_tier=principal.access_tier,
        menu=menu_for(principal.role),
    )
