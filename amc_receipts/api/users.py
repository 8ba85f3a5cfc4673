"""User management endpoints (JD only).

Endpoints:
- GET    /api/users            - List accounts
- POST   /api/users            - Create an account
- PATCH  /api/users/{user_id}  - Change name, email, role, committee or active flag
- DELETE /api/users/{user_id}  - Remove an account
"""

import logging
import sqlite3
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from amc_receipts.auth.dependencies import require_feature
from amc_receipts.auth.password import hash_password
from amc_receipts.auth.permissions import Feature
from amc_receipts.models.audit import AuditEventType
from amc_receipts.models.user import Profile, User, UserCreate, UserResponse, UserUpdate
from amc_receipts.repositories.user_repository import UserRepository
from amc_receipts.services.audit_logger import AuditLogger
from amc_receipts.services.backend_service import get_audit_logger, get_user_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

admin_only = require_feature(Feature.USER_MANAGEMENT)


@router.get("", response_model=List[UserResponse])
async def list_users(
    principal: Profile = Depends(admin_only),
    repo: UserRepository = Depends(get_user_repository),
) -> List[UserResponse]:
    return [UserResponse.from_user(user) for user in repo.list_users()]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreate,
    principal: Profile = Depends(admin_only),
    repo: UserRepository = Depends(get_user_repository),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> UserResponse:
    """Create an account.

    Raises:
        HTTPException 409: If the login ID or email is already taken
    """
    user = User(
        login_id=request.login_id.strip().lower(),
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password),
        role=request.role,
        committee=request.committee or None,
    )
    try:
        repo.create_user(user)
    except sqlite3.IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Login ID or email already exists: {user.login_id}",
        )

    audit_logger.log(
        event_type=AuditEventType.USER_CREATED,
        actor=principal.actor,
        target_id=user.user_id,
        data={"login_id": user.login_id, "role": user.role, "committee": user.committee},
    )
    logger.info("User %s created by %s", user.login_id, principal.actor)
    return UserResponse.from_user(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    changes: UserUpdate,
    principal: Profile = Depends(admin_only),
    repo: UserRepository = Depends(get_user_repository),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> UserResponse:
    try:
        updated = repo.update_user(user_id, changes)
    except sqlite3.IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already exists",
        )
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    audit_logger.log(
        event_type=AuditEventType.USER_UPDATED,
        actor=principal.actor,
        target_id=user_id,
        data={"changes": changes.model_dump(exclude_unset=True)},
    )
    return UserResponse.from_user(updated)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    principal: Profile = Depends(admin_only),
    repo: UserRepository = Depends(get_user_repository),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> Response:
    if user_id == principal.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )
    if not repo.delete_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    audit_logger.log(
        event_type=AuditEventType.USER_DELETED,
        actor=principal.actor,
        target_id=user_id,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
