"""JWT Token Management

JWT token creation and verification for principal authentication.

Design Decisions:
- Algorithm: HS256 (symmetric key)
- Secret: From JWT_SECRET environment variable
- Expiry: 12 hours default (one working shift at a checkpost)
- Claims: sub (user_id), role, committee, name, login_id, exp

The role and committee claims are informational; every request reloads the
profile from the backend so that reassignment takes effect immediately.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from pydantic import BaseModel

from amc_receipts.models.user import UserRole


SECRET_KEY = os.getenv("JWT_SECRET", "dev-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "12"))


class TokenData(BaseModel):
    """Data extracted from JWT token.

    Attributes:
        user_id: User UUID
        role: User role (DEO, Officer, Supervisor, JD)
        committee: Assigned committee label at issue time
        login_id: Login handle
    """
    user_id: UUID
    role: UserRole
    committee: Optional[str] = None
    login_id: Optional[str] = None


def create_access_token(
    user_id: UUID,
    role: UserRole,
    committee: Optional[str] = None,
    name: Optional[str] = None,
    login_id: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token.

    Args:
        user_id: User UUID
        role: User role
        committee: Assigned committee label (None for JD)
        name: Optional display name
        login_id: Optional login handle
        expires_delta: Token expiration time. If None, uses default

    Returns:
        JWT token as string
    """
    if expires_delta is None:
        expires_delta = timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)

    expire = datetime.now(timezone.utc) + expires_delta

    to_encode = {
        "sub": str(user_id),
        "role": UserRole(role).value,
        "exp": expire
    }
    if committee:
        to_encode["committee"] = committee
    if name:
        to_encode["name"] = name
    if login_id:
        to_encode["login_id"] = login_id

    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_access_token(token: str) -> Optional[TokenData]:
    """Verify a JWT access token and extract principal data.

    Returns:
        TokenData if token is valid, None if invalid/expired

    Example:
        >>> from uuid import uuid4
        >>> user_id = uuid4()
        >>> token = create_access_token(user_id, UserRole.DEO, committee="Tuni AMC")
        >>> verify_access_token(token).committee
        'Tuni AMC'
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])

        user_id_str: str = payload.get("sub")
        role_str: str = payload.get("role")

        if not user_id_str or not role_str:
            return None

        return TokenData(
            user_id=UUID(user_id_str),
            role=UserRole(role_str),
            committee=payload.get("committee"),
            login_id=payload.get("login_id"),
        )
    except (JWTError, ValueError):
        return None
