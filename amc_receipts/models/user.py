"""User model for authentication and committee-scoped access.

Design Decisions:
- UUID for user_id
- login_id (e.g. "deo") is the primary login handle, email is optional
- Role enum for access control, mapped onto a closed AccessTier table
- Assigned committee stored as the free-text label the administrator entered
- Password stored as bcrypt hash
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, EmailStr, Field


class AccessTier(str, Enum):
    """How much committee data a role may read.

    DIRECTOR_WIDE: every committee and receipt
    COMMITTEE_SCOPED: only the principal's assigned committee
    NONE: no list/analytics visibility
    """
    DIRECTOR_WIDE = "DIRECTOR_WIDE"
    COMMITTEE_SCOPED = "COMMITTEE_SCOPED"
    NONE = "NONE"


class UserRole(str, Enum):
    """User role types for access control.

    DEO: Data entry operator (enters receipts for their committee)
    OFFICER: Checkpost officer (verifies receipts at checkposts)
    SUPERVISOR: Committee supervisor (reviews and exports committee receipts)
    JD: Joint director (district-wide view, manages users)
    """
    DEO = "DEO"
    OFFICER = "Officer"
    SUPERVISOR = "Supervisor"
    JD = "JD"

    @property
    def access_tier(self) -> AccessTier:
        return ROLE_ACCESS_TIER[self]


ROLE_ACCESS_TIER = {
    UserRole.JD: AccessTier.DIRECTOR_WIDE,
    UserRole.SUPERVISOR: AccessTier.COMMITTEE_SCOPED,
    UserRole.DEO: AccessTier.COMMITTEE_SCOPED,
    UserRole.OFFICER: AccessTier.NONE,
}


class User(BaseModel):
    """User domain model for authentication and identity.

    Attributes:
        user_id: Unique identifier (UUID)
        login_id: Human-friendly login identifier (e.g., deo, tuni_sup)
        name: Display name
        email: Optional email address (also accepted at login)
        password_hash: Bcrypt hashed password
        role: User role (DEO, Officer, Supervisor, JD)
        committee: Assigned committee label (None for JD)
        is_active: Whether user account is active
        created_at: Account creation timestamp
    """

    user_id: UUID = Field(default_factory=uuid4)
    login_id: Optional[str] = Field(None, description="Human-friendly login ID")
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(None, description="Email for login (optional)")
    password_hash: str = Field(..., description="Bcrypt hash of password")
    role: UserRole = Field(default=UserRole.DEO)
    committee: Optional[str] = Field(None, description="Assigned committee label")
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def access_tier(self) -> AccessTier:
        return self.role.access_tier


class Profile(BaseModel):
    """Stored profile of the logged-in principal (role and committee assignment)."""
    user_id: UUID
    login_id: Optional[str] = None
    name: str
    role: UserRole
    committee: Optional[str] = None
    is_active: bool = True

    @property
    def access_tier(self) -> AccessTier:
        return self.role.access_tier

    @property
    def actor(self) -> str:
        return self.login_id or str(self.user_id)

    @classmethod
    def from_user(cls, user: User) -> Profile:
        return cls(
            user_id=user.user_id,
            login_id=user.login_id,
            name=user.name,
            role=user.role,
            committee=user.committee,
            is_active=user.is_active,
        )


class UserCreate(BaseModel):
    """Request model for creating a new user."""
    login_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: str = Field(..., min_length=6, description="Plain password (will be hashed)")
    role: UserRole = Field(default=UserRole.DEO)
    committee: Optional[str] = None


class UserUpdate(BaseModel):
    """Partial update for an existing user. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    committee: Optional[str] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    """Public user info (no password hash)."""
    user_id: UUID
    login_id: Optional[str]
    name: str
    email: Optional[str]
    role: UserRole
    committee: Optional[str]
    is_active: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        """Convert User to safe response model."""
        return cls(
            user_id=user.user_id,
            login_id=user.login_id,
            name=user.name,
            email=user.email,
            role=user.role,
            committee=user.committee,
            is_active=user.is_active,
            created_at=user.created_at
        )
