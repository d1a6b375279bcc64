"""
YDA Portal - Authentication Schemas
===================================
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from yda_portal.models.user import AppRole

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignInRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)


class SignUpRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    full_name: Optional[str] = Field(default=None, max_length=150)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=10)


class UserIdentity(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    is_active: bool = True
    last_sign_in_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserIdentity
    role: Optional[AppRole] = None


class GuardStateResponse(BaseModel):
    phase: str
    is_authenticated: bool
    loading: bool = False
    user: Optional[UserIdentity] = None
    role: Optional[AppRole] = None


class UserListItem(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    is_active: bool
    role: Optional[AppRole] = None
    last_sign_in_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class RoleUpdateRequest(BaseModel):
    role: AppRole
