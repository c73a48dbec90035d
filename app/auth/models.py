# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
#
# AuthUser is the per-request session context: routers pass user.id into
# every service call, nothing reads the user from global state.
# =============================================================================

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class AuthUser(BaseModel):
    """
    Authenticated user extracted from a Supabase JWT.

    Only what the token itself carries, no database lookup.
    """
    id: UUID
    email: Optional[str] = None
    role: Optional[str] = None

    class Config:
        frozen = True  # Make immutable


class ProfileResponse(BaseModel):
    """
    The user's profile row (public.profiles) plus their active plan.
    """
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    plan: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenPayload(BaseModel):
    """
    Decoded JWT payload from Supabase Auth.

    Extra claims (app_metadata, session_id, ...) are ignored.
    """
    sub: UUID  # User ID
    email: Optional[str] = None
    aud: str  # Audience ("authenticated")
    exp: int
    iat: Optional[int] = None
    role: Optional[str] = None

    def to_user(self) -> AuthUser:
        return AuthUser(id=self.sub, email=self.email, role=self.role)
