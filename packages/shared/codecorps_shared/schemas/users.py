"""User account schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

# Field-level rules (format, length, uniqueness) live in the user changesets so
# that every violation is reported together; these models only shape the body.

class UserRegisterRequest(BaseModel):
    """Sign up with email, username and password."""
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class UserUpdateRequest(BaseModel):
    """Profile update. Only the keys present in the body are changed."""
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    biography: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None
    base64_photo_data: Optional[str] = Field(
        default=None,
        description="data:<mime>;base64,<payload> image URI",
    )
    state_transition: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    biography: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None
    photo: Optional[str] = None
    state: str
    admin: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
