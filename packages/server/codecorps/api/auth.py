"""
Authentication endpoints.

- Email/password login returning a bearer JWT
- Logout (token revocation)
- Current user
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from codecorps.core.auth import (
    create_jwt,
    get_current_user,
    get_token_payload,
    revoke_jwt,
)
from codecorps.core.config import get_settings
from codecorps.core.database import get_session
from codecorps.models.user import User
from codecorps.services.users import authenticate
from codecorps_shared.schemas.users import LoginRequest, TokenResponse, UserResponse

log = structlog.get_logger()
router = APIRouter()


@router.post("/token", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    """Exchange email/password credentials for a bearer token."""
    user = await authenticate(body.email, body.password, session)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token, _ = create_jwt(user.id, admin=user.admin)
    log.info("auth.login", user_id=str(user.id))
    return TokenResponse(
        access_token=token,
        expires_in=get_settings().jwt_expire_minutes * 60,
    )


@router.post("/logout", status_code=204)
async def logout(payload: dict = Depends(get_token_payload)):
    """Revoke the presented token for the rest of its lifetime."""
    jti = payload.get("jti")
    if jti:
        remaining = int(payload.get("exp", 0) - datetime.now(timezone.utc).timestamp())
        await revoke_jwt(jti, ttl_seconds=max(remaining, 1))
    log.info("auth.logout", user_id=payload.get("sub"))
    return Response(status_code=204)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    """The authenticated user."""
    return UserResponse.model_validate(user)
