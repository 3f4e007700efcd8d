"""
User API endpoints.

POST   /api/v1/users            — Register
GET    /api/v1/users/{userId}   — Get user profile
PATCH  /api/v1/users/{userId}   — Update profile / onboarding state (self or platform admin)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from codecorps.core.auth import get_current_user
from codecorps.core.database import get_session
from codecorps.core.storage import ImageStore, get_image_store
from codecorps.models.user import User
from codecorps.services import users as user_service
from codecorps_shared.schemas.users import (
    UserRegisterRequest,
    UserResponse,
    UserUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=201, tags=["Users"])
async def register(
    body: UserRegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register a new user with email, username and password."""
    user = await user_service.create_user(body.model_dump(exclude_unset=True), session)
    return UserResponse.model_validate(user)


@router.get("/{userId}", response_model=UserResponse, tags=["Users"])
async def get_user(
    userId: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    """Get a user's public profile."""
    user = await user_service.get_user(userId, session)
    return UserResponse.model_validate(user)


@router.patch("/{userId}", response_model=UserResponse, tags=["Users"])
async def update_user(
    userId: uuid.UUID,
    body: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    image_store: ImageStore = Depends(get_image_store),
    session: AsyncSession = Depends(get_session),
):
    """Update a profile. Only keys present in the body are changed."""
    if current_user.id != userId and not current_user.admin:
        raise HTTPException(status_code=403, detail="Only the user or an admin can update this profile")

    user = await user_service.get_user(userId, session)
    user = await user_service.update_user(
        user,
        body.model_dump(exclude_unset=True),
        session,
        image_store=image_store,
    )
    return UserResponse.model_validate(user)
