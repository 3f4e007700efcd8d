"""User model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from codecorps_shared.schemas.common import UserState

from .base import TimestampMixin, UUIDMixin

USERNAME_MAX_LENGTH = 39


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(nullable=False, unique=True, index=True)
    username: str = Field(nullable=False, max_length=USERNAME_MAX_LENGTH)
    # lower-cased username; the unique index makes usernames case-insensitive
    normalized_username: str = Field(nullable=False, unique=True, index=True)
    password_hash: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    biography: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None
    photo: Optional[str] = None  # stored file name
    state: str = Field(default=UserState.SIGNED_UP.value, nullable=False)
    admin: bool = Field(default=False, nullable=False)
