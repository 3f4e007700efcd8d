"""
User service — registration and profile changesets, the onboarding state
machine, and persistence with unique-index conflict translation.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from codecorps.core.auth import hash_password, verify_password
from codecorps.core.changeset import Changeset, ValidationFailed
from codecorps.core.config import get_settings
from codecorps.core.storage import (
    ImageStore,
    InvalidImageData,
    UploadError,
    decode_image_data,
    get_image_store,
)
from codecorps.core.validators import (
    ensure_url_scheme,
    is_email,
    is_twitter_handle,
    is_url,
)
from codecorps.models.user import USERNAME_MAX_LENGTH, User

log = structlog.get_logger()

PASSWORD_MIN_LENGTH = 6

IDENTITY_FIELDS = ("email", "username")
PROFILE_FIELDS = ("first_name", "last_name", "biography", "twitter", "website")

# Fragments of unique index / column names as reported by the database driver
UNIQUE_INDEX_FIELDS = (
    ("normalized_username", "username"),
    ("email", "email"),
)


def normalize_username(username: str) -> str:
    return username.lower()


# ---------------------------------------------------------------------------
# Onboarding state machine
# ---------------------------------------------------------------------------

def transition_target(
    current: str,
    transition: str,
    transitions: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> Optional[str]:
    """State reached by applying ``transition`` in ``current``, or None."""
    if transitions is None:
        transitions = get_settings().user_state_transitions
    return transitions.get(current, {}).get(transition)


def can_transition(
    current: str,
    transition: str,
    transitions: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> bool:
    return transition_target(current, transition, transitions) is not None


def put_state_transition(
    cs: Changeset,
    transition: Optional[str],
    transitions: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> Changeset:
    if transition is None:
        return cs
    current = cs.data.state
    target = transition_target(current, transition, transitions)
    if target is None:
        cs.add_error(
            "state_transition",
            f"invalid transition {transition} from {current}",
            first=True,
            validation="transition",
            transition=transition,
            state=current,
        )
    else:
        cs.put_change("state", target)
    return cs


# ---------------------------------------------------------------------------
# Changesets
# ---------------------------------------------------------------------------

def _validate_identity(cs: Changeset, attrs: Mapping) -> Changeset:
    cs.cast(attrs, IDENTITY_FIELDS)
    cs.validate_required(IDENTITY_FIELDS)
    cs.validate_format("email", is_email)
    cs.validate_length("username", min=1, max=USERNAME_MAX_LENGTH)
    username = cs.get_change("username")
    if username is not None:
        cs.put_change("normalized_username", normalize_username(username))
    return cs


def changeset(user: User, attrs: Mapping) -> Changeset:
    """Base changeset: email and username."""
    return _validate_identity(Changeset(data=user), attrs)


def registration_changeset(user: User, attrs: Mapping) -> Changeset:
    """Sign-up changeset. The raw password is replaced by its bcrypt hash."""
    cs = changeset(user, attrs)
    cs.cast(attrs, ("password",))
    cs.validate_required(["password"])
    cs.validate_length("password", min=PASSWORD_MIN_LENGTH)

    password = cs.changes.pop("password", None)
    if cs.valid and password is not None:
        cs.put_change("password_hash", hash_password(password))
    return cs


def put_photo(
    cs: Changeset, raw: Optional[str], image_store: Optional[ImageStore] = None
) -> Changeset:
    if raw is None:
        return cs
    try:
        image = decode_image_data(raw)
    except InvalidImageData:
        cs.add_error("photo", "has invalid format", validation="format")
        return cs
    # nothing is uploaded for a changeset that will be rejected anyway
    if not cs.valid:
        return cs

    store = image_store if image_store is not None else get_image_store()
    try:
        stored = store.upload(image.data, image.extension)
    except UploadError as exc:
        log.warning("photo.upload_failed", user_id=str(cs.data.id), error=str(exc))
        cs.add_error("photo", "could not be uploaded", validation="upload")
        return cs
    cs.put_change("photo", stored.file_name)
    return cs


def discard_photo(store: ImageStore, file_name: Optional[str]) -> None:
    """Remove a photo uploaded for an update that was not saved."""
    if file_name is None:
        return
    try:
        store.delete(file_name)
    except UploadError as exc:
        log.warning("photo.discard_failed", file_name=file_name, error=str(exc))


def update_changeset(
    user: User,
    attrs: Mapping,
    *,
    image_store: Optional[ImageStore] = None,
    transitions: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> Changeset:
    """Profile update changeset.

    A rejected ``state_transition`` invalidates the whole update: its error is
    the only one reported and no other field is cast or uploaded.
    """
    cs = put_state_transition(Changeset(data=user), attrs.get("state_transition"), transitions)
    if not cs.valid:
        return cs

    _validate_identity(cs, attrs)
    cs.cast(attrs, PROFILE_FIELDS)
    cs.update_change("website", ensure_url_scheme)
    cs.validate_format("website", is_url)
    cs.validate_format("twitter", is_twitter_handle)
    return put_photo(cs, attrs.get("base64_photo_data"), image_store)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def _unique_violation_field(exc: IntegrityError) -> Optional[str]:
    message = str(exc.orig)
    for fragment, field in UNIQUE_INDEX_FIELDS:
        if fragment in message:
            return field
    return None


async def _flush(session: AsyncSession, user: User, cs: Changeset) -> None:
    """Flush ``user``; unique index violations become field errors on ``cs``."""
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        field = _unique_violation_field(exc)
        if field is None:
            raise
        cs.add_error(field, "has already been taken", validation="unsafe_unique")
        log.info("user.registration_conflict", field=field)
        raise ValidationFailed(cs) from exc


async def create_user(
    attrs: Mapping, session: AsyncSession, *, admin: bool = False
) -> User:
    """Register a user. Raises ValidationFailed with every field error."""
    cs = registration_changeset(User(), attrs)
    if not cs.valid:
        raise ValidationFailed(cs)

    user = cs.apply()
    user.admin = admin
    await _flush(session, user, cs)

    log.info("user.registered", user_id=str(user.id), username=user.username, admin=admin)
    return user


async def update_user(
    user: User,
    attrs: Mapping,
    session: AsyncSession,
    *,
    image_store: Optional[ImageStore] = None,
) -> User:
    """Apply a profile update. Raises ValidationFailed when rejected."""
    previous_state = user.state
    store = image_store if image_store is not None else get_image_store()
    cs = update_changeset(user, attrs, image_store=store)
    if not cs.valid:
        raise ValidationFailed(cs)
    if not cs.changes:
        return user

    cs.apply()
    try:
        await _flush(session, user, cs)
    except (ValidationFailed, IntegrityError):
        discard_photo(store, cs.get_change("photo"))
        raise

    if user.state != previous_state:
        log.info(
            "user.transitioned",
            user_id=str(user.id),
            transition=attrs.get("state_transition"),
            from_state=previous_state,
            to_state=user.state,
        )
    log.info("user.updated", user_id=str(user.id), fields=sorted(cs.changes))
    return user


async def get_user(user_id: uuid.UUID, session: AsyncSession) -> User:
    """Get a user by id; raises 404 if not found."""
    user = await session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def authenticate(
    email: str, password: str, session: AsyncSession
) -> Optional[User]:
    """Return the user for valid email/password credentials, else None."""
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None or user.password_hash is None:
        log.info("auth.login_failed", reason="unknown_user")
        return None
    if not verify_password(password, user.password_hash):
        log.info("auth.login_failed", reason="bad_password", user_id=str(user.id))
        return None
    return user
