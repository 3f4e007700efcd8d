"""
Shared fixtures: an in-memory SQLite database per test and record factories.
"""

from __future__ import annotations

import itertools
import os

# Settings are read once at import time; keep tests fast and off Postgres/Redis.
os.environ.setdefault("CC_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CC_BCRYPT_ROUNDS", "4")

import pytest

from codecorps.core.auth import hash_password
from codecorps.core.config import Settings
from codecorps.core.database import build_engine, build_session_factory, init_db
from codecorps.core.storage import StoredFile, UploadError
from codecorps.models.organization import Organization
from codecorps.models.organization_membership import OrganizationMembership
from codecorps.models.stripe_connect_account import StripeConnectAccount
from codecorps.models.user import User


@pytest.fixture
async def engine():
    engine = build_engine(Settings(_env_file=None, database_url="sqlite+aiosqlite://"))
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with build_session_factory(engine)() as session:
        yield session


class Factory:
    """Inserts committed records with sensible, unique defaults."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._seq = itertools.count(1)

    async def _save(self, record):
        self.session.add(record)
        await self.session.commit()
        return record

    def build_user(self, **overrides) -> User:
        n = next(self._seq)
        password = overrides.pop("password", "password")
        attrs = {
            "email": f"user_{n}@codecorps.org",
            "username": f"user_{n}",
            "password_hash": hash_password(password),
        }
        attrs.update(overrides)
        attrs.setdefault("normalized_username", attrs["username"].lower())
        return User(**attrs)

    async def user(self, **overrides) -> User:
        return await self._save(self.build_user(**overrides))

    async def organization(self, **overrides) -> Organization:
        n = next(self._seq)
        attrs = {"name": f"Organization {n}", "slug": f"organization-{n}"}
        attrs.update(overrides)
        return await self._save(Organization(**attrs))

    async def membership(self, *, member: User, organization: Organization | None = None, role: str = "contributor") -> OrganizationMembership:
        if organization is None:
            organization = await self.organization()
        return await self._save(
            OrganizationMembership(member_id=member.id, organization_id=organization.id, role=role)
        )

    async def stripe_connect_account(self, *, organization: Organization | None = None, **overrides) -> StripeConnectAccount:
        if organization is None:
            organization = await self.organization()
        n = next(self._seq)
        attrs = {"organization_id": organization.id, "id_from_stripe": f"acct_{n:016d}"}
        attrs.update(overrides)
        return await self._save(StripeConnectAccount(**attrs))


@pytest.fixture
def factory(session):
    return Factory(session)


class FakeImageStore:
    """Records uploads in memory instead of writing files."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads: list[tuple[bytes, str]] = []
        self.deleted: list[str] = []

    def upload(self, data: bytes, extension: str) -> StoredFile:
        if self.fail:
            raise UploadError("storage unavailable")
        self.uploads.append((data, extension))
        file_name = f"photo-{len(self.uploads)}.{extension}"
        return StoredFile(file_name=file_name, path=f"/tmp/{file_name}")

    def delete(self, file_name: str) -> None:
        self.deleted.append(file_name)


@pytest.fixture
def image_store():
    return FakeImageStore()
