"""User-Organization membership with a per-organization role."""

import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from codecorps_shared.schemas.common import MembershipRole

from .base import TimestampMixin, UUIDMixin


class OrganizationMembership(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organization_memberships"
    __table_args__ = (
        UniqueConstraint("member_id", "organization_id", name="uq_membership_member_organization"),
    )

    member_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    role: str = Field(nullable=False, default=MembershipRole.PENDING.value)  # pending | contributor | admin | owner
