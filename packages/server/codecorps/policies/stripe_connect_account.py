"""
Visibility rules for Stripe Connect accounts.

Payment account details are visible to platform administrators and to the
owner of the organization the account belongs to. Organization admins,
contributors and pending members are refused.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from codecorps.models.organization_membership import OrganizationMembership
from codecorps.models.stripe_connect_account import StripeConnectAccount
from codecorps.models.user import User
from codecorps_shared.schemas.common import MembershipRole

# Membership roles that grant access to an organization's payment accounts
PAYMENT_ACCOUNT_ROLES: frozenset[MembershipRole] = frozenset({MembershipRole.OWNER})


def permits_view(actor: User, membership: Optional[OrganizationMembership]) -> bool:
    """Pure decision over the actor's admin flag and membership role."""
    if actor.admin:
        return True
    if membership is None:
        return False
    try:
        role = MembershipRole(membership.role)
    except ValueError:
        return False
    return role in PAYMENT_ACCOUNT_ROLES


async def get_membership(
    user_id: uuid.UUID, organization_id: Optional[uuid.UUID], session: AsyncSession
) -> Optional[OrganizationMembership]:
    if organization_id is None:
        return None
    result = await session.execute(
        select(OrganizationMembership).where(
            OrganizationMembership.member_id == user_id,
            OrganizationMembership.organization_id == organization_id,
        )
    )
    return result.scalar_one_or_none()


async def can_view(
    actor: User, account: StripeConnectAccount, session: AsyncSession
) -> bool:
    if actor.admin:
        return True
    membership = await get_membership(actor.id, account.organization_id, session)
    return permits_view(actor, membership)
