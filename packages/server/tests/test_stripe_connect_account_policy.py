"""
Tests for Stripe Connect account visibility.

Only platform admins and owners of the account's organization may view it;
organization admins, contributors and pending members may not.
"""

from __future__ import annotations

import uuid

import pytest

from codecorps.models.organization_membership import OrganizationMembership
from codecorps.models.user import User
from codecorps.policies.stripe_connect_account import can_view, permits_view


# ---------------------------------------------------------------------------
# Pure decision
# ---------------------------------------------------------------------------

class TestPermitsView:
    def _membership(self, role: str) -> OrganizationMembership:
        return OrganizationMembership(member_id=uuid.uuid4(), organization_id=uuid.uuid4(), role=role)

    def test_admin_without_membership(self):
        assert permits_view(User(admin=True), None)

    def test_admin_with_any_role(self):
        assert permits_view(User(admin=True), self._membership("pending"))

    def test_no_membership(self):
        assert not permits_view(User(), None)

    def test_owner(self):
        assert permits_view(User(), self._membership("owner"))

    @pytest.mark.parametrize("role", ["admin", "contributor", "pending", "superuser"])
    def test_other_roles(self, role):
        assert not permits_view(User(), self._membership(role))


# ---------------------------------------------------------------------------
# can_view
# ---------------------------------------------------------------------------

class TestCanView:
    async def test_returns_true_when_user_is_an_admin(self, session, factory):
        user = factory.build_user(admin=True)
        account = await factory.stripe_connect_account()
        assert await can_view(user, account, session)

    async def test_returns_true_when_user_is_owner_of_organization(self, session, factory):
        user = await factory.user()
        organization = await factory.organization()
        await factory.membership(role="owner", member=user, organization=organization)
        account = await factory.stripe_connect_account(organization=organization)
        assert await can_view(user, account, session)

    async def test_returns_false_when_user_is_admin_of_organization(self, session, factory):
        user = await factory.user()
        organization = await factory.organization()
        await factory.membership(role="admin", member=user, organization=organization)
        account = await factory.stripe_connect_account(organization=organization)
        assert not await can_view(user, account, session)

    async def test_returns_false_when_user_is_not_member_of_organization(self, session, factory):
        user = await factory.user()
        account = await factory.stripe_connect_account()
        assert not await can_view(user, account, session)

    async def test_returns_false_when_user_is_pending_member_of_organization(self, session, factory):
        user = await factory.user()
        organization = await factory.organization()
        await factory.membership(role="pending", member=user, organization=organization)
        account = await factory.stripe_connect_account(organization=organization)
        assert not await can_view(user, account, session)

    async def test_returns_false_when_user_is_contributor_of_organization(self, session, factory):
        user = await factory.user()
        organization = await factory.organization()
        await factory.membership(role="contributor", member=user, organization=organization)
        account = await factory.stripe_connect_account(organization=organization)
        assert not await can_view(user, account, session)

    async def test_owner_of_another_organization(self, session, factory):
        user = await factory.user()
        await factory.membership(role="owner", member=user)
        account = await factory.stripe_connect_account()
        assert not await can_view(user, account, session)
