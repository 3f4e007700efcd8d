"""
Stripe Connect account service — lookups guarded by the visibility policy.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from codecorps.models.stripe_connect_account import StripeConnectAccount
from codecorps.models.user import User
from codecorps.policies.stripe_connect_account import can_view

log = structlog.get_logger()


async def get_account(account_id: uuid.UUID, session: AsyncSession) -> StripeConnectAccount:
    """Get an account by id; raises 404 if not found."""
    account = await session.get(StripeConnectAccount, account_id)
    if account is None:
        raise HTTPException(status_code=404, detail="Stripe Connect account not found")
    return account


async def show_account(
    account_id: uuid.UUID, actor: User, session: AsyncSession
) -> StripeConnectAccount:
    """Get an account the actor is allowed to see; raises 403 otherwise."""
    account = await get_account(account_id, session)
    if not await can_view(actor, account, session):
        log.info(
            "stripe_connect_account.view_denied",
            account_id=str(account_id),
            user_id=str(actor.id),
        )
        raise HTTPException(status_code=403, detail="Not allowed to view this account")
    return account
