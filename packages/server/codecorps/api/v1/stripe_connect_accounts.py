"""
Stripe Connect account endpoints.

GET /api/v1/stripe-connect-accounts/{accountId} — Organization owners and platform admins only
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codecorps.core.auth import get_current_user
from codecorps.core.database import get_session
from codecorps.models.user import User
from codecorps.services import stripe_connect_accounts as account_service
from codecorps_shared.schemas.stripe_connect_accounts import StripeConnectAccountResponse

router = APIRouter()


@router.get("/{accountId}", response_model=StripeConnectAccountResponse)
async def show_account(
    accountId: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Get a Stripe Connect account."""
    account = await account_service.show_account(accountId, current_user, session)
    return StripeConnectAccountResponse.model_validate(account)
