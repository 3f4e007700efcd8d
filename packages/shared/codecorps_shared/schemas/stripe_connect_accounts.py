"""Stripe Connect account schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class StripeConnectAccountResponse(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    id_from_stripe: str
    business_name: Optional[str] = None
    country: Optional[str] = None
    default_currency: Optional[str] = None
    email: Optional[str] = None
    charges_enabled: bool = False
    payouts_enabled: bool = False
    details_submitted: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}
