"""Stripe Connect account owned by an organization."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class StripeConnectAccount(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "stripe_connect_accounts"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    id_from_stripe: str = Field(unique=True, nullable=False, index=True)
    business_name: Optional[str] = None
    country: Optional[str] = None
    default_currency: Optional[str] = None
    email: Optional[str] = None
    charges_enabled: bool = Field(default=False, nullable=False)
    payouts_enabled: bool = Field(default=False, nullable=False)
    details_submitted: bool = Field(default=False, nullable=False)
