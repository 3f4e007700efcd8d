# SQLModel definitions — imported here to ensure metadata is populated.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
from .organization_membership import OrganizationMembership  # noqa: F401
from .stripe_connect_account import StripeConnectAccount  # noqa: F401
