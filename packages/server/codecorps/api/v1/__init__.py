"""
API v1 Router
"""

from fastapi import APIRouter
from . import stripe_connect_accounts, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(
    stripe_connect_accounts.router,
    prefix="/stripe-connect-accounts",
    tags=["Stripe Connect Accounts"],
)


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/users",
            "/users/{userId}",
            "/stripe-connect-accounts/{accountId}",
        ],
    }
