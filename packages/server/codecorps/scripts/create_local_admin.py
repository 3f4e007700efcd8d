"""
Create a platform administrator account for local development.

Usage:
    python -m codecorps.scripts.create_local_admin --email admin@codecorps.org \
        --username admin --password secret123
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from sqlmodel import select

from codecorps.core.changeset import ValidationFailed
from codecorps.core.database import get_session_context, init_db
from codecorps.models.user import User
from codecorps.services.users import create_user


async def create_admin(email: str, username: str, password: str) -> User:
    """Register ``email`` as an admin, or promote the existing account."""
    async with get_session_context() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is not None:
            user.admin = True
            session.add(user)
            print(f"Promoted existing user {email} to admin.")
            return user

        user = await create_user(
            {"email": email, "username": username, "password": password},
            session,
            admin=True,
        )
        print(f"Created admin user: {email}")
        return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a local admin user.")
    parser.add_argument("--email", required=True, help="Email address for the user")
    parser.add_argument("--username", required=True, help="Username for the user")
    parser.add_argument("--password", required=True, help="Password for the user")
    parser.add_argument("--init-db", action="store_true", help="Create tables first")
    args = parser.parse_args(argv)

    async def run() -> None:
        if args.init_db:
            await init_db()
        await create_admin(args.email, args.username, args.password)

    try:
        asyncio.run(run())
    except ValidationFailed as exc:
        for error in exc.changeset.errors:
            print(f"{error.field} {error.render()}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
