#!/usr/bin/env python3
"""
Demo seed script — provisions the initial admin account.

!! NOT FOR PRODUCTION !!
Self-registration always produces role "user", so the first admin has to be
written straight through the repository. This script does that, plus a few
regular accounts for frontend development.

Usage:
    python demo/seed.py            # add missing demo users
    python demo/seed.py --reset    # drop and recreate the users table first

Login credentials after seeding:
    ┌──────────┬───────────────────┬────────┐
    │ Username │ Password          │ Role   │
    ├──────────┼───────────────────┼────────┤
    │ admin    │ AdminDemo123!     │ admin  │
    │ amar     │ VeryS3cure1!      │ user   │
    │ guest    │ GuestDemo123!     │ guest  │
    └──────────┴───────────────────┴────────┘
"""

import argparse
import asyncio
import logging

from app import models  # noqa: F401
from app.database import AsyncSessionLocal, Base, engine
from app.domain.user import Role, User
from app.repositories.user_repository import UserRepository
from app.security import hash_password

logger = logging.getLogger("seed")

DEMO_USERS = [
    {
        "username": "admin",
        "password": "AdminDemo123!",
        "first_name": "Admin",
        "last_name": "Admin",
        "email": "administration@test.be",
        "role": Role.ADMIN,
    },
    {
        "username": "amar",
        "password": "VeryS3cure1!",
        "first_name": "Amar",
        "last_name": "Mahmuljin",
        "email": "amar@example.com",
        "role": Role.USER,
    },
    {
        "username": "guest",
        "password": "GuestDemo123!",
        "first_name": "Guest",
        "last_name": "Visitor",
        "email": "guest@example.com",
        "role": Role.GUEST,
    },
]


async def seed(reset: bool) -> None:
    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    repo = UserRepository(AsyncSessionLocal)
    for entry in DEMO_USERS:
        if await repo.find_by_username(entry["username"]) is not None:
            logger.info("Skipping %s: already exists", entry["username"])
            continue
        fields = dict(entry)
        fields["password"] = hash_password(fields["password"])
        created = await repo.insert(User(**fields))
        logger.info("Created %s (id=%s, role=%s)", created.username, created.id, created.role.value)

    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo users")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate tables first")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(seed(args.reset))


if __name__ == "__main__":
    main()
