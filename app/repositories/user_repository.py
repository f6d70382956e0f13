"""
User repository — async SQLAlchemy access to credential records.

The auth service only talks to the store through this class. Every method
returns validated domain User entities (or None), never ORM rows, so a
malformed row in the database surfaces as a DomainValidationError instead of
leaking into a response.

Each call opens its own session from the session factory. Database errors
(connection failures, integrity violations from a lost race on the unique
constraints) propagate unchanged; nothing here is retried.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.user import User
from app.models.user import UserRecord


class UserRepository:
    """Persistence boundary for User entities."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_by_username(self, username: str) -> User | None:
        """Look up a user by (already normalized) username."""
        return await self._find_one(UserRecord.username == username)

    async def find_by_email(self, email: str) -> User | None:
        """Look up a user by (already normalized) email."""
        return await self._find_one(UserRecord.email == email)

    async def insert(self, user: User) -> User:
        """
        Persist a new user and return it as stored.

        The returned entity carries the database-assigned id and timestamps.
        """
        record = UserRecord(
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            password=user.password,
            role=user.role,
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
            await session.refresh(record)
        return User.from_record(record)

    async def list_all(self) -> list[User]:
        """Return every user, oldest first."""
        async with self._session_factory() as session:
            result = await session.execute(select(UserRecord).order_by(UserRecord.id))
            return [User.from_record(record) for record in result.scalars().all()]

    async def _find_one(self, condition) -> User | None:
        async with self._session_factory() as session:
            result = await session.execute(select(UserRecord).where(condition))
            record = result.scalar_one_or_none()
        return User.from_record(record) if record else None
