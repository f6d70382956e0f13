"""
Authentication service — registration, login and user listing.

This module contains the core auth logic, separated from HTTP concerns.
The router calls these functions and translates the results into HTTP
responses, so the logic can be tested against a repository without
spinning up a web server.

Registration flow:
  1. Look up username and email concurrently; both must finish before any write
  2. Reject with UsernameTakenError / EmailTakenError on a collision
  3. Hash the password with bcrypt at BCRYPT_ROUNDS
  4. Build the User entity with role forced to USER, then insert it

Login flow:
  1. Normalize the username (trim + lower-case) and look it up
  2. ALWAYS run a bcrypt comparison: against the stored hash, or against a
     dummy hash when the user does not exist
  3. Raise the same InvalidCredentialsError for both failure causes
  4. Return a JWT plus the public profile fields

Security notes:
  - Skipping the comparison for unknown users would make them answer
    measurably faster than wrong passwords, leaking which usernames exist
  - Self-registration can never grant admin or guest; admins are provisioned
    out of band (see demo/seed.py)
  - bcrypt is CPU-bound, so hashing and verifying run in a worker thread
"""

import asyncio
import logging
from dataclasses import dataclass

from passlib.exc import PasswordValueError

from app.domain.user import Role, User
from app.exceptions import (
    DomainValidationError,
    EmailTakenError,
    InvalidCredentialsError,
    UsernameTakenError,
)
from app.repositories.user_repository import UserRepository
from app.security import (
    create_access_token,
    dummy_password_hash,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

# Role assigned to every self-registered account, whatever the caller asked for
DEFAULT_ROLE = Role.USER


@dataclass(frozen=True)
class AuthenticationResult:
    """What a successful login hands back to the caller."""
    token: str
    username: str
    fullname: str
    role: Role


def _normalize(value: str) -> str:
    return value.strip().lower()


async def authenticate(
    repo: UserRepository,
    username: str,
    password: str,
) -> AuthenticationResult:
    """
    Authenticate a user and issue a JWT.

    Args:
        repo: User repository.
        username: Case-insensitive username.
        password: Plaintext password to verify.

    Returns:
        AuthenticationResult with the token and public profile fields.

    Raises:
        InvalidCredentialsError: If the user doesn't exist or the password
            is wrong. The two cases are indistinguishable to the caller.
    """
    normalized = _normalize(username)
    try:
        user = await repo.find_by_username(normalized)
    except DomainValidationError as exc:
        # A corrupt stored row must answer exactly like an unknown username
        logger.warning("Stored record for username=%r failed validation: %s", normalized, exc)
        user = None

    if user is not None:
        stored_hash = user.password
    else:
        stored_hash = await asyncio.to_thread(dummy_password_hash)

    try:
        password_ok = await asyncio.to_thread(verify_password, password, stored_hash)
    except PasswordValueError:
        # bcrypt refuses some inputs outright (NUL bytes); that is just a mismatch
        password_ok = False

    if user is None or not password_ok:
        logger.info("Failed login attempt for username=%r", normalized)
        raise InvalidCredentialsError()

    token = create_access_token(
        claims={
            "user_id": user.id,
            "username": user.username,
            "role": user.role.value,
        },
        subject=str(user.id),
    )
    logger.info("User %s authenticated", user.username)

    return AuthenticationResult(
        token=token,
        username=user.username,
        fullname=user.full_name,
        role=user.role,
    )


async def register(
    repo: UserRepository,
    *,
    username: str,
    password: str,
    first_name: str,
    last_name: str,
    email: str,
    role: Role | str | None = None,
) -> User:
    """
    Register a new user.

    Args:
        repo: User repository.
        username: Desired username (normalized by the entity).
        password: Plaintext password (hashed here, before the entity is built).
        first_name: Given name.
        last_name: Family name.
        email: Email address (must be unique).
        role: Accepted for interface compatibility and ignored; the stored
              role is always DEFAULT_ROLE.

    Returns:
        The persisted User entity.

    Raises:
        UsernameTakenError: If the username is already registered.
        EmailTakenError: If the email is already registered.
        DomainValidationError: If the fields fail entity validation.
    """
    by_username, by_email = await asyncio.gather(
        repo.find_by_username(_normalize(username)),
        repo.find_by_email(_normalize(email)),
    )

    if by_username is not None:
        raise UsernameTakenError(username)
    if by_email is not None:
        raise EmailTakenError(email)

    if role is not None and role != DEFAULT_ROLE:
        logger.warning(
            "Registration for username=%r requested role=%r; forcing %s",
            _normalize(username), getattr(role, "value", role), DEFAULT_ROLE.value,
        )

    hashed = await asyncio.to_thread(hash_password, password)
    user = User(
        username=username,
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=hashed,
        role=DEFAULT_ROLE,
    )

    created = await repo.insert(user)
    logger.info("Registered user %s (id=%s)", created.username, created.id)
    return created


async def list_users(repo: UserRepository) -> list[User]:
    """Return every registered user. Callers must enforce the admin role."""
    return await repo.list_all()
