"""
Security utilities: password hashing and JWT tokens.

This module centralizes all cryptographic operations so they're easy to
audit and update. Two concerns are handled here:

1. PASSWORD HASHING (bcrypt)
   - Passwords are never stored in plaintext
   - bcrypt hashes look like "$2b$12$<22-char salt><31-char checksum>";
     the User entity refuses any password value without that shape
   - The work factor (BCRYPT_ROUNDS, 10-15) is configurable; each +1 doubles
     the cost of hashing and of every brute-force guess
   - passlib's CryptContext does the hashing and the constant-time verify

2. JWT TOKENS (JSON Web Tokens)
   - After login, the user receives a signed JWT carrying user_id, username
     and role, so role checks need no database round trip
   - Signed with JWT_SECRET using HS256 (HMAC-SHA256)
   - iss/aud are bound to the service identity, sub to the user id
   - Tokens expire after JWT_EXPIRES_HOURS (default: 1 hour)
"""

import functools
import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.exceptions import InvalidTokenError


# ---------------------------------------------------------------------------
# 1. Password Hashing (bcrypt)
# ---------------------------------------------------------------------------

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password with bcrypt at BCRYPT_ROUNDS.

    Args:
        plain_password: The user's raw password input.

    Returns:
        A bcrypt hash string (e.g., "$2b$12$...").
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored bcrypt hash.

    This is a constant-time comparison to prevent timing attacks.
    """
    return pwd_context.verify(plain_password, hashed_password)


@functools.lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """
    A throwaway bcrypt hash at the configured work factor.

    Login compares against this when the username does not exist, so an
    unknown user costs the same bcrypt work as a wrong password. The random
    secret behind it is discarded; nothing can ever match it.
    """
    return hash_password(secrets.token_urlsafe(32))


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------


def create_access_token(
    claims: dict,
    subject: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        claims: Application claims to embed (user_id, username, role).
        subject: Value of the standard "sub" claim (the user id).
        expires_delta: Optional custom lifetime. Defaults to JWT_EXPIRES_HOURS.

    Returns:
        An encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.JWT_EXPIRES_HOURS))

    to_encode = dict(claims)
    to_encode.update({
        "sub": subject,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": expire,
    })
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.

    Signature, expiry, issuer and audience are all checked.

    Raises:
        InvalidTokenError: If the token is expired, tampered with, or was
            issued for a different service.

    Returns:
        The decoded payload dictionary.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as exc:
        raise InvalidTokenError() from exc
