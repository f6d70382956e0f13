"""
FastAPI dependencies for authentication and authorization.

Dependencies are reusable functions that FastAPI injects into route handlers.
They provide the user repository and form a small auth chain:

  get_current_principal (Bearer JWT -> Principal)
      └── require_roles(*roles) (Principal -> Principal)   [role gate]

The principal is read straight from the verified token claims; no database
round trip is needed to answer "who is calling and with which role".
If a dependency fails (missing token, bad signature, wrong role) the request
is rejected before the route handler runs.
"""

from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.database import AsyncSessionLocal
from app.domain.user import Role
from app.exceptions import ForbiddenError, InvalidTokenError
from app.repositories.user_repository import UserRepository
from app.security import decode_access_token


def get_user_repository() -> UserRepository:
    """
    Provide the user repository.

    Usage in a route:
        @router.get("/users")
        async def list_users(repo: UserRepository = Depends(get_user_repository)):
            ...

    Tests override this dependency to point the repository at a throwaway
    database.
    """
    return UserRepository(AsyncSessionLocal)


# auto_error=False so a missing header raises our InvalidTokenError (401)
# rather than FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as described by their token claims."""
    user_id: int
    username: str
    role: Role


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    """
    Verify the bearer token and return the caller's identity.

    Raises:
        InvalidTokenError (401): If the token is missing, expired, tampered
            with, or its claims are incomplete.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidTokenError("Missing token")

    payload = decode_access_token(credentials.credentials)
    try:
        return Principal(
            user_id=int(payload["user_id"]),
            username=payload["username"],
            role=Role(payload["role"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError() from exc


def require_roles(*roles: Role):
    """
    Build a dependency that only lets callers with one of `roles` through.

    Usage:
        @router.get("/", dependencies=[Depends(require_roles(Role.ADMIN))])

    Raises:
        ForbiddenError (403): If the caller's role is not in `roles`.
    """
    allowed = frozenset(roles)

    async def check_role(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        if principal.role not in allowed:
            raise ForbiddenError()
        return principal

    return check_role
