"""
Users router — signup, login and the admin user listing.

Endpoints:
  POST /users/signup  — Register a new account (public)
  POST /users/login   — Authenticate and get a token (public)
  GET  /users         — List all users (admin only)

Security audit notes:
  - Plaintext passwords exist only in memory during request processing;
    they are hashed before any database operation and never logged.
  - Response bodies are always built from User.to_dto(), so the bcrypt hash
    can't end up in a payload.
  - Login failures return one generic message whether the username is
    unknown or the password is wrong.
"""

from fastapi import APIRouter, Depends, status

from app.dependencies import Principal, get_user_repository, require_roles
from app.domain.user import Role
from app.repositories.user_repository import UserRepository
from app.schemas.user import (
    AuthenticationResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from app.services import auth_service

router = APIRouter()


@router.get(
    "",
    response_model=list[UserResponse],
    summary="[Admin] List all users",
)
async def list_users(
    admin: Principal = Depends(require_roles(Role.ADMIN)),
    repo: UserRepository = Depends(get_user_repository),
):
    """Return every registered user. Requires a token with the admin role."""
    users = await auth_service.list_users(repo)
    return [user.to_dto() for user in users]


@router.post(
    "/login",
    response_model=AuthenticationResponse,
    summary="Authenticate and receive a JWT",
)
async def login(
    request: LoginRequest,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Authenticate with username and password.

    The username is case-insensitive. The returned token must be sent in the
    Authorization header of subsequent requests:

        Authorization: Bearer <token>
    """
    result = await auth_service.authenticate(
        repo,
        username=request.username,
        password=request.password,
    )
    return AuthenticationResponse(
        token=result.token,
        username=result.username,
        fullname=result.fullname,
        role=result.role,
    )


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new user account",
)
async def signup(
    request: SignupRequest,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Register a new account.

    - **username**: 3-30 letters/digits, optionally separated by single '.', '_' or '-'
    - **password**: At least 8 characters with upper, lower, digit and special character
    - **first_name** / **last_name**: Required, letters, spaces, hyphens, apostrophes
    - **email**: Must be a valid email and not already registered
    - **role**: Ignored; new accounts always get the "user" role
    """
    user = await auth_service.register(
        repo,
        username=request.username,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        role=request.role,
    )
    return user.to_dto()
