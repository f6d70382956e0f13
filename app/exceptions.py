"""
Custom exception classes and FastAPI exception handlers.

The domain and service layers raise these errors without importing any HTTP
concepts. The handlers registered here translate them into consistent JSON
responses: {"detail": "...", "error_type": "..."}.

Exception hierarchy:
    AppError (base)
    ├── DomainValidationError    — one or more field-level issues (422)
    ├── InvalidCredentialsError  — unknown user OR wrong password (401)
    ├── UsernameTakenError       — username already registered (409)
    ├── EmailTakenError          — email already registered (409)
    ├── InvalidTokenError        — bad signature, expired, wrong audience (401)
    └── ForbiddenError           — authenticated but lacking the role (403)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class AppError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class DomainValidationError(AppError):
    """
    Raised when a User entity cannot be constructed.

    Attributes:
        issues: Every violated rule, in field order. Never just the first one.
    """

    def __init__(self, issues: list[str]):
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))


class InvalidCredentialsError(AppError):
    """
    Raised when login fails.

    The message is identical for "no such user" and "wrong password" so the
    caller cannot tell the two apart.
    """

    def __init__(self):
        super().__init__("Invalid credentials")


class UsernameTakenError(AppError):
    """Raised when registering with a username that's already in use."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already in use")


class EmailTakenError(AppError):
    """Raised when registering with an email that's already in use."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already in use")


class InvalidTokenError(AppError):
    """Raised when a bearer token fails signature, expiry or claim checks."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class ForbiddenError(AppError):
    """Raised when an authenticated caller lacks the required role."""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(detail)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    This is called once during app startup in main.py.
    """

    @app.exception_handler(DomainValidationError)
    async def domain_validation_handler(
        request: Request, exc: DomainValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": exc.detail,
                "error_type": "validation_error",
                "issues": exc.issues,
            },
        )

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(
        request: Request, exc: InvalidCredentialsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail, "error_type": "invalid_credentials"},
        )

    @app.exception_handler(UsernameTakenError)
    async def username_taken_handler(
        request: Request, exc: UsernameTakenError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": exc.detail, "error_type": "username_taken"},
        )

    @app.exception_handler(EmailTakenError)
    async def email_taken_handler(
        request: Request, exc: EmailTakenError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": exc.detail, "error_type": "email_taken"},
        )

    @app.exception_handler(InvalidTokenError)
    async def invalid_token_handler(
        request: Request, exc: InvalidTokenError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail, "error_type": "invalid_token"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def forbidden_handler(
        request: Request, exc: ForbiddenError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=403,
            content={"detail": exc.detail, "error_type": "forbidden"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Full traceback goes to the log only; the client gets nothing internal
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal_error"},
        )
