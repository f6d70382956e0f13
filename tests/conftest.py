"""
Test fixtures for the Kozarusa API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / session_factory: Fresh SQLite database file for each test
  - repo: UserRepository bound to that database
  - client: Async HTTP test client (unauthenticated)
  - authenticated_client: Test client logged in as a regular user
  - admin_client: Test client logged in as an admin

Key design decisions:
  - Environment variables are set before any app module is imported, since
    app.config validates settings at import time (JWT_SECRET is required).
  - BCRYPT_ROUNDS is pinned to the minimum allowed (10) to keep tests fast.
  - A file-backed SQLite database under tmp_path is used instead of
    ":memory:" because the repository opens a separate session per call and
    the duplicate checks run concurrently.
  - The admin account is inserted straight through the repository: the
    signup endpoint can never create one.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-at-least-32-chars")
os.environ.setdefault("BCRYPT_ROUNDS", "10")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from app.database import Base
from app.dependencies import get_user_repository
from app.domain.user import Role, User
from app.main import app
from app.repositories.user_repository import UserRepository
from app.security import hash_password


USER_SIGNUP = {
    "username": "amar",
    "password": "VeryS3cure1!",
    "first_name": "Amar",
    "last_name": "Mahmuljin",
    "email": "amar@example.com",
    "role": "user",
}

ADMIN_PASSWORD = "AdminPass123!"


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def repo(session_factory):
    return UserRepository(session_factory)


@pytest_asyncio.fixture
async def admin_user(repo):
    """An admin account provisioned directly in the store."""
    return await repo.insert(
        User(
            username="admin",
            first_name="Admin",
            last_name="User",
            email="administration@test.be",
            password=hash_password(ADMIN_PASSWORD),
            role=Role.ADMIN,
        )
    )


@pytest_asyncio.fixture
async def client(repo):
    """
    Async HTTP test client with the test repository injected.

    This overrides the get_user_repository dependency so all requests hit
    the per-test database instead of the real one.
    """
    app.dependency_overrides[get_user_repository] = lambda: repo

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(client):
    """Test client signed up and logged in as a regular user."""
    response = await client.post("/users/signup", json=USER_SIGNUP)
    assert response.status_code == 201, f"Signup failed: {response.text}"

    login = await client.post(
        "/users/login",
        json={"username": USER_SIGNUP["username"], "password": USER_SIGNUP["password"]},
    )
    assert login.status_code == 200, f"Login failed: {login.text}"
    client.headers["Authorization"] = f"Bearer {login.json()['token']}"
    return client


@pytest_asyncio.fixture
async def admin_client(client, admin_user):
    """Test client logged in as the provisioned admin."""
    login = await client.post(
        "/users/login",
        json={"username": "admin", "password": ADMIN_PASSWORD},
    )
    assert login.status_code == 200, f"Admin login failed: {login.text}"
    client.headers["Authorization"] = f"Bearer {login.json()['token']}"
    return client
