"""Pytest fixtures and shared test configuration.

Fixtures:
    - api_config: API configuration pointing at a temporary SQLite file
    - context: Started application context in echo mode
    - app: FastAPI app bound to that context
    - async_client: HTTPX client for API testing
    - signup: Helper that creates an account and returns its token and uid
    - set_role: Helper that changes a user's role directly in the store
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api import AppContext, create_app
from src.api.config import ApiConfig
from src.tutor import TutorConfig

SignupResult = dict[str, str]


@pytest.fixture
def api_config(tmp_path: Path) -> ApiConfig:
    """API configuration backed by a per-test database file."""
    return ApiConfig(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'lms.db'}",
        secret_key="test-secret-key-0123456789",
        cors_origins="*",
    )


@pytest.fixture
async def context(api_config: ApiConfig) -> AsyncGenerator[AppContext]:
    """Started application context with the tutor in echo mode.

    Yields:
        Context whose store has its schema created.
    """
    ctx = AppContext.create(config=api_config, tutor_config=TutorConfig(api_key=""))
    await ctx.start()
    yield ctx
    await ctx.close()


@pytest.fixture
def app(context: AppContext) -> FastAPI:
    return create_app(context)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def signup(async_client: AsyncClient) -> Callable[..., Awaitable[SignupResult]]:
    """Return a helper that signs up a user.

    The helper returns ``{"token", "uid", "email"}``.
    """
    counter = {"n": 0}

    async def _signup(email: str | None = None, password: str = "secret123") -> SignupResult:
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        resp = await async_client.post(
            "/api/auth/signup", json={"email": email, "password": password}
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {"token": body["access_token"], "uid": body["user"]["uid"], "email": email}

    return _signup


@pytest.fixture
def set_role(context: AppContext) -> Callable[[str, str], Awaitable[None]]:
    """Return a helper that sets a user's role in the store."""

    async def _set_role(uid: str, role: str) -> None:
        await context.store.update(f"users/{uid}", {"role": role})

    return _set_role


def auth_headers(token: str) -> dict[str, str]:
    """Authorization header for a bearer token."""
    return {"Authorization": f"Bearer {token}"}
