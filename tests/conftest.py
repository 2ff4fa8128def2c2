"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any import that might load settings.
"""

import os

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key")
os.environ.setdefault("AUTH_BCRYPT_ROUNDS", "4")
os.environ.setdefault("IMAGE_PROVIDER", "stable_diffusion")
os.environ.setdefault("IMAGE_BASE_URL", "http://sd.test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sole_api.adapters.image.base import AbstractImageGenerator
from sole_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from sole_api.core.app_factory import create_app
from sole_api.core.config import DatabaseSettings
from sole_api.core.database import Database

FAKE_IMAGE_URL = "https://images.test/sneaker.png"


class FakeImageGenerator(AbstractImageGenerator):
    """Records prompts and returns a fixed URL."""

    def __init__(self, url: str = FAKE_IMAGE_URL) -> None:
        self.url = url
        self.calls: list[tuple[str, str | None]] = []

    async def generate_image(self, prompt: str, negative_prompt: str | None = None) -> str:
        self.calls.append((prompt, negative_prompt))
        return self.url


class FakeClock:
    """Manually advanced clock returning epoch milliseconds."""

    def __init__(self, start_ms: float = 1_700_000_000_000.0) -> None:
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def image_generator() -> FakeImageGenerator:
    return FakeImageGenerator()


@pytest.fixture
def make_app(clock: FakeClock, image_generator: FakeImageGenerator) -> Callable[..., FastAPI]:
    """Build an isolated app: in-memory database, fake provider, fake clock."""

    def _make(max_requests: int = 1000, window_ms: int = 60_000, **limiter_kwargs) -> FastAPI:
        limiter = InMemoryFixedWindowRateLimiter(
            max_requests=max_requests,
            window_ms=window_ms,
            clock=clock,
            **limiter_kwargs,
        )
        database = Database(DatabaseSettings(url="sqlite://"))
        app = create_app(
            rate_limiter=limiter,
            database=database,
            image_generator=image_generator,
            configure_logs=False,
        )
        assert app.state.rate_limiter is limiter, "app replaced the injected rate limiter"
        assert app.state.database is database, "app replaced the injected database"
        return app

    return _make


@pytest.fixture
def app(make_app: Callable[..., FastAPI]) -> FastAPI:
    return make_app()


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    # Context manager runs the lifespan, which creates the tables
    with TestClient(app) as test_client:
        yield test_client


def _register_user(
    client: TestClient,
    *,
    email: str = "runner@example.com",
    username: str = "runner",
    password: str = "s3cret-pass",
    wallet_address: str | None = None,
) -> dict:
    body = {"email": email, "username": username, "password": password}
    if wallet_address:
        body["walletAddress"] = wallet_address
    response = client.post("/api/v1/auth/register", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _login_headers(
    client: TestClient,
    *,
    email: str = "runner@example.com",
    password: str = "s3cret-pass",
) -> dict[str, str]:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    _register_user(client)
    return _login_headers(client)


@pytest.fixture
def register(client: TestClient) -> Callable[..., dict]:
    """Register a user through the API and return its public data."""
    return lambda **kwargs: _register_user(client, **kwargs)


@pytest.fixture
def login(client: TestClient) -> Callable[..., dict[str, str]]:
    """Log in through the API and return bearer headers."""
    return lambda **kwargs: _login_headers(client, **kwargs)
