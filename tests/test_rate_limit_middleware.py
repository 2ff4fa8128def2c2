"""Integration tests for the rate limiting middleware."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from sole_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from sole_api.core.app_factory import create_app
from sole_api.core.config import DatabaseSettings, settings
from sole_api.core.database import Database
from sole_api.core.rate_limit import (
    build_rate_limiter,
    is_exempt_path,
    resolve_client_key,
)


def _request(headers: dict[str, str] | None = None, client: tuple[str, int] | None = ("10.0.0.1", 1234)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_admitted_response_carries_quota_headers(make_app, clock) -> None:
    with TestClient(make_app(max_requests=10)) as client:
        resp = client.get("/api/v1/designs")

    assert resp.status_code == 200
    assert resp.headers["X-RateLimit-Limit"] == "10"
    assert resp.headers["X-RateLimit-Remaining"] == "9"
    assert resp.headers["X-RateLimit-Reset"] == str(int(clock.now + 60_000))


def test_eleventh_request_is_rejected(make_app) -> None:
    with TestClient(make_app(max_requests=10)) as client:
        statuses = [client.get("/api/v1/designs").status_code for _ in range(10)]
        blocked = client.get("/api/v1/designs")

    assert statuses == [200] * 10
    assert blocked.status_code == 429
    assert blocked.json() == {
        "error": "Too many requests",
        "message": "Rate limit exceeded. Maximum 10 requests per window.",
        "retryAfter": 60,
    }
    assert blocked.headers["X-RateLimit-Limit"] == "10"
    assert blocked.headers["X-RateLimit-Remaining"] == "0"
    assert blocked.headers["Retry-After"] == "60"
    assert blocked.headers.get("X-Request-ID")


def test_rejected_request_never_reaches_handler(make_app, image_generator) -> None:
    with TestClient(make_app(max_requests=1)) as client:
        client.get("/api/v1/designs")
        resp = client.post(
            "/api/v1/designs",
            json={"basePrompt": "trail runner", "style": "sporty", "colors": ["#FF0000"]},
        )

    assert resp.status_code == 429
    assert image_generator.calls == []


def test_retry_after_shrinks_as_window_elapses(make_app, clock) -> None:
    with TestClient(make_app(max_requests=1)) as client:
        client.get("/api/v1/designs")
        clock.advance(45_500)
        blocked = client.get("/api/v1/designs")

    assert blocked.status_code == 429
    assert blocked.json()["retryAfter"] == 15


def test_new_window_admits_again(make_app, clock) -> None:
    with TestClient(make_app(max_requests=1)) as client:
        assert client.get("/api/v1/designs").status_code == 200
        assert client.get("/api/v1/designs").status_code == 429

        clock.advance(60_000)
        resp = client.get("/api/v1/designs")

    assert resp.status_code == 200
    assert resp.headers["X-RateLimit-Remaining"] == "0"


def test_health_endpoints_are_never_limited(make_app) -> None:
    app = make_app(max_requests=1)
    with TestClient(app) as client:
        for _ in range(5):
            resp = client.get("/health")
            assert resp.status_code == 200
            assert "X-RateLimit-Limit" not in resp.headers
        assert client.get("/health/ready").status_code == 200

    assert len(app.state.rate_limiter) == 0


def test_clients_have_independent_quotas(make_app, monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_trust_forwarded_for", True)

    with TestClient(make_app(max_requests=1)) as client:
        first = client.get("/api/v1/designs", headers={"X-Forwarded-For": "203.0.113.1"})
        blocked = client.get("/api/v1/designs", headers={"X-Forwarded-For": "203.0.113.1"})
        other = client.get("/api/v1/designs", headers={"X-Forwarded-For": "203.0.113.2"})

    assert first.status_code == 200
    assert blocked.status_code == 429
    assert other.status_code == 200


def test_forwarded_for_is_ignored_by_default(make_app) -> None:
    with TestClient(make_app(max_requests=1)) as client:
        client.get("/api/v1/designs", headers={"X-Forwarded-For": "203.0.113.1"})
        spoofed = client.get("/api/v1/designs", headers={"X-Forwarded-For": "203.0.113.2"})

    assert spoofed.status_code == 429


def test_disabled_setting_bypasses_limiter(make_app, monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_enabled", False)

    with TestClient(make_app(max_requests=1)) as client:
        statuses = [client.get("/api/v1/designs").status_code for _ in range(3)]
        last = client.get("/api/v1/designs")

    assert statuses == [200, 200, 200]
    assert "X-RateLimit-Limit" not in last.headers


def test_app_uses_injected_limiter_instance(clock) -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=3, window_ms=1_000, clock=clock)
    app = create_app(
        rate_limiter=limiter,
        database=Database(DatabaseSettings(url="sqlite://")),
        configure_logs=False,
    )

    with TestClient(app) as client:
        resp = client.get("/api/v1/designs")

    assert app.state.rate_limiter is limiter
    assert resp.headers["X-RateLimit-Limit"] == "3"
    assert limiter.get_entry("testclient").count == 1
    assert limiter.get_entry("testclient").window_reset_at == clock.now + 1_000


def test_app_builds_limiter_from_settings_when_none_injected(monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_max_requests", 4)

    app = create_app(database=Database(DatabaseSettings(url="sqlite://")), configure_logs=False)

    assert app.state.rate_limiter.max_requests == 4


def test_limiter_state_is_not_shared_between_apps(make_app) -> None:
    with TestClient(make_app(max_requests=1)) as first_client:
        first_client.get("/api/v1/designs")
        assert first_client.get("/api/v1/designs").status_code == 429

    with TestClient(make_app(max_requests=1)) as second_client:
        assert second_client.get("/api/v1/designs").status_code == 200


def test_resolve_client_key_uses_peer_address() -> None:
    assert resolve_client_key(_request()) == "10.0.0.1"


def test_resolve_client_key_falls_back_to_unknown() -> None:
    assert resolve_client_key(_request(client=None)) == "unknown"


def test_resolve_client_key_trusts_first_forwarded_hop_when_enabled() -> None:
    request = _request(headers={"X-Forwarded-For": " 198.51.100.7 , 10.0.0.2"})

    assert resolve_client_key(request, trust_forwarded_for=True) == "198.51.100.7"
    assert resolve_client_key(request) == "10.0.0.1"


def test_resolve_client_key_ignores_blank_forwarded_header() -> None:
    request = _request(headers={"X-Forwarded-For": " "})

    assert resolve_client_key(request, trust_forwarded_for=True) == "10.0.0.1"


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/health", True),
        ("/health/ready", True),
        ("/healthz", False),
        ("/api/v1/designs", False),
    ],
)
def test_is_exempt_path(path: str, expected: bool) -> None:
    assert is_exempt_path(path, ["/health"]) is expected


def test_build_rate_limiter_uses_settings() -> None:
    app_settings = Mock(
        rate_limit_max_requests=7,
        rate_limit_window_ms=30_000,
        rate_limit_max_entries=100,
        rate_limit_sweep_interval_ms=0,
    )

    limiter = build_rate_limiter(app_settings)

    assert limiter.max_requests == 7
    assert limiter.window_ms == 30_000
    assert len(limiter) == 0
