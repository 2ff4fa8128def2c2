"""Rate limiting middleware for the HTTP pipeline.

This module wires the rate limiting adapter into the request pipeline.

Design goals:
- Explicit ownership: the limiter lives on ``app.state`` and is built by the
  app factory, so tests can inject their own instance and clock.
- Swap-friendly: the middleware depends on ``AbstractRateLimiter`` only.
- Health checks are never limited.

Rate limiting strategy:
- Fixed window per client network address.
- Without a resolvable address, clients share the ``"unknown"`` bucket.
- ``X-Forwarded-For`` is ignored unless explicitly trusted via settings.
"""

from __future__ import annotations

import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from sole_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from sole_api.adapters.rate_limit.in_memory import (
    UNKNOWN_CLIENT_KEY,
    InMemoryFixedWindowRateLimiter,
)
from sole_api.core.config import AppSettings, settings, split_csv
from sole_api.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create the limiter described by the application settings.

    Returns:
        AbstractRateLimiter: Fresh limiter with empty state.
    """

    cfg = app_settings or settings.app
    return InMemoryFixedWindowRateLimiter(
        max_requests=cfg.rate_limit_max_requests,
        window_ms=cfg.rate_limit_window_ms,
        max_entries=cfg.rate_limit_max_entries,
        sweep_interval_ms=cfg.rate_limit_sweep_interval_ms,
    )


def resolve_client_key(request: Request, *, trust_forwarded_for: bool = False) -> str:
    """Derive the limiter key for the current request.

    Args:
        request: Incoming request.
        trust_forwarded_for: Use the first ``X-Forwarded-For`` hop when present.

    Returns:
        str: Client address, or ``"unknown"`` when none is available.
    """

    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT_KEY


def is_exempt_path(path: str, exempt_prefixes: list[str]) -> bool:
    """Return True for paths equal to, or nested under, an exempt prefix."""

    for prefix in exempt_prefixes:
        normalized = prefix.rstrip("/")
        if path == normalized or path.startswith(normalized + "/"):
            return True
    return False


def rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """Quota headers attached to every limited response."""

    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(decision.reset_at_ms),
    }


def build_rejection_response(decision: RateLimitDecision) -> JSONResponse:
    """Render the 429 response for a rejected request."""

    retry_after = decision.retry_after_seconds or 1
    headers = rate_limit_headers(decision)
    headers["Retry-After"] = str(retry_after)

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": "Too many requests",
            "message": (
                f"Rate limit exceeded. Maximum {decision.limit} requests per window."
            ),
            "retryAfter": retry_after,
        },
        headers=headers,
    )


async def rate_limit_middleware(request: Request, call_next) -> Response:
    """HTTP middleware admitting or rejecting each request.

    Rejected requests get a 429 and never reach the route handler. Admitted
    requests proceed and their response carries the quota headers.

    Usage:
        app.middleware("http")(rate_limit_middleware)
    """

    cfg = settings.app
    limiter: AbstractRateLimiter | None = getattr(request.app.state, "rate_limiter", None)

    if (
        not cfg.rate_limit_enabled
        or limiter is None
        or is_exempt_path(request.url.path, split_csv(cfg.rate_limit_exempt_paths))
    ):
        return await call_next(request)

    client_key = resolve_client_key(
        request, trust_forwarded_for=cfg.rate_limit_trust_forwarded_for
    )
    decision = limiter.check_and_admit(client_key)

    if not decision.allowed:
        logger.warning(
            "rate_limit.rejected",
            extra={
                "client_hash": hash_identifier(client_key),
                "limit": decision.limit,
                "retry_after_s": decision.retry_after_seconds,
                "request_path": request.url.path,
            },
        )
        return build_rejection_response(decision)

    logger.debug(
        "rate_limit.admitted",
        extra={
            "client_hash": hash_identifier(client_key),
            "limit": decision.limit,
            "remaining": decision.remaining,
        },
    )

    response = await call_next(request)
    response.headers.update(rate_limit_headers(decision))
    return response
