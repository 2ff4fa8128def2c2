"""Request correlation, timing and timeout middleware.

Each request gets a correlation id: the one sent by the client in the
configured header (``LOG_REQUEST_ID_HEADER``) or a fresh UUID4. The id is
available to loggers through ``sole_api.core.logging`` for the lifetime of
the request and is echoed back on the response together with the handling
time.

Requests whose handler runs longer than ``APP_REQUEST_TIMEOUT_MS`` are
answered with a 504 in the same shape as the 429 body.

Usage:
    app.middleware("http")(request_timeout_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from sole_api.core.config import settings
from sole_api.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

DURATION_HEADER = "X-Request-Duration-ms"


def _log_if_slow(request: Request, elapsed_ms: float) -> None:
    if elapsed_ms <= settings.log.slow_request_ms:
        return
    logger.warning(
        "request.slow",
        extra={
            "request_method": request.method,
            "request_path": request.url.path,
            "duration_ms": round(elapsed_ms, 2),
            "threshold_ms": settings.log.slow_request_ms,
        },
    )


async def request_id_middleware(request: Request, call_next) -> Response:
    """Bind a correlation id to the request and report how long it took."""

    header = settings.log.request_id_header
    request_id = request.headers.get(header) or str(uuid.uuid4())

    set_request_id(request_id)
    started = time.perf_counter()
    try:
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        _log_if_slow(request, elapsed_ms)
    finally:
        clear_request_id()

    response.headers[header] = request_id
    response.headers.setdefault(DURATION_HEADER, f"{elapsed_ms:.2f}")
    return response


async def request_timeout_middleware(request: Request, call_next) -> Response:
    """Answer 504 when the handler runs past ``APP_REQUEST_TIMEOUT_MS``."""

    timeout_ms = settings.app.request_timeout_ms
    if not timeout_ms:
        return await call_next(request)

    try:
        return await asyncio.wait_for(call_next(request), timeout=timeout_ms / 1000)
    except asyncio.TimeoutError:
        logger.warning(
            "request.timeout",
            extra={
                "request_method": request.method,
                "request_path": request.url.path,
                "timeout_ms": timeout_ms,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={
                "error": "Request timeout",
                "message": f"Request exceeded {timeout_ms}ms timeout",
            },
        )
