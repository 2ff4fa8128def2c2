"""Application-level exception types.

Domain and service code raises these instead of HTTP exceptions; the
handlers in ``sole_api.core.exception_handlers`` translate them into
consistent JSON responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    field: str
    value: str
    hint: str
    min_value: int
    max_value: int
    allowed: list[str]
    provider: str
    status_code: int
    errors: list[dict[str, Any]]
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input or domain validation fails."""


class AuthenticationAppError(AppError):
    """Raised when credentials or tokens are missing or invalid."""


class PermissionAppError(AppError):
    """Raised when an authenticated user acts on a resource they don't own."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""


class ConflictAppError(AppError):
    """Raised when a resource would violate a uniqueness rule."""


class ImageGenerationAppError(AppError):
    """Raised when the image provider fails or returns an unusable result."""
