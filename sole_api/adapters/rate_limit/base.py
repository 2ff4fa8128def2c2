"""Rate limiter interfaces.

The request pipeline depends on this abstraction (not the concrete
implementation) so the storage backend can be swapped later.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission check.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Max requests per window.
        remaining: Requests left in the current window, never negative.
        reset_at_ms: Epoch milliseconds when the client's window expires.
        retry_after_seconds: Whole seconds to wait when rejected (>= 1), else None.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at_ms: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check_and_admit(self, client_key: str, now_ms: float | None = None) -> RateLimitDecision:
        """Admit or reject one request for ``client_key``.

        Args:
            client_key: Caller identifier (e.g., network address).
            now_ms: Current time in epoch milliseconds; the limiter's clock
                is used when omitted.

        Returns:
            RateLimitDecision describing the verdict and header values.
        """
        raise NotImplementedError
