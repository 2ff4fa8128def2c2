"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a lock is held across the whole check-then-increment.
- Bounded: expired entries are swept periodically and the number of tracked
  clients is capped with least-recently-used eviction.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from sole_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT_KEY = "unknown"


def _epoch_ms() -> float:
    return time.time() * 1000


@dataclass
class RateLimitEntry:
    """Request count for one client within its current window."""

    client_key: str
    count: int
    window_reset_at: float

    def is_expired(self, now_ms: float) -> bool:
        return now_ms >= self.window_reset_at


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed window that starts at a client's first request.

    Each client gets ``max_requests`` admissions per ``window_ms``. The window
    opens lazily on the first request and the entry is dropped once the
    window has passed, so the next request starts a fresh one.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker enforces its own
        independent limits.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_ms: int,
        max_entries: int | None = 10_000,
        sweep_interval_ms: int = 60_000,
        clock: Callable[[], float] = _epoch_ms,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            max_requests: Maximum number of admitted requests per window.
            window_ms: Window length in milliseconds.
            max_entries: Cap on tracked clients; None disables the cap.
            sweep_interval_ms: Minimum time between sweeps of expired
                entries; 0 disables opportunistic sweeping.
            clock: Time source returning epoch milliseconds.

        Raises:
            ValueError: If any bound is invalid.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if sweep_interval_ms < 0:
            raise ValueError("sweep_interval_ms must be >= 0")

        self._max_requests = max_requests
        self._window_ms = window_ms
        self._max_entries = max_entries
        self._sweep_interval_ms = sweep_interval_ms
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: OrderedDict[str, RateLimitEntry] = OrderedDict()
        self._last_sweep_ms: float | None = None

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_entry(self, client_key: str) -> RateLimitEntry | None:
        """Return a copy of the stored entry for inspection (no expiry applied)."""
        with self._lock:
            entry = self._entries.get(client_key)
            if entry is None:
                return None
            return RateLimitEntry(entry.client_key, entry.count, entry.window_reset_at)

    def sweep(self, now_ms: float | None = None) -> int:
        """Drop every expired entry.

        Args:
            now_ms: Current time in epoch milliseconds (clock when omitted).

        Returns:
            Number of entries removed.
        """
        now = self._clock() if now_ms is None else now_ms
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            self._last_sweep_ms = now

        if expired:
            logger.debug(
                "rate_limit.swept",
                extra={"removed": len(expired), "tracked": len(self._entries)},
            )
        return len(expired)

    def reset(self) -> None:
        """Forget every tracked client."""
        with self._lock:
            self._entries.clear()
            self._last_sweep_ms = None

    def _maybe_sweep(self, now: float) -> None:
        if self._sweep_interval_ms == 0:
            return
        if self._last_sweep_ms is None:
            self._last_sweep_ms = now
            return
        if now - self._last_sweep_ms >= self._sweep_interval_ms:
            self.sweep(now)

    def _evict_overflow(self) -> None:
        """Keep the map within ``max_entries``, oldest-accessed first.

        Runs after the periodic sweep in ``check_and_admit``, so it never
        scans the whole map itself.
        """
        if self._max_entries is None or len(self._entries) <= self._max_entries:
            return

        evicted = 0
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
            evicted += 1

        if evicted:
            logger.warning(
                "rate_limit.evicted",
                extra={"evicted": evicted, "max_entries": self._max_entries},
            )

    def _get_or_open_window(self, client_key: str, now: float) -> RateLimitEntry:
        entry = self._entries.get(client_key)
        if entry is not None and entry.is_expired(now):
            del self._entries[client_key]
            entry = None

        if entry is None:
            entry = RateLimitEntry(
                client_key=client_key,
                count=0,
                window_reset_at=now + self._window_ms,
            )
            self._entries[client_key] = entry
            self._evict_overflow()
        else:
            self._entries.move_to_end(client_key)

        return entry

    def check_and_admit(self, client_key: str, now_ms: float | None = None) -> RateLimitDecision:
        """Admit or reject one request for ``client_key``.

        This method both checks the current window usage and mutates the state
        if the request is admitted. It never raises for a well-formed limiter;
        an empty key is bucketed under ``UNKNOWN_CLIENT_KEY``.

        Args:
            client_key: Caller identifier.
            now_ms: Current time in epoch milliseconds (clock when omitted).

        Returns:
            RateLimitDecision with the verdict and header values.
        """
        key = client_key or UNKNOWN_CLIENT_KEY
        now = self._clock() if now_ms is None else now_ms

        with self._lock:
            self._maybe_sweep(now)
            entry = self._get_or_open_window(key, now)
            reset_at_ms = int(math.ceil(entry.window_reset_at))

            if entry.count >= self._max_requests:
                retry_after = max(1, math.ceil((entry.window_reset_at - now) / 1000))
                return RateLimitDecision(
                    allowed=False,
                    limit=self._max_requests,
                    remaining=0,
                    reset_at_ms=reset_at_ms,
                    retry_after_seconds=retry_after,
                )

            entry.count += 1
            return RateLimitDecision(
                allowed=True,
                limit=self._max_requests,
                remaining=max(0, self._max_requests - entry.count),
                reset_at_ms=reset_at_ms,
                retry_after_seconds=None,
            )
