"""
In-memory sliding-window rate limiter for the /api/ routes.

One instance is created per application and keyed by client IP. State lives in
process memory only; multiple workers each keep their own window.
"""

import time
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import Request


class RateLimiter:
    """
    IP-based sliding-window rate limiter.

    Defaults: 10 requests per 15 minutes per key. Keys with no hit inside the
    window are dropped by a sweep that runs at most once per window.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 900.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.max_requests = max_requests
        self.window = window_seconds
        self._clock = clock or time.monotonic
        self._store: Dict[str, List[float]] = {}
        self._last_sweep = self._clock()

    def __len__(self) -> int:
        return len(self._store)

    def is_allowed(self, key: str) -> Tuple[bool, int]:
        """
        Record a hit for ``key`` if it fits in the window.

        Returns:
            (allowed, retry_after_seconds). retry_after is 0 when allowed.
        """
        now = self._clock()
        window_start = now - self.window
        self._sweep(now)

        # Evict expired timestamps
        timestamps = [t for t in self._store.get(key, ()) if t > window_start]

        if len(timestamps) >= self.max_requests:
            self._store[key] = timestamps
            # Seconds until the oldest hit leaves the window
            retry_after = int(timestamps[0] + self.window - now) + 1
            return False, retry_after

        timestamps.append(now)
        self._store[key] = timestamps
        return True, 0

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.window:
            return
        self._last_sweep = now
        window_start = now - self.window
        stale = [key for key, timestamps in self._store.items() if not timestamps or timestamps[-1] <= window_start]
        for key in stale:
            del self._store[key]

    def reset(self) -> None:
        self._store.clear()


def get_client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Extract the client IP.

    The first X-Forwarded-For entry is used only when trust_proxy_headers is
    set, i.e. when the service runs behind a proxy that overwrites the header.
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
