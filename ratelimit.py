"""In-memory fixed-window rate limiting for the auth endpoints."""
import logging
import threading
import time
from typing import Dict, Tuple

from fastapi import HTTPException, Request, status

import config

logger = logging.getLogger(__name__)


class RateLimiter:
    """Counts hits per client host within a fixed window."""

    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        """Record a hit; False once the key is over its limit."""
        if self.limit <= 0:
            return True
        now = time.monotonic()
        with self._lock:
            self._prune(now)
            started, count = self._hits.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._hits[key] = (started, count)
        return count <= self.limit

    def _prune(self, now: float) -> None:
        # Caller holds the lock
        expired = [k for k, (started, _) in self._hits.items() if now - started >= self.window_seconds]
        for k in expired:
            del self._hits[k]

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    async def __call__(self, request: Request) -> None:
        key = request.client.host if request.client else "unknown"
        if not self.hit(key):
            logger.warning("Auth rate limit exceeded for %s on %s", key, request.url.path)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many authentication attempts, please try again later",
            )


auth_limiter = RateLimiter(config.AUTH_RATE_LIMIT, config.AUTH_RATE_WINDOW_SECONDS)
