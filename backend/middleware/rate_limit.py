"""
In-memory rate limiting for order placement.

Sliding-window counter keyed by (caller, route). The caller is the
bearer token when one is present, otherwise the client IP.
Counters live in process memory, so limits are per worker.
"""
import time
import logging
from collections import defaultdict, deque

from fastapi import HTTPException, Request

from middleware.auth import _parse_bearer_token

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window limiter: one deque of request timestamps per key."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._hits: dict[str, deque] = defaultdict(deque)

    def _evict(self, key: str, window_seconds: int) -> deque:
        hits = self._hits[key]
        cutoff = self._clock() - window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        return hits

    def check(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Record a hit and return True, or return False if the window is full."""
        hits = self._evict(key, window_seconds)
        if len(hits) >= max_requests:
            return False
        hits.append(self._clock())
        return True

    def remaining(self, key: str, max_requests: int, window_seconds: int) -> int:
        return max(0, max_requests - len(self._evict(key, window_seconds)))

    def reset(self) -> None:
        self._hits.clear()


# Global rate limiter instance
_limiter = RateLimiter()


def _caller_key(request: Request) -> str:
    token = _parse_bearer_token(request.headers.get("Authorization"))
    if token:
        # Unverified here; require_actor rejects bad tokens on the same request.
        return f"token:{token[-16:]}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


def rate_limit(max_requests: int = 10, window_seconds: int = 60):
    """
    FastAPI dependency factory.

    Usage:
        @router.post("/orders/product")
        async def place(..., _rate=Depends(rate_limit(10, 60))):
            ...
    """
    async def _check_rate_limit(request: Request):
        key = f"{_caller_key(request)}:{request.url.path}"

        if not _limiter.check(key, max_requests, window_seconds):
            logger.warning(
                f"Rate limit exceeded: {key} ({max_requests}/{window_seconds}s)"
            )
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded. Maximum {max_requests} requests "
                       f"per {window_seconds} seconds. Try again later.",
                headers={
                    "Retry-After": str(window_seconds),
                    "X-RateLimit-Limit": str(max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check_rate_limit
