"""Rate limiting middleware using Redis.

Sliding window per authenticated subject, or per client IP when the request
carries no usable token. Login, refresh and CSV export each get their own,
tighter bucket so they cannot eat into the general API budget. Redis
failures let the request through.
"""

import logging
import time
from typing import Callable, Optional

import redis.asyncio as redis
from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from freightdesk.auth.jwt import decode_token
from freightdesk.middleware.exceptions import create_error_response
from freightdesk.utils.cache import get_redis

logger = logging.getLogger(__name__)

# path prefix → (requests, window seconds)
ROUTE_LIMITS = {
    "/api/auth/login": (5, 60),
    "/api/auth/refresh": (20, 60),
    "/api/jobs/export": (10, 60),
}


class RateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app,
        default_limit: int = 100,
        default_window: int = 60,
        exempt_paths: Optional[list[str]] = None,
    ):
        super().__init__(app)
        self.default_limit = default_limit
        self.default_window = default_window
        self.exempt_paths = exempt_paths or ["/health", "/docs", "/openapi.json", "/files"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if any(path.startswith(p) for p in self.exempt_paths):
            return await call_next(request)

        bucket, limit, window = self._bucket(request)
        allowed, remaining, reset_at = await self._hit(bucket, limit, window)
        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(int(reset_at)),
        }

        if not allowed:
            retry_after = max(int(reset_at - time.time()), 1)
            logger.warning("Rate limit hit for %s on %s", bucket, path)
            return create_error_response(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                message=f"Rate limit exceeded. Try again in {retry_after} seconds.",
                error_code="RATE_LIMITED",
                headers={**headers, "Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

    def _bucket(self, request: Request) -> tuple[str, int, int]:
        """Return (bucket key, limit, window) for this request."""
        client = self._client_key(request)
        for prefix, (limit, window) in ROUTE_LIMITS.items():
            if request.url.path.startswith(prefix):
                return f"{client}:{prefix}", limit, window
        return client, self.default_limit, self.default_window

    @staticmethod
    def _client_key(request: Request) -> str:
        auth_header = request.headers.get("authorization", "")
        if auth_header.startswith("Bearer "):
            subject = decode_token(auth_header[7:]).get("sub")
            if subject:
                return f"user:{subject}"

        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return f"ip:{forwarded.split(',')[0].strip()}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    @staticmethod
    async def _hit(bucket: str, limit: int, window: int) -> tuple[bool, int, float]:
        """Record one request in the sliding window.

        Returns:
            (allowed, remaining, reset_at)
        """
        now = time.time()
        key = f"ratelimit:{bucket}"

        try:
            redis_client = await get_redis()
            await redis_client.zremrangebyscore(key, 0, now - window)
            count = await redis_client.zcard(key)

            if count >= limit:
                oldest = await redis_client.zrange(key, 0, 0, withscores=True)
                reset_at = oldest[0][1] + window if oldest else now + window
                return False, 0, reset_at

            await redis_client.zadd(key, {str(now): now})
            await redis_client.expire(key, window)
            return True, limit - count - 1, now + window

        except redis.RedisError as e:
            logger.error("Rate limit check failed: %s", e)
            return True, limit, now + window
