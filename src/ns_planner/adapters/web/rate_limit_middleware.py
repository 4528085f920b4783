"""Rate limiting middleware for Starlette using throttled-py."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from throttled import RateLimiterType, Throttled, rate_limiter, store

from ns_planner.domain.models.error_details import ErrorDetails

logger = logging.getLogger(__name__)


def extract_client_ip(request: Request) -> str:
    """Extract client IP address from request, supporting X-Forwarded-For header.

    X-Forwarded-For may contain multiple IPs (client, proxy1, proxy2); the first one is
    the original client.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    if request.client and request.client.host:
        return request.client.host

    logger.warning("Could not determine client IP, using 'unknown'")
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce rate limiting per IP address.

    Paths listed in ``path_limits`` get their own quota and bucket; every other path
    shares the global quota.
    """

    def __init__(
        self,
        app: Callable,
        requests_per_minute: int = 180,
        path_limits: Mapping[str, int] | None = None,
    ) -> None:
        """Initialize rate limiting middleware.

        Args:
            app: The ASGI application to wrap.
            requests_per_minute: Requests allowed per IP per minute on unlisted paths.
            path_limits: Requests allowed per IP per minute, by exact path.
        """
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.quota = rate_limiter.per_min(requests_per_minute, burst=requests_per_minute)
        self.path_quotas = {
            path: rate_limiter.per_min(limit, burst=limit)
            for path, limit in (path_limits or {}).items()
        }
        self.rate_limiter_store = store.MemoryStore()
        logger.info(
            f"Rate limiting enabled: {requests_per_minute} requests per minute per IP"
            + "".join(f", {limit} on {path}" for path, limit in (path_limits or {}).items())
        )

    def _extract_retry_after(self, result: Any) -> float:
        """Extract retry_after value from rate limit result."""
        retry_after: float = 60.0
        if hasattr(result, "state"):
            state = getattr(result, "state", None)
            if state and hasattr(state, "retry_after"):
                retry_after = float(getattr(state, "retry_after", 60.0))
        elif hasattr(result, "retry_after"):
            retry_after = float(getattr(result, "retry_after", 60.0))
        return retry_after

    def _create_rate_limit_response(
        self, client_ip: str, path: str, retry_after: float
    ) -> Response:
        """Create rate limit exceeded response."""
        logger.warning(
            f"Rate limit exceeded for IP {client_ip} on {path}, "
            f"retry after {retry_after} seconds"
        )
        body = ErrorDetails(error="Too many requests. Please try again later.", status_code=429)
        return JSONResponse(
            body.model_dump(),
            status_code=429,
            headers={"Retry-After": str(max(1, int(retry_after)))},
        )

    def _throttle_for(self, client_ip: str, path: str) -> Throttled:
        quota = self.path_quotas.get(path)
        # Each listed path counts in its own bucket
        key = f"{client_ip}|{path}" if quota is not None else client_ip
        return Throttled(
            key=key,
            using=RateLimiterType.TOKEN_BUCKET.value,
            quota=quota or self.quota,
            store=self.rate_limiter_store,
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and enforce rate limiting."""
        client_ip = extract_client_ip(request)
        path = request.url.path

        result = self._throttle_for(client_ip, path).limit()
        if result.limited:
            retry_after = self._extract_retry_after(result)
            return self._create_rate_limit_response(client_ip, path, retry_after)

        response: Response = await call_next(request)
        return response
