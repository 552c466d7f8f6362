"""Simple in-memory sliding-window rate limiter.

Sufficient for a single-instance deployment; every worker process keeps its
own window.  ``/health`` is never limited so probes keep working under load.

Clients are keyed by socket address.  ``X-Forwarded-For`` is honoured only
when ``rate_limit_trust_forwarded_for`` is set, i.e. behind a proxy that
overwrites the header.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.config import Settings, get_settings

EXEMPT_PATHS = frozenset({"/health"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP sliding window rate limiter."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        s = settings or get_settings()
        self._max_requests = s.rate_limit_per_minute
        self._window_seconds = s.rate_limit_window_seconds
        self._trust_forwarded_for = s.rate_limit_trust_forwarded_for
        # ip -> request timestamps, oldest first; idle clients are dropped
        self._requests: dict[str, deque[float]] = {}

    def _client_ip(self, request: Request) -> str:
        if self._trust_forwarded_for:
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _expire(self, now: float) -> None:
        """Drop timestamps older than the window, and clients left with none."""
        cutoff = now - self._window_seconds
        for ip in list(self._requests):
            hits = self._requests[ip]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._requests[ip]

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        ip = self._client_ip(request)
        now = time.monotonic()
        self._expire(now)
        hits = self._requests.get(ip)

        if hits is not None and len(hits) >= self._max_requests:
            retry_after = int(self._window_seconds - (now - hits[0]))
            return JSONResponse(
                {"detail": "Rate limit exceeded"},
                status_code=429,
                headers={"Retry-After": str(max(retry_after, 1))},
            )

        if hits is None:
            hits = self._requests[ip] = deque()
        hits.append(now)
        response = await call_next(request)

        remaining = self._max_requests - len(hits)
        response.headers["X-RateLimit-Limit"] = str(self._max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(remaining, 0))
        return response
