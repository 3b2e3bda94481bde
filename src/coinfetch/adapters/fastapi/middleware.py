"""Per-client rate limiting middleware."""

import math
import time
from collections.abc import Callable

from cachetools import TTLCache  # type: ignore[import-untyped]
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request limit keyed by client host.

    The first request of a client opens a window of ``window_seconds``.
    Requests beyond ``max_requests`` inside the window are answered
    with 429 and never reach the application.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: float = 900.0,
        max_clients: int = 10000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(app)
        self._max_requests = max_requests
        self._window = window_seconds
        self._timer = timer
        # host -> (window start, requests seen in window)
        self._windows: TTLCache[str, tuple[float, int]] = TTLCache(
            maxsize=max_clients,
            ttl=window_seconds,
            timer=timer,
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        client = request.client.host if request.client else "unknown"
        now = self._timer()

        started, count = self._windows.get(client, (now, 0))
        if now - started >= self._window:
            started, count = now, 0
        count += 1
        self._windows[client] = (started, count)

        reset_in = max(math.ceil(started + self._window - now), 0)
        if count > self._max_requests:
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests, please try again later."},
                headers={"Retry-After": str(reset_in)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self._max_requests)
        response.headers["X-RateLimit-Remaining"] = str(self._max_requests - count)
        return response
