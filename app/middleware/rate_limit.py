"""
Jojárts API — Login Rate Limiting Middleware
==============================================

What:  Per-IP sliding window limit on POST /api/auth/login.
Why:   The admin password is the only secret between the internet and the
       gallery; unlimited guessing against bcrypt would also burn CPU.
How:   Keeps recent attempt timestamps per client IP in memory. When the
       window already holds the configured number of attempts, the request
       is answered with 429 and a Retry-After header without reaching the
       route.

Single-process only: the counters live in this worker's memory, matching
the single-instance deployment.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"


class LoginRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding window counter over login attempts.

    Args:
        max_requests: attempts allowed per window and IP
        window_seconds: window length
    """

    def __init__(self, app, max_requests: int = 20, window_seconds: int = 900):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._attempts: Dict[str, List[float]] = defaultdict(list)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "POST" or request.url.path != LOGIN_PATH:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window_seconds

        attempts = [ts for ts in self._attempts[client_ip] if ts > window_start]

        if len(attempts) >= self.max_requests:
            self._attempts[client_ip] = attempts
            retry_after = int(attempts[0] + self.window_seconds - now) + 1
            logger.warning(
                "Login rate limit exceeded for IP %s: %d attempts in %ds",
                client_ip,
                len(attempts),
                self.window_seconds,
            )
            error = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={"message": error.message},
                headers={"Retry-After": str(retry_after)},
            )

        attempts.append(now)
        self._attempts[client_ip] = attempts
        self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs whose newest attempt fell out of the window."""
        inactive_ips = [
            ip for ip, timestamps in self._attempts.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._attempts[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
