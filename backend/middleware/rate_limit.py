import hashlib
import time
import logging
from typing import Dict, List
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from config import RATE_LIMIT_PER_MIN

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, rate_limit: int = RATE_LIMIT_PER_MIN, window: float = 60.0, clock=time.time):
        super().__init__(app)
        self.rate_limit = rate_limit
        self.window = window
        self.clock = clock
        self.requests: Dict[str, List[float]] = {}
        self._last_sweep = clock()

    @staticmethod
    def _client_id(request: Request) -> str:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            return hashlib.sha256(auth_header[7:].encode("utf-8")).hexdigest()[:16]
        return request.client.host if request.client else "unknown"

    def prune(self, now: float) -> int:
        """Forget clients with no requests inside the window. Returns how many were dropped."""
        idle = [cid for cid, times in self.requests.items() if not times or now - times[-1] >= self.window]
        for client_id in idle:
            del self.requests[client_id]
        self._last_sweep = now
        return len(idle)

    def check(self, client_id: str, now: float) -> bool:
        """Record a request for ``client_id`` and report whether it is within the limit."""
        if now - self._last_sweep >= self.window:
            self.prune(now)

        # Clean old entries (older than the window)
        recent = [t for t in self.requests.get(client_id, []) if now - t < self.window]
        if len(recent) >= self.rate_limit:
            self.requests[client_id] = recent
            return False

        recent.append(now)
        self.requests[client_id] = recent
        return True

    async def dispatch(self, request: Request, call_next):
        # Skip rate limiting for non-API routes and health checks
        if not request.url.path.startswith("/api") or request.url.path in ("/api/health", "/api/"):
            return await call_next(request)

        client_id = self._client_id(request)
        if not self.check(client_id, self.clock()):
            logger.warning(f"Rate limit exceeded for client {client_id}")
            return JSONResponse(
                status_code=429,
                content={"detail": f"Rate limit exceeded. Maximum {self.rate_limit} requests per minute."},
            )
        return await call_next(request)
