# src/tokenstats/adapters/web/middleware.py
"""
HTTP Middleware - Rate Limiting and Security Headers

Files that USE this module:
- tokenstats.adapters.web.server (create_app installs both middlewares)
- tests.test_api (endpoint tests)

Files that this module USES:
- tokenstats.shared.rate_limiter (RateLimiter, RateLimitConfig)
"""
import logging
import math
from typing import Dict

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from tokenstats.shared.rate_limiter import RateLimitConfig, RateLimiter

log = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "no-referrer",
}


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client-IP limits on /api routes; uploads get their own tighter limit."""

    def __init__(self, app, limiter: RateLimiter, limits: Dict[str, RateLimitConfig], prefix: str = "/api/"):
        super().__init__(app)
        self.limiter = limiter
        self.limits = limits
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method == "OPTIONS" or not path.startswith(self.prefix):
            return await call_next(request)

        kind = "upload" if path.endswith("/upload") else "api_request"
        config = self.limits[kind]
        identifier = f"{kind}:{client_ip(request)}"

        if not self.limiter.is_allowed(identifier, config):
            reset_at = self.limiter.get_reset_time(identifier, config)
            retry_after = max(1, math.ceil(reset_at - self.limiter.now())) if reset_at else config.time_window
            log.warning("Rate limit exceeded for %s on %s", identifier, path)
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests, please try again later."},
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(config.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(
            self.limiter.get_remaining_requests(identifier, config)
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
