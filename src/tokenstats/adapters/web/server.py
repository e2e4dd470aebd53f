# src/tokenstats/adapters/web/server.py
"""
FastAPI Application Factory

Builds the ASGI app around already-constructed services: CORS, rate limiting,
security headers, domain error mapping and static serving of local uploads.

Files that USE this module:
- tokenstats.app (build_app wires services and calls create_app)
- tests.test_api (endpoint tests with stub services)

Files that this module USES:
- tokenstats.adapters.web.routes (router)
- tokenstats.adapters.web.middleware (RateLimitMiddleware, SecurityHeadersMiddleware)
- tokenstats.config (Settings for CORS, limits and environment)
- tokenstats.domain.errors (error to status mapping)
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from tokenstats import __version__
from tokenstats.adapters.web.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from tokenstats.adapters.web.routes import router
from tokenstats.application.health import HealthChecker
from tokenstats.application.stats_service import TokenStatsService
from tokenstats.application.uploads import UploadService
from tokenstats.config import Settings
from tokenstats.domain.errors import (
    AllSourcesUnavailableError,
    StorageError,
    UploadValidationError,
)
from tokenstats.shared.rate_limiter import RateLimiter, build_rate_limits

log = logging.getLogger(__name__)


def create_app(
    cfg: Settings,
    stats_service: TokenStatsService,
    upload_service: UploadService,
    health_checker: HealthChecker,
    rate_limiter: Optional[RateLimiter] = None,
    static_dir: Optional[Path] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        cfg: Settings (CORS, rate limits, environment)
        stats_service: Token stats service
        upload_service: Meme upload service
        health_checker: Health checker for /health/details
        rate_limiter: Rate limiter (a fresh one when omitted)
        static_dir: Directory served under UPLOAD_URL_PREFIX (local storage only)

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Starting tokenstats API %s (environment=%s)", __version__, cfg.environment)
        log.info("Token: %s, CORS origins: %s", cfg.token_address, cfg.cors_origins_list)
        yield
        log.info("Shutting down tokenstats API")

    app = FastAPI(title="Token Stats API", version=__version__, lifespan=lifespan)
    app.state.settings = cfg
    app.state.stats_service = stats_service
    app.state.upload_service = upload_service
    app.state.health_checker = health_checker

    app.add_middleware(
        RateLimitMiddleware,
        limiter=rate_limiter or RateLimiter(),
        limits=build_rate_limits(cfg.rate_limit_max_requests, cfg.rate_limit_window_seconds),
    )
    app.add_middleware(SecurityHeadersMiddleware)
    # Added last so CORS headers are present on 429 and error responses too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_origin_regex=cfg.cors_origin_regex or None,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    _register_error_handlers(app, cfg)
    app.include_router(router)

    if static_dir is not None:
        static_dir.mkdir(parents=True, exist_ok=True)
        app.mount(cfg.upload_url_prefix, StaticFiles(directory=str(static_dir)), name="uploads")

    return app


def _register_error_handlers(app: FastAPI, cfg: Settings) -> None:
    @app.exception_handler(AllSourcesUnavailableError)
    async def all_sources_unavailable(request: Request, exc: AllSourcesUnavailableError):
        return JSONResponse(
            status_code=503,
            content={"error": "all_sources_unavailable", "message": str(exc)},
        )

    @app.exception_handler(UploadValidationError)
    async def upload_rejected(request: Request, exc: UploadValidationError):
        log.info("Upload rejected (%d): %s", exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})

    @app.exception_handler(StorageError)
    async def storage_failed(request: Request, exc: StorageError):
        log.error("Storage failure on %s: %s", request.url.path, exc)
        content = {"success": False, "error": "Error uploading file"}
        if not cfg.is_production:
            content["detail"] = str(exc)
        return JSONResponse(status_code=502, content=content)

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        log.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        content = {"error": "Internal server error"}
        if not cfg.is_production:
            content["detail"] = str(exc)
        return JSONResponse(status_code=500, content=content)
