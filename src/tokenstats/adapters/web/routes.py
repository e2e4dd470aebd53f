# src/tokenstats/adapters/web/routes.py
"""
HTTP Routes - Health, Token Stats and Meme Uploads

Endpoints:
- GET  /health             liveness probe
- GET  /health/details     pipeline diagnostics
- GET  /api/token-stats    current token statistics
- POST /api/memes/upload   multipart upload (field "meme")
- GET  /api/memes          uploaded memes, newest first

Services are read from app.state, where create_app puts them.

Files that USE this module:
- tokenstats.adapters.web.server (includes the router)
- tests.test_api (endpoint tests)

Files that this module USES:
- tokenstats.application (TokenStatsService, UploadService, HealthChecker)
- tokenstats.adapters.formatting.formatter (formatted_stats)
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from tokenstats.adapters.formatting.formatter import formatted_stats
from tokenstats.application.health import HealthChecker
from tokenstats.application.stats_service import TokenStatsService
from tokenstats.application.uploads import UploadService
from tokenstats.domain.errors import UploadValidationError
from tokenstats.domain.models import StatsResult

log = logging.getLogger(__name__)

router = APIRouter()


def get_stats_service(request: Request) -> TokenStatsService:
    return request.app.state.stats_service


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_health_checker(request: Request) -> HealthChecker:
    return request.app.state.health_checker


def stats_payload(result: StatsResult) -> dict:
    """
    Build the /api/token-stats body.

    Returns:
        TokenStats JSON plus `formatted`, `cached` and, when set, `cacheAge`, `stale` and `error`
    """
    payload = result.stats.to_json()
    payload["formatted"] = formatted_stats(result.stats)
    payload["cached"] = result.cached
    if result.cache_age is not None:
        payload["cacheAge"] = result.cache_age
    if result.stale:
        payload["stale"] = True
        payload["error"] = result.error
    return payload


@router.get("/health")
async def health():
    """Liveness probe, no dependencies."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/details")
async def health_details(checker: HealthChecker = Depends(get_health_checker)):
    return checker.get_overall_health()


@router.get("/api/token-stats")
async def token_stats(service: TokenStatsService = Depends(get_stats_service)):
    """
    Get token statistics.

    AllSourcesUnavailableError propagates to the 503 handler in server.py.
    """
    result = await service.get_stats()
    return stats_payload(result)


@router.post("/api/memes/upload")
async def upload_meme(
    meme: Optional[UploadFile] = File(None),
    service: UploadService = Depends(get_upload_service),
):
    """
    Accept one meme image.

    Starlette has already spooled the part to a temporary file by the time
    this runs; reading at most max_bytes + 1 bytes keeps an oversized file
    out of memory while still detecting it.
    """
    if meme is None:
        raise UploadValidationError("No file uploaded")

    service.check_metadata(meme.filename, meme.content_type)
    data = await meme.read(service.max_bytes + 1)
    asset = await asyncio.to_thread(service.upload, data, meme.filename, meme.content_type)
    return {"success": True, "data": asset.to_json()}


@router.get("/api/memes")
async def list_memes(service: UploadService = Depends(get_upload_service)):
    assets = await asyncio.to_thread(service.list)
    return {"success": True, "data": [a.to_json() for a in assets]}
