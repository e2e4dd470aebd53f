# src/tokenstats/app.py
"""
Application Entry Point - Service Wiring and Startup

This module serves as the composition root for the tokenstats service.
It builds every provider, service and store from settings and starts uvicorn.

Files that USE this module:
- tokenstats console script (pyproject.toml)
- uvicorn --factory tokenstats.app:build_app

Files that this module USES:
- tokenstats.shared.logging_conf (setup_logging for logging configuration)
- tokenstats.config (settings for configuration management)
- tokenstats.adapters.providers (provider chains and Helius client)
- tokenstats.adapters.storage (object stores)
- tokenstats.adapters.persistence (meme record store)
- tokenstats.application (services)
- tokenstats.adapters.web (create_app)
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI

from tokenstats.adapters.persistence.meme_store import MemeStore
from tokenstats.adapters.providers.chain import build_price_chain, build_rpc_chain
from tokenstats.adapters.providers.helius import HeliusClient
from tokenstats.adapters.storage.base import ObjectStore
from tokenstats.adapters.storage.local import LocalFileStore
from tokenstats.adapters.storage.vercel_blob import VercelBlobStore
from tokenstats.adapters.web.server import create_app
from tokenstats.application.balances import BalanceResolver
from tokenstats.application.cache import TTLCache
from tokenstats.application.health import HealthChecker
from tokenstats.application.holders import HolderEnumerator
from tokenstats.application.stats import StatsTracker
from tokenstats.application.stats_service import TokenStatsService
from tokenstats.application.uploads import UploadService
from tokenstats.config import Settings, settings as default_settings
from tokenstats.shared.logging_conf import setup_logging
from tokenstats.shared.retry import RetryPolicy

log = logging.getLogger(__name__)


def build_object_store(cfg: Settings) -> ObjectStore:
    """Create the object store selected by STORAGE_BACKEND."""
    if cfg.storage_backend == "vercel_blob":
        return VercelBlobStore(
            token=cfg.blob_read_write_token,
            api_url=cfg.blob_api_url,
            timeout=cfg.http_timeout_seconds,
        )
    return LocalFileStore(upload_dir=cfg.upload_dir, url_prefix=cfg.upload_url_prefix)


def build_app(cfg: Optional[Settings] = None) -> FastAPI:
    """
    Wire every dependency from settings and create the FastAPI app.

    Raises:
        ValueError: If required configuration (API keys, tokens) is missing
    """
    cfg = cfg or default_settings

    rpc_chain = build_rpc_chain(cfg)
    price_chain = build_price_chain(cfg)
    if not cfg.helius_api_key:
        raise ValueError("HELIUS_API_KEY is not configured")
    helius = HeliusClient(url=cfg.HELIUS_URL, timeout=cfg.http_timeout_seconds)

    stats_service = TokenStatsService(
        price_provider=price_chain,
        supply_provider=rpc_chain,
        balances=BalanceResolver(rpc_chain, default_decimals=cfg.default_token_decimals),
        holders=HolderEnumerator(helius, page_size=cfg.holder_page_size, max_pages=cfg.holder_max_pages),
        token_address=cfg.token_address,
        founder_wallet=cfg.founder_wallet,
        burn_wallet=cfg.burn_wallet,
        cache=TTLCache(cfg.stats_cache_ttl_seconds),
        retry=RetryPolicy(
            max_attempts=cfg.retry_max_attempts,
            backoff_seconds=cfg.retry_backoff_seconds,
            backoff_multiplier=cfg.retry_backoff_multiplier,
            attempt_timeout=cfg.fetch_timeout_seconds,
        ),
        default_decimals=cfg.default_token_decimals,
        tracker=StatsTracker(),
    )

    store = build_object_store(cfg)
    upload_service = UploadService(
        store=store,
        records=MemeStore(cfg.meme_index_file),
        max_bytes=cfg.upload_max_bytes,
        allowed_types=cfg.upload_allowed_types_list,
    )
    health_checker = HealthChecker(
        stats_service,
        chains={"price": price_chain, "rpc": rpc_chain},
        storage_backend=store.name,
    )

    return create_app(
        cfg,
        stats_service=stats_service,
        upload_service=upload_service,
        health_checker=health_checker,
        static_dir=cfg.upload_dir if isinstance(store, LocalFileStore) else None,
    )


def main() -> None:
    """
    Configure logging, build the app and serve it with uvicorn.

    Exits with status 1 if the configuration is incomplete.
    """
    cfg = default_settings
    setup_logging(
        level=cfg.log_level,
        log_file=cfg.log_file,
        log_dir=cfg.log_dir,
        max_bytes=cfg.log_max_bytes,
        backup_count=cfg.log_backup_count,
    )

    try:
        app = build_app(cfg)
    except ValueError as e:
        log.error("Configuration error: %s", e)
        sys.exit(1)

    log.info("Listening on %s:%d", cfg.host, cfg.port)
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_config=None)


if __name__ == "__main__":
    main()
