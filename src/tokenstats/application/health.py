# src/tokenstats/application/health.py
"""
Health Checker - Service Monitoring and Diagnostics

This module reports the state of the stats pipeline for /health/details:
the cached snapshot, refresh counters, which upstream providers answered
last and which storage backend handles uploads. It reads local state
only and never calls upstream APIs.

Files that USE this module:
- tokenstats.adapters.web.routes (GET /health/details)
- tokenstats.app (creates the checker)
- tests.test_api (endpoint tests)

Files that this module USES:
- tokenstats.application.stats_service (cache and tracker)
- tokenstats.adapters.providers.chain (last_used_provider)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from tokenstats.adapters.providers.chain import ProviderChain
from tokenstats.application.stats_service import TokenStatsService

logger = logging.getLogger(__name__)


@dataclass
class HealthStatus:
    """Represents the health status of a component."""
    is_healthy: bool
    message: str
    last_check: datetime
    details: Optional[Dict[str, Any]] = None


class HealthChecker:
    """Centralized health checking for the stats pipeline."""

    def __init__(
        self,
        stats_service: TokenStatsService,
        chains: Optional[Dict[str, ProviderChain]] = None,
        storage_backend: str = "local",
    ):
        self.stats_service = stats_service
        self.chains = chains or {}
        self.storage_backend = storage_backend

    def check_cache(self) -> HealthStatus:
        """Check the cached snapshot; an empty cache before the first request is healthy."""
        cache = self.stats_service.cache
        entry = cache.last()
        now = datetime.now(timezone.utc)
        if entry is None:
            return HealthStatus(True, "No snapshot cached yet", now, {"present": False})

        age = entry.age(cache.now())
        expired = entry.is_expired(cache.now())
        degraded = list(entry.value.degraded_fields)
        details = {
            "present": True,
            "age_seconds": int(age),
            "ttl_seconds": entry.ttl_seconds,
            "expired": expired,
            "last_updated": entry.value.last_updated.isoformat(),
            "degraded": degraded,
        }
        if degraded:
            return HealthStatus(False, f"Last snapshot degraded: {', '.join(degraded)}", now, details)
        return HealthStatus(True, f"Snapshot {int(age)}s old", now, details)

    def check_refreshes(self) -> HealthStatus:
        """Check refresh counters; unhealthy if the last refresh failed outright."""
        summary = self.stats_service.tracker.get_summary()
        now = datetime.now(timezone.utc)
        last_error_time = summary["last_error_time"]
        last_refresh_time = summary["last_refresh_time"]
        failing = last_error_time is not None and (
            last_refresh_time is None or last_error_time > last_refresh_time
        )
        if failing:
            return HealthStatus(False, f"Last refresh failed: {summary['last_error']}", now, summary)
        return HealthStatus(True, f"{summary['refreshes']} refresh(es) completed", now, summary)

    def check_providers(self) -> HealthStatus:
        """Report which provider in each chain answered last."""
        details = {name: chain.last_used_provider for name, chain in self.chains.items()}
        message = ", ".join(f"{name}={used or 'unused'}" for name, used in details.items())
        return HealthStatus(True, message or "No provider chains", datetime.now(timezone.utc), details)

    def get_overall_health(self) -> Dict[str, Any]:
        """
        Get overall health status of all components.

        Returns:
            Dictionary with overall status and per-component checks
        """
        checks = {
            "cache": self.check_cache(),
            "refreshes": self.check_refreshes(),
            "providers": self.check_providers(),
        }
        failed_checks = [name for name, check in checks.items() if not check.is_healthy]
        overall_healthy = not failed_checks
        if overall_healthy:
            status_message = "All systems healthy"
        else:
            status_message = f"Degraded - {len(failed_checks)} component(s) failed: {', '.join(failed_checks)}"
            logger.info("Health check degraded: %s", ", ".join(failed_checks))

        return {
            "overall_healthy": overall_healthy,
            "status": "healthy" if overall_healthy else "degraded",
            "message": status_message,
            "storage_backend": self.storage_backend,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                name: {
                    "healthy": check.is_healthy,
                    "message": check.message,
                    "last_check": check.last_check.isoformat(),
                    "details": check.details,
                }
                for name, check in checks.items()
            },
        }
