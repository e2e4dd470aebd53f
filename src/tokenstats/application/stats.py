# src/tokenstats/application/stats.py
"""
Refresh Statistics Tracker - Track Aggregator Activity

This module keeps in-memory counters about the stats pipeline:
- Refresh cycles run and cache hits served
- Fields that fell back to a cached value or zero
- Token accounts left out of wallet balances
- Stale snapshots served and total failures
- Supply invariant violations
- The last error seen

Files that USE this module:
- tokenstats.application.stats_service (records every refresh outcome)
- tokenstats.application.health (summary for /health/details)
- tests.test_stats_service (asserts on counters)

Files that this module USES:
- None (pure in-memory bookkeeping)
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass
class RefreshStats:
    """Counters since process start."""
    start_time: str  # ISO datetime string
    refreshes: int = 0
    cache_hits: int = 0
    stale_served: int = 0
    total_failures: int = 0
    invariant_violations: int = 0
    degraded_fields: Dict[str, int] = field(default_factory=dict)  # field name -> count
    skipped_accounts: Dict[str, int] = field(default_factory=dict)  # field name -> accounts left out
    last_refresh_time: Optional[str] = None  # ISO datetime string
    last_error_time: Optional[str] = None  # ISO datetime string
    last_error: Optional[str] = None


class StatsTracker:
    """Track aggregator activity."""

    def __init__(self) -> None:
        self._stats = RefreshStats(start_time=_now_iso())
        self._lock = threading.Lock()

    def record_cache_hit(self) -> None:
        with self._lock:
            self._stats.cache_hits += 1

    def record_refresh(self, degraded: Iterable[str] = ()) -> None:
        """
        Record a completed refresh cycle.

        Args:
            degraded: Names of fields that fell back this cycle
        """
        with self._lock:
            self._stats.refreshes += 1
            self._stats.last_refresh_time = _now_iso()
            for name in degraded:
                self._stats.degraded_fields[name] = self._stats.degraded_fields.get(name, 0) + 1

    def record_error(self, error_msg: str, stale: bool = False) -> None:
        """
        Record a refresh where every source failed.

        Args:
            error_msg: Error description
            stale: True if a stale snapshot was served instead of failing
        """
        with self._lock:
            if stale:
                self._stats.stale_served += 1
            else:
                self._stats.total_failures += 1
            self._stats.last_error = error_msg
            self._stats.last_error_time = _now_iso()
        logger.debug("Recorded refresh error in stats: %s", error_msg)

    def record_invariant_violation(self) -> None:
        with self._lock:
            self._stats.invariant_violations += 1

    def record_skipped_accounts(self, name: str, count: int) -> None:
        """Record token accounts left out of a balance that was still served."""
        with self._lock:
            self._stats.skipped_accounts[name] = self._stats.skipped_accounts.get(name, 0) + count

    def get_summary(self) -> Dict:
        """
        Get a copy of every counter.

        Returns:
            Dictionary suitable for JSON output
        """
        with self._lock:
            s = self._stats
            return {
                "start_time": s.start_time,
                "refreshes": s.refreshes,
                "cache_hits": s.cache_hits,
                "stale_served": s.stale_served,
                "total_failures": s.total_failures,
                "invariant_violations": s.invariant_violations,
                "degraded_fields": dict(s.degraded_fields),
                "skipped_accounts": dict(s.skipped_accounts),
                "last_refresh_time": s.last_refresh_time,
                "last_error_time": s.last_error_time,
                "last_error": s.last_error,
            }


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
