"""
Application Layer - Use Cases and Services

This package contains the stats pipeline (aggregation, caching, holder
enumeration, balance resolution), health reporting and the upload use case.
"""

from tokenstats.application.balances import BalanceResolver, scale_amount
from tokenstats.application.cache import SingleFlight, TTLCache
from tokenstats.application.health import HealthChecker, HealthStatus
from tokenstats.application.holders import HolderEnumerator
from tokenstats.application.stats import StatsTracker
from tokenstats.application.stats_service import TokenStatsService, check_supply_invariant
from tokenstats.application.uploads import UploadService

__all__ = [
    "BalanceResolver",
    "scale_amount",
    "SingleFlight",
    "TTLCache",
    "HealthChecker",
    "HealthStatus",
    "HolderEnumerator",
    "StatsTracker",
    "TokenStatsService",
    "check_supply_invariant",
    "UploadService",
]
