# src/tokenstats/application/stats_service.py
"""
Token Stats Service - Snapshot Aggregation Pipeline

This module contains the core business logic of the service: building one
consistent TokenStats snapshot from independent upstream sources.

On a cache miss the five inputs (price, total supply, founder balance,
burned balance, holder count) are fetched concurrently, each under its own
retry policy and per-attempt timeout. A wallet whose token accounts all
fail counts as a failed input. Failed inputs fall back to the last
snapshot's value (or zero) and are reported as degraded. Concurrent misses
share one refresh.

Files that USE this module:
- tokenstats.app (builds the service at startup)
- tokenstats.adapters.web.routes (GET /api/token-stats)
- tokenstats.application.health (cache state for /health/details)
- tests.test_stats_service (unit tests)

Files that this module USES:
- tokenstats.adapters.providers.base (PriceProvider, SupplyProvider interfaces)
- tokenstats.application.balances (BalanceResolver, scale_amount)
- tokenstats.application.holders (HolderEnumerator)
- tokenstats.application.cache (TTLCache, SingleFlight)
- tokenstats.application.stats (StatsTracker)
- tokenstats.shared.retry (RetryPolicy)
"""
from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from tokenstats.adapters.providers.base import PriceProvider, SupplyProvider
from tokenstats.application.balances import BalanceResolver, scale_amount
from tokenstats.application.cache import SingleFlight, TTLCache
from tokenstats.application.holders import HolderEnumerator
from tokenstats.application.stats import StatsTracker
from tokenstats.domain.errors import (
    AllSourcesUnavailableError,
    DataUnavailableError,
    InvariantViolationError,
)
from tokenstats.domain.models import STAT_FIELDS, ZERO, StatsResult, TokenStats
from tokenstats.shared.retry import RetryPolicy

log = logging.getLogger(__name__)

SUPPLY_TOLERANCE = Decimal(1)


def check_supply_invariant(stats: TokenStats, tolerance: Decimal = SUPPLY_TOLERANCE) -> None:
    """
    Check that founder + burned + circulating adds up to total supply.

    Raises:
        InvariantViolationError: If the difference exceeds tolerance
    """
    holdings = stats.holdings_sum()
    if abs(holdings - stats.total_supply) > tolerance:
        raise InvariantViolationError(expected=stats.total_supply, actual=holdings, tolerance=tolerance)


class TokenStatsService:
    """Serves cached token statistics and refreshes them on demand."""

    def __init__(
        self,
        price_provider: PriceProvider,
        supply_provider: SupplyProvider,
        balances: BalanceResolver,
        holders: HolderEnumerator,
        token_address: str,
        founder_wallet: str,
        burn_wallet: str,
        cache: TTLCache,
        retry: Optional[RetryPolicy] = None,
        default_decimals: Optional[int] = None,
        tracker: Optional[StatsTracker] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize the service.

        Args:
            price_provider: USD price source (usually a PriceProviderChain)
            supply_provider: Total supply source (usually an RpcProviderChain)
            balances: Resolver for the founder and burn wallet balances
            holders: Holder enumerator
            token_address: Mint address of the token
            founder_wallet: Founder wallet address
            burn_wallet: Burn wallet address
            cache: Snapshot cache
            retry: Retry policy applied to each fetch (defaults to RetryPolicy())
            default_decimals: Fallback decimals for the total supply
            tracker: Activity counters (a private tracker when omitted)
            now: Wall clock for lastUpdated
        """
        self.price_provider = price_provider
        self.supply_provider = supply_provider
        self.balances = balances
        self.holders = holders
        self.token_address = token_address
        self.founder_wallet = founder_wallet
        self.burn_wallet = burn_wallet
        self.cache = cache
        self.retry = retry or RetryPolicy()
        self.default_decimals = default_decimals
        self.tracker = tracker or StatsTracker()
        self._now = now
        self._flight: SingleFlight[StatsResult] = SingleFlight()

    async def get_stats(self) -> StatsResult:
        """
        Get the current snapshot.

        Returns:
            Cached snapshot while fresh, otherwise a refreshed (or stale) one

        Raises:
            AllSourcesUnavailableError: If every source failed and nothing was ever cached
        """
        hit = self.cache.get()
        if hit is not None:
            stats, age = hit
            self.tracker.record_cache_hit()
            return StatsResult(stats=stats, cached=True, cache_age=int(age))
        return await self._flight.do(self.refresh)

    @property
    def refresh_count(self) -> int:
        return self._flight.runs

    async def refresh(self) -> StatsResult:
        """
        Run one refresh cycle.

        Returns:
            StatsResult with cached=False, or a stale cached snapshot if every source failed
        """
        fetchers: Dict[str, Callable[[threading.Event], Any]] = {
            "price": self._fetch_price,
            "total_supply": self._fetch_total_supply,
            "founder_balance": lambda cancel: self._fetch_balance("founder_balance", self.founder_wallet, cancel),
            "burned_balance": lambda cancel: self._fetch_balance("burned_balance", self.burn_wallet, cancel),
            "holder_count": self._fetch_holder_count,
        }
        log.info("Refreshing token stats for %s", self.token_address)
        results = await asyncio.gather(
            *(self.retry.run_in_thread(name, fetchers[name], cancellable=True) for name in STAT_FIELDS),
            return_exceptions=True,
        )

        previous = self.cache.last()
        values: Dict[str, Any] = {}
        failures: Dict[str, str] = {}
        for name, result in zip(STAT_FIELDS, results):
            if isinstance(result, BaseException):
                if isinstance(result, DataUnavailableError):
                    log.warning("Fetch of %s failed: %s", name, result)
                else:
                    log.error("Fetch of %s raised unexpected %s", name, type(result).__name__,
                              exc_info=result)
                failures[name] = str(result) or type(result).__name__
                values[name] = getattr(previous.value, name) if previous else _zero_for(name)
            else:
                values[name] = result

        if len(failures) == len(STAT_FIELDS):
            return self._all_failed(failures)

        degraded = tuple(name for name in STAT_FIELDS if name in failures)
        stats = TokenStats.build(
            price=values["price"],
            total_supply=values["total_supply"],
            founder_balance=values["founder_balance"],
            burned_balance=values["burned_balance"],
            holder_count=values["holder_count"],
            last_updated=self._now(),
            degraded_fields=degraded,
        )

        try:
            check_supply_invariant(stats)
        except InvariantViolationError as e:
            self.tracker.record_invariant_violation()
            log.warning("Serving snapshot despite invariant violation: %s", e)

        self.cache.set(stats)
        self.tracker.record_refresh(degraded)
        if degraded:
            log.warning("Token stats refreshed with degraded fields: %s", ", ".join(degraded))
        else:
            log.info("Token stats refreshed: price=%s holders=%d", stats.price, stats.holder_count)
        return StatsResult(stats=stats, cached=False)

    def _all_failed(self, failures: Dict[str, str]) -> StatsResult:
        previous = self.cache.last()
        error = AllSourcesUnavailableError(failures)
        if previous is None:
            self.tracker.record_error(str(error))
            log.error("%s; no cached snapshot to fall back to", error)
            raise error

        self.tracker.record_error(str(error), stale=True)
        age = previous.age(self.cache.now())
        log.warning("%s; serving stale snapshot (%.0fs old)", error, age)
        return StatsResult(
            stats=previous.value,
            cached=True,
            cache_age=int(age),
            stale=True,
            error="all_sources_unavailable",
        )

    # Fetchers run on worker threads; cancel is set once the attempt is abandoned

    def _fetch_price(self, cancel: threading.Event) -> Decimal:
        return self.price_provider.usd_price()

    def _fetch_total_supply(self, cancel: threading.Event) -> Decimal:
        raw = self.supply_provider.token_supply(self.token_address)
        return scale_amount(raw, self.default_decimals, "token supply")

    def _fetch_balance(self, name: str, wallet: str, cancel: threading.Event) -> Decimal:
        result = self.balances.wallet_balance(wallet, self.token_address, cancel)
        if result.accounts_total and result.accounts_skipped == result.accounts_total:
            raise DataUnavailableError(
                name, f"none of the {result.accounts_total} token account(s) of {wallet} could be read"
            )
        if result.accounts_skipped:
            self.tracker.record_skipped_accounts(name, result.accounts_skipped)
        return result.balance

    def _fetch_holder_count(self, cancel: threading.Event) -> int:
        return self.holders.count_holders(self.token_address, cancel)


def _zero_for(name: str) -> Any:
    return 0 if name == "holder_count" else ZERO

