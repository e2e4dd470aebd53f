"""
Shared Test Fixtures - Fake Providers, Clock and Service Factory

Files that USE this module:
- pytest (loads fixtures for every test module)

Files that this module USES:
- tokenstats.adapters.providers.base (interfaces implemented by the fakes)
- tokenstats.application (services under test)
"""
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

from tokenstats.adapters.providers.base import (
    HolderIndex,
    PriceProvider,
    SupplyProvider,
    TokenAccountSource,
)
from tokenstats.application.balances import BalanceResolver
from tokenstats.application.cache import TTLCache
from tokenstats.application.holders import HolderEnumerator
from tokenstats.application.stats import StatsTracker
from tokenstats.application.stats_service import TokenStatsService
from tokenstats.domain.errors import DataUnavailableError
from tokenstats.domain.models import RawTokenAmount, TokenAccountRecord
from tokenstats.shared.retry import RetryPolicy

MINT = "25p2BoNp6qrJH5As6ek6H7Ei495oSkyZd3tGb97sqFmH"
FOUNDER = "D2y4sbmBuSjLU1hfrZbBCaveCHjk952c9VsGwfxnNNNH"
BURN = "1nc1nerator11111111111111111111111111111111"
FOUNDER_ACCOUNT = "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"
BURN_ACCOUNT = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakePriceProvider(PriceProvider):
    name = "fake_price"

    def __init__(self, price: Decimal = Decimal("0.5")):
        self.price = price
        self.error: Optional[Exception] = None
        self.calls = 0

    def usd_price(self) -> Decimal:
        self.calls += 1
        if self.error:
            raise self.error
        return self.price


class FakeRpc(SupplyProvider, TokenAccountSource):
    """Supply of 1e9 tokens (6 decimals); founder holds 1e8, burn wallet 5e7."""

    name = "fake_rpc"

    def __init__(self):
        self.supply = RawTokenAmount(amount=1_000_000_000 * 10**6, decimals=6)
        self.accounts: Dict[str, List[str]] = {
            FOUNDER: [FOUNDER_ACCOUNT],
            BURN: [BURN_ACCOUNT],
        }
        self.balances: Dict[str, object] = {
            FOUNDER_ACCOUNT: RawTokenAmount(amount=100_000_000 * 10**6, decimals=6),
            BURN_ACCOUNT: RawTokenAmount(amount=50_000_000 * 10**6, decimals=6),
        }
        self.supply_error: Optional[Exception] = None
        self.accounts_error: Optional[Exception] = None
        self.supply_calls = 0

    def token_supply(self, mint: str) -> RawTokenAmount:
        self.supply_calls += 1
        if self.supply_error:
            raise self.supply_error
        return self.supply

    def token_accounts_by_owner(self, owner: str, mint: str) -> List[str]:
        if self.accounts_error:
            raise self.accounts_error
        return list(self.accounts.get(owner, []))

    def token_account_balance(self, account: str) -> RawTokenAmount:
        value = self.balances[account]
        if isinstance(value, Exception):
            raise value
        return value


class FakeHolderIndex(HolderIndex):
    name = "fake_index"

    def __init__(self, pages: Optional[List[List[TokenAccountRecord]]] = None):
        self.pages = pages if pages is not None else [
            [TokenAccountRecord(address=f"acc{i}", owner=f"owner{i}", amount=10) for i in range(3)]
        ]
        self.error: Optional[Exception] = None
        self.requested: List[int] = []

    def token_accounts_page(self, mint: str, page: int, limit: int) -> List[TokenAccountRecord]:
        self.requested.append(page)
        if self.error:
            raise self.error
        if page > len(self.pages):
            return []
        return self.pages[page - 1]


def unavailable(source: str = "test", retryable: bool = False) -> DataUnavailableError:
    return DataUnavailableError(source, "boom", retryable=retryable)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stats_env(clock):
    """Fakes plus a TokenStatsService wired to them (60s TTL, single attempt)."""
    price = FakePriceProvider()
    rpc = FakeRpc()
    index = FakeHolderIndex()
    tracker = StatsTracker()
    service = TokenStatsService(
        price_provider=price,
        supply_provider=rpc,
        balances=BalanceResolver(rpc),
        holders=HolderEnumerator(index, page_size=1000),
        token_address=MINT,
        founder_wallet=FOUNDER,
        burn_wallet=BURN,
        cache=TTLCache(60, clock=clock),
        retry=RetryPolicy(max_attempts=1, attempt_timeout=5),
        tracker=tracker,
        now=lambda: FIXED_NOW,
    )
    return SimpleNamespace(price=price, rpc=rpc, index=index, tracker=tracker, clock=clock, service=service)


def fail_everything(env) -> None:
    env.price.error = unavailable("price")
    env.rpc.supply_error = unavailable("rpc")
    env.rpc.accounts_error = unavailable("rpc")
    env.index.error = unavailable("index")
