"""
Provider Chain Tests - Failover Across Providers

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tokenstats.adapters.providers.chain (ProviderChain, PriceProviderChain, builders)
- tokenstats.config (Settings for builder inputs)
"""
from decimal import Decimal
from unittest.mock import Mock

import pytest

from tokenstats.adapters.providers.chain import (
    PriceProviderChain,
    RpcProviderChain,
    build_price_chain,
    build_rpc_chain,
)
from tokenstats.adapters.providers.coingecko import CoinGeckoPriceProvider
from tokenstats.config import Settings
from tokenstats.domain.errors import DataUnavailableError
from tokenstats.domain.models import RawTokenAmount


def price_provider(name, price=None, error=None):
    provider = Mock()
    provider.name = name
    if error is not None:
        provider.usd_price.side_effect = error
    else:
        provider.usd_price.return_value = price
    return provider


class TestProviderChain:
    def test_empty_chain_rejected(self):
        with pytest.raises(ValueError):
            PriceProviderChain([])

    def test_primary_success(self):
        primary = price_provider("primary", Decimal("1.5"))
        fallback = price_provider("fallback", Decimal("2"))
        chain = PriceProviderChain([primary, fallback])

        assert chain.usd_price() == Decimal("1.5")
        assert chain.get_last_provider() == "primary"
        fallback.usd_price.assert_not_called()

    def test_fallback_on_failure(self):
        primary = price_provider("primary", error=DataUnavailableError("primary", "down"))
        fallback = price_provider("fallback", Decimal("2"))
        chain = PriceProviderChain([primary, fallback])

        assert chain.usd_price() == Decimal("2")
        assert chain.last_used_provider == "fallback"

    def test_all_fail_retryable_if_any_retryable(self):
        chain = PriceProviderChain([
            price_provider("a", error=DataUnavailableError("a", "bad payload")),
            price_provider("b", error=DataUnavailableError("b", "HTTP 429", retryable=True)),
        ])
        with pytest.raises(DataUnavailableError, match="all providers failed") as exc_info:
            chain.usd_price()
        assert exc_info.value.retryable is True
        assert chain.last_used_provider is None

    def test_unexpected_errors_propagate(self):
        chain = PriceProviderChain([
            price_provider("a", error=KeyError("bug")),
            price_provider("b", Decimal("1")),
        ])
        with pytest.raises(KeyError):
            chain.usd_price()

    def test_rpc_chain_delegates_every_operation(self):
        down = Mock()
        down.name = "rpc0"
        down.token_supply.side_effect = DataUnavailableError("rpc0", "timeout", retryable=True)
        up = Mock()
        up.name = "rpc1"
        up.token_supply.return_value = RawTokenAmount(10, 1)
        up.token_accounts_by_owner.return_value = ["acc"]
        up.token_account_balance.return_value = RawTokenAmount(5, 0)
        chain = RpcProviderChain([down, up])

        assert chain.token_supply("mint") == RawTokenAmount(10, 1)
        assert chain.last_used_provider == "rpc1"
        down.token_accounts_by_owner.return_value = ["other"]
        assert chain.token_accounts_by_owner("owner", "mint") == ["other"]
        assert chain.last_used_provider == "rpc0"


class TestBuilders:
    def test_rpc_chain_has_one_client_per_endpoint(self):
        cfg = Settings(solana_rpc_endpoints="https://a.example.com, https://b.example.com")
        chain = build_rpc_chain(cfg)
        assert [p.endpoint for p in chain.providers] == ["https://a.example.com", "https://b.example.com"]

    def test_price_chain_skips_provider_without_key(self):
        cfg = Settings(price_providers="solana_tracker,coingecko", solana_tracker_api_key="")
        chain = build_price_chain(cfg)
        assert len(chain.providers) == 1
        assert isinstance(chain.providers[0], CoinGeckoPriceProvider)

    def test_price_chain_without_any_provider(self):
        cfg = Settings(price_providers="solana_tracker", solana_tracker_api_key="")
        with pytest.raises(ValueError, match="No price provider"):
            build_price_chain(cfg)

    def test_unknown_price_provider_rejected(self):
        with pytest.raises(ValueError):
            Settings(price_providers="coingecko,binance")
