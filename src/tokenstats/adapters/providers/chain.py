# src/tokenstats/adapters/providers/chain.py
"""
Provider Chains - Ordered Failover Across Interchangeable Providers

A chain tries its providers in order and returns the first successful result,
remembering which provider answered. Used for several RPC endpoints and for
several price oracles; each chain is itself a provider, so the services never
know how many upstreams stand behind it.

Files that USE this module:
- tokenstats.app (build_rpc_chain, build_price_chain at composition time)
- tokenstats.application.health (reads last_used_provider)
- tests.test_chain (unit tests)

Files that this module USES:
- tokenstats.adapters.providers.* (concrete providers)
- tokenstats.config (settings for endpoint lists and provider order)
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from tokenstats.adapters.providers.base import (
    PriceProvider,
    SupplyProvider,
    TokenAccountSource,
)
from tokenstats.adapters.providers.coingecko import CoinGeckoPriceProvider
from tokenstats.adapters.providers.solana_rpc import SolanaRpcClient
from tokenstats.adapters.providers.solana_tracker import SolanaTrackerPriceProvider
from tokenstats.config import Settings, settings as default_settings
from tokenstats.domain.errors import DataUnavailableError
from tokenstats.domain.models import RawTokenAmount

log = logging.getLogger(__name__)

P = TypeVar("P")
R = TypeVar("R")


class ProviderChain(Generic[P]):
    """
    Provider chain that tries multiple providers in order.

    Only DataUnavailableError moves the chain to the next provider; anything
    else is a bug and propagates.
    """

    def __init__(self, providers: Sequence[P], name: str):
        """
        Initialize provider chain.

        Args:
            providers: Providers in priority order (at least one)
            name: Chain name used in errors and logs
        """
        if not providers:
            raise ValueError(f"{name}: provider chain needs at least one provider")
        self.providers: List[P] = list(providers)
        self.name = name
        self.last_used_provider: Optional[str] = None

    def call(self, op: Callable[[P], R]) -> R:
        """
        Run op against each provider until one succeeds.

        Raises:
            DataUnavailableError: If every provider fails; retryable if any failure was
        """
        failures: List[DataUnavailableError] = []
        for provider in self.providers:
            provider_name = getattr(provider, "name", type(provider).__name__)
            try:
                result = op(provider)
                self.last_used_provider = provider_name
                return result
            except DataUnavailableError as e:
                log.warning("%s: provider %s failed, trying next: %s", self.name, provider_name, e)
                failures.append(e)

        log.error("%s: all %d provider(s) failed", self.name, len(failures))
        raise DataUnavailableError(
            self.name,
            "all providers failed: " + "; ".join(str(f) for f in failures),
            retryable=any(f.retryable for f in failures),
        )

    def get_last_provider(self) -> Optional[str]:
        """
        Get the name of the last provider that successfully provided data.

        Returns:
            Provider name or None if not yet called
        """
        return self.last_used_provider


class RpcProviderChain(ProviderChain[SolanaRpcClient], SupplyProvider, TokenAccountSource):
    """Failover across several Solana RPC endpoints."""

    def __init__(self, providers: Sequence[SolanaRpcClient], name: str = "solana_rpc"):
        super().__init__(providers, name)

    def token_supply(self, mint: str) -> RawTokenAmount:
        return self.call(lambda p: p.token_supply(mint))

    def token_accounts_by_owner(self, owner: str, mint: str) -> List[str]:
        return self.call(lambda p: p.token_accounts_by_owner(owner, mint))

    def token_account_balance(self, account: str) -> RawTokenAmount:
        return self.call(lambda p: p.token_account_balance(account))


class PriceProviderChain(ProviderChain[PriceProvider], PriceProvider):
    """Failover across price oracles."""

    def __init__(self, providers: Sequence[PriceProvider], name: str = "price"):
        super().__init__(providers, name)

    def usd_price(self) -> Decimal:
        return self.call(lambda p: p.usd_price())


def build_rpc_chain(cfg: Optional[Settings] = None) -> RpcProviderChain:
    """
    Build the RPC chain from SOLANA_RPC_ENDPOINTS (in order).

    Returns:
        RpcProviderChain with one SolanaRpcClient per endpoint
    """
    cfg = cfg or default_settings
    endpoints = cfg.rpc_endpoint_list
    clients = [
        SolanaRpcClient(endpoint, timeout=cfg.http_timeout_seconds, name=f"solana_rpc[{i}]")
        for i, endpoint in enumerate(endpoints)
    ]
    return RpcProviderChain(clients)


def build_price_chain(cfg: Optional[Settings] = None) -> PriceProviderChain:
    """
    Build the price chain from PRICE_PROVIDERS (in order).

    Providers whose credentials are missing are skipped with a warning.

    Raises:
        ValueError: If no configured provider could be built
    """
    cfg = cfg or default_settings
    providers: List[PriceProvider] = []
    for provider_name in cfg.price_provider_list:
        try:
            if provider_name == "coingecko":
                providers.append(CoinGeckoPriceProvider(
                    coin_id=cfg.coingecko_coin_id,
                    base_url=cfg.coingecko_url,
                    timeout=cfg.http_timeout_seconds,
                ))
            elif provider_name == "solana_tracker":
                providers.append(SolanaTrackerPriceProvider(
                    mint=cfg.token_address,
                    api_key=cfg.solana_tracker_api_key,
                    base_url=cfg.solana_tracker_url,
                    timeout=cfg.http_timeout_seconds,
                ))
        except ValueError as e:
            log.warning("Skipping price provider %s: %s", provider_name, e)

    if not providers:
        raise ValueError("No price provider could be configured (check PRICE_PROVIDERS and API keys)")
    log.info("Price providers: %s", ", ".join(p.name for p in providers))
    return PriceProviderChain(providers)
