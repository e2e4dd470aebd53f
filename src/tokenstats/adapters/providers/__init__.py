"""
Provider Adapters - External API Clients

This package contains adapters for the external token data sources:
a Solana RPC node, the Helius holder index and price oracles.
"""

from tokenstats.adapters.providers.base import (
    HolderIndex,
    PriceProvider,
    SupplyProvider,
    TokenAccountSource,
)
from tokenstats.adapters.providers.chain import (
    PriceProviderChain,
    ProviderChain,
    RpcProviderChain,
    build_price_chain,
    build_rpc_chain,
)
from tokenstats.adapters.providers.coingecko import CoinGeckoPriceProvider
from tokenstats.adapters.providers.helius import HeliusClient
from tokenstats.adapters.providers.solana_rpc import SolanaRpcClient
from tokenstats.adapters.providers.solana_tracker import SolanaTrackerPriceProvider

__all__ = [
    "HolderIndex",
    "PriceProvider",
    "SupplyProvider",
    "TokenAccountSource",
    "ProviderChain",
    "PriceProviderChain",
    "RpcProviderChain",
    "build_price_chain",
    "build_rpc_chain",
    "CoinGeckoPriceProvider",
    "HeliusClient",
    "SolanaRpcClient",
    "SolanaTrackerPriceProvider",
]
