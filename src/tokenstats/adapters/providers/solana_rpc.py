# src/tokenstats/adapters/providers/solana_rpc.py
"""
Solana RPC Client for Supply and Token Account Data

This module implements a minimal JSON-RPC client for a Solana node. It reads a
mint's total supply, lists a wallet's token accounts for a mint and reads the
balance of a single token account. No retries happen here; retry policy lives
in the caller.

Files that USE this module:
- tokenstats.adapters.providers.chain (RpcProviderChain wraps one client per endpoint)
- tests.test_providers (unit tests)

Files that this module USES:
- tokenstats.adapters.providers.base (interfaces and JSON-RPC helper)
- tokenstats.config (settings for endpoint and timeout)
"""
import logging
from typing import List, Optional

from tokenstats.adapters.providers.base import (
    SupplyProvider,
    TokenAccountSource,
    parse_raw_amount,
    require_address,
    rpc_call,
)
from tokenstats.config import settings
from tokenstats.domain.errors import DataUnavailableError
from tokenstats.domain.models import RawTokenAmount

log = logging.getLogger(__name__)


class SolanaRpcClient(SupplyProvider, TokenAccountSource):
    """
    Client for one Solana RPC endpoint.

    Methods used:
    - getTokenSupply: {"value": {"amount": "...", "decimals": 9, ...}}
    - getTokenAccountsByOwner: {"value": [{"pubkey": "...", "account": {...}}]}
    - getTokenAccountBalance: {"value": {"amount": "...", "decimals": 9, ...}}
    """

    def __init__(self, endpoint: str, timeout: Optional[int] = None, name: Optional[str] = None):
        """
        Initialize RPC client.

        Args:
            endpoint: RPC endpoint URL
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
            name: Optional provider name used in logs (defaults to "solana_rpc")
        """
        if not endpoint:
            raise ValueError("Solana RPC endpoint is not configured")
        self.endpoint = endpoint
        self.timeout = timeout or settings.http_timeout_seconds
        self.name = name or "solana_rpc"

    def _call(self, method: str, params: list):
        return rpc_call(self.name, self.endpoint, method, params, self.timeout)

    def token_supply(self, mint: str) -> RawTokenAmount:
        """
        Get the raw total supply of a mint.

        Returns:
            RawTokenAmount with the supply amount and the mint's decimals

        Raises:
            DataUnavailableError: On any request failure or malformed response
        """
        require_address(self.name, mint)
        result = self._call("getTokenSupply", [mint])
        value = result.get("value") if isinstance(result, dict) else None
        supply = parse_raw_amount(self.name, value)
        log.info("%s: supply of %s = %s (decimals=%s)", self.name, mint, supply.amount, supply.decimals)
        return supply

    def token_accounts_by_owner(self, owner: str, mint: str) -> List[str]:
        """
        List every token account of `mint` owned by `owner`.

        Returns:
            Token account addresses (may be empty)
        """
        require_address(self.name, owner)
        require_address(self.name, mint)
        result = self._call(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed"}],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, list):
            raise DataUnavailableError(self.name, "getTokenAccountsByOwner returned no account list")

        accounts = []
        for item in value:
            pubkey = item.get("pubkey") if isinstance(item, dict) else None
            if pubkey:
                accounts.append(pubkey)
            else:
                log.warning("%s: token account entry without pubkey: %r", self.name, item)
        log.debug("%s: %d token account(s) for owner %s", self.name, len(accounts), owner)
        return accounts

    def token_account_balance(self, account: str) -> RawTokenAmount:
        """
        Get the raw balance of one token account.

        Returns:
            RawTokenAmount; decimals may be None if the node omitted them
        """
        require_address(self.name, account)
        result = self._call("getTokenAccountBalance", [account])
        value = result.get("value") if isinstance(result, dict) else None
        return parse_raw_amount(self.name, value)
