# src/tokenstats/adapters/providers/base.py
"""
Base Provider Interfaces for Token Data Sources

This module defines the abstract base classes for all upstream data sources
(price oracles, RPC nodes, holder indexers) and the shared HTTP helpers that
map every transport problem to DataUnavailableError.

Files that USE this module:
- tokenstats.adapters.providers.solana_rpc (SolanaRpcClient)
- tokenstats.adapters.providers.helius (HeliusClient)
- tokenstats.adapters.providers.coingecko (CoinGeckoPriceProvider)
- tokenstats.adapters.providers.solana_tracker (SolanaTrackerPriceProvider)
- tokenstats.adapters.providers.chain (failover chains)
- tokenstats.application.* (depend on the interfaces only)

Files that this module USES:
- tokenstats.domain (RawTokenAmount, TokenAccountRecord, DataUnavailableError)
- tokenstats.shared.validators (address validation)
"""
import itertools
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, List, Optional

import requests

from tokenstats.domain.errors import DataUnavailableError
from tokenstats.domain.models import RawTokenAmount, TokenAccountRecord
from tokenstats.shared.validators import validate_solana_address

log = logging.getLogger(__name__)

# Status codes worth retrying: rate limiting and gateway trouble
RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})

_rpc_ids = itertools.count(1)


class PriceProvider(ABC):
    name: str = "price"

    @abstractmethod
    def usd_price(self) -> Decimal:
        """Return the token's unit price in USD."""
        raise NotImplementedError


class SupplyProvider(ABC):
    name: str = "supply"

    @abstractmethod
    def token_supply(self, mint: str) -> RawTokenAmount:
        """Return the raw total supply of a mint."""
        raise NotImplementedError


class TokenAccountSource(ABC):
    name: str = "token_accounts"

    @abstractmethod
    def token_accounts_by_owner(self, owner: str, mint: str) -> List[str]:
        """Return the addresses of every token account of `mint` owned by `owner`."""
        raise NotImplementedError

    @abstractmethod
    def token_account_balance(self, account: str) -> RawTokenAmount:
        """Return the raw balance of one token account."""
        raise NotImplementedError


class HolderIndex(ABC):
    name: str = "holder_index"

    @abstractmethod
    def token_accounts_page(self, mint: str, page: int, limit: int) -> List[TokenAccountRecord]:
        """Return one page (1-based) of token accounts holding `mint`."""
        raise NotImplementedError


def require_address(source: str, address: str) -> str:
    """
    Reject malformed addresses before any network call.

    Raises:
        DataUnavailableError: If the address is not a valid Solana public key
    """
    if not validate_solana_address(address):
        raise DataUnavailableError(source, f"invalid address {address!r}")
    return address


def request_json(
    source: str,
    method: str,
    url: str,
    timeout: float,
    **kwargs: Any,
) -> Any:
    """
    Perform an HTTP request and decode its JSON body.

    Args:
        source: Provider name used in errors and logs
        method: "GET" or "POST"
        url: Request URL
        timeout: Timeout in seconds
        **kwargs: Passed through to requests (params, json, headers)

    Returns:
        Decoded JSON payload

    Raises:
        DataUnavailableError: On timeout, connection failure, non-2xx status or invalid JSON
    """
    sender = requests.post if method.upper() == "POST" else requests.get
    try:
        resp = sender(url, timeout=timeout, **kwargs)
        resp.raise_for_status()
    except requests.exceptions.Timeout as e:
        log.warning("%s timeout after %s seconds", source, timeout)
        raise DataUnavailableError(source, f"timeout after {timeout}s", retryable=True) from e
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        retryable = status in RETRYABLE_STATUS_CODES
        log.warning("%s HTTP error %s (retryable=%s)", source, status, retryable)
        raise DataUnavailableError(source, f"HTTP {status}", retryable=retryable) from e
    except requests.exceptions.ConnectionError as e:
        log.warning("%s connection failed: %s", source, e)
        raise DataUnavailableError(source, f"connection failed: {e}", retryable=True) from e
    except requests.exceptions.RequestException as e:
        log.error("%s request failed: %s", source, e)
        raise DataUnavailableError(source, f"request failed: {e}") from e

    try:
        return resp.json()
    except ValueError as e:
        log.error("%s returned invalid JSON: %s", source, e)
        raise DataUnavailableError(source, f"invalid JSON: {e}") from e


def rpc_call(source: str, url: str, method: str, params: Any, timeout: float) -> Any:
    """
    Perform a JSON-RPC 2.0 call and return its `result` member.

    Raises:
        DataUnavailableError: On transport failure, an `error` member or a missing `result`
    """
    payload = {"jsonrpc": "2.0", "id": next(_rpc_ids), "method": method, "params": params}
    data = request_json(source, "POST", url, timeout, json=payload)

    if not isinstance(data, dict):
        raise DataUnavailableError(source, f"{method} returned non-dict JSON")
    if data.get("error"):
        error = data["error"]
        code = error.get("code") if isinstance(error, dict) else None
        message = error.get("message") if isinstance(error, dict) else str(error)
        log.warning("%s %s returned RPC error %s: %s", source, method, code, message)
        # -32005 is the node's "too many requests" / node-behind code
        raise DataUnavailableError(source, f"{method} RPC error {code}: {message}",
                                   retryable=code in (429, -32005))
    if "result" not in data:
        raise DataUnavailableError(source, f"{method} response missing 'result'")
    return data["result"]


def parse_raw_amount(source: str, node: Any) -> RawTokenAmount:
    """
    Parse a `{amount, decimals}` token amount object.

    Missing or malformed decimals are returned as None; callers decide the policy.

    Raises:
        DataUnavailableError: If the amount itself is missing or not an integer
    """
    if not isinstance(node, dict):
        raise DataUnavailableError(source, "token amount is not an object")
    try:
        amount = int(str(node["amount"]))
    except (KeyError, ValueError, TypeError) as e:
        raise DataUnavailableError(source, f"invalid token amount: {node.get('amount')!r}") from e

    decimals: Optional[int] = None
    raw_decimals = node.get("decimals")
    if isinstance(raw_decimals, int) and not isinstance(raw_decimals, bool):
        decimals = raw_decimals
    elif raw_decimals is not None:
        log.warning("%s reported non-integer decimals %r", source, raw_decimals)
    return RawTokenAmount(amount=amount, decimals=decimals)


def parse_price(source: str, value: Any) -> Decimal:
    """
    Convert a JSON price into a non-negative Decimal.

    Raises:
        DataUnavailableError: If the value is missing, not numeric or negative
    """
    if value is None or isinstance(value, bool):
        raise DataUnavailableError(source, "price missing from response")
    try:
        price = Decimal(str(value))
    except (ArithmeticError, ValueError) as e:
        raise DataUnavailableError(source, f"invalid price {value!r}") from e
    if not price.is_finite() or price < 0:
        raise DataUnavailableError(source, f"invalid price {value!r}")
    return price
