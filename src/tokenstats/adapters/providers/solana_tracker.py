# src/tokenstats/adapters/providers/solana_tracker.py
"""
Solana Tracker Price Provider

This module implements the Solana Tracker data API client for the token's
USD price, looked up by mint address.

Files that USE this module:
- tokenstats.adapters.providers.chain (build_price_chain)
- tests.test_providers (unit tests)

Files that this module USES:
- tokenstats.adapters.providers.base (PriceProvider interface and HTTP helper)
- tokenstats.config (settings for API key, URL, mint and timeout)
"""
import logging
from decimal import Decimal
from typing import Optional

from tokenstats.adapters.providers.base import (
    PriceProvider,
    parse_price,
    request_json,
    require_address,
)
from tokenstats.config import settings
from tokenstats.domain.errors import DataUnavailableError

log = logging.getLogger(__name__)


class SolanaTrackerPriceProvider(PriceProvider):
    name = "solana_tracker"

    def __init__(
        self,
        mint: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize Solana Tracker provider.

        Args:
            mint: Token mint address (defaults to settings.token_address)
            api_key: API key sent as x-api-key (defaults to settings.solana_tracker_api_key)
            base_url: Optional custom API URL (defaults to settings.solana_tracker_url)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)

        Raises:
            ValueError: If the API key is missing
        """
        self.mint = mint or settings.token_address
        self.api_key = api_key if api_key is not None else settings.solana_tracker_api_key
        if not self.api_key:
            raise ValueError("SOLANA_TRACKER_API_KEY is not configured")
        self.url = base_url or settings.solana_tracker_url
        self.timeout = timeout or settings.http_timeout_seconds

    def usd_price(self) -> Decimal:
        """
        Get the USD price from Solana Tracker.

        Expects: {"price": 0.000123, "liquidity": ..., "marketCap": ...}

        Raises:
            DataUnavailableError: On request failure or if `price` is missing
        """
        require_address(self.name, self.mint)
        data = request_json(
            self.name,
            "GET",
            self.url,
            self.timeout,
            params={"token": self.mint},
            headers={"x-api-key": self.api_key},
        )
        if not isinstance(data, dict):
            raise DataUnavailableError(self.name, "returned non-dict JSON")

        price = parse_price(self.name, data.get("price"))
        log.info("Solana Tracker: %s = $%s", self.mint, price)
        return price
