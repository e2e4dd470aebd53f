# src/tokenstats/adapters/providers/coingecko.py
"""
CoinGecko Price Provider

This module implements the CoinGecko `simple/price` client for the token's
USD price.

Files that USE this module:
- tokenstats.adapters.providers.chain (build_price_chain)
- tests.test_providers (unit tests)

Files that this module USES:
- tokenstats.adapters.providers.base (PriceProvider interface and HTTP helper)
- tokenstats.config (settings for coin id, URL and timeout)
"""
import logging
from decimal import Decimal
from typing import Optional

from tokenstats.adapters.providers.base import PriceProvider, parse_price, request_json
from tokenstats.config import settings
from tokenstats.domain.errors import DataUnavailableError

log = logging.getLogger(__name__)


class CoinGeckoPriceProvider(PriceProvider):
    name = "coingecko"

    def __init__(
        self,
        coin_id: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize CoinGecko provider.

        Args:
            coin_id: CoinGecko coin id (defaults to settings.coingecko_coin_id)
            base_url: Optional custom API URL (defaults to settings.coingecko_url)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
        """
        self.coin_id = coin_id or settings.coingecko_coin_id
        if not self.coin_id:
            raise ValueError("COINGECKO_COIN_ID is not configured")
        self.url = base_url or settings.coingecko_url
        self.timeout = timeout or settings.http_timeout_seconds

    def usd_price(self) -> Decimal:
        """
        Get the USD price from CoinGecko.

        Expects: {"<coin_id>": {"usd": 0.000123}}

        Raises:
            DataUnavailableError: On request failure or if the coin/usd keys are missing
        """
        data = request_json(
            self.name,
            "GET",
            self.url,
            self.timeout,
            params={"ids": self.coin_id, "vs_currencies": "usd"},
        )
        if not isinstance(data, dict) or not isinstance(data.get(self.coin_id), dict):
            log.error("CoinGecko response missing coin %r: %s", self.coin_id, data)
            raise DataUnavailableError(self.name, f"response missing coin {self.coin_id!r}")

        price = parse_price(self.name, data[self.coin_id].get("usd"))
        log.info("CoinGecko: %s = $%s", self.coin_id, price)
        return price
