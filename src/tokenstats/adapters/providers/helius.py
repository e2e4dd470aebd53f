# src/tokenstats/adapters/providers/helius.py
"""
Helius Indexer Client for Token Holder Listings

This module implements the Helius DAS `getTokenAccounts` listing used to
enumerate every token account of a mint, one page at a time.

Files that USE this module:
- tokenstats.application.holders (HolderEnumerator pages through HeliusClient)
- tests.test_providers (unit tests)

Files that this module USES:
- tokenstats.adapters.providers.base (HolderIndex interface and JSON-RPC helper)
- tokenstats.config (settings for API key and timeout)
"""
import logging
from typing import List, Optional

from tokenstats.adapters.providers.base import HolderIndex, require_address, rpc_call
from tokenstats.config import settings
from tokenstats.domain.errors import DataUnavailableError
from tokenstats.domain.models import TokenAccountRecord

log = logging.getLogger(__name__)


class HeliusClient(HolderIndex):
    """
    Client for the Helius RPC `getTokenAccounts` method.

    Each page looks like:
      {"total": 1000, "limit": 1000, "page": 1,
       "token_accounts": [{"address": "...", "owner": "...", "amount": 42, ...}]}
    """

    name = "helius"

    def __init__(self, url: Optional[str] = None, timeout: Optional[int] = None):
        """
        Initialize Helius client.

        Args:
            url: Optional full RPC URL including api-key (defaults to settings.HELIUS_URL)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)

        Raises:
            ValueError: If no URL is given and HELIUS_API_KEY is empty
        """
        if url is None:
            if not settings.helius_api_key:
                raise ValueError("HELIUS_API_KEY is not configured")
            url = settings.HELIUS_URL
        self.url = url
        self.timeout = timeout or settings.http_timeout_seconds

    def token_accounts_page(self, mint: str, page: int, limit: int) -> List[TokenAccountRecord]:
        """
        Fetch one page of token accounts for a mint.

        Args:
            mint: Token mint address
            page: 1-based page number
            limit: Page size (Helius allows up to 1000)

        Returns:
            Records on this page; an empty list marks the end of the listing

        Raises:
            DataUnavailableError: On request failure or a response without `token_accounts`
        """
        require_address(self.name, mint)
        result = rpc_call(
            self.name,
            self.url,
            "getTokenAccounts",
            {"mint": mint, "page": page, "limit": limit},
            self.timeout,
        )
        if not isinstance(result, dict) or not isinstance(result.get("token_accounts"), list):
            raise DataUnavailableError(self.name, f"page {page} missing 'token_accounts'")

        records = []
        for item in result["token_accounts"]:
            if not isinstance(item, dict):
                continue
            records.append(
                TokenAccountRecord(
                    address=str(item.get("address", "")),
                    owner=item.get("owner"),
                    amount=_to_int(item.get("amount")),
                )
            )
        log.debug("helius: page %d returned %d account(s)", page, len(records))
        return records


def _to_int(value) -> Optional[int]:
    """
    Convert an indexer amount to int.

    Returns:
        Integer amount, or None if missing or unparsable
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).split(".")[0])
    except ValueError:
        return None
