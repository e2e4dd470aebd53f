# src/tokenstats/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Token statistics snapshots and their cache entries
- Raw on-chain token amounts and balance results
- Indexer token-account records
- Uploaded meme assets

Files that USE this module:
- tokenstats.application.* (all services use domain models)
- tokenstats.adapters.* (adapters create and use domain models)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from dataclasses import dataclass, field  # Decorator for creating data classes
from datetime import datetime  # Date/time utilities for timestamps
from decimal import Decimal  # Exact arithmetic for token amounts
from typing import Optional, Tuple  # Type hints for optional values

ZERO = Decimal(0)

# Fields fetched independently on every refresh; names match TokenStats attributes
STAT_FIELDS = ("price", "total_supply", "founder_balance", "burned_balance", "holder_count")


@dataclass(frozen=True)
class RawTokenAmount:
    """
    Integer token amount as reported on chain.

    Attributes:
        amount: Raw integer amount in base units
        decimals: Decimal exponent reported with the amount (None when missing)
    """
    amount: int
    decimals: Optional[int] = None

    def to_decimal(self, decimals: Optional[int] = None) -> Decimal:
        """
        Scale the raw amount to human-readable units.

        Args:
            decimals: Exponent to use instead of the reported one

        Returns:
            amount / 10**decimals as Decimal
        """
        exponent = self.decimals if decimals is None else decimals
        if exponent is None:
            raise ValueError("decimals are required to scale a raw token amount")
        return Decimal(self.amount).scaleb(-exponent)


@dataclass(frozen=True)
class TokenAccountRecord:
    """One entry of the indexer's token-account listing."""
    address: str
    owner: Optional[str]
    amount: Optional[int] = None


@dataclass(frozen=True)
class BalanceResult:
    """
    Total balance of one wallet for one mint.

    Attributes:
        wallet: Wallet (owner) address
        balance: Sum over every token account owned by the wallet
        accounts_total: Number of token accounts found for the wallet
        accounts_skipped: Accounts left out because their balance could not be resolved
    """
    wallet: str
    balance: Decimal
    accounts_total: int = 0
    accounts_skipped: int = 0


@dataclass(frozen=True)
class TokenStats:
    """
    Immutable token statistics snapshot.

    Attributes:
        price: Unit price in USD
        total_supply: Total minted supply (post decimal-scaling)
        founder_balance: Balance of the founder wallet
        burned_balance: Balance of the burn wallet
        circulating_supply: total_supply - founder_balance - burned_balance, floored at zero
        holder_count: Distinct owners with a positive balance
        market_cap: circulating_supply * price
        total_value: total_supply * price
        founder_value: founder_balance * price
        burned_value: burned_balance * price
        burn_rate: burned_balance / total_supply * 100
        last_updated: When the snapshot was built (UTC)
        degraded_fields: Fields that fell back to a cached value or zero
    """
    price: Decimal
    total_supply: Decimal
    founder_balance: Decimal
    burned_balance: Decimal
    circulating_supply: Decimal
    holder_count: int
    market_cap: Decimal
    total_value: Decimal
    founder_value: Decimal
    burned_value: Decimal
    burn_rate: Decimal
    last_updated: datetime
    degraded_fields: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def build(
        cls,
        price: Decimal,
        total_supply: Decimal,
        founder_balance: Decimal,
        burned_balance: Decimal,
        holder_count: int,
        last_updated: datetime,
        degraded_fields: Tuple[str, ...] = (),
    ) -> TokenStats:
        """
        Build a snapshot from the fetched inputs, computing every derived metric.

        Returns:
            TokenStats with circulating supply, USD values and burn rate filled in
        """
        circulating = max(ZERO, total_supply - founder_balance - burned_balance)
        burn_rate = (burned_balance / total_supply * 100) if total_supply > 0 else ZERO
        return cls(
            price=price,
            total_supply=total_supply,
            founder_balance=founder_balance,
            burned_balance=burned_balance,
            circulating_supply=circulating,
            holder_count=holder_count,
            market_cap=circulating * price,
            total_value=total_supply * price,
            founder_value=founder_balance * price,
            burned_value=burned_balance * price,
            burn_rate=burn_rate,
            last_updated=last_updated,
            degraded_fields=tuple(degraded_fields),
        )

    def holdings_sum(self) -> Decimal:
        """founder + burned + circulating, compared against total supply."""
        return self.founder_balance + self.burned_balance + self.circulating_supply

    def to_json(self) -> dict:
        """
        Convert to the JSON payload served by the API.

        Returns:
            Dictionary with camelCase keys and float values
        """
        return {
            "price": float(self.price),
            "totalSupply": float(self.total_supply),
            "circulatingSupply": float(self.circulating_supply),
            "founderBalance": float(self.founder_balance),
            "burnedBalance": float(self.burned_balance),
            "holderCount": self.holder_count,
            "marketCap": float(self.market_cap),
            "totalValue": float(self.total_value),
            "founderValue": float(self.founder_value),
            "burnedValue": float(self.burned_value),
            "burnRate": float(self.burn_rate),
            "lastUpdated": self.last_updated.isoformat(),
            "degraded": list(self.degraded_fields),
        }


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached snapshot with its fetch time.

    Attributes:
        value: Cached TokenStats
        fetched_at: Cache clock reading when the value was stored (seconds)
        ttl_seconds: Time-to-live of the entry
    """
    value: TokenStats
    fetched_at: float
    ttl_seconds: float

    def age(self, now: float) -> float:
        return max(0.0, now - self.fetched_at)

    def is_expired(self, now: float) -> bool:
        return self.age(now) > self.ttl_seconds


@dataclass(frozen=True)
class StatsResult:
    """
    Snapshot annotated for the API.

    Attributes:
        stats: Snapshot being served
        cached: True when served from the cache
        cache_age: Whole seconds since the snapshot was fetched (cache hits only)
        stale: True when an expired snapshot is served because every source failed
        error: Error marker accompanying a stale snapshot
    """
    stats: TokenStats
    cached: bool
    cache_age: Optional[int] = None
    stale: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class StoredObject:
    """Locator returned by an object store."""
    url: str
    pathname: str


@dataclass(frozen=True)
class UploadedAsset:
    """
    Record of an accepted meme upload.

    Attributes:
        id: Unique identifier
        filename: Original file name sent by the client
        stored_name: Name under which the bytes were stored
        content_type: MIME type
        size: Size in bytes
        url: Public URL of the stored object
        pathname: Path of the object inside the store
        uploaded_at: Upload timestamp (UTC)
    """
    id: str
    filename: str
    stored_name: str
    content_type: str
    size: int
    url: str
    pathname: str
    uploaded_at: datetime

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "originalName": self.filename,
            "storedName": self.stored_name,
            "mimeType": self.content_type,
            "size": self.size,
            "url": self.url,
            "pathname": self.pathname,
            "uploadDate": self.uploaded_at.isoformat(),
        }

    @staticmethod
    def from_json(data: dict) -> UploadedAsset:
        uploaded_at = datetime.fromisoformat(str(data["uploadDate"]).replace("Z", "+00:00"))
        return UploadedAsset(
            id=str(data["id"]),
            filename=str(data["originalName"]),
            stored_name=str(data.get("storedName", data["pathname"])),
            content_type=str(data["mimeType"]),
            size=int(data["size"]),
            url=str(data["url"]),
            pathname=str(data["pathname"]),
            uploaded_at=uploaded_at,
        )
