"""
Domain Layer - Pure Business Objects

This package contains domain models and business rules.
No dependencies on infrastructure or external systems.
"""

from tokenstats.domain.models import (
    STAT_FIELDS,
    BalanceResult,
    CacheEntry,
    RawTokenAmount,
    StatsResult,
    StoredObject,
    TokenAccountRecord,
    TokenStats,
    UploadedAsset,
)
from tokenstats.domain.errors import (
    AllSourcesUnavailableError,
    DataUnavailableError,
    DomainError,
    InvariantViolationError,
    StorageError,
    UploadValidationError,
)

__all__ = [
    "STAT_FIELDS",
    "BalanceResult",
    "CacheEntry",
    "RawTokenAmount",
    "StatsResult",
    "StoredObject",
    "TokenAccountRecord",
    "TokenStats",
    "UploadedAsset",
    "DomainError",
    "DataUnavailableError",
    "AllSourcesUnavailableError",
    "InvariantViolationError",
    "StorageError",
    "UploadValidationError",
]
