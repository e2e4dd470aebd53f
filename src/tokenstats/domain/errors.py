# src/tokenstats/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions that represent
upstream failures, data-quality problems and rejected uploads.

Files that USE this module:
- tokenstats.adapters.providers.* (raise DataUnavailableError)
- tokenstats.application.* (raise and handle every error below)
- tokenstats.adapters.web.server (maps errors to HTTP responses)
"""
from typing import Optional


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class DataUnavailableError(DomainError):
    """
    Raised when a single external source fails to deliver usable data.

    Attributes:
        source: Name of the source (e.g., "coingecko", "solana_rpc")
        reason: Human readable failure reason
        retryable: True for transient failures (timeout, connection error, 429, 502-504)
    """

    def __init__(self, source: str, reason: str, retryable: bool = False):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason
        self.retryable = retryable


class AllSourcesUnavailableError(DomainError):
    """Raised when every source failed and no cached snapshot can be served."""

    def __init__(self, failures: Optional[dict] = None):
        self.failures = failures or {}
        detail = ", ".join(f"{k}={v}" for k, v in self.failures.items())
        super().__init__(f"All token data sources are unavailable ({detail})" if detail
                         else "All token data sources are unavailable")


class InvariantViolationError(DomainError):
    """Raised when founder + burned + circulating does not add up to total supply."""

    def __init__(self, expected, actual, tolerance):
        self.expected = expected
        self.actual = actual
        self.tolerance = tolerance
        super().__init__(
            f"Supply mismatch: holdings sum {actual} vs total supply {expected} "
            f"(tolerance {tolerance})"
        )


class UploadValidationError(DomainError):
    """Raised when an upload is rejected before it reaches storage."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StorageError(DomainError):
    """Raised when the object store or record store fails to persist an upload."""
    pass
