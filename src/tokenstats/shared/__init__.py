"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Rate limiting
- Retry policy
- Logging configuration
"""

from tokenstats.shared.validators import (
    sanitize_filename,
    validate_api_key,
    validate_decimals,
    validate_http_url,
    validate_solana_address,
)
from tokenstats.shared.rate_limiter import RateLimitConfig, RateLimiter, build_rate_limits
from tokenstats.shared.retry import RetryPolicy, is_transient

__all__ = [
    "validate_solana_address",
    "validate_api_key",
    "validate_http_url",
    "validate_decimals",
    "sanitize_filename",
    "RateLimitConfig",
    "RateLimiter",
    "build_rate_limits",
    "RetryPolicy",
    "is_transient",
]
