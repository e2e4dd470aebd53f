# src/tokenstats/shared/validators.py
"""
Input Validation Utilities - Address and Configuration Validation

This module provides input validation functions for the service.
It validates Solana addresses, API keys, URLs and upload metadata
to catch bad configuration or input before any network call is made.

Files that USE this module:
- tokenstats.config.settings (uses validation functions in Settings field validators)
- tokenstats.adapters.providers.* (validate addresses before calling upstream APIs)
- tokenstats.application.uploads (sanitize_filename for stored names)

Files that this module USES:
- None (pure utility functions)
"""
import re
from typing import Optional

# Base58 alphabet excludes 0, O, I and l
_BASE58_RE = re.compile(r'^[1-9A-HJ-NP-Za-km-z]{32,44}$')


def validate_solana_address(address: str) -> bool:
    """
    Validate Solana address (mint, wallet or token account) format.

    Args:
        address: Base58 encoded public key

    Returns:
        True if valid, False otherwise
    """
    if not address:
        return False
    return bool(_BASE58_RE.match(address))


def validate_api_key(api_key: str, min_length: int = 10) -> bool:
    """
    Validate API key format.

    Args:
        api_key: API key to validate
        min_length: Minimum length requirement

    Returns:
        True if valid, False otherwise
    """
    if not api_key:
        return False

    return len(api_key) >= min_length and not api_key.isspace()


def validate_http_url(url: str) -> bool:
    """
    Validate that a string is an http(s) URL.

    Args:
        url: URL to validate

    Returns:
        True if valid, False otherwise
    """
    if not url:
        return False
    return bool(re.match(r'^https?://[^\s/$.?#][^\s]*$', url))


def validate_decimals(decimals: Optional[int]) -> bool:
    """
    Validate a token decimals exponent.

    Args:
        decimals: Exponent reported for a token amount

    Returns:
        True if the exponent is an integer between 0 and 20
    """
    if decimals is None or isinstance(decimals, bool):
        return False
    return isinstance(decimals, int) and 0 <= decimals <= 20


def sanitize_filename(name: str, max_length: int = 255) -> str:
    """
    Sanitize an uploaded file name.

    Args:
        name: Original file name sent by the client
        max_length: Maximum allowed length

    Returns:
        File name without path components or unsafe characters
    """
    if not name:
        return ""

    # Drop any directory part sent by the client
    base = re.split(r'[\\/]', name)[-1]
    sanitized = re.sub(r'[^A-Za-z0-9._ -]', '', base).strip()

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
