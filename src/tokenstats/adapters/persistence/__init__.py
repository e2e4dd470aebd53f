"""
Persistence Adapters - Record Storage

This package contains the JSON-file store for upload records.
"""

from tokenstats.adapters.persistence.meme_store import MemeStore

__all__ = ["MemeStore"]
