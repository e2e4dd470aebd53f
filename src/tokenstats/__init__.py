# src/tokenstats/__init__.py
"""
tokenstats - Token Statistics and Meme Upload Backend

An async HTTP service that aggregates and caches statistics for one SPL
token (price, supply, holders, founder and burned balances) and stores
meme image uploads.
"""

__version__ = "1.0.0"
