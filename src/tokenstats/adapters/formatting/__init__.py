"""
Formatting Adapters - Display Strings

This package contains number formatting used by the HTTP layer.
"""

from tokenstats.adapters.formatting.formatter import (
    format_number,
    format_percent,
    format_price,
    format_usd,
    formatted_stats,
)

__all__ = ["format_number", "format_percent", "format_price", "format_usd", "formatted_stats"]
