# src/tokenstats/adapters/formatting/formatter.py
"""
Number Formatter - Human-Readable Token Figures

This module turns token amounts, prices and USD values into short display
strings ("1.23B", "$0.000123", "$4.56M") and builds the `formatted` block
served next to the raw numbers in the stats payload.

Files that USE this module:
- tokenstats.adapters.web.routes (formatted_stats for /api/token-stats)
- tests.test_formatter (unit tests)

Files that this module USES:
- tokenstats.domain.models (TokenStats)
"""
from __future__ import annotations

from decimal import Decimal
from typing import Dict, Union

from tokenstats.domain.models import TokenStats

Number = Union[int, float, Decimal]

_SUFFIXES = ((1e9, "B"), (1e6, "M"), (1e3, "K"))


def _scaled(value: float) -> str:
    """Return value as "<x.xx><suffix>" or an empty string below one thousand."""
    for threshold, suffix in _SUFFIXES:
        if abs(value) >= threshold:
            return f"{value / threshold:.2f}{suffix}"
    return ""


def format_number(num: Number) -> str:
    """
    Format a token amount or count.

    Args:
        num: Amount to format

    Returns:
        "0", "1.23B" / "4.56M" / "7.89K", six decimals below one,
        otherwise the number with thousands separators
    """
    value = float(num)
    if value == 0:
        return "0"

    scaled = _scaled(value)
    if scaled:
        return scaled
    if abs(value) < 1:
        return f"{value:.6f}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_price(price: Number) -> str:
    """
    Format a unit price in USD.

    Very small prices switch to scientific notation ("$1.23e-7").
    """
    value = float(price)
    if value == 0:
        return "$0"

    if value < 0.000001:
        mantissa, exponent = f"{value:.2e}".split("e")
        return f"${mantissa}e{int(exponent)}"
    if value < 1:
        return f"${value:.6f}"
    if value < 1000:
        return f"${value:.2f}"
    return f"${format_number(value)}"


def format_usd(amount: Number) -> str:
    """Format a USD value such as a market cap ("$4.56M", "$12.30")."""
    value = float(amount)
    if value == 0:
        return "$0"

    scaled = _scaled(value)
    if scaled:
        return f"${scaled}"
    return f"${value:.2f}"


def format_percent(value: Number, decimals: int = 2) -> str:
    return f"{float(value):.{decimals}f}%"


def formatted_stats(stats: TokenStats) -> Dict[str, str]:
    """
    Build display strings for every figure in a snapshot.

    Args:
        stats: Snapshot to format

    Returns:
        Dictionary keyed like TokenStats.to_json()
    """
    return {
        "price": format_price(stats.price),
        "totalSupply": format_number(stats.total_supply),
        "circulatingSupply": format_number(stats.circulating_supply),
        "founderBalance": format_number(stats.founder_balance),
        "burnedBalance": format_number(stats.burned_balance),
        "holderCount": f"{stats.holder_count:,}",
        "marketCap": format_usd(stats.market_cap),
        "totalValue": format_usd(stats.total_value),
        "founderValue": format_usd(stats.founder_value),
        "burnedValue": format_usd(stats.burned_value),
        "burnRate": format_percent(stats.burn_rate),
    }
