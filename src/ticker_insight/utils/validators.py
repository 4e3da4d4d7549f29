"""Validation utilities for tool inputs."""

import math
import re
from typing import Any

# Tickers like AAPL, BRK.B, BTC-USD, ^GSPC
_SYMBOL_PATTERN = re.compile(r"^[\^A-Z0-9][A-Z0-9.\-=^]{0,14}$")


def validate_symbol(symbol: str) -> str:
    """
    Normalize and validate a ticker symbol.

    Raises:
        ValueError: If the symbol is empty or has unexpected characters
    """
    normalized = (symbol or "").upper().strip()
    if not _SYMBOL_PATTERN.match(normalized):
        raise ValueError(f"Invalid symbol '{symbol}'")
    return normalized


def parse_interval_ms(value: Any) -> int | None:
    """
    Parse an optional refresh interval override.

    Returns None for missing, non-numeric, non-finite or non-positive input,
    meaning "leave the current interval alone". Values below the store floor
    are passed through; the store clamps them.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed) or parsed <= 0:
        return None
    return int(parsed)


def positive_price(value: Any) -> float | None:
    """Return value as float when it is a finite positive number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price
