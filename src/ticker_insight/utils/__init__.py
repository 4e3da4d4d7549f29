"""Utility modules."""

from ticker_insight.utils.provenance import (
    build_cache_provenance,
    build_error_response,
    build_meta,
)
from ticker_insight.utils.sanitize import sanitize_text
from ticker_insight.utils.validators import parse_interval_ms, positive_price, validate_symbol

__all__ = [
    "build_cache_provenance",
    "build_error_response",
    "build_meta",
    "parse_interval_ms",
    "positive_price",
    "sanitize_text",
    "validate_symbol",
]
