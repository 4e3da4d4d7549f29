"""Response metadata and provenance utilities."""

from typing import Any

from ticker_insight import SCHEMA_VERSION, SERVER_VERSION


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build standard metadata block for responses.

    Args:
        tool: Name of the tool producing this response
        duration_ms: Execution time in milliseconds (optional)

    Returns:
        Metadata dict with version info
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_cache_provenance(
    computed_at: int | None,
    refresh_interval_ms: int,
    now: int,
) -> dict[str, Any]:
    """
    Describe how fresh a cached slot is.

    Args:
        computed_at: When the cached value was produced (epoch ms), None if empty
        refresh_interval_ms: Effective refresh interval for the slot
        now: Reference time (epoch ms)

    Returns:
        Dict with age_ms, refresh_interval_ms and next_refresh_in_ms
    """
    if computed_at is None:
        return {
            "computed_at": None,
            "age_ms": None,
            "refresh_interval_ms": refresh_interval_ms,
            "next_refresh_in_ms": 0,
        }
    age_ms = now - computed_at
    return {
        "computed_at": computed_at,
        "age_ms": age_ms,
        "refresh_interval_ms": refresh_interval_ms,
        "next_refresh_in_ms": max(refresh_interval_ms - age_ms, 0),
    }


def build_error_response(
    error_type: str,
    message: str,
    symbol: str | None = None,
) -> dict[str, Any]:
    """
    Build standardized error response.

    Args:
        error_type: Type of error (invalid_symbol, data_unavailable)
        message: Human-readable error message
        symbol: Symbol that caused the error (if applicable)

    Returns:
        Error response dict
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
        "meta": build_meta("error"),
    }

    if symbol is not None:
        response["symbol"] = symbol

    return response
