"""Metadata cache inspection and refresh configuration tools."""

from typing import Any

from ticker_insight.data.metadata_store import TickerMetadataStore, record_to_dict
from ticker_insight.utils.provenance import build_cache_provenance, build_error_response, build_meta
from ticker_insight.utils.validators import parse_interval_ms, validate_symbol


def set_refresh_interval(
    store: TickerMetadataStore,
    interval_ms: Any,
    symbol: str | None = None,
    key: str | None = None,
) -> dict[str, Any]:
    """
    Set the global refresh interval, or a per-(symbol, key) override.

    Both symbol and key are required for an override; with neither, the
    global interval is changed. Values below 1000ms are clamped by the store.
    """
    interval = parse_interval_ms(interval_ms)
    if interval is None:
        return build_error_response(
            error_type="invalid_interval",
            message=f"Refresh interval must be a positive number of milliseconds, got {interval_ms!r}",
        )
    if (symbol is None) != (key is None):
        return build_error_response(
            error_type="invalid_request",
            message="symbol and key must be given together for a per-ticker override",
            symbol=symbol,
        )

    if symbol is None:
        store.set_global_refresh_interval(interval)
        return {
            "meta": build_meta("set_refresh_interval"),
            "scope": "global",
            "refresh_interval_ms": store.get_global_refresh_interval(),
        }

    try:
        normalized_symbol = validate_symbol(symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)

    store.set_ticker_refresh_interval(normalized_symbol, key, interval)
    return {
        "meta": build_meta("set_refresh_interval"),
        "scope": "ticker",
        "symbol": normalized_symbol,
        "key": key,
        "refresh_interval_ms": store.get_refresh_interval(normalized_symbol, key),
    }


def metadata_history(
    store: TickerMetadataStore,
    symbol: str,
    key: str,
    now: int | None = None,
) -> dict[str, Any]:
    """History and freshness of one cache slot."""
    try:
        normalized_symbol = validate_symbol(symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)

    if now is None:
        now = store.clock()
    latest = store.get_latest(normalized_symbol, key)
    history = store.get_history(normalized_symbol, key)
    return {
        "meta": build_meta("metadata_history"),
        "symbol": normalized_symbol,
        "key": key,
        "latest": record_to_dict(latest) if latest is not None else None,
        "should_refresh": store.should_refresh(normalized_symbol, key, now),
        "freshness": build_cache_provenance(
            latest.computed_at if latest is not None else None,
            store.get_refresh_interval(normalized_symbol, key),
            now,
        ),
        "history": [record_to_dict(entry) for entry in history],
    }


def metadata_dump(store: TickerMetadataStore) -> dict[str, Any]:
    """Full diagnostic snapshot of the metadata cache."""
    return {"meta": build_meta("metadata_dump"), **store.dump()}
