"""Ticker detail loader: engine selection, live hydration and cache history."""

from time import perf_counter
from typing import Any

from ticker_insight.analysis.contracts import ReportOptions
from ticker_insight.analysis.registry import (
    SENTIMENT_KEY,
    TARGET_CONSENSUS_KEY,
    ReportAssembler,
    entry_key,
    fundamental_key,
)
from ticker_insight.data.metadata_store import record_to_dict
from ticker_insight.utils.provenance import (
    build_cache_provenance,
    build_error_response,
    build_meta,
)
from ticker_insight.utils.validators import parse_interval_ms, validate_symbol


async def ticker_detail(
    assembler: ReportAssembler,
    symbol: str,
    entry_model_id: str | None = None,
    fundamental_model_id: str | None = None,
    context_id: str | None = None,
    refresh_all_ms: Any = None,
    refresh_target_ms: Any = None,
    refresh_sentiment_ms: Any = None,
    refresh_fundamental_ms: Any = None,
    refresh_entry_ms: Any = None,
    now: int | None = None,
) -> dict[str, Any]:
    """
    Load everything a ticker detail view needs.

    Refresh overrides are applied before the report is built, so a shortened
    interval takes effect on this very request. Overrides that are missing,
    non-numeric or non-positive are ignored.

    Args:
        assembler: Report assembler holding the metadata store
        symbol: Stock ticker symbol
        entry_model_id: Selected entry model (unknown ids fall back to the default)
        fundamental_model_id: Selected fundamental model (same fallback)
        context_id: Analysis context id
        refresh_all_ms: New global refresh interval
        refresh_target_ms: Override for this symbol's target consensus
        refresh_sentiment_ms: Override for this symbol's sentiment
        refresh_fundamental_ms: Override for the selected fundamental model slot
        refresh_entry_ms: Override for the selected entry model slot
        now: Reference time in epoch ms (default: assembler clock)

    Returns:
        Dict with report, model catalogs, live sources and per-slot history
    """
    start_time = perf_counter()

    try:
        normalized_symbol = validate_symbol(symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)

    store = assembler.store
    context = assembler.get_context(context_id)
    selected_fundamental = assembler.select_fundamental_model(context, fundamental_model_id)
    selected_entry = assembler.select_entry_model(context, entry_model_id)
    keys = {
        "target": TARGET_CONSENSUS_KEY,
        "sentiment": SENTIMENT_KEY,
        "fundamental": fundamental_key(selected_fundamental.id),
        "entry": entry_key(selected_entry.id),
    }

    if (interval := parse_interval_ms(refresh_all_ms)) is not None:
        store.set_global_refresh_interval(interval)
    overrides = {
        "target": refresh_target_ms,
        "sentiment": refresh_sentiment_ms,
        "fundamental": refresh_fundamental_ms,
        "entry": refresh_entry_ms,
    }
    for name, raw in overrides.items():
        if (interval := parse_interval_ms(raw)) is not None:
            store.set_ticker_refresh_interval(normalized_symbol, keys[name], interval)

    if now is None:
        now = store.clock()
    live = await assembler.build_report_live(
        normalized_symbol,
        ReportOptions(
            context_id=context.id,
            fundamental_model_id=selected_fundamental.id,
            entry_model_id=selected_entry.id,
        ),
        now,
    )

    cache: dict[str, Any] = {"global_refresh_ms": store.get_global_refresh_interval()}
    for name, key in keys.items():
        latest = store.get_latest(normalized_symbol, key)
        cache[f"{name}_history"] = [
            record_to_dict(entry) for entry in store.get_history(normalized_symbol, key)
        ]
        cache[f"{name}_freshness"] = build_cache_provenance(
            latest.computed_at if latest is not None else None,
            store.get_refresh_interval(normalized_symbol, key),
            now,
        )

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "meta": build_meta("ticker_detail", duration_ms),
        "symbol": normalized_symbol,
        "context_id": live.context_id,
        "entry_model_id": selected_entry.id,
        "fundamental_model_id": selected_fundamental.id,
        "entry_models": [{"id": m.id, "name": m.name} for m in context.entry_point_models],
        "fundamental_models": [
            {"id": m.id, "name": m.name} for m in context.fundamental_models
        ],
        "report": live.report.to_dict(),
        "live_sources": live.live_sources,
        "provider_warnings": live.provider_warnings,
        "market_state": live.market_state,
        "cache": cache,
    }
