"""Ticker report tools."""

from time import perf_counter
from typing import Any

from ticker_insight.analysis.contracts import ReportOptions
from ticker_insight.analysis.registry import ReportAssembler
from ticker_insight.utils.provenance import build_error_response, build_meta
from ticker_insight.utils.validators import validate_symbol


async def ticker_report(
    assembler: ReportAssembler,
    symbol: str,
    context_id: str | None = None,
    fundamental_model_id: str | None = None,
    entry_model_id: str | None = None,
    fallback_price: float | None = None,
    now: int | None = None,
) -> dict[str, Any]:
    """
    Build the live, cache-aware report for a symbol.

    Args:
        assembler: Report assembler holding the metadata store
        symbol: Stock ticker symbol
        context_id: Analysis context (default_mock, default_live, stockprices_live)
        fundamental_model_id: Selected fundamental model (default: first in context)
        entry_model_id: Selected entry model (default: first in context)
        fallback_price: Price to use when no provider or cached price exists
        now: Reference time in epoch ms (default: assembler clock)

    Returns:
        Dict with report, live sources, provider warnings and market state
    """
    start_time = perf_counter()

    try:
        normalized_symbol = validate_symbol(symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)

    live = await assembler.build_report_live(
        normalized_symbol,
        ReportOptions(
            context_id=context_id,
            fundamental_model_id=fundamental_model_id,
            entry_model_id=entry_model_id,
            fallback_price=fallback_price,
        ),
        now,
    )

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "meta": build_meta("ticker_report", duration_ms),
        "symbol": normalized_symbol,
        **live.to_dict(),
        "warnings": live.provider_warnings or None,
    }


def compare_models(
    assembler: ReportAssembler,
    symbol: str,
    current_price: float,
    context_id: str | None = None,
    fundamental_model_id: str | None = None,
    entry_model_id: str | None = None,
) -> dict[str, Any]:
    """
    Freshly computed report for an exact price, bypassing the cache.

    Used for side-by-side comparison of every model variant.
    """
    start_time = perf_counter()

    try:
        normalized_symbol = validate_symbol(symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)

    report = assembler.build_report(
        normalized_symbol,
        current_price,
        ReportOptions(
            context_id=context_id,
            fundamental_model_id=fundamental_model_id,
            entry_model_id=entry_model_id,
        ),
    )

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "meta": build_meta("compare_models", duration_ms),
        "report": report.to_dict(),
    }
