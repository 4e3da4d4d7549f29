"""Ticker Insight MCP Server using FastMCP."""

import asyncio
import json
import logging
import os

from fastmcp import FastMCP

from ticker_insight import SCHEMA_VERSION, SERVER_VERSION
from ticker_insight.analysis.registry import ReportAssembler
from ticker_insight.data.metadata_store import TickerMetadataStore
from ticker_insight.data.yfinance_client import shutdown_executor
from ticker_insight.tools import (
    compare_models,
    metadata_dump,
    metadata_history,
    set_refresh_interval,
    ticker_detail,
    ticker_report,
)

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Process-scoped cache shared by every report request
metadata_store = TickerMetadataStore()
assembler = ReportAssembler(metadata_store)

# Create FastMCP server instance
mcp = FastMCP(
    name="ticker-insight",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def get_ticker_report(
    symbol: str,
    context: str | None = None,
    fundamental_model: str | None = None,
    entry_model: str | None = None,
    fallback_price: float | None = None,
) -> str:
    """
    Build a cache-aware analysis report from live provider data.

    Price is always fetched fresh. Target consensus, sentiment, the selected
    fundamental summary and the selected entry plan are served from the
    metadata cache until their refresh interval elapses.

    Args:
        symbol: Stock ticker symbol (e.g., AAPL, MSFT)
        context: default_mock, default_live or stockprices_live
        fundamental_model: dcf-core or quality-factors
        entry_model: swing-structure, momentum-breakout, rsi-mean-reversion, atr-trend-continuation
        fallback_price: Price to use if no provider or cached price is available

    Returns:
        JSON with report, live sources, provider warnings and market state
    """
    result = await ticker_report(
        assembler,
        symbol=symbol,
        context_id=context,
        fundamental_model_id=fundamental_model,
        entry_model_id=entry_model,
        fallback_price=fallback_price,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_ticker_detail(
    symbol: str,
    context: str | None = None,
    fundamental_model: str | None = None,
    entry_model: str | None = None,
    refresh_all_ms: int | None = None,
    refresh_target_ms: int | None = None,
    refresh_sentiment_ms: int | None = None,
    refresh_fundamental_ms: int | None = None,
    refresh_entry_ms: int | None = None,
) -> str:
    """
    Ticker detail view: report, model catalogs and cache history.

    Optional refresh overrides are applied before the report is built.

    Args:
        symbol: Stock ticker symbol
        context: Analysis context id
        fundamental_model: Selected fundamental model id
        entry_model: Selected entry model id
        refresh_all_ms: New global refresh interval (ms)
        refresh_target_ms: Target consensus refresh override for this symbol (ms)
        refresh_sentiment_ms: Sentiment refresh override for this symbol (ms)
        refresh_fundamental_ms: Refresh override for the selected fundamental model (ms)
        refresh_entry_ms: Refresh override for the selected entry model (ms)

    Returns:
        JSON with report, live sources, model lists and per-slot history
    """
    result = await ticker_detail(
        assembler,
        symbol=symbol,
        entry_model_id=entry_model,
        fundamental_model_id=fundamental_model,
        context_id=context,
        refresh_all_ms=refresh_all_ms,
        refresh_target_ms=refresh_target_ms,
        refresh_sentiment_ms=refresh_sentiment_ms,
        refresh_fundamental_ms=refresh_fundamental_ms,
        refresh_entry_ms=refresh_entry_ms,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
def compare_report_models(
    symbol: str,
    current_price: float,
    context: str | None = None,
    fundamental_model: str | None = None,
    entry_model: str | None = None,
) -> str:
    """
    Compute every metric fresh for an exact price, bypassing the cache.

    Args:
        symbol: Stock ticker symbol
        current_price: Price to evaluate every model against
        context: Analysis context id
        fundamental_model: Selected fundamental model id
        entry_model: Selected entry model id

    Returns:
        JSON report with comparisons across all model variants
    """
    result = compare_models(
        assembler,
        symbol=symbol,
        current_price=current_price,
        context_id=context,
        fundamental_model_id=fundamental_model,
        entry_model_id=entry_model,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
def configure_refresh_interval(
    interval_ms: int,
    symbol: str | None = None,
    key: str | None = None,
) -> str:
    """
    Set the global metadata refresh interval, or an override for one slot.

    Args:
        interval_ms: Refresh interval in milliseconds (minimum 1000)
        symbol: Ticker for a per-slot override (requires key)
        key: Metric key, e.g. target-consensus, sentiment, fundamental:dcf-core, entry:swing-structure

    Returns:
        JSON with the effective interval
    """
    result = set_refresh_interval(metadata_store, interval_ms, symbol=symbol, key=key)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
def get_metadata_history(symbol: str, key: str) -> str:
    """
    History and freshness of one cached metric.

    Args:
        symbol: Stock ticker symbol
        key: Metric key (e.g., target-consensus, sentiment)

    Returns:
        JSON with latest value, freshness and versioned history
    """
    result = metadata_history(metadata_store, symbol=symbol, key=key)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
def dump_metadata() -> str:
    """
    Diagnostic snapshot of the whole metadata cache.

    Returns:
        JSON with global interval and, per symbol, overrides, latest values and history
    """
    return json.dumps(metadata_dump(metadata_store), indent=2, default=str)


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Ticker Insight MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    try:
        mcp.run()
    finally:
        asyncio.run(shutdown_executor())


if __name__ == "__main__":
    main()
