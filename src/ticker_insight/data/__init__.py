"""Data layer: metadata cache and provider I/O."""

from ticker_insight.data.metadata_store import (
    HISTORY_LIMIT,
    MIN_REFRESH_INTERVAL_MS,
    CacheHistoryRecord,
    CacheRecord,
    TickerMetadataStore,
    TickerState,
    now_ms,
)
from ticker_insight.data.yfinance_client import (
    ServerShuttingDownError,
    YFinanceRetryError,
    fetch_analyst_consensus,
    fetch_news,
    fetch_quote_price,
    get_market_state,
    run_with_retry,
    shutdown_executor,
)

__all__ = [
    # Metadata cache
    "HISTORY_LIMIT",
    "MIN_REFRESH_INTERVAL_MS",
    "CacheHistoryRecord",
    "CacheRecord",
    "TickerMetadataStore",
    "TickerState",
    "now_ms",
    # yfinance
    "ServerShuttingDownError",
    "YFinanceRetryError",
    "fetch_analyst_consensus",
    "fetch_news",
    "fetch_quote_price",
    "get_market_state",
    "run_with_retry",
    "shutdown_executor",
]
