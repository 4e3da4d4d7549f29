"""Provider adapters for live and mock market inputs."""

from ticker_insight.analysis.providers.mock import (
    anchor_price,
    build_mock_signals,
    mock_news_provider,
    mock_ticker_price_provider,
)
from ticker_insight.analysis.providers.stockprices import stockprices_ticker_price_provider
from ticker_insight.analysis.providers.yahoo import (
    yahoo_consensus_provider,
    yahoo_news_provider,
    yahoo_ticker_price_provider,
)

__all__ = [
    "anchor_price",
    "build_mock_signals",
    "mock_news_provider",
    "mock_ticker_price_provider",
    "stockprices_ticker_price_provider",
    "yahoo_consensus_provider",
    "yahoo_news_provider",
    "yahoo_ticker_price_provider",
]
