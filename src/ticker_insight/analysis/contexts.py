"""Analysis context catalog: provider and engine presets by runtime profile."""

import os

from ticker_insight.analysis.contracts import AnalysisContext
from ticker_insight.analysis.engines import (
    DEFAULT_ENTRY_POINT_MODELS,
    DEFAULT_FUNDAMENTAL_MODELS,
    DEFAULT_SENTIMENT_ENGINES,
)
from ticker_insight.analysis.providers import (
    mock_news_provider,
    mock_ticker_price_provider,
    stockprices_ticker_price_provider,
    yahoo_consensus_provider,
    yahoo_news_provider,
    yahoo_ticker_price_provider,
)

ANALYSIS_CONTEXTS: tuple[AnalysisContext, ...] = (
    AnalysisContext(
        id="default_mock",
        name="Default Mock Context",
        news_provider=mock_news_provider,
        ticker_price_provider=mock_ticker_price_provider,
        sentiment_engine=DEFAULT_SENTIMENT_ENGINES[0],
        fundamental_models=DEFAULT_FUNDAMENTAL_MODELS,
        entry_point_models=DEFAULT_ENTRY_POINT_MODELS,
    ),
    AnalysisContext(
        id="default_live",
        name="Default Live Context (Yahoo)",
        news_provider=yahoo_news_provider,
        ticker_price_provider=yahoo_ticker_price_provider,
        sentiment_engine=DEFAULT_SENTIMENT_ENGINES[0],
        fundamental_models=DEFAULT_FUNDAMENTAL_MODELS,
        entry_point_models=DEFAULT_ENTRY_POINT_MODELS,
        consensus_provider=yahoo_consensus_provider,
    ),
    AnalysisContext(
        id="stockprices_live",
        name="StockPrices.dev Quotes + Yahoo News",
        news_provider=yahoo_news_provider,
        ticker_price_provider=stockprices_ticker_price_provider,
        sentiment_engine=DEFAULT_SENTIMENT_ENGINES[0],
        fundamental_models=DEFAULT_FUNDAMENTAL_MODELS,
        entry_point_models=DEFAULT_ENTRY_POINT_MODELS,
    ),
)


def get_analysis_context(
    context_id: str | None,
    contexts: tuple[AnalysisContext, ...] = ANALYSIS_CONTEXTS,
) -> AnalysisContext:
    """
    Resolve a context by id.

    Falls back to ANALYSIS_CONTEXT from the environment, then to the first
    context in the catalog.
    """
    by_id = {ctx.id: ctx for ctx in contexts}
    if context_id in by_id:
        return by_id[context_id]
    default_id = os.environ.get("ANALYSIS_CONTEXT")
    if default_id in by_id:
        return by_id[default_id]
    return contexts[0]
