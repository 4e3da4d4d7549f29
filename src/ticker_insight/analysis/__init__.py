"""Report assembly: contexts, engines, providers and the cached registry."""

from ticker_insight.analysis.contexts import ANALYSIS_CONTEXTS, get_analysis_context
from ticker_insight.analysis.contracts import (
    AnalysisContext,
    LiveReport,
    ReportOptions,
    TickerReport,
)
from ticker_insight.analysis.registry import (
    CURRENT_PRICE_KEY,
    SENTIMENT_KEY,
    TARGET_CONSENSUS_KEY,
    ReportAssembler,
    entry_key,
    fundamental_key,
)

__all__ = [
    "ANALYSIS_CONTEXTS",
    "CURRENT_PRICE_KEY",
    "SENTIMENT_KEY",
    "TARGET_CONSENSUS_KEY",
    "AnalysisContext",
    "LiveReport",
    "ReportAssembler",
    "ReportOptions",
    "TickerReport",
    "entry_key",
    "fundamental_key",
    "get_analysis_context",
]
