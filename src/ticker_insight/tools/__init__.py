"""Ticker insight tools."""

from ticker_insight.tools.metadata import metadata_dump, metadata_history, set_refresh_interval
from ticker_insight.tools.reports import compare_models, ticker_report
from ticker_insight.tools.ticker_detail import ticker_detail

__all__ = [
    "compare_models",
    "metadata_dump",
    "metadata_history",
    "set_refresh_interval",
    "ticker_detail",
    "ticker_report",
]
