"""Yahoo Finance price, news and analyst consensus adapters (via yfinance)."""

import re
from typing import Any

from ticker_insight.analysis.contracts import (
    AnalystTarget,
    NewsSignal,
    Rating,
    SignalSource,
    TargetConsensus,
)
from ticker_insight.analysis.engines import upside_percent
from ticker_insight.data.yfinance_client import (
    fetch_analyst_consensus,
    fetch_news,
    fetch_quote_price,
)
from ticker_insight.utils.sanitize import sanitize_text
from ticker_insight.utils.validators import positive_price

MAX_NEWS_SIGNALS = 6

_FT_PATTERN = re.compile(r"financial\s*times", re.IGNORECASE)

# Recommendation buckets in display order
_TREND_BUCKETS: tuple[tuple[str, str, Rating], ...] = (
    ("strongBuy", "Strong Buy", "buy"),
    ("buy", "Buy", "buy"),
    ("hold", "Hold", "hold"),
    ("sell", "Sell", "sell"),
    ("strongSell", "Strong Sell", "sell"),
)


def parse_source(publisher: str) -> SignalSource:
    return "Financial Times" if _FT_PATTERN.search(publisher) else "X"


def _title_and_publisher(item: dict[str, Any]) -> tuple[str, str]:
    # Current yfinance nests articles under "content"; older releases are flat
    content = item.get("content")
    if isinstance(content, dict):
        provider = content.get("provider") or {}
        return str(content.get("title") or ""), str(provider.get("displayName") or "X")
    return str(item.get("title") or ""), str(item.get("publisher") or "X")


def news_items_to_signals(items: list[dict[str, Any]]) -> list[NewsSignal]:
    """Map raw Yahoo news items to signals, skipping untitled entries."""
    signals: list[NewsSignal] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        title, publisher = _title_and_publisher(item)
        signal = sanitize_text(title, max_length=200)
        if not signal:
            continue
        is_ft = bool(_FT_PATTERN.search(publisher))
        signals.append(NewsSignal(parse_source(publisher), signal, 0.8 if is_ft else 0.66))
        if len(signals) >= MAX_NEWS_SIGNALS:
            break
    return signals


def consensus_from_analyst_data(
    data: dict[str, Any], current_price: float
) -> TargetConsensus | None:
    """
    Build a consensus from Yahoo price targets and recommendation counts.

    One analyst row per non-empty recommendation bucket, each carrying the
    mean target. Returns None when Yahoo has no mean target.
    """
    targets = data.get("targets") or {}
    mean_target = positive_price(targets.get("mean"))
    if mean_target is None:
        return None
    mean_target = round(mean_target, 2)

    trend = data.get("trend") or {}
    analysts = tuple(
        AnalystTarget(f"{label} ({trend[column]})", mean_target, rating)
        for column, label, rating in _TREND_BUCKETS
        if trend.get(column)
    )
    return TargetConsensus(
        consensus_target=mean_target,
        upside_percent=upside_percent(mean_target, current_price),
        analysts=analysts,
    )


class YahooTickerPriceProvider:
    id = "yahoo-price"
    name = "Yahoo Finance Quote Provider"

    async def fetch_price(self, symbol: str) -> float | None:
        return await fetch_quote_price(symbol)


class YahooNewsProvider:
    id = "yahoo-news"
    name = "Yahoo Finance News Provider"

    async def fetch_signals(self, symbol: str) -> list[NewsSignal]:
        return news_items_to_signals(await fetch_news(symbol))


class YahooConsensusProvider:
    id = "yahoo-consensus"
    name = "Yahoo Finance Analyst Consensus"

    async def fetch_consensus(self, symbol: str, current_price: float) -> TargetConsensus | None:
        return consensus_from_analyst_data(await fetch_analyst_consensus(symbol), current_price)


yahoo_ticker_price_provider = YahooTickerPriceProvider()
yahoo_news_provider = YahooNewsProvider()
yahoo_consensus_provider = YahooConsensusProvider()
