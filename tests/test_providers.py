"""Tests for mock, Yahoo and stockprices.dev providers."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from ticker_insight.analysis.providers import (
    mock_news_provider,
    mock_ticker_price_provider,
    stockprices_ticker_price_provider,
)
from ticker_insight.analysis.providers.mock import anchor_price, build_mock_signals
from ticker_insight.analysis.providers.stockprices import fetch_stockprices_quote
from ticker_insight.analysis.providers.yahoo import (
    MAX_NEWS_SIGNALS,
    consensus_from_analyst_data,
    news_items_to_signals,
    parse_source,
)


def _response(status_code: int, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = "Not Found" if status_code == 404 else "OK"
    response.json.return_value = payload
    if status_code >= 400:
        error = requests.HTTPError(f"{status_code} Error")
        error.response = response
        response.raise_for_status.side_effect = error
    return response


class TestMockProviders:
    def test_anchor_price_is_stable(self) -> None:
        """Synthetic price depends only on the symbol."""
        assert anchor_price("AAPL") == 131.0
        assert asyncio.run(mock_ticker_price_provider.fetch_price("AAPL")) == 131.0

    def test_mock_signals(self) -> None:
        """One X and one Financial Times signal per symbol."""
        signals = asyncio.run(mock_news_provider.fetch_signals("AAPL"))

        assert signals == build_mock_signals("AAPL")
        assert [s.source for s in signals] == ["X", "Financial Times"]
        assert all(s.signal.startswith("AAPL ") for s in signals)


class TestYahooNews:
    """Raw yfinance news items mapped to signals."""

    def test_parse_source(self) -> None:
        """Financial Times is matched loosely, everything else is X."""
        assert parse_source("The Financial Times") == "Financial Times"
        assert parse_source("financialtimes.com") == "Financial Times"
        assert parse_source("Reuters") == "X"

    def test_nested_and_flat_items(self) -> None:
        """Both yfinance news layouts are understood."""
        items = [
            {"content": {"title": "Chip demand surges", "provider": {"displayName": "Financial Times"}}},
            {"title": "Legacy\nheadline", "publisher": "Motley Fool"},
        ]

        signals = news_items_to_signals(items)

        assert [(s.source, s.signal, s.confidence) for s in signals] == [
            ("Financial Times", "Chip demand surges", 0.8),
            ("X", "Legacy headline", 0.66),
        ]

    def test_untitled_and_malformed_items_skipped(self) -> None:
        """Items without a title or not shaped as dicts are dropped."""
        items = [{"content": {"title": ""}}, "garbage", {"publisher": "Reuters"}]
        assert news_items_to_signals(items) == []

    def test_signal_count_capped(self) -> None:
        """At most MAX_NEWS_SIGNALS are returned."""
        items = [{"title": f"Headline {i}", "publisher": "Reuters"} for i in range(10)]
        assert len(news_items_to_signals(items)) == MAX_NEWS_SIGNALS


class TestYahooConsensus:
    def test_consensus_from_targets_and_trend(self) -> None:
        """One analyst row per non-empty bucket, each at the mean target."""
        data = {
            "targets": {"mean": 150.0, "high": 180.0, "low": 110.0},
            "trend": {"strongBuy": 4, "buy": 10, "hold": 6, "sell": 0, "strongSell": 0},
        }

        consensus = consensus_from_analyst_data(data, 120.0)

        assert consensus is not None
        assert consensus.consensus_target == 150.0
        assert consensus.upside_percent == 25.0
        assert [a.analyst for a in consensus.analysts] == ["Strong Buy (4)", "Buy (10)", "Hold (6)"]
        assert [a.rating for a in consensus.analysts] == ["buy", "buy", "hold"]

    @pytest.mark.parametrize("targets", [{}, {"mean": None}, {"mean": 0}, {"mean": float("nan")}])
    def test_missing_mean_target(self, targets) -> None:
        """No usable mean target means no consensus."""
        assert consensus_from_analyst_data({"targets": targets, "trend": {}}, 100.0) is None


class TestStockPrices:
    """stockprices.dev quote adapter."""

    @patch("ticker_insight.analysis.providers.stockprices.requests.get")
    def test_price_field_returned(self, mock_get: MagicMock) -> None:
        """The Price field of the JSON payload is the quote."""
        mock_get.return_value = _response(200, {"Ticker": "AAPL", "Price": 187.42})

        assert fetch_stockprices_quote("aapl") == 187.42
        url = mock_get.call_args.args[0]
        assert url.endswith("/AAPL")

    @patch("ticker_insight.analysis.providers.stockprices.requests.get")
    def test_not_found_returns_none(self, mock_get: MagicMock) -> None:
        """Client errors degrade to no price."""
        mock_get.return_value = _response(404)
        assert fetch_stockprices_quote("ZZZZ") is None

    @patch("ticker_insight.analysis.providers.stockprices.requests.get")
    def test_unusable_payload(self, mock_get: MagicMock) -> None:
        """Non-positive or missing prices are treated as unavailable."""
        mock_get.return_value = _response(200, {"Price": 0})
        assert fetch_stockprices_quote("AAPL") is None
        mock_get.return_value = _response(200, ["not", "a", "dict"])
        assert fetch_stockprices_quote("AAPL") is None

    @patch("ticker_insight.analysis.providers.stockprices.requests.get")
    def test_server_error_raises(self, mock_get: MagicMock) -> None:
        """5xx responses raise so the retry loop can classify them."""
        mock_get.return_value = _response(503)
        with pytest.raises(requests.HTTPError):
            fetch_stockprices_quote("AAPL")

    @patch("ticker_insight.analysis.providers.stockprices.requests.get")
    def test_provider_goes_through_executor(self, mock_get: MagicMock) -> None:
        """The async provider returns the blocking lookup's price."""
        mock_get.return_value = _response(200, {"Price": "99.5"})
        assert asyncio.run(stockprices_ticker_price_provider.fetch_price("AAPL")) == 99.5

    @patch("ticker_insight.analysis.providers.stockprices.requests.get")
    def test_quote_url_from_environment(
        self, mock_get: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """STOCKPRICES_QUOTE_URL replaces the default endpoint."""
        monkeypatch.setenv("STOCKPRICES_QUOTE_URL", "http://localhost:9000/quotes/")
        mock_get.return_value = _response(200, {"Price": 1.5})

        fetch_stockprices_quote("msft")

        assert mock_get.call_args.args[0] == "http://localhost:9000/quotes/MSFT"
