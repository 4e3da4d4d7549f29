"""Tests for refresh configuration and cache inspection tools."""

import json

import pytest

from ticker_insight.data.metadata_store import TickerMetadataStore
from ticker_insight.tools import metadata_dump, metadata_history, set_refresh_interval


class TestSetRefreshInterval:
    """Global and per-slot interval configuration."""

    def test_global_scope(self, store: TickerMetadataStore) -> None:
        """Without symbol and key the global interval changes."""
        result = set_refresh_interval(store, 30_000)

        assert result["scope"] == "global"
        assert result["refresh_interval_ms"] == 30_000
        assert store.get_global_refresh_interval() == 30_000

    def test_ticker_scope(self, store: TickerMetadataStore) -> None:
        """Symbol and key set one override, symbol normalized."""
        result = set_refresh_interval(store, 5000, symbol="nvda", key="sentiment")

        assert result["scope"] == "ticker"
        assert result["symbol"] == "NVDA"
        assert result["key"] == "sentiment"
        assert store.get_refresh_interval("NVDA", "sentiment") == 5000
        assert store.get_global_refresh_interval() == 60_000

    def test_clamped_value_reported(self, store: TickerMetadataStore) -> None:
        """The effective, clamped interval is echoed back."""
        assert set_refresh_interval(store, 10)["refresh_interval_ms"] == 1000

    @pytest.mark.parametrize("interval", [0, -1, "soon", None])
    def test_invalid_interval(self, store: TickerMetadataStore, interval) -> None:
        """Unusable intervals are rejected and nothing changes."""
        result = set_refresh_interval(store, interval)

        assert result["error"] is True
        assert result["error_type"] == "invalid_interval"
        assert store.get_global_refresh_interval() == 60_000

    @pytest.mark.parametrize("kwargs", [{"symbol": "AAPL"}, {"key": "sentiment"}])
    def test_symbol_and_key_required_together(self, store: TickerMetadataStore, kwargs) -> None:
        """A half-specified override is an invalid request."""
        result = set_refresh_interval(store, 5000, **kwargs)

        assert result["error_type"] == "invalid_request"
        assert store.dump()["tickers"] == []

    def test_invalid_symbol(self, store: TickerMetadataStore) -> None:
        """Override on a malformed symbol is rejected."""
        result = set_refresh_interval(store, 5000, symbol="$$$", key="sentiment")
        assert result["error_type"] == "invalid_symbol"


class TestMetadataHistory:
    """Single-slot history and freshness."""

    def test_empty_slot(self, store: TickerMetadataStore) -> None:
        """Never-written slots report no data and a due refresh."""
        result = metadata_history(store, "AAPL", "sentiment", now=0)

        assert result["latest"] is None
        assert result["history"] == []
        assert result["should_refresh"] is True
        assert result["freshness"]["age_ms"] is None
        assert store.dump()["tickers"] == []

    def test_populated_slot(self, store: TickerMetadataStore) -> None:
        """Latest, history and freshness reflect the writes."""
        store.upsert("AAPL", "sentiment", {"score": 0.4}, 1000)
        store.upsert("AAPL", "sentiment", {"score": 0.8}, 2000)

        result = metadata_history(store, "aapl", "sentiment", now=12_000)

        assert result["symbol"] == "AAPL"
        assert result["latest"] == {"key": "sentiment", "value": {"score": 0.8}, "computed_at": 2000}
        assert [h["version"] for h in result["history"]] == [1, 2]
        assert result["should_refresh"] is False
        assert result["freshness"]["next_refresh_in_ms"] == 50_000

    def test_uses_store_clock_by_default(self, store: TickerMetadataStore) -> None:
        """Without `now` the store clock decides freshness."""
        store.upsert("AAPL", "sentiment", 1)
        assert metadata_history(store, "AAPL", "sentiment")["freshness"]["age_ms"] == 0


class TestMetadataDump:
    def test_dump_is_json_serializable(self, store: TickerMetadataStore) -> None:
        """The diagnostic dump can be rendered as JSON."""
        store.set_ticker_refresh_interval("AAPL", "sentiment", 5000)
        store.upsert("AAPL", "sentiment", {"score": 1.0}, 0)

        result = metadata_dump(store)

        assert result["meta"]["tool"] == "metadata_dump"
        assert result["global_interval_ms"] == 60_000
        decoded = json.loads(json.dumps(result))
        assert decoded["tickers"][0]["intervals"] == {"sentiment": 5000}
