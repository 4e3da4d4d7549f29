"""Pytest configuration and fixtures."""

import pytest

from ticker_insight.analysis.contracts import AnalysisContext, NewsSignal, TargetConsensus
from ticker_insight.analysis.engines import (
    DEFAULT_ENTRY_POINT_MODELS,
    DEFAULT_FUNDAMENTAL_MODELS,
    DEFAULT_SENTIMENT_ENGINES,
)
from ticker_insight.analysis.registry import ReportAssembler
from ticker_insight.data.metadata_store import TickerMetadataStore


class FakePriceProvider:
    """Price provider returning a fixed price or raising."""

    id = "fake-price"
    name = "Fake Price Provider"

    def __init__(self, price: float | None = None, error: Exception | None = None):
        self.price = price
        self.error = error
        self.calls = 0

    async def fetch_price(self, symbol: str) -> float | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.price


class FakeNewsProvider:
    """News provider returning fixed signals or raising."""

    id = "fake-news"
    name = "Fake News Provider"

    def __init__(self, signals: list[NewsSignal] | None = None, error: Exception | None = None):
        self.signals = signals or []
        self.error = error

    async def fetch_signals(self, symbol: str) -> list[NewsSignal]:
        if self.error is not None:
            raise self.error
        return list(self.signals)


class FakeConsensusProvider:
    id = "fake-consensus"
    name = "Fake Consensus Provider"

    def __init__(self, consensus: TargetConsensus | None = None, error: Exception | None = None):
        self.consensus = consensus
        self.error = error

    async def fetch_consensus(self, symbol: str, current_price: float) -> TargetConsensus | None:
        if self.error is not None:
            raise self.error
        return self.consensus


def make_context(
    price_provider: FakePriceProvider,
    news_provider: FakeNewsProvider,
    consensus_provider: FakeConsensusProvider | None = None,
    context_id: str = "test_live",
) -> AnalysisContext:
    return AnalysisContext(
        id=context_id,
        name="Test Context",
        news_provider=news_provider,
        ticker_price_provider=price_provider,
        sentiment_engine=DEFAULT_SENTIMENT_ENGINES[0],
        fundamental_models=DEFAULT_FUNDAMENTAL_MODELS,
        entry_point_models=DEFAULT_ENTRY_POINT_MODELS,
        consensus_provider=consensus_provider,
    )


@pytest.fixture(autouse=True)
def _no_context_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the environment default context out of tests."""
    monkeypatch.delenv("ANALYSIS_CONTEXT", raising=False)


@pytest.fixture
def store() -> TickerMetadataStore:
    """Store with a 60s global interval and a clock pinned at 0."""
    return TickerMetadataStore(60_000, clock=lambda: 0)


@pytest.fixture
def assembler(store: TickerMetadataStore) -> ReportAssembler:
    """Assembler over the default context catalog (no network in default_mock)."""
    return ReportAssembler(store)


@pytest.fixture
def headline_signal() -> NewsSignal:
    return NewsSignal("Financial Times", "AAPL upgrade after strong demand", 0.8)
