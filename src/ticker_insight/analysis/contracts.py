"""
Shared analysis contracts.

Report payload shapes plus the interfaces that providers, engines and models
implement. Payloads are frozen so cached values cannot be mutated through a
returned record.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Protocol

Rating = Literal["buy", "hold", "sell"]
Trend = Literal["bullish", "neutral", "bearish"]
SignalSource = Literal["X", "Financial Times"]


@dataclass(frozen=True)
class AnalystTarget:
    analyst: str
    target_price: float
    rating: Rating


@dataclass(frozen=True)
class TargetConsensus:
    consensus_target: float
    upside_percent: float
    analysts: tuple[AnalystTarget, ...]


@dataclass(frozen=True)
class NewsSignal:
    source: SignalSource
    signal: str
    confidence: float


@dataclass(frozen=True)
class SentimentDigest:
    score: float
    trend: Trend
    key_signals: tuple[str, ...]
    sources: tuple[NewsSignal, ...]


@dataclass(frozen=True)
class FundamentalSummary:
    model: str
    summary: str
    strengths: tuple[str, ...]
    risks: tuple[str, ...]
    valuation_note: str


@dataclass(frozen=True)
class EntryPlan:
    model: str
    buy_zone: str
    sell_zone: str
    stop_loss: str
    take_profit: str
    rationale: tuple[str, ...]


class FundamentalModel(Protocol):
    id: str
    name: str

    def summarize(self, symbol: str, current_price: float) -> FundamentalSummary: ...


class EntryPointModel(Protocol):
    id: str
    name: str

    def plan(self, symbol: str, current_price: float) -> EntryPlan: ...


class SentimentEngine(Protocol):
    id: str
    name: str

    def build(self, symbol: str, signals: list[NewsSignal]) -> SentimentDigest: ...


class TickerPriceProvider(Protocol):
    id: str
    name: str

    async def fetch_price(self, symbol: str) -> float | None: ...


class NewsProvider(Protocol):
    id: str
    name: str

    async def fetch_signals(self, symbol: str) -> list[NewsSignal]: ...


class ConsensusProvider(Protocol):
    id: str
    name: str

    async def fetch_consensus(self, symbol: str, current_price: float) -> TargetConsensus | None: ...


@dataclass(frozen=True)
class AnalysisContext:
    """A named wiring of providers, sentiment engine and model variants."""

    id: str
    name: str
    news_provider: NewsProvider
    ticker_price_provider: TickerPriceProvider
    sentiment_engine: SentimentEngine
    fundamental_models: tuple[FundamentalModel, ...]
    entry_point_models: tuple[EntryPointModel, ...]
    consensus_provider: ConsensusProvider | None = None


@dataclass(frozen=True)
class ReportOptions:
    context_id: str | None = None
    fundamental_model_id: str | None = None
    entry_model_id: str | None = None
    # Used by live builds when neither the provider nor the cache has a price
    fallback_price: float | None = None


@dataclass
class ReportComparisons:
    fundamentals: list[FundamentalSummary] = field(default_factory=list)
    entries: list[EntryPlan] = field(default_factory=list)


@dataclass
class TickerReport:
    symbol: str
    current_price: float
    target_consensus: TargetConsensus
    sentiment: SentimentDigest
    fundamental: FundamentalSummary
    entry_plan: EntryPlan
    comparisons: ReportComparisons

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LiveReport:
    """Live report plus where each input came from and what went wrong."""

    report: TickerReport
    context_id: str
    live_sources: dict[str, list[str]]
    provider_warnings: list[str]
    market_state: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "report": self.report.to_dict(),
            "context_id": self.context_id,
            "live_sources": self.live_sources,
            "provider_warnings": self.provider_warnings,
            "market_state": self.market_state,
        }
