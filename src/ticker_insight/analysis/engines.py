"""Default consensus, sentiment, fundamental and entry-point engines."""

import re
from collections.abc import Callable
from dataclasses import dataclass

from ticker_insight.analysis.contracts import (
    AnalystTarget,
    EntryPlan,
    FundamentalSummary,
    NewsSignal,
    SentimentDigest,
    TargetConsensus,
    Trend,
)

POSITIVE_KEYWORDS = ("beats", "growth", "surge", "upgrade", "strong", "buy", "record", "momentum")
NEGATIVE_KEYWORDS = ("miss", "downgrade", "lawsuit", "drop", "weak", "sell", "cuts")

# Weighted score beyond this magnitude flips the trend away from neutral
TREND_THRESHOLD = 1.2


def symbol_seed(symbol: str) -> int:
    return sum(ord(ch) for ch in symbol.upper())


def build_target_consensus(symbol: str, current_price: float) -> TargetConsensus:
    """Synthesize a four-desk analyst consensus around the current price."""
    seed = symbol_seed(symbol)
    analysts = (
        AnalystTarget("Morgan Stanley", round(current_price * (1.04 + (seed % 5) / 100), 2), "buy"),
        AnalystTarget("Goldman Sachs", round(current_price * (1.08 + (seed % 7) / 100), 2), "buy"),
        AnalystTarget("JP Morgan", round(current_price * 0.99, 2), "hold"),
        AnalystTarget("UBS", round(current_price * 0.92, 2), "sell"),
    )
    consensus_target = round(sum(a.target_price for a in analysts) / len(analysts), 2)
    return TargetConsensus(
        consensus_target=consensus_target,
        upside_percent=upside_percent(consensus_target, current_price),
        analysts=analysts,
    )


def upside_percent(target: float, current_price: float) -> float:
    if current_price == 0:
        return 0.0
    return round((target - current_price) / current_price * 100, 2)


def score_signal(text: str) -> int:
    """Keyword hits: positive minus negative."""
    content = text.lower()
    pos = sum(1 for w in POSITIVE_KEYWORDS if w in content)
    neg = sum(1 for w in NEGATIVE_KEYWORDS if w in content)
    return pos - neg


def to_trend(score: float) -> Trend:
    if score > TREND_THRESHOLD:
        return "bullish"
    if score < -TREND_THRESHOLD:
        return "bearish"
    return "neutral"


class WeightedHeadlineSentimentEngine:
    """Confidence-weighted keyword score averaged over headlines."""

    id = "weighted-headline"
    name = "Weighted Headline Sentiment"

    def build(self, symbol: str, signals: list[NewsSignal]) -> SentimentDigest:
        effective = list(signals) or [
            NewsSignal("X", f"{symbol} feed unavailable: neutral fallback applied.", 0.3),
            NewsSignal("Financial Times", f"{symbol} feed unavailable: neutral fallback applied.", 0.3),
        ]

        weighted = sum(score_signal(s.signal) * max(s.confidence, 0.2) for s in effective)
        score = round(weighted / max(len(effective), 1), 1)

        return SentimentDigest(
            score=score,
            trend=to_trend(score),
            key_signals=tuple(s.signal for s in effective[:4]),
            sources=tuple(effective[:6]),
        )


class DiscountedCashFlowModel:
    id = "dcf-core"
    name = "DCF Core"

    def summarize(self, symbol: str, current_price: float) -> FundamentalSummary:
        fair_value = round(current_price * 1.09, 2)
        return FundamentalSummary(
            model=self.name,
            summary=(
                f"{symbol} screens modestly undervalued with stable free-cash-flow conversion "
                "and disciplined capex assumptions."
            ),
            strengths=(
                "Healthy operating margin trajectory",
                "Cash generation supports reinvestment + buybacks",
            ),
            risks=(
                "Sensitivity to terminal growth assumptions",
                "Execution risk in next product cycle",
            ),
            valuation_note=f"DCF fair value is {fair_value:.2f} vs {current_price:.2f} spot.",
        )


class QualityFactorModel:
    id = "quality-factors"
    name = "Quality Factors"

    def summarize(self, symbol: str, current_price: float) -> FundamentalSummary:
        premium = round(current_price * 0.97, 2)
        return FundamentalSummary(
            model=self.name,
            summary=(
                f"{symbol} ranks high on profitability and balance-sheet quality, "
                "with valuation near a quality premium band."
            ),
            strengths=("ROIC above peer median", "Balance sheet flexibility remains strong"),
            risks=(
                "Premium multiple could compress on rates shock",
                "Growth deceleration may reduce factor support",
            ),
            valuation_note=f"Quality model implies neutral value around {premium:.2f}.",
        )


@dataclass(frozen=True)
class ZoneEntryModel:
    """Entry plan expressed as multiples of the current price."""

    name: str
    buy: tuple[float, float]
    sell: tuple[float, float]
    stop: float
    take_profit: float
    rationale: Callable[[str], tuple[str, ...]]

    @property
    def id(self) -> str:
        return re.sub(r"\s+", "-", self.name.lower())

    def plan(self, symbol: str, current_price: float) -> EntryPlan:
        p = current_price
        return EntryPlan(
            model=self.name,
            buy_zone=f"{p * self.buy[0]:.2f} - {p * self.buy[1]:.2f}",
            sell_zone=f"{p * self.sell[0]:.2f} - {p * self.sell[1]:.2f}",
            stop_loss=f"{p * self.stop:.2f}",
            take_profit=f"{p * self.take_profit:.2f}",
            rationale=self.rationale(symbol),
        )


swing_structure_model = ZoneEntryModel(
    "Swing Structure", (0.97, 0.99), (1.08, 1.11), 0.94, 1.12,
    lambda s: (
        f"{s} trend structure supports pullback entries near support.",
        "Risk/reward profile remains above 1:2 under baseline volatility.",
    ),
)

momentum_breakout_model = ZoneEntryModel(
    "Momentum Breakout", (1.01, 1.03), (1.12, 1.16), 0.98, 1.17,
    lambda s: (
        f"{s} setup favors confirmation entries once resistance is cleared.",
        "Tighter stop intended to keep drawdown small in failed breakout scenarios.",
    ),
)

rsi_mean_reversion_model = ZoneEntryModel(
    "RSI Mean Reversion", (0.95, 0.975), (1.03, 1.06), 0.92, 1.07,
    lambda s: (
        f"{s} engine assumes oversold pullbacks revert toward 20-day mean.",
        "Primary trigger is RSI recovery through a neutral threshold after a downside extension.",
    ),
)

atr_trend_continuation_model = ZoneEntryModel(
    "ATR Trend Continuation", (1.005, 1.02), (1.09, 1.14), 0.965, 1.15,
    lambda s: (
        f"{s} uses ATR expansion to confirm trend continuation and avoid low-volatility noise.",
        "Stop width scales with volatility to reduce premature exits during strong directional moves.",
    ),
)

DEFAULT_FUNDAMENTAL_MODELS = (DiscountedCashFlowModel(), QualityFactorModel())
DEFAULT_ENTRY_POINT_MODELS = (
    swing_structure_model,
    momentum_breakout_model,
    rsi_mean_reversion_model,
    atr_trend_continuation_model,
)
DEFAULT_SENTIMENT_ENGINES = (WeightedHeadlineSentimentEngine(),)
