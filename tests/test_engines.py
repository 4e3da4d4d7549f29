"""Tests for consensus, sentiment, fundamental and entry engines."""

import pytest

from ticker_insight.analysis.contracts import NewsSignal
from ticker_insight.analysis.engines import (
    DEFAULT_ENTRY_POINT_MODELS,
    DEFAULT_FUNDAMENTAL_MODELS,
    WeightedHeadlineSentimentEngine,
    build_target_consensus,
    score_signal,
    swing_structure_model,
    to_trend,
    upside_percent,
)


class TestTargetConsensus:
    def test_consensus_for_known_symbol(self) -> None:
        """Four desks averaged around the current price."""
        consensus = build_target_consensus("MSFT", 300)

        assert [a.target_price for a in consensus.analysts] == [324.0, 342.0, 297.0, 276.0]
        assert [a.rating for a in consensus.analysts] == ["buy", "buy", "hold", "sell"]
        assert consensus.consensus_target == 309.75
        assert consensus.upside_percent == 3.25

    def test_symbol_case_does_not_matter(self) -> None:
        """Seeds are computed on the upper-cased symbol."""
        assert build_target_consensus("msft", 300) == build_target_consensus("MSFT", 300)

    def test_zero_price_has_no_upside(self) -> None:
        """Division by a zero price is avoided."""
        assert upside_percent(100.0, 0) == 0.0
        assert build_target_consensus("AAPL", 0).upside_percent == 0.0


class TestSentiment:
    """Keyword scoring and trend classification."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Record growth and strong demand", 3),
            ("Analyst downgrade after earnings miss", -2),
            ("Company holds annual meeting", 0),
        ],
    )
    def test_score_signal(self, text: str, expected: int) -> None:
        """Positive hits minus negative hits."""
        assert score_signal(text) == expected

    @pytest.mark.parametrize(
        "score,trend",
        [(1.3, "bullish"), (1.2, "neutral"), (-1.2, "neutral"), (-1.3, "bearish")],
    )
    def test_trend_threshold(self, score: float, trend: str) -> None:
        """Threshold is exclusive in both directions."""
        assert to_trend(score) == trend

    def test_bullish_digest(self) -> None:
        """Confidence-weighted average over signals."""
        engine = WeightedHeadlineSentimentEngine()
        signals = [NewsSignal("X", "Record growth, strong momentum, buy rating", 1.0)]

        digest = engine.build("AAPL", signals)

        assert digest.score == 5.0
        assert digest.trend == "bullish"
        assert digest.sources == tuple(signals)

    def test_empty_signals_use_neutral_fallback(self) -> None:
        """No signals produce a neutral digest with fallback headlines."""
        digest = WeightedHeadlineSentimentEngine().build("AAPL", [])

        assert digest.score == 0.0
        assert digest.trend == "neutral"
        assert len(digest.key_signals) == 2
        assert all("neutral fallback" in s for s in digest.key_signals)

    def test_signal_lists_capped(self) -> None:
        """Key signals keep four entries and sources keep six."""
        signals = [NewsSignal("X", f"headline {i}", 0.5) for i in range(8)]
        digest = WeightedHeadlineSentimentEngine().build("AAPL", signals)

        assert len(digest.key_signals) == 4
        assert len(digest.sources) == 6


class TestModels:
    """Fundamental and entry model variants."""

    def test_model_ids(self) -> None:
        """Ids are stable slugs used in cache keys."""
        assert [m.id for m in DEFAULT_FUNDAMENTAL_MODELS] == ["dcf-core", "quality-factors"]
        assert [m.id for m in DEFAULT_ENTRY_POINT_MODELS] == [
            "swing-structure",
            "momentum-breakout",
            "rsi-mean-reversion",
            "atr-trend-continuation",
        ]

    def test_swing_plan_levels(self) -> None:
        """Zones are multiples of the current price."""
        plan = swing_structure_model.plan("AAPL", 100)

        assert plan.model == "Swing Structure"
        assert plan.buy_zone == "97.00 - 99.00"
        assert plan.sell_zone == "108.00 - 111.00"
        assert plan.stop_loss == "94.00"
        assert plan.take_profit == "112.00"
        assert plan.rationale[0].startswith("AAPL ")

    def test_fundamental_valuation_notes(self) -> None:
        """Valuation notes reflect the price passed in."""
        dcf, quality = DEFAULT_FUNDAMENTAL_MODELS

        assert dcf.summarize("AAPL", 100).valuation_note == "DCF fair value is 109.00 vs 100.00 spot."
        assert quality.summarize("AAPL", 100).valuation_note == (
            "Quality model implies neutral value around 97.00."
        )
