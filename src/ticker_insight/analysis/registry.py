"""
Report assembly and cache integration.

Builds ticker reports from a selected context (providers + engines + model
variants). Spot prices are never served from the cache; inferred metadata
(consensus, sentiment, fundamentals, entry plans) is, one slot per metric and
per selected model variant.
"""

import logging
from collections.abc import Callable

from ticker_insight.analysis.contexts import ANALYSIS_CONTEXTS, get_analysis_context
from ticker_insight.analysis.contracts import (
    AnalysisContext,
    EntryPointModel,
    FundamentalModel,
    LiveReport,
    NewsSignal,
    ReportComparisons,
    ReportOptions,
    TargetConsensus,
    TickerReport,
)
from ticker_insight.analysis.engines import build_target_consensus
from ticker_insight.analysis.providers.mock import anchor_price
from ticker_insight.data.metadata_store import TickerMetadataStore, normalize_symbol
from ticker_insight.data.yfinance_client import get_market_state
from ticker_insight.utils.validators import positive_price

logger = logging.getLogger(__name__)

TARGET_CONSENSUS_KEY = "target-consensus"
SENTIMENT_KEY = "sentiment"
CURRENT_PRICE_KEY = "current-price"


def fundamental_key(model_id: str) -> str:
    return f"fundamental:{model_id}"


def entry_key(model_id: str) -> str:
    return f"entry:{model_id}"


def _error_message(error: Exception) -> str:
    return str(error) or type(error).__name__


class ReportAssembler:
    """Decides per metric whether to trust the cache or recompute."""

    def __init__(
        self,
        store: TickerMetadataStore,
        contexts: tuple[AnalysisContext, ...] = ANALYSIS_CONTEXTS,
        clock: Callable[[], int] | None = None,
    ):
        self.store = store
        self.contexts = contexts
        self._clock = clock or store.clock

    def get_context(self, context_id: str | None) -> AnalysisContext:
        return get_analysis_context(context_id, self.contexts)

    def fundamental_models(self, context_id: str | None = None) -> tuple[FundamentalModel, ...]:
        return self.get_context(context_id).fundamental_models

    def entry_models(self, context_id: str | None = None) -> tuple[EntryPointModel, ...]:
        return self.get_context(context_id).entry_point_models

    def select_fundamental_model(
        self, context: AnalysisContext, model_id: str | None
    ) -> FundamentalModel:
        for model in context.fundamental_models:
            if model.id == model_id:
                return model
        return context.fundamental_models[0]

    def select_entry_model(self, context: AnalysisContext, model_id: str | None) -> EntryPointModel:
        for model in context.entry_point_models:
            if model.id == model_id:
                return model
        return context.entry_point_models[0]

    def _comparisons(
        self, context: AnalysisContext, symbol: str, current_price: float
    ) -> ReportComparisons:
        # Always fresh: comparisons show what every variant says right now
        return ReportComparisons(
            fundamentals=[m.summarize(symbol, current_price) for m in context.fundamental_models],
            entries=[m.plan(symbol, current_price) for m in context.entry_point_models],
        )

    def build_report(
        self,
        symbol: str,
        current_price: float = 0.0,
        options: ReportOptions | None = None,
    ) -> TickerReport:
        """Recompute every metric for exactly these inputs, bypassing the cache."""
        options = options or ReportOptions()
        context = self.get_context(options.context_id)
        normalized = normalize_symbol(symbol)
        fundamental_model = self.select_fundamental_model(context, options.fundamental_model_id)
        entry_model = self.select_entry_model(context, options.entry_model_id)
        fallback_signals = [
            NewsSignal("X", f"{normalized} sentiment defaults to context fallback headlines.", 0.5),
            NewsSignal(
                "Financial Times",
                f"{normalized} sentiment defaults to context fallback headlines.",
                0.5,
            ),
        ]

        return TickerReport(
            symbol=normalized,
            current_price=current_price,
            target_consensus=build_target_consensus(normalized, current_price),
            sentiment=context.sentiment_engine.build(normalized, fallback_signals),
            fundamental=fundamental_model.summarize(normalized, current_price),
            entry_plan=entry_model.plan(normalized, current_price),
            comparisons=self._comparisons(context, normalized, current_price),
        )

    def build_report_cached(
        self,
        symbol: str,
        current_price: float = 0.0,
        options: ReportOptions | None = None,
        now: int | None = None,
    ) -> TickerReport:
        """Serve each cacheable metric from its slot unless the slot is stale."""
        options = options or ReportOptions()
        context = self.get_context(options.context_id)
        normalized = normalize_symbol(symbol)
        if now is None:
            now = self._clock()
        fundamental_model = self.select_fundamental_model(context, options.fundamental_model_id)
        entry_model = self.select_entry_model(context, options.entry_model_id)

        target_consensus = self.store.get_or_compute(
            normalized,
            TARGET_CONSENSUS_KEY,
            lambda: build_target_consensus(normalized, current_price),
            now,
        ).value
        sentiment = self.store.get_or_compute(
            normalized,
            SENTIMENT_KEY,
            lambda: context.sentiment_engine.build(normalized, []),
            now,
        ).value
        fundamental = self.store.get_or_compute(
            normalized,
            fundamental_key(fundamental_model.id),
            lambda: fundamental_model.summarize(normalized, current_price),
            now,
        ).value
        entry_plan = self.store.get_or_compute(
            normalized,
            entry_key(entry_model.id),
            lambda: entry_model.plan(normalized, current_price),
            now,
        ).value

        return TickerReport(
            symbol=normalized,
            current_price=current_price,
            target_consensus=target_consensus,
            sentiment=sentiment,
            fundamental=fundamental,
            entry_plan=entry_plan,
            comparisons=self._comparisons(context, normalized, current_price),
        )

    async def build_report_live(
        self,
        symbol: str,
        options: ReportOptions | None = None,
        now: int | None = None,
    ) -> LiveReport:
        """
        Build a report from a live snapshot, letting cache staleness decide.

        Live consensus and sentiment only replace cached values when their
        slots are due for refresh. Provider failures degrade to cached or
        derived values and are reported in provider_warnings.
        """
        options = options or ReportOptions()
        context = self.get_context(options.context_id)
        normalized = normalize_symbol(symbol)
        if now is None:
            now = self._clock()
        warnings: list[str] = []
        price_provider = context.ticker_price_provider
        news_provider = context.news_provider

        # Price: provider, then last known price, then caller default, then synthetic
        provider_price: float | None = None
        try:
            provider_price = positive_price(await price_provider.fetch_price(normalized))
        except Exception as e:
            logger.warning(f"build_report_live({normalized}): price provider failed: {e}")
            warnings.append(f"Price provider error: {_error_message(e)}")

        last_known = self.store.get_latest(normalized, CURRENT_PRICE_KEY)
        if provider_price is not None:
            self.store.upsert(normalized, CURRENT_PRICE_KEY, provider_price, now)
            current_price = round(provider_price, 2)
            market_source = price_provider.id
        else:
            warnings.append(f"Price unavailable from {price_provider.id}.")
            fallback = positive_price(options.fallback_price)
            if last_known is not None:
                current_price = round(last_known.value, 2)
                market_source = f"cache:{CURRENT_PRICE_KEY}"
            elif fallback is not None:
                current_price = round(fallback, 2)
                market_source = "fallback:caller"
            else:
                current_price = anchor_price(normalized)
                market_source = "fallback:synthetic"

        signals: list[NewsSignal] = []
        try:
            signals = list(await news_provider.fetch_signals(normalized))
        except Exception as e:
            logger.warning(f"build_report_live({normalized}): news provider failed: {e}")
            warnings.append(f"News provider error: {_error_message(e)}")
        if not signals:
            warnings.append(f"No signals returned from {news_provider.id}.")

        live_consensus: TargetConsensus | None = None
        consensus_sources: list[str] = []
        if context.consensus_provider is not None:
            consensus_provider = context.consensus_provider
            try:
                live_consensus = await consensus_provider.fetch_consensus(normalized, current_price)
            except Exception as e:
                logger.warning(f"build_report_live({normalized}): consensus provider failed: {e}")
                warnings.append(f"Consensus provider error: {_error_message(e)}")
            if live_consensus is not None:
                consensus_sources.append(consensus_provider.id)
            else:
                warnings.append(f"No consensus returned from {consensus_provider.id}.")

        # Decide staleness before the cached build so live values win only when due
        consensus_due = self.store.should_refresh(normalized, TARGET_CONSENSUS_KEY, now)
        sentiment_due = self.store.should_refresh(normalized, SENTIMENT_KEY, now)

        if sentiment_due and signals:
            digest = context.sentiment_engine.build(normalized, signals)
            self.store.upsert(normalized, SENTIMENT_KEY, digest, now)
        if consensus_due and live_consensus is not None:
            self.store.upsert(normalized, TARGET_CONSENSUS_KEY, live_consensus, now)
        elif not consensus_due:
            consensus_sources = [f"cache:{TARGET_CONSENSUS_KEY}"]
        else:
            consensus_sources = ["derived:target-consensus"]

        logger.debug(
            f"build_report_live({normalized}): consensus_due={consensus_due} "
            f"sentiment_due={sentiment_due} signals={len(signals)}"
        )

        report = self.build_report_cached(
            normalized,
            current_price,
            ReportOptions(
                context_id=context.id,
                fundamental_model_id=options.fundamental_model_id,
                entry_model_id=options.entry_model_id,
            ),
            now,
        )

        return LiveReport(
            report=report,
            context_id=context.id,
            live_sources={
                "market": [market_source],
                "news": [news_provider.id] if signals else ["unavailable:news-signals"],
                "consensus": consensus_sources,
            },
            provider_warnings=warnings,
            market_state=get_market_state(),
        )
