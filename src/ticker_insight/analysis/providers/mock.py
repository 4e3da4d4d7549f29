"""Deterministic providers for offline development and the default_mock context."""

from ticker_insight.analysis.contracts import NewsSignal
from ticker_insight.analysis.engines import symbol_seed


def anchor_price(symbol: str) -> float:
    """Synthetic but stable spot price derived from the symbol."""
    seed = symbol_seed(symbol)
    return round(45 + (seed % 200) + (seed % 13) * 0.8, 2)


def build_mock_signals(symbol: str) -> list[NewsSignal]:
    tone = symbol_seed(symbol) % 3

    x_signals = (
        f"{symbol} chatter highlights improving guidance confidence.",
        f"{symbol} social momentum points to range-bound positioning.",
        f"{symbol} users flag macro pressure on near-term catalysts.",
    )
    ft_signals = (
        f"{symbol} execution consistency remains the core analyst narrative.",
        f"{symbol} valuation debate centers on margin durability.",
        f"{symbol} sector peers indicate demand normalization themes.",
    )

    return [
        NewsSignal("X", x_signals[tone], round(0.62 + tone * 0.06, 2)),
        NewsSignal("Financial Times", ft_signals[(tone + 1) % 3], round(0.71 + tone * 0.04, 2)),
    ]


class MockTickerPriceProvider:
    id = "mock-random-price"
    name = "Mock Random Price Provider"

    async def fetch_price(self, symbol: str) -> float | None:
        return anchor_price(symbol)


class MockNewsProvider:
    id = "mock-headlines"
    name = "Mock Headlines Provider"

    async def fetch_signals(self, symbol: str) -> list[NewsSignal]:
        return build_mock_signals(symbol)


mock_ticker_price_provider = MockTickerPriceProvider()
mock_news_provider = MockNewsProvider()
