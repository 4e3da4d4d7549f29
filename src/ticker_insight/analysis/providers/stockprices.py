"""stockprices.dev quote adapter, fetched server-side."""

import logging
import os

import requests

from ticker_insight.data.yfinance_client import run_with_retry
from ticker_insight.utils.validators import positive_price

logger = logging.getLogger(__name__)

DEFAULT_QUOTE_URL = "https://stockprices.dev/api/stocks"


def _quote_url() -> str:
    return os.environ.get("STOCKPRICES_QUOTE_URL", DEFAULT_QUOTE_URL).rstrip("/")


def _timeout() -> float:
    return float(os.environ.get("STOCKPRICES_TIMEOUT", "8"))


def fetch_stockprices_quote(symbol: str) -> float | None:
    """
    Blocking quote lookup. Returns the "Price" field or None.

    Raises:
        requests.HTTPError: On 429 and 5xx, so the caller can retry
    """
    normalized_symbol = symbol.upper().strip()
    url = f"{_quote_url()}/{normalized_symbol}"
    response = requests.get(url, timeout=_timeout(), headers={"Accept": "application/json"})

    if response.status_code == 429 or response.status_code >= 500:
        response.raise_for_status()
    if not response.ok:
        logger.warning(
            f"Price fetch failed for {normalized_symbol}: {response.status_code} {response.reason}"
        )
        return None

    payload = response.json()
    if not isinstance(payload, dict):
        return None
    return positive_price(payload.get("Price"))


class StockPricesTickerPriceProvider:
    id = "stockpricesdev-price"
    name = "StockPrices.dev Quote Provider"

    async def fetch_price(self, symbol: str) -> float | None:
        return await run_with_retry(
            f"fetch_stockprices_quote({symbol.upper().strip()})",
            lambda: fetch_stockprices_quote(symbol),
            source="stockprices.dev",
        )


stockprices_ticker_price_provider = StockPricesTickerPriceProvider()
