"""Async yfinance client with bounded concurrency and retry logic."""

import asyncio
import logging
import os
import random
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, TypeVar

import pandas as pd
import pytz
import yfinance as yf
from requests.exceptions import HTTPError

from ticker_insight.utils.validators import positive_price

logger = logging.getLogger(__name__)

# Bounded concurrency for blocking provider calls
_max_workers = int(os.environ.get("YF_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)
_fetch_semaphore = asyncio.Semaphore(_max_workers)

# Retry configuration
_max_retries = int(os.environ.get("YF_MAX_RETRIES", "3"))
_base_delay = float(os.environ.get("YF_BASE_DELAY", "1.0"))  # seconds
_max_delay = float(os.environ.get("YF_MAX_DELAY", "30.0"))  # seconds

# Shutdown coordination
shutdown_event = asyncio.Event()

T = TypeVar("T")


class ServerShuttingDownError(Exception):
    """Raised when server is shutting down."""

    pass


class YFinanceRetryError(Exception):
    """Raised when a provider call fails after all retries."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


def _is_retryable_error(error: Exception) -> tuple[bool, int]:
    """
    Check if an error is retryable (transient).

    Returns:
        Tuple of (is_retryable, max_retries_for_this_error)
    """
    if (
        isinstance(error, HTTPError)
        and hasattr(error, "response")
        and error.response is not None
    ):
        status_code = error.response.status_code
        if status_code == 401:
            # 401 Invalid Crumb - retry once, then give up
            return (True, 1)
        if status_code == 429:
            return (True, _max_retries)
        if 500 <= status_code < 600:
            return (True, _max_retries)
        return (False, 0)

    error_str = str(error).lower()

    if "401" in error_str or "invalid crumb" in error_str:
        return (True, 1)

    retryable_patterns = [
        "rate limit",
        "too many requests",
        "connection",
        "timeout",
        "temporary",
    ]
    if any(pattern in error_str for pattern in retryable_patterns):
        return (True, _max_retries)

    return (False, 0)


def _calculate_backoff(attempt: int) -> float:
    """Calculate delay with exponential backoff and jitter."""
    delay = _base_delay * (2**attempt)
    # Jitter of +/-25%
    jitter = delay * 0.25 * (2 * random.random() - 1)
    return min(delay + jitter, _max_delay)


async def run_with_retry(
    operation_name: str,
    sync_func: Callable[[], T],
    max_retries: int = _max_retries,
    source: str = "yfinance",
) -> T:
    """
    Execute a blocking function in the provider executor with retry logic.

    Args:
        operation_name: Name for logging (e.g., "fetch_price(AAPL)")
        sync_func: Synchronous function to execute
        max_retries: Maximum number of retry attempts
        source: Upstream name used in retry logs

    Returns:
        Whatever sync_func returns

    Raises:
        YFinanceRetryError: If all retries exhausted
        ServerShuttingDownError: If server is shutting down
    """
    last_error: Exception | None = None
    total_backoff = 0.0

    async with _fetch_semaphore:
        for attempt in range(max_retries + 1):
            if shutdown_event.is_set():
                raise ServerShuttingDownError("Server is shutting down")

            try:
                loop = asyncio.get_running_loop()
                result = await loop.run_in_executor(_executor, sync_func)
                if attempt > 0:
                    logger.info(
                        f"{operation_name}: {source} succeeded after {attempt + 1} attempts "
                        f"({total_backoff:.1f}s backoff)"
                    )
                return result
            except Exception as e:
                last_error = e

                is_retryable, error_max_retries = _is_retryable_error(e)
                if not is_retryable:
                    raise

                effective_max_retries = min(max_retries, error_max_retries)
                if attempt >= effective_max_retries:
                    logger.warning(
                        f"{operation_name}: {source} failed after {attempt + 1} attempts "
                        f"(limit={effective_max_retries + 1}). Last error: {e}"
                    )
                    raise YFinanceRetryError(
                        f"Failed after {attempt + 1} attempts: {e}",
                        last_error=last_error,
                    ) from e

                delay = _calculate_backoff(attempt)
                total_backoff += delay
                logger.info(
                    f"{operation_name}: Attempt {attempt + 1} failed ({e}). "
                    f"Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)

    raise YFinanceRetryError(
        f"Failed after {max_retries + 1} attempts",
        last_error=last_error,
    )


async def fetch_quote_price(symbol: str) -> float | None:
    """
    Fetch the last traded price for a symbol.

    Returns None when Yahoo has no usable price.
    """
    normalized_symbol = symbol.upper().strip()

    def _fetch() -> float | None:
        ticker = yf.Ticker(normalized_symbol)
        fast_info = ticker.fast_info
        try:
            price = fast_info["last_price"]
        except (KeyError, TypeError):
            price = None
        return positive_price(price)

    return await run_with_retry(f"fetch_quote_price({normalized_symbol})", _fetch)


async def fetch_news(symbol: str) -> list[dict[str, Any]]:
    """Fetch raw Yahoo news items for a symbol. Empty list when none."""
    normalized_symbol = symbol.upper().strip()

    def _fetch() -> list[dict[str, Any]]:
        return list(yf.Ticker(normalized_symbol).news or [])

    return await run_with_retry(f"fetch_news({normalized_symbol})", _fetch)


async def fetch_analyst_consensus(symbol: str) -> dict[str, Any]:
    """
    Fetch analyst price targets and the latest recommendation counts.

    Returns:
        Dict with "targets" (mapping, may be empty) and "trend" (counts for
        the most recent period, may be empty)
    """
    normalized_symbol = symbol.upper().strip()

    def _fetch() -> dict[str, Any]:
        ticker = yf.Ticker(normalized_symbol)
        targets = ticker.analyst_price_targets or {}
        recommendations = ticker.recommendations
        trend: dict[str, int] = {}
        if isinstance(recommendations, pd.DataFrame) and not recommendations.empty:
            row = recommendations.iloc[0]
            for column in ("strongBuy", "buy", "hold", "sell", "strongSell"):
                value = row.get(column)
                if value is not None and not pd.isna(value):
                    trend[column] = int(value)
        return {"targets": dict(targets), "trend": trend}

    return await run_with_retry(
        f"fetch_analyst_consensus({normalized_symbol})", _fetch
    )


def get_market_state(tz: str = "America/New_York") -> dict[str, str]:
    """
    Determine market state. Clock-based only (no holiday calendar).

    Args:
        tz: Timezone (default: America/New_York)

    Returns:
        Dict with state, method, and checked_at timestamp
    """
    eastern = pytz.timezone(tz)
    now = datetime.now(eastern)

    if now.weekday() >= 5:
        state = "closed"
    else:
        time_minutes = now.hour * 60 + now.minute

        if time_minutes < 4 * 60:  # Before 4 AM
            state = "closed"
        elif time_minutes < 9 * 60 + 30:  # 4 AM - 9:30 AM
            state = "pre_market"
        elif time_minutes < 16 * 60:  # 9:30 AM - 4 PM
            state = "regular"
        elif time_minutes < 20 * 60:  # 4 PM - 8 PM
            state = "after_hours"
        else:
            state = "closed"

    return {
        "state": state,
        "method": "clock_only_no_holidays",
        "checked_at": now.isoformat(),
    }


async def shutdown_executor() -> None:
    """Cleanup on server shutdown."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)
