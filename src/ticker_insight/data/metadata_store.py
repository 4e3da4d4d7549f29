"""In-memory metadata cache with refresh policies and bounded history."""

import asyncio
import inspect
import logging
import math
import os
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_REFRESH_INTERVAL_MS = 1000
DEFAULT_REFRESH_INTERVAL_MS = 15 * 60 * 1000
HISTORY_LIMIT = 200


def now_ms() -> int:
    """Wall-clock epoch milliseconds."""
    return int(time.time() * 1000)


def normalize_symbol(symbol: str) -> str:
    return symbol.upper().strip()


def clamp_interval(interval_ms: float | str) -> int:
    """Clamp a refresh interval (number or numeric string) to the 1000ms floor. Never raises."""
    try:
        value = float(interval_ms)
    except (TypeError, ValueError):
        return MIN_REFRESH_INTERVAL_MS
    if not math.isfinite(value):
        return MIN_REFRESH_INTERVAL_MS
    return max(MIN_REFRESH_INTERVAL_MS, int(value))


@dataclass(frozen=True)
class CacheRecord(Generic[T]):
    """Latest known value for one metric of one symbol."""

    key: str
    value: T
    computed_at: int


@dataclass(frozen=True)
class CacheHistoryRecord(CacheRecord[T]):
    """Append-only history entry. Versions start at 1 per slot."""

    version: int


@dataclass
class TickerState:
    latest: dict[str, CacheRecord[Any]] = field(default_factory=dict)
    history: dict[str, deque[CacheHistoryRecord[Any]]] = field(default_factory=dict)
    intervals: dict[str, int] = field(default_factory=dict)


def _plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return value


def record_to_dict(record: CacheRecord[Any]) -> dict[str, Any]:
    out: dict[str, Any] = {
        "key": record.key,
        "value": _plain(record.value),
        "computed_at": record.computed_at,
    }
    if isinstance(record, CacheHistoryRecord):
        out["version"] = record.version
    return out


class TickerMetadataStore:
    """
    Per-(symbol, key) cache of inferred ticker analytics.

    Staleness is decided against a caller-supplied `now` (or the injected
    clock when omitted). Volatile spot prices are not served from here; the
    assembler only records the last known price as a fallback.
    """

    def __init__(
        self,
        global_interval_ms: float | str | None = None,
        clock: Callable[[], int] | None = None,
    ):
        if global_interval_ms is None:
            global_interval_ms = os.environ.get(
                "METADATA_REFRESH_MS", str(DEFAULT_REFRESH_INTERVAL_MS)
            )
        self._global_interval_ms = clamp_interval(global_interval_ms)
        self._clock = clock or now_ms
        self._tickers: dict[str, TickerState] = {}
        # In-flight async refreshes keyed by (symbol, key)
        self._inflight: dict[tuple[str, str], "asyncio.Task[CacheRecord[Any]]"] = {}

    @property
    def clock(self) -> Callable[[], int]:
        return self._clock

    # ------------------------------------------------------------------
    # Refresh intervals
    # ------------------------------------------------------------------

    def set_global_refresh_interval(self, interval_ms: float) -> None:
        self._global_interval_ms = clamp_interval(interval_ms)

    def get_global_refresh_interval(self) -> int:
        return self._global_interval_ms

    def set_ticker_refresh_interval(self, symbol: str, key: str, interval_ms: float) -> None:
        state = self._ensure_state(symbol)
        state.intervals[key] = clamp_interval(interval_ms)

    def get_refresh_interval(self, symbol: str, key: str) -> int:
        state = self._tickers.get(normalize_symbol(symbol))
        if state is not None and key in state.intervals:
            return state.intervals[key]
        return self._global_interval_ms

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_latest(self, symbol: str, key: str) -> CacheRecord[Any] | None:
        state = self._tickers.get(normalize_symbol(symbol))
        if state is None:
            return None
        return state.latest.get(key)

    def get_history(self, symbol: str, key: str) -> list[CacheHistoryRecord[Any]]:
        """Return a copy of the slot history, oldest first."""
        state = self._tickers.get(normalize_symbol(symbol))
        if state is None or key not in state.history:
            return []
        return list(state.history[key])

    def should_refresh(self, symbol: str, key: str, now: int | None = None) -> bool:
        """
        True when the slot is empty or its age reached the effective interval.

        The boundary is inclusive: age == interval counts as stale.
        """
        latest = self.get_latest(symbol, key)
        if latest is None:
            return True
        if now is None:
            now = self._clock()
        return now - latest.computed_at >= self.get_refresh_interval(symbol, key)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(
        self,
        symbol: str,
        key: str,
        value: T,
        computed_at: int | None = None,
    ) -> CacheRecord[T]:
        """
        Write a new latest value and append a history entry.

        No staleness check happens here; callers decide when to write.
        """
        if computed_at is None:
            computed_at = self._clock()
        state = self._ensure_state(symbol)
        latest: CacheRecord[T] = CacheRecord(key=key, value=value, computed_at=computed_at)
        state.latest[key] = latest

        history = state.history.get(key)
        if history is None:
            history = deque(maxlen=HISTORY_LIMIT)
            state.history[key] = history
        version = history[-1].version + 1 if history else 1
        history.append(
            CacheHistoryRecord(key=key, value=value, computed_at=computed_at, version=version)
        )
        logger.debug(f"upsert({normalize_symbol(symbol)}, {key}): version={version}")
        return latest

    def get_or_compute(
        self,
        symbol: str,
        key: str,
        compute: Callable[[], T],
        now: int | None = None,
    ) -> CacheRecord[T]:
        """Return the cached record, calling `compute` only when the slot is stale."""
        if now is None:
            now = self._clock()
        if not self.should_refresh(symbol, key, now):
            return self.get_latest(symbol, key)  # type: ignore[return-value]
        return self.upsert(symbol, key, compute(), now)

    async def get_or_compute_async(
        self,
        symbol: str,
        key: str,
        compute: Callable[[], Awaitable[T] | T],
        now: int | None = None,
    ) -> CacheRecord[T]:
        """
        Async variant of get_or_compute.

        `compute` may return a plain value or an awaitable. Concurrent callers
        refreshing the same stale slot share one in-flight computation; a
        cancelled joiner does not cancel it.
        """
        if now is None:
            now = self._clock()
        if not self.should_refresh(symbol, key, now):
            return self.get_latest(symbol, key)  # type: ignore[return-value]

        slot = (normalize_symbol(symbol), key)
        task = self._inflight.get(slot)
        # A finished task still registered holds a value older than `now`
        joined = task is not None and not task.done()
        if not joined:
            task = asyncio.create_task(self._compute_and_upsert(symbol, key, compute, now))
            self._inflight[slot] = task
        else:
            logger.debug(f"get_or_compute_async{slot}: joining in-flight refresh")

        try:
            if joined:
                return await asyncio.shield(task)
            return await task
        finally:
            # Joiners leave a pending entry to its creator
            if self._inflight.get(slot) is task and (not joined or task.done()):
                self._inflight.pop(slot, None)

    async def _compute_and_upsert(
        self,
        symbol: str,
        key: str,
        compute: Callable[[], Awaitable[T] | T],
        now: int,
    ) -> CacheRecord[T]:
        value = compute()
        if inspect.isawaitable(value):
            value = await value
        return self.upsert(symbol, key, value, now)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def dump(self) -> dict[str, Any]:
        """Snapshot of every symbol's intervals, latest values and history."""
        tickers = [
            {
                "symbol": symbol,
                "global_interval_ms": self._global_interval_ms,
                "intervals": dict(state.intervals),
                "latest": {k: record_to_dict(v) for k, v in state.latest.items()},
                "history": {
                    k: [record_to_dict(entry) for entry in entries]
                    for k, entries in state.history.items()
                },
            }
            for symbol, state in self._tickers.items()
        ]
        return {"global_interval_ms": self._global_interval_ms, "tickers": tickers}

    def _ensure_state(self, symbol: str) -> TickerState:
        normalized = normalize_symbol(symbol)
        state = self._tickers.get(normalized)
        if state is None:
            state = TickerState()
            self._tickers[normalized] = state
        return state
