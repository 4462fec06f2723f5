"""
Stream Collector: Windowed Snapshots from Tagged Records

Collects tagged records arriving mostly in order into one TimeSeries
per tag and releases synchronized windows for downstream processing.

State:
- interval: window length in seconds (0 flushes on every new timestamp)
- delay: grace period for late arrivals, in data time (not wall-clock)
- watermark: start of the next pending window
- data: tag -> TimeSeries

Window release (take):
    A time t closes the pending window when
        t > watermark + delay + interval
    The window end is t - delay - interval, floored to the interval grid
    and never earlier than the watermark. The released snapshot holds
    every tag series cut to the window with get_outer (bracketing
    records included), so any interpolation scheme can be applied
    inside it. Each live series is then pruned down to the latest
    record at or before the new watermark.

The ingestion loop (take/push/ingest/apply) is meant for one logical
reader and does no internal locking. Callbacks run concurrently with
ingestion on detached snapshots; successive windows carry no ordering
guarantee, callers needing order must wait on each handle in turn.
"""

from __future__ import annotations

import asyncio
import inspect
import math
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Iterator, Mapping, Optional, Union

from timerecords.core import constants as C
from timerecords.core.config import CollectorConfig, TimeRecordsConfig
from timerecords.core.errors import CollectorError, InvalidArgumentError
from timerecords.observability.logging import StructuredLogger
from timerecords.series.record import (
    TimeInterval,
    TimeRecord,
    as_seconds,
    as_timestamp,
    datetime_to_timestamp,
)
from timerecords.series.timeseries import TimeSeries, get_outer_all

logger = StructuredLogger(__name__)

Duration = Union[float, int, timedelta]
WindowCallback = Callable[[dict[str, TimeSeries[Any]], TimeInterval], Any]
TagRecord = tuple[str, TimeRecord[Any]]


def _report_failure(handle: Any) -> None:
    """Log callbacks that raised; the exception still reaches whoever waits on the handle."""
    if handle.cancelled():
        return
    error = handle.exception()
    if error is not None:
        logger.error("Window callback failed", error_type=type(error).__name__, error=str(error))


@dataclass(frozen=True, slots=True)
class CollectorWindow:
    """
    A released window: detached per-tag snapshot and its interval.

    Unpacks as (snapshot, interval).
    """

    snapshot: dict[str, TimeSeries[Any]]
    interval: TimeInterval

    def __iter__(self) -> Iterator[Any]:
        yield self.snapshot
        yield self.interval


@dataclass
class CollectorStats:
    """Collector counters."""
    records_ingested: int = 0
    windows_emitted: int = 0
    tags_created: int = 0
    late_records: int = 0
    callbacks_dispatched: int = 0


class TimeSeriesCollector:
    """
    Per-tag multiplexer over TimeSeries with watermark-bounded windows.

    Usage:
        collector = TimeSeriesCollector(interval=1.0, delay=0.5, watermark=0.0)

        for tag, record in stream:
            future = collector.apply(process_window, (tag, record))
            if future is not None:
                results.append(future.result())

        collector.close()
    """

    __slots__ = (
        "_interval", "_delay", "_watermark", "_data", "_max_workers",
        "_warn_unknown_tags", "_executor", "_stats", "_closed",
    )

    def __init__(
        self,
        interval: Duration = C.DEFAULT_COLLECTOR_INTERVAL_S,
        delay: Duration = C.DEFAULT_COLLECTOR_DELAY_S,
        watermark: Union[float, datetime, None] = None,
        data: Optional[Mapping[str, TimeSeries[Any]]] = None,
        *,
        max_workers: int = C.DEFAULT_COLLECTOR_WORKERS,
        warn_unknown_tags: bool = False,
    ) -> None:
        """
        Args:
            interval: Window length (seconds or timedelta), non-negative
            delay: Grace period (seconds or timedelta), non-negative
            watermark: Start of the first window; defaults to the current
                time floored to the interval grid
            data: Existing tag series to continue from (series are shared, not copied)
            max_workers: Thread pool size for apply()
            warn_unknown_tags: Log a warning when push() creates a series

        Raises:
            InvalidArgumentError: negative interval or delay
        """
        self._interval = as_seconds(interval)
        self._delay = as_seconds(delay)
        if self._interval < 0:
            raise InvalidArgumentError.negative_parameter("interval", self._interval)
        if self._delay < 0:
            raise InvalidArgumentError.negative_parameter("delay", self._delay)

        if watermark is None:
            watermark = self._floor(datetime_to_timestamp(datetime.now(timezone.utc)))
        self._watermark = as_timestamp(watermark)

        self._data: dict[str, TimeSeries[Any]] = dict(data) if data is not None else {}
        self._max_workers = max_workers
        self._warn_unknown_tags = warn_unknown_tags
        self._executor: Optional[ThreadPoolExecutor] = None
        self._stats = CollectorStats()
        self._closed = False

    @classmethod
    def from_config(
        cls,
        config: Union[CollectorConfig, TimeRecordsConfig],
        watermark: Union[float, datetime, None] = None,
        data: Optional[Mapping[str, TimeSeries[Any]]] = None,
    ) -> TimeSeriesCollector:
        if isinstance(config, TimeRecordsConfig):
            config = config.collector
        return cls(
            interval=config.interval,
            delay=config.delay,
            watermark=watermark,
            data=data,
            max_workers=config.max_workers,
            warn_unknown_tags=config.warn_unknown_tags,
        )

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------
    @property
    def interval(self) -> float:
        return self._interval

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def watermark(self) -> float:
        """Start of the next pending window."""
        return self._watermark

    @property
    def data(self) -> dict[str, TimeSeries[Any]]:
        """Live tag series (mutated by the collector)."""
        return self._data

    @property
    def tags(self) -> list[str]:
        return list(self._data)

    @property
    def stats(self) -> CollectorStats:
        return self._stats

    @property
    def closed(self) -> bool:
        return self._closed

    def _floor(self, t: float) -> float:
        if self._interval == 0:
            return t
        return math.floor(t / self._interval) * self._interval

    def window_end(self, t: Union[float, datetime]) -> float:
        """End of the window that time t would close (start of the next one)."""
        raw = as_timestamp(t) - self._delay - self._interval
        return max(self._watermark, self._floor(raw))

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------
    def take(self, t: Union[float, datetime]) -> Optional[CollectorWindow]:
        """
        Advance time to t without ingesting anything.

        Returns:
            The released window, or None if t does not close one. A
            window can span several intervals when many have elapsed
            between samples.
        """
        t = as_timestamp(t)
        if not t > self._watermark + self._delay + self._interval:
            return None

        t0 = self._watermark
        t1 = self.window_end(t)
        if t1 <= t0:
            # not yet a full grid step past the watermark
            return None

        window = TimeInterval(t0, t1)
        self._watermark = t1
        snapshot = get_outer_all(self._data, window)
        for series in self._data.values():
            series.keep_latest(t1)

        self._stats.windows_emitted += 1
        logger.debug(
            "Collector window released",
            window_start=t0,
            window_end=t1,
            tags=len(snapshot),
        )
        return CollectorWindow(snapshot, window)

    def push(
        self,
        tag: str,
        record: Union[TimeRecord[Any], tuple[Any, Any]],
        warn_mismatch: Optional[bool] = None,
    ) -> None:
        """
        Insert a record into its tag series, creating the series if needed.

        Args:
            tag: Series key
            record: TimeRecord or (timestamp, value) pair
            warn_mismatch: Log unknown tags (defaults to warn_unknown_tags)
        """
        if not isinstance(record, TimeRecord):
            record = TimeRecord(as_timestamp(record[0]), record[1])

        series = self._data.get(tag)
        if series is None:
            if self._warn_unknown_tags if warn_mismatch is None else warn_mismatch:
                logger.warning("Tag does not exist in registry, creating new series", tag=tag)
            series = self._data[tag] = TimeSeries()
            self._stats.tags_created += 1

        if series.push(record) is None:
            # NaN timestamp, dropped by the series
            return
        self._stats.records_ingested += 1
        if record.timestamp < self._watermark:
            self._stats.late_records += 1

    def ingest(self, tag: str, record: Union[TimeRecord[Any], tuple[Any, Any]]) -> Optional[CollectorWindow]:
        """take() at the record's time, then push() it regardless of the outcome."""
        if not isinstance(record, TimeRecord):
            record = TimeRecord(as_timestamp(record[0]), record[1])
        window = self.take(record.timestamp)
        self.push(tag, record)
        return window

    def _resolve(self, item: Union[TagRecord, float, datetime]) -> Optional[CollectorWindow]:
        if isinstance(item, tuple):
            tag, record = item
            return self.ingest(tag, record)
        return self.take(item)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------
    def _get_executor(self) -> ThreadPoolExecutor:
        if self._closed:
            raise CollectorError.closed()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="timerecords-collector",
            )
        return self._executor

    def apply(
        self,
        callback: WindowCallback,
        item: Union[TagRecord, float, datetime],
    ) -> Optional[Future[Any]]:
        """
        Ingest (tag, record) or take a timestamp, dispatching any released window.

        callback(snapshot, interval) runs on the collector's thread pool.

        Returns:
            A Future for the callback, or None if no window was released

        Raises:
            CollectorError: the collector has been closed
        """
        if self._closed:
            raise CollectorError.closed()
        window = self._resolve(item)
        if window is None:
            return None
        self._stats.callbacks_dispatched += 1
        future = self._get_executor().submit(callback, window.snapshot, window.interval)
        future.add_done_callback(_report_failure)
        return future

    def apply_async(
        self,
        callback: Callable[[dict[str, TimeSeries[Any]], TimeInterval], Any],
        item: Union[TagRecord, float, datetime],
    ) -> Optional[Awaitable[Any]]:
        """
        asyncio flavour of apply(); must be called from a running event loop.

        Coroutine functions are scheduled as tasks on the loop, plain
        callables run on the collector's thread pool.
        """
        if self._closed:
            raise CollectorError.closed()
        loop = asyncio.get_running_loop()
        window = self._resolve(item)
        if window is None:
            return None
        self._stats.callbacks_dispatched += 1
        if inspect.iscoroutinefunction(callback):
            handle = loop.create_task(callback(window.snapshot, window.interval))
        else:
            handle = loop.run_in_executor(self._get_executor(), callback, window.snapshot, window.interval)
        handle.add_done_callback(_report_failure)
        return handle

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    def close(self, wait: bool = True) -> None:
        """Shut the callback pool down; ingestion without dispatch keeps working."""
        if self._closed:
            return
        self._closed = True
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def __enter__(self) -> TimeSeriesCollector:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"TimeSeriesCollector(interval={self._interval}, delay={self._delay}, "
            f"watermark={self._watermark}, tags={len(self._data)})"
        )
