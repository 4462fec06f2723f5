#!/usr/bin/env python3
"""
TimeRecords Demo

Feeds two irregularly sampled synthetic signals through a collector and
averages every released window on the event loop.

Usage:
    python -m timerecords

    # Or with custom config
    TIMERECORDS_COLLECTOR_INTERVAL=5 TIMERECORDS_LOG_JSON=false python -m timerecords
"""

from __future__ import annotations

import asyncio
import functools
import sys
from typing import Any

import numpy as np

from timerecords.analysis.aggregation import ExtrapolationPolicy, average, integrate
from timerecords.analysis.interpolation import interpolate, merge, strictinterp
from timerecords.core.config import TimeRecordsConfig
from timerecords.core.errors import ConfigurationError
from timerecords.core.types import Order
from timerecords.observability.logging import configure_logging
from timerecords.series.record import TimeInterval, TimeRecord
from timerecords.series.timeseries import TimeSeries
from timerecords.stream.collector import TimeSeriesCollector


def synthetic_stream(seed: int = 7, duration: float = 60.0) -> list[tuple[str, TimeRecord[float]]]:
    """Two tags with different, jittered sampling rates, in arrival order."""
    rng = np.random.default_rng(seed)
    tagged: list[tuple[str, TimeRecord[float]]] = []
    for tag, period in (("pump.flow", 0.7), ("pump.pressure", 1.3)):
        t = np.cumsum(rng.uniform(0.5, 1.5, size=int(duration / period)) * period)
        v = np.sin(t / 10.0) + rng.normal(0.0, 0.05, size=t.size)
        tagged.extend((tag, TimeRecord(float(ti), float(vi))) for ti, vi in zip(t, v))
    tagged.sort(key=lambda item: item[1].timestamp)
    return tagged


async def window_summary(
    snapshot: dict[str, TimeSeries[float]],
    interval: TimeInterval,
    order: Order = Order.LINEAR,
) -> dict[str, Any]:
    """Per-tag time-weighted average over a released window."""
    policy = ExtrapolationPolicy(warn_before=False, warn_after_linear=False)
    return {
        "window": (round(interval.lo, 3), round(interval.hi, 3)),
        "averages": {
            tag: round(float(average(series, interval, order=order, policy=policy)), 4)
            for tag, series in snapshot.items()
            if len(series) > 0
        },
    }


async def demo() -> None:
    print("\n" + "=" * 60)
    print("TimeRecords - Streaming Demo")
    print("=" * 60 + "\n")

    try:
        config = TimeRecordsConfig.load()
    except ConfigurationError as e:
        print(e.message)
        sys.exit(1)

    configure_logging(config.observability)
    print("✓ Configuration loaded and validated")
    print(f"  Collector: interval={config.collector.interval}s delay={config.collector.delay}s")
    order = config.interpolation.order
    print(f"  Default order: {order.name}")

    # 1. Series queries
    series = TimeSeries([1, 2, 3, 4, 5], [1.0, 2.0, 3.0, 4.0, 5.0])
    print("\n--- Series Queries ---\n")
    print(f"1. interpolate order 0 at [1.5, 2.5, 3.5]: {interpolate(series, [1.5, 2.5, 3.5], 0).values}")
    print(f"   interpolate order 1 at [1.5, 2.5, 3.5]: {interpolate(series, [1.5, 2.5, 3.5], 1).values}")
    print(f"   strictinterp at 6.0: {strictinterp(series, 6.0, order)}")
    print(f"2. integrate (1.1, 1.3) order {int(order)}: {integrate(series, TimeInterval(1.1, 1.3), order):.4f}")

    other = TimeSeries([1.5, 2.6], [10.0, 20.0])
    merged = merge(series, other, order=order)
    print(f"3. merged timestamps: {merged.timestamps.tolist()}")

    # 2. Streaming
    print("\n--- Streaming Collector ---\n")
    stream = synthetic_stream()
    first = stream[0][1].timestamp
    pending = []
    summarize = functools.partial(window_summary, order=order)
    collector = TimeSeriesCollector.from_config(config, watermark=np.floor(first))
    try:
        for tag, record in stream:
            handle = collector.apply_async(summarize, (tag, record))
            if handle is not None:
                pending.append(handle)

        summaries = await asyncio.gather(*pending)
        for summary in summaries[:5]:
            print(f"   window {summary['window']}: {summary['averages']}")
        if len(summaries) > 5:
            print(f"   ... {len(summaries) - 5} more windows")

        stats = collector.stats
        print(f"\n4. Collector stats:")
        print(f"   Records ingested: {stats.records_ingested}")
        print(f"   Windows emitted: {stats.windows_emitted}")
        print(f"   Tags created: {stats.tags_created}")
        print(f"   Late records: {stats.late_records}")
    finally:
        # pool is idle once gather returns
        collector.close(wait=False)

    print("\n✓ Demo complete")
    print("=" * 60 + "\n")


async def main() -> None:
    """Main entry point."""
    try:
        await demo()
    except KeyboardInterrupt:
        print("\nInterrupted")


def run() -> None:
    """Synchronous entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
