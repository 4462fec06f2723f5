"""
Stream Module: Windowed Collection of Tagged Records

Provides:
- TimeSeriesCollector: per-tag buffering with watermark and grace delay
- CollectorWindow: released (snapshot, interval) pair
- CollectorStats: ingestion counters
"""

from timerecords.stream.collector import (
    CollectorStats,
    CollectorWindow,
    TimeSeriesCollector,
)

__all__ = [
    "CollectorStats",
    "CollectorWindow",
    "TimeSeriesCollector",
]
