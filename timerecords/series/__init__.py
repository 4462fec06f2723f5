"""
Series Module: Records, Series and Boundary Search

Provides:
- Record: TimeRecord, TimeInterval and the origin epoch
- Cursor: caller-owned IndexHint for sequential queries
- Bounds: bracket search, inner/outer interval ranges
- TimeSeries: sorted container and zero-copy views
"""

from timerecords.series.record import (
    TimeRecord,
    TimeInterval,
    merge_records,
    set_origin,
    get_origin,
    reset_origin,
    datetime_to_timestamp,
    timestamp_to_datetime,
    timestamp_to_unix,
)
from timerecords.series.cursor import IndexHint
from timerecords.series.bounds import (
    find_bounds,
    clamped_bounds,
    extended_bounds,
    find_inner,
    find_outer,
    initial_hint,
)
from timerecords.series.timeseries import (
    TimeSeries,
    TimeSeriesView,
    get_inner,
    get_outer,
    view_inner,
    view_outer,
    get_inner_all,
    get_outer_all,
    timestamp_union,
)

__all__ = [
    # Record
    "TimeRecord",
    "TimeInterval",
    "merge_records",
    "set_origin",
    "get_origin",
    "reset_origin",
    "datetime_to_timestamp",
    "timestamp_to_datetime",
    "timestamp_to_unix",
    # Cursor
    "IndexHint",
    # Bounds
    "find_bounds",
    "clamped_bounds",
    "extended_bounds",
    "find_inner",
    "find_outer",
    "initial_hint",
    # TimeSeries
    "TimeSeries",
    "TimeSeriesView",
    "get_inner",
    "get_outer",
    "view_inner",
    "view_outer",
    "get_inner_all",
    "get_outer_all",
    "timestamp_union",
]
