"""
TimeRecords: Irregular Time Series Toolkit

Primitives for timestamp-tagged observations sampled at different,
irregular rates:
- TimeSeries: sorted record container with zero-copy views
- Boundary search with caller-owned hints for sequential queries
- Interpolation: hold-last and saturated linear, strict variant
- Integration: Riemann and trapezoidal, averages, running integrals
- Stream collector: watermark-bounded multi-tag windows
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from timerecords.core.types import (
    Result,
    Ok,
    Err,
    Order,
    MISSING,
    is_missing,
)
from timerecords.core.errors import (
    ErrorCode,
    TimeRecordsError,
    InvalidArgumentError,
    OutOfOrderError,
    CollectorError,
    ConfigurationError,
)
from timerecords.core.config import TimeRecordsConfig

# Series exports
from timerecords.series import (
    TimeRecord,
    TimeInterval,
    merge_records,
    set_origin,
    get_origin,
    reset_origin,
    datetime_to_timestamp,
    timestamp_to_datetime,
    timestamp_to_unix,
    IndexHint,
    find_bounds,
    clamped_bounds,
    extended_bounds,
    find_inner,
    find_outer,
    initial_hint,
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

# Analysis exports
from timerecords.analysis import (
    interpolate,
    strictinterp,
    interpolate_records,
    merge,
    ExtrapolationPolicy,
    integrate,
    average,
    aggregate,
    accumulate,
    maximum,
    minimum,
    regularize,
)

# Stream exports
from timerecords.stream import (
    TimeSeriesCollector,
    CollectorWindow,
    CollectorStats,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Result",
    "Ok",
    "Err",
    "Order",
    "MISSING",
    "is_missing",
    "ErrorCode",
    "TimeRecordsError",
    "InvalidArgumentError",
    "OutOfOrderError",
    "CollectorError",
    "ConfigurationError",
    "TimeRecordsConfig",
    # Series
    "TimeRecord",
    "TimeInterval",
    "merge_records",
    "set_origin",
    "get_origin",
    "reset_origin",
    "datetime_to_timestamp",
    "timestamp_to_datetime",
    "timestamp_to_unix",
    "IndexHint",
    "find_bounds",
    "clamped_bounds",
    "extended_bounds",
    "find_inner",
    "find_outer",
    "initial_hint",
    "TimeSeries",
    "TimeSeriesView",
    "get_inner",
    "get_outer",
    "view_inner",
    "view_outer",
    "get_inner_all",
    "get_outer_all",
    "timestamp_union",
    # Analysis
    "interpolate",
    "strictinterp",
    "interpolate_records",
    "merge",
    "ExtrapolationPolicy",
    "integrate",
    "average",
    "aggregate",
    "accumulate",
    "maximum",
    "minimum",
    "regularize",
    # Stream
    "TimeSeriesCollector",
    "CollectorWindow",
    "CollectorStats",
]
