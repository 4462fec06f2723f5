"""
Integration and Aggregation

Provides:
- Segment integrals: Riemann (order 0) and trapezoidal (order 1)
- integrate / average over a TimeInterval or consecutive time pairs
- aggregate: any interval reducer over consecutive time pairs
- accumulate: running integral timestamped at interval ends
- maximum / minimum over intervals (always hold-last semantics)
- regularize: resample onto a fixed time grid

Integration over an interval [lo, hi]:
    1. Zero duration gives zero (average falls back to interpolation).
    2. An interval entirely outside the series holds the nearest edge
       value (edge_value * duration) and may log a warning, see
       ExtrapolationPolicy.
    3. Otherwise the open ends are interpolated into synthetic records
       and the two partial segments are added to the interior segments.
       When both ends fall inside one segment there is no interior term.

Vector forms take N ascending times and return N - 1 results, reusing a
single IndexHint so segments are visited once, left to right.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Union

import numpy as np

from timerecords.core import constants as C
from timerecords.core.config import IntegrationConfig
from timerecords.core.errors import InvalidArgumentError
from timerecords.core.types import Order
from timerecords.analysis.interpolation import OrderLike, interpolate, interpolate_records
from timerecords.series.bounds import clamped_bounds, initial_hint
from timerecords.series.cursor import HintLike, IndexHint
from timerecords.series.record import TimeInterval, TimeRecord, as_timestamp
from timerecords.series.timeseries import TimeSeries, view_inner

logger = logging.getLogger(__name__)

_BEFORE_MESSAGE = (
    "Time interval occurs completely before the series history, "
    "results are likely inaccurate"
)
_AFTER_MESSAGE = (
    "Time interval occurs completely after the series history, "
    "results are likely inaccurate"
)


# =============================================================================
# EXTRAPOLATION POLICY
# =============================================================================
@dataclass(frozen=True, slots=True)
class ExtrapolationPolicy:
    """
    When to warn about integrals outside the recorded history.

    Holding the last value is exact for order 0 after the series, so by
    default only order 1 warns there.
    """

    warn_before: bool = True
    warn_after_hold: bool = False
    warn_after_linear: bool = True

    @classmethod
    def from_config(cls, config: IntegrationConfig) -> ExtrapolationPolicy:
        return cls(
            warn_before=config.warn_before,
            warn_after_hold=config.warn_after_hold,
            warn_after_linear=config.warn_after_linear,
        )

    def warns_after(self, order: Order) -> bool:
        if order is Order.HOLD:
            return self.warn_after_hold
        return self.warn_after_linear


DEFAULT_POLICY = ExtrapolationPolicy()


# =============================================================================
# SEGMENT INTEGRALS
# =============================================================================
def riemann(r1: TimeRecord[Any], r2: TimeRecord[Any]) -> Any:
    return r1.value * (r2.timestamp - r1.timestamp)


def trapezoid(r1: TimeRecord[Any], r2: TimeRecord[Any]) -> Any:
    return 0.5 * (r1.value + r2.value) * (r2.timestamp - r1.timestamp)


def integrate_records(
    r1: TimeRecord[Any],
    r2: TimeRecord[Any],
    order: OrderLike = C.DEFAULT_ORDER,
) -> Any:
    """Integral of the single segment r1 -> r2."""
    if Order.parse(order) is Order.HOLD:
        return riemann(r1, r2)
    return trapezoid(r1, r2)


def _integrate_segments(series: Any, start: int, stop: int, order: Order) -> Any:
    """Sum of the segment integrals i -> i + 1 for i in [start, stop)."""
    return sum(
        (integrate_records(series[i], series[i + 1], order) for i in range(start, stop)),
        0.0,
    )


# =============================================================================
# INTEGRATE / AVERAGE
# =============================================================================
def _is_times(interval: Any) -> bool:
    return interval is not None and not isinstance(interval, TimeInterval)


def _integrate_interval(
    series: Any,
    dt: TimeInterval,
    order: Order,
    hint: HintLike,
    policy: ExtrapolationPolicy,
) -> Any:
    n = len(series)
    if n == 0:
        return 0.0

    duration = dt.duration
    if duration == 0:
        return series[0].value * 0.0

    first = series[0]
    last = series[n - 1]
    if dt.hi < first.timestamp:
        if policy.warn_before:
            logger.warning(_BEFORE_MESSAGE, extra={"interval_lo": dt.lo, "interval_hi": dt.hi})
        return first.value * duration
    if last.timestamp < dt.lo:
        if policy.warns_after(order):
            logger.warning(_AFTER_MESSAGE, extra={"interval_lo": dt.lo, "interval_hi": dt.hi})
        return last.value * duration

    lo1, hi1 = clamped_bounds(series, dt.lo, hint)
    lo2, hi2 = clamped_bounds(series, dt.hi, hi1)

    start = TimeRecord(dt.lo, interpolate_records(series[lo1], series[hi1], dt.lo, order))
    stop = TimeRecord(dt.hi, interpolate_records(series[lo2], series[hi2], dt.hi, order))

    if hi1 > lo2:
        # both ends inside the same segment
        return integrate_records(start, stop, order)

    if isinstance(hint, IndexHint):
        hint.index = hi2

    return (
        integrate_records(start, series[hi1], order)
        + _integrate_segments(series, hi1, lo2, order)
        + integrate_records(series[lo2], stop, order)
    )


def integrate(
    series: Any,
    interval: Any = None,
    order: OrderLike = C.DEFAULT_ORDER,
    hint: HintLike = None,
    policy: ExtrapolationPolicy = DEFAULT_POLICY,
) -> Any:
    """
    Integral of a numeric series.

    Args:
        series: TimeSeries or view
        interval: None (the whole series), a TimeInterval, or an
            iterable of ascending times (one result per adjacent pair)
        order: 0 (Riemann) or 1 (trapezoidal)
        hint: search hint for a single interval
        policy: extrapolation warning policy

    Returns:
        A value for None or a TimeInterval, a list for times

    Raises:
        InvalidArgumentError: unsupported order, unsorted times
    """
    order = Order.parse(order)
    if interval is None:
        if len(series) < 2:
            return 0.0
        return _integrate_segments(series, 0, len(series) - 1, order)
    if _is_times(interval):
        return aggregate(integrate, series, interval, order, policy=policy)
    return _integrate_interval(series, interval, order, hint, policy)


def average(
    series: Any,
    interval: Any = None,
    order: OrderLike = C.DEFAULT_ORDER,
    hint: HintLike = None,
    policy: ExtrapolationPolicy = DEFAULT_POLICY,
) -> Any:
    """
    Time-weighted average: integral over the interval divided by its duration.

    A zero-duration interval returns the interpolated value at that time.
    An iterable of times gives one average per adjacent pair; no interval
    averages over the whole series.
    """
    order = Order.parse(order)
    if interval is None:
        interval = TimeInterval.of(series)
    if _is_times(interval):
        return aggregate(average, series, interval, order, policy=policy)
    if interval.duration == 0:
        return interpolate(series, interval.lo, order, hint)
    return _integrate_interval(series, interval, order, hint, policy) / interval.duration


def _checked_times(times: Iterable[Any]) -> list[float]:
    stamps = [as_timestamp(t) for t in times]
    if np.any(np.diff(np.asarray(stamps, dtype=np.float64)) < 0):
        raise InvalidArgumentError.unsorted_times("times")
    return stamps


def aggregate(
    fn: Callable[..., Any],
    series: Any,
    times: Iterable[Any],
    order: OrderLike = C.DEFAULT_ORDER,
    **kwargs: Any,
) -> list[Any]:
    """
    Apply an interval reducer to every adjacent pair of ascending times.

    fn is called as fn(series, TimeInterval(a, b), order, hint=hint, **kwargs)
    with one hint shared by all calls.

    Raises:
        InvalidArgumentError: if times are not ascending
    """
    stamps = _checked_times(times)
    hint = IndexHint()
    if len(series) > 0 and stamps:
        initial_hint(series, stamps[0], hint)
    return [
        fn(series, TimeInterval(a, b), order, hint=hint, **kwargs)
        for a, b in itertools.pairwise(stamps)
    ]


def accumulate(
    series: Any,
    order: OrderLike = C.DEFAULT_ORDER,
    times: Optional[Iterable[Any]] = None,
    policy: ExtrapolationPolicy = DEFAULT_POLICY,
) -> TimeSeries[Any]:
    """
    Running integral as a series.

    Each output record is timestamped at the end of its interval, so no
    output precedes the inputs that produced it. Without times the
    intervals are the segments of the series itself; fewer than two
    times (or records) give an empty series.
    """
    order = Order.parse(order)
    if times is None:
        stamps = [r.timestamp for r in series]
        if len(stamps) < 2:
            return TimeSeries()
        pieces = [integrate_records(series[i], series[i + 1], order) for i in range(len(stamps) - 1)]
    else:
        stamps = _checked_times(times)
        if len(stamps) < 2:
            return TimeSeries()
        pieces = aggregate(integrate, series, stamps, order, policy=policy)
    return TimeSeries(stamps[1:], list(itertools.accumulate(pieces)), issorted=True)


# =============================================================================
# EXTREMA
# =============================================================================
def _extremum(
    series: Any,
    interval: Any,
    hint: HintLike,
    pick: Callable[[Any, Any], Any],
    default: float,
) -> Any:
    if len(series) == 0:
        return default
    dt = interval if isinstance(interval, TimeInterval) else TimeInterval(*interval)
    result = interpolate(series, dt.lo, Order.HOLD, hint)
    for record in view_inner(series, dt):
        result = pick(result, record.value)
    return result


def maximum(series: Any, interval: Any, hint: HintLike = None) -> Any:
    """
    Largest value seen over an interval, with hold-last semantics.

    Combines the value held at the start of the interval with every
    record inside it. An iterable of times gives one result per pair.
    An empty series gives -inf.
    """
    if _is_times(interval):
        return _aggregate_extremum(maximum, series, interval)
    return _extremum(series, interval, hint, max, -np.inf)


def minimum(series: Any, interval: Any, hint: HintLike = None) -> Any:
    """Smallest value seen over an interval; see maximum."""
    if _is_times(interval):
        return _aggregate_extremum(minimum, series, interval)
    return _extremum(series, interval, hint, min, np.inf)


def _aggregate_extremum(fn: Callable[..., Any], series: Any, times: Iterable[Any]) -> list[Any]:
    return aggregate(lambda s, dt, _order, hint: fn(s, dt, hint), series, times, Order.HOLD)


# =============================================================================
# REGULARIZE
# =============================================================================
_REGULARIZE_METHODS = ("interpolate", "average")


def regularize(
    series: Any,
    times: Union[Iterable[Any], np.ndarray],
    method: str = "interpolate",
    order: OrderLike = C.DEFAULT_ORDER,
    policy: ExtrapolationPolicy = DEFAULT_POLICY,
) -> TimeSeries[Any]:
    """
    Resample a series onto an evenly spaced time grid.

    method="interpolate" samples the series at each grid time.
    method="average" averages over the step ending at each grid time
    (the first step is assumed to have the same width as the second).

    Raises:
        InvalidArgumentError: unknown method or unsorted grid
    """
    if method not in _REGULARIZE_METHODS:
        raise InvalidArgumentError.unsupported_method(method, list(_REGULARIZE_METHODS))
    stamps = _checked_times(times)
    if not stamps:
        return TimeSeries()
    if method == "interpolate" or len(stamps) < 2:
        return interpolate(series, stamps, order)

    step = stamps[1] - stamps[0]
    edges = [stamps[0] - step] + stamps
    return TimeSeries(stamps, average(series, edges, order, policy=policy), issorted=True)
