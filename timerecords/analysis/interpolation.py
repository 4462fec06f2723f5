"""
Interpolation and Extrapolation

Provides:
- Two-point algorithms: hold-last-value (order 0), saturated linear (order 1)
- interpolate: value at any time, holding the edge values outside the series
- strictinterp: same, but MISSING outside the series
- merge: align several series on common timestamps

Two-point contract, for a bracket (r1, r2) with t1 <= t2:
    order 0: value(r1) if t < t2 else value(r2)
    order 1: w1 * value(r1) + w2 * value(r2) with
             w1 = (t2 - t) / (t2 - t1), w2 = (t - t1) / (t2 - t1),
             both clamped to [0, 1]; (0.5, 0.5) when t1 == t2

Clamping keeps order 1 inside the bracket's value range even for a t
slightly outside [t1, t2]. Order 1 needs values supporting addition and
scalar multiplication; anything else only supports order 0.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Union

import numpy as np

from timerecords.core import constants as C
from timerecords.core.errors import InvalidArgumentError
from timerecords.core.types import MISSING, Order
from timerecords.series.bounds import clamped_bounds, find_bounds, initial_hint
from timerecords.series.cursor import HintLike, IndexHint
from timerecords.series.record import TimeRecord, as_timestamp
from timerecords.series.timeseries import TimeSeries, timestamp_union

OrderLike = Union[Order, int]


# =============================================================================
# TWO-POINT ALGORITHMS
# =============================================================================
def hold_last(r1: TimeRecord[Any], r2: TimeRecord[Any], t: float) -> Any:
    """Step function: the earlier value until t reaches t2."""
    return r1.value if t < r2.timestamp else r2.value


def linear_weights(t1: float, t2: float, t: float) -> tuple[float, float]:
    """Clamped weights of the two bracket records."""
    dt = t2 - t1
    if dt == 0:
        return C.COINCIDENT_WEIGHTS
    w1 = min(max((t2 - t) / dt, 0.0), 1.0)
    w2 = min(max((t - t1) / dt, 0.0), 1.0)
    return (w1, w2)


def linear(r1: TimeRecord[Any], r2: TimeRecord[Any], t: float) -> Any:
    w1, w2 = linear_weights(r1.timestamp, r2.timestamp, t)
    return w1 * r1.value + w2 * r2.value


def interpolate_records(
    r1: TimeRecord[Any],
    r2: TimeRecord[Any],
    t: Any,
    order: OrderLike = C.DEFAULT_ORDER,
) -> Any:
    """
    Interpolate between two records.

    Raises:
        InvalidArgumentError: for an order other than 0 or 1
    """
    order = Order.parse(order)
    t = as_timestamp(t)
    if order is Order.HOLD:
        return hold_last(r1, r2, t)
    return linear(r1, r2, t)


# =============================================================================
# SERIES INTERPOLATION
# =============================================================================
def _is_scalar_time(t: Any) -> bool:
    return isinstance(t, (int, float, np.number, datetime))


def _value_at(series: Any, t: float, order: Order, hint: HintLike) -> Any:
    lo, hi = clamped_bounds(series, t, hint)
    return interpolate_records(series[lo], series[hi], t, order)


def _strict_value_at(series: Any, t: float, order: Order, hint: HintLike) -> Any:
    lo, hi = find_bounds(series, t, hint)
    if lo is None or hi is None:
        return MISSING
    return interpolate_records(series[lo], series[hi], t, order)


def _interpolate_many(
    series: Any,
    times: Iterable[Any],
    order: Order,
    point: Callable[[Any, float, Order, HintLike], Any],
) -> TimeSeries[Any]:
    stamps = sorted(as_timestamp(t) for t in times)
    if not stamps:
        return TimeSeries()
    hint = initial_hint(series, stamps[0])
    values = [point(series, t, order, hint) for t in stamps]
    return TimeSeries(stamps, values, issorted=True)


def interpolate(
    series: Any,
    t: Any,
    order: OrderLike = C.DEFAULT_ORDER,
    hint: HintLike = None,
) -> Any:
    """
    Value of the series at time t, holding the edge values outside it.

    Args:
        series: non-empty TimeSeries or view
        t: a single time (number or datetime) or an iterable of times
        order: 0 (hold-last) or 1 (linear)
        hint: search hint for a single time

    Returns:
        The interpolated value for a single time. For several times, a
        TimeSeries keyed at the sorted query times (one hint is reused
        across the whole batch).

    Raises:
        InvalidArgumentError: unsupported order or empty series
    """
    order = Order.parse(order)
    if len(series) == 0:
        raise InvalidArgumentError.empty_series("interpolate")
    if _is_scalar_time(t):
        return _value_at(series, as_timestamp(t), order, hint)
    return _interpolate_many(series, t, order, _value_at)


def strictinterp(
    series: Any,
    t: Any,
    order: OrderLike = C.DEFAULT_ORDER,
    hint: HintLike = None,
) -> Any:
    """
    Like interpolate, but MISSING for times outside the series range.

    Times equal to the first or last timestamp are inside the range.
    """
    order = Order.parse(order)
    if len(series) == 0:
        raise InvalidArgumentError.empty_series("interpolate")
    if _is_scalar_time(t):
        return _strict_value_at(series, as_timestamp(t), order, hint)
    return _interpolate_many(series, t, order, _strict_value_at)


# =============================================================================
# MERGE
# =============================================================================
def _as_tuple(*values: Any) -> tuple[Any, ...]:
    return values


def merge(
    *series: Any,
    times: Optional[Iterable[Any]] = None,
    combine: Callable[..., Any] = _as_tuple,
    order: OrderLike = C.DEFAULT_ORDER,
) -> TimeSeries[Any]:
    """
    Interpolate several series at common times and combine each row.

    By default the times are the union of all timestamps and each row
    becomes a tuple of values:

        merge(a, b)                                  # values (va, vb)
        merge(a, b, combine=lambda x, y: x - y)      # values va - vb

    Each input series gets its own hint, so the pass is linear in the
    total number of records.
    """
    order = Order.parse(order)
    if not series:
        return TimeSeries()
    if times is None:
        stamps = [float(t) for t in timestamp_union(*series)]
    else:
        stamps = sorted(as_timestamp(t) for t in times)
    if not stamps:
        return TimeSeries()

    for s in series:
        if len(s) == 0:
            raise InvalidArgumentError.empty_series("merge")

    hints: list[IndexHint] = [initial_hint(s, stamps[0]) for s in series]
    values = [
        combine(*(_value_at(s, t, order, h) for s, h in zip(series, hints)))
        for t in stamps
    ]
    return TimeSeries(stamps, values, issorted=True)
