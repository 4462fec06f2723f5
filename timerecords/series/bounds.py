"""
Boundary Search

Provides:
- find_bounds: indices of the records bracketing a query time
- clamped_bounds / extended_bounds: out-of-range handling variants
- find_inner / find_outer: index ranges inside / covering an interval
- initial_hint: seed an IndexHint for a batch of sorted queries

Bracket convention (0-based indices):
    (i, i)        t equals the timestamp of record i
    (i, i + 1)    ts[i] < t < ts[i + 1]
    (None, 0)     t precedes the first record
    (n - 1, None) t follows the last record

Search modes:
    hint=None       bisection, O(log n)
    hint=int        local walk from that index, not stored
    hint=IndexHint  local walk, hint.index updated with the result

The local walk is O(1) amortized when successive queries move forward
roughly in time order, and O(k) for a jump of k records.
"""

from __future__ import annotations

import bisect
from operator import attrgetter
from typing import Any, Optional, Sequence

from timerecords.core.errors import InvalidArgumentError
from timerecords.series.cursor import HintLike, IndexHint, resolve_hint
from timerecords.series.record import TimeInterval, as_timestamp

Bracket = tuple[Optional[int], Optional[int]]

_timestamp = attrgetter("timestamp")


# =============================================================================
# SINGLE-POINT SEARCH
# =============================================================================
def _bisect(series: Sequence[Any], t: float) -> Bracket:
    n = len(series)
    i = bisect.bisect_left(series, t, key=_timestamp)
    if i < n and series[i].timestamp == t:
        return (i, i)
    if i == 0:
        return (None, 0)
    if i == n:
        return (n - 1, None)
    return (i - 1, i)


def _walk(series: Sequence[Any], t: float, start: int) -> Bracket:
    n = len(series)
    h = min(max(start, 0), n - 1)

    # both directions settle on the first record with timestamp >= t
    if series[h].timestamp < t:
        while h + 1 < n and series[h + 1].timestamp < t:
            h += 1
        if h + 1 == n:
            return (h, None)
        if series[h + 1].timestamp == t:
            return (h + 1, h + 1)
        return (h, h + 1)

    while h - 1 >= 0 and series[h - 1].timestamp >= t:
        h -= 1
    if series[h].timestamp == t:
        return (h, h)
    if h == 0:
        return (None, 0)
    return (h - 1, h)


def find_bounds(series: Sequence[Any], t: Any, hint: HintLike = None) -> Bracket:
    """
    Locate the records immediately before and after t.

    Args:
        series: non-empty series (or view) sorted by timestamp
        t: query time (float or datetime)
        hint: search mode, see module docstring

    Returns:
        (lo, hi) bracket; None marks the out-of-range side

    Raises:
        InvalidArgumentError: if the series is empty
    """
    if len(series) == 0:
        raise InvalidArgumentError.empty_series("search bounds")
    t = as_timestamp(t)

    start = resolve_hint(hint)
    if start is None:
        bracket = _bisect(series, t)
    else:
        bracket = _walk(series, t, start)

    if isinstance(hint, IndexHint):
        lo, hi = bracket
        hint.update(hi if hi is not None else lo)
    return bracket


def clamped_bounds(series: Sequence[Any], t: Any, hint: HintLike = None) -> tuple[int, int]:
    """
    find_bounds with out-of-range sides clamped to the nearest edge.

    Before the series this gives (0, 0), after it (n - 1, n - 1).
    """
    lo, hi = find_bounds(series, t, hint)
    if lo is None:
        return (hi, hi)
    if hi is None:
        return (lo, lo)
    return (lo, hi)


def extended_bounds(series: Sequence[Any], t: Any, hint: HintLike = None) -> tuple[int, int]:
    """
    find_bounds with out-of-range sides pushed one step past the edge.

    Before the series this gives (-1, 0), after it (n - 1, n). Useful
    for range arithmetic where an empty range must come out naturally.
    """
    lo, hi = find_bounds(series, t, hint)
    if lo is None:
        return (hi - 1, hi)
    if hi is None:
        return (lo, lo + 1)
    return (lo, hi)


# =============================================================================
# INTERVAL SEARCH
# =============================================================================
def _as_interval(interval: Any) -> TimeInterval:
    if isinstance(interval, TimeInterval):
        return interval
    t0, t1 = interval
    return TimeInterval(t0, t1)


def _timestamp_equals(series: Sequence[Any], i: int, t: float) -> bool:
    return 0 <= i < len(series) and series[i].timestamp == t


def _last_equal(series: Sequence[Any], i: int, t: float) -> int:
    """Last index of the run of records sharing timestamp t that starts at i."""
    n = len(series)
    while i + 1 < n and series[i + 1].timestamp == t:
        i += 1
    return i


def _store_range(hint: HintLike, indices: range, n: int) -> None:
    if isinstance(hint, IndexHint):
        hint.update(min(max(indices.stop - 1, 0), n - 1))


def find_inner(series: Sequence[Any], interval: Any, hint: HintLike = None) -> range:
    """
    Indices of the records whose timestamps lie inside the closed interval.

    Intervals missing the series (or an empty series) give an empty range.
    A zero-duration interval strictly between two records is empty too.
    """
    n = len(series)
    if n == 0:
        return range(0, 0)
    dt = _as_interval(interval)

    lo_bracket = extended_bounds(series, dt.lo, resolve_hint(hint))
    lb = lo_bracket[0] if _timestamp_equals(series, lo_bracket[0], dt.lo) else lo_bracket[1]

    hi_bracket = extended_bounds(series, dt.hi, lb)
    if _timestamp_equals(series, hi_bracket[1], dt.hi):
        ub = _last_equal(series, hi_bracket[1], dt.hi)
    else:
        ub = hi_bracket[0]

    indices = range(lb, max(ub + 1, lb))
    _store_range(hint, indices, n)
    return indices


def find_outer(series: Sequence[Any], interval: Any, hint: HintLike = None) -> range:
    """
    Smallest index range whose records cover the interval on both sides.

    The bracketing records just outside the interval are included. An
    interval entirely before (after) the series gives the first (last)
    index alone; an empty series gives an empty range. A zero-duration
    interval between two records gives that bracketing pair.
    """
    n = len(series)
    if n == 0:
        return range(0, 0)
    dt = _as_interval(interval)

    lo_bracket = clamped_bounds(series, dt.lo, resolve_hint(hint))
    lb = lo_bracket[1] if _timestamp_equals(series, lo_bracket[1], dt.lo) else lo_bracket[0]

    hi_bracket = clamped_bounds(series, dt.hi, lb)
    if _timestamp_equals(series, hi_bracket[0], dt.hi):
        ub = _last_equal(series, hi_bracket[0], dt.hi)
    else:
        ub = hi_bracket[1]

    indices = range(lb, ub + 1)
    _store_range(hint, indices, n)
    return indices


# =============================================================================
# HINT SEEDING
# =============================================================================
def initial_hint(series: Sequence[Any], t: Any, hint: Optional[IndexHint] = None) -> IndexHint:
    """
    Seed a hint at the clamped lower bracket of t (by bisection).

    Updates hint in place when one is given, otherwise returns a new one.
    An empty series seeds index 0.
    """
    index = clamped_bounds(series, t)[0] if len(series) > 0 else 0
    if hint is None:
        return IndexHint(index)
    hint.index = index
    return hint
