"""
Time Records and Intervals

Provides:
- Origin epoch: process-wide reference point for float timestamps
- TimeRecord: immutable (timestamp, value) pair ordered by timestamp
- TimeInterval: (lo, hi) pair of timestamps, always ascending
- merge_records: combine equal-timestamp records into one

Timestamps are float seconds relative to the origin epoch. The origin
defaults to the Unix epoch; moving it closer to the data keeps float
timestamps numerically precise (a float64 near 1.7e9 only resolves
~0.2 microseconds).
"""

from __future__ import annotations

import math
import operator
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generic, Iterator, TypeVar, Union

import numpy as np

from timerecords.core.errors import InvalidArgumentError
from timerecords.core import constants as C

T = TypeVar("T")

TimeLike = Union[float, int, datetime]


# =============================================================================
# ORIGIN EPOCH
# =============================================================================
_origin: datetime = C.UNIX_EPOCH
_origin_lock = threading.Lock()


def _as_utc(dt: datetime) -> datetime:
    """Naive datetimes are read as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def set_origin(origin: datetime) -> datetime:
    """
    Set the process-wide origin epoch, returning the previous one.

    Existing records keep their float timestamps, so change the origin
    before building series, not while series are alive.
    """
    global _origin
    with _origin_lock:
        previous = _origin
        _origin = _as_utc(origin)
    return previous


def get_origin() -> datetime:
    """Current origin epoch (timezone-aware UTC)."""
    return _origin


def reset_origin() -> None:
    """Restore the Unix epoch as origin."""
    set_origin(C.UNIX_EPOCH)


def datetime_to_timestamp(dt: datetime) -> float:
    """Seconds between the origin epoch and dt."""
    return (_as_utc(dt) - _origin).total_seconds()


def timestamp_to_datetime(t: float) -> datetime:
    """Inverse of datetime_to_timestamp (timezone-aware UTC)."""
    return _origin + timedelta(seconds=float(t))


def timestamp_to_unix(t: float) -> float:
    """Convert an origin-relative timestamp into Unix seconds."""
    return float(t) + (_origin - C.UNIX_EPOCH).total_seconds()


def as_timestamp(t: Any) -> float:
    """Coerce a number, datetime or record into a float timestamp."""
    if isinstance(t, TimeRecord):
        return t.timestamp
    if isinstance(t, datetime):
        return datetime_to_timestamp(t)
    return float(t)


def as_seconds(dt: Union[float, int, timedelta]) -> float:
    """Coerce a duration into float seconds."""
    if isinstance(dt, timedelta):
        return dt.total_seconds()
    return float(dt)


# =============================================================================
# TIME RECORD
# =============================================================================
def _values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return bool(np.array_equal(a, b, equal_nan=False))
    return bool(a == b)


@dataclass(frozen=True, slots=True, eq=False)
class TimeRecord(Generic[T]):
    """
    A value with a timestamp.

    Records sort by timestamp alone; equality compares both fields.
    "Updating" a record means building a new one (with_timestamp,
    with_value).

    Arithmetic between records requires a common timestamp; arithmetic
    with plain values keeps the record's timestamp:

        TimeRecord(1, 2.0) + TimeRecord(1, 3.0)   # TimeRecord(1.0, 5.0)
        TimeRecord(1, 2.0) * 10                   # TimeRecord(1.0, 20.0)
    """

    timestamp: float
    value: T

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, float):
            object.__setattr__(self, "timestamp", as_timestamp(self.timestamp))

    @classmethod
    def from_datetime(cls, dt: datetime, value: T) -> TimeRecord[T]:
        return cls(datetime_to_timestamp(dt), value)

    @property
    def datetime(self) -> datetime:
        return timestamp_to_datetime(self.timestamp)

    @property
    def unixtime(self) -> float:
        return timestamp_to_unix(self.timestamp)

    def with_timestamp(self, t: TimeLike) -> TimeRecord[T]:
        return TimeRecord(as_timestamp(t), self.value)

    def with_value(self, value: Any) -> TimeRecord[Any]:
        return TimeRecord(self.timestamp, value)

    def is_nan(self) -> bool:
        """True when the timestamp is NaN (such records never enter a series)."""
        return math.isnan(self.timestamp)

    # -------------------------------------------------------------------------
    # Ordering (timestamp only)
    # -------------------------------------------------------------------------
    def __lt__(self, other: TimeRecord[Any]) -> bool:
        return self.timestamp < other.timestamp

    def __le__(self, other: TimeRecord[Any]) -> bool:
        return self.timestamp <= other.timestamp

    def __gt__(self, other: TimeRecord[Any]) -> bool:
        return self.timestamp > other.timestamp

    def __ge__(self, other: TimeRecord[Any]) -> bool:
        return self.timestamp >= other.timestamp

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeRecord):
            return NotImplemented
        return self.timestamp == other.timestamp and _values_equal(self.value, other.value)

    def __hash__(self) -> int:
        return hash((self.timestamp, self.value))

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------
    def _binary(self, other: Any, op: Callable[[Any, Any], Any]) -> TimeRecord[Any]:
        if isinstance(other, TimeRecord):
            t = common_timestamp(self, other)
            return TimeRecord(t, op(self.value, other.value))
        return TimeRecord(self.timestamp, op(self.value, other))

    def _rbinary(self, other: Any, op: Callable[[Any, Any], Any]) -> TimeRecord[Any]:
        return TimeRecord(self.timestamp, op(other, self.value))

    def __add__(self, other: Any) -> TimeRecord[Any]:
        return self._binary(other, operator.add)

    def __radd__(self, other: Any) -> TimeRecord[Any]:
        return self._rbinary(other, operator.add)

    def __sub__(self, other: Any) -> TimeRecord[Any]:
        return self._binary(other, operator.sub)

    def __rsub__(self, other: Any) -> TimeRecord[Any]:
        return self._rbinary(other, operator.sub)

    def __mul__(self, other: Any) -> TimeRecord[Any]:
        return self._binary(other, operator.mul)

    def __rmul__(self, other: Any) -> TimeRecord[Any]:
        return self._rbinary(other, operator.mul)

    def __truediv__(self, other: Any) -> TimeRecord[Any]:
        return self._binary(other, operator.truediv)

    def __rtruediv__(self, other: Any) -> TimeRecord[Any]:
        return self._rbinary(other, operator.truediv)

    def __neg__(self) -> TimeRecord[Any]:
        return TimeRecord(self.timestamp, -self.value)

    def __abs__(self) -> TimeRecord[Any]:
        return TimeRecord(self.timestamp, abs(self.value))

    def __repr__(self) -> str:
        t = "missing" if self.is_nan() else self.datetime.isoformat()
        return f"TimeRecord(t={t}, v={self.value!r})"


def common_timestamp(*records: TimeRecord[Any]) -> float:
    """
    Shared timestamp of records combined element-wise.

    Raises:
        InvalidArgumentError: if the timestamps differ
    """
    t0 = records[0].timestamp
    if any(r.timestamp != t0 for r in records[1:]):
        raise InvalidArgumentError.mismatched_timestamps([r.timestamp for r in records])
    return t0


def merge_records(
    *records: TimeRecord[Any],
    combine: Callable[..., Any] = lambda *values: tuple(values),
) -> TimeRecord[Any]:
    """
    Merge records that share a timestamp into one record.

    By default the values are gathered into a tuple; pass combine to
    build something else (e.g. combine=np.array via a lambda).
    """
    if not records:
        raise InvalidArgumentError.empty_series("merge records")
    t = common_timestamp(*records)
    return TimeRecord(t, combine(*(r.value for r in records)))


# =============================================================================
# TIME INTERVAL
# =============================================================================
@dataclass(frozen=True, slots=True, init=False)
class TimeInterval:
    """
    Ordered pair of timestamps (lo <= hi regardless of argument order).

    Accepts numbers, datetimes or records for either end:

        TimeInterval(5, 2)        # TimeInterval(lo=2.0, hi=5.0)
        TimeInterval(2, 5) + 1    # TimeInterval(lo=3.0, hi=6.0)
    """

    lo: float
    hi: float

    def __init__(self, t0: Any, t1: Any) -> None:
        a = as_timestamp(t0)
        b = as_timestamp(t1)
        if b < a:
            a, b = b, a
        object.__setattr__(self, "lo", a)
        object.__setattr__(self, "hi", b)

    @classmethod
    def of(cls, series: Any) -> TimeInterval:
        """Interval spanning the first and last record of a series."""
        if len(series) == 0:
            raise InvalidArgumentError.empty_series("compute the interval")
        return cls(series[0].timestamp, series[-1].timestamp)

    @property
    def duration(self) -> float:
        return self.hi - self.lo

    def contains(self, t: TimeLike) -> bool:
        """Closed-interval membership."""
        return self.lo <= as_timestamp(t) <= self.hi

    def datetimes(self) -> tuple[datetime, datetime]:
        return (timestamp_to_datetime(self.lo), timestamp_to_datetime(self.hi))

    def __iter__(self) -> Iterator[float]:
        yield self.lo
        yield self.hi

    def __len__(self) -> int:
        return 2

    def __getitem__(self, index: int) -> float:
        return (self.lo, self.hi)[index]

    def __add__(self, dt: float) -> TimeInterval:
        return TimeInterval(self.lo + dt, self.hi + dt)

    __radd__ = __add__

    def __sub__(self, dt: float) -> TimeInterval:
        return TimeInterval(self.lo - dt, self.hi - dt)

    def __rsub__(self, t: float) -> TimeInterval:
        return TimeInterval(t - self.hi, t - self.lo)

    def __str__(self) -> str:
        lo, hi = self.datetimes()
        return f"{lo.isoformat()} => {hi.isoformat()}"
