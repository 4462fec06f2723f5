"""
Time Series: Sorted Record Container

Provides:
- TimeSeries: owned, mutable sequence of TimeRecords in timestamp order
- TimeSeriesView: read-only, zero-copy window onto a series
- Interval getters: get_inner/get_outer (copies), view_inner/view_outer
- Collection helpers: get_inner_all/get_outer_all, timestamp_union

Invariant:
    For every adjacent pair of records, ts[i].timestamp <= ts[i+1].timestamp.

    Construction sorts (unless issorted=True) and drops NaN timestamps.
    push() always restores order. Assigning a plain value at an index
    keeps the stored timestamp; assigning a record that would break the
    order raises OutOfOrderError.

Views hold a reference to their parent and an index mapping. They must
not outlive mutations of the parent: after push/delete the mapping may
point at different records.
"""

from __future__ import annotations

import bisect
import math
from datetime import datetime
from operator import attrgetter
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

import numpy as np

from timerecords.core.errors import InvalidArgumentError, OutOfOrderError
from timerecords.series.bounds import find_bounds, find_inner, find_outer
from timerecords.series.cursor import HintLike, IndexHint
from timerecords.series.record import (
    TimeInterval,
    TimeRecord,
    as_timestamp,
    timestamp_to_datetime,
    timestamp_to_unix,
)

T = TypeVar("T")
U = TypeVar("U")

_timestamp = attrgetter("timestamp")


# =============================================================================
# HELPERS
# =============================================================================
def _as_record(item: Any) -> TimeRecord[Any]:
    if isinstance(item, TimeRecord):
        return item
    t, v = item
    return TimeRecord(as_timestamp(t), v)


def _is_bool_mask(key: Any) -> bool:
    if isinstance(key, np.ndarray):
        return key.dtype == np.bool_
    return (
        isinstance(key, (list, tuple))
        and len(key) > 0
        and all(isinstance(k, (bool, np.bool_)) for k in key)
    )


def _mask_to_indices(mask: Any, n: int) -> list[int]:
    if len(mask) != n:
        raise InvalidArgumentError.length_mismatch(n, len(mask))
    return [int(i) for i in np.flatnonzero(np.asarray(mask, dtype=bool))]


def _is_nan_value(value: Any) -> bool:
    return isinstance(value, (float, np.floating)) and math.isnan(value)


def _is_ascending(indices: Sequence[int]) -> bool:
    return all(a < b for a, b in zip(indices, indices[1:]))


# =============================================================================
# READ-ONLY BASE
# =============================================================================
class _RecordSequence(Generic[T]):
    """Read-only behavior shared by TimeSeries and TimeSeriesView."""

    __slots__ = ()

    def _record_list(self) -> Sequence[TimeRecord[T]]:
        raise NotImplementedError

    def __len__(self) -> int:
        return len(self._record_list())

    def __iter__(self) -> Iterator[TimeRecord[T]]:
        return iter(self._record_list())

    def __reversed__(self) -> Iterator[TimeRecord[T]]:
        return reversed(self._record_list())

    def __bool__(self) -> bool:
        return len(self) > 0

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def records(self) -> list[TimeRecord[T]]:
        """Copy of the records as a list."""
        return list(self._record_list())

    @property
    def timestamps(self) -> np.ndarray:
        """Timestamps as a float64 array."""
        records = self._record_list()
        return np.fromiter((r.timestamp for r in records), dtype=np.float64, count=len(records))

    @property
    def values(self) -> list[T]:
        return [r.value for r in self._record_list()]

    @property
    def interval(self) -> TimeInterval:
        """TimeInterval spanning the first and last record."""
        return TimeInterval.of(self)

    def datetimes(self) -> list[datetime]:
        return [timestamp_to_datetime(r.timestamp) for r in self._record_list()]

    def unixtimes(self) -> np.ndarray:
        return np.array([timestamp_to_unix(r.timestamp) for r in self._record_list()], dtype=np.float64)

    def to_series(self) -> TimeSeries[T]:
        """Detached copy as a TimeSeries."""
        return TimeSeries(self._record_list(), issorted=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _RecordSequence):
            return NotImplemented
        mine = self._record_list()
        theirs = other._record_list()
        return len(mine) == len(theirs) and all(a == b for a, b in zip(mine, theirs))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        name = type(self).__name__
        n = len(self)
        if n == 0:
            return f"{name}(empty)"
        return f"{name}({n} records, {self.interval})"


# =============================================================================
# TIME SERIES
# =============================================================================
class TimeSeries(_RecordSequence[T]):
    """
    Sorted, mutable sequence of TimeRecords.

    Construction:
        TimeSeries([TimeRecord(1, 1.0), TimeRecord(2, 2.0)])
        TimeSeries([(1, 1.0), (2, 2.0)])                 # pairs
        TimeSeries([1, 2, 3], [1.0, 2.0, 3.0])           # timestamps, values
        TimeSeries.from_values(np.arange(5.0), values, issorted=True)

    Indexing:
        ts[i]               record
        ts[a:b]             new series
        ts[[i, j]]          new series (re-sorted if indices are not ascending)
        ts[mask]            new series of records where mask is True
        ts[TimeInterval]    new series of records inside the interval
    """

    __slots__ = ("_records",)

    def __init__(
        self,
        records: Iterable[Any] = (),
        values: Optional[Iterable[Any]] = None,
        *,
        issorted: bool = False,
    ) -> None:
        if values is not None:
            self._records = self._from_pairs(records, values)
        else:
            self._records = [_as_record(r) for r in records]
        self._records = [r for r in self._records if not r.is_nan()]
        if not issorted:
            # list.sort is stable: equal timestamps keep their input order
            self._records.sort(key=lambda r: r.timestamp)

    @staticmethod
    def _from_pairs(timestamps: Iterable[Any], values: Iterable[Any]) -> list[TimeRecord[Any]]:
        timestamps = list(timestamps)
        values = list(values)
        if len(timestamps) != len(values):
            raise InvalidArgumentError.length_mismatch(len(timestamps), len(values))
        return [TimeRecord(as_timestamp(t), v) for t, v in zip(timestamps, values)]

    @classmethod
    def from_values(
        cls,
        timestamps: Iterable[Any],
        values: Iterable[T],
        *,
        issorted: bool = False,
    ) -> TimeSeries[T]:
        """Build a series from parallel timestamps (numbers or datetimes) and values."""
        return cls(timestamps, values, issorted=issorted)

    @classmethod
    def empty(cls) -> TimeSeries[Any]:
        return cls()

    def _record_list(self) -> list[TimeRecord[T]]:
        return self._records

    def copy(self) -> TimeSeries[T]:
        """Shallow copy (records are immutable, so this is a full copy)."""
        return TimeSeries(self._records, issorted=True)

    __copy__ = copy

    # -------------------------------------------------------------------------
    # Indexing
    # -------------------------------------------------------------------------
    def _normalize_indices(self, key: Any) -> list[int]:
        n = len(self._records)
        if _is_bool_mask(key):
            return _mask_to_indices(key, n)
        indices = [int(i) for i in key]
        return [i + n if i < 0 else i for i in indices]

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, (int, np.integer)):
            return self._records[key]
        if isinstance(key, slice):
            reverse = key.step is not None and key.step < 0
            return TimeSeries(self._records[key], issorted=not reverse)
        if isinstance(key, TimeInterval):
            return get_inner(self, key)
        if isinstance(key, (list, tuple, range, np.ndarray)):
            indices = self._normalize_indices(key)
            records = [self._records[i] for i in indices]
            return TimeSeries(records, issorted=_is_ascending(indices))
        raise InvalidArgumentError.invalid_index(key, "expected int, slice, index list, mask or TimeInterval")

    def __setitem__(self, key: Any, value: Any) -> None:
        if isinstance(key, (int, np.integer)):
            n = len(self._records)
            i = int(key) + n if key < 0 else int(key)
            candidate = self._replacement(self._records[i], value)
            self._check_position(i, candidate.timestamp)
            self._records[i] = candidate
            return

        if isinstance(key, slice):
            indices = list(range(*key.indices(len(self._records))))
        elif isinstance(key, (list, tuple, range, np.ndarray)):
            indices = self._normalize_indices(key)
        else:
            raise InvalidArgumentError.invalid_index(key, "expected int, slice, index list or mask")

        if isinstance(value, (list, np.ndarray, _RecordSequence)):
            if len(value) != len(indices):
                raise InvalidArgumentError.length_mismatch(len(indices), len(value))
            items = list(value)
        else:
            items = [value] * len(indices)

        updated = list(self._records)
        for i, item in zip(indices, items):
            updated[i] = self._replacement(updated[i], item)
        for i in indices:
            lower = updated[i - 1].timestamp if i > 0 else -math.inf
            upper = updated[i + 1].timestamp if i + 1 < len(updated) else math.inf
            t = updated[i].timestamp
            if not lower <= t <= upper:
                raise OutOfOrderError.for_assignment(i, t, lower, upper)
        self._records = updated

    @staticmethod
    def _replacement(current: TimeRecord[Any], value: Any) -> TimeRecord[Any]:
        if isinstance(value, TimeRecord):
            return value
        return TimeRecord(current.timestamp, value)

    def _check_position(self, i: int, t: float) -> None:
        lower = self._records[i - 1].timestamp if i > 0 else -math.inf
        upper = self._records[i + 1].timestamp if i + 1 < len(self._records) else math.inf
        if not lower <= t <= upper:
            raise OutOfOrderError.for_assignment(i, t, lower, upper)

    def __delitem__(self, key: Any) -> None:
        if isinstance(key, (int, np.integer, slice)):
            del self._records[key]
            return
        if isinstance(key, (list, tuple, range, np.ndarray)):
            for i in sorted(set(self._normalize_indices(key)), reverse=True):
                del self._records[i]
            return
        raise InvalidArgumentError.invalid_index(key, "expected int, slice, index list or mask")

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------
    def push(self, record: TimeRecord[T], hint: HintLike = None) -> Optional[int]:
        """
        Insert a record at its sorted position.

        Appending in order and prepending are O(1)/O(n) without a search;
        anything else locates the slot with find_bounds (hinted if a hint
        is given). A record whose timestamp equals existing ones goes
        after them. NaN-timestamp records are ignored.

        Returns:
            Index the record was inserted at, or None if it was dropped
        """
        record = _as_record(record)
        if record.is_nan():
            return None

        records = self._records
        if not records or records[-1].timestamp <= record.timestamp:
            records.append(record)
            index = len(records) - 1
        elif record.timestamp < records[0].timestamp:
            records.insert(0, record)
            index = 0
        else:
            lo, _ = find_bounds(self, record.timestamp, hint)
            index = lo + 1
            while index < len(records) and records[index].timestamp <= record.timestamp:
                index += 1
            records.insert(index, record)

        if isinstance(hint, IndexHint):
            hint.index = index
        return index

    def extend(self, records: Iterable[Any]) -> None:
        """Push every record, reusing one hint."""
        hint = IndexHint()
        for record in records:
            self.push(record, hint)

    def keep_at(self, indices: Any) -> None:
        """Keep only the records at the given indices (or where a mask is True)."""
        keep = sorted(set(self._normalize_indices(indices)))
        self._records = [self._records[i] for i in keep]

    def keep_latest(self, t: Any = None) -> None:
        """
        Drop records older than the latest one at or before t.

        The latest record at or before t is kept as an anchor for later
        interpolation. Without t only the last record survives. A t
        before the series keeps everything.
        """
        if not self._records:
            return
        if t is None:
            del self._records[:-1]
            return
        index = bisect.bisect_right(self._records, as_timestamp(t), key=_timestamp) - 1
        del self._records[:max(index, 0)]

    def drop_nan(self) -> None:
        """Remove records whose (float) value is NaN."""
        self._records = [r for r in self._records if not _is_nan_value(r.value)]

    def fill(self, value: T) -> None:
        """Overwrite every value, keeping timestamps."""
        self._records = [TimeRecord(r.timestamp, value) for r in self._records]

    def map_values(self, fn: Callable[[T], U]) -> TimeSeries[U]:
        """New series with fn applied to every value."""
        return TimeSeries([TimeRecord(r.timestamp, fn(r.value)) for r in self._records], issorted=True)

    def map_values_inplace(self, fn: Callable[[T], T]) -> None:
        self._records = [TimeRecord(r.timestamp, fn(r.value)) for r in self._records]

    def clear(self) -> None:
        self._records.clear()

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------
    def view(self, key: Any = None) -> TimeSeriesView[T]:
        """Read-only window; key is a range, slice, ascending index list, mask or TimeInterval."""
        if key is None:
            key = range(len(self._records))
        return TimeSeriesView(self, key)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------
    def _combine(self, other: Any, op: Callable[[Any, Any], Any]) -> TimeSeries[Any]:
        if isinstance(other, _RecordSequence):
            if len(self) != len(other):
                raise InvalidArgumentError.length_mismatch(len(self), len(other))
            return TimeSeries([op(a, b) for a, b in zip(self._records, other)], issorted=True)
        return TimeSeries([op(r, other) for r in self._records], issorted=True)

    def __add__(self, other: Any) -> TimeSeries[Any]:
        return self._combine(other, lambda a, b: a + b)

    def __sub__(self, other: Any) -> TimeSeries[Any]:
        return self._combine(other, lambda a, b: a - b)

    def __mul__(self, other: Any) -> TimeSeries[Any]:
        return self._combine(other, lambda a, b: a * b)

    def __neg__(self) -> TimeSeries[Any]:
        return self.map_values(lambda v: -v)


# =============================================================================
# TIME SERIES VIEW
# =============================================================================
class TimeSeriesView(_RecordSequence[T]):
    """
    Read-only window onto a TimeSeries.

    Holds the parent and an ascending index mapping (a range for
    contiguous windows, a list for masks), so no records are copied.
    Views of views map straight onto the original parent.
    """

    __slots__ = ("_parent", "_indices")

    def __init__(self, parent: Union[TimeSeries[T], TimeSeriesView[T]], key: Any) -> None:
        local = self._local_indices(parent, key)
        if isinstance(parent, TimeSeriesView):
            if isinstance(local, range):
                self._indices = parent._indices[local.start:local.stop:local.step]
            else:
                self._indices = [parent._indices[i] for i in local]
            self._parent = parent._parent
        else:
            self._indices = local
            self._parent = parent

    @staticmethod
    def _local_indices(parent: _RecordSequence[Any], key: Any) -> Union[range, list[int]]:
        n = len(parent)
        if isinstance(key, TimeInterval):
            return find_inner(parent, key)
        if isinstance(key, slice):
            key = range(*key.indices(n))
        if isinstance(key, range):
            if len(key) > 1 and key.step < 0:
                raise InvalidArgumentError.invalid_index(key, "view ranges must be ascending")
            if len(key) > 0 and (key[0] < 0 or key[-1] >= n):
                raise InvalidArgumentError.invalid_index(key, f"range out of bounds for length {n}")
            return key
        if _is_bool_mask(key):
            return _mask_to_indices(key, n)
        if isinstance(key, (list, tuple, np.ndarray)):
            indices = [int(i) for i in key]
            if not _is_ascending(indices):
                raise InvalidArgumentError.invalid_index(key, "view indices must be strictly ascending")
            return indices
        raise InvalidArgumentError.invalid_index(key, "expected range, slice, index list, mask or TimeInterval")

    @property
    def parent(self) -> TimeSeries[T]:
        return self._parent

    @property
    def indices(self) -> Union[range, list[int]]:
        """Positions of the viewed records in the parent."""
        return self._indices

    def _record_list(self) -> list[TimeRecord[T]]:
        records = self._parent._records
        return [records[i] for i in self._indices]

    def __len__(self) -> int:
        return len(self._indices)

    def __iter__(self) -> Iterator[TimeRecord[T]]:
        records = self._parent._records
        return (records[i] for i in self._indices)

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, (int, np.integer)):
            return self._parent._records[self._indices[key]]
        return TimeSeriesView(self, key)

    def copy(self) -> TimeSeries[T]:
        return self.to_series()


# =============================================================================
# INTERVAL GETTERS
# =============================================================================
def get_inner(series: _RecordSequence[T], interval: Any, hint: HintLike = None) -> TimeSeries[T]:
    """Copy of the records inside the interval."""
    indices = find_inner(series, interval, hint)
    return TimeSeries([series[i] for i in indices], issorted=True)


def get_outer(series: _RecordSequence[T], interval: Any, hint: HintLike = None) -> TimeSeries[T]:
    """Copy of the records covering the interval, bracketing records included."""
    indices = find_outer(series, interval, hint)
    return TimeSeries([series[i] for i in indices], issorted=True)


def view_inner(series: Union[TimeSeries[T], TimeSeriesView[T]], interval: Any, hint: HintLike = None) -> TimeSeriesView[T]:
    return TimeSeriesView(series, find_inner(series, interval, hint))


def view_outer(series: Union[TimeSeries[T], TimeSeriesView[T]], interval: Any, hint: HintLike = None) -> TimeSeriesView[T]:
    return TimeSeriesView(series, find_outer(series, interval, hint))


def get_inner_all(collection: Mapping[Any, _RecordSequence[Any]], interval: Any) -> dict[Any, TimeSeries[Any]]:
    """get_inner for every series of a mapping."""
    return {key: get_inner(series, interval) for key, series in collection.items()}


def get_outer_all(collection: Mapping[Any, _RecordSequence[Any]], interval: Any) -> dict[Any, TimeSeries[Any]]:
    """get_outer for every series of a mapping."""
    return {key: get_outer(series, interval) for key, series in collection.items()}


def timestamp_union(*series: _RecordSequence[Any]) -> np.ndarray:
    """Sorted, duplicate-free union of the timestamps of all series."""
    if not series:
        return np.empty(0, dtype=np.float64)
    return np.unique(np.concatenate([s.timestamps for s in series]))
