"""
Unit Tests: TimeSeries

Tests:
    - Construction (sorting, NaN timestamps, issorted)
    - Indexing and views
    - Mutation (push, assignment, deletion, pruning)
    - Interval getters and timestamp union
"""

import pytest
import numpy as np

from timerecords.core.errors import InvalidArgumentError, OutOfOrderError
from timerecords.series.cursor import IndexHint
from timerecords.series.record import TimeInterval, TimeRecord
from timerecords.series.timeseries import (
    TimeSeries,
    TimeSeriesView,
    get_inner,
    get_inner_all,
    get_outer,
    get_outer_all,
    timestamp_union,
    view_inner,
    view_outer,
)


@pytest.fixture
def series():
    return TimeSeries([1, 2, 3, 4, 5], [1.0, 2.0, 3.0, 4.0, 5.0])


class TestConstruction:
    """Tests for building series."""

    def test_sorts_input(self):
        """Unsorted input is sorted by timestamp."""
        ts = TimeSeries([3, 1, 2], ["c", "a", "b"])
        np.testing.assert_allclose(ts.timestamps, [1.0, 2.0, 3.0])
        assert ts.values == ["a", "b", "c"]

    def test_from_records_and_pairs(self):
        """Records and (t, v) pairs are both accepted."""
        a = TimeSeries([TimeRecord(2, 2.0), TimeRecord(1, 1.0)])
        b = TimeSeries([(2, 2.0), (1, 1.0)])
        assert a == b
        assert a[0] == TimeRecord(1, 1.0)

    def test_drops_nan_timestamps(self):
        """NaN timestamps never enter a series."""
        ts = TimeSeries([1.0, np.nan, 3.0], [1.0, 2.0, 3.0])
        assert len(ts) == 2
        np.testing.assert_allclose(ts.timestamps, [1.0, 3.0])

    def test_issorted_matches_full_sort(self):
        """Skipping the sort on sorted input gives the same series."""
        t = np.arange(10.0)
        v = np.sin(t)
        assert TimeSeries.from_values(t, v, issorted=True) == TimeSeries.from_values(t, v)

    def test_stable_for_equal_timestamps(self):
        """Equal timestamps keep their input order."""
        ts = TimeSeries([2, 1, 2], ["first", "zero", "second"])
        assert ts.values == ["zero", "first", "second"]

    def test_length_mismatch(self):
        """Timestamps and values must pair up."""
        with pytest.raises(InvalidArgumentError):
            TimeSeries([1, 2, 3], [1.0, 2.0])

    def test_empty(self):
        """An empty series is well formed."""
        ts = TimeSeries()
        assert len(ts) == 0
        assert ts.is_empty
        assert not ts
        assert ts.timestamps.shape == (0,)

    def test_accessors(self, series):
        """timestamps, values, interval and copy."""
        assert series.timestamps.dtype == np.float64
        assert series.values == [1.0, 2.0, 3.0, 4.0, 5.0]
        assert series.interval == TimeInterval(1, 5)
        clone = series.copy()
        assert clone == series
        clone.push(TimeRecord(6, 6.0))
        assert len(series) == 5


class TestIndexing:
    """Tests for indexing."""

    def test_int_index(self, series):
        assert series[0] == TimeRecord(1, 1.0)
        assert series[-1] == TimeRecord(5, 5.0)

    def test_slice(self, series):
        sub = series[1:3]
        assert isinstance(sub, TimeSeries)
        assert sub.values == [2.0, 3.0]

    def test_index_list_resorts(self, series):
        """Non-ascending index lists still give a sorted series."""
        sub = series[[3, 0, 1]]
        np.testing.assert_allclose(sub.timestamps, [1.0, 2.0, 4.0])

    def test_bool_mask(self, series):
        sub = series[np.array([True, False, True, False, True])]
        assert sub.values == [1.0, 3.0, 5.0]

    def test_interval_index(self, series):
        """Indexing by interval keeps records inside it."""
        assert series[TimeInterval(1.5, 4)].values == [2.0, 3.0, 4.0]

    def test_invalid_index(self, series):
        with pytest.raises(InvalidArgumentError):
            series["a"]


class TestMutation:
    """Tests for mutating operations."""

    def test_push_in_order(self):
        ts = TimeSeries()
        for t in range(5):
            assert ts.push(TimeRecord(t, float(t))) == t
        assert ts.values == [0.0, 1.0, 2.0, 3.0, 4.0]

    def test_push_out_of_order(self, series):
        """push keeps the series sorted."""
        assert series.push(TimeRecord(2.5, 2.5)) == 2
        assert series.push(TimeRecord(0, 0.0)) == 0
        np.testing.assert_allclose(series.timestamps, [0.0, 1.0, 2.0, 2.5, 3.0, 4.0, 5.0])

    def test_push_equal_timestamp_goes_after(self, series):
        series.push(TimeRecord(3, 30.0))
        assert series.values == [1.0, 2.0, 3.0, 30.0, 4.0, 5.0]

    def test_push_with_hint(self, series):
        """A hint is advanced to the insertion index."""
        hint = IndexHint(0)
        series.push(TimeRecord(3.5, 3.5), hint)
        assert hint.index == 3
        assert series[3] == TimeRecord(3.5, 3.5)

    def test_push_random_order(self):
        """Any insertion order produces the same sorted series."""
        rng = np.random.default_rng(0)
        t = rng.permutation(50).astype(float)
        ts = TimeSeries()
        for ti in t:
            ts.push(TimeRecord(ti, ti))
        np.testing.assert_allclose(ts.timestamps, np.arange(50.0))

    def test_push_nan_ignored(self, series):
        assert series.push(TimeRecord(np.nan, 1.0)) is None
        assert len(series) == 5

    def test_setitem_value_keeps_timestamp(self, series):
        series[1] = 20.0
        assert series[1] == TimeRecord(2, 20.0)

    def test_setitem_record_in_order(self, series):
        series[1] = TimeRecord(2.5, 2.5)
        assert series[1] == TimeRecord(2.5, 2.5)

    def test_setitem_record_out_of_order(self, series):
        """Breaking the order through assignment is rejected."""
        with pytest.raises(OutOfOrderError):
            series[1] = TimeRecord(10, 1.0)
        assert series[1] == TimeRecord(2, 2.0)

    def test_setitem_slice(self, series):
        series[0:2] = [10.0, 20.0]
        assert series.values == [10.0, 20.0, 3.0, 4.0, 5.0]
        series[3:] = 0.0
        assert series.values == [10.0, 20.0, 3.0, 0.0, 0.0]

    def test_setitem_slice_out_of_order(self, series):
        """Slice assignment is all-or-nothing."""
        with pytest.raises(OutOfOrderError):
            series[0:2] = [TimeRecord(1, 0.0), TimeRecord(9, 0.0)]
        assert series.values == [1.0, 2.0, 3.0, 4.0, 5.0]

    def test_delete(self, series):
        del series[0]
        del series[[0, 2]]
        assert series.values == [3.0, 5.0]

    def test_keep_at(self, series):
        series.keep_at([4, 0, 2])
        assert series.values == [1.0, 3.0, 5.0]

    def test_keep_latest(self, series):
        """The latest record at or before t stays as an anchor."""
        series.keep_latest(3.5)
        assert series.values == [3.0, 4.0, 5.0]

    def test_keep_latest_exact(self, series):
        series.keep_latest(3)
        assert series.values == [3.0, 4.0, 5.0]

    def test_keep_latest_before_series(self, series):
        series.keep_latest(0)
        assert len(series) == 5

    def test_keep_latest_without_time(self, series):
        series.keep_latest()
        assert series.values == [5.0]

    def test_drop_nan(self):
        ts = TimeSeries([1, 2, 3], [1.0, np.nan, 3.0])
        ts.drop_nan()
        assert ts.values == [1.0, 3.0]

    def test_fill_and_map(self, series):
        doubled = series.map_values(lambda v: 2 * v)
        assert doubled.values == [2.0, 4.0, 6.0, 8.0, 10.0]
        assert series.values == [1.0, 2.0, 3.0, 4.0, 5.0]
        series.map_values_inplace(lambda v: v + 1)
        assert series.values == [2.0, 3.0, 4.0, 5.0, 6.0]
        series.fill(0.0)
        assert series.values == [0.0] * 5
        np.testing.assert_allclose(series.timestamps, [1, 2, 3, 4, 5])

    def test_series_arithmetic(self, series):
        np.testing.assert_allclose((series + series).values, [2, 4, 6, 8, 10])
        np.testing.assert_allclose((series - 1.0).values, [0, 1, 2, 3, 4])

    def test_series_arithmetic_mismatched(self, series):
        with pytest.raises(InvalidArgumentError):
            series + TimeSeries([1, 2, 3, 4, 6], [0.0] * 5)


class TestViews:
    """Tests for zero-copy views."""

    def test_view_range(self, series):
        view = series.view(range(1, 4))
        assert isinstance(view, TimeSeriesView)
        assert len(view) == 3
        assert view[0] is series[1]
        assert view.values == [2.0, 3.0, 4.0]

    def test_view_mask(self, series):
        view = series.view([True, False, False, True, True])
        assert view.values == [1.0, 4.0, 5.0]

    def test_view_of_view(self, series):
        view = series.view(slice(1, 5))[1:3]
        assert view.values == [3.0, 4.0]
        assert view.parent is series
        assert list(view.indices) == [2, 3]

    def test_view_interval(self, series):
        view = series.view(TimeInterval(2, 4))
        assert view.values == [2.0, 3.0, 4.0]

    def test_view_sees_value_updates(self, series):
        """Views read through to the parent."""
        view = series.view(range(0, 2))
        series[1] = 99.0
        assert view[1].value == 99.0

    def test_view_is_read_only(self, series):
        view = series.view(range(0, 2))
        with pytest.raises(TypeError):
            view[0] = 1.0

    def test_view_rejects_descending(self, series):
        with pytest.raises(InvalidArgumentError):
            series.view([3, 1])
        with pytest.raises(InvalidArgumentError):
            series.view(range(3, 0, -1))

    def test_empty_view(self, series):
        view = view_inner(series, TimeInterval(2.1, 2.2))
        assert len(view) == 0
        assert view.is_empty
        assert view.to_series() == TimeSeries()


class TestIntervalGetters:
    """Tests for inner/outer getters."""

    def test_get_inner_and_outer(self, series):
        dt = TimeInterval(2.1, 4.1)
        assert get_inner(series, dt).values == [3.0, 4.0]
        assert get_outer(series, dt).values == [2.0, 3.0, 4.0, 5.0]
        assert view_outer(series, dt).values == [2.0, 3.0, 4.0, 5.0]

    def test_getters_return_copies(self, series):
        inner = get_inner(series, TimeInterval(1, 5))
        inner.push(TimeRecord(6, 6.0))
        assert len(series) == 5

    def test_collection_getters(self, series):
        data = {"a": series, "b": TimeSeries([2.5], [0.0])}
        dt = TimeInterval(2, 3)
        inner = get_inner_all(data, dt)
        outer = get_outer_all(data, dt)
        assert inner["a"].values == [2.0, 3.0]
        assert inner["b"].values == [0.0]
        assert outer["a"].values == [2.0, 3.0]
        assert outer["b"].values == [0.0]

    def test_timestamp_union(self, series):
        other = TimeSeries([1.5, 2.0, 6.0], [0.0, 0.0, 0.0])
        np.testing.assert_allclose(
            timestamp_union(series, other),
            [1.0, 1.5, 2.0, 3.0, 4.0, 5.0, 6.0],
        )
