"""
Unit Tests: Interpolation

Tests:
    - Two-point algorithms (hold-last, saturated linear)
    - interpolate for single times and batches
    - strictinterp and the MISSING sentinel
    - merge on common timestamps
"""

import pytest
import numpy as np

from timerecords.analysis.interpolation import (
    hold_last,
    interpolate,
    interpolate_records,
    linear_weights,
    merge,
    strictinterp,
)
from timerecords.core.errors import ErrorCode, InvalidArgumentError
from timerecords.core.types import MISSING, Order, is_missing
from timerecords.series.cursor import IndexHint
from timerecords.series.record import TimeRecord
from timerecords.series.timeseries import TimeSeries, timestamp_union


@pytest.fixture
def series():
    return TimeSeries([1, 2, 3, 4, 5], [1.0, 2.0, 3.0, 4.0, 5.0])


class TestTwoPoint:
    """Tests for the two-point algorithms."""

    def test_hold_last(self):
        r1, r2 = TimeRecord(1, 10.0), TimeRecord(2, 20.0)
        assert hold_last(r1, r2, 1.0) == 10.0
        assert hold_last(r1, r2, 1.99) == 10.0
        assert hold_last(r1, r2, 2.0) == 20.0

    def test_linear(self):
        r1, r2 = TimeRecord(1, 10.0), TimeRecord(2, 20.0)
        np.testing.assert_allclose(interpolate_records(r1, r2, 1.25, Order.LINEAR), 12.5)

    def test_linear_weights_clamped(self):
        """Weights stay in [0, 1] outside the bracket."""
        assert linear_weights(1.0, 2.0, 3.0) == (0.0, 1.0)
        assert linear_weights(1.0, 2.0, 0.0) == (1.0, 0.0)

    def test_coincident_records(self):
        """Equal bracket timestamps average the two values."""
        r1, r2 = TimeRecord(1, 10.0), TimeRecord(1, 20.0)
        assert linear_weights(1.0, 1.0, 1.0) == (0.5, 0.5)
        assert interpolate_records(r1, r2, 1.0, 1) == 15.0

    def test_array_values(self):
        r1 = TimeRecord(0, np.array([0.0, 10.0]))
        r2 = TimeRecord(1, np.array([1.0, 20.0]))
        np.testing.assert_allclose(interpolate_records(r1, r2, 0.5, 1), [0.5, 15.0])

    @pytest.mark.parametrize("order", [2, -1, 0.5, True, "linear"])
    def test_unsupported_order(self, order):
        with pytest.raises(InvalidArgumentError) as exc_info:
            interpolate_records(TimeRecord(1, 1.0), TimeRecord(2, 2.0), 1.5, order)
        assert exc_info.value.code == ErrorCode.ARGUMENT_UNSUPPORTED_ORDER


class TestInterpolate:
    """Tests for series interpolation."""

    def test_hold_batch(self, series):
        result = interpolate(series, [1.5, 2.5, 3.5], order=0)
        np.testing.assert_allclose(result.values, [1.0, 2.0, 3.0])
        np.testing.assert_allclose(result.timestamps, [1.5, 2.5, 3.5])

    def test_linear_batch(self, series):
        result = interpolate(series, [1.5, 2.5, 3.5], order=1)
        np.testing.assert_allclose(result.values, [1.5, 2.5, 3.5])

    @pytest.mark.parametrize("order", [0, 1])
    def test_holds_edges(self, series, order):
        assert interpolate(series, 0.0, order) == 1.0
        assert interpolate(series, 6.0, order) == 5.0

    @pytest.mark.parametrize("order", [0, 1])
    def test_exact_timestamps(self, series, order):
        for r in series:
            assert interpolate(series, r.timestamp, order) == r.value

    def test_unsorted_query_times(self, series):
        """Batch results are keyed at the sorted query times."""
        result = interpolate(series, [3.5, 1.5], order=1)
        np.testing.assert_allclose(result.timestamps, [1.5, 3.5])
        np.testing.assert_allclose(result.values, [1.5, 3.5])

    def test_empty_batch(self, series):
        assert len(interpolate(series, [])) == 0

    def test_hinted_scalar_queries(self, series):
        """A shared hint gives the same results as bisection."""
        hint = IndexHint()
        queries = np.linspace(0, 6, 25)
        hinted = [interpolate(series, q, 1, hint) for q in queries]
        plain = [interpolate(series, q, 1) for q in queries]
        np.testing.assert_allclose(hinted, plain)

    @pytest.mark.parametrize("order", [0, 1])
    def test_duplicate_timestamps_batch_matches_scalar(self, order):
        """Batched queries resolve duplicate timestamps like single queries."""
        ts = TimeSeries([1, 2, 2, 3], [0.0, 5.0, 7.0, 0.0])
        queries = [1.0, 1.5, 2.0, 2.5, 3.0]
        batch = interpolate(ts, queries, order)
        np.testing.assert_allclose(batch.values, [interpolate(ts, q, order) for q in queries])
        assert interpolate(ts, 2.0, order) == 5.0
        assert batch.values[2] == 5.0

    def test_view_input(self, series):
        view = series.view(range(1, 4))
        assert interpolate(series.view(range(1, 4)), 0.0) == 2.0
        np.testing.assert_allclose(interpolate(view, [2.5], 1).values, [2.5])

    def test_empty_series(self):
        with pytest.raises(InvalidArgumentError):
            interpolate(TimeSeries(), 1.0)

    def test_unsupported_order(self, series):
        with pytest.raises(InvalidArgumentError):
            interpolate(series, 1.5, order=3)


class TestStrictInterp:
    """Tests for strict interpolation."""

    @pytest.mark.parametrize("order", [0, 1])
    def test_outside_is_missing(self, series, order):
        assert strictinterp(series, 6.0, order) is MISSING
        assert is_missing(strictinterp(series, 0.5, order))

    @pytest.mark.parametrize("order", [0, 1])
    def test_inside_matches_interpolate(self, series, order):
        times = [1.0, 1.5, 2.5, 3.5, 5.0]
        strict = strictinterp(series, times, order)
        loose = interpolate(series, times, order)
        assert strict.values == loose.values

    def test_batch_with_missing(self, series):
        result = strictinterp(series, [0.0, 2.5, 6.0], 1)
        assert result.values[0] is MISSING
        assert result.values[1] == 2.5
        assert result.values[2] is MISSING

    def test_missing_is_falsy(self):
        assert not MISSING
        assert repr(MISSING) == "missing"


class TestMerge:
    """Tests for merge."""

    def test_merge_union_of_timestamps(self, series):
        other = TimeSeries([1.5, 2.6], [1.5, 2.6])
        merged = merge(series, other)
        np.testing.assert_allclose(merged.timestamps, [1.0, 1.5, 2.0, 2.6, 3.0, 4.0, 5.0])
        assert merged.values == [
            (1.0, 1.5),
            (1.0, 1.5),
            (2.0, 1.5),
            (2.0, 2.6),
            (3.0, 2.6),
            (4.0, 2.6),
            (5.0, 2.6),
        ]

    def test_merge_timestamps_equal_union(self):
        """Output timestamps are the sorted, duplicate-free union."""
        rng = np.random.default_rng(3)
        a = TimeSeries.from_values(rng.uniform(0, 10, 20).round(1), np.zeros(20))
        b = TimeSeries.from_values(rng.uniform(0, 10, 15).round(1), np.ones(15))
        merged = merge(a, b)
        np.testing.assert_array_equal(merged.timestamps, timestamp_union(a, b))
        assert np.all(np.diff(merged.timestamps) > 0)

    def test_merge_duplicate_timestamps(self):
        ts = TimeSeries([1, 2, 2, 3], [0.0, 5.0, 7.0, 0.0])
        other = TimeSeries([1, 3], [1.0, 3.0])
        merged = merge(ts, other)
        np.testing.assert_allclose(merged.timestamps, [1.0, 2.0, 3.0])
        assert merged.values == [(0.0, 1.0), (5.0, 1.0), (0.0, 3.0)]

    def test_merge_custom_combine_and_times(self, series):
        other = TimeSeries([1, 5], [10.0, 50.0])
        merged = merge(series, other, times=[2.0, 3.0], combine=lambda a, b: b - a, order=1)
        np.testing.assert_allclose(merged.values, [18.0, 27.0])
