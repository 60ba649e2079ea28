"""
Tests for interpolation, missing-value filters and reducer factories.
"""

import math

import pytest

from eventseries.core.functions import (
    Filters,
    Functions,
    InterpolationType,
    interpolate,
)


ONE_TO_TEN = list(range(1, 11))


class TestInterpolate:
    """Test the interpolate helper for every mode."""

    @pytest.mark.parametrize(
        "mode, expected",
        [
            (InterpolationType.LOWER, 2.0),
            (InterpolationType.LINEAR, 2.5),
            (InterpolationType.HIGHER, 4.0),
            (InterpolationType.NEAREST, 2.0),
            (InterpolationType.MIDPOINT, 3.0),
        ],
    )
    def test_quarter_fraction(self, mode: InterpolationType, expected: float) -> None:
        assert interpolate(2.0, 4.0, 0.25, mode) == expected

    def test_nearest_rounds_half_up(self) -> None:
        assert interpolate(2.0, 4.0, 0.5, InterpolationType.NEAREST) == 4.0
        assert interpolate(2.0, 4.0, 0.75, "nearest") == 4.0

    @pytest.mark.parametrize("mode", list(InterpolationType))
    def test_zero_fraction_is_lower_value(self, mode: InterpolationType) -> None:
        """A position exactly on v0 returns v0 whatever the mode."""
        assert interpolate(2.0, 4.0, 0.0, mode) == 2.0

    def test_string_mode_accepted(self) -> None:
        assert interpolate(0.0, 10.0, 0.3, "linear") == pytest.approx(3.0)

    def test_unknown_mode_raises(self) -> None:
        with pytest.raises(ValueError):
            interpolate(0.0, 1.0, 0.5, "cubic")


class TestFilters:
    """Test missing-value cleaners."""

    def test_keep_missing(self) -> None:
        assert Filters.keep_missing([1, None, 3]) == [1, None, 3]

    def test_ignore_missing(self) -> None:
        assert Filters.ignore_missing([1, None, float("nan"), 3]) == [1, 3]

    def test_zero_missing(self) -> None:
        assert Filters.zero_missing([1, None, float("nan")]) == [1, 0, 0]

    def test_propagate_missing(self) -> None:
        assert Filters.propagate_missing([1, 2]) == [1, 2]
        assert Filters.propagate_missing([1, None]) is None

    def test_none_if_empty(self) -> None:
        assert Filters.none_if_empty([]) is None
        assert Filters.none_if_empty([0]) == [0]


class TestReducers:
    """Test reducer factories with their default cleaners."""

    def test_sum(self) -> None:
        assert Functions.sum()(ONE_TO_TEN) == 55
        assert Functions.sum()([1, None, 2]) == 3

    def test_sum_of_nothing(self) -> None:
        assert Functions.sum()([]) == 0
        assert Functions.sum(Filters.none_if_empty)([]) is None

    def test_avg(self) -> None:
        assert Functions.avg()(ONE_TO_TEN) == 5.5
        assert Functions.avg()([]) is None

    def test_avg_with_zero_missing(self) -> None:
        assert Functions.avg(Filters.zero_missing)([1, None, 5]) == 2.0

    def test_max_min(self) -> None:
        assert Functions.max()([3, None, 7, 1]) == 7
        assert Functions.min()([3, None, 7, 1]) == 1
        assert Functions.max()([]) is None

    def test_count(self) -> None:
        assert Functions.count()([1, None, 2]) == 2
        assert Functions.count(Filters.keep_missing)([1, None, 2]) == 3

    def test_first_last_keep_missing_by_default(self) -> None:
        assert Functions.first()([None, 1, 2]) is None
        assert Functions.last()([1, 2, None]) is None
        assert Functions.first(Filters.ignore_missing)([None, 1, 2]) == 1
        assert Functions.last()([]) is None

    def test_keep(self) -> None:
        assert Functions.keep()(["a", "a", None]) == "a"
        assert Functions.keep()(["a", "b"]) is None

    def test_difference(self) -> None:
        assert Functions.difference()([4, 9, 1]) == 8

    def test_median(self) -> None:
        assert Functions.median()([3, 1, 2]) == 2
        assert Functions.median()([4, 1, 3, 2]) == 2.5
        assert Functions.median()([]) is None

    def test_stdev_is_population(self) -> None:
        assert Functions.stdev()([2, 4, 4, 4, 5, 5, 7, 9]) == 2.0

    def test_stdev_divides_by_cleaned_count(self) -> None:
        """Missing values do not count towards the population size."""
        assert Functions.stdev()([2, None, 4]) == 1.0

    def test_stdev_one_to_ten(self) -> None:
        assert Functions.stdev()(ONE_TO_TEN) == pytest.approx(math.sqrt(8.25))

    def test_propagate_missing_returns_none(self) -> None:
        reducer = Functions.avg(Filters.propagate_missing)
        assert reducer([1, None]) is None
        assert reducer([1, 3]) == 2.0


class TestPercentile:
    """Test the percentile reducer."""

    @pytest.mark.parametrize(
        "q, interp, expected",
        [
            (50, "linear", 5.5),
            (0, "linear", 1),
            (100, "linear", 10),
            (25, "lower", 3),
            (25, "higher", 4),
            (25, "linear", 3.25),
            (25, "midpoint", 3.5),
            (25, "nearest", 3),
        ],
    )
    def test_one_to_ten(self, q: float, interp: str, expected: float) -> None:
        assert Functions.percentile(q, interp)(ONE_TO_TEN) == pytest.approx(expected)

    def test_unsorted_input(self) -> None:
        assert Functions.percentile(50)([10, 1, 5]) == 5

    def test_single_value(self) -> None:
        assert Functions.percentile(90)([42]) == 42

    def test_empty_is_none(self) -> None:
        assert Functions.percentile(50)([]) is None

    def test_out_of_range_raises(self) -> None:
        with pytest.raises(ValueError, match="between 0 and 100"):
            Functions.percentile(101)
        with pytest.raises(ValueError):
            Functions.percentile(-1)

    def test_unknown_interpolation_raises(self) -> None:
        with pytest.raises(ValueError):
            Functions.percentile(50, "cubic")
