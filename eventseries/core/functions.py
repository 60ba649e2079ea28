"""
Reducer library for aggregation.

``Filters`` clean a list of raw field values before reduction, deciding
what happens to missing values (None or NaN). ``Functions`` are reducer
factories: each takes an optional ``clean`` filter and returns a function
mapping a list of values to a single value.

Example::

    avg = Functions.avg(clean=Filters.zero_missing)
    avg([1, None, 5])   # -> 2.0
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from eventseries.core.event import is_valid_value

Values = List[Any]
Filter = Callable[[Values], Optional[Values]]
Reducer = Callable[[Values], Any]


class InterpolationType(str, Enum):
    """
    How to combine two neighbouring sorted values when a requested
    percentile or quantile falls between them.

    LOWER:    the lower value
    LINEAR:   ``v0 + (v1 - v0) * fraction``
    HIGHER:   the higher value
    NEAREST:  whichever value the fraction is closer to
    MIDPOINT: the mean of the two values
    """

    LOWER = "lower"
    LINEAR = "linear"
    HIGHER = "higher"
    NEAREST = "nearest"
    MIDPOINT = "midpoint"


def interpolate(
    v0: float,
    v1: float,
    fraction: float,
    mode: Union[InterpolationType, str] = InterpolationType.LINEAR,
) -> float:
    """
    Combine neighbouring values *v0* <= *v1* for a position *fraction*
    of the way between them.

    A fraction of zero sits exactly on *v0*, which is returned for every
    mode.

    Raises:
        ValueError: If *mode* is not a known interpolation type.
    """
    mode = InterpolationType(mode)
    if fraction == 0 or mode is InterpolationType.LOWER:
        return v0
    if mode is InterpolationType.LINEAR:
        return v0 + (v1 - v0) * fraction
    if mode is InterpolationType.HIGHER:
        return v1
    if mode is InterpolationType.NEAREST:
        return v0 if fraction < 0.5 else v1
    return (v0 + v1) / 2


class Filters:
    """
    Cleaners applied to raw values before a reducer runs.

    Each returns a new list, or None to signal that the reducer must
    return None.
    """

    @staticmethod
    def keep_missing(values: Values) -> Values:
        """Leave values untouched."""
        return list(values)

    @staticmethod
    def ignore_missing(values: Values) -> Values:
        """Drop None and NaN values."""
        return [v for v in values if is_valid_value(v)]

    @staticmethod
    def zero_missing(values: Values) -> Values:
        """Replace None and NaN values with 0."""
        return [v if is_valid_value(v) else 0 for v in values]

    @staticmethod
    def propagate_missing(values: Values) -> Optional[Values]:
        """None if any value is missing, otherwise the values."""
        if any(not is_valid_value(v) for v in values):
            return None
        return list(values)

    @staticmethod
    def none_if_empty(values: Values) -> Optional[Values]:
        """None for an empty list, otherwise the values."""
        if not values:
            return None
        return list(values)


class Functions:
    """Reducer factories used by ``Collection.aggregate`` and friends."""

    @staticmethod
    def keep(clean: Filter = Filters.ignore_missing) -> Reducer:
        """The common value if all values are equal, else None."""

        def keep_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if not cleaned:
                return None
            first = cleaned[0]
            return first if all(v == first for v in cleaned) else None

        return keep_reducer

    @staticmethod
    def sum(clean: Filter = Filters.ignore_missing) -> Reducer:
        def sum_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if cleaned is None:
                return None
            return sum(cleaned)

        return sum_reducer

    @staticmethod
    def avg(clean: Filter = Filters.ignore_missing) -> Reducer:
        def avg_reducer(values: Values) -> Optional[float]:
            cleaned = clean(values)
            if not cleaned:
                return None
            return sum(cleaned) / len(cleaned)

        return avg_reducer

    @staticmethod
    def max(clean: Filter = Filters.ignore_missing) -> Reducer:
        def max_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if not cleaned:
                return None
            return max(cleaned)

        return max_reducer

    @staticmethod
    def min(clean: Filter = Filters.ignore_missing) -> Reducer:
        def min_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if not cleaned:
                return None
            return min(cleaned)

        return min_reducer

    @staticmethod
    def count(clean: Filter = Filters.ignore_missing) -> Reducer:
        def count_reducer(values: Values) -> Optional[int]:
            cleaned = clean(values)
            if cleaned is None:
                return None
            return len(cleaned)

        return count_reducer

    @staticmethod
    def first(clean: Filter = Filters.keep_missing) -> Reducer:
        def first_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if not cleaned:
                return None
            return cleaned[0]

        return first_reducer

    @staticmethod
    def last(clean: Filter = Filters.keep_missing) -> Reducer:
        def last_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if not cleaned:
                return None
            return cleaned[-1]

        return last_reducer

    @staticmethod
    def difference(clean: Filter = Filters.ignore_missing) -> Reducer:
        """Spread between the largest and smallest value."""

        def difference_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if not cleaned:
                return None
            return max(cleaned) - min(cleaned)

        return difference_reducer

    @staticmethod
    def median(clean: Filter = Filters.ignore_missing) -> Reducer:
        def median_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if not cleaned:
                return None
            ordered = sorted(cleaned)
            mid = len(ordered) // 2
            if len(ordered) % 2 == 0:
                return (ordered[mid - 1] + ordered[mid]) / 2
            return ordered[mid]

        return median_reducer

    @staticmethod
    def stdev(clean: Filter = Filters.ignore_missing) -> Reducer:
        """Population standard deviation."""

        def stdev_reducer(values: Values) -> Optional[float]:
            cleaned = clean(values)
            if not cleaned:
                return None
            mean = sum(cleaned) / len(cleaned)
            squares = sum((v - mean) ** 2 for v in cleaned)
            return math.sqrt(squares / len(cleaned))

        return stdev_reducer

    @staticmethod
    def percentile(
        q: float,
        interp: Union[InterpolationType, str] = InterpolationType.LINEAR,
        clean: Filter = Filters.ignore_missing,
    ) -> Reducer:
        """
        The *q*-th percentile (0 to 100) of the values, NumPy style.

        Raises:
            ValueError: If *q* is outside 0..100 or *interp* is unknown.
        """
        if not 0 <= q <= 100:
            raise ValueError(f"Percentile must be between 0 and 100, got {q}")
        mode = InterpolationType(interp)

        def percentile_reducer(values: Values) -> Any:
            cleaned = clean(values)
            if not cleaned:
                return None
            ordered = sorted(cleaned)
            size = len(ordered)
            if size == 1 or q == 0:
                return ordered[0]
            if q == 100:
                return ordered[-1]

            position = (size - 1) * (q / 100)
            index = math.floor(position)
            fraction = position - index
            return interpolate(ordered[index], ordered[index + 1], fraction, mode)

        return percentile_reducer
