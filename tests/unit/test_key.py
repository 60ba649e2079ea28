"""
Tests for the Time, TimeRange and Index key types.

Tests cover construction, datetime conversion, begin/end/timestamp
accessors, index string parsing, canonical strings and ordering.
"""

from datetime import datetime, timezone

import pytest

from eventseries.core.key import Index, Time, TimeRange


T0 = 1429673400000  # 2015-04-22T03:30:00Z


class TestTime:
    """Test the Time key."""

    def test_from_ms(self) -> None:
        t = Time(T0)
        assert t.timestamp() == T0
        assert t.begin() == t.end() == T0

    def test_from_datetime(self) -> None:
        """Aware datetimes convert to epoch milliseconds."""
        dt = datetime(2015, 4, 22, 3, 30, tzinfo=timezone.utc)
        assert Time.from_datetime(dt).ms == T0
        assert Time(dt).ms == T0

    def test_naive_datetime_is_utc(self) -> None:
        assert Time(datetime(2015, 4, 22, 3, 30)).ms == T0

    def test_to_datetime(self) -> None:
        assert Time(T0).to_datetime() == datetime(2015, 4, 22, 3, 30, tzinfo=timezone.utc)

    def test_string_and_json(self) -> None:
        assert str(Time(T0)) == str(T0)
        assert Time(T0).to_json() == T0

    def test_invalid_value_raises(self) -> None:
        with pytest.raises(ValueError):
            Time("yesterday")  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Time(T0).ms = 5  # type: ignore[misc]

    def test_equality_and_hash(self) -> None:
        assert Time(T0) == Time(T0)
        assert len({Time(T0), Time(T0), Time(T0 + 1)}) == 2


class TestTimeRange:
    """Test the TimeRange key."""

    def test_accessors(self) -> None:
        r = TimeRange(1000, 5000)
        assert r.begin() == 1000
        assert r.end() == 5000
        assert r.timestamp() == 1000
        assert r.duration() == 4000

    def test_contains_is_inclusive(self) -> None:
        r = TimeRange(1000, 5000)
        assert r.contains(1000)
        assert r.contains(5000)
        assert not r.contains(5001)

    def test_begin_after_end_raises(self) -> None:
        with pytest.raises(ValueError, match="after end"):
            TimeRange(5000, 1000)

    def test_json(self) -> None:
        assert TimeRange(1, 2).to_json() == [1, 2]


class TestIndex:
    """Test Index string parsing."""

    def test_duration_index(self) -> None:
        """'5m-100' is the 100th five-minute bucket since the epoch."""
        idx = Index("5m-100")
        assert idx.begin() == 100 * 300_000
        assert idx.end() == 101 * 300_000
        assert idx.timestamp() == idx.begin()

    def test_negative_duration_index(self) -> None:
        """Buckets before the epoch carry a negative number."""
        idx = Index("1m--1")
        assert idx.begin() == -60_000
        assert idx.end() == 0

    def test_year_index(self) -> None:
        idx = Index("2015")
        assert idx.begin() == 1420070400000
        assert idx.end() == 1451606400000

    def test_month_index(self) -> None:
        idx = Index("2015-04")
        assert idx.begin() == 1427846400000
        assert idx.end() == 1430438400000

    def test_december_rolls_into_next_year(self) -> None:
        assert Index("2015-12").end() == 1451606400000

    def test_day_index(self) -> None:
        idx = Index("2015-04-22")
        assert idx.begin() == 1429660800000
        assert idx.end() == 1429660800000 + 86_400_000
        assert idx.as_timerange() == TimeRange(idx.begin(), idx.end())

    def test_invalid_calendar_raises(self) -> None:
        with pytest.raises(ValueError, match="calendar"):
            Index("2015-13")

    def test_invalid_duration_raises(self) -> None:
        with pytest.raises(ValueError, match="duration"):
            Index("5q-1")

    def test_unrecognised_raises(self) -> None:
        with pytest.raises(ValueError, match="Unrecognised"):
            Index("yesterday")

    def test_string_and_json(self) -> None:
        assert str(Index("1d-3")) == "1d-3"
        assert Index("1d-3").to_json() == "1d-3"

    def test_equality_ignores_parsed_range(self) -> None:
        assert Index("1d-3") == Index("1d-3")
        assert hash(Index("1d-3")) == hash(Index("1d-3"))


class TestCanonical:
    """Test canonical index strings."""

    def test_type_tags(self) -> None:
        assert Time(5).canonical() == "t:5"
        assert TimeRange(1, 2).canonical() == "r:1,2"
        assert Index("5m-1").canonical() == "i:5m-1"

    def test_distinct_types_never_collide(self) -> None:
        """A Time and an Index that print alike stay distinct."""
        assert str(Time(2015)) == str(Index("2015"))
        assert Time(2015).canonical() != Index("2015").canonical()


class TestOrdering:
    """Keys of any type order by timestamp."""

    def test_time_ordering(self) -> None:
        assert Time(1) < Time(2)

    def test_mixed_ordering(self) -> None:
        assert TimeRange(0, 10) < Time(5)
        assert sorted([Time(300_000), Index("1m-0")]) == [Index("1m-0"), Time(300_000)]
