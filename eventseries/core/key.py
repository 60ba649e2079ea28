"""
Key types for events.

Every Event is keyed by exactly one of three immutable key types:

    Time       a single instant, in milliseconds since the UNIX epoch (UTC)
    TimeRange  a closed interval between two instants
    Index      an ordinal bucket string such as ``"5m-1234"`` or ``"2015-04"``

All keys expose ``timestamp()``, ``begin()`` and ``end()`` in
milliseconds, and a ``canonical()`` form that is unique across the
three types and is used to build the Collection's key index.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Tuple

from eventseries.parser.duration import parse_duration
from eventseries.parser.grammar import DurationParseError
from eventseries.parser.lexer import DurationLexerError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_CALENDAR_INDEX = re.compile(r"^(\d{4})(?:-(\d{2}))?(?:-(\d{2}))?$")
_DURATION_INDEX = re.compile(r"^(.+?)-(-?\d+)$")


def ms_from_datetime(dt: datetime) -> int:
    """Convert a datetime to milliseconds since the epoch (naive is UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def datetime_from_ms(ms: int) -> datetime:
    """Convert milliseconds since the epoch to an aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)


class Key(ABC):
    """
    Base class for all event keys.

    Keys are immutable and hashable. Ordering between keys of any type
    is by ``timestamp()``.
    """

    @abstractmethod
    def timestamp(self) -> int:
        """Representative instant of the key, in ms."""

    @abstractmethod
    def begin(self) -> int:
        """Earliest instant covered by the key, in ms."""

    @abstractmethod
    def end(self) -> int:
        """Latest instant covered by the key, in ms."""

    @abstractmethod
    def to_json(self) -> Any:
        """Plain JSON-compatible representation of the key."""

    @abstractmethod
    def canonical(self) -> str:
        """Type-tagged string that is unique across all key types."""

    @property
    @abstractmethod
    def json_name(self) -> str:
        """Name of the key field in an event's JSON form."""

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self.timestamp() < other.timestamp()


@dataclass(frozen=True, eq=True)
class Time(Key):
    """
    A single instant.

    Attributes:
        ms: Milliseconds since the UNIX epoch (UTC).
    """

    ms: int

    def __post_init__(self) -> None:
        if isinstance(self.ms, datetime):
            object.__setattr__(self, "ms", ms_from_datetime(self.ms))
        elif isinstance(self.ms, bool) or not isinstance(self.ms, (int, float)):
            raise ValueError(f"Time requires milliseconds or a datetime, got {self.ms!r}")
        else:
            object.__setattr__(self, "ms", int(self.ms))

    @classmethod
    def from_datetime(cls, dt: datetime) -> Time:
        return cls(ms_from_datetime(dt))

    def to_datetime(self) -> datetime:
        return datetime_from_ms(self.ms)

    def timestamp(self) -> int:
        return self.ms

    def begin(self) -> int:
        return self.ms

    def end(self) -> int:
        return self.ms

    def to_json(self) -> int:
        return self.ms

    def canonical(self) -> str:
        return f"t:{self.ms}"

    @property
    def json_name(self) -> str:
        return "time"

    def __str__(self) -> str:
        return str(self.ms)


@dataclass(frozen=True, eq=True)
class TimeRange(Key):
    """
    A closed interval of time.

    Attributes:
        begin_ms: Start of the range in ms since the epoch.
        end_ms: End of the range in ms since the epoch.
    """

    begin_ms: int
    end_ms: int

    def __post_init__(self) -> None:
        begin = ms_from_datetime(self.begin_ms) if isinstance(self.begin_ms, datetime) else self.begin_ms
        end = ms_from_datetime(self.end_ms) if isinstance(self.end_ms, datetime) else self.end_ms
        object.__setattr__(self, "begin_ms", int(begin))
        object.__setattr__(self, "end_ms", int(end))
        if self.begin_ms > self.end_ms:
            raise ValueError(
                f"TimeRange begin ({self.begin_ms}) is after end ({self.end_ms})"
            )

    def timestamp(self) -> int:
        return self.begin_ms

    def begin(self) -> int:
        return self.begin_ms

    def end(self) -> int:
        return self.end_ms

    def duration(self) -> int:
        """Length of the range in ms."""
        return self.end_ms - self.begin_ms

    def contains(self, ms: int) -> bool:
        """True when *ms* lies inside the range (inclusive)."""
        return self.begin_ms <= ms <= self.end_ms

    def to_json(self) -> list:
        return [self.begin_ms, self.end_ms]

    def canonical(self) -> str:
        return f"r:{self.begin_ms},{self.end_ms}"

    @property
    def json_name(self) -> str:
        return "timerange"

    def __str__(self) -> str:
        return f"[{self.begin_ms}, {self.end_ms}]"


@dataclass(frozen=True, eq=True)
class Index(Key):
    """
    An ordinal bucket of time, described by a string.

    Supported forms:
        ``"<duration>-<n>"``  the n-th bucket of a fixed duration since the
                              epoch, e.g. ``"5m-4897"`` or ``"1d-16500"``;
                              buckets before the epoch are negative
                              (``"1m--1"``)
        ``"YYYY"``            a calendar year (UTC)
        ``"YYYY-MM"``         a calendar month (UTC)
        ``"YYYY-MM-DD"``      a calendar day (UTC)

    The covered range is half open: ``end()`` is the first instant of
    the next bucket.

    Attributes:
        value: The index string.
    """

    value: str
    _range: Tuple[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_range", _parse_index(self.value))

    def timestamp(self) -> int:
        return self._range[0]

    def begin(self) -> int:
        return self._range[0]

    def end(self) -> int:
        return self._range[1]

    def as_timerange(self) -> TimeRange:
        return TimeRange(self._range[0], self._range[1])

    def to_json(self) -> str:
        return self.value

    def canonical(self) -> str:
        return f"i:{self.value}"

    @property
    def json_name(self) -> str:
        return "index"

    def __str__(self) -> str:
        return self.value


def _parse_index(value: str) -> Tuple[int, int]:
    """Resolve an index string to its ``(begin, end)`` range in ms."""
    if not isinstance(value, str):
        raise ValueError(f"Index requires a string, got {value!r}")

    m = _CALENDAR_INDEX.match(value)
    if m:
        year = int(m.group(1))
        month = int(m.group(2)) if m.group(2) else None
        day = int(m.group(3)) if m.group(3) else None
        try:
            if month is None:
                start = datetime(year, 1, 1, tzinfo=timezone.utc)
                stop = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
            elif day is None:
                start = datetime(year, month, 1, tzinfo=timezone.utc)
                if month == 12:
                    stop = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
                else:
                    stop = datetime(year, month + 1, 1, tzinfo=timezone.utc)
            else:
                start = datetime(year, month, day, tzinfo=timezone.utc)
                stop = start + timedelta(days=1)
        except ValueError as exc:
            raise ValueError(f"Invalid calendar index '{value}'") from exc
        return ms_from_datetime(start), ms_from_datetime(stop)

    m = _DURATION_INDEX.match(value)
    if m:
        try:
            size = parse_duration(m.group(1))
        except (DurationParseError, DurationLexerError) as exc:
            raise ValueError(f"Invalid index duration in '{value}'") from exc
        n = int(m.group(2))
        return n * size, (n + 1) * size

    raise ValueError(f"Unrecognised index string '{value}'")
