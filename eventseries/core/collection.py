"""
Persistent, key-indexed collection of events.

A Collection holds an ordered (but not necessarily sorted) sequence of
Events together with an index from each event's canonical key string to
the positions holding that key. Collections never change: every
operation that would modify one returns a new Collection, sharing
structure with the old one through pyrsistent's persistent vectors and
maps.

The index is kept exactly consistent with the sequence. Appends update
it incrementally; anything that shifts positions (dedup removals, key
removal, reordering by an on-insert strategy, slicing, sorting) rebuilds
it in one pass.
"""

from __future__ import annotations

import json
import math
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    TYPE_CHECKING,
    Sequence,
    Union,
)

from pyrsistent import PMap, PVector, pmap, pset, pvector

from eventseries.core.event import (
    DEFAULT_FIELD,
    Event,
    FieldPath,
    field_path_to_string,
)
from eventseries.core.functions import (
    Filter,
    Functions,
    InterpolationType,
    Reducer,
    interpolate,
)
from eventseries.core.key import Key, TimeRange
from eventseries.core.key_index import build_index, key_string

if TYPE_CHECKING:
    from eventseries.core.grouped import GroupedCollection
    from eventseries.core.windowed import WindowedCollection
    from eventseries.processors.align import AlignOptions
    from eventseries.processors.base import Processor
    from eventseries.processors.collapse import CollapseOptions
    from eventseries.processors.rate import RateOptions

OnInsert = Callable[[PVector], PVector]
Dedup = Union[bool, Callable[[List[Event]], Event], None]
FieldSpec = Union[str, Sequence[FieldPath], None]


class QuantileError(ValueError):
    """Raised when a quantile is requested that the collection cannot supply."""

    pass


def _identity(events: PVector) -> PVector:
    """Default on-insert strategy: keep the sequence as appended."""
    return events


class Collection:
    """
    An immutable, ordered collection of Events indexed by key.

    Construction::

        Collection()                      # empty
        Collection(other)                 # shares other's state and strategy
        Collection([e1, e2, e3])          # index built eagerly
        Collection(events, on_insert=keep_chronological)

    Attributes:
        on_insert: Strategy called with the appended sequence after every
            insert. Returning the same sequence object keeps the index
            update incremental; returning a different one (e.g. re-sorted)
            triggers a full index rebuild.
    """

    __slots__ = ("_events", "_index", "_on_insert")

    def __init__(
        self,
        events: Union[Collection, Iterable[Event], None] = None,
        on_insert: Optional[OnInsert] = None,
    ) -> None:
        if isinstance(events, Collection):
            self._events: PVector = events._events
            self._index: PMap = events._index
            self._on_insert: OnInsert = on_insert or events._on_insert
        else:
            self._events = pvector(events) if events is not None else pvector()
            self._index = build_index(self._events)
            self._on_insert = on_insert or _identity

    @classmethod
    def from_sequence(
        cls, events: Iterable[Event], on_insert: Optional[OnInsert] = None
    ) -> Collection:
        """Build a Collection from an ordered iterable of events."""
        return cls(events, on_insert=on_insert)

    def _clone(self, events: PVector, index: PMap) -> Collection:
        """New Collection with the given state and this one's strategy."""
        c = type(self).__new__(type(self))
        c._events = events
        c._index = index
        c._on_insert = self._on_insert
        return c

    @property
    def on_insert(self) -> OnInsert:
        return self._on_insert

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #

    def to_json(self) -> List[Dict[str, Any]]:
        """The events as a plain list of dicts, in sequence order."""
        return [event.to_json() for event in self._events]

    def to_string(self) -> str:
        """JSON string form of :meth:`to_json`."""
        return json.dumps(self.to_json())

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Collection(size={len(self._events)})"

    # ------------------------------------------------------------------ #
    # Mutation (each returns a new Collection)
    # ------------------------------------------------------------------ #

    def insert(self, event: Event, dedup: Dedup = None) -> Collection:
        """
        Return a new Collection with *event* appended.

        Args:
            event: The event to add.
            dedup: How to treat existing events with the same key.
                ``None``/``False`` keeps them all. ``True`` replaces them
                with *event*. A callable receives the existing events
                followed by *event* and must return the single event that
                replaces them all, under the same key.

        Returns:
            The new Collection.

        Raises:
            ValueError: If a dedup callable returns an event with a
                different key.
        """
        k = key_string(event.key)
        events = self._events
        index: Optional[PMap] = self._index

        if dedup:
            conflicts = self.at_key(event.key)
            if conflicts:
                events = pvector(e for e in events if key_string(e.key) != k)
                if callable(dedup):
                    merged = dedup(list(conflicts) + [event])
                    if key_string(merged.key) != k:
                        raise ValueError(
                            f"Dedup function must keep the key {event.key}, "
                            f"got {merged.key}"
                        )
                    event = merged
                # Remaining positions shifted
                index = None

        appended = events.append(event)
        result = self._on_insert(appended)

        if result is appended and index is not None:
            positions = index.get(k, pset())
            index = index.set(k, positions.add(len(appended) - 1))
        else:
            index = build_index(result)

        return self._clone(result, index)

    def add_event(self, event: Event, dedup: Dedup = None) -> Collection:
        """Alias of :meth:`insert`."""
        return self.insert(event, dedup)

    def remove_by_key(self, key: Key) -> Collection:
        """
        Return a new Collection without any event keyed by *key*.

        Removing an absent key yields an equivalent Collection.
        """
        k = key_string(key)
        positions = self._index.get(k)
        if not positions:
            return self._clone(self._events, self._index)
        events = pvector(e for i, e in enumerate(self._events) if i not in positions)
        return self._clone(events, build_index(events))

    def replace_all(self, events: Iterable[Event]) -> Collection:
        """Return a new Collection holding exactly *events*, index rebuilt."""
        events = pvector(events)
        return self._clone(events, build_index(events))

    # ------------------------------------------------------------------ #
    # Access
    # ------------------------------------------------------------------ #

    def size(self) -> int:
        """Number of events."""
        return len(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def size_valid(self, field_path: FieldPath = DEFAULT_FIELD) -> int:
        """Number of events whose value at *field_path* is not None or NaN."""
        return sum(1 for e in self._events if e.is_valid(field_path))

    def is_empty(self) -> bool:
        return len(self._events) == 0

    def at(self, pos: int) -> Event:
        """Event at position *pos* (negative positions count from the end)."""
        return self._events[pos]

    def at_key(self, key: Key) -> PVector:
        """All events keyed by *key*, in sequence order (empty if none)."""
        positions = self._index.get(key_string(key), pset())
        return pvector(self._events[i] for i in sorted(positions))

    def first_event(self) -> Optional[Event]:
        """First event, or None when empty."""
        return self._events[0] if self._events else None

    def last_event(self) -> Optional[Event]:
        """Last event, or None when empty."""
        return self._events[-1] if self._events else None

    def event_list(self) -> PVector:
        return self._events

    def event_map(self) -> PMap:
        """Canonical key string to the events with that key."""
        return pmap(
            {k: pvector(self._events[i] for i in sorted(p)) for k, p in self._index.items()}
        )

    def key_index(self) -> PMap:
        """The canonical key string to positions index."""
        return self._index

    # ------------------------------------------------------------------ #
    # Structural transforms
    # ------------------------------------------------------------------ #

    def slice(self, begin: Optional[int] = None, end: Optional[int] = None) -> Collection:
        """Events from position *begin* up to but not including *end*."""
        return self.replace_all(self._events[begin:end])

    def rest(self) -> Collection:
        """All events except the first."""
        return self.replace_all(self._events[1:])

    def take_last(self, amount: int) -> Collection:
        """The last *amount* events."""
        if amount <= 0:
            return self.replace_all([])
        return self.replace_all(self._events[-amount:])

    def sort_by_key(self) -> Collection:
        """
        Stable sort by key timestamp (the begin time for TimeRange and
        Index keys).
        """
        return Collection(sorted(self._events, key=lambda e: e.timestamp()))

    def sort(self, field_path: FieldPath = DEFAULT_FIELD) -> Collection:
        """
        Stable ascending sort by the value at *field_path*.

        Events whose value is missing are placed after all others.
        """

        def sort_key(event: Event):
            value = event.get(field_path)
            if event.is_valid(field_path):
                return (0, value)
            return (1, 0)

        return Collection(sorted(self._events, key=sort_key))

    def map(self, mapper: Callable[[Event], Event]) -> Collection:
        """New Collection of ``mapper(event)`` for every event."""
        return Collection([mapper(e) for e in self._events])

    def flat_map(self, mapper: Callable[[Event], Iterable[Event]]) -> Collection:
        """New Collection of all events returned by *mapper*, flattened in order."""
        return Collection([out for e in self._events for out in mapper(e)])

    def map_keys(self, mapper: Callable[[Key], Key]) -> Collection:
        """New Collection with every key replaced by ``mapper(key)``, data kept."""
        return Collection([Event(mapper(e.key), e.data) for e in self._events])

    def group_by(self, field_path: FieldPath) -> GroupedCollection:
        """Partition events by the value at *field_path*."""
        from eventseries.core.grouped import GroupedCollection

        return GroupedCollection(field_path, self)

    def window(self, period: Union[str, int]) -> WindowedCollection:
        """Partition events into fixed windows of *period*."""
        from eventseries.core.windowed import WindowedCollection

        return WindowedCollection(period, self)

    def is_chronological(self) -> bool:
        """True if no event's timestamp is earlier than the one before it."""
        previous: Optional[int] = None
        for event in self._events:
            t = event.timestamp()
            if previous is not None and t < previous:
                return False
            previous = t
        return True

    def timerange(self) -> Optional[TimeRange]:
        """Range from the earliest begin to the latest end, or None when empty."""
        if not self._events:
            return None
        begin = min(e.begin() for e in self._events)
        end = max(e.end() for e in self._events)
        return TimeRange(begin, end)

    # ------------------------------------------------------------------ #
    # Aggregation
    # ------------------------------------------------------------------ #

    def aggregate(self, reducer: Reducer, field_spec: FieldSpec = DEFAULT_FIELD) -> Any:
        """
        Reduce the values at *field_spec* across all events.

        Args:
            reducer: Function from a list of values to one value.
            field_spec: A single field path (dotted string), or a list or
                tuple of field paths.

        Returns:
            A single value for one path, or a dict keyed by dotted path
            for a list of paths.
        """
        if isinstance(field_spec, (list, tuple)):
            return {
                field_path_to_string(path): reducer([e.get(path) for e in self._events])
                for path in field_spec
            }
        return reducer([e.get(field_spec) for e in self._events])

    def first(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.first, filter_func), field_spec)

    def last(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.last, filter_func), field_spec)

    def sum(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.sum, filter_func), field_spec)

    def avg(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.avg, filter_func), field_spec)

    def max(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.max, filter_func), field_spec)

    def min(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.min, filter_func), field_spec)

    def count(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.count, filter_func), field_spec)

    def median(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.median, filter_func), field_spec)

    def stdev(self, field_spec: FieldSpec = DEFAULT_FIELD, filter_func: Optional[Filter] = None) -> Any:
        return self.aggregate(_bind(Functions.stdev, filter_func), field_spec)

    def percentile(
        self,
        q: float,
        field_spec: FieldSpec = DEFAULT_FIELD,
        interpolation: Union[InterpolationType, str] = InterpolationType.LINEAR,
        filter_func: Optional[Filter] = None,
    ) -> Any:
        """The *q*-th percentile (0 to 100) of the values at *field_spec*."""
        if filter_func is None:
            reducer = Functions.percentile(q, interpolation)
        else:
            reducer = Functions.percentile(q, interpolation, filter_func)
        return self.aggregate(reducer, field_spec)

    def quantile(
        self,
        n: int,
        field_path: FieldPath = DEFAULT_FIELD,
        interpolation: Union[InterpolationType, str] = InterpolationType.LINEAR,
    ) -> List[float]:
        """
        The ``n - 1`` cut points dividing the values at *field_path* into
        *n* equal-sized groups, the same way NumPy computes percentiles.

        For each ``i = k / n`` (``k = 1 .. n-1``), the position
        ``(size - 1) * i`` in the sorted values is split into an integer
        index and a fraction, and the two neighbouring values are combined
        with *interpolation*.

        Missing values (None or NaN) sort after all others and are read
        as NaN, so a cut point that touches one is NaN.

        Raises:
            QuantileError: If *n* is less than 1 or larger than the
                collection.
            ValueError: If *interpolation* is not a known mode.
        """
        mode = InterpolationType(interpolation)
        size = self.size()
        if n > size:
            raise QuantileError(
                f"Subset n ({n}) is greater than the Collection length ({size})"
            )
        if n < 1:
            raise QuantileError(f"Subset n must be at least 1, got {n}")

        ordered = self.sort(field_path)
        results: List[float] = []
        for k in range(1, n):
            position = (size - 1) * (k / n)
            index = math.floor(position)
            if index < size - 1:
                fraction = position - index
                v0 = _as_float(ordered.at(index), field_path)
                v1 = _as_float(ordered.at(index + 1), field_path)
                results.append(interpolate(v0, v1, fraction, mode))
        return results

    # ------------------------------------------------------------------ #
    # Stream processors
    # ------------------------------------------------------------------ #

    def process(self, processor: Processor) -> Collection:
        """Feed every event, in order, through *processor* and collect its output."""
        return self.flat_map(processor.add_event)

    def align(self, options: AlignOptions) -> Collection:
        """Resample onto fixed period boundaries (see ``Align``)."""
        from eventseries.processors.align import Align

        return self.process(Align(options))

    def rate(self, options: Optional[RateOptions] = None) -> Collection:
        """Rate of change between consecutive events (see ``Rate``)."""
        from eventseries.processors.rate import Rate, RateOptions

        return self.process(Rate(options or RateOptions()))

    def collapse(self, options: CollapseOptions) -> Collection:
        """
        Collapse several fields of every event into one (see ``Collapse``).

        Raises:
            ProcessorError: If the processor emits anything but exactly
                one event for an input event.
        """
        from eventseries.processors.base import ProcessorError
        from eventseries.processors.collapse import Collapse

        processor = Collapse(options)

        def collapse_one(event: Event) -> Event:
            out = processor.add_event(event)
            if len(out) != 1:
                raise ProcessorError(
                    f"Collapse must emit exactly one event per input, got {len(out)}"
                )
            return out[0]

        return self.map(collapse_one)


def _as_float(event: Event, field_path: FieldPath) -> float:
    """Numeric value at *field_path*, NaN when missing."""
    if not event.is_valid(field_path):
        return math.nan
    return float(event.get(field_path))


def _bind(factory: Callable[..., Reducer], filter_func: Optional[Filter]) -> Reducer:
    """Instantiate a reducer, overriding its default cleaner if given."""
    if filter_func is None:
        return factory()
    return factory(filter_func)
