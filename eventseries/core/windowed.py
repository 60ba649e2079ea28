"""
Fixed-window partitioning of a Collection.

Each event falls into the window ``timestamp // period``; windows are
named by ``Index`` strings such as ``"5m-4897"``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Union

from eventseries.core.collection import Collection
from eventseries.core.event import Event
from eventseries.core.grouped import AggregationSpec
from eventseries.core.key import Index
from eventseries.parser.duration import format_duration, parse_duration


class WindowedCollection:
    """
    A Collection partitioned into fixed, epoch-aligned windows.

    Attributes:
        period_ms: Window length in milliseconds.
        period: Canonical duration string of the window length.
    """

    def __init__(self, period: Union[str, int], collection: Collection) -> None:
        self.period_ms: int = parse_duration(period)
        self.period: str = format_duration(self.period_ms)
        buckets: Dict[int, List[Event]] = {}
        for event in collection:
            buckets.setdefault(event.timestamp() // self.period_ms, []).append(event)
        self._windows = MappingProxyType(
            {
                self._index_string(n): collection.replace_all(buckets[n])
                for n in sorted(buckets)
            }
        )

    def _index_string(self, n: int) -> str:
        return f"{self.period}-{n}"

    def windows(self) -> Mapping[str, Collection]:
        """Read-only mapping of index string to its Collection, in time order."""
        return self._windows

    def keys(self) -> List[str]:
        return list(self._windows)

    def get(self, index: str) -> Collection:
        """The window named *index*, or an empty Collection."""
        return self._windows.get(index, Collection())

    def __len__(self) -> int:
        return len(self._windows)

    def __iter__(self) -> Iterator[str]:
        return iter(self._windows)

    def aggregate(self, spec: AggregationSpec) -> Collection:
        """
        Aggregate every window into one Index-keyed event.

        Args:
            spec: Mapping of output name to ``(field_path, reducer)``.

        Returns:
            A Collection with one event per window, in time order.
        """
        events: List[Event] = []
        for index, window in self._windows.items():
            data: Dict[str, Any] = {
                name: window.aggregate(reducer, path)
                for name, (path, reducer) in spec.items()
            }
            events.append(Event(Index(index), data))
        return Collection(events)
