"""
On-insert ordering strategies.

A Collection calls its ``on_insert`` strategy with the freshly appended
sequence after every insert. ``keep_chronological`` keeps a Collection
sorted by key timestamp, re-sorting only when the appended event lands
out of order.
"""

from __future__ import annotations

from typing import Iterable, Optional

from pyrsistent import PVector, pvector

from eventseries.core.collection import Collection
from eventseries.core.event import Event


def keep_chronological(events: PVector) -> PVector:
    """
    Return *events* unchanged if the last event is in order, otherwise a
    new, stably re-sorted sequence.
    """
    if len(events) < 2 or events[-1].timestamp() >= events[-2].timestamp():
        return events
    return pvector(sorted(events, key=lambda e: e.timestamp()))


def sorted_collection(events: Optional[Iterable[Event]] = None) -> Collection:
    """
    A Collection that stays in chronological order as events are inserted.

    Args:
        events: Optional initial events, sorted by key on construction.

    Returns:
        A Collection using :func:`keep_chronological`.
    """
    initial = sorted(events or [], key=lambda e: e.timestamp())
    return Collection(initial, on_insert=keep_chronological)
