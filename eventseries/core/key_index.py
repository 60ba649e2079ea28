"""
Key index for event sequences.

Maps the canonical string of every event key to the set of positions
holding that key. Canonical strings carry a type tag, so a Time, a
TimeRange and an Index never collide with each other; two keys of the
same type collide only when they are equal.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from pyrsistent import PMap, pmap, pset

from eventseries.core.event import Event
from eventseries.core.key import Key


def key_string(key: Key) -> str:
    """Canonical index string for *key*."""
    return key.canonical()


def build_index(events: Iterable[Event]) -> PMap:
    """
    Build the key index of a sequence in a single pass.

    Args:
        events: The events, in sequence order.

    Returns:
        Persistent map of canonical key string to a persistent set of
        positions.
    """
    positions: Dict[str, List[int]] = {}
    for i, event in enumerate(events):
        positions.setdefault(key_string(event.key), []).append(i)
    return pmap({k: pset(p) for k, p in positions.items()})
