"""
JSON series file loader.

Reads the structural dump produced by ``Collection.to_json()`` back into
a Collection. A file holds either the bare list of events::

    [{"time": 1429673400000, "data": {"value": 1}}, ...]

or an object with an optional name::

    {"name": "traffic", "events": [...]}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from eventseries.core.collection import Collection, Dedup
from eventseries.core.event import Event


class SeriesReaderError(ValueError):
    """Exception raised for malformed series files."""

    pass


@dataclass
class SeriesMetadata:
    """
    Metadata extracted from a series file.

    Attributes:
        name: Series name, if the file provides one.
        event_count: Number of events read from the file.
        key_type: ``"time"``, ``"timerange"``, ``"index"``, ``"mixed"``,
            or None for an empty file.
    """

    name: Optional[str]
    event_count: int
    key_type: Optional[str] = None


@dataclass
class SeriesData:
    """
    A loaded series.

    Attributes:
        collection: The events, in file order (after any dedup).
        metadata: Series metadata.
    """

    collection: Collection
    metadata: SeriesMetadata


class SeriesReader:
    """
    Parses JSON series files into Collections.

    Attributes:
        filepath: Path to the JSON file.
    """

    def __init__(self, filepath: Path) -> None:
        self.filepath: Path = Path(filepath)

    def read_all(self, dedup: Dedup = None) -> SeriesData:
        """
        Read every event into a Collection.

        Args:
            dedup: Dedup policy applied as each event is inserted
                (see ``Collection.insert``).

        Returns:
            SeriesData with the Collection and metadata.

        Raises:
            SeriesReaderError: If the file is not valid JSON or an event
                cannot be decoded.
        """
        name, raw_events = self._load()
        events = self._decode(raw_events)

        if dedup:
            collection = Collection()
            for event in events:
                collection = collection.insert(event, dedup)
        else:
            collection = Collection.from_sequence(events)

        key_types = {e.key.json_name for e in events}
        if not key_types:
            key_type = None
        elif len(key_types) == 1:
            key_type = key_types.pop()
        else:
            key_type = "mixed"

        metadata = SeriesMetadata(name=name, event_count=len(events), key_type=key_type)
        return SeriesData(collection=collection, metadata=metadata)

    def _load(self) -> tuple:
        """Return ``(name, raw event list)`` from the file."""
        try:
            payload: Any = json.loads(self.filepath.read_text())
        except json.JSONDecodeError as exc:
            raise SeriesReaderError(f"{self.filepath}: invalid JSON ({exc})") from exc

        if isinstance(payload, list):
            return None, payload
        if isinstance(payload, dict) and isinstance(payload.get("events"), list):
            return payload.get("name"), payload["events"]
        raise SeriesReaderError(
            f"{self.filepath}: expected a list of events or an object with 'events'"
        )

    def _decode(self, raw_events: List[Any]) -> List[Event]:
        events: List[Event] = []
        for position, raw in enumerate(raw_events):
            if not isinstance(raw, dict):
                raise SeriesReaderError(
                    f"{self.filepath}: event {position} is not an object"
                )
            try:
                events.append(Event.from_json(raw))
            except (ValueError, TypeError) as exc:
                raise SeriesReaderError(
                    f"{self.filepath}: event {position}: {exc}"
                ) from exc
        return events
