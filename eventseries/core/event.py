"""
Event representation for time series collections.

An Event pairs a key (a Time, TimeRange or Index) with a deep-frozen
mapping of field values. Fields are addressed by a field path, either a
dotted string (``"in.bytes"``) or a list/tuple of segments.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pyrsistent import PMap, freeze, pmap, thaw

from eventseries.core.key import Index, Key, Time, TimeRange

FieldPath = Union[str, Sequence[str], None]

DEFAULT_FIELD = "value"


def field_path_as_list(field_path: FieldPath) -> List[str]:
    """
    Normalise a field path into a list of segments.

    ``None`` means the default ``"value"`` field; a dotted string is split
    on ``"."``; lists and tuples are copied as they are.
    """
    if field_path is None:
        return [DEFAULT_FIELD]
    if isinstance(field_path, str):
        return field_path.split(".")
    if isinstance(field_path, (list, tuple)):
        return list(field_path)
    raise ValueError(f"Invalid field path: {field_path!r}")


def field_path_to_string(field_path: FieldPath) -> str:
    """Dotted string form of a field path."""
    return ".".join(field_path_as_list(field_path))


def is_valid_value(value: Any) -> bool:
    """True unless *value* is None or a float NaN."""
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return True


@dataclass(frozen=True)
class Event:
    """
    Immutable record of field values at a key.

    Attributes:
        key: The event's Time, TimeRange or Index key.
        data: Deep-frozen mapping of field name to value.
    """

    key: Key
    data: PMap

    def __post_init__(self) -> None:
        """Validate the key and freeze the data payload."""
        if not isinstance(self.key, Key):
            raise ValueError(f"Event key must be a Time, TimeRange or Index, got {self.key!r}")
        data = self.data
        if data is None:
            data = pmap()
        elif not isinstance(data, Mapping):
            # A bare value is stored under the default field
            data = {DEFAULT_FIELD: data}
        object.__setattr__(self, "data", freeze(dict(data)))

    # ------------------------------------------------------------------ #
    # Key access
    # ------------------------------------------------------------------ #

    def timestamp(self) -> int:
        """Representative instant of the key, in ms."""
        return self.key.timestamp()

    def begin(self) -> int:
        """Earliest instant covered by the key, in ms."""
        return self.key.begin()

    def end(self) -> int:
        """Latest instant covered by the key, in ms."""
        return self.key.end()

    # ------------------------------------------------------------------ #
    # Field access
    # ------------------------------------------------------------------ #

    def get(self, field_path: FieldPath = DEFAULT_FIELD) -> Any:
        """
        Read the value at *field_path*.

        Args:
            field_path: Dotted string or list of path segments.

        Returns:
            The value, or None if any segment is missing.
        """
        value: Any = self.data
        for segment in field_path_as_list(field_path):
            if not isinstance(value, Mapping) or segment not in value:
                return None
            value = value[segment]
        return value

    def is_valid(self, field_path: FieldPath = DEFAULT_FIELD) -> bool:
        """True when the value at *field_path* is not None or NaN."""
        return is_valid_value(self.get(field_path))

    def set_data(self, data: Mapping[str, Any]) -> Event:
        """Return a new Event with the same key and new data."""
        return Event(self.key, data)

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #

    def to_json(self) -> Dict[str, Any]:
        """Plain dict form, e.g. ``{"time": 1429673400000, "data": {...}}``."""
        return {self.key.json_name: self.key.to_json(), "data": thaw(self.data)}

    def to_string(self) -> str:
        """JSON string form of :meth:`to_json`."""
        return json.dumps(self.to_json())

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> Event:
        """
        Build an Event from its :meth:`to_json` form.

        Raises:
            ValueError: If no recognised key field is present.
        """
        data: Optional[Mapping[str, Any]] = obj.get("data", {})
        if "time" in obj:
            return cls(Time(obj["time"]), data)
        if "timerange" in obj:
            begin, end = obj["timerange"]
            return cls(TimeRange(begin, end), data)
        if "index" in obj:
            return cls(Index(obj["index"]), data)
        raise ValueError(
            f"Event JSON needs one of 'time', 'timerange' or 'index': {dict(obj)!r}"
        )

    def __str__(self) -> str:
        return self.to_string()
