"""
Rate of change between consecutive events.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from eventseries.core.event import Event, FieldPath, field_path_to_string
from eventseries.core.key import TimeRange
from eventseries.processors.base import Processor, set_path


@dataclass(frozen=True)
class RateOptions:
    """
    Attributes:
        field_spec: Field path, or list of field paths, to differentiate.
        allow_negative: If False, negative rates are reported as None
            (useful for counters that wrap or reset).
    """

    field_spec: Union[FieldPath, Sequence[FieldPath]] = "value"
    allow_negative: bool = True


class Rate(Processor):
    """
    Emits, for each event after the first, a TimeRange-keyed event
    spanning the previous and current timestamps, with
    ``<field>_rate = (current - previous) / seconds`` for every field.

    The first event emits nothing since a rate needs a preceding point.
    """

    def __init__(self, options: RateOptions) -> None:
        self.options: RateOptions = options
        spec = options.field_spec
        self._fields: List[str] = (
            [field_path_to_string(f) for f in spec]
            if isinstance(spec, (list, tuple))
            else [field_path_to_string(spec)]
        )
        self._previous: Optional[Event] = None

    def add_event(self, event: Event) -> List[Event]:
        previous, self._previous = self._previous, event
        if previous is None:
            return []

        seconds = (event.timestamp() - previous.timestamp()) / 1000.0
        data: Dict[str, Any] = {}
        for path in self._fields:
            set_path(data, f"{path}_rate", self._rate(previous, event, path, seconds))

        span = TimeRange(
            min(previous.timestamp(), event.timestamp()),
            max(previous.timestamp(), event.timestamp()),
        )
        return [Event(span, data)]

    def _rate(self, previous: Event, current: Event, path: str, seconds: float) -> Optional[float]:
        if seconds == 0 or not previous.is_valid(path) or not current.is_valid(path):
            return None
        rate = (current.get(path) - previous.get(path)) / seconds
        if rate < 0 and not self.options.allow_negative:
            return None
        return rate
