"""
Alignment of irregular events onto fixed period boundaries.

Given events at ``0:40, 1:05, 1:45, 2:10`` and a period of ``"1m"``,
alignment emits events at ``1:00`` and ``2:00`` whose values are
interpolated between the surrounding inputs. Only the aligned fields are
carried into the output events.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from eventseries.core.event import Event, FieldPath, field_path_to_string
from eventseries.core.key import Time
from eventseries.parser.duration import parse_duration
from eventseries.processors.base import Processor, ProcessorError, set_path


class AlignMethod(str, Enum):
    """
    LINEAR: interpolate between the previous and current value.
    HOLD:   repeat the previous value.
    """

    LINEAR = "linear"
    HOLD = "hold"


@dataclass(frozen=True)
class AlignOptions:
    """
    Attributes:
        field_spec: Field path, or list of field paths, to align.
        period: Boundary spacing, a duration string (``"5m"``) or ms.
        method: ``"linear"`` or ``"hold"``.
        limit: If more boundaries than this fall between two events, the
            emitted values are all None instead of interpolated.
    """

    field_spec: Union[FieldPath, Sequence[FieldPath]] = "value"
    period: Union[str, int] = "5m"
    method: Union[AlignMethod, str] = AlignMethod.LINEAR
    limit: Optional[int] = None


class Align(Processor):
    """
    Emits one event per period boundary crossed, in time order.

    The first event is passed through unchanged if it sits exactly on a
    boundary. For every later event, each boundary ``b`` with
    ``previous < b <= current`` yields an event at ``b``.
    Only Time-keyed events can be aligned.
    """

    def __init__(self, options: AlignOptions) -> None:
        self.options: AlignOptions = options
        self.period_ms: int = parse_duration(options.period)
        self.method: AlignMethod = AlignMethod(options.method)
        spec = options.field_spec
        self._fields: List[str] = (
            [field_path_to_string(f) for f in spec]
            if isinstance(spec, (list, tuple))
            else [field_path_to_string(spec)]
        )
        self._previous: Optional[Event] = None

    def add_event(self, event: Event) -> List[Event]:
        if not isinstance(event.key, Time):
            raise ProcessorError(
                f"Only Time-keyed events can be aligned, got {type(event.key).__name__}"
            )

        if self._previous is None:
            self._previous = event
            return [event] if event.timestamp() % self.period_ms == 0 else []

        boundaries = self._boundaries(self._previous.timestamp(), event.timestamp())
        over_limit = self.options.limit is not None and len(boundaries) > self.options.limit

        out: List[Event] = []
        for boundary in boundaries:
            if over_limit:
                out.append(self._null_event(boundary))
            elif self.method is AlignMethod.HOLD:
                out.append(self._hold(boundary))
            else:
                out.append(self._linear(boundary, event))

        self._previous = event
        return out

    def _boundaries(self, begin: int, end: int) -> List[int]:
        """Period boundaries in the half-open range ``(begin, end]``."""
        first = (begin // self.period_ms + 1) * self.period_ms
        return list(range(first, end + 1, self.period_ms))

    def _null_event(self, boundary: int) -> Event:
        data: Dict[str, Any] = {}
        for path in self._fields:
            set_path(data, path, None)
        return Event(Time(boundary), data)

    def _hold(self, boundary: int) -> Event:
        data: Dict[str, Any] = {}
        for path in self._fields:
            set_path(data, path, self._previous.get(path))
        return Event(Time(boundary), data)

    def _linear(self, boundary: int, current: Event) -> Event:
        previous = self._previous
        t0 = previous.timestamp()
        fraction = (boundary - t0) / (current.timestamp() - t0)

        data: Dict[str, Any] = {}
        for path in self._fields:
            if previous.is_valid(path) and current.is_valid(path):
                v0 = previous.get(path)
                v1 = current.get(path)
                set_path(data, path, v0 + fraction * (v1 - v0))
            else:
                set_path(data, path, None)
        return Event(Time(boundary), data)
