"""
Base class for stream processors.

A processor is fed every event of a Collection exactly once, in
sequence order, and may keep state between calls (for example the
previous event). It must never be shared between two passes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from eventseries.core.event import Event, FieldPath, field_path_as_list


class ProcessorError(Exception):
    """Exception raised when a processor cannot handle its input."""

    pass


class Processor(ABC):
    """Single-pass, stateful event transformer."""

    @abstractmethod
    def add_event(self, event: Event) -> List[Event]:
        """Consume *event*, returning zero or more output events."""


def set_path(data: Dict[str, Any], field_path: FieldPath, value: Any) -> None:
    """Store *value* at *field_path* in a plain nested dict, creating levels."""
    segments = field_path_as_list(field_path)
    target = data
    for segment in segments[:-1]:
        target = target.setdefault(segment, {})
    target[segments[-1]] = value
