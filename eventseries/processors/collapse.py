"""
Collapse several fields of an event into one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from pyrsistent import thaw

from eventseries.core.event import Event, FieldPath
from eventseries.core.functions import Reducer
from eventseries.processors.base import Processor, set_path


@dataclass(frozen=True)
class CollapseOptions:
    """
    Attributes:
        field_spec_list: Field paths whose values are combined.
        name: Field path receiving the combined value.
        reducer: Function combining the list of values, e.g.
            ``Functions.sum()``.
        append: Keep the existing data and add *name* (True), or emit
            only *name* (False).
    """

    field_spec_list: Sequence[FieldPath]
    name: str
    reducer: Reducer
    append: bool = True


class Collapse(Processor):
    """Emits exactly one event per input, with the collapsed field added."""

    def __init__(self, options: CollapseOptions) -> None:
        self.options: CollapseOptions = options

    def add_event(self, event: Event) -> List[Event]:
        values = [event.get(path) for path in self.options.field_spec_list]
        data: Dict[str, Any] = thaw(event.data) if self.options.append else {}
        set_path(data, self.options.name, self.options.reducer(values))
        return [Event(event.key, data)]
