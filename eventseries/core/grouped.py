"""
Grouping of a Collection by field value.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Tuple

from eventseries.core.collection import Collection
from eventseries.core.event import Event, FieldPath, field_path_to_string
from eventseries.core.functions import Reducer

AggregationSpec = Mapping[str, Tuple[FieldPath, Reducer]]


class GroupedCollection:
    """
    A Collection partitioned into sub-collections by the value found at a
    field path. Groups appear in the order their first event appears.

    Attributes:
        field_path: Dotted path of the grouping field.
    """

    def __init__(self, field_path: FieldPath, collection: Collection) -> None:
        self.field_path: str = field_path_to_string(field_path)
        buckets: Dict[Any, List[Event]] = {}
        for event in collection:
            buckets.setdefault(event.get(self.field_path), []).append(event)
        self._groups = MappingProxyType(
            {value: collection.replace_all(events) for value, events in buckets.items()}
        )

    def groups(self) -> Mapping[Any, Collection]:
        """Read-only mapping of group value to its Collection."""
        return self._groups

    def keys(self) -> List[Any]:
        return list(self._groups)

    def get(self, value: Any) -> Collection:
        """The group for *value*, or an empty Collection."""
        return self._groups.get(value, Collection())

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._groups)

    def aggregate(self, spec: AggregationSpec) -> Dict[Any, Dict[str, Any]]:
        """
        Aggregate every group.

        Args:
            spec: Mapping of output name to ``(field_path, reducer)``, e.g.
                ``{"a_avg": ("a", Functions.avg())}``.

        Returns:
            Mapping of group value to ``{output name: value}``.
        """
        return {
            value: {
                name: group.aggregate(reducer, path)
                for name, (path, reducer) in spec.items()
            }
            for value, group in self._groups.items()
        }

    def ungroup(self) -> Collection:
        """All events again, in group order."""
        return Collection([e for group in self._groups.values() for e in group])
