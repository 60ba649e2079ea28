"""
Tests for grouping a Collection by field value.
"""

import pytest

from eventseries.core.collection import Collection
from eventseries.core.functions import Functions
from eventseries.core.grouped import GroupedCollection


@pytest.fixture
def hosts(make_event) -> Collection:
    """Five events split across two hosts, plus one with no host."""
    return Collection(
        [
            make_event(0, 1, host="a"),
            make_event(1, 2, host="b"),
            make_event(2, 3, host="a"),
            make_event(3, 4, host="b"),
            make_event(4, 5),
        ]
    )


class TestGroupBy:
    """Test partitioning by field value."""

    def test_groups_in_first_appearance_order(self, hosts) -> None:
        grouped = hosts.group_by("host")
        assert isinstance(grouped, GroupedCollection)
        assert grouped.keys() == ["a", "b", None]
        assert len(grouped) == 3

    def test_group_contents(self, hosts) -> None:
        grouped = hosts.group_by("host")
        assert [e.get() for e in grouped.get("a")] == [1, 3]
        assert [e.get() for e in grouped.get("b")] == [2, 4]
        assert [e.get() for e in grouped.get(None)] == [5]

    def test_groups_are_indexed(self, hosts, check_index) -> None:
        for group in hosts.group_by("host").groups().values():
            check_index(group)

    def test_missing_group_is_empty(self, hosts) -> None:
        assert hosts.group_by("host").get("zzz").is_empty()

    def test_groups_are_read_only(self, hosts) -> None:
        with pytest.raises(TypeError):
            hosts.group_by("host").groups()["c"] = Collection()  # type: ignore[index]

    def test_aggregate(self, hosts) -> None:
        result = hosts.group_by("host").aggregate(
            {"total": ("value", Functions.sum()), "peak": ("value", Functions.max())}
        )
        assert result["a"] == {"total": 4, "peak": 3}
        assert result["b"] == {"total": 6, "peak": 4}

    def test_ungroup(self, hosts) -> None:
        assert [e.get() for e in hosts.group_by("host").ungroup()] == [1, 3, 2, 4, 5]

    def test_list_field_path(self, hosts) -> None:
        assert hosts.group_by(["host"]).field_path == "host"

    def test_empty_collection(self) -> None:
        assert len(Collection().group_by("host")) == 0
