"""
Shared pytest fixtures for the eventseries test suite.

Provides reusable fixtures for building events and collections, an
index consistency check, and paths to the JSON series fixtures.
"""

from pathlib import Path
from typing import Callable, List

import pytest

from eventseries.core.collection import Collection
from eventseries.core.event import Event
from eventseries.core.key import Time
from eventseries.core.key_index import key_string

# 2015-04-22T03:30:00Z
T0 = 1429673400000
MINUTE = 60 * 1000


def assert_index_consistent(collection: Collection) -> None:
    """Every position is indexed under its own key and nowhere else."""
    index = collection.key_index()
    for i, event in enumerate(collection):
        k = key_string(event.key)
        assert i in index[k]
        for other, positions in index.items():
            if other != k:
                assert i not in positions
    assert sum(len(p) for p in index.values()) == collection.size()


@pytest.fixture
def check_index() -> Callable[[Collection], None]:
    """The :func:`assert_index_consistent` helper."""
    return assert_index_consistent


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for Time-keyed events: ``make_event(offset_minutes, value)``."""

    def _make(offset: int = 0, value=None, **fields) -> Event:
        data = dict(fields)
        if value is not None or not fields:
            data["value"] = value
        return Event(Time(T0 + offset * MINUTE), data)

    return _make


@pytest.fixture
def ten_events(make_event) -> List[Event]:
    """Ten events one minute apart with values 1..10."""
    return [make_event(i, i + 1) for i in range(10)]


@pytest.fixture
def ten_collection(ten_events) -> Collection:
    """Collection of :func:`ten_events`."""
    return Collection.from_sequence(ten_events)


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def series_dir(fixtures_dir: Path) -> Path:
    """Path to the JSON series fixtures."""
    return fixtures_dir / "series"
