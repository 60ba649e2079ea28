"""
Duration utilities.

Provides convenience functions for turning duration strings into
milliseconds and back into their canonical short form.
"""

from __future__ import annotations

from typing import Union

from eventseries.parser.grammar import UNIT_MS, DurationParser, DurationParseError


_parser = DurationParser()

# Largest unit first so formatting picks the shortest exact form
_UNITS_DESCENDING = sorted(UNIT_MS.items(), key=lambda item: item[1], reverse=True)


def parse_duration(value: Union[str, int]) -> int:
    """
    Parse a duration into milliseconds.

    Args:
        value: A duration string (``"5m"``, ``"1h30m"``) or an integer
            number of milliseconds, which is returned unchanged.

    Returns:
        The duration in milliseconds.

    Raises:
        DurationParseError: If the string is invalid or the length is
            not positive.
    """
    if isinstance(value, bool):
        raise DurationParseError(f"Invalid duration: {value!r}")
    ms = value if isinstance(value, int) else _parser.parse(value)
    if ms <= 0:
        raise DurationParseError(f"Duration must be positive, got {value!r}")
    return ms


def format_duration(ms: int) -> str:
    """
    Format milliseconds as a single-unit duration string.

    Uses the largest unit that divides *ms* exactly, so
    ``format_duration(300000) == "5m"`` and ``format_duration(1500) == "1500ms"``.

    Args:
        ms: A positive number of milliseconds.

    Returns:
        The canonical duration string.
    """
    if ms <= 0:
        raise DurationParseError(f"Duration must be positive, got {ms!r}")
    for unit, size in _UNITS_DESCENDING:
        if ms % size == 0:
            return f"{ms // size}{unit}"
    return f"{ms}ms"  # pragma: no cover
