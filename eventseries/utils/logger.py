"""
Structured logging for series analysis.

Provides configurable log levels (silent, normal, verbose, debug)
with consistent formatting for progress updates, results,
and summary statistics.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, Dict, Sequence, TextIO


class LogLevel(Enum):
    """
    Logging levels for the analyzer.

    SILENT:  No output at all.
    NORMAL:  Final results only.
    VERBOSE: Progress information and statistics.
    DEBUG:   Detailed per-stage output.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class SeriesLogger:
    """
    Structured logger for series analysis.

    Output is filtered by the configured log level.

    Attributes:
        level: The minimum log level to display.
        stream: The output stream (defaults to stdout).
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        stream: TextIO = sys.stdout,
    ) -> None:
        self.level: LogLevel = level
        self.stream: TextIO = stream

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message (only shown at DEBUG level)."""
        if self.level.value >= LogLevel.DEBUG.value:
            self._write(f"[DEBUG] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message (shown at VERBOSE and DEBUG levels)."""
        if self.level.value >= LogLevel.VERBOSE.value:
            self._write(f"[INFO] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def result(self, label: str, value: Any) -> None:
        """Log a single result line (shown at NORMAL level and above)."""
        if self.level.value >= LogLevel.NORMAL.value:
            self._write(f"{label}: {value}")

    def quantiles(self, field: str, values: Sequence[float]) -> None:
        """Log quantile cut points for *field* (NORMAL level and above)."""
        if self.level.value >= LogLevel.NORMAL.value:
            formatted = ", ".join(f"{v:g}" for v in values)
            self._write(f"{field} quantiles: [{formatted}]")

    def statistics(self, field: str, stats: Dict[str, Any]) -> None:
        """
        Log summary statistics for one field (shown at NORMAL level and above).

        Args:
            field: The field the statistics describe.
            stats: Dictionary of statistic names to values.
        """
        if self.level.value >= LogLevel.NORMAL.value:
            self._write(f"=== {field} ===")
            for key, value in stats.items():
                label = key.replace("_", " ").title()
                self._write(f"  {label}: {value}")

    def stage(self, name: str, size: int) -> None:
        """Log the collection size after a pipeline stage (DEBUG level)."""
        if self.level.value >= LogLevel.DEBUG.value:
            self._write(f"[DEBUG] {name} (events: {size})")

    def _write(self, message: str) -> None:
        """Write a line to the output stream."""
        self.stream.write(message + "\n")
