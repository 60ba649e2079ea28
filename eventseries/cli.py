"""
Command-line interface for eventseries.

Loads a JSON series file, optionally sorts, aligns or differentiates it,
and prints summary statistics and quantiles for the requested fields.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import eventseries
from eventseries.core.analyzer import SeriesAnalyzer
from eventseries.core.functions import InterpolationType
from eventseries.processors.align import AlignMethod
from eventseries.utils.logger import LogLevel, SeriesLogger
from eventseries.utils.series_reader import SeriesReader


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the eventseries CLI."""
    parser = argparse.ArgumentParser(
        prog="eventseries",
        description="Summary statistics and quantiles over a JSON event series",
    )

    required = parser.add_argument_group("required arguments")
    required.add_argument(
        "-i",
        "--input",
        type=Path,
        required=True,
        help="Path to series file (.json) as written by Collection.to_json()",
    )

    parser.add_argument(
        "-f",
        "--field",
        action="append",
        default=None,
        help="Field path to summarise; repeat for several (default: value)",
    )
    parser.add_argument(
        "-q",
        "--quantiles",
        type=int,
        default=None,
        metavar="N",
        help="Report the N-quantile cut points of each field",
    )
    parser.add_argument(
        "--interpolation",
        choices=[m.value for m in InterpolationType],
        default=InterpolationType.LINEAR.value,
        help="Quantile interpolation mode (default: linear)",
    )
    parser.add_argument(
        "--dedup",
        action="store_true",
        help="Keep only the last event for each key while loading",
    )
    parser.add_argument(
        "--sort",
        action="store_true",
        help="Sort events by key before analysis",
    )
    parser.add_argument(
        "--align",
        default=None,
        metavar="PERIOD",
        help="Align events onto PERIOD boundaries, e.g. 5m or 1h30m",
    )
    parser.add_argument(
        "--align-method",
        choices=[m.value for m in AlignMethod],
        default=AlignMethod.LINEAR.value,
        help="Alignment method (default: linear)",
    )
    parser.add_argument(
        "--rate",
        action="store_true",
        help="Analyse the per-second rate of change instead of raw values",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the prepared series as JSON",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=["silent", "normal", "verbose"],
        default="normal",
        help="Output level (default: normal)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        type=int,
        choices=[0, 1, 2, 3],
        default=0,
        help="Debug level 0-3 (default: 0)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"eventseries {eventseries.__version__}",
    )

    return parser


def _resolve_log_level(output: str, debug: int) -> LogLevel:
    """Determine the effective log level from output and debug settings."""
    if debug >= 3:
        return LogLevel.DEBUG
    if output == "verbose" or debug >= 1:
        return LogLevel.VERBOSE
    if output == "silent":
        return LogLevel.SILENT
    return LogLevel.NORMAL


def main() -> None:
    """Entry point for the ``eventseries`` CLI command."""
    parser = _build_parser()
    args = parser.parse_args()

    try:
        _run(args)
    except SystemExit:
        raise
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


def _run(args: argparse.Namespace) -> None:
    """Execute the analysis pipeline."""
    if not args.input.exists():
        print(f"Error: Series file not found: {args.input}", file=sys.stderr)
        sys.exit(2)

    logger = SeriesLogger(level=_resolve_log_level(args.output, args.debug))

    data = SeriesReader(args.input).read_all(dedup=args.dedup)
    if data.metadata.name:
        logger.info(f"Loaded series '{data.metadata.name}'")
    logger.info(
        "Loaded events",
        count=data.metadata.event_count,
        key_type=data.metadata.key_type,
        kept=data.collection.size(),
    )

    analyzer = SeriesAnalyzer(
        fields=args.field or ["value"],
        quantiles=args.quantiles,
        interpolation=args.interpolation,
        sort_by_key=args.sort,
        align=args.align,
        align_method=args.align_method,
        rate=args.rate,
        logger=logger,
    )
    result = analyzer.run(data.collection)

    if result.timerange is not None:
        logger.result("Timerange", result.timerange)

    if args.dump:
        print(result.collection.to_string())

    sys.exit(0)
