"""
Series analysis orchestration.

Runs a Collection through optional preparation stages (sort by key,
alignment, rate) and then computes summary statistics and quantile cut
points for each requested field, reporting progress through a
SeriesLogger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from eventseries.core.collection import Collection
from eventseries.core.functions import InterpolationType
from eventseries.core.key import TimeRange
from eventseries.processors.align import AlignMethod, AlignOptions
from eventseries.processors.rate import RateOptions
from eventseries.utils.logger import LogLevel, SeriesLogger


@dataclass
class AnalysisResult:
    """
    Result of analysing a Collection.

    Attributes:
        statistics: Field name to a dict of statistic name to value.
        quantiles: Field name to its quantile cut points (empty when no
            quantiles were requested).
        timerange: Extent of the analysed Collection, or None if empty.
        collection: The Collection after all preparation stages.
    """

    statistics: Dict[str, Dict[str, Any]]
    quantiles: Dict[str, List[float]]
    timerange: Optional[TimeRange]
    collection: Collection


class SeriesAnalyzer:
    """
    Summarises fields of a Collection.

    Stages, in order:
    1. Sort by key (optional)
    2. Align onto a fixed period (optional)
    3. Replace values by their rate of change (optional); analysed
       fields become ``<field>_rate``
    4. Statistics and quantiles per field

    Attributes:
        fields: Field paths to summarise.
        quantiles: Number of quantile groups, or None.
        interpolation: Quantile interpolation mode.
        logger: Logger for output.
    """

    def __init__(
        self,
        fields: Iterable[str] = ("value",),
        quantiles: Optional[int] = None,
        interpolation: Union[InterpolationType, str] = InterpolationType.LINEAR,
        sort_by_key: bool = False,
        align: Optional[Union[str, int]] = None,
        align_method: Union[AlignMethod, str] = AlignMethod.LINEAR,
        rate: bool = False,
        logger: Optional[SeriesLogger] = None,
    ) -> None:
        self.fields: List[str] = list(fields)
        self.quantiles: Optional[int] = quantiles
        self.interpolation: InterpolationType = InterpolationType(interpolation)
        self.sort_by_key: bool = sort_by_key
        self.align: Optional[Union[str, int]] = align
        self.align_method: AlignMethod = AlignMethod(align_method)
        self.rate: bool = rate
        self.logger: SeriesLogger = logger or SeriesLogger(LogLevel.SILENT)

    def prepare(self, collection: Collection) -> Collection:
        """Apply the sort, align and rate stages."""
        self.logger.stage("input", collection.size())

        if self.sort_by_key:
            collection = collection.sort_by_key()
            self.logger.stage("sorted by key", collection.size())
        elif not collection.is_chronological():
            self.logger.info("Collection is not in chronological order")

        if self.align is not None:
            collection = collection.align(
                AlignOptions(field_spec=self.fields, period=self.align, method=self.align_method)
            )
            self.logger.stage(f"aligned to {self.align}", collection.size())

        if self.rate:
            collection = collection.rate(RateOptions(field_spec=self.fields))
            self.logger.stage("rate", collection.size())

        return collection

    def run(self, collection: Collection) -> AnalysisResult:
        """
        Prepare *collection* and summarise every field.

        Raises:
            QuantileError: If more quantiles are requested than there are
                events after preparation.
        """
        prepared = self.prepare(collection)
        fields = [f"{f}_rate" for f in self.fields] if self.rate else self.fields

        statistics: Dict[str, Dict[str, Any]] = {}
        quantiles: Dict[str, List[float]] = {}
        for field in fields:
            statistics[field] = self._statistics(prepared, field)
            self.logger.statistics(field, statistics[field])
            if self.quantiles is not None:
                quantiles[field] = prepared.quantile(self.quantiles, field, self.interpolation)
                self.logger.quantiles(field, quantiles[field])

        timerange = prepared.timerange()
        self.logger.info("Analysis complete", events=prepared.size(), timerange=timerange)
        return AnalysisResult(
            statistics=statistics,
            quantiles=quantiles,
            timerange=timerange,
            collection=prepared,
        )

    @staticmethod
    def _statistics(collection: Collection, field: str) -> Dict[str, Any]:
        return {
            "size": collection.size(),
            "size_valid": collection.size_valid(field),
            "sum": collection.sum(field),
            "avg": collection.avg(field),
            "min": collection.min(field),
            "max": collection.max(field),
            "median": collection.median(field),
            "stdev": collection.stdev(field),
        }
