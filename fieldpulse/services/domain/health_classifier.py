"""
Domain service: qualitative classification of index values and stress levels.

Classification is a monotone step function over the configured
breakpoints. It never validates physical bounds, so every real value
maps to a band; missing values map to "Unknown" unless the caller marks
the classification as mandatory.
"""
import copy
import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from fieldpulse.domain.errors import OutOfRangeError
from fieldpulse.domain.models import IndexKind, StressIndicator
from fieldpulse.domain.reference_data import HealthScoreBands, IndexBands, StressBands

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexClassification:
    """Band assigned to an index value."""
    kind: IndexKind
    value: Optional[float]
    band: str
    color: str
    weight: int

    @property
    def is_known(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class StressClassification:
    """Severity rank assigned to a stress indicator."""
    name: Optional[str]
    label: str
    color: str
    rank: int
    confidence: Optional[float] = None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    if math.isnan(number):
        return None
    return number


class HealthClassifier:
    """
    Maps continuous index values and stress levels to qualitative bands.

    Breakpoint tables default to the reference data and can be replaced
    per instance.
    """

    def __init__(
        self,
        breakpoints: Optional[Dict[IndexKind, List[Tuple[float, str, str, int]]]] = None,
    ):
        if breakpoints is None:
            breakpoints = copy.deepcopy(IndexBands.BREAKPOINTS)
        self.breakpoints = breakpoints

    def classify_index(
        self,
        value: Any,
        kind: Union[IndexKind, str] = IndexKind.NDVI,
        required: bool = False,
    ) -> IndexClassification:
        """
        Classify a scalar index value.

        Args:
            value: Index value; None, NaN or non-numeric input counts as missing
            kind: Index kind the value belongs to
            required: Raise instead of returning "Unknown" for missing input

        Returns:
            IndexClassification with band, colour and display weight

        Raises:
            OutOfRangeError: If the value is missing and required is set
        """
        kind = IndexKind(kind)
        number = _as_number(value)

        if number is None:
            if required:
                raise OutOfRangeError(
                    f"A numeric {kind.value} value is required for classification",
                    field=kind.value,
                    value=repr(value),
                )
            band, color, weight = IndexBands.UNKNOWN
            return IndexClassification(kind=kind, value=None, band=band, color=color, weight=weight)

        table = self.breakpoints.get(kind)
        if table is None:
            band, color, weight = IndexBands.DEFAULT
            return IndexClassification(kind=kind, value=number, band=band, color=color, weight=weight)

        for lower, band, color, weight in table:
            if number > lower:
                return IndexClassification(kind=kind, value=number, band=band, color=color, weight=weight)

        band, color, weight = IndexBands.NDVI_FLOOR
        return IndexClassification(kind=kind, value=number, band=band, color=color, weight=weight)

    def classify_ndvi(self, value: Any, required: bool = False) -> IndexClassification:
        return self.classify_index(value, IndexKind.NDVI, required=required)

    def classify_stress(
        self,
        indicator: Union[StressIndicator, Mapping[str, Any], str, None],
        name: Optional[str] = None,
    ) -> StressClassification:
        """
        Map a stress indicator's level to its label, colour and rank.

        Unrecognized or missing levels map to "Unknown".
        """
        confidence = None
        if isinstance(indicator, StressIndicator):
            level, confidence = indicator.level, indicator.confidence
        elif isinstance(indicator, Mapping):
            level, confidence = indicator.get("level"), indicator.get("confidence")
        else:
            level = indicator

        key = level.strip().lower() if isinstance(level, str) else None
        label, color, rank = StressBands.LEVELS.get(key, StressBands.UNKNOWN)
        if rank == 0:
            logger.debug(f"Unrecognized stress level {level!r} for indicator {name!r}")

        return StressClassification(
            name=name, label=label, color=color, rank=rank, confidence=confidence
        )

    def classify_stress_indicators(
        self,
        indicators: Mapping[str, Union[StressIndicator, Mapping[str, Any]]],
    ) -> Dict[str, StressClassification]:
        """Classify every indicator of an assessment, keyed by indicator name."""
        return {
            name: self.classify_stress(indicator, name=name)
            for name, indicator in indicators.items()
        }

    def classify_health_score(self, score: Any) -> str:
        """Colour band for an overall health score."""
        number = _as_number(score)
        if number is None:
            return HealthScoreBands.UNKNOWN
        for lower, color in HealthScoreBands.BANDS:
            if number >= lower:
                return color
        return HealthScoreBands.FLOOR

    def describe_ndvi(self, value: Any) -> Optional[str]:
        """Human-readable interpretation of an NDVI value."""
        number = _as_number(value)
        if number is None:
            return None
        for upper, description in IndexBands.NDVI_DESCRIPTIONS:
            if number < upper:
                return description
        return IndexBands.NDVI_DESCRIPTION_CEILING

    def value_range(self, kind: Union[IndexKind, str]) -> Tuple[float, float]:
        """Display range of an index kind."""
        return IndexBands.VALUE_RANGES[IndexKind(kind)]
