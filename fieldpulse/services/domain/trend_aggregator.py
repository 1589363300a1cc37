"""
Domain service: windowed trend statistics over observations and assessments.

The aggregator is a pure function of its inputs. Empty input is not an
error: statistics degrade to "no data" values, and the health trend is
None (insufficient data) rather than zero.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

import numpy as np

from fieldpulse.config import settings
from fieldpulse.domain.models import (
    HealthAssessment,
    IndexKind,
    IndexObservation,
    ProblemArea,
    Recommendation,
    StressIndicator,
)
from fieldpulse.services.domain.ingestion import (
    ensure_single_parcel,
    order_assessments,
    order_observations,
)

logger = logging.getLogger(__name__)


@dataclass
class TrendConfig:
    """Configuration for trend aggregation."""

    window_days: int = field(default_factory=lambda: settings.trend_default_window_days)
    """Look-back period used when the caller does not request one"""

    join_tolerance_days: int = field(default_factory=lambda: settings.trend_join_tolerance_days)
    """Assessments pair with observations strictly closer than this many days"""


@dataclass(frozen=True)
class IndexStatistics:
    """Summary statistics of one index over a window."""
    count: int
    mean: float
    minimum: float
    maximum: float
    std: float


@dataclass(frozen=True)
class CorrelatedPoint:
    """An assessment paired with the nearest NDVI observation, for display."""
    assessment_date: date
    health_score: Optional[float]
    predicted_yield: Optional[float]
    observation_date: Optional[date] = None
    ndvi: Optional[float] = None

    @property
    def ndvi_percent(self) -> Optional[float]:
        return self.ndvi * 100 if self.ndvi is not None else None


@dataclass
class TrendSummary:
    """Windowed view of a parcel's history."""
    parcel_id: str
    window_days: int
    start_date: date
    end_date: date
    assessments: List[HealthAssessment]
    observations: List[IndexObservation]
    average_health: float
    health_trend: Optional[float]
    ndvi_trend: Optional[float]
    index_statistics: Dict[IndexKind, Optional[IndexStatistics]]
    correlated: List[CorrelatedPoint]

    @property
    def has_trend(self) -> bool:
        return self.health_trend is not None

    @property
    def assessments_latest_first(self) -> List[HealthAssessment]:
        return list(reversed(self.assessments))

    @property
    def observations_latest_first(self) -> List[IndexObservation]:
        return list(reversed(self.observations))

    @property
    def latest_assessment(self) -> Optional[HealthAssessment]:
        return self.assessments[-1] if self.assessments else None

    @property
    def problem_areas(self) -> List[ProblemArea]:
        latest = self.latest_assessment
        return list(latest.problem_areas) if latest else []

    @property
    def stress_indicators(self) -> Dict[str, StressIndicator]:
        latest = self.latest_assessment
        return dict(latest.stress_indicators) if latest else {}

    @property
    def recommendations(self) -> List[Recommendation]:
        latest = self.latest_assessment
        return list(latest.recommendations) if latest else []


def _difference_of_present(values: Sequence[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if len(present) < 2:
        return None
    return float(present[-1] - present[-2])


class TrendAggregator:
    """
    Domain service computing windowed statistics for one parcel.

    Records are re-sorted by date before computation, so callers may pass
    them in any order.
    """

    def __init__(self, config: Optional[TrendConfig] = None):
        self.config = config or TrendConfig()

    def window_start(self, window_days: int, today: date) -> date:
        if window_days <= 0:
            raise ValueError(f"window_days must be positive, got {window_days}")
        return today - timedelta(days=window_days)

    def filter_assessments(
        self,
        assessments: Sequence[HealthAssessment],
        window_days: int,
        today: date,
    ) -> List[HealthAssessment]:
        """Assessments dated on or after the window start, oldest first."""
        start = self.window_start(window_days, today)
        return [a for a in order_assessments(assessments) if a.assessment_date >= start]

    def filter_observations(
        self,
        observations: Sequence[IndexObservation],
        window_days: int,
        today: date,
    ) -> List[IndexObservation]:
        """Observations acquired on or after the window start, oldest first."""
        start = self.window_start(window_days, today)
        return [o for o in order_observations(observations) if o.acquisition_date >= start]

    def average_health(self, assessments: Sequence[HealthAssessment]) -> float:
        """Mean overall health score; 0 when no assessment carries a score."""
        scores = [a.overall_health_score for a in assessments if a.overall_health_score is not None]
        if not scores:
            return 0.0
        return float(np.mean(scores))

    def health_trend(self, assessments: Sequence[HealthAssessment]) -> Optional[float]:
        """
        Latest score minus the one before it.

        Returns:
            Signed difference, or None when fewer than two assessments exist
            or either of the two latest carries no score
        """
        ordered = order_assessments(assessments)
        if len(ordered) < 2:
            return None
        previous, latest = ordered[-2].overall_health_score, ordered[-1].overall_health_score
        if previous is None or latest is None:
            return None
        return float(latest - previous)

    def ndvi_trend(self, observations: Sequence[IndexObservation]) -> Optional[float]:
        """NDVI change between the two latest scenes carrying NDVI."""
        ordered = order_observations(observations)
        return _difference_of_present([o.ndvi for o in ordered])

    def index_statistics(
        self,
        observations: Sequence[IndexObservation],
        kind: IndexKind,
    ) -> Optional[IndexStatistics]:
        """Statistics of one index, ignoring scenes without a value."""
        values = np.array(
            [o.value_of(kind) for o in observations if o.value_of(kind) is not None],
            dtype=float,
        )
        if values.size == 0:
            return None
        return IndexStatistics(
            count=int(values.size),
            mean=float(np.mean(values)),
            minimum=float(np.min(values)),
            maximum=float(np.max(values)),
            std=float(np.std(values)),
        )

    def correlate(
        self,
        assessments: Sequence[HealthAssessment],
        observations: Sequence[IndexObservation],
    ) -> List[CorrelatedPoint]:
        """
        Pair each assessment with the nearest-dated NDVI observation.

        Only observations strictly within the join tolerance are paired;
        ties go to the earlier observation.
        """
        tolerance = self.config.join_tolerance_days
        candidates = [o for o in order_observations(observations) if o.ndvi is not None]
        points = []

        for assessment in order_assessments(assessments):
            nearest = None
            nearest_gap = None
            for observation in candidates:
                gap = abs((observation.acquisition_date - assessment.assessment_date).days)
                if gap < tolerance and (nearest_gap is None or gap < nearest_gap):
                    nearest, nearest_gap = observation, gap

            points.append(CorrelatedPoint(
                assessment_date=assessment.assessment_date,
                health_score=assessment.overall_health_score,
                predicted_yield=assessment.predicted_yield,
                observation_date=nearest.acquisition_date if nearest else None,
                ndvi=nearest.ndvi if nearest else None,
            ))

        return points

    def summarize(
        self,
        parcel_id: str,
        assessments: Sequence[HealthAssessment],
        observations: Sequence[IndexObservation] = (),
        window_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> TrendSummary:
        """
        Build the windowed summary for a parcel.

        Args:
            parcel_id: Parcel the records belong to
            assessments: Assessments in any order
            observations: Observations in any order
            window_days: Look-back period (defaults to configuration)
            today: Reference date for the window (defaults to today)

        Returns:
            TrendSummary over the filtered records
        """
        window_days = window_days or self.config.window_days
        today = today or date.today()

        ensure_single_parcel(assessments, parcel_id)
        ensure_single_parcel(observations, parcel_id)

        windowed_assessments = self.filter_assessments(assessments, window_days, today)
        windowed_observations = self.filter_observations(observations, window_days, today)

        logger.info(f"Trend window for parcel {parcel_id}: {window_days} days, "
                    f"{len(windowed_assessments)}/{len(assessments)} assessments, "
                    f"{len(windowed_observations)}/{len(observations)} observations")

        health_trend = self.health_trend(windowed_assessments)
        if health_trend is None:
            logger.debug(f"Not enough assessments in window for a health trend (parcel {parcel_id})")

        return TrendSummary(
            parcel_id=parcel_id,
            window_days=window_days,
            start_date=self.window_start(window_days, today),
            end_date=today,
            assessments=windowed_assessments,
            observations=windowed_observations,
            average_health=self.average_health(windowed_assessments),
            health_trend=health_trend,
            ndvi_trend=self.ndvi_trend(windowed_observations),
            index_statistics={
                kind: self.index_statistics(windowed_observations, kind) for kind in IndexKind
            },
            correlated=self.correlate(windowed_assessments, windowed_observations),
        )
