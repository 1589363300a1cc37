"""
API response models using Pydantic.
"""
from datetime import date
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from fieldpulse.domain.models import (
    Alert,
    HealthAssessment,
    IndexObservation,
    ProblemArea,
    Recommendation,
)


class IndexStatisticsResponse(BaseModel):
    """Summary statistics of one index over the window."""
    count: int
    mean: float
    minimum: float
    maximum: float
    std: float


class CorrelatedPointResponse(BaseModel):
    """Assessment joined with the nearest NDVI observation."""
    assessment_date: date
    health_score: Optional[float] = None
    predicted_yield: Optional[float] = None
    observation_date: Optional[date] = None
    ndvi: Optional[float] = None
    ndvi_percent: Optional[float] = None


class StressIndicatorResponse(BaseModel):
    """Classified stress indicator."""
    name: str
    label: str
    color: str
    rank: int
    confidence: Optional[float] = None


class TrendResponse(BaseModel):
    """Response model for the trends endpoint."""
    parcel_id: str
    window_days: int
    start_date: date
    end_date: date
    average_health: float = Field(
        description="Mean health score over the window (0 when no data)"
    )
    health_trend: Optional[float] = Field(
        description="Latest minus previous score; null when fewer than two assessments"
    )
    has_trend: bool
    ndvi_trend: Optional[float] = None
    health_color: str
    index_statistics: Dict[str, Optional[IndexStatisticsResponse]]
    assessments: List[HealthAssessment]
    observations: List[IndexObservation]
    correlated: List[CorrelatedPointResponse]
    problem_areas: List[ProblemArea]
    stress_indicators: List[StressIndicatorResponse]
    recommendations: List[Recommendation]


class ClassificationResponse(BaseModel):
    """Response model for index classification."""
    kind: str
    value: Optional[float] = None
    band: str
    color: str
    weight: int
    description: Optional[str] = None


class AlertSummaryResponse(BaseModel):
    """Alert counts per severity and status."""
    total: int
    by_severity: Dict[str, int]
    by_status: Dict[str, int]


class AlertListResponse(BaseModel):
    """Response model for alert listings."""
    parcel_id: str
    alerts: List[Alert]
    summary: AlertSummaryResponse
