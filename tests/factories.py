"""
Builders for test records dated relative to a fixed day.
"""
from datetime import date, timedelta

from fieldpulse.domain.models import HealthAssessment, IndexObservation


TODAY = date(2024, 6, 30)
PARCEL_ID = "parcel-42"


def make_assessment(
    days_ago: int,
    score=None,
    ndvi_avg=None,
    problem_areas=None,
    parcel_id: str = PARCEL_ID,
    **kwargs,
) -> HealthAssessment:
    """Build an assessment dated relative to TODAY."""
    return HealthAssessment(
        parcel_id=parcel_id,
        assessment_date=TODAY - timedelta(days=days_ago),
        overall_health_score=score,
        ndvi_avg=ndvi_avg,
        problem_areas=problem_areas or [],
        **kwargs,
    )


def make_observation(days_ago: int, ndvi=None, parcel_id: str = PARCEL_ID, **kwargs) -> IndexObservation:
    """Build an observation dated relative to TODAY."""
    return IndexObservation(
        parcel_id=parcel_id,
        acquisition_date=TODAY - timedelta(days=days_ago),
        ndvi=ndvi,
        **kwargs,
    )
