"""
API router for parcel analytics endpoints.
"""
from fastapi import APIRouter, Path, Query, Request
from typing import Annotated, Optional

from fieldpulse.api.dependencies import HealthClassifierDep, ParcelServiceDep
from fieldpulse.api.rate_limit import GENERATION_LIMIT, limiter
from fieldpulse.api.v1.models.requests import PrescriptionRequest
from fieldpulse.api.v1.models.responses import (
    AlertListResponse,
    AlertSummaryResponse,
    CorrelatedPointResponse,
    IndexStatisticsResponse,
    StressIndicatorResponse,
    TrendResponse,
)
from fieldpulse.domain.models import Alert, AlertSeverity, GenerationRequest, PrescriptionMap


router = APIRouter(
    prefix="/parcels",
    tags=["parcels"],
)

ParcelId = Annotated[str, Path(description="Unique identifier for the parcel")]


@router.get(
    "/{parcel_id}/trends",
    response_model=TrendResponse,
    summary="Get windowed health trends",
    description="""
    Summarize a parcel's assessments and index observations over a look-back window.
    
    `health_trend` is null when the window holds fewer than two assessments,
    so "no change" (0) and "insufficient data" are distinguishable.
    """,
)
async def get_trends(
    parcel_id: ParcelId,
    parcel_service: ParcelServiceDep,
    classifier: HealthClassifierDep,
    window_days: Annotated[
        Optional[int], Query(gt=0, description="Look-back window in days (e.g. 30, 90, 365)")
    ] = None,
) -> TrendResponse:
    """
    Get trend statistics for a parcel.
    
    Args:
        parcel_id: Unique identifier for the parcel
        parcel_service: Parcel service (injected dependency)
        classifier: Health classifier (injected dependency)
        window_days: Optional look-back window
        
    Returns:
        TrendResponse with windowed records and statistics
    """
    summary = await parcel_service.get_trends(parcel_id, window_days=window_days)
    stress = classifier.classify_stress_indicators(summary.stress_indicators)
    
    return TrendResponse(
        parcel_id=summary.parcel_id,
        window_days=summary.window_days,
        start_date=summary.start_date,
        end_date=summary.end_date,
        average_health=summary.average_health,
        health_trend=summary.health_trend,
        has_trend=summary.has_trend,
        ndvi_trend=summary.ndvi_trend,
        health_color=classifier.classify_health_score(
            summary.average_health if summary.assessments else None
        ),
        index_statistics={
            kind.value: IndexStatisticsResponse(**vars(stats)) if stats else None
            for kind, stats in summary.index_statistics.items()
        },
        assessments=summary.assessments,
        observations=summary.observations,
        correlated=[
            CorrelatedPointResponse(
                assessment_date=point.assessment_date,
                health_score=point.health_score,
                predicted_yield=point.predicted_yield,
                observation_date=point.observation_date,
                ndvi=point.ndvi,
                ndvi_percent=point.ndvi_percent,
            )
            for point in summary.correlated
        ],
        problem_areas=summary.problem_areas,
        stress_indicators=[
            StressIndicatorResponse(
                name=name,
                label=item.label,
                color=item.color,
                rank=item.rank,
                confidence=item.confidence,
            )
            for name, item in stress.items()
        ],
        recommendations=summary.recommendations,
    )


@router.post(
    "/{parcel_id}/alerts/evaluate",
    response_model=list[Alert],
    summary="Evaluate alert thresholds",
    description="""
    Compare the two most recent assessments of a parcel against the configured
    thresholds and persist every alert raised. Insufficient history returns an
    empty list.
    """,
)
async def evaluate_alerts(
    parcel_id: ParcelId,
    parcel_service: ParcelServiceDep,
) -> list[Alert]:
    return await parcel_service.evaluate_alerts(parcel_id)


@router.get(
    "/{parcel_id}/alerts",
    response_model=AlertListResponse,
    summary="List parcel alerts",
)
async def list_alerts(
    parcel_id: ParcelId,
    parcel_service: ParcelServiceDep,
    severity: Annotated[Optional[AlertSeverity], Query(description="Filter by severity")] = None,
) -> AlertListResponse:
    alerts, summary = parcel_service.list_alerts(parcel_id, severity=severity)
    return AlertListResponse(
        parcel_id=parcel_id,
        alerts=alerts,
        summary=AlertSummaryResponse(**vars(summary)),
    )


@router.post(
    "/{parcel_id}/prescriptions",
    response_model=PrescriptionMap,
    status_code=201,
    summary="Generate a prescription map",
    description="""
    Generate a draft variable-rate prescription map from the parcel's most
    recent health assessment.
    
    Zones:
    - One high performance zone covering the area outside all problem areas
    - One zone per problem area with a severity-driven application rate
    """,
    responses={
        409: {"description": "Invalid status transition"},
        422: {"description": "Insufficient data or inconsistent problem areas"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(GENERATION_LIMIT)
async def generate_prescription(
    request: Request,
    parcel_id: ParcelId,
    body: PrescriptionRequest,
    parcel_service: ParcelServiceDep,
) -> PrescriptionMap:
    """
    Generate a prescription map for a parcel.
    
    Args:
        request: Incoming request (used by the rate limiter)
        parcel_id: Unique identifier for the parcel
        body: Generation parameters
        parcel_service: Parcel service (injected dependency)
        
    Returns:
        The generated draft PrescriptionMap
    """
    generation = GenerationRequest(parcel_id=parcel_id, **body.model_dump())
    return await parcel_service.generate_prescription(generation)
