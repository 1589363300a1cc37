"""
API router for index classification.
"""
from fastapi import APIRouter, Query
from typing import Annotated, Optional

from fieldpulse.api.dependencies import HealthClassifierDep
from fieldpulse.api.v1.models.responses import ClassificationResponse
from fieldpulse.domain.models import IndexKind


router = APIRouter(
    prefix="/indices",
    tags=["indices"],
)


@router.get(
    "/classify",
    response_model=ClassificationResponse,
    summary="Classify an index value",
    description="""
    Map an index value to a qualitative band. NDVI uses fixed breakpoints
    (>0.7 Excellent, >0.5 Good, >0.3 Fair, >0.1 Poor, else Critical); other
    index kinds classify as Normal. A missing value is rejected.
    """,
)
async def classify_index(
    classifier: HealthClassifierDep,
    kind: Annotated[IndexKind, Query(description="Index kind")] = IndexKind.NDVI,
    value: Annotated[Optional[float], Query(description="Index value")] = None,
) -> ClassificationResponse:
    result = classifier.classify_index(value, kind, required=True)
    return ClassificationResponse(
        kind=result.kind.value,
        value=result.value,
        band=result.band,
        color=result.color,
        weight=result.weight,
        description=classifier.describe_ndvi(value) if kind == IndexKind.NDVI else None,
    )
