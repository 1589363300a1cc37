"""
API router for alert status commands.
"""
from fastapi import APIRouter, Path
from typing import Annotated

from fieldpulse.api.dependencies import ParcelServiceDep
from fieldpulse.domain.models import Alert


router = APIRouter(
    prefix="/alerts",
    tags=["alerts"],
)

AlertId = Annotated[str, Path(description="Unique identifier for the alert")]


@router.post(
    "/{alert_id}/acknowledge",
    response_model=Alert,
    summary="Acknowledge an active alert",
    responses={
        404: {"description": "Alert not found"},
        409: {"description": "Alert is not active"},
    },
)
async def acknowledge_alert(alert_id: AlertId, parcel_service: ParcelServiceDep) -> Alert:
    return parcel_service.acknowledge_alert(alert_id)


@router.post(
    "/{alert_id}/resolve",
    response_model=Alert,
    summary="Resolve an alert",
    responses={
        404: {"description": "Alert not found"},
        409: {"description": "Alert is already resolved"},
    },
)
async def resolve_alert(alert_id: AlertId, parcel_service: ParcelServiceDep) -> Alert:
    return parcel_service.resolve_alert(alert_id)
