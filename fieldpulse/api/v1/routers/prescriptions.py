"""
API router for prescription map endpoints.
"""
from fastapi import APIRouter, Path
from fastapi.responses import Response
from typing import Annotated

from fieldpulse.api.dependencies import ParcelServiceDep
from fieldpulse.api.v1.models.requests import StatusChangeRequest
from fieldpulse.domain.models import PrescriptionMap


router = APIRouter(
    prefix="/prescriptions",
    tags=["prescriptions"],
)

MapId = Annotated[str, Path(description="Unique identifier for the prescription map")]


@router.get(
    "/{map_id}",
    response_model=PrescriptionMap,
    summary="Get a prescription map",
    responses={404: {"description": "Prescription map not found"}},
)
async def get_prescription(map_id: MapId, parcel_service: ParcelServiceDep) -> PrescriptionMap:
    return parcel_service.get_prescription(map_id)


@router.post(
    "/{map_id}/status",
    response_model=PrescriptionMap,
    summary="Advance a prescription map's status",
    description="Maps move one step at a time: draft -> approved -> applied -> completed.",
    responses={
        404: {"description": "Prescription map not found"},
        409: {"description": "Status change not allowed"},
    },
)
async def change_status(
    map_id: MapId,
    body: StatusChangeRequest,
    parcel_service: ParcelServiceDep,
) -> PrescriptionMap:
    return parcel_service.advance_prescription(map_id, body.status)


@router.get(
    "/{map_id}/export",
    summary="Download a prescription map as CSV",
    response_class=Response,
    responses={
        200: {"content": {"text/csv": {}}, "description": "One row per zone"},
        404: {"description": "Prescription map not found"},
    },
)
async def export_prescription(map_id: MapId, parcel_service: ParcelServiceDep) -> Response:
    filename, content = parcel_service.export_prescription(map_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
