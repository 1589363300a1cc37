"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from fieldpulse.infrastructure.observation_store_client import (
    ObservationStoreClient,
    get_store_client,
)
from fieldpulse.infrastructure.repositories import (
    AlertRepository,
    PrescriptionMapRepository,
    get_alert_repository,
    get_map_repository,
)
from fieldpulse.services.domain.health_classifier import HealthClassifier
from fieldpulse.services.application.parcel_service import ParcelService


def get_health_classifier() -> HealthClassifier:
    """
    Dependency factory for HealthClassifier.

    Returns:
        HealthClassifier instance
    """
    return HealthClassifier()


def get_parcel_service(
    store_client: Annotated[ObservationStoreClient, Depends(get_store_client)],
    alert_repository: Annotated[AlertRepository, Depends(get_alert_repository)],
    map_repository: Annotated[PrescriptionMapRepository, Depends(get_map_repository)],
) -> ParcelService:
    """
    Dependency factory for ParcelService.

    Args:
        store_client: Observation store client (injected)
        alert_repository: Alert persistence (injected)
        map_repository: Prescription map persistence (injected)

    Returns:
        ParcelService instance
    """
    return ParcelService(
        store_client=store_client,
        alert_repository=alert_repository,
        map_repository=map_repository,
    )


# Type aliases for cleaner route signatures
ParcelServiceDep = Annotated[ParcelService, Depends(get_parcel_service)]
HealthClassifierDep = Annotated[HealthClassifier, Depends(get_health_classifier)]
