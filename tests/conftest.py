"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample assessments and observations
- Mock store client
- Fresh repositories
- FastAPI test client
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from fieldpulse.main import app
from fieldpulse.domain.models import (
    HealthAssessment,
    IndexObservation,
    ProblemArea,
    Recommendation,
    StressIndicator,
)
from fieldpulse.infrastructure.observation_store_client import ObservationStoreClient
from fieldpulse.infrastructure.repositories import AlertRepository, PrescriptionMapRepository
from fieldpulse.services.application.parcel_service import ParcelService

from factories import make_assessment, make_observation


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def fixed_clock():
    """Clock returning a constant timestamp."""
    moment = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)
    return lambda: moment


@pytest.fixture
def sample_assessments() -> list[HealthAssessment]:
    """Three assessments over two months, oldest first."""
    return [
        make_assessment(60, score=82, ndvi_avg=0.71),
        make_assessment(30, score=80, ndvi_avg=0.68),
        make_assessment(
            2,
            score=62,
            ndvi_avg=0.52,
            problem_areas=[
                ProblemArea(type="water_stress", severity="high", area_percentage=30, location="north-east"),
            ],
            stress_indicators={
                "water_stress": StressIndicator(level="high", confidence=0.8),
                "nutrient_stress": StressIndicator(level="low", confidence=0.6),
            },
            recommendations=[
                Recommendation(type="irrigation", priority="high", description="Increase irrigation frequency"),
            ],
        ),
    ]


@pytest.fixture
def sample_observations() -> list[IndexObservation]:
    """Scenes around the sample assessments."""
    return [
        make_observation(61, ndvi=0.72, evi=0.6, cloud_coverage_percent=5.0, spatial_resolution_m=10.0),
        make_observation(33, ndvi=0.66, evi=0.55, cloud_coverage_percent=12.0, spatial_resolution_m=10.0),
        make_observation(1, ndvi=0.5, evi=0.41, ndwi=-0.1, cloud_coverage_percent=3.0, spatial_resolution_m=10.0),
    ]


# ============================================================
# Mock Store Client Fixtures
# ============================================================

@pytest.fixture
def mock_store_client(sample_assessments, sample_observations):
    """Create a mock observation store client."""
    mock_client = AsyncMock(spec=ObservationStoreClient)
    mock_client.get_assessments.return_value = sample_assessments
    mock_client.get_observations.return_value = sample_observations
    return mock_client


@pytest.fixture
def alert_repository() -> AlertRepository:
    return AlertRepository()


@pytest.fixture
def map_repository() -> PrescriptionMapRepository:
    return PrescriptionMapRepository()


@pytest.fixture
def parcel_service(mock_store_client, alert_repository, map_repository) -> ParcelService:
    return ParcelService(
        store_client=mock_store_client,
        alert_repository=alert_repository,
        map_repository=map_repository,
    )


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
