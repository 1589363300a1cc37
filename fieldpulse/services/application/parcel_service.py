"""
Application service: Orchestration layer for parcel analytics operations.
"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from fieldpulse.domain.errors import InsufficientDataError
from fieldpulse.domain.models import (
    Alert,
    AlertSeverity,
    GenerationRequest,
    MapStatus,
    PrescriptionMap,
)
from fieldpulse.infrastructure.observation_store_client import ObservationStoreClient
from fieldpulse.infrastructure.repositories import AlertRepository, PrescriptionMapRepository
from fieldpulse.services.domain.alert_evaluator import (
    AlertEvaluator,
    AlertSummary,
    filter_alerts,
    summarize_alerts,
)
from fieldpulse.services.domain.ingestion import order_assessments
from fieldpulse.services.domain.trend_aggregator import TrendAggregator, TrendSummary
from fieldpulse.services.domain.zone_generator import ZoneGenerator
from fieldpulse.utils.prescription_csv import export_filename, to_csv

logger = logging.getLogger(__name__)


class ParcelService:
    """
    Application service for parcel analytics.

    Orchestrates data fetching, domain computation and persistence.
    Follows the application layer pattern - no business logic here,
    only coordination between infrastructure and domain layers.
    """

    def __init__(
        self,
        store_client: ObservationStoreClient,
        alert_repository: AlertRepository,
        map_repository: PrescriptionMapRepository,
        aggregator: Optional[TrendAggregator] = None,
        evaluator: Optional[AlertEvaluator] = None,
        generator: Optional[ZoneGenerator] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            store_client: Client for the observation/assessment store
            alert_repository: Persistence for alerts
            map_repository: Persistence for prescription maps
            aggregator: Trend aggregator
            evaluator: Alert evaluator
            generator: Prescription zone generator
        """
        self.store_client = store_client
        self.alert_repository = alert_repository
        self.map_repository = map_repository
        self.aggregator = aggregator or TrendAggregator()
        self.evaluator = evaluator or AlertEvaluator()
        self.generator = generator or ZoneGenerator()

    async def get_trends(
        self,
        parcel_id: str,
        window_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> TrendSummary:
        """
        Fetch a parcel's history and summarize it over a window.

        Raises:
            StoreClientError: If data fetching fails
        """
        assessments = await self.store_client.get_assessments(parcel_id)
        observations = await self.store_client.get_observations(parcel_id)

        return self.aggregator.summarize(
            parcel_id=parcel_id,
            assessments=assessments,
            observations=observations,
            window_days=window_days,
            today=today,
        )

    async def evaluate_alerts(self, parcel_id: str) -> List[Alert]:
        """
        Run one alert evaluation pass for a parcel and persist new alerts.

        Assessment-based NDVI evaluation takes precedence; scene-level NDVI
        is used only when assessments carry no NDVI averages. A breach already
        recorded for the same alert type and source date is not raised again,
        so repeated passes over an unchanged batch persist nothing new.

        Returns:
            Newly raised alerts (empty with insufficient history)
        """
        assessments = await self.store_client.get_assessments(parcel_id)
        raised = self.evaluator.evaluate(assessments)

        has_ndvi_averages = sum(1 for a in assessments if a.ndvi_avg is not None) >= 2
        if not has_ndvi_averages:
            observations = await self.store_client.get_observations(parcel_id)
            raised.extend(self.evaluator.evaluate_observations(observations))

        recorded = {
            (a.alert_type, a.source_date)
            for a in self.alert_repository.list_for_parcel(parcel_id)
        }
        alerts = [a for a in raised if (a.alert_type, a.source_date) not in recorded]
        if len(alerts) < len(raised):
            logger.info(f"Skipped {len(raised) - len(alerts)} alert(s) already recorded "
                        f"for parcel {parcel_id}")

        for alert in alerts:
            self.alert_repository.add(alert)

        logger.info(f"Persisted {len(alerts)} new alert(s) for parcel {parcel_id}")
        return alerts

    def list_alerts(
        self,
        parcel_id: str,
        severity: Optional[AlertSeverity] = None,
    ) -> Tuple[List[Alert], AlertSummary]:
        """Alerts of a parcel filtered by severity, with summary over all of them."""
        alerts = self.alert_repository.list_for_parcel(parcel_id)
        return filter_alerts(alerts, severity=severity), summarize_alerts(alerts)

    def acknowledge_alert(self, alert_id: str) -> Alert:
        alert = self.alert_repository.get(alert_id)
        updated = self.evaluator.acknowledge(alert)
        return self.alert_repository.update(updated, expected_version=alert.version)

    def resolve_alert(self, alert_id: str) -> Alert:
        alert = self.alert_repository.get(alert_id)
        updated = self.evaluator.resolve(alert)
        return self.alert_repository.update(updated, expected_version=alert.version)

    async def generate_prescription(
        self,
        request: GenerationRequest,
        created_date: Optional[date] = None,
    ) -> PrescriptionMap:
        """
        Generate a draft prescription map from the parcel's latest assessment.

        Raises:
            InsufficientDataError: If the parcel has no assessment
            InvariantViolationError: If the assessment's areas are inconsistent
        """
        assessments = await self.store_client.get_assessments(request.parcel_id)
        if not assessments:
            raise InsufficientDataError(
                f"No health assessment available for parcel {request.parcel_id}",
                field="assessments",
                parcel_id=request.parcel_id,
            )

        latest = order_assessments(assessments)[-1]
        prescription = self.generator.generate_map(latest, request, created_date=created_date)
        return self.map_repository.add(prescription)

    def get_prescription(self, map_id: str) -> PrescriptionMap:
        return self.map_repository.get(map_id)

    def advance_prescription(self, map_id: str, target: MapStatus) -> PrescriptionMap:
        prescription = self.map_repository.get(map_id)
        updated = self.generator.transition(prescription, target)
        return self.map_repository.update(updated, expected_version=prescription.version)

    def export_prescription(self, map_id: str) -> Tuple[str, str]:
        """
        Returns:
            (file name, CSV content) for the map
        """
        prescription = self.map_repository.get(map_id)
        return export_filename(prescription), to_csv(prescription)
