"""
Domain service: prescription map generation from a health assessment.

This module partitions a parcel into management zones:
- One high performance zone covering the complement of all problem areas
- One zone per problem area, rated by its severity
- Per-zone application rates from the configured rate table
- Area accounting check (zones must sum to 100%)

Generated maps always start as drafts and are never edited in place.
"""
import copy
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Union

from fieldpulse.config import settings
from fieldpulse.domain.errors import (
    InsufficientDataError,
    InvalidTransitionError,
    InvariantViolationError,
)
from fieldpulse.domain.models import (
    GenerationRequest,
    HealthAssessment,
    MapStatus,
    MapType,
    PrescriptionMap,
    ProblemArea,
    Severity,
    Zone,
)
from fieldpulse.domain.reference_data import (
    GENERIC_PROBLEM_RECOMMENDATIONS,
    HIGH_PERFORMANCE_RECOMMENDATIONS,
    PROBLEM_RECOMMENDATIONS,
    RATE_TABLE,
    SEVERITY_HEALTH_SCORES,
    STANDARD_RATE,
    ZONE_COLORS,
)
from fieldpulse.services.domain.ingestion import check_problem_areas

logger = logging.getLogger(__name__)


NEXT_STATUS: Dict[MapStatus, MapStatus] = {
    MapStatus.DRAFT: MapStatus.APPROVED,
    MapStatus.APPROVED: MapStatus.APPLIED,
    MapStatus.APPLIED: MapStatus.COMPLETED,
}

HIGH_PERFORMANCE_FLOOR = 70.0
HIGH_PERFORMANCE_BONUS = 10.0
MAX_HEALTH_SCORE = 100.0


@dataclass
class ZoneGeneratorConfig:
    """Configuration for prescription zone generation."""

    rate_table: Dict[MapType, Dict[str, float]] = field(
        default_factory=lambda: copy.deepcopy(RATE_TABLE)
    )
    """Application rate per map type, keyed by severity or "standard" """

    problem_recommendations: Dict[str, List[str]] = field(
        default_factory=lambda: copy.deepcopy(PROBLEM_RECOMMENDATIONS)
    )
    """Zone recommendations keyed by problem type"""

    area_tolerance: float = field(default_factory=lambda: settings.zone_area_tolerance)
    """Allowed deviation of the zone area sum from 100%"""

    clamp_high_performance_score: bool = field(
        default_factory=lambda: settings.clamp_high_performance_score
    )
    """Cap the high performance zone score at 100"""


class ZoneGenerator:
    """
    Domain service turning the latest assessment into a prescription map.

    Rejects empty assessments with InsufficientDataError and inconsistent
    area accounting with InvariantViolationError; never clamps areas to
    hide upstream corruption.
    """

    def __init__(
        self,
        config: Optional[ZoneGeneratorConfig] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.config = config or ZoneGeneratorConfig()
        self.id_factory = id_factory

    def application_rate(self, map_type: MapType, severity: Union[Severity, str]) -> float:
        """
        Look up the application rate for a map type and severity.

        Args:
            map_type: Requested map type
            severity: Problem severity, or "standard" for unaffected areas

        Returns:
            Application rate in the map type's unit
        """
        key = severity.value if isinstance(severity, Severity) else severity
        rates = self.config.rate_table[MapType(map_type)]
        return float(rates.get(key, rates[STANDARD_RATE]))

    def zone_recommendations(self, problem_type: str) -> List[str]:
        recommendations = self.config.problem_recommendations.get(problem_type)
        if recommendations is None:
            logger.debug(f"No recommendations for problem type {problem_type!r}, using generic")
            return list(GENERIC_PROBLEM_RECOMMENDATIONS)
        return list(recommendations)

    def high_performance_score(self, overall_health_score: Optional[float]) -> float:
        """Optimistic score of the least affected area."""
        if overall_health_score is None:
            return HIGH_PERFORMANCE_FLOOR
        score = max(HIGH_PERFORMANCE_FLOOR, overall_health_score + HIGH_PERFORMANCE_BONUS)
        if self.config.clamp_high_performance_score:
            score = min(MAX_HEALTH_SCORE, score)
        return score

    def generate_zones(self, assessment: HealthAssessment, map_type: MapType) -> List[Zone]:
        """
        Partition a parcel into management zones.

        Args:
            assessment: Most recent assessment of the parcel
            map_type: Requested map type

        Returns:
            High performance zone followed by one zone per problem area

        Raises:
            InsufficientDataError: If the assessment has neither score nor problem areas
            InvariantViolationError: If problem areas exceed 100% or zones do not sum to 100%
        """
        map_type = MapType(map_type)

        if not assessment.problem_areas and assessment.overall_health_score is None:
            raise InsufficientDataError(
                f"Assessment of parcel {assessment.parcel_id} on "
                f"{assessment.assessment_date.isoformat()} has no score and no problem areas",
                field="problem_areas",
                parcel_id=assessment.parcel_id,
            )

        check_problem_areas(assessment, self.config.area_tolerance)

        complement = max(0.0, 100.0 - assessment.problem_area_total)
        zones = [
            Zone(
                id="zone_1",
                name="High Performance Zone",
                area_percentage=complement,
                health_score=self.high_performance_score(assessment.overall_health_score),
                application_rate=self.application_rate(map_type, STANDARD_RATE),
                color=ZONE_COLORS["high_performance"],
                recommendations=list(HIGH_PERFORMANCE_RECOMMENDATIONS),
            )
        ]

        for index, area in enumerate(assessment.problem_areas, start=1):
            zones.append(self._problem_zone(index, area, map_type))

        self.check_zone_areas(zones)

        logger.info(f"Generated {len(zones)} {map_type.value} zones for parcel "
                    f"{assessment.parcel_id} (high performance area {complement:.2f}%)")
        return zones

    def _problem_zone(self, index: int, area: ProblemArea, map_type: MapType) -> Zone:
        return Zone(
            id=f"problem_zone_{index}",
            name=f"{area.type.replace('_', ' ').title()} Zone",
            area_percentage=area.area_percentage,
            health_score=SEVERITY_HEALTH_SCORES[area.severity],
            application_rate=self.application_rate(map_type, area.severity),
            color=ZONE_COLORS[area.severity.value],
            severity=area.severity,
            recommendations=self.zone_recommendations(area.type),
        )

    def check_zone_areas(self, zones: List[Zone]) -> None:
        """
        Verify the zones partition the whole parcel.

        Raises:
            InvariantViolationError: If the area sum differs from 100% beyond tolerance
        """
        total = sum(zone.area_percentage for zone in zones)
        if abs(total - 100.0) > self.config.area_tolerance:
            raise InvariantViolationError(
                f"Zone areas sum to {total:.6f}%, expected 100%",
                field="zones",
                total=total,
            )

    def generate_map(
        self,
        assessment: HealthAssessment,
        request: GenerationRequest,
        created_date: Optional[date] = None,
    ) -> PrescriptionMap:
        """
        Build a draft prescription map from one assessment.

        Raises:
            InvariantViolationError: If the request targets another parcel
        """
        if request.parcel_id != assessment.parcel_id:
            raise InvariantViolationError(
                f"Assessment belongs to parcel {assessment.parcel_id}, "
                f"request targets {request.parcel_id}",
                field="parcel_id",
            )

        zones = self.generate_zones(assessment, request.map_type)

        return PrescriptionMap(
            id=self.id_factory(),
            parcel_id=request.parcel_id,
            map_type=request.map_type,
            crop_name=request.crop_name,
            growth_stage=request.growth_stage,
            status=MapStatus.DRAFT,
            zones=zones,
            estimated_cost=request.estimated_cost,
            application_method=request.application_method,
            created_date=created_date or date.today(),
            source_assessment_date=assessment.assessment_date,
            map_data={
                "health_score": assessment.overall_health_score,
                "ndvi_avg": assessment.ndvi_avg,
                "generation_method": "satellite_based",
                "recommendations": [r.model_dump() for r in assessment.recommendations],
            },
        )

    def transition(self, prescription: PrescriptionMap, target: MapStatus) -> PrescriptionMap:
        """
        Advance a map one step along draft -> approved -> applied -> completed.

        Raises:
            InvalidTransitionError: If target is not the next status
        """
        target = MapStatus(target)
        if NEXT_STATUS.get(prescription.status) != target:
            raise InvalidTransitionError(
                f"Prescription map {prescription.id} cannot move from "
                f"{prescription.status.value} to {target.value}",
                field="status",
                map_id=prescription.id,
                current=prescription.status.value,
                requested=target.value,
            )

        logger.info(f"Prescription map {prescription.id}: "
                    f"{prescription.status.value} -> {target.value}")
        return prescription.model_copy(
            update={"status": target, "version": prescription.version + 1}
        )
