"""
Domain service: validation of observation and assessment batches.

Trend and alert logic are defined only over date-ordered records of a
single parcel, so every batch passes through here before computation.
"""
import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

from fieldpulse.domain.errors import InvariantViolationError
from fieldpulse.domain.models import HealthAssessment, IndexObservation

logger = logging.getLogger(__name__)

Record = TypeVar("Record", IndexObservation, HealthAssessment)


def parse_observations(
    raw: Iterable[Union[IndexObservation, Mapping[str, Any]]],
) -> List[IndexObservation]:
    """Validate raw observation payloads into IndexObservation records."""
    return [
        item if isinstance(item, IndexObservation) else IndexObservation.model_validate(item)
        for item in raw
    ]


def parse_assessments(
    raw: Iterable[Union[HealthAssessment, Mapping[str, Any]]],
    area_tolerance: float = 1e-6,
) -> List[HealthAssessment]:
    """Validate raw assessment payloads, including problem-area accounting."""
    assessments = [
        item if isinstance(item, HealthAssessment) else HealthAssessment.model_validate(item)
        for item in raw
    ]
    for assessment in assessments:
        check_problem_areas(assessment, area_tolerance)
    return assessments


def check_problem_areas(assessment: HealthAssessment, tolerance: float = 1e-6) -> None:
    """
    Ensure problem areas of one assessment cover at most 100% of the parcel.

    Raises:
        InvariantViolationError: If the problem areas sum above 100%
    """
    total = assessment.problem_area_total
    if total > 100.0 + tolerance:
        raise InvariantViolationError(
            f"Problem areas cover {total:.4f}% of parcel {assessment.parcel_id}, above 100%",
            field="problem_areas",
            parcel_id=assessment.parcel_id,
            assessment_date=assessment.assessment_date.isoformat(),
            total=total,
        )


def ensure_single_parcel(records: Sequence[Record], parcel_id: Optional[str] = None) -> None:
    """
    Reject batches mixing records of different parcels.

    Raises:
        InvariantViolationError: If a record belongs to another parcel
    """
    if not records:
        return
    expected = parcel_id if parcel_id is not None else records[0].parcel_id
    for record in records:
        if record.parcel_id != expected:
            raise InvariantViolationError(
                f"Batch for parcel {expected} contains a record of parcel {record.parcel_id}",
                field="parcel_id",
                expected=expected,
                found=record.parcel_id,
            )


def order_observations(observations: Iterable[IndexObservation]) -> List[IndexObservation]:
    """
    Sort observations oldest first.

    Raises:
        InvariantViolationError: If the same scene appears twice for one date
    """
    ordered = sorted(observations, key=lambda o: o.acquisition_date)
    seen = set()
    for observation in ordered:
        key = (observation.acquisition_date, observation.scene_id)
        if key in seen:
            raise InvariantViolationError(
                f"Duplicate observation for {observation.acquisition_date.isoformat()}",
                field="acquisition_date",
                scene_id=observation.scene_id,
            )
        seen.add(key)
    return ordered


def order_assessments(assessments: Iterable[HealthAssessment]) -> List[HealthAssessment]:
    """
    Sort assessments oldest first.

    Raises:
        InvariantViolationError: If two assessments share a date
    """
    ordered = sorted(assessments, key=lambda a: a.assessment_date)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.assessment_date == current.assessment_date:
            raise InvariantViolationError(
                f"Two assessments dated {current.assessment_date.isoformat()}",
                field="assessment_date",
                parcel_id=current.parcel_id,
            )
    return ordered
