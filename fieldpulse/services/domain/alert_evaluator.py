"""
Domain service: threshold alerts and the alert status lifecycle.

Evaluation compares the two most recent records of a parcel against
configured thresholds. Every rule is evaluated independently, so one pass
may raise several alerts. Alerts move active -> acknowledged -> resolved
(or active -> resolved); resolved alerts never change again.
"""
import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from fieldpulse.config import settings
from fieldpulse.domain.errors import InvalidTransitionError
from fieldpulse.domain.models import (
    Alert,
    AlertSeverity,
    AlertStatus,
    AlertType,
    HealthAssessment,
    IndexObservation,
)
from fieldpulse.domain.reference_data import ALERT_RECOMMENDATIONS
from fieldpulse.services.domain.ingestion import (
    ensure_single_parcel,
    order_assessments,
    order_observations,
)

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[AlertStatus, set] = {
    AlertStatus.ACTIVE: {AlertStatus.ACKNOWLEDGED, AlertStatus.RESOLVED},
    AlertStatus.ACKNOWLEDGED: {AlertStatus.RESOLVED},
    AlertStatus.RESOLVED: set(),
}


@dataclass(frozen=True)
class SeverityBands:
    """Drop magnitudes at which severity escalates beyond low."""
    medium: float
    high: float
    critical: float

    def severity_for(self, magnitude: float) -> AlertSeverity:
        if magnitude >= self.critical:
            return AlertSeverity.CRITICAL
        if magnitude >= self.high:
            return AlertSeverity.HIGH
        if magnitude >= self.medium:
            return AlertSeverity.MEDIUM
        return AlertSeverity.LOW


@dataclass
class AlertThresholds:
    """Tenant-configurable alert thresholds."""

    ndvi_drop_threshold: float = field(default_factory=lambda: settings.ndvi_drop_threshold)
    """NDVI change strictly below this raises ndvi_drop"""

    ndvi_drop_bands: SeverityBands = field(default_factory=lambda: SeverityBands(
        medium=settings.ndvi_drop_medium,
        high=settings.ndvi_drop_high,
        critical=settings.ndvi_drop_critical,
    ))

    health_decline_threshold: float = field(default_factory=lambda: settings.health_decline_threshold)
    """Health score change strictly below this raises health_decline"""

    health_decline_bands: SeverityBands = field(default_factory=lambda: SeverityBands(
        medium=settings.health_decline_medium,
        high=settings.health_decline_high,
        critical=settings.health_decline_critical,
    ))

    low_health_enabled: bool = field(default_factory=lambda: settings.low_health_enabled)
    low_health_threshold: float = field(default_factory=lambda: settings.low_health_threshold)
    low_health_critical_threshold: float = field(
        default_factory=lambda: settings.low_health_critical_threshold
    )


@dataclass(frozen=True)
class AlertSummary:
    """Alert counts for display."""
    total: int
    by_severity: Dict[str, int]
    by_status: Dict[str, int]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _difference(latest: Optional[float], previous: Optional[float]) -> Optional[float]:
    if latest is None or previous is None:
        return None
    return latest - previous


class AlertEvaluator:
    """
    Domain service raising alerts from consecutive records of one parcel.

    Insufficient history is a no-op. Invalid status commands raise
    InvalidTransitionError.
    """

    def __init__(
        self,
        thresholds: Optional[AlertThresholds] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.thresholds = thresholds or AlertThresholds()
        self.clock = clock
        self.id_factory = id_factory

    def evaluate(self, assessments: Sequence[HealthAssessment]) -> List[Alert]:
        """
        Evaluate the two most recent assessments of a parcel.

        Args:
            assessments: Assessments of one parcel, any order

        Returns:
            Newly raised alerts, empty when history is insufficient
        """
        if len(assessments) < 2:
            logger.info(f"Skipping alert evaluation: {len(assessments)} assessment(s), need 2")
            return []

        ensure_single_parcel(assessments)
        ordered = order_assessments(assessments)
        previous, latest = ordered[-2], ordered[-1]

        ndvi_change = _difference(latest.ndvi_avg, previous.ndvi_avg)
        health_change = _difference(latest.overall_health_score, previous.overall_health_score)

        examined = {
            "previous_ndvi_avg": previous.ndvi_avg,
            "current_ndvi_avg": latest.ndvi_avg,
            "ndvi_change": ndvi_change,
            "previous_health_score": previous.overall_health_score,
            "current_health_score": latest.overall_health_score,
            "health_change": health_change,
        }
        trigger_values = {name: float(value) for name, value in examined.items() if value is not None}

        logger.debug(f"Evaluating parcel {latest.parcel_id} on {latest.assessment_date}: "
                     f"ndvi_change={ndvi_change}, health_change={health_change}")

        alerts = []

        ndvi_alert = self._check_ndvi_drop(
            latest.parcel_id, latest.assessment_date, ndvi_change, previous.ndvi_avg, trigger_values
        )
        if ndvi_alert:
            alerts.append(ndvi_alert)

        decline_alert = self._check_health_decline(
            latest.parcel_id, latest.assessment_date, health_change, trigger_values
        )
        if decline_alert:
            alerts.append(decline_alert)

        low_alert = self._check_low_health(latest, trigger_values)
        if low_alert:
            alerts.append(low_alert)

        logger.info(f"Alert evaluation for parcel {latest.parcel_id} raised {len(alerts)} alert(s)")
        return alerts

    def evaluate_observations(self, observations: Sequence[IndexObservation]) -> List[Alert]:
        """Evaluate the NDVI drop between the two latest scenes carrying NDVI."""
        with_ndvi = [o for o in observations if o.ndvi is not None]
        if len(with_ndvi) < 2:
            logger.info(f"Skipping NDVI evaluation: {len(with_ndvi)} scene(s) with NDVI, need 2")
            return []

        ensure_single_parcel(with_ndvi)
        ordered = order_observations(with_ndvi)
        previous, latest = ordered[-2], ordered[-1]
        ndvi_change = latest.ndvi - previous.ndvi

        trigger_values = {
            "previous_ndvi": float(previous.ndvi),
            "current_ndvi": float(latest.ndvi),
            "ndvi_change": float(ndvi_change),
        }
        alert = self._check_ndvi_drop(
            latest.parcel_id, latest.acquisition_date, ndvi_change, previous.ndvi, trigger_values
        )
        return [alert] if alert else []

    def _check_ndvi_drop(
        self,
        parcel_id: str,
        source_date: date,
        ndvi_change: Optional[float],
        previous_ndvi: Optional[float],
        trigger_values: Dict[str, float],
    ) -> Optional[Alert]:
        if ndvi_change is None or ndvi_change >= self.thresholds.ndvi_drop_threshold:
            return None

        magnitude = abs(ndvi_change)
        affected_area = None
        if previous_ndvi:
            affected_area = min(100.0, abs(ndvi_change / previous_ndvi) * 200)

        return self._new_alert(
            parcel_id=parcel_id,
            source_date=source_date,
            alert_type=AlertType.NDVI_DROP,
            severity=self.thresholds.ndvi_drop_bands.severity_for(magnitude),
            title="Significant NDVI Drop Detected",
            description=f"NDVI decreased by {magnitude:.3f} since last measurement",
            trigger_values=trigger_values,
            ndvi_change=ndvi_change,
            affected_area_percentage=affected_area,
        )

    def _check_health_decline(
        self,
        parcel_id: str,
        source_date: date,
        health_change: Optional[float],
        trigger_values: Dict[str, float],
    ) -> Optional[Alert]:
        if health_change is None or health_change >= self.thresholds.health_decline_threshold:
            return None

        magnitude = abs(health_change)
        return self._new_alert(
            parcel_id=parcel_id,
            source_date=source_date,
            alert_type=AlertType.HEALTH_DECLINE,
            severity=self.thresholds.health_decline_bands.severity_for(magnitude),
            title="Crop Health Declining",
            description=f"Health score dropped by {magnitude:.1f} points since last assessment",
            trigger_values=trigger_values,
        )

    def _check_low_health(
        self,
        latest: HealthAssessment,
        trigger_values: Dict[str, float],
    ) -> Optional[Alert]:
        score = latest.overall_health_score
        if not self.thresholds.low_health_enabled or score is None:
            return None
        if score >= self.thresholds.low_health_threshold:
            return None

        if score < self.thresholds.low_health_critical_threshold:
            severity = AlertSeverity.CRITICAL
        else:
            severity = AlertSeverity.HIGH

        recommendations = [r.description for r in latest.recommendations]
        return self._new_alert(
            parcel_id=latest.parcel_id,
            source_date=latest.assessment_date,
            alert_type=AlertType.LOW_HEALTH,
            severity=severity,
            title="Crop Health Below Normal",
            description=f"Health score is {score:g}/100",
            trigger_values=trigger_values,
            recommendations=recommendations or None,
        )

    def _new_alert(
        self,
        parcel_id: str,
        source_date: date,
        alert_type: AlertType,
        severity: AlertSeverity,
        title: str,
        description: str,
        trigger_values: Dict[str, float],
        ndvi_change: Optional[float] = None,
        affected_area_percentage: Optional[float] = None,
        recommendations: Optional[List[str]] = None,
    ) -> Alert:
        logger.debug(f"Raising {severity.value} {alert_type.value} alert for parcel {parcel_id}")
        return Alert(
            id=self.id_factory(),
            parcel_id=parcel_id,
            source_date=source_date,
            alert_type=alert_type,
            severity=severity,
            status=AlertStatus.ACTIVE,
            title=title,
            description=description,
            trigger_values=dict(trigger_values),
            ndvi_change=ndvi_change,
            affected_area_percentage=affected_area_percentage,
            recommendations=recommendations or list(ALERT_RECOMMENDATIONS[alert_type]),
            created_at=self.clock(),
        )

    def transition(self, alert: Alert, target: AlertStatus) -> Alert:
        """
        Move an alert to a new status, stamping the matching timestamp.

        Raises:
            InvalidTransitionError: If the current status disallows the move
        """
        if target not in ALLOWED_TRANSITIONS[alert.status]:
            raise InvalidTransitionError(
                f"Alert {alert.id} cannot move from {alert.status.value} to {target.value}",
                field="status",
                alert_id=alert.id,
                current=alert.status.value,
                requested=target.value,
            )

        update = {"status": target, "version": alert.version + 1}
        if target == AlertStatus.ACKNOWLEDGED:
            update["acknowledged_at"] = self.clock()
        elif target == AlertStatus.RESOLVED:
            update["resolved_at"] = self.clock()

        logger.info(f"Alert {alert.id}: {alert.status.value} -> {target.value}")
        return alert.model_copy(update=update)

    def acknowledge(self, alert: Alert) -> Alert:
        return self.transition(alert, AlertStatus.ACKNOWLEDGED)

    def resolve(self, alert: Alert) -> Alert:
        return self.transition(alert, AlertStatus.RESOLVED)


def filter_alerts(
    alerts: Sequence[Alert],
    severity: Optional[AlertSeverity] = None,
    status: Optional[AlertStatus] = None,
) -> List[Alert]:
    """Alerts matching the given severity and status, newest first."""
    matching = [
        a for a in alerts
        if (severity is None or a.severity == severity)
        and (status is None or a.status == status)
    ]
    return sorted(matching, key=lambda a: a.created_at, reverse=True)


def summarize_alerts(alerts: Sequence[Alert]) -> AlertSummary:
    severities = Counter(a.severity.value for a in alerts)
    statuses = Counter(a.status.value for a in alerts)
    return AlertSummary(
        total=len(alerts),
        by_severity={s.value: severities.get(s.value, 0) for s in AlertSeverity},
        by_status={s.value: statuses.get(s.value, 0) for s in AlertStatus},
    )
