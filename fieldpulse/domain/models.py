"""
Domain models for parcel observations, assessments, alerts and prescriptions.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.). Records are
frozen: state changes produce a new copy.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


def _lower(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class IndexKind(str, Enum):
    """Scalar vegetation indices delivered per scene."""
    NDVI = "ndvi"
    EVI = "evi"
    NDWI = "ndwi"
    SAVI = "savi"


class Severity(str, Enum):
    """Severity of a problem area."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GrowthStage(str, Enum):
    GERMINATION = "germination"
    SEEDLING = "seedling"
    VEGETATIVE = "vegetative"
    FLOWERING = "flowering"
    FRUITING = "fruiting"
    MATURITY = "maturity"
    HARVEST = "harvest"


class AlertType(str, Enum):
    NDVI_DROP = "ndvi_drop"
    HEALTH_DECLINE = "health_decline"
    LOW_HEALTH = "low_health"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class MapType(str, Enum):
    FERTILIZER = "fertilizer"
    IRRIGATION = "irrigation"
    PESTICIDE = "pesticide"


class MapStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    APPLIED = "applied"
    COMPLETED = "completed"


class IndexObservation(BaseModel):
    """Scene-level index statistics for one parcel and acquisition date."""
    parcel_id: str
    acquisition_date: date
    scene_id: Optional[str] = None
    ndvi: Optional[float] = None
    evi: Optional[float] = None
    ndwi: Optional[float] = None
    savi: Optional[float] = None
    cloud_coverage_percent: Optional[float] = Field(default=None, ge=0, le=100)
    spatial_resolution_m: Optional[float] = Field(default=None, gt=0)

    class Config:
        frozen = True

    def value_of(self, kind: IndexKind) -> Optional[float]:
        """Return the value of an index, None when the scene lacks it."""
        return getattr(self, kind.value)


class ProblemArea(BaseModel):
    """Affected sub-area of a parcel reported by an assessment."""
    type: str = Field(description="Problem category, e.g. low_vigor or water_stress")
    severity: Severity
    area_percentage: float = Field(ge=0, le=100)
    location: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value: Any) -> Any:
        return _lower(value)


class StressIndicator(BaseModel):
    """Stress level reported for one indicator (water, nutrient, ...)."""
    level: str
    confidence: Optional[float] = Field(default=None, ge=0, le=1)

    class Config:
        frozen = True


class Recommendation(BaseModel):
    """Action item attached to an assessment."""
    type: str
    priority: str = "medium"
    description: str

    class Config:
        frozen = True


class HealthAssessment(BaseModel):
    """Periodic health snapshot of a parcel."""
    parcel_id: str
    assessment_date: date
    overall_health_score: Optional[float] = Field(default=None, ge=0, le=100)
    ndvi_avg: Optional[float] = None
    ndvi_min: Optional[float] = None
    ndvi_max: Optional[float] = None
    ndvi_std: Optional[float] = Field(default=None, ge=0)
    growth_stage: Optional[GrowthStage] = None
    problem_areas: List[ProblemArea] = Field(default_factory=list)
    stress_indicators: Dict[str, StressIndicator] = Field(default_factory=dict)
    recommendations: List[Recommendation] = Field(default_factory=list)
    predicted_yield: Optional[float] = None

    class Config:
        frozen = True

    @field_validator("growth_stage", mode="before")
    @classmethod
    def normalize_growth_stage(cls, value: Any) -> Any:
        return _lower(value)

    @property
    def problem_area_total(self) -> float:
        return sum(area.area_percentage for area in self.problem_areas)


class Alert(BaseModel):
    """Threshold breach raised for a parcel."""
    id: str
    parcel_id: str
    alert_type: AlertType
    severity: AlertSeverity
    status: AlertStatus = AlertStatus.ACTIVE
    title: str
    description: str
    trigger_values: Dict[str, float] = Field(default_factory=dict)
    ndvi_change: Optional[float] = None
    affected_area_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list)
    source_date: Optional[date] = Field(
        default=None,
        description="Date of the latest assessment or scene that raised the alert"
    )
    created_at: datetime
    acknowledged_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    version: int = 0

    class Config:
        frozen = True


class Zone(BaseModel):
    """Management zone with a uniform application rate."""
    id: str
    name: str
    area_percentage: float = Field(ge=0, le=100)
    health_score: float
    application_rate: float
    color: str
    severity: Optional[Severity] = None
    recommendations: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class PrescriptionMap(BaseModel):
    """Variable-rate application plan generated from one assessment."""
    id: str
    parcel_id: str
    map_type: MapType
    crop_name: str
    growth_stage: Optional[str] = None
    status: MapStatus = MapStatus.DRAFT
    zones: List[Zone]
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    application_method: Optional[str] = None
    created_date: date
    source_assessment_date: date
    map_data: Dict[str, Any] = Field(default_factory=dict)
    version: int = 0

    class Config:
        frozen = True


class GenerationRequest(BaseModel):
    """Caller-supplied parameters for a prescription map."""
    parcel_id: str
    map_type: MapType
    crop_name: str
    growth_stage: Optional[str] = None
    application_method: Optional[str] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)

    @field_validator("map_type", mode="before")
    @classmethod
    def normalize_map_type(cls, value: Any) -> Any:
        return _lower(value)
