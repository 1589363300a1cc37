"""
Reference tables used by the classification, alert and prescription logic.

Centralizing these values makes it easy to override them per tenant
without touching the algorithms that read them.
"""
from typing import Dict, List, Tuple

from fieldpulse.domain.models import AlertType, IndexKind, MapType, Severity


class IndexBands:
    """Qualitative bands for scalar index values."""

    # (exclusive lower bound, band, display colour, weight); first match wins
    NDVI: List[Tuple[float, str, str, int]] = [
        (0.7, "Excellent", "#16a34a", 5),
        (0.5, "Good", "#4ade80", 4),
        (0.3, "Fair", "#facc15", 3),
        (0.1, "Poor", "#f97316", 2),
    ]
    NDVI_FLOOR: Tuple[str, str, int] = ("Critical", "#dc2626", 1)

    # Index kinds without breakpoints classify as Normal
    DEFAULT: Tuple[str, str, int] = ("Normal", "#9ca3af", 0)
    UNKNOWN: Tuple[str, str, int] = ("Unknown", "#9ca3af", 0)

    BREAKPOINTS: Dict[IndexKind, List[Tuple[float, str, str, int]]] = {
        IndexKind.NDVI: NDVI,
    }

    # Display range per index kind
    VALUE_RANGES: Dict[IndexKind, Tuple[float, float]] = {
        IndexKind.NDVI: (0.0, 1.0),
        IndexKind.EVI: (0.0, 1.0),
        IndexKind.NDWI: (-1.0, 1.0),
        IndexKind.SAVI: (0.0, 1.0),
    }

    # (exclusive upper bound, description) for NDVI interpretation text
    NDVI_DESCRIPTIONS: List[Tuple[float, str]] = [
        (0.1, "Bare soil or water - No vegetation detected"),
        (0.2, "Very sparse vegetation - Early germination or severe stress"),
        (0.3, "Sparse vegetation - Young crops or moderate stress"),
        (0.5, "Moderate vegetation - Growing crops, possible mild stress"),
        (0.7, "Dense vegetation - Healthy mature crops"),
        (0.9, "Very dense vegetation - Peak vegetative growth"),
    ]
    NDVI_DESCRIPTION_CEILING = "Extremely dense vegetation - Optimal conditions"


class StressBands:
    """Stress indicator levels mapped to (label, colour, rank)."""

    LEVELS: Dict[str, Tuple[str, str, int]] = {
        "low": ("Low", "green", 1),
        "medium": ("Medium", "yellow", 2),
        "high": ("High", "red", 3),
    }
    UNKNOWN: Tuple[str, str, int] = ("Unknown", "gray", 0)


class HealthScoreBands:
    """Overall health score colour bands (inclusive lower bound)."""

    BANDS: List[Tuple[float, str]] = [
        (80.0, "green"),
        (60.0, "yellow"),
        (40.0, "orange"),
    ]
    FLOOR = "red"
    UNKNOWN = "unknown"


STANDARD_RATE = "standard"

# Application rate per map type and severity (units depend on map type)
RATE_TABLE: Dict[MapType, Dict[str, float]] = {
    MapType.FERTILIZER: {STANDARD_RATE: 50, "low": 40, "medium": 65, "high": 80},
    MapType.IRRIGATION: {STANDARD_RATE: 25, "low": 20, "medium": 35, "high": 45},
    MapType.PESTICIDE: {STANDARD_RATE: 2, "low": 1.5, "medium": 2.5, "high": 3.5},
}

# Fixed health score assigned to problem-area zones
SEVERITY_HEALTH_SCORES: Dict[Severity, float] = {
    Severity.HIGH: 20,
    Severity.MEDIUM: 40,
    Severity.LOW: 60,
}

ZONE_COLORS: Dict[str, str] = {
    "high_performance": "#10b981",
    Severity.HIGH.value: "#ef4444",
    Severity.MEDIUM.value: "#f59e0b",
    Severity.LOW.value: "#84cc16",
}

HIGH_PERFORMANCE_RECOMMENDATIONS: List[str] = [
    "Maintain current management",
    "Monitor for optimal harvest timing",
]

PROBLEM_RECOMMENDATIONS: Dict[str, List[str]] = {
    "low_vigor": [
        "Increase fertilizer application",
        "Check soil pH levels",
        "Consider soil amendments",
    ],
    "water_stress": [
        "Increase irrigation frequency",
        "Check irrigation system efficiency",
        "Consider drought-resistant varieties",
    ],
    "nutrient_deficiency": [
        "Apply balanced NPK fertilizer",
        "Conduct soil test",
        "Consider micronutrient supplements",
    ],
}

GENERIC_PROBLEM_RECOMMENDATIONS: List[str] = [
    "Monitor closely",
    "Apply standard treatment",
]

ALERT_RECOMMENDATIONS: Dict[AlertType, List[str]] = {
    AlertType.NDVI_DROP: [
        "Inspect field for pest damage or disease",
        "Check irrigation system",
        "Consider soil testing",
    ],
    AlertType.HEALTH_DECLINE: [
        "Schedule a field inspection of declining areas",
        "Review recent irrigation and fertilization records",
        "Compare with the latest stress indicators",
    ],
    AlertType.LOW_HEALTH: [
        "Check soil moisture levels",
        "Inspect for pest or disease damage",
        "Consider nutrient supplementation",
        "Review irrigation schedule",
    ],
}
