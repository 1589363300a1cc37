"""
Unit tests for index and stress classification.

Tests cover:
- NDVI breakpoints and band boundaries
- Totality for out-of-range and missing input
- Non-NDVI index kinds
- Stress level passthrough
- Health score colour bands
"""
import math
import pytest

from fieldpulse.domain.errors import ErrorKind, OutOfRangeError
from fieldpulse.domain.models import IndexKind, StressIndicator
from fieldpulse.services.domain.health_classifier import HealthClassifier


@pytest.fixture
def classifier() -> HealthClassifier:
    return HealthClassifier()


# ============================================================
# NDVI Band Tests
# ============================================================

class TestNdviBands:
    """Tests for NDVI breakpoints."""

    @pytest.mark.parametrize("value,band", [
        (0.85, "Excellent"),
        (0.71, "Excellent"),
        (0.7, "Good"),
        (0.6, "Good"),
        (0.5, "Fair"),
        (0.31, "Fair"),
        (0.3, "Poor"),
        (0.2, "Poor"),
        (0.1, "Critical"),
        (0.0, "Critical"),
    ])
    def test_breakpoints(self, classifier, value, band):
        """Breakpoints are exclusive lower bounds."""
        assert classifier.classify_ndvi(value).band == band

    def test_out_of_physical_range_is_classified(self, classifier):
        """Values outside [-1, 1] still get a band."""
        assert classifier.classify_ndvi(1.8).band == "Excellent"
        assert classifier.classify_ndvi(-3.0).band == "Critical"
        assert classifier.classify_ndvi(math.inf).band == "Excellent"

    def test_weight_is_monotone(self, classifier):
        """Higher NDVI never yields a lower display weight."""
        values = [-0.5, 0.05, 0.2, 0.4, 0.6, 0.9]
        weights = [classifier.classify_ndvi(v).weight for v in values]
        assert weights == sorted(weights)

    def test_classification_is_deterministic(self, classifier):
        """Classifying the same value twice yields the same band."""
        assert classifier.classify_ndvi(0.55) == classifier.classify_ndvi(0.55)

    def test_integer_input(self, classifier):
        assert classifier.classify_ndvi(1).band == "Excellent"


# ============================================================
# Missing Value Tests
# ============================================================

class TestMissingValues:
    """Tests for missing or non-numeric input."""

    @pytest.mark.parametrize("value", [None, float("nan"), "0.6", True])
    def test_missing_degrades_to_unknown(self, classifier, value):
        result = classifier.classify_ndvi(value)

        assert result.band == "Unknown"
        assert result.value is None
        assert not result.is_known

    def test_required_missing_raises(self, classifier):
        """Mandatory classification rejects missing values."""
        with pytest.raises(OutOfRangeError) as exc_info:
            classifier.classify_index(None, IndexKind.NDVI, required=True)

        assert exc_info.value.kind == ErrorKind.OUT_OF_RANGE
        assert exc_info.value.field == "ndvi"

    def test_zero_is_not_missing(self, classifier):
        result = classifier.classify_ndvi(0.0)

        assert result.is_known
        assert result.band == "Critical"


# ============================================================
# Other Index Kinds
# ============================================================

class TestOtherIndices:
    """Tests for index kinds without breakpoints."""

    @pytest.mark.parametrize("kind", [IndexKind.EVI, IndexKind.NDWI, IndexKind.SAVI])
    def test_normal_band(self, classifier, kind):
        assert classifier.classify_index(0.4, kind).band == "Normal"

    def test_kind_accepts_string(self, classifier):
        assert classifier.classify_index(0.8, "ndvi").band == "Excellent"

    def test_value_ranges(self, classifier):
        assert classifier.value_range(IndexKind.NDWI) == (-1.0, 1.0)
        assert classifier.value_range("savi") == (0.0, 1.0)

    def test_custom_breakpoints(self):
        """Breakpoint tables can be overridden per instance."""
        classifier = HealthClassifier(breakpoints={
            IndexKind.EVI: [(0.5, "Dense", "#000000", 2)],
        })

        assert classifier.classify_index(0.6, IndexKind.EVI).band == "Dense"
        assert classifier.classify_index(0.6, IndexKind.NDVI).band == "Normal"

    def test_default_breakpoints_stay_per_instance(self):
        """Editing one classifier's table leaves other classifiers untouched."""
        tenant = HealthClassifier()
        tenant.breakpoints[IndexKind.NDVI].insert(0, (0.9, "Peak", "#000000", 6))

        assert tenant.classify_ndvi(0.95).band == "Peak"
        assert HealthClassifier().classify_ndvi(0.95).band == "Excellent"


# ============================================================
# Stress Indicator Tests
# ============================================================

class TestStressClassification:
    """Tests for stress level passthrough."""

    @pytest.mark.parametrize("level,label,rank", [
        ("low", "Low", 1),
        ("Medium", "Medium", 2),
        ("HIGH", "High", 3),
    ])
    def test_known_levels(self, classifier, level, label, rank):
        result = classifier.classify_stress(StressIndicator(level=level, confidence=0.7))

        assert result.label == label
        assert result.rank == rank
        assert result.confidence == 0.7

    @pytest.mark.parametrize("indicator", ["severe", None, {"confidence": 0.2}, 3])
    def test_unknown_levels(self, classifier, indicator):
        assert classifier.classify_stress(indicator).label == "Unknown"

    def test_mapping_input(self, classifier):
        result = classifier.classify_stress({"level": "medium", "confidence": 0.4}, name="water")

        assert result.name == "water"
        assert result.label == "Medium"

    def test_classify_all_indicators(self, classifier):
        results = classifier.classify_stress_indicators({
            "water_stress": StressIndicator(level="high"),
            "heat_stress": StressIndicator(level="extreme"),
        })

        assert results["water_stress"].color == "red"
        assert results["heat_stress"].label == "Unknown"


# ============================================================
# Health Score and Description Tests
# ============================================================

class TestHealthScoreBands:
    """Tests for health score colours and NDVI descriptions."""

    @pytest.mark.parametrize("score,color", [
        (95, "green"),
        (80, "green"),
        (65, "yellow"),
        (40, "orange"),
        (12, "red"),
        (None, "unknown"),
    ])
    def test_health_score_colors(self, classifier, score, color):
        assert classifier.classify_health_score(score) == color

    def test_describe_ndvi(self, classifier):
        assert classifier.describe_ndvi(0.05).startswith("Bare soil")
        assert classifier.describe_ndvi(0.6).startswith("Dense vegetation")
        assert classifier.describe_ndvi(0.95).startswith("Extremely dense")
        assert classifier.describe_ndvi(None) is None
