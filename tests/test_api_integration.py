"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle with a mocked observation store
and fresh in-memory repositories.
"""
import pytest

from fieldpulse.main import app
from fieldpulse.infrastructure.observation_store_client import StoreClientError, get_store_client
from fieldpulse.infrastructure.repositories import get_alert_repository, get_map_repository

from factories import PARCEL_ID

# Wide enough to cover the fixed-date sample data from any current date
WIDE_WINDOW = 3650


@pytest.fixture
def api(test_client, mock_store_client, alert_repository, map_repository):
    """Test client wired to the mock store and fresh repositories."""
    app.dependency_overrides[get_store_client] = lambda: mock_store_client
    app.dependency_overrides[get_alert_repository] = lambda: alert_repository
    app.dependency_overrides[get_map_repository] = lambda: map_repository
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()


def generate(api, map_type="irrigation"):
    return api.post(
        f"/api/v1/parcels/{PARCEL_ID}/prescriptions",
        json={"map_type": map_type, "crop_name": "maize", "estimated_cost": 900},
    )


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, test_client):
        """Root endpoint should return healthy status."""
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# ============================================================
# Trends Endpoint Tests
# ============================================================

class TestTrendsEndpoint:
    """Tests for the trends endpoint."""

    def test_trend_response_structure(self, api):
        response = api.get(f"/api/v1/parcels/{PARCEL_ID}/trends", params={"window_days": WIDE_WINDOW})

        assert response.status_code == 200
        data = response.json()
        assert data["parcel_id"] == PARCEL_ID
        assert data["window_days"] == WIDE_WINDOW
        assert len(data["assessments"]) == 3
        assert data["health_trend"] == pytest.approx(-18.0)
        assert data["has_trend"] is True
        assert data["health_color"] == "yellow"
        assert data["index_statistics"]["ndvi"]["count"] == 3
        assert data["index_statistics"]["savi"] is None
        assert [p["ndvi"] for p in data["correlated"]] == [0.72, 0.66, 0.5]
        stress = {s["name"]: s["label"] for s in data["stress_indicators"]}
        assert stress == {"water_stress": "High", "nutrient_stress": "Low"}

    def test_empty_window(self, api, mock_store_client):
        mock_store_client.get_assessments.return_value = []
        mock_store_client.get_observations.return_value = []

        response = api.get(f"/api/v1/parcels/{PARCEL_ID}/trends")

        assert response.status_code == 200
        data = response.json()
        assert data["average_health"] == 0
        assert data["health_trend"] is None
        assert data["has_trend"] is False
        assert data["health_color"] == "unknown"

    @pytest.mark.parametrize("window", [0, -30])
    def test_invalid_window(self, api, window):
        response = api.get(f"/api/v1/parcels/{PARCEL_ID}/trends", params={"window_days": window})

        assert response.status_code == 422

    def test_store_error_status_passthrough(self, api, mock_store_client):
        mock_store_client.get_assessments.side_effect = StoreClientError("Forbidden", status_code=403)

        response = api.get(f"/api/v1/parcels/{PARCEL_ID}/trends")

        assert response.status_code == 403
        assert response.json()["error"] == "store_error"


# ============================================================
# Classification Endpoint Tests
# ============================================================

class TestClassificationEndpoint:
    """Tests for index classification."""

    def test_classify_ndvi(self, test_client):
        response = test_client.get("/api/v1/indices/classify", params={"kind": "ndvi", "value": 0.8})

        assert response.status_code == 200
        data = response.json()
        assert data["band"] == "Excellent"
        assert data["description"].startswith("Very dense")

    def test_classify_other_kind(self, test_client):
        response = test_client.get("/api/v1/indices/classify", params={"kind": "evi", "value": 0.3})

        assert response.json()["band"] == "Normal"
        assert response.json()["description"] is None

    def test_missing_value_rejected(self, test_client):
        response = test_client.get("/api/v1/indices/classify", params={"kind": "ndvi"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "out_of_range"
        assert data["field"] == "ndvi"


# ============================================================
# Alert Endpoint Tests
# ============================================================

class TestAlertEndpoints:
    """Tests for alert evaluation and status commands."""

    def test_alert_lifecycle(self, api):
        evaluated = api.post(f"/api/v1/parcels/{PARCEL_ID}/alerts/evaluate")

        assert evaluated.status_code == 200
        alerts = evaluated.json()
        assert {a["alert_type"] for a in alerts} == {"ndvi_drop", "health_decline"}
        decline = next(a for a in alerts if a["alert_type"] == "health_decline")
        assert decline["severity"] == "medium"
        assert decline["status"] == "active"

        acknowledged = api.post(f"/api/v1/alerts/{decline['id']}/acknowledge")
        again = api.post(f"/api/v1/alerts/{decline['id']}/acknowledge")
        resolved = api.post(f"/api/v1/alerts/{decline['id']}/resolve")

        assert acknowledged.json()["status"] == "acknowledged"
        assert again.status_code == 409
        assert again.json()["error"] == "invalid_transition"
        assert resolved.json()["status"] == "resolved"

    def test_list_alerts(self, api):
        api.post(f"/api/v1/parcels/{PARCEL_ID}/alerts/evaluate")

        response = api.get(f"/api/v1/parcels/{PARCEL_ID}/alerts", params={"severity": "high"})

        data = response.json()
        assert [a["alert_type"] for a in data["alerts"]] == ["ndvi_drop"]
        assert data["summary"]["total"] == 2
        assert data["summary"]["by_status"]["active"] == 2

    def test_unknown_alert(self, api):
        response = api.post("/api/v1/alerts/missing/resolve")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


# ============================================================
# Prescription Endpoint Tests
# ============================================================

class TestPrescriptionEndpoints:
    """Tests for prescription generation, status and export."""

    def test_generate_prescription(self, api):
        response = generate(api)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "draft"
        assert [z["area_percentage"] for z in data["zones"]] == [70, 30]
        assert [z["application_rate"] for z in data["zones"]] == [25, 45]

    def test_generate_without_assessments(self, api, mock_store_client):
        mock_store_client.get_assessments.return_value = []

        response = generate(api)

        assert response.status_code == 422
        assert response.json()["error"] == "insufficient_data"

    def test_invalid_map_type(self, api):
        response = generate(api, map_type="herbicide")

        assert response.status_code == 422

    def test_status_and_export(self, api):
        map_id = generate(api).json()["id"]

        approved = api.post(f"/api/v1/prescriptions/{map_id}/status", json={"status": "approved"})
        skipped = api.post(f"/api/v1/prescriptions/{map_id}/status", json={"status": "completed"})
        export = api.get(f"/api/v1/prescriptions/{map_id}/export")

        assert approved.json()["status"] == "approved"
        assert skipped.status_code == 409
        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/csv")
        assert 'filename="prescription_map_' in export.headers["content-disposition"]
        lines = export.text.splitlines()
        assert lines[0] == "Zone ID,Zone Name,Area %,Health Score,Application Rate,Recommendations"
        assert len(lines) == 3

    def test_unknown_prescription(self, api):
        response = api.get("/api/v1/prescriptions/missing")

        assert response.status_code == 404


# ============================================================
# Response Format Tests
# ============================================================

class TestResponseFormats:
    """Tests for API response formats."""

    def test_openapi_schema_available(self, test_client):
        response = test_client.get("/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/api/v1/parcels/{parcel_id}/trends" in paths
        assert "/api/v1/parcels/{parcel_id}/prescriptions" in paths
        assert "/api/v1/prescriptions/{map_id}/export" in paths
        assert "/api/v1/alerts/{alert_id}/acknowledge" in paths

    def test_docs_endpoint_available(self, test_client):
        response = test_client.get("/docs")

        assert response.status_code == 200
        assert "swagger" in response.text.lower() or "html" in response.headers.get("content-type", "")


# ============================================================
# Rate Limiting Tests
# ============================================================

class TestRateLimiting:
    """Tests for rate limiting functionality."""

    def test_rate_limit_documented_in_openapi(self, test_client):
        """Rate limit should be documented in OpenAPI."""
        response = test_client.get("/openapi.json")

        generation_path = response.json()["paths"]["/api/v1/parcels/{parcel_id}/prescriptions"]
        assert "429" in generation_path["post"]["responses"]
