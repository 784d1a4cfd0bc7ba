"""
Integration tests for API Service

Tests the FastAPI service that exposes consultation, deliberation and the
engine registry over REST.
"""

import pytest
from fastapi.testclient import TestClient

from engines.catalog import load_builtin_engines
from orchestrator.consultation import EngineOrchestrator


@pytest.fixture
def api_registry(registry, make_engine):
    """Registry with the built-in engines plus controllable test engines"""
    load_builtin_engines(registry)
    registry.register(make_engine("slow", domain="testing", delay=1.0))
    registry.register(make_engine("broken", domain="testing", error=RuntimeError("boom")))
    return registry


@pytest.fixture
def client(api_registry):
    """TestClient with an injected orchestrator"""
    from api.main import app

    app.state.orchestrator = EngineOrchestrator(api_registry, timeout=0.2)
    with TestClient(app) as test_client:
        yield test_client
    app.state.orchestrator = None


class TestAPIBasics:
    """Test basic API functionality"""

    def test_api_import(self):
        """Test that API module can be imported"""
        from api.main import app
        assert app is not None

    def test_health_endpoint(self, client):
        """Test health check endpoint"""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["engines"] == 7

    def test_root_endpoint(self, client):
        """Test root endpoint"""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert "message" in data
        assert "version" in data
        assert data["endpoints"]["consult"] == "/consult"


class TestEngineEndpoints:
    """Test registry inspection endpoints"""

    def test_list_engines(self, client):
        response = client.get("/engines")

        assert response.status_code == 200
        data = response.json()
        assert len(data["engines"]) == 7
        assert data["stats"]["total_engines"] == 7
        assert data["engines"][0]["status"] == "idle"

    def test_list_engines_by_domain(self, client):
        response = client.get("/engines", params={"domain": "logic"})
        assert [e["id"] for e in response.json()["engines"]] == ["fallacy-detector"]

    def test_list_engines_by_capability(self, client):
        response = client.get("/engines", params={"capability": "deontology"})
        assert [e["id"] for e in response.json()["engines"]] == ["kantian"]

    def test_get_engine(self, client):
        response = client.get("/engines/kantian")

        assert response.status_code == 200
        data = response.json()
        assert data["definition"]["tradition"] == "kantian"
        assert data["definition"]["dependencies"] == ["fallacy-detector"]
        assert data["stats"]["evaluation_count"] == 0

    def test_get_unknown_engine(self, client):
        response = client.get("/engines/ghost")
        assert response.status_code == 404

    def test_dependencies(self, client):
        response = client.get("/engines/fallacy-detector/dependencies")

        assert response.status_code == 200
        data = response.json()
        assert data["load_order"] == ["fallacy-detector"]
        assert data["dependents"] == ["kantian"]

    def test_missing_dependency_is_404(self, client, api_registry, make_engine):
        api_registry.register(make_engine("needy", dependencies=["nobody"]))
        response = client.get("/engines/needy/dependencies")
        assert response.status_code == 404

    def test_circular_dependency_is_409(self, client, api_registry, make_engine):
        api_registry.register(make_engine("loop-a", dependencies=["loop-b"]))
        api_registry.register(make_engine("loop-b", dependencies=["loop-a"]))

        response = client.get("/engines/loop-a/dependencies")

        assert response.status_code == 409
        assert "Circular dependency" in response.json()["detail"]


class TestEvaluateEndpoint:
    """Test /engines/{engine_id}/evaluate"""

    def test_evaluate(self, client):
        response = client.post("/engines/kantian/evaluate", json={"input": "Should I lie?"})

        assert response.status_code == 200
        data = response.json()
        assert data["engine_id"] == "kantian"
        assert data["confidence"] <= 0.618034

    def test_evaluate_unknown_engine(self, client):
        response = client.post("/engines/ghost/evaluate", json={"input": "q"})
        assert response.status_code == 404

    def test_evaluate_failure_is_502(self, client):
        response = client.post("/engines/broken/evaluate", json={"input": "q"})
        assert response.status_code == 502
        assert "boom" in response.json()["detail"]

    def test_evaluate_timeout_is_504(self, client):
        response = client.post("/engines/slow/evaluate", json={"input": "q", "timeout": 0.05})
        assert response.status_code == 504


class TestConsultEndpoint:
    """Test /consult"""

    def test_consult(self, client):
        response = client.post("/consult", json={"question": "Should I lie to protect a friend?", "domains": ["ethics"]})

        assert response.status_code == 200
        data = response.json()
        assert len(data["engines_consulted"]) == 4
        assert data["synthesis"]["metadata"]["strategy"] == "weighted-average"
        assert 0 < data["overall_confidence"] <= 0.618034

    def test_consult_with_strategy(self, client):
        response = client.post(
            "/consult",
            json={"question": "Should I lie?", "domains": ["ethics"], "strategy": "dialectic"}
        )
        assert response.json()["metadata"]["strategy"] == "dialectic"

    def test_invalid_strategy_is_422(self, client):
        response = client.post("/consult", json={"question": "q", "strategy": "majority-vote"})
        assert response.status_code == 422

    def test_empty_question_rejected(self, client):
        response = client.post("/consult", json={"question": ""})
        assert response.status_code == 422

    def test_failures_reported_in_metadata(self, client):
        """Test that per-engine failures do not fail the request"""
        response = client.post("/consult", json={"question": "q", "domains": ["testing"]})

        assert response.status_code == 200
        data = response.json()
        assert data["insights"] == []
        assert data["metadata"]["failed_engines"] == ["broken"]
        assert data["metadata"]["timed_out_engines"] == ["slow"]

    def test_no_engines(self, client):
        response = client.post("/consult", json={"question": "q", "domains": ["aesthetics"]})

        assert response.status_code == 200
        data = response.json()
        assert data["synthesis"] is None
        assert data["metadata"]["error"] == "No engines available for this query"


class TestDeliberateEndpoint:
    """Test /deliberate"""

    def test_deliberate(self, client):
        response = client.post("/deliberate", json={"dilemma": "Should I break a promise to save a life?"})

        assert response.status_code == 200
        data = response.json()
        assert len(data["positions"]) == 4
        assert len(data["tensions"]) == 6
        assert data["recommendation"] is not None

    def test_deliberate_with_traditions(self, client):
        response = client.post(
            "/deliberate",
            json={"dilemma": "Should I lie?", "traditions": ["kantian", "utilitarian"]}
        )

        data = response.json()
        assert {p["tradition"] for p in data["positions"]} == {"kantian", "utilitarian"}
        assert len(data["tensions"]) == 1
