"""
Tests for the FastAPI endpoints.
"""

import pytest
from fastapi.testclient import TestClient
from hwcalc import __version__
from hwcalc.main import app


client = TestClient(app)

REFERENCE_REQUEST = {
    "params": 8,
    "model_quantization": "Q4",
    "context_length": 8192,
    "kv_cache_quantization": "Q8",
    "inference_mode": "incremental",
    "batch_size": 1,
    "memory_mode": "DISCRETE_GPU",
    "system_memory_gb": 128,
    "gpu_vram_gb": 24
}


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_returns_ok(self):
        """Health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__


class TestCatalogEndpoints:
    """Tests for the catalog listing endpoints."""

    def test_list_gpus(self):
        response = client.get("/api/gpus")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 8
        assert len(data["gpus"]) == data["count"]
        assert data["gpus"][0] == {
            "name": "NVIDIA RTX 4060 Ti",
            "vram_gb": 8,
            "bandwidth_gbs": 448
        }

    def test_list_cloud_instances(self):
        response = client.get("/api/cloud-instances")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 5
        required_fields = ["provider", "instance", "gpu", "vram_gb", "hourly_cost"]
        for instance in data["instances"]:
            for field in required_fields:
                assert field in instance

    def test_list_quantizations(self):
        response = client.get("/api/quantizations")
        assert response.status_code == 200
        data = response.json()
        assert data["model"]["AWQ"] == 0.6
        assert len(data["model"]) == 10
        assert set(data["kv_cache"]) == {"F32", "F16", "Q8", "Q5", "Q4"}


class TestCalculateEndpoint:
    """Tests for the calculation endpoint."""

    def test_calculate_reference_request(self):
        response = client.post("/api/calculate", json=REFERENCE_REQUEST)
        assert response.status_code == 200
        data = response.json()

        assert data["vram_needed"] == {
            "model_weights_gb": 4.0,
            "kv_cache_gb": 5.6,
            "overhead_gb": 1.2,
            "total_gb": 10.8
        }
        assert data["gpus_required"] == 1
        assert data["gpu_setup"] == "Single 24GB GPU"
        assert data["performance"]["tokens_per_second"] == 88.2
        assert data["cloud_cost"]["instance"] == "g4dn.xlarge"
        assert data["cloud_cost"]["monthly_cost"] == 384
        assert data["on_disk_size_gb"] == 4.0
        assert data["gpu_name"] == "NVIDIA RTX 4090"

    def test_defaults_match_reference(self):
        response = client.post("/api/calculate", json={})
        assert response.status_code == 200
        reference = client.post("/api/calculate", json=REFERENCE_REQUEST)
        assert response.json() == reference.json()

    def test_unbounded_gpus_have_no_cloud_cost(self):
        response = client.post("/api/calculate", json={
            **REFERENCE_REQUEST,
            "params": 70,
            "model_quantization": "F16",
            "kv_cache_quantization": "F16",
            "context_length": 4096
        })
        assert response.status_code == 200
        data = response.json()
        assert data["gpus_required"] == "unbounded"
        assert data["gpu_setup"] == "> 8 GPUs"
        assert data["cloud_cost"] is None

    def test_unified_memory(self):
        response = client.post("/api/calculate", json={
            **REFERENCE_REQUEST,
            "memory_mode": "UNIFIED_MEMORY",
            "system_memory_gb": 16
        })
        data = response.json()
        assert data["fits_unified"] is True
        assert data["gpus_required"] == 0
        assert data["gpu_setup"] == "Fits in 16GB RAM"

    def test_unknown_gpu_capacity_uses_fallback(self):
        response = client.post("/api/calculate", json={
            **REFERENCE_REQUEST,
            "gpu_vram_gb": 20
        })
        assert response.status_code == 200
        data = response.json()
        assert data["gpu_name"] == "NVIDIA RTX 4060 Ti"
        assert data["performance"]["tokens_per_second"] == 39.2

    @pytest.mark.parametrize("field, value", [
        ("params", 0),
        ("params", -8),
        ("context_length", 0),
        ("batch_size", 0),
        ("gpu_vram_gb", -24),
        ("model_quantization", "NF4"),
        ("kv_cache_quantization", "Q6"),
        ("memory_mode", "CLUSTER"),
        ("inference_mode", "streaming"),
    ])
    def test_invalid_input_rejected(self, field, value):
        response = client.post("/api/calculate", json={**REFERENCE_REQUEST, field: value})
        assert response.status_code == 422


class TestShareEndpoints:
    """Tests for share query strings."""

    def test_share_returns_query(self):
        response = client.post("/api/share", json=REFERENCE_REQUEST)
        assert response.status_code == 200
        assert response.json()["query"] == (
            "p=8&mq=Q4&ctx=8192&kvq=Q8&mm=DISCRETE_GPU"
            "&sm=128&gpu=24&im=incremental&bs=1"
        )

    def test_shared_query_gives_same_result(self):
        request = {**REFERENCE_REQUEST, "params": 13, "inference_mode": "bulk", "batch_size": 4}
        query = client.post("/api/share", json=request).json()["query"]

        shared = client.get(f"/api/calculate?{query}")
        posted = client.post("/api/calculate", json=request)
        assert shared.status_code == 200
        assert shared.json() == posted.json()

    def test_empty_query_uses_defaults(self):
        response = client.get("/api/calculate")
        assert response.status_code == 200
        assert response.json()["vram_needed"]["total_gb"] == 10.8

    def test_malformed_query_rejected(self):
        response = client.get("/api/calculate?p=eight")
        assert response.status_code == 400
        assert "p" in response.json()["detail"]

    def test_non_positive_query_rejected(self):
        response = client.get("/api/calculate?bs=0")
        assert response.status_code == 400


class TestExtremeInputs:
    """Out-of-range numbers are rejected or estimated, never a server error."""

    @pytest.mark.parametrize("body", [
        '{"params": Infinity}',
        '{"params": NaN}',
        '{"system_memory_gb": Infinity}',
        '{"gpu_vram_gb": -Infinity}',
    ])
    def test_non_finite_json_rejected(self, body):
        response = client.post(
            "/api/calculate",
            content=body,
            headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 422

    @pytest.mark.parametrize("field, value", [
        ("context_length", 10 ** 30),
        ("batch_size", 5000),
    ])
    def test_oversized_integers_rejected(self, field, value):
        response = client.post("/api/calculate", json={**REFERENCE_REQUEST, field: value})
        assert response.status_code == 422

    def test_huge_model_is_unbounded(self):
        response = client.post("/api/calculate", json={**REFERENCE_REQUEST, "params": 1e307})
        assert response.status_code == 200
        data = response.json()
        assert data["gpus_required"] == "unbounded"
        assert data["cloud_cost"] is None

    def test_vanishing_gpu_capacity_is_unbounded(self):
        response = client.post("/api/calculate", json={**REFERENCE_REQUEST, "gpu_vram_gb": 1e-320})
        assert response.status_code == 200
        assert response.json()["gpus_required"] == "unbounded"

    @pytest.mark.parametrize("query", ["p=inf", "p=1e400", "p=nan", "gpu=inf"])
    def test_non_finite_query_rejected(self, query):
        response = client.get(f"/api/calculate?{query}")
        assert response.status_code == 400

    def test_trailing_ampersand_accepted(self):
        response = client.get("/api/calculate?p=8&")
        assert response.status_code == 200
        assert response.json()["vram_needed"]["total_gb"] == 10.8
