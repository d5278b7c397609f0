"""
Integration tests for metrics tracking.

These tests verify:
1. Metrics endpoint returns valid Prometheus format
2. Business metrics (registrations, KYC decisions, quota) are tracked
3. Technical metrics (HTTP requests, bank verification) are recorded
"""

import pytest
from httpx import AsyncClient

from src.core.metrics import REGISTRY


def sample(name: str, labels: dict = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


# =============================================================================
# Metrics Endpoint Tests
# =============================================================================

class TestMetricsEndpoint:
    """Tests for GET /metrics endpoint."""

    @pytest.mark.asyncio
    async def test_metrics_endpoint_returns_prometheus_format(
        self,
        client: AsyncClient,
    ):
        response = await client.get("/metrics")

        assert response.status_code == 200
        content_type = response.headers.get("content-type", "")
        assert "text/plain" in content_type or "text/openmetrics" in content_type
        assert "# HELP" in response.text

    @pytest.mark.asyncio
    async def test_metrics_include_service_metrics(
        self,
        client: AsyncClient,
    ):
        response = await client.get("/metrics")

        content = response.text
        assert "merchant_registrations_total" in content
        assert "merchant_kyc_decisions_total" in content
        assert "merchant_http_requests_total" in content


# =============================================================================
# Business Metrics Tests
# =============================================================================

class TestBusinessMetrics:
    """Counters move when the matching business events happen."""

    @pytest.mark.asyncio
    async def test_registration_increments_counter(
        self,
        client: AsyncClient,
        registration_request: dict,
    ):
        before = sample("merchant_registrations_total")

        response = await client.post("/v1/merchants/register", json=registration_request)
        assert response.status_code == 201

        assert sample("merchant_registrations_total") == before + 1

    @pytest.mark.asyncio
    async def test_quota_rejection_counted(
        self,
        client: AsyncClient,
        admin_headers: dict,
        registered_merchant: dict,
    ):
        merchant_id = registered_merchant["id"]
        await client.put(
            f"/v1/admin/merchants/{merchant_id}/quota",
            json={"api_quota_limit": 0},
            headers=admin_headers,
        )
        before = sample("merchant_quota_rejections_total")

        response = await client.post(f"/v1/merchants/{merchant_id}/quota/consume")
        assert response.status_code == 429

        assert sample("merchant_quota_rejections_total") == before + 1

    @pytest.mark.asyncio
    async def test_failed_admin_login_counted(
        self,
        client: AsyncClient,
        admin_user,
    ):
        before = sample("merchant_admin_logins_total", {"outcome": "failure"})

        await client.post("/v1/admin/auth/login", json={
            "email": "admin@example.com",
            "password": "wrong-password",
        })

        assert sample("merchant_admin_logins_total", {"outcome": "failure"}) == before + 1


# =============================================================================
# Technical Metrics Tests
# =============================================================================

class TestTechnicalMetrics:

    @pytest.mark.asyncio
    async def test_http_requests_use_route_template(
        self,
        client: AsyncClient,
        registered_merchant: dict,
    ):
        labels = {"method": "GET", "endpoint": "/v1/merchants/{merchant_id}", "status": "200"}
        before = sample("merchant_http_requests_total", labels)

        await client.get(f"/v1/merchants/{registered_merchant['id']}")

        assert sample("merchant_http_requests_total", labels) == before + 1

    @pytest.mark.asyncio
    async def test_bank_verification_outcome_counted(
        self,
        client: AsyncClient,
        registered_merchant: dict,
    ):
        merchant_id = registered_merchant["id"]
        await client.put(f"/v1/merchants/{merchant_id}/bank-account", json={
            "account_number": "000123456789",
            "account_holder_name": "Jane Doe",
            "bank_name": "First Bank",
            "routing_number": "021000021",
        })
        before = sample("merchant_bank_verification_total", {"status": "success"})

        await client.post(f"/v1/merchants/{merchant_id}/bank-account/verify")

        assert sample("merchant_bank_verification_total", {"status": "success"}) == before + 1
