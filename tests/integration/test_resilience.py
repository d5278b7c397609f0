"""
Integration tests for resilience and error handling.

These tests verify:
1. Email provider failures never fail the request that triggered them
2. Bank verification provider outages surface as a rejected verification
3. Failed email deliveries are tracked in metrics
"""

import pytest
from httpx import AsyncClient

from src.core.metrics import REGISTRY
from src.infrastructure.clients import MockBankVerificationClient, MockEmailSender


@pytest.fixture
def mock_email_sender() -> MockEmailSender:
    """Every send fails, overriding the recording sender from conftest."""
    return MockEmailSender(fail_mode=True)


@pytest.fixture
def mock_bank_verifier() -> MockBankVerificationClient:
    """Every verification fails, overriding the deterministic verifier from conftest."""
    return MockBankVerificationClient(fail_mode=True)


# =============================================================================
# Email Provider Failure Tests
# =============================================================================

class TestEmailFailure:
    """Notification emails are best-effort."""

    @pytest.mark.asyncio
    async def test_registration_succeeds_when_email_fails(
        self,
        client: AsyncClient,
        registration_request: dict,
    ):
        failures = REGISTRY.get_sample_value(
            "merchant_email_failures_total", {"kind": "verification"}
        ) or 0.0

        response = await client.post("/v1/merchants/register", json=registration_request)

        assert response.status_code == 201
        assert response.json()["status"] == "pending"

        # The merchant exists even though the email never went out
        fetched = await client.get(f"/v1/merchants/{response.json()['id']}")
        assert fetched.status_code == 200

        assert REGISTRY.get_sample_value(
            "merchant_email_failures_total", {"kind": "verification"}
        ) == failures + 1

    @pytest.mark.asyncio
    async def test_status_change_succeeds_when_email_fails(
        self,
        client: AsyncClient,
        admin_headers: dict,
        registered_merchant: dict,
    ):
        response = await client.post(
            f"/v1/admin/merchants/{registered_merchant['id']}/suspend",
            json={"reason": "Chargeback review"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "suspended"


# =============================================================================
# Bank Verification Failure Tests
# =============================================================================

class TestBankVerificationFailure:
    """An unavailable bank verifier leaves the account in FAILED status."""

    @pytest.mark.asyncio
    async def test_provider_failure_returns_422(
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

        response = await client.post(f"/v1/merchants/{merchant_id}/bank-account/verify")

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "BANK_ACCOUNT_VERIFICATION_FAILED"
        assert data["request_id"]

        merchant = await client.get(f"/v1/merchants/{merchant_id}")
        assert merchant.json()["bank_account_status"] == "failed"

    @pytest.mark.asyncio
    async def test_retry_after_fixing_details(
        self,
        client: AsyncClient,
        registered_merchant: dict,
    ):
        """Updating the account after a failure resets the status to pending."""
        merchant_id = registered_merchant["id"]
        body = {
            "account_number": "000123456789",
            "account_holder_name": "Jane Doe",
            "bank_name": "First Bank",
            "routing_number": "021000021",
        }
        await client.put(f"/v1/merchants/{merchant_id}/bank-account", json=body)
        await client.post(f"/v1/merchants/{merchant_id}/bank-account/verify")

        response = await client.put(f"/v1/merchants/{merchant_id}/bank-account", json=body)

        assert response.status_code == 200
        assert response.json()["bank_account_status"] == "pending"
