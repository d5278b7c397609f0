"""HTTP and mock implementations of BankVerificationProvider."""

import asyncio
from typing import List, Optional

import httpx
import structlog

from src.core.config import settings
from src.core.metrics import record_bank_verification, track_bank_verification_latency
from src.domain.interfaces import BankVerificationProvider, BankVerificationResult

logger = structlog.get_logger(__name__)


class HttpBankVerificationClient(BankVerificationProvider):
    """
    HTTP client for the bank account verification provider.

    Retries timeouts and server errors with exponential backoff. Failures
    are reported as an unsuccessful result, never raised.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
    ):
        self._base_url = base_url or settings.bank_verification_url
        self._timeout = timeout or settings.bank_verification_timeout
        self._max_retries = max_retries

    async def verify_bank_account(
        self,
        account_number: str,
        routing_number: str,
        holder_name: str,
    ) -> BankVerificationResult:
        url = f"{self._base_url}/bank-accounts/verify"
        payload = {
            "account_number": account_number,
            "routing_number": routing_number,
            "account_holder_name": holder_name,
        }

        for attempt in range(self._max_retries):
            try:
                with track_bank_verification_latency():
                    async with httpx.AsyncClient(timeout=self._timeout) as client:
                        response = await client.post(url, json=payload)

                if response.status_code >= 500:
                    record_bank_verification("error")
                    logger.warning(
                        "bank_verification_server_error",
                        status_code=response.status_code,
                        attempt=attempt + 1,
                        max_retries=self._max_retries,
                    )
                elif response.status_code >= 400:
                    record_bank_verification("failure")
                    return BankVerificationResult(
                        success=False,
                        error=self._error_from(response) or "Bank account rejected",
                    )
                else:
                    data = response.json()
                    verified = bool(data.get("verified", data.get("success", False)))
                    record_bank_verification("success" if verified else "failure")
                    return BankVerificationResult(
                        success=verified,
                        error=None if verified else data.get("error") or "Bank account not verified",
                    )

            except httpx.TimeoutException:
                record_bank_verification("error")
                logger.warning(
                    "bank_verification_timeout",
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                )
            except (httpx.HTTPError, ValueError) as e:
                record_bank_verification("error")
                logger.error(
                    "bank_verification_error",
                    attempt=attempt + 1,
                    error=str(e),
                )

            # Exponential backoff
            if attempt < self._max_retries - 1:
                await asyncio.sleep(2**attempt * 0.1)

        return BankVerificationResult(
            success=False,
            error="Bank verification service unavailable",
        )

    @staticmethod
    def _error_from(response: httpx.Response) -> Optional[str]:
        try:
            return response.json().get("error")
        except ValueError:
            return response.text[:200] or None


class MockBankVerificationClient(BankVerificationProvider):
    """
    Deterministic verifier for local development and tests.

    Accounts whose number ends in ``0000`` are rejected; every other
    account verifies. ``fail_mode`` rejects everything.
    """

    REJECTED_SUFFIX = "0000"

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.calls: List[dict] = []

    async def verify_bank_account(
        self,
        account_number: str,
        routing_number: str,
        holder_name: str,
    ) -> BankVerificationResult:
        self.calls.append(
            {
                "account_number": account_number,
                "routing_number": routing_number,
                "holder_name": holder_name,
            }
        )

        if self.fail_mode:
            record_bank_verification("error")
            return BankVerificationResult(
                success=False,
                error="Bank verification service unavailable",
            )

        if account_number.endswith(self.REJECTED_SUFFIX):
            record_bank_verification("failure")
            return BankVerificationResult(success=False, error="Account not found")

        record_bank_verification("success")
        return BankVerificationResult(success=True)
