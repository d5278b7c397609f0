"""HTTP and in-memory implementations of EmailSender."""

import asyncio
from abc import abstractmethod
from typing import Any, Dict, List, Optional

import httpx
import structlog

from src.core.config import settings
from src.domain.exceptions import EmailDeliveryException
from src.domain.interfaces import EmailSender

logger = structlog.get_logger(__name__)


class _TemplatedEmailSender(EmailSender):
    """Maps each notification kind onto a template name and its data."""

    async def send_verification_email(self, email: str, token: str, name: str) -> None:
        await self._deliver(
            "verification",
            email,
            "Verify your email address",
            {
                "name": name,
                "token": token,
                "verification_url": f"{settings.frontend_url}/verify-email?token={token}",
            },
        )

    async def send_welcome_email(self, email: str, name: str) -> None:
        await self._deliver("welcome", email, "Welcome aboard", {"name": name})

    async def send_kyc_submitted_email(self, email: str, name: str) -> None:
        await self._deliver(
            "kyc_submitted", email, "We received your KYC documents", {"name": name}
        )

    async def send_kyc_approved_email(self, email: str, name: str) -> None:
        await self._deliver(
            "kyc_approved", email, "Your KYC verification is approved", {"name": name}
        )

    async def send_kyc_rejected_email(self, email: str, name: str, reason: str) -> None:
        await self._deliver(
            "kyc_rejected",
            email,
            "Your KYC verification needs attention",
            {"name": name, "reason": reason},
        )

    async def send_bank_account_verified_email(self, email: str, name: str) -> None:
        await self._deliver(
            "bank_account_verified", email, "Your bank account is verified", {"name": name}
        )

    async def send_account_suspended_email(
        self,
        email: str,
        name: str,
        reason: Optional[str] = None,
    ) -> None:
        await self._deliver(
            "account_suspended",
            email,
            "Your account has been suspended",
            {"name": name, "reason": reason},
        )

    async def send_account_reactivated_email(self, email: str, name: str) -> None:
        await self._deliver(
            "account_reactivated", email, "Your account is active again", {"name": name}
        )

    @abstractmethod
    async def _deliver(
        self,
        template: str,
        to: str,
        subject: str,
        data: Dict[str, Any],
    ) -> None:
        """Send one rendered notification."""
        ...


class HttpEmailSender(_TemplatedEmailSender):
    """
    HTTP client for the transactional email API.

    Posts templated messages with retry logic and exponential backoff.
    Raises EmailDeliveryException once retries are exhausted.
    """

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
    ):
        self._api_url = api_url or settings.email_api_url
        self._api_key = api_key if api_key is not None else settings.email_api_key
        self._sender = sender or settings.email_from
        self._timeout = timeout or settings.email_api_timeout
        self._max_retries = max_retries

    async def _deliver(
        self,
        template: str,
        to: str,
        subject: str,
        data: Dict[str, Any],
    ) -> None:
        payload = {
            "from": self._sender,
            "to": to,
            "subject": subject,
            "template": template,
            "data": data,
        }
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        last_status = None

        for attempt in range(self._max_retries):
            try:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._api_url, json=payload, headers=headers)

                if response.status_code < 400:
                    logger.info("email_sent", template=template, status_code=response.status_code)
                    return

                last_status = response.status_code
                logger.warning(
                    "email_api_error",
                    template=template,
                    status_code=response.status_code,
                    attempt=attempt + 1,
                    response=response.text[:200],
                )

                # Client errors will not succeed on retry
                if response.status_code < 500:
                    break

            except httpx.TimeoutException:
                logger.warning("email_api_timeout", template=template, attempt=attempt + 1)
            except httpx.HTTPError as e:
                logger.error(
                    "email_api_transport_error",
                    template=template,
                    attempt=attempt + 1,
                    error=str(e),
                )

            if attempt < self._max_retries - 1:
                await asyncio.sleep(2**attempt * 0.1)

        raise EmailDeliveryException(
            message=f"Email API did not accept {template} email",
            status_code=last_status,
        )


class MockEmailSender(_TemplatedEmailSender):
    """
    In-memory email sender for local development and tests.

    Messages are recorded in ``sent`` instead of being delivered. With
    ``fail_mode`` set every send raises.
    """

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.sent: List[Dict[str, Any]] = []

    async def _deliver(
        self,
        template: str,
        to: str,
        subject: str,
        data: Dict[str, Any],
    ) -> None:
        if self.fail_mode:
            raise EmailDeliveryException("Mock email provider unavailable")

        self.sent.append({"template": template, "to": to, "subject": subject, "data": data})
        logger.debug("mock_email_recorded", template=template, to=to)

    def sent_of(self, template: str) -> List[Dict[str, Any]]:
        return [message for message in self.sent if message["template"] == template]
