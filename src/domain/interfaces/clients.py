"""External client interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BankVerificationResult:
    """Outcome of a bank account ownership check."""

    success: bool
    error: Optional[str] = None


class EmailSender(ABC):
    """
    Abstract sender for merchant notification emails.

    Callers treat every method as best-effort: implementations may raise
    on delivery failure, and the lifecycle engine logs and moves on.
    """

    @abstractmethod
    async def send_verification_email(self, email: str, token: str, name: str) -> None:
        """Send the email-address verification link."""
        ...

    @abstractmethod
    async def send_welcome_email(self, email: str, name: str) -> None:
        ...

    @abstractmethod
    async def send_kyc_submitted_email(self, email: str, name: str) -> None:
        ...

    @abstractmethod
    async def send_kyc_approved_email(self, email: str, name: str) -> None:
        ...

    @abstractmethod
    async def send_kyc_rejected_email(self, email: str, name: str, reason: str) -> None:
        ...

    @abstractmethod
    async def send_bank_account_verified_email(self, email: str, name: str) -> None:
        ...

    @abstractmethod
    async def send_account_suspended_email(
        self,
        email: str,
        name: str,
        reason: Optional[str] = None,
    ) -> None:
        ...

    @abstractmethod
    async def send_account_reactivated_email(self, email: str, name: str) -> None:
        ...


class BankVerificationProvider(ABC):
    """
    Abstract client for bank account ownership verification.
    """

    @abstractmethod
    async def verify_bank_account(
        self,
        account_number: str,
        routing_number: str,
        holder_name: str,
    ) -> BankVerificationResult:
        """
        Check that the account exists and belongs to the named holder.

        Args:
            account_number: The bank account number
            routing_number: The bank routing number
            holder_name: The name on the account

        Returns:
            BankVerificationResult; provider and transport failures are
            reported as an unsuccessful result rather than raised
        """
        ...
