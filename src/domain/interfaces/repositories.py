"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from src.domain.entities import (
    AdminLoginAttempt,
    AdminSession,
    AdminUser,
    BankAccountStatus,
    KycStatus,
    Merchant,
    MerchantSearchCriteria,
    MerchantStatistics,
    MerchantStatus,
)


class MerchantRepository(ABC):
    """
    Abstract repository for Merchant persistence.

    Update methods take a mapping of entity field names to new values and
    return the merchant as stored after the update, or None if no merchant
    has the given ID.
    """

    @abstractmethod
    async def find_by_id(self, merchant_id: UUID) -> Optional[Merchant]:
        """Retrieve a merchant by ID."""
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Merchant]:
        """
        Retrieve a merchant by email address.

        Matching is case-insensitive.
        """
        ...

    @abstractmethod
    async def find_by_verification_token(self, token: str) -> Optional[Merchant]:
        """Retrieve the merchant holding a pending email verification token."""
        ...

    @abstractmethod
    async def create(self, merchant: Merchant) -> Merchant:
        """
        Persist a new merchant.

        Args:
            merchant: The merchant to save

        Returns:
            The saved merchant
        """
        ...

    @abstractmethod
    async def update(
        self,
        merchant_id: UUID,
        fields: Dict[str, Any],
    ) -> Optional[Merchant]:
        """Apply a partial update to a merchant."""
        ...

    @abstractmethod
    async def update_status(
        self,
        merchant_id: UUID,
        status: MerchantStatus,
        fields: Optional[Dict[str, Any]] = None,
        expected: Optional[MerchantStatus] = None,
    ) -> Optional[Merchant]:
        """
        Set the account status, together with any related fields.

        When ``expected`` is given the write applies only while the stored
        status still equals it; otherwise nothing changes and None is
        returned.
        """
        ...

    @abstractmethod
    async def update_kyc_status(
        self,
        merchant_id: UUID,
        status: KycStatus,
        fields: Optional[Dict[str, Any]] = None,
        expected: Optional[KycStatus] = None,
    ) -> Optional[Merchant]:
        """Set the KYC status, guarded by ``expected`` like ``update_status``."""
        ...

    @abstractmethod
    async def update_bank_account_status(
        self,
        merchant_id: UUID,
        status: BankAccountStatus,
    ) -> Optional[Merchant]:
        """
        Set the bank account status.

        Moving to VERIFIED also stamps ``bank_verified_at``.
        """
        ...

    @abstractmethod
    async def increment_api_quota(self, merchant_id: UUID) -> bool:
        """
        Atomically consume one unit of API quota.

        The increment only applies while ``api_quota_used`` is below
        ``api_quota_limit``, so concurrent callers cannot push usage past
        the limit.

        Returns:
            True if a unit was consumed, False if the quota was exhausted
        """
        ...

    @abstractmethod
    async def reset_api_quotas(self, next_reset_at: datetime) -> int:
        """
        Reset API usage to zero for every merchant.

        Returns:
            Number of merchants whose usage was reset
        """
        ...

    @abstractmethod
    async def find_expired_verification_tokens(self, now: datetime) -> List[Merchant]:
        """Retrieve unverified merchants whose verification token has expired."""
        ...

    @abstractmethod
    async def search(
        self,
        criteria: MerchantSearchCriteria,
    ) -> Tuple[List[Merchant], int]:
        """
        Filter, sort and page merchants.

        Returns:
            The requested page of merchants and the total number of matches
        """
        ...

    @abstractmethod
    async def get_statistics(self) -> MerchantStatistics:
        """Count merchants by account and KYC status."""
        ...


class AdminUserRepository(ABC):
    """Abstract repository for platform users that may hold admin roles."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[AdminUser]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[AdminUser]:
        ...

    @abstractmethod
    async def save(self, user: AdminUser) -> AdminUser:
        ...


class AdminSessionRepository(ABC):
    """Abstract repository for admin refresh-token sessions."""

    @abstractmethod
    async def save(self, session: AdminSession) -> AdminSession:
        """Persist a new session."""
        ...

    @abstractmethod
    async def find_active_by_refresh_token(
        self,
        refresh_token: str,
    ) -> Optional[AdminSession]:
        """Retrieve the active session holding a refresh token."""
        ...

    @abstractmethod
    async def deactivate_by_refresh_token(self, refresh_token: str) -> int:
        """
        Mark the active session holding a refresh token as inactive.

        Returns:
            Number of sessions deactivated (0 if none was active)
        """
        ...


class AdminLoginAttemptRepository(ABC):
    """Abstract append-only store of admin login attempts."""

    @abstractmethod
    async def save(self, attempt: AdminLoginAttempt) -> AdminLoginAttempt:
        ...

    @abstractmethod
    async def count_failures_since(self, email: str, since: datetime) -> int:
        """Count failed attempts for an email made after ``since``."""
        ...

    @abstractmethod
    async def last_success_at(self, email: str) -> Optional[datetime]:
        """Timestamp of the most recent successful attempt for an email."""
        ...
