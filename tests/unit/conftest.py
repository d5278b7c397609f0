"""
Fixtures for unit tests.

Provides:
- In-memory merchant and admin repositories
- Mock email sender and bank verifier
- MerchantService and AdminAuthService wired to the fakes
"""

import asyncio
import copy
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import pytest

from src.application.services import AdminAuthService, MerchantService
from src.core.clock import utc_now
from src.core.config import Settings
from src.core.security import PasswordHasher, TokenSigner
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
    UserRole,
)
from src.domain.exceptions import MerchantAlreadyExistsException
from src.domain.interfaces import (
    AdminLoginAttemptRepository,
    AdminSessionRepository,
    AdminUserRepository,
    MerchantRepository,
)
from src.infrastructure.clients import MockBankVerificationClient, MockEmailSender
from src.service.lifecycle import LifecycleSettings


# =============================================================================
# In-memory Repositories
# =============================================================================

class InMemoryMerchantRepository(MerchantRepository):
    """
    Dict-backed merchant store.

    Reads yield to the event loop once so concurrent callers interleave
    the way they would against a real database.
    """

    def __init__(self):
        self.merchants: Dict[UUID, Merchant] = {}

    async def find_by_id(self, merchant_id: UUID) -> Optional[Merchant]:
        await asyncio.sleep(0)
        merchant = self.merchants.get(merchant_id)
        return copy.deepcopy(merchant) if merchant else None

    async def find_by_email(self, email: str) -> Optional[Merchant]:
        for merchant in self.merchants.values():
            if merchant.email.lower() == email.lower():
                return copy.deepcopy(merchant)
        return None

    async def find_by_verification_token(self, token: str) -> Optional[Merchant]:
        for merchant in self.merchants.values():
            if merchant.email_verification_token == token:
                return copy.deepcopy(merchant)
        return None

    async def create(self, merchant: Merchant) -> Merchant:
        if any(m.email.lower() == merchant.email.lower() for m in self.merchants.values()):
            raise MerchantAlreadyExistsException(merchant.email)
        self.merchants[merchant.id] = copy.deepcopy(merchant)
        return copy.deepcopy(merchant)

    async def update(self, merchant_id: UUID, fields: Dict[str, Any]) -> Optional[Merchant]:
        merchant = self.merchants.get(merchant_id)
        if merchant is None:
            return None
        for name, value in fields.items():
            setattr(merchant, name, copy.deepcopy(value))
        merchant.updated_at = utc_now()
        return copy.deepcopy(merchant)

    async def update_status(self, merchant_id, status, fields=None, expected=None):
        return await self._guarded_update(
            merchant_id, "status", expected, {**(fields or {}), "status": status}
        )

    async def update_kyc_status(self, merchant_id, status, fields=None, expected=None):
        return await self._guarded_update(
            merchant_id, "kyc_status", expected, {**(fields or {}), "kyc_status": status}
        )

    async def _guarded_update(self, merchant_id, attribute, expected, fields):
        # Yield first so a concurrent caller can read before this write lands
        await asyncio.sleep(0)
        merchant = self.merchants.get(merchant_id)
        if merchant is None:
            return None
        if expected is not None and getattr(merchant, attribute) != expected:
            return None
        return await self.update(merchant_id, fields)

    async def update_bank_account_status(self, merchant_id, status):
        fields: Dict[str, Any] = {"bank_account_status": status}
        if status == BankAccountStatus.VERIFIED:
            fields["bank_verified_at"] = utc_now()
        return await self.update(merchant_id, fields)

    async def increment_api_quota(self, merchant_id: UUID) -> bool:
        merchant = self.merchants.get(merchant_id)
        if merchant is None or merchant.api_quota_used >= merchant.api_quota_limit:
            return False
        merchant.api_quota_used += 1
        return True

    async def reset_api_quotas(self, next_reset_at: datetime) -> int:
        for merchant in self.merchants.values():
            if merchant.api_quota_used != 0:
                merchant.updated_at = utc_now()
            merchant.api_quota_used = 0
            merchant.api_quota_reset_at = next_reset_at
        return len(self.merchants)

    async def find_expired_verification_tokens(self, now: datetime) -> List[Merchant]:
        return [
            copy.deepcopy(m)
            for m in self.merchants.values()
            if not m.email_verified
            and m.email_verification_token is not None
            and m.verification_token_expired(now)
        ]

    async def search(
        self,
        criteria: MerchantSearchCriteria,
    ) -> Tuple[List[Merchant], int]:
        results = list(self.merchants.values())
        if criteria.search:
            needle = criteria.search.lower()
            results = [
                m for m in results
                if needle in m.name.lower()
                or needle in (m.business_name or "").lower()
                or needle in m.email.lower()
            ]
        if criteria.status is not None:
            results = [m for m in results if m.status == criteria.status]
        if criteria.kyc_status is not None:
            results = [m for m in results if m.kyc_status == criteria.kyc_status]
        if criteria.business_type is not None:
            results = [m for m in results if m.business_type == criteria.business_type]
        if criteria.country:
            results = [m for m in results if m.country == criteria.country]

        results.sort(
            key=lambda m: getattr(m, criteria.sort_by) or "",
            reverse=criteria.sort_order == "DESC",
        )
        page = results[criteria.offset:criteria.offset + criteria.limit]
        return [copy.deepcopy(m) for m in page], len(results)

    async def get_statistics(self) -> MerchantStatistics:
        merchants = list(self.merchants.values())

        def count(predicate) -> int:
            return sum(1 for m in merchants if predicate(m))

        return MerchantStatistics(
            total=len(merchants),
            active=count(lambda m: m.status == MerchantStatus.ACTIVE),
            pending=count(lambda m: m.status == MerchantStatus.PENDING),
            suspended=count(lambda m: m.status == MerchantStatus.SUSPENDED),
            closed=count(lambda m: m.status == MerchantStatus.CLOSED),
            kyc_pending=count(
                lambda m: m.kyc_status in (KycStatus.PENDING, KycStatus.IN_REVIEW)
            ),
            kyc_approved=count(lambda m: m.kyc_status == KycStatus.APPROVED),
            kyc_rejected=count(lambda m: m.kyc_status == KycStatus.REJECTED),
        )


class InMemoryAdminUserRepository(AdminUserRepository):
    def __init__(self):
        self.users: Dict[UUID, AdminUser] = {}

    async def find_by_email(self, email: str) -> Optional[AdminUser]:
        for user in self.users.values():
            if user.email.lower() == email.lower():
                return user
        return None

    async def find_by_id(self, user_id: UUID) -> Optional[AdminUser]:
        return self.users.get(UUID(str(user_id)))

    async def save(self, user: AdminUser) -> AdminUser:
        self.users[user.id] = user
        return user


class InMemoryAdminSessionRepository(AdminSessionRepository):
    def __init__(self):
        self.sessions: List[AdminSession] = []

    async def save(self, session: AdminSession) -> AdminSession:
        self.sessions.append(session)
        return session

    async def find_active_by_refresh_token(self, refresh_token: str) -> Optional[AdminSession]:
        for session in self.sessions:
            if session.refresh_token == refresh_token and session.is_active:
                return session
        return None

    async def deactivate_by_refresh_token(self, refresh_token: str) -> int:
        count = 0
        for session in self.sessions:
            if session.refresh_token == refresh_token and session.is_active:
                session.is_active = False
                count += 1
        return count


class InMemoryAdminLoginAttemptRepository(AdminLoginAttemptRepository):
    def __init__(self):
        self.attempts: List[AdminLoginAttempt] = []

    async def save(self, attempt: AdminLoginAttempt) -> AdminLoginAttempt:
        self.attempts.append(attempt)
        return attempt

    async def count_failures_since(self, email: str, since: datetime) -> int:
        return sum(
            1 for a in self.attempts
            if a.email == email and not a.success and a.created_at > since
        )

    async def last_success_at(self, email: str) -> Optional[datetime]:
        successes = [a.created_at for a in self.attempts if a.email == email and a.success]
        return max(successes) if successes else None


# =============================================================================
# Merchant Fixtures
# =============================================================================

@pytest.fixture
def fast_hasher() -> PasswordHasher:
    """Low-cost bcrypt so tests stay quick."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def lifecycle() -> LifecycleSettings:
    return LifecycleSettings(password_hash_rounds=4)


@pytest.fixture
def merchant_repo() -> InMemoryMerchantRepository:
    return InMemoryMerchantRepository()


@pytest.fixture
def email_sender() -> MockEmailSender:
    return MockEmailSender()


@pytest.fixture
def bank_verifier() -> MockBankVerificationClient:
    return MockBankVerificationClient()


@pytest.fixture
def merchant_service(
    merchant_repo: InMemoryMerchantRepository,
    email_sender: MockEmailSender,
    bank_verifier: MockBankVerificationClient,
    fast_hasher: PasswordHasher,
    lifecycle: LifecycleSettings,
) -> MerchantService:
    return MerchantService(
        merchant_repository=merchant_repo,
        email_sender=email_sender,
        bank_verifier=bank_verifier,
        password_hasher=fast_hasher,
        settings=lifecycle,
    )


# =============================================================================
# Admin Auth Fixtures
# =============================================================================

ADMIN_PASSWORD = "SecureAdminPass123!"


@pytest.fixture
def auth_settings() -> Settings:
    return Settings(
        jwt_secret="unit-test-secret-with-enough-length",
        admin_access_token_ttl="2h",
        admin_refresh_token_ttl="7d",
        admin_lockout_threshold=5,
        admin_lockout_window_minutes=15,
    )


@pytest.fixture
def token_signer(auth_settings: Settings) -> TokenSigner:
    return TokenSigner(secret=auth_settings.jwt_secret, algorithm=auth_settings.jwt_algorithm)


@pytest.fixture
def admin_user_repo() -> InMemoryAdminUserRepository:
    return InMemoryAdminUserRepository()


@pytest.fixture
def admin_session_repo() -> InMemoryAdminSessionRepository:
    return InMemoryAdminSessionRepository()


@pytest.fixture
def login_attempt_repo() -> InMemoryAdminLoginAttemptRepository:
    return InMemoryAdminLoginAttemptRepository()


@pytest.fixture
def admin_auth_service(
    admin_user_repo: InMemoryAdminUserRepository,
    admin_session_repo: InMemoryAdminSessionRepository,
    login_attempt_repo: InMemoryAdminLoginAttemptRepository,
    fast_hasher: PasswordHasher,
    token_signer: TokenSigner,
    auth_settings: Settings,
) -> AdminAuthService:
    return AdminAuthService(
        user_repository=admin_user_repo,
        session_repository=admin_session_repo,
        attempt_repository=login_attempt_repo,
        password_hasher=fast_hasher,
        token_signer=token_signer,
        settings=auth_settings,
    )


@pytest.fixture
def make_admin(admin_user_repo: InMemoryAdminUserRepository, fast_hasher: PasswordHasher):
    """Factory that stores an admin user with ``ADMIN_PASSWORD``."""

    async def _make(
        email: str = "admin@example.com",
        role: UserRole = UserRole.ADMIN,
        is_active: bool = True,
    ) -> AdminUser:
        user = AdminUser(
            email=email,
            password_hash=fast_hasher.hash(ADMIN_PASSWORD),
            role=role,
            is_active=is_active,
        )
        return await admin_user_repo.save(user)

    return _make
