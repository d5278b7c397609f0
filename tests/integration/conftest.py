"""
Fixtures for integration tests.

Provides:
- Test client for FastAPI app
- Mock email sender and bank verifier
- In-memory database for testing
- Seeded admin users and authorization headers
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.main import app
from src.core.dependencies import (
    get_admin_login_attempt_repository,
    get_admin_session_repository,
    get_admin_user_repository,
    get_bank_verifier,
    get_email_sender,
    get_merchant_repository,
    get_password_hasher,
)
from src.core.security import PasswordHasher
from src.domain.entities import AdminUser, UserRole
from src.infrastructure.clients import MockBankVerificationClient, MockEmailSender
from src.infrastructure.database import Base
from src.infrastructure.repositories import (
    PostgresAdminLoginAttemptRepository,
    PostgresAdminSessionRepository,
    PostgresAdminUserRepository,
    PostgresMerchantRepository,
)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "SecureAdminPass123!"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


# =============================================================================
# Mock Client Fixtures
# =============================================================================

@pytest.fixture
def mock_email_sender() -> MockEmailSender:
    return MockEmailSender()


@pytest.fixture
def mock_bank_verifier() -> MockBankVerificationClient:
    return MockBankVerificationClient()


@pytest.fixture
def fast_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


# =============================================================================
# App Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(
    test_session: AsyncSession,
    mock_email_sender: MockEmailSender,
    mock_bank_verifier: MockBankVerificationClient,
    fast_hasher: PasswordHasher,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with mocked dependencies.

    This client:
    - Uses an in-memory SQLite database shared by every repository
    - Records emails instead of sending them
    - Verifies bank accounts with the deterministic mock verifier
    """
    async def override_get_merchant_repository():
        return PostgresMerchantRepository(test_session)

    async def override_get_admin_user_repository():
        return PostgresAdminUserRepository(test_session)

    async def override_get_admin_session_repository():
        return PostgresAdminSessionRepository(test_session)

    async def override_get_admin_login_attempt_repository():
        return PostgresAdminLoginAttemptRepository(test_session)

    app.dependency_overrides[get_merchant_repository] = override_get_merchant_repository
    app.dependency_overrides[get_admin_user_repository] = override_get_admin_user_repository
    app.dependency_overrides[get_admin_session_repository] = (
        override_get_admin_session_repository
    )
    app.dependency_overrides[get_admin_login_attempt_repository] = (
        override_get_admin_login_attempt_repository
    )
    app.dependency_overrides[get_email_sender] = lambda: mock_email_sender
    app.dependency_overrides[get_bank_verifier] = lambda: mock_bank_verifier
    app.dependency_overrides[get_password_hasher] = lambda: fast_hasher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Admin Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def admin_user(test_session: AsyncSession, fast_hasher: PasswordHasher) -> AdminUser:
    """An active ADMIN stored in the test database."""
    repo = PostgresAdminUserRepository(test_session)
    return await repo.save(
        AdminUser(
            email=ADMIN_EMAIL,
            password_hash=fast_hasher.hash(ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            first_name="Ada",
            last_name="Admin",
        )
    )


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient, admin_user: AdminUser) -> dict:
    """Authorization header carrying a fresh admin access token."""
    response = await client.post(
        "/v1/admin/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def registration_request() -> dict:
    """Request body for a new merchant."""
    return {
        "name": "Jane Doe",
        "email": "jane@acme.example",
        "password": "s3cure-passw0rd",
        "business_name": "Acme Coffee",
        "business_type": "llc",
    }


@pytest.fixture
def kyc_request() -> dict:
    """Request body with every required KYC document."""
    return {
        "documents": [
            {
                "type": "government_id",
                "file_name": "passport.pdf",
                "file_url": "https://files.example/passport.pdf",
            },
            {
                "type": "proof_of_address",
                "file_name": "utility.pdf",
                "file_url": "https://files.example/utility.pdf",
            },
        ]
    }


@pytest_asyncio.fixture
async def registered_merchant(
    client: AsyncClient,
    registration_request: dict,
) -> dict:
    response = await client.post("/v1/merchants/register", json=registration_request)
    assert response.status_code == 201
    return response.json()


@pytest_asyncio.fixture
async def verified_merchant(
    client: AsyncClient,
    registered_merchant: dict,
    mock_email_sender: MockEmailSender,
) -> dict:
    token = mock_email_sender.sent_of("verification")[-1]["data"]["token"]
    response = await client.post("/v1/merchants/verify-email", json={"token": token})
    assert response.status_code == 200
    return response.json()
