"""Dependency injection for FastAPI."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.services import AdminAuthService, MerchantService
from src.core.config import settings
from src.core.security import PasswordHasher, TokenSigner
from src.domain.entities import AdminPrincipal
from src.domain.exceptions import UnauthorizedException
from src.domain.interfaces import BankVerificationProvider, EmailSender
from src.infrastructure.clients import (
    HttpBankVerificationClient,
    HttpEmailSender,
    MockBankVerificationClient,
    MockEmailSender,
)
from src.infrastructure.database import get_db_session
from src.infrastructure.repositories import (
    PostgresAdminLoginAttemptRepository,
    PostgresAdminSessionRepository,
    PostgresAdminUserRepository,
    PostgresMerchantRepository,
)
from src.service.lifecycle import lifecycle_settings

bearer_scheme = HTTPBearer(auto_error=False)


# Repository dependencies
async def get_merchant_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresMerchantRepository:
    """Get a MerchantRepository instance."""
    return PostgresMerchantRepository(session)


async def get_admin_user_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresAdminUserRepository:
    return PostgresAdminUserRepository(session)


async def get_admin_session_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresAdminSessionRepository:
    return PostgresAdminSessionRepository(session)


async def get_admin_login_attempt_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresAdminLoginAttemptRepository:
    return PostgresAdminLoginAttemptRepository(session)


# External client dependencies
@lru_cache
def get_email_sender() -> EmailSender:
    """Get the EmailSender selected by ``email_provider``."""
    if settings.email_provider == "http":
        return HttpEmailSender()
    return MockEmailSender()


@lru_cache
def get_bank_verifier() -> BankVerificationProvider:
    """Get the BankVerificationProvider selected by ``bank_verification_provider``."""
    if settings.bank_verification_provider == "http":
        return HttpBankVerificationClient()
    return MockBankVerificationClient()


# Security dependencies
@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=lifecycle_settings.password_hash_rounds)


@lru_cache
def get_token_signer() -> TokenSigner:
    return TokenSigner(secret=settings.jwt_secret, algorithm=settings.jwt_algorithm)


# Service dependencies
def build_merchant_service(
    session: AsyncSession,
    email_sender: Optional[EmailSender] = None,
    bank_verifier: Optional[BankVerificationProvider] = None,
) -> MerchantService:
    """Build a MerchantService bound to an existing session, outside a request."""
    return MerchantService(
        merchant_repository=PostgresMerchantRepository(session),
        email_sender=email_sender or get_email_sender(),
        bank_verifier=bank_verifier or get_bank_verifier(),
        password_hasher=get_password_hasher(),
    )


async def get_merchant_service(
    merchant_repo: Annotated[PostgresMerchantRepository, Depends(get_merchant_repository)],
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
    bank_verifier: Annotated[BankVerificationProvider, Depends(get_bank_verifier)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> MerchantService:
    """Get a MerchantService instance with all dependencies."""
    return MerchantService(
        merchant_repository=merchant_repo,
        email_sender=email_sender,
        bank_verifier=bank_verifier,
        password_hasher=password_hasher,
    )


async def get_admin_auth_service(
    user_repo: Annotated[PostgresAdminUserRepository, Depends(get_admin_user_repository)],
    session_repo: Annotated[
        PostgresAdminSessionRepository, Depends(get_admin_session_repository)
    ],
    attempt_repo: Annotated[
        PostgresAdminLoginAttemptRepository, Depends(get_admin_login_attempt_repository)
    ],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    token_signer: Annotated[TokenSigner, Depends(get_token_signer)],
) -> AdminAuthService:
    """Get an AdminAuthService instance with all dependencies."""
    return AdminAuthService(
        user_repository=user_repo,
        session_repository=session_repo,
        attempt_repository=attempt_repo,
        password_hasher=password_hasher,
        token_signer=token_signer,
    )


# Authentication dependencies
async def get_current_admin(
    request: Request,
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
    auth_service: Annotated[AdminAuthService, Depends(get_admin_auth_service)],
) -> AdminPrincipal:
    """
    Resolve the bearer access token on an admin route.

    Raises:
        UnauthorizedException: If the token is missing or not a valid admin token
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedException("Missing bearer token")

    principal = auth_service.authenticate_access_token(credentials.credentials)
    request.state.admin = principal
    return principal
