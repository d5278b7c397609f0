"""PostgreSQL implementations of the admin auth repositories."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import AdminLoginAttempt, AdminSession, AdminUser, UserRole
from src.domain.interfaces import (
    AdminLoginAttemptRepository,
    AdminSessionRepository,
    AdminUserRepository,
)
from src.infrastructure.database.models import (
    AdminLoginAttemptModel,
    AdminSessionModel,
    AdminUserModel,
)


class PostgresAdminUserRepository(AdminUserRepository):
    """PostgreSQL implementation of the admin user repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_email(self, email: str) -> Optional[AdminUser]:
        stmt = select(AdminUserModel).where(
            func.lower(AdminUserModel.email) == email.strip().lower()
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model is not None else None

    async def find_by_id(self, user_id: UUID) -> Optional[AdminUser]:
        stmt = select(AdminUserModel).where(AdminUserModel.id == str(user_id))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model is not None else None

    async def save(self, user: AdminUser) -> AdminUser:
        model = AdminUserModel(
            id=str(user.id),
            email=user.email.lower(),
            password_hash=user.password_hash,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            is_active=user.is_active,
            created_at=user.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return user

    def _to_entity(self, model: AdminUserModel) -> AdminUser:
        return AdminUser(
            id=UUID(model.id),
            email=model.email,
            password_hash=model.password_hash,
            role=UserRole(model.role),
            first_name=model.first_name,
            last_name=model.last_name,
            is_active=model.is_active,
            created_at=model.created_at,
        )


class PostgresAdminSessionRepository(AdminSessionRepository):
    """PostgreSQL implementation of the admin session repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, session: AdminSession) -> AdminSession:
        model = AdminSessionModel(
            id=str(session.id),
            user_id=str(session.user_id),
            refresh_token=session.refresh_token,
            is_active=session.is_active,
            expires_at=session.expires_at,
            user_agent=session.user_agent,
            ip_address=session.ip_address,
            created_at=session.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return session

    async def find_active_by_refresh_token(
        self,
        refresh_token: str,
    ) -> Optional[AdminSession]:
        stmt = (
            select(AdminSessionModel)
            .where(AdminSessionModel.refresh_token == refresh_token)
            .where(AdminSessionModel.is_active.is_(True))
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model is not None else None

    async def deactivate_by_refresh_token(self, refresh_token: str) -> int:
        stmt = (
            update(AdminSessionModel)
            .where(AdminSessionModel.refresh_token == refresh_token)
            .where(AdminSessionModel.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    def _to_entity(self, model: AdminSessionModel) -> AdminSession:
        return AdminSession(
            id=UUID(model.id),
            user_id=UUID(model.user_id),
            refresh_token=model.refresh_token,
            expires_at=model.expires_at,
            is_active=model.is_active,
            user_agent=model.user_agent,
            ip_address=model.ip_address,
            created_at=model.created_at,
        )


class PostgresAdminLoginAttemptRepository(AdminLoginAttemptRepository):
    """PostgreSQL implementation of the admin login attempt log."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, attempt: AdminLoginAttempt) -> AdminLoginAttempt:
        model = AdminLoginAttemptModel(
            id=str(attempt.id),
            email=attempt.email,
            user_id=str(attempt.user_id) if attempt.user_id else None,
            success=attempt.success,
            ip_address=attempt.ip_address,
            user_agent=attempt.user_agent,
            created_at=attempt.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return attempt

    async def count_failures_since(self, email: str, since: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(AdminLoginAttemptModel)
            .where(AdminLoginAttemptModel.email == email)
            .where(AdminLoginAttemptModel.success.is_(False))
            .where(AdminLoginAttemptModel.created_at > since)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def last_success_at(self, email: str) -> Optional[datetime]:
        stmt = (
            select(func.max(AdminLoginAttemptModel.created_at))
            .where(AdminLoginAttemptModel.email == email)
            .where(AdminLoginAttemptModel.success.is_(True))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
