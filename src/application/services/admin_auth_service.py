"""Admin authentication service - login, token refresh and logout."""

from datetime import timedelta
from typing import Optional
from uuid import UUID, uuid4

import jwt
import structlog

from src.application.dto import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminProfile,
    AdminRefreshResponse,
)
from src.core.clock import utc_now
from src.core.config import Settings, settings as app_settings
from src.core.metrics import record_admin_login
from src.core.security import (
    ADMIN_ACCESS_TOKEN_TYPE,
    ADMIN_REFRESH_TOKEN_TYPE,
    PasswordHasher,
    TokenSigner,
    parse_duration,
)
from src.domain.entities import (
    ADMIN_ROLES,
    AdminLoginAttempt,
    AdminPrincipal,
    AdminSession,
    AdminUser,
    UserRole,
)
from src.domain.exceptions import AccountLockedException, UnauthorizedException
from src.domain.interfaces import (
    AdminLoginAttemptRepository,
    AdminSessionRepository,
    AdminUserRepository,
)

logger = structlog.get_logger(__name__)


class AdminAuthService:
    """
    Application service for back-office authentication.

    Only users holding the ADMIN or SUPPORT_ADMIN role may log in. Every
    attempt is recorded, and repeated failures lock the email out for the
    configured window regardless of the credentials presented.
    """

    def __init__(
        self,
        user_repository: AdminUserRepository,
        session_repository: AdminSessionRepository,
        attempt_repository: AdminLoginAttemptRepository,
        password_hasher: Optional[PasswordHasher] = None,
        token_signer: Optional[TokenSigner] = None,
        settings: Settings = app_settings,
    ):
        self._user_repo = user_repository
        self._session_repo = session_repository
        self._attempt_repo = attempt_repository
        self._password_hasher = password_hasher or PasswordHasher()
        self._token_signer = token_signer or TokenSigner(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        self._access_ttl = parse_duration(settings.admin_access_token_ttl)
        self._refresh_ttl = parse_duration(settings.admin_refresh_token_ttl)
        self._lockout_threshold = settings.admin_lockout_threshold
        self._lockout_window_minutes = settings.admin_lockout_window_minutes

    async def login(self, request: AdminLoginRequest) -> AdminLoginResponse:
        """
        Authenticate an admin and open a refresh-token session.

        Args:
            request: Credentials plus the caller's user agent and IP

        Returns:
            AdminLoginResponse with access and refresh tokens

        Raises:
            AccountLockedException: If too many recent attempts failed
            UnauthorizedException: If the credentials are wrong or the user
                is missing, inactive or not an admin
        """
        email = request.email.strip().lower()
        log = logger.bind(email=email, ip_address=request.ip_address)

        if await self._is_locked_out(email):
            record_admin_login("locked")
            log.warning("admin_login_locked")
            raise AccountLockedException(email, self._lockout_window_minutes)

        user = await self._user_repo.find_by_email(email)

        if user is None or not user.is_active or not user.is_admin:
            await self._record_failure(email, request, user)
            log.info(
                "admin_login_failed",
                reason="not_admin" if user is not None else "unknown_user",
            )
            raise UnauthorizedException()

        if not self._password_hasher.verify(request.password, user.password_hash):
            await self._record_failure(email, request, user)
            log.info("admin_login_failed", reason="bad_password", user_id=str(user.id))
            raise UnauthorizedException()

        await self._attempt_repo.save(
            AdminLoginAttempt(
                email=email,
                success=True,
                user_id=user.id,
                ip_address=request.ip_address,
                user_agent=request.user_agent,
            )
        )

        session_id = uuid4()
        refresh_token = self._token_signer.sign(
            {"sub": str(user.id), "sid": str(session_id)},
            ADMIN_REFRESH_TOKEN_TYPE,
            self._refresh_ttl,
        )
        await self._session_repo.save(
            AdminSession(
                id=session_id,
                user_id=user.id,
                refresh_token=refresh_token,
                expires_at=utc_now() + timedelta(seconds=self._refresh_ttl),
                user_agent=request.user_agent,
                ip_address=request.ip_address,
            )
        )

        record_admin_login("success")
        log.info("admin_logged_in", user_id=str(user.id), role=user.role.value)

        return AdminLoginResponse(
            access_token=self._sign_access_token(user, session_id),
            expires_in=self._access_ttl,
            admin=AdminProfile.from_entity(user),
            refresh_token=refresh_token,
        )

    async def refresh(
        self,
        refresh_token: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AdminRefreshResponse:
        """
        Issue a new access token for an active session.

        The refresh token itself is not rotated.

        Raises:
            UnauthorizedException: If the token, its session or its user is
                no longer valid
        """
        try:
            claims = self._token_signer.verify(refresh_token)
        except jwt.InvalidTokenError:
            raise UnauthorizedException("Invalid refresh token")

        if claims.get("type") != ADMIN_REFRESH_TOKEN_TYPE:
            raise UnauthorizedException("Invalid token type")

        session = await self._session_repo.find_active_by_refresh_token(refresh_token)
        if session is None or not session.is_usable(utc_now()):
            raise UnauthorizedException("Session expired or invalid")

        user = await self._user_repo.find_by_id(session.user_id)
        if user is None or not user.is_active or not user.is_admin:
            raise UnauthorizedException("User not found or inactive")

        logger.info(
            "admin_token_refreshed",
            user_id=str(user.id),
            session_id=str(session.id),
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return AdminRefreshResponse(
            access_token=self._sign_access_token(user, session.id),
            expires_in=self._access_ttl,
            admin=AdminProfile.from_entity(user),
        )

    async def logout(self, refresh_token: str) -> None:
        """Deactivate the session holding ``refresh_token``. Unknown tokens are ignored."""
        count = await self._session_repo.deactivate_by_refresh_token(refresh_token)
        logger.info("admin_logged_out", sessions_closed=count)

    def authenticate_access_token(self, token: str) -> AdminPrincipal:
        """
        Resolve a bearer access token to the admin it was issued to.

        Raises:
            UnauthorizedException: If the token is invalid, expired, of the
                wrong type or not held by an admin role
        """
        try:
            claims = self._token_signer.verify(token)
        except jwt.InvalidTokenError:
            raise UnauthorizedException("Invalid or expired access token")

        if claims.get("type") != ADMIN_ACCESS_TOKEN_TYPE:
            raise UnauthorizedException("Invalid token type")

        try:
            role = UserRole(claims.get("role"))
        except ValueError:
            raise UnauthorizedException("Invalid token role")

        if role not in ADMIN_ROLES or not claims.get("sub"):
            raise UnauthorizedException("Invalid or expired access token")

        return AdminPrincipal(
            id=claims["sub"],
            email=claims.get("email", ""),
            role=role,
            session_id=claims.get("sid"),
        )

    async def _is_locked_out(self, email: str) -> bool:
        """Count failures inside the window and after the latest success."""
        since = utc_now() - timedelta(minutes=self._lockout_window_minutes)
        last_success = await self._attempt_repo.last_success_at(email)
        if last_success is not None and last_success > since:
            since = last_success

        failures = await self._attempt_repo.count_failures_since(email, since)
        return failures >= self._lockout_threshold

    async def _record_failure(
        self,
        email: str,
        request: AdminLoginRequest,
        user: Optional[AdminUser],
    ) -> None:
        record_admin_login("failure")
        await self._attempt_repo.save(
            AdminLoginAttempt(
                email=email,
                success=False,
                user_id=user.id if user is not None else None,
                ip_address=request.ip_address,
                user_agent=request.user_agent,
            )
        )

    def _sign_access_token(self, user: AdminUser, session_id: UUID) -> str:
        return self._token_signer.sign(
            {
                "sub": str(user.id),
                "email": user.email,
                "role": user.role.value,
                "sid": str(session_id),
            },
            ADMIN_ACCESS_TOKEN_TYPE,
            self._access_ttl,
        )
