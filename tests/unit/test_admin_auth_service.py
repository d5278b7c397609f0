"""
Unit Tests for AdminAuthService.

These tests verify:
1. Login for admin roles, and rejection for everyone else
2. Lockout after repeated failures
3. Refresh and logout of sessions
4. Access token authentication
"""

from datetime import timedelta

import jwt
import pytest

from src.application.dto import AdminLoginRequest
from src.core.clock import utc_now
from src.core.security import ADMIN_REFRESH_TOKEN_TYPE
from src.domain.entities import AdminLoginAttempt, UserRole
from src.domain.exceptions import AccountLockedException, UnauthorizedException

ADMIN_PASSWORD = "SecureAdminPass123!"


def session_id_of(login) -> str:
    """Session id embedded in a login's refresh token."""
    return jwt.decode(login.refresh_token, options={"verify_signature": False})["sid"]


def login_request(email="admin@example.com", password=ADMIN_PASSWORD) -> AdminLoginRequest:
    return AdminLoginRequest(
        email=email,
        password=password,
        user_agent="pytest",
        ip_address="203.0.113.7",
    )


# =============================================================================
# Login
# =============================================================================

class TestLogin:

    @pytest.mark.asyncio
    async def test_admin_login_issues_tokens(
        self, admin_auth_service, make_admin, admin_session_repo, login_attempt_repo
    ):
        admin = await make_admin()

        result = await admin_auth_service.login(login_request())

        assert result.access_token
        assert result.refresh_token
        assert result.expires_in == 7200
        assert result.admin.id == str(admin.id)
        assert result.admin.role == "admin"

        assert len(admin_session_repo.sessions) == 1
        session = admin_session_repo.sessions[0]
        assert session.refresh_token == result.refresh_token
        assert session.ip_address == "203.0.113.7"
        assert session.expires_at > utc_now() + timedelta(days=6)

        assert [a.success for a in login_attempt_repo.attempts] == [True]

    @pytest.mark.asyncio
    async def test_support_admin_may_log_in(self, admin_auth_service, make_admin):
        await make_admin(email="support@example.com", role=UserRole.SUPPORT_ADMIN)

        result = await admin_auth_service.login(login_request("support@example.com"))

        assert result.admin.role == "support_admin"

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, admin_auth_service, make_admin):
        await make_admin()

        result = await admin_auth_service.login(login_request("ADMIN@Example.com"))

        assert result.admin.email == "admin@example.com"

    @pytest.mark.asyncio
    async def test_user_role_always_unauthorized(
        self, admin_auth_service, make_admin, login_attempt_repo
    ):
        await make_admin(email="user@example.com", role=UserRole.USER)

        with pytest.raises(UnauthorizedException):
            await admin_auth_service.login(login_request("user@example.com"))

        assert [a.success for a in login_attempt_repo.attempts] == [False]

    @pytest.mark.asyncio
    async def test_inactive_admin_unauthorized(self, admin_auth_service, make_admin):
        await make_admin(is_active=False)

        with pytest.raises(UnauthorizedException):
            await admin_auth_service.login(login_request())

    @pytest.mark.asyncio
    async def test_wrong_password_unauthorized(
        self, admin_auth_service, make_admin, admin_session_repo
    ):
        await make_admin()

        with pytest.raises(UnauthorizedException):
            await admin_auth_service.login(login_request(password="wrong-password"))

        assert admin_session_repo.sessions == []

    @pytest.mark.asyncio
    async def test_unknown_email_recorded_as_failure(
        self, admin_auth_service, login_attempt_repo
    ):
        with pytest.raises(UnauthorizedException):
            await admin_auth_service.login(login_request("ghost@example.com"))

        attempt = login_attempt_repo.attempts[0]
        assert attempt.email == "ghost@example.com"
        assert attempt.user_id is None
        assert attempt.success is False


# =============================================================================
# Lockout
# =============================================================================

class TestLockout:

    @pytest.mark.asyncio
    async def test_sixth_attempt_locked_even_with_correct_password(
        self, admin_auth_service, make_admin, login_attempt_repo
    ):
        await make_admin()

        for _ in range(5):
            with pytest.raises(UnauthorizedException):
                await admin_auth_service.login(login_request(password="wrong-password"))

        with pytest.raises(AccountLockedException) as exc_info:
            await admin_auth_service.login(login_request())

        assert exc_info.value.code == "ACCOUNT_LOCKED"
        assert exc_info.value.retry_after_minutes == 15
        # Locked attempts are not recorded
        assert len(login_attempt_repo.attempts) == 5

    @pytest.mark.asyncio
    async def test_four_failures_do_not_lock(self, admin_auth_service, make_admin):
        await make_admin()

        for _ in range(4):
            with pytest.raises(UnauthorizedException):
                await admin_auth_service.login(login_request(password="wrong-password"))

        result = await admin_auth_service.login(login_request())
        assert result.access_token

    @pytest.mark.asyncio
    async def test_failures_outside_window_ignored(
        self, admin_auth_service, make_admin, login_attempt_repo
    ):
        await make_admin()
        old = utc_now() - timedelta(minutes=16)
        for _ in range(5):
            login_attempt_repo.attempts.append(
                AdminLoginAttempt(email="admin@example.com", success=False, created_at=old)
            )

        result = await admin_auth_service.login(login_request())

        assert result.access_token

    @pytest.mark.asyncio
    async def test_success_resets_failure_count(
        self, admin_auth_service, make_admin, login_attempt_repo
    ):
        await make_admin()
        earlier = utc_now() - timedelta(minutes=5)
        for _ in range(4):
            login_attempt_repo.attempts.append(
                AdminLoginAttempt(email="admin@example.com", success=False, created_at=earlier)
            )
        await admin_auth_service.login(login_request())

        for _ in range(4):
            with pytest.raises(UnauthorizedException):
                await admin_auth_service.login(login_request(password="wrong-password"))

        result = await admin_auth_service.login(login_request())
        assert result.access_token

    @pytest.mark.asyncio
    async def test_lockout_is_per_email(self, admin_auth_service, make_admin):
        await make_admin()
        await make_admin(email="other@example.com")

        for _ in range(5):
            with pytest.raises(UnauthorizedException):
                await admin_auth_service.login(login_request(password="wrong-password"))

        result = await admin_auth_service.login(login_request("other@example.com"))
        assert result.access_token


# =============================================================================
# Refresh and Logout
# =============================================================================

class TestSessions:

    @pytest.mark.asyncio
    async def test_refresh_issues_new_access_token(self, admin_auth_service, make_admin):
        await make_admin()
        login = await admin_auth_service.login(login_request())

        refreshed = await admin_auth_service.refresh(login.refresh_token)

        assert refreshed.access_token
        assert refreshed.expires_in == 7200
        principal = admin_auth_service.authenticate_access_token(refreshed.access_token)
        assert principal.email == "admin@example.com"

    @pytest.mark.asyncio
    async def test_access_token_cannot_refresh(self, admin_auth_service, make_admin):
        await make_admin()
        login = await admin_auth_service.login(login_request())

        with pytest.raises(UnauthorizedException):
            await admin_auth_service.refresh(login.access_token)

    @pytest.mark.asyncio
    async def test_refresh_after_logout_rejected(
        self, admin_auth_service, make_admin, admin_session_repo
    ):
        await make_admin()
        login = await admin_auth_service.login(login_request())

        await admin_auth_service.logout(login.refresh_token)

        assert admin_session_repo.sessions[0].is_active is False
        with pytest.raises(UnauthorizedException):
            await admin_auth_service.refresh(login.refresh_token)

    @pytest.mark.asyncio
    async def test_refresh_for_deactivated_admin_rejected(
        self, admin_auth_service, make_admin
    ):
        admin = await make_admin()
        login = await admin_auth_service.login(login_request())
        admin.is_active = False

        with pytest.raises(UnauthorizedException):
            await admin_auth_service.refresh(login.refresh_token)

    @pytest.mark.asyncio
    async def test_logout_unknown_token_is_ignored(self, admin_auth_service):
        await admin_auth_service.logout("not-a-session-token")

    @pytest.mark.asyncio
    async def test_garbage_refresh_token_rejected(self, admin_auth_service):
        with pytest.raises(UnauthorizedException):
            await admin_auth_service.refresh("garbage")


# =============================================================================
# Access Tokens
# =============================================================================

class TestAccessTokens:

    @pytest.mark.asyncio
    async def test_access_token_resolves_principal(self, admin_auth_service, make_admin):
        admin = await make_admin()
        login = await admin_auth_service.login(login_request())

        principal = admin_auth_service.authenticate_access_token(login.access_token)

        assert principal.id == str(admin.id)
        assert principal.role == UserRole.ADMIN
        assert principal.session_id == session_id_of(login)

    def test_refresh_token_is_not_an_access_token(self, admin_auth_service, token_signer):
        token = token_signer.sign({"sub": "x", "role": "admin"}, ADMIN_REFRESH_TOKEN_TYPE, 60)

        with pytest.raises(UnauthorizedException):
            admin_auth_service.authenticate_access_token(token)

    def test_user_role_token_rejected(self, admin_auth_service, token_signer):
        token = token_signer.sign({"sub": "x", "role": "user"}, "admin_access", 60)

        with pytest.raises(UnauthorizedException):
            admin_auth_service.authenticate_access_token(token)

    def test_tampered_token_rejected(self, admin_auth_service, token_signer):
        token = token_signer.sign({"sub": "x", "role": "admin"}, "admin_access", 60)

        with pytest.raises(UnauthorizedException):
            admin_auth_service.authenticate_access_token(token[:-4] + "AAAA")
