"""Admin user, session, and login attempt entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from src.core.clock import utc_now


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPPORT_ADMIN = "support_admin"


ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPPORT_ADMIN})


@dataclass
class AdminUser:
    """A platform user who may hold a back-office role."""

    email: str
    password_hash: str
    role: UserRole = UserRole.USER
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


@dataclass
class AdminSession:
    """
    A refresh-token session opened by a successful admin login.

    Sessions are never deleted; logout flips ``is_active`` off.
    """

    user_id: UUID
    refresh_token: str
    expires_at: datetime
    is_active: bool = True
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)

    def is_usable(self, now: datetime) -> bool:
        return self.is_active and self.expires_at > now


@dataclass(frozen=True)
class AdminLoginAttempt:
    """Append-only record of one admin login attempt."""

    email: str
    success: bool
    user_id: Optional[UUID] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class AdminPrincipal:
    """The authenticated admin behind an access token."""

    id: str
    email: str
    role: UserRole
    session_id: Optional[str] = None
