"""Data transfer objects for admin authentication."""

from dataclasses import dataclass
from typing import Optional

from src.domain.entities import AdminUser


@dataclass(frozen=True)
class AdminLoginRequest:
    email: str
    password: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class AdminProfile:
    """Identity of the logged-in admin, returned with every token."""

    id: str
    email: str
    role: str

    @classmethod
    def from_entity(cls, user: AdminUser) -> "AdminProfile":
        return cls(id=str(user.id), email=user.email, role=user.role.value)


@dataclass(frozen=True)
class AdminRefreshResponse:
    access_token: str
    expires_in: int
    admin: AdminProfile


@dataclass(frozen=True)
class AdminLoginResponse:
    access_token: str
    expires_in: int
    admin: AdminProfile
    refresh_token: str
