"""Admin authentication domain exceptions."""

from .base import DomainException


class UnauthorizedException(DomainException):
    """Raised when credentials or tokens are missing, wrong, or expired."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, code="UNAUTHORIZED")


class ForbiddenException(DomainException):
    """Raised when an authenticated caller is not allowed to proceed."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message=message, code="FORBIDDEN")


class AccountLockedException(ForbiddenException):
    """Raised when too many failed logins have locked an admin account."""

    def __init__(self, email: str, retry_after_minutes: int):
        super().__init__(
            message=(
                "Account locked due to too many failed login attempts. "
                f"Try again in {retry_after_minutes} minutes."
            ),
        )
        self.code = "ACCOUNT_LOCKED"
        self.email = email
        self.retry_after_minutes = retry_after_minutes
