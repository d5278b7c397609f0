"""Merchant account domain exceptions."""

from typing import Optional

from .base import DomainException


class MerchantNotFoundException(DomainException):
    """Raised when a merchant cannot be found."""

    def __init__(self, merchant_id: Optional[str] = None):
        message = (
            f"Merchant not found: {merchant_id}" if merchant_id else "Merchant not found"
        )
        super().__init__(message=message, code="MERCHANT_NOT_FOUND")
        self.merchant_id = merchant_id


class MerchantAlreadyExistsException(DomainException):
    """Raised when registering an email that already belongs to a merchant."""

    def __init__(self, email: str):
        super().__init__(
            message=f"Merchant with email {email} already exists",
            code="MERCHANT_ALREADY_EXISTS",
        )
        self.email = email


class MerchantSuspendedException(DomainException):
    """Raised when a suspended merchant attempts a blocked action."""

    def __init__(self, reason: Optional[str] = None):
        message = "Merchant account is suspended"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, code="MERCHANT_SUSPENDED")
        self.reason = reason


class MerchantClosedException(DomainException):
    """Raised when a closed merchant attempts a blocked action."""

    def __init__(self):
        super().__init__(
            message="Merchant account is closed",
            code="MERCHANT_CLOSED",
        )


class MerchantInactiveException(DomainException):
    """Raised when an inactive merchant attempts an action that needs an operating account."""

    def __init__(self):
        super().__init__(
            message="Merchant account is inactive",
            code="MERCHANT_INACTIVE",
        )


class MerchantInvalidStatusException(DomainException):
    """Raised when a status transition is not allowed from the current status."""

    def __init__(self, current_status: str, requested_status: str):
        super().__init__(
            message=(
                f"Cannot transition merchant from {current_status} "
                f"to {requested_status}"
            ),
            code="MERCHANT_INVALID_STATUS",
        )
        self.current_status = current_status
        self.requested_status = requested_status


class MerchantEmailNotVerifiedException(DomainException):
    """Raised when an action requires a verified email address."""

    def __init__(self):
        super().__init__(
            message="Merchant email address is not verified",
            code="MERCHANT_EMAIL_NOT_VERIFIED",
        )


class MerchantEmailAlreadyVerifiedException(DomainException):
    """Raised when verifying an email address that is already verified."""

    def __init__(self):
        super().__init__(
            message="Merchant email address is already verified",
            code="MERCHANT_EMAIL_ALREADY_VERIFIED",
        )


class VerificationTokenInvalidException(DomainException):
    """Raised when an email verification token is unknown."""

    def __init__(self):
        super().__init__(
            message="Invalid email verification token",
            code="VERIFICATION_TOKEN_INVALID",
        )


class VerificationTokenExpiredException(DomainException):
    """Raised when an email verification token is past its expiry."""

    def __init__(self):
        super().__init__(
            message="Email verification token has expired",
            code="VERIFICATION_TOKEN_EXPIRED",
        )


class ValidationFailedException(DomainException):
    """Raised when a business field fails a domain-level format check."""

    def __init__(self, field: str, message: str):
        super().__init__(message=message, code="VALIDATION_FAILED")
        self.field = field
