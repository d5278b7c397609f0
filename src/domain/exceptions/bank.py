"""Bank account domain exceptions."""

from typing import Optional

from .base import DomainException


class BankAccountNotFoundException(DomainException):
    """Raised when verifying a merchant that has no bank account on file."""

    def __init__(self):
        super().__init__(
            message="Bank account details not found",
            code="BANK_ACCOUNT_NOT_FOUND",
        )


class BankAccountInvalidException(DomainException):
    """Raised when bank account details fail format validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message=message, code="BANK_ACCOUNT_INVALID")
        self.field = field


class BankAccountAlreadyVerifiedException(DomainException):
    """Raised when verifying a bank account that is already verified."""

    def __init__(self):
        super().__init__(
            message="Bank account is already verified",
            code="BANK_ACCOUNT_ALREADY_VERIFIED",
        )


class BankAccountVerificationFailedException(DomainException):
    """Raised when the bank verification provider rejects the account."""

    def __init__(self, error: Optional[str] = None):
        message = "Bank account verification failed"
        if error:
            message = f"{message}: {error}"
        super().__init__(message=message, code="BANK_ACCOUNT_VERIFICATION_FAILED")
        self.error = error
