"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .merchant import (
    MerchantNotFoundException,
    MerchantAlreadyExistsException,
    MerchantSuspendedException,
    MerchantClosedException,
    MerchantInactiveException,
    MerchantInvalidStatusException,
    MerchantEmailNotVerifiedException,
    MerchantEmailAlreadyVerifiedException,
    VerificationTokenInvalidException,
    VerificationTokenExpiredException,
    ValidationFailedException,
)
from .kyc import (
    KycNotStartedException,
    KycAlreadySubmittedException,
    KycAlreadyApprovedException,
    KycDocumentRequiredException,
    KycInvalidStatusException,
)
from .bank import (
    BankAccountNotFoundException,
    BankAccountInvalidException,
    BankAccountAlreadyVerifiedException,
    BankAccountVerificationFailedException,
)
from .quota import ApiQuotaExceededException
from .notification import EmailDeliveryException
from .auth import (
    UnauthorizedException,
    ForbiddenException,
    AccountLockedException,
)

__all__ = [
    "DomainException",
    "MerchantNotFoundException",
    "MerchantAlreadyExistsException",
    "MerchantSuspendedException",
    "MerchantClosedException",
    "MerchantInactiveException",
    "MerchantInvalidStatusException",
    "MerchantEmailNotVerifiedException",
    "MerchantEmailAlreadyVerifiedException",
    "VerificationTokenInvalidException",
    "VerificationTokenExpiredException",
    "ValidationFailedException",
    "KycNotStartedException",
    "KycAlreadySubmittedException",
    "KycAlreadyApprovedException",
    "KycDocumentRequiredException",
    "KycInvalidStatusException",
    "BankAccountNotFoundException",
    "BankAccountInvalidException",
    "BankAccountAlreadyVerifiedException",
    "BankAccountVerificationFailedException",
    "ApiQuotaExceededException",
    "EmailDeliveryException",
    "UnauthorizedException",
    "ForbiddenException",
    "AccountLockedException",
]
