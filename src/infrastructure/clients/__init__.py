"""External API client implementations."""

from .email_client import HttpEmailSender, MockEmailSender
from .bank_verification_client import (
    HttpBankVerificationClient,
    MockBankVerificationClient,
)

__all__ = [
    "HttpEmailSender",
    "MockEmailSender",
    "HttpBankVerificationClient",
    "MockBankVerificationClient",
]
