"""
Domain Interfaces (Ports)
"""

from .repositories import (
    MerchantRepository,
    AdminUserRepository,
    AdminSessionRepository,
    AdminLoginAttemptRepository,
)
from .clients import EmailSender, BankVerificationProvider, BankVerificationResult

__all__ = [
    "MerchantRepository",
    "AdminUserRepository",
    "AdminSessionRepository",
    "AdminLoginAttemptRepository",
    "EmailSender",
    "BankVerificationProvider",
    "BankVerificationResult",
]
