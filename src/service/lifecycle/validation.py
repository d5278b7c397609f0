"""
Field Validation for merchant business and bank details.

These checks run inside the lifecycle engine, after request-shape
validation, and raise typed domain exceptions naming the offending field.
"""

import re
from typing import Iterable, List, Optional

from src.domain.exceptions import BankAccountInvalidException, ValidationFailedException

from .settings import LifecycleSettings, lifecycle_settings

ACCOUNT_NUMBER_PATTERN = re.compile(r"\d{4,17}")
ROUTING_NUMBER_PATTERN = re.compile(r"\d{9}")
SWIFT_CODE_PATTERN = re.compile(r"[A-Z]{6}[A-Z0-9]{2}([A-Z0-9]{3})?")
IBAN_PATTERN = re.compile(r"[A-Z]{2}\d{2}[A-Z0-9]{4,30}")


def validate_business_identifier(
    field: str,
    value: str,
    label: str,
    settings: LifecycleSettings = lifecycle_settings,
) -> None:
    """
    Check the length of a business registration number or tax ID.

    Raises:
        ValidationFailedException: If the value is too short or too long
    """
    min_len = settings.business_identifier_min_length
    max_len = settings.business_identifier_max_length
    if not min_len <= len(value) <= max_len:
        raise ValidationFailedException(
            field=field,
            message=f"Invalid {label} format: must be {min_len}-{max_len} characters",
        )


def validate_bank_account_details(
    account_number: str,
    routing_number: Optional[str] = None,
    swift_code: Optional[str] = None,
    iban: Optional[str] = None,
) -> None:
    """
    Check bank account fields against their expected formats.

    Routing number, SWIFT code and IBAN are optional; each is checked only
    when present.

    Raises:
        BankAccountInvalidException: On the first field that fails
    """
    if not ACCOUNT_NUMBER_PATTERN.fullmatch(account_number or ""):
        raise BankAccountInvalidException(
            "Invalid account number format: expected 4-17 digits",
            field="account_number",
        )

    if routing_number and not ROUTING_NUMBER_PATTERN.fullmatch(routing_number):
        raise BankAccountInvalidException(
            "Invalid routing number format: expected 9 digits",
            field="routing_number",
        )

    if swift_code and not SWIFT_CODE_PATTERN.fullmatch(swift_code):
        raise BankAccountInvalidException(
            "Invalid SWIFT code format",
            field="swift_code",
        )

    if iban and not IBAN_PATTERN.fullmatch(iban):
        raise BankAccountInvalidException(
            "Invalid IBAN format",
            field="iban",
        )


def missing_kyc_documents(
    submitted_types: Iterable[str],
    settings: LifecycleSettings = lifecycle_settings,
) -> List[str]:
    """Required document types absent from a submission, in configured order."""
    submitted = set(submitted_types)
    return [doc for doc in settings.required_kyc_documents if doc not in submitted]


def normalize_currencies(supported: Iterable[str], default: str) -> List[str]:
    """
    De-duplicate supported currencies and make sure the default is among them.

    Order is preserved; the default is appended when missing.
    """
    result: List[str] = []
    for code in supported:
        if code not in result:
            result.append(code)
    if default not in result:
        result.append(default)
    return result
