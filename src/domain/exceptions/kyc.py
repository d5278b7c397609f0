"""KYC workflow domain exceptions."""

from typing import Sequence

from .base import DomainException


class KycNotStartedException(DomainException):
    """Raised when a KYC action needs a submission that was never made."""

    def __init__(self):
        super().__init__(
            message="KYC verification has not been started",
            code="KYC_NOT_STARTED",
        )


class KycAlreadySubmittedException(DomainException):
    """Raised when documents are submitted while a review is in progress."""

    def __init__(self):
        super().__init__(
            message="KYC documents are already under review",
            code="KYC_ALREADY_SUBMITTED",
        )


class KycAlreadyApprovedException(DomainException):
    """Raised when documents are submitted after KYC was approved."""

    def __init__(self):
        super().__init__(
            message="KYC verification is already approved",
            code="KYC_ALREADY_APPROVED",
        )


class KycDocumentRequiredException(DomainException):
    """Raised when a submission lacks one or more required document types."""

    def __init__(self, missing: Sequence[str]):
        super().__init__(
            message=f"Required KYC documents missing: {', '.join(missing)}",
            code="KYC_DOCUMENT_REQUIRED",
        )
        self.missing = list(missing)


class KycInvalidStatusException(DomainException):
    """Raised when a KYC decision is not allowed from the current KYC status."""

    def __init__(self, current_status: str, requested: str):
        super().__init__(
            message=f"Cannot apply KYC {requested} while KYC status is {current_status}",
            code="KYC_INVALID_STATUS",
        )
        self.current_status = current_status
        self.requested = requested
