"""Notification delivery exceptions."""

from typing import Optional

from .base import DomainException


class EmailDeliveryException(DomainException):
    """Raised when the email provider does not accept a message."""

    def __init__(
        self,
        message: str = "Email delivery failed",
        status_code: Optional[int] = None,
    ):
        super().__init__(message=message, code="EMAIL_DELIVERY_FAILED")
        self.status_code = status_code
