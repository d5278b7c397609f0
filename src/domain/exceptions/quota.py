"""API quota domain exceptions."""

from datetime import datetime
from typing import Optional

from .base import DomainException


class ApiQuotaExceededException(DomainException):
    """Raised when a merchant has used up its API quota for the window."""

    def __init__(self, limit: int, reset_at: Optional[datetime] = None):
        message = f"API quota of {limit} requests exceeded"
        if reset_at:
            message = f"{message}; resets at {reset_at.isoformat()}Z"
        super().__init__(message=message, code="API_QUOTA_EXCEEDED")
        self.limit = limit
        self.reset_at = reset_at
