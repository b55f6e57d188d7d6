"""
Error taxonomy shared by the engines, the orchestrator and the web layer.

The web layer maps each class to an HTTP status in web/backend/exceptions.py.
"""

from datetime import datetime
from typing import Optional


class EvidenceServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class AuthError(EvidenceServiceError):
    """Missing or invalid identity or webhook signature."""
    pass


class ForbiddenError(EvidenceServiceError):
    """Caller is identified but not allowed to see the resource."""
    pass


class ValidationError(EvidenceServiceError):
    """Missing required fields or malformed input."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(EvidenceServiceError):
    pass


class UpstreamError(EvidenceServiceError):
    """Third-party API failure, timeout or rate limit."""
    pass


class ComputationError(EvidenceServiceError):
    """An engine could not process one unit of evidence."""
    pass


class RateLimitError(EvidenceServiceError):
    def __init__(self, message: str, next_allowed_at: datetime):
        super().__init__(message)
        self.next_allowed_at = next_allowed_at


class InvalidTransitionError(EvidenceServiceError):
    """A ScrapeJob was asked to leave a terminal state or skip a state."""
    pass
