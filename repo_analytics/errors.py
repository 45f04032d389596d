"""Error taxonomy shared by the analytics pipeline."""

from __future__ import annotations

from datetime import datetime


class AnalyticsError(RuntimeError):
    """Base class for every failure surfaced by the analytics engine."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.notified = False


class ValidationError(AnalyticsError):
    """Raised for a malformed repository identifier, before any request is sent."""


class NotFound(AnalyticsError):
    """GitHub answered 404."""


class RateLimited(AnalyticsError):
    """GitHub answered 403, which the REST API uses for rate limiting."""

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class ApiError(AnalyticsError):
    """Any other non-success response, or a transport failure."""

    def __init__(self, message: str, status_code: int | None = None, reason: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class PartialDataError(AnalyticsError):
    """A required fetch of the snapshot failed in an unclassified way."""


__all__ = [
    "AnalyticsError",
    "ValidationError",
    "NotFound",
    "RateLimited",
    "ApiError",
    "PartialDataError",
]
