"""
Domain exceptions for analytics app.

Raised by the analytics queries and converted to HTTP responses in views.
"""


class AnalyticsServiceError(Exception):
    """Base exception for all analytics service errors."""
    pass


class InvalidPeriodError(AnalyticsServiceError):
    """Raised when a month or date range is invalid."""
    pass
