"""
Custom exceptions for cloudwatch-query-core.
"""

from typing import Optional


class CloudWatchError(Exception):
    """Base exception for all CloudWatch datasource errors."""
    pass


class CloudWatchConnectionError(CloudWatchError):
    """Raised when connection to the query API fails."""
    pass


class CloudWatchAuthError(CloudWatchError):
    """Raised when authentication to the query API fails."""
    pass


class CloudWatchQueryError(CloudWatchError):
    """
    Raised when a query request fails or the backend returns an error.

    Attributes:
        status_code: HTTP status code of the failed response, if any.
        error: Error string reported by the backend, if any.
        notification: Notification kind the caller may surface for this
            failure, or None when no special notification applies.
    """

    notification: Optional[str] = None

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error


class CloudWatchValidationError(CloudWatchQueryError):
    """Raised when the backend rejects a query with a ValidationError."""

    notification = "ds-request-error"


class CloudWatchThrottlingError(CloudWatchQueryError):
    """Raised when the backend reports request throttling."""

    notification = "throttling"


class InvalidStatisticError(CloudWatchError, ValueError):
    """Raised when an extended statistic (pNN.NN) is malformed."""
    pass


class InvalidPeriodError(CloudWatchError, ValueError):
    """Raised when an explicit period is not a valid duration expression."""
    pass
