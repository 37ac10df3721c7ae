"""
Error taxonomy for the communication analytics feature.

Each error carries the HTTP status it maps to so the API layer can translate
it without a lookup table. Validation errors are raised before any store
round-trip; store failures surface as QueryFailed.
"""

from typing import Any

UNKNOWN_ERROR = "Unknown error"


class CommunicationError(Exception):
    """Base error for the feature."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, str]:
        payload = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidParameter(CommunicationError):
    """Malformed or out-of-range request input."""

    status_code = 400


class InvalidIdentifier(InvalidParameter):
    """User identifier is empty or contains characters outside [A-Za-z0-9_-]."""


class UserNotFound(CommunicationError):
    status_code = 404

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class ConversationNotFound(CommunicationError):
    status_code = 404

    def __init__(self, message: str = "Conversation not found") -> None:
        super().__init__(message)


class UpstreamUnavailable(CommunicationError):
    """Graph store health check failed before any query was attempted."""

    status_code = 503

    def __init__(self, message: str = "Database connection failed") -> None:
        super().__init__(message)


class QueryFailed(CommunicationError):
    """
    A store query raised, or returned a structurally unexpected result.

    `cause` is kept verbatim for logging. The public `details` is the cause's
    message when the cause is an exception with a message, otherwise
    "Unknown error".
    """

    status_code = 500

    def __init__(
        self,
        operation: str,
        cause: Any = None,
        message: str = "Database query failed",
    ) -> None:
        super().__init__(message, details=describe_cause(cause))
        self.operation = operation
        self.cause = cause

    def reported_as(self, message: str) -> "QueryFailed":
        """Return a copy with a public message naming the failed operation."""
        error = QueryFailed(self.operation, self.cause, message=message)
        error.details = self.details
        return error


def describe_cause(cause: Any) -> str:
    if isinstance(cause, BaseException) and str(cause):
        return str(cause)
    return UNKNOWN_ERROR
