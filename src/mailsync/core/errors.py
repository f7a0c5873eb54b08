"""Custom exception types for mailsync.

Every error raised by this package derives from MailSyncError. Failures of a
mail mutation or a remote call derive from MailServiceError so callers can
catch one type and read a human-readable message from it.
"""

from typing import Any


class MailSyncError(Exception):
    """Base exception for all mailsync errors."""

    pass


class ConfigValidationError(MailSyncError):
    """Raised when config.yaml fails Pydantic validation.

    Includes specific field errors with actionable messages.
    """

    pass


class ConfigLoadError(MailSyncError):
    """Raised when config.yaml cannot be loaded (file not found, YAML parse error)."""

    pass


class MailServiceError(MailSyncError):
    """Raised when a call to the remote mail service fails.

    Attributes:
        message: Human-readable description of the failure
        email_id: Mail item the failed call targeted (if any)
        operation: Operation name (e.g., "set_read_status")
    """

    def __init__(
        self,
        message: str,
        email_id: str | None = None,
        operation: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.email_id = email_id
        self.operation = operation


class AuthenticationMissingError(MailServiceError):
    """Raised when no session token is available.

    The request is never issued when this is raised.
    """

    pass


class RemoteRejectedError(MailServiceError):
    """Raised when the service answers with ``success: false``.

    Attributes:
        status_code: HTTP status code of the response (if known)
        response: The decoded response body
    """

    def __init__(
        self,
        message: str,
        email_id: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
        response: dict[str, Any] | None = None,
    ):
        super().__init__(message, email_id=email_id, operation=operation)
        self.status_code = status_code
        self.response = response or {}


class TransportFailureError(MailServiceError):
    """Raised on network errors, timeouts, or responses with no structured body.

    Attributes:
        status_code: HTTP status code when a response was received, else None
    """

    def __init__(
        self,
        message: str,
        email_id: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, email_id=email_id, operation=operation)
        self.status_code = status_code
