"""
Error types for the Captivate library.
"""

from typing import Optional


class CaptivateError(Exception):
    """Base exception for Captivate-related errors."""

    kind = "error"

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class CaptivateTransportError(CaptivateError):
    """The request never produced an HTTP response (connection, timeout)."""

    kind = "transport"


class CaptivateHTTPError(CaptivateError):
    """Captivate answered with a non-2xx status."""

    kind = "http_status"

    def __init__(
        self,
        message: str,
        status: int,
        body: str = "",
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, cause)
        self.status = status
        self.body = body


class CaptivateAuthError(CaptivateHTTPError):
    """Authentication errors with Captivate API."""
    pass


class CaptivateFileError(CaptivateError):
    """Upload source could not be opened."""

    kind = "filesystem"


class CaptivateResponseError(CaptivateError):
    """Successful response with a body we cannot use."""

    kind = "response"
