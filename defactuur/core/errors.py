"""Exception family raised by the DeFactuur client.

Every error is raised synchronously to the caller. Nothing is retried or
swallowed inside the library.
"""

from typing import Optional


class DeFactuurError(Exception):
    """Base exception for DeFactuur client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidValue(DeFactuurError):
    """Raised when a value type is built from a value outside its allowed set."""
    pass


class InvalidArgument(DeFactuurError):
    """Raised when the caller passes inconsistent input, before any request."""
    pass


class UnsupportedMethod(DeFactuurError):
    """Raised for an HTTP method the API is never called with."""
    pass


class ValidationError(DeFactuurError):
    """Raised on 422 responses or bodies carrying an ``errors`` mapping."""
    pass


class ApiError(DeFactuurError):
    """Raised for any other error response (status >= 400)."""
    pass


class InvalidResponse(DeFactuurError):
    """Raised when a JSON body was expected but could not be used."""
    pass


class AuthenticationFailed(DeFactuurError):
    """Raised when the API token could not be retrieved."""
    pass


class DeFactuurConnectionError(DeFactuurError):
    """Raised when the transport fails (connection refused, timeout)."""
    pass
