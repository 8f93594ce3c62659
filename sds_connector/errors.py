"""Exceptions raised by the SDS connector."""

from __future__ import annotations


class SdsError(Exception):
    """Base exception for SDS connector errors."""
    pass


class TransportError(SdsError):
    """Request could not be sent or the response body could not be read."""
    pass


class HttpStatusError(SdsError):
    """Response status was outside the 2xx range."""

    def __init__(self, status_code: int, reason: str = "", body: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        status_line = f"{status_code} {reason}".strip()
        super().__init__(f"Status: {status_line}\nBody: {body}")


class DecodeError(SdsError):
    """Response body (or a cell value) did not have the expected shape."""
    pass


class AuthError(SdsError):
    """No bearer token was available for a delegated-auth request."""
    pass
