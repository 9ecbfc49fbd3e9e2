"""IAM client exceptions for error handling."""
from __future__ import annotations

from typing import Optional


class IAMError(Exception):
    """Base exception for all IAM client operations."""
    pass


class ConfigError(IAMError):
    """Client configuration is missing or invalid."""
    pass


class TransportError(IAMError):
    """Request could not be built or the HTTP round trip failed.

    Attributes:
        url: Target URL, when known
    """

    def __init__(self, message: str, url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(message)


class DecodeError(IAMError):
    """Response body is not a valid envelope, or its data cannot be re-encoded."""
    pass


class RemoteError(IAMError):
    """Envelope decoded but the service reported a failure.

    The message is the remote ``msg`` field, verbatim.

    Attributes:
        message: Error message from the envelope
        status: Envelope status string (anything but "ok")
    """

    def __init__(self, message: str, status: str = ""):
        self.message = message
        self.status = status
        super().__init__(message)


class TokenError(IAMError):
    """JWT access token could not be verified or decoded."""
    pass
