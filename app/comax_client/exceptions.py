"""
Exceptions raised by the Comax client
"""
from typing import Optional


class ComaxClientError(Exception):
    """Base error for every failure raised by the Comax client."""
    pass


class ComaxConfigError(ComaxClientError):
    """Missing or invalid startup configuration."""
    pass


class ComaxValidationError(ComaxClientError):
    """Caller parameters rejected before any request is sent."""
    pass


class ComaxTransportError(ComaxClientError):
    """
    The HTTP exchange failed: connection error, timeout or non-2xx status.

    Carries whatever body the server returned so it can be shown for
    diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        raw_response: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.raw_response = raw_response


class ComaxParseError(ComaxClientError):
    """The response could not be parsed or lacked the expected result node."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        raw_response: Optional[str] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.raw_response = raw_response


class ComaxVendorError(ComaxClientError):
    """Response parsed fine but Comax reported a negative outcome."""

    def __init__(self, message: str, *, raw_response: Optional[str] = None):
        super().__init__(message)
        self.raw_response = raw_response
