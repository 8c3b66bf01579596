"""
pioclient Exceptions
Error types raised by the event and engine clients.
"""

from typing import Optional


class PioClientError(Exception):
    """Base class for every error raised by pioclient."""


class InvalidArgumentError(PioClientError, ValueError):
    """A precondition was violated locally, before any network call."""


class TransportError(PioClientError):
    """
    The HTTP round trip failed.

    Raised for non-2xx responses (``status_code`` is set and ``body`` holds
    the raw response text) and for network or timeout failures
    (``status_code`` is None and ``body`` holds the exception text).
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(PioClientError):
    """The response body could not be decoded into the expected shape."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body


class ClientClosedError(PioClientError, RuntimeError):
    """The client was used after close()."""
