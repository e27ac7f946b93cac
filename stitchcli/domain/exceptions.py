"""Exception types raised by the stitchcli client.

Every error the client raises on purpose derives from StitchClientError so
callers (and the CLI) can catch the whole family at once.
"""

from typing import Optional


class StitchClientError(Exception):
    """Base class for all client errors."""


class ConfigError(StitchClientError):
    """Raised at construction when required configuration is missing."""


class NoCacheConfigured(StitchClientError):
    """Raised when a cache operation is attempted without a cache directory."""

    def __init__(self, message: str = "no cache directory configured"):
        super().__init__(message)


class ParseError(StitchClientError):
    """Raised when a request URL is missing or malformed."""


class TransportError(StitchClientError):
    """Raised when an HTTP call fails or returns a non-success status."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        self.url = url
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class FileIOError(StitchClientError):
    """Raised when a cache file cannot be read or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class CacheCorruptedError(FileIOError):
    """Raised when a cache artifact exists but does not hold valid JSON."""


class PaginationError(StitchClientError):
    """Raised when a paginated query cannot be expanded."""
