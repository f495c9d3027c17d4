"""
Custom exception types for the Harvest API client.

Every failure of a request is raised as one of these types so callers
can tell a request that never left the process apart from one the
network dropped, one the server refused, and one whose body could not
be decoded.
"""

from __future__ import annotations

from typing import Optional


class HarvestError(Exception):
    """Base exception for all Harvest client errors."""

    def __init__(self, message: str, *, method: Optional[str] = None, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class RequestBuildError(HarvestError):
    """Raised when a request cannot be prepared before sending."""


class TransportError(HarvestError):
    """Raised when the HTTP call itself fails (connection, TLS, timeout)."""


class HTTPStatusError(HarvestError):
    """Raised when the response status is outside the accepted range."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message, method=method, url=url)
        self.status_code = status_code
        self.body = body


class DecodeError(HarvestError):
    """Raised when a response body cannot be decoded into its destination."""

    def __init__(
        self,
        message: str,
        *,
        body: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message, method=method, url=url)
        self.body = body
