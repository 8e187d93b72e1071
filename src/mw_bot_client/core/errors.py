"""
Client Error Taxonomy

This module defines the closed set of exceptions raised by the client.

Design Goals
------------
- One exception class per failure kind, each carrying its own payload
- Fixed message templates (no string-keyed lookup tables)
- Every error raised by the library derives from ``MediaWikiClientError``
  so callers can catch the whole family in one place
"""

from __future__ import annotations

from typing import Optional


class MediaWikiClientError(RuntimeError):
    """Base exception for all client failures."""


class ConfigError(MediaWikiClientError):
    """Raised when client configuration is missing or cannot be loaded."""

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        if detail is None:
            message = "No configuration was provided."
        else:
            message = f"Failed to load config: {detail}"
        super().__init__(message)


class TransportError(MediaWikiClientError):
    """
    Raised when an HTTP exchange fails below the API layer.

    Covers connection failures, non-success HTTP statuses and responses
    that carry no usable body.
    """

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Transport failure: {detail}")


class APIError(MediaWikiClientError):
    """Raised when the server answers with an error envelope."""

    def __init__(self, code: str, info: str = "") -> None:
        self.code = code
        self.info = info
        super().__init__(f"Error returned by API: {info or code}")


class TokenError(MediaWikiClientError):
    """
    Raised when no usable anti-forgery token can be obtained, or when the
    server still rejects the token after one refresh-and-replay.
    """


class LoginError(MediaWikiClientError):
    """Raised when the login handshake does not end in success."""

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason or "unspecified"
        super().__init__(f"Login was unsuccessful: {self.reason}")
