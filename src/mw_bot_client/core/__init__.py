from .errors import (
    APIError,
    ConfigError,
    LoginError,
    MediaWikiClientError,
    TokenError,
    TransportError,
)

__all__ = [
    "APIError",
    "ConfigError",
    "LoginError",
    "MediaWikiClientError",
    "TokenError",
    "TransportError",
]
