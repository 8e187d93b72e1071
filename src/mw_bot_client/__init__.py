"""
Async client for the MediaWiki action API and the Fandom discussion service.
"""

from .client import MediaWikiBot
from .config import ClientConfig, load_config
from .core.errors import (
    APIError,
    ConfigError,
    LoginError,
    MediaWikiClientError,
    TokenError,
    TransportError,
)
from .wiki.actions import (
    BlockOptions,
    DeleteOptions,
    EditOptions,
    EmailOptions,
    MoveOptions,
    ProtectOptions,
    RestoreOptions,
    UnblockOptions,
    UndoOptions,
)
from .wiki.identity import Identity

__version__ = "1.0.0"

__all__ = [
    "APIError",
    "BlockOptions",
    "ClientConfig",
    "ConfigError",
    "DeleteOptions",
    "EditOptions",
    "EmailOptions",
    "Identity",
    "LoginError",
    "MediaWikiBot",
    "MediaWikiClientError",
    "MoveOptions",
    "ProtectOptions",
    "RestoreOptions",
    "TokenError",
    "TransportError",
    "UnblockOptions",
    "UndoOptions",
    "load_config",
]
