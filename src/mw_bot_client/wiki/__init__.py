from .dispatcher import ActionDispatcher
from .identity import Identity, IdentityManager
from .queries import WikiQueries
from .session import Session
from .tokens import UNSET_TOKEN, TokenCache

__all__ = [
    "ActionDispatcher",
    "Identity",
    "IdentityManager",
    "Session",
    "TokenCache",
    "UNSET_TOKEN",
    "WikiQueries",
]
