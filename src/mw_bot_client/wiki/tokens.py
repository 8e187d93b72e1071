"""
Anti-forgery Token Cache

Holds the last csrf token handed out by the wiki and acquires a new one
lazily: on first use, and again when the server rejects the cached value.

Acquisition is single-flight. Concurrent callers that find the cache empty
wait on one retrieval instead of each issuing their own; the action calls
themselves are never serialized.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from ..core.errors import TokenError
from .responses import first_page

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger("mwbot.tokens")


# The anonymous token. Doubles as the "no token cached" sentinel.
UNSET_TOKEN = "+\\"

# Title used for the prop=info token lookup on wikis without meta=tokens.
LEGACY_PROBE_TITLE = "F"


async def fetch_csrf_token(session: "Session") -> str:
    """
    Retrieve a fresh csrf token, falling back to the ``intoken=edit``
    pattern for wikis that predate ``meta=tokens``.

    Raises
    ------
    TokenError
        If neither pattern yields a token, or the wiki hands out the
        anonymous token (the session is not logged in).
    """
    body = await session.get({"action": "query", "meta": "tokens", "type": "csrf"})
    token = body.get("query", {}).get("tokens", {}).get("csrftoken")

    if not token:
        logger.warning("meta=tokens returned no csrf token; using intoken=edit")
        body = await session.get(
            {
                "action": "query",
                "prop": "info",
                "intoken": "edit",
                "titles": LEGACY_PROBE_TITLE,
            }
        )
        page = first_page(body.get("query", {}).get("pages"))
        token = page.get("edittoken") if page else None

    if not token:
        raise TokenError("Could not obtain a csrf token from the wiki.")
    if token == UNSET_TOKEN:
        raise TokenError("The wiki returned the anonymous token; log in first.")

    return token


class TokenCache:
    """
    Per-session csrf token holder.

    Only ``invalidate``, ``ensure`` and ``refresh`` change the cached value.
    """

    def __init__(self, session: "Session") -> None:
        self._session = session
        self._token = UNSET_TOKEN
        # Bumped on every invalidation so that a retrieval started against
        # a previous endpoint never repopulates the cache.
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def value(self) -> str:
        return self._token

    @property
    def is_set(self) -> bool:
        return self._token != UNSET_TOKEN

    def invalidate(self) -> None:
        self._token = UNSET_TOKEN
        self._generation += 1

    async def ensure(self) -> str:
        """Return the cached token, retrieving one first if none is cached."""
        if self.is_set:
            return self._token

        async with self._lock:
            if self.is_set:
                return self._token
            return await self._fetch()

    async def refresh(self, stale: Optional[str] = None) -> str:
        """
        Replace a token the server rejected.

        If another caller already replaced ``stale`` while this one waited,
        the newer token is returned without another round trip.
        """
        async with self._lock:
            if self.is_set and self._token != stale:
                return self._token
            self._token = UNSET_TOKEN
            return await self._fetch()

    async def _fetch(self) -> str:
        generation = self._generation
        token = await fetch_csrf_token(self._session)
        if generation == self._generation:
            self._token = token
        else:
            logger.info("Discarding csrf token fetched before a session reset")
        return token
