"""
Action Dispatch

Drives an ``ActionRequest`` through the token cache and the session.

Protocol
--------
1. If the action needs a token and none is cached, retrieve one first.
2. Send the action with the cached token attached.
3. On ``badtoken``, refresh the token once and replay the action once.
4. A second ``badtoken`` is terminal and raises ``TokenError``.

Every other error envelope propagates unchanged as ``APIError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..core.errors import APIError, TokenError
from .actions import ActionRequest
from .session import Session

logger = logging.getLogger("mwbot.dispatch")


BAD_TOKEN_CODE = "badtoken"


class ActionDispatcher:
    def __init__(self, session: Session) -> None:
        self._session = session

    async def dispatch(self, request: ActionRequest) -> Dict[str, Any]:
        """
        Perform ``request`` and return the decoded response.

        Raises
        ------
        APIError
            If the wiki rejects the action for any reason other than a stale
            token.

        TokenError
            If no token could be obtained, or the replay after a refresh is
            still rejected with ``badtoken``.
        """
        params = request.to_params()

        if not request.requires_token:
            return await self._session.request(request.method, params)

        tokens = self._session.tokens
        token = await tokens.ensure()

        try:
            return await self._session.request(request.method, params, token)
        except APIError as exc:
            if exc.code != BAD_TOKEN_CODE:
                raise

        logger.warning("Token rejected for action=%s; refreshing and replaying", request.action)
        token = await tokens.refresh(stale=token)

        try:
            return await self._session.request(request.method, params, token)
        except APIError as exc:
            if exc.code == BAD_TOKEN_CODE:
                raise TokenError(
                    f"Token still rejected after refresh for action '{request.action}'."
                ) from exc
            raise
