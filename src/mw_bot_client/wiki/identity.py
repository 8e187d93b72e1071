"""
Identity and Login

Performs the login handshake against the action API and keeps an advisory
copy of the current user's identity.

Login flow
----------
LoggedOut -> TokenRequested -> Authenticated

Older wikis answer the first attempt with ``NeedToken`` and a second-phase
token, giving:

LoggedOut -> TokenRequested -> NeedToken -> Authenticated

The cached identity is informational only and never gates any request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.errors import APIError, LoginError
from .session import Session

logger = logging.getLogger("mwbot.identity")


USERINFO_PROPS = "groups|rights|ratelimits|editcount|realname|email"


# ---------------------------------------------------------------------
# Identity Model
# ---------------------------------------------------------------------

class Identity(BaseModel):
    """
    The user a session is acting as, as reported by ``meta=userinfo``.
    """

    id: int = 0
    name: str = ""
    anonymous: bool = Field(False, alias="anon")
    groups: List[str] = Field(default_factory=list)
    rights: List[str] = Field(default_factory=list)
    edit_count: int = Field(0, alias="editcount")
    real_name: Optional[str] = Field(None, alias="realname")
    email: Optional[str] = None
    # formatversion=1 renders an empty mapping as [].
    ratelimits: Any = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @field_validator("anonymous", mode="before")
    @classmethod
    def _presence_means_true(cls, v: Any) -> bool:
        # formatversion=1 reports anonymity as an empty-string flag.
        if v is None or v is False:
            return False
        return True

    @classmethod
    def anonymous_user(cls) -> "Identity":
        return cls(anonymous=True)


# ---------------------------------------------------------------------
# Identity Manager
# ---------------------------------------------------------------------

class IdentityManager:
    def __init__(self, session: Session) -> None:
        self._session = session
        self._identity: Optional[Identity] = None

    @property
    def identity(self) -> Optional[Identity]:
        """Identity cached by the last login, logout or ``who_am_i`` call."""
        return self._identity

    async def who_am_i(self) -> Identity:
        """Query the wiki for the current user and cache the result."""
        body = await self._session.get(
            {
                "action": "query",
                "meta": "userinfo",
                "uiprop": USERINFO_PROPS,
            }
        )
        self._identity = Identity.model_validate(body.get("query", {}).get("userinfo", {}))
        return self._identity

    async def login(self, username: str, password: str) -> Identity:
        """
        Log in with bot password credentials.

        Returns
        -------
        Identity
            The identity reported by the wiki after logging in.

        Raises
        ------
        LoginError
            If the wiki does not report ``Success``.
        """
        if not username or not password:
            raise LoginError("username and password are required")

        body = await self._session.get({"action": "query", "meta": "tokens", "type": "login"})
        login_token = body.get("query", {}).get("tokens", {}).get("logintoken")

        result = await self._submit(username, password, login_token)

        if result.get("result") == "NeedToken":
            logger.info("Wiki requested a second login phase")
            result = await self._submit(username, password, result.get("token"))

        if result.get("result") != "Success":
            reason = result.get("reason") or result.get("result")
            logger.error("Login failed for %s: %s", username, reason or "unspecified")
            raise LoginError(str(reason) if reason else None)

        # Tokens issued before login belong to the anonymous session.
        self._session.tokens.invalidate()

        identity = await self.who_am_i()
        logger.info("Logged in as %s", identity.name or username)
        return identity

    def logout(self) -> None:
        """Drop cookies and the cached token. The wiki is not contacted."""
        self._session.logout()
        self._identity = Identity.anonymous_user()
        logger.info("Logged out")

    def forget(self) -> None:
        """Reset the cached identity without touching the session."""
        self._identity = Identity.anonymous_user()

    async def _submit(
        self,
        username: str,
        password: str,
        login_token: Optional[str],
    ) -> Dict[str, Any]:
        try:
            body = await self._session.post(
                {
                    "action": "login",
                    "lgname": username,
                    "lgpassword": password,
                    "lgtoken": login_token,
                }
            )
        except APIError as exc:
            raise LoginError(exc.info or exc.code) from exc

        result = body.get("login")
        if not isinstance(result, dict):
            raise LoginError()
        return result
