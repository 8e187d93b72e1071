"""
Discussion Service Session

A second, independent authentication domain used only for thread
lifecycle operations (create, delete, undelete, lock, unlock).

Design choices
--------------
- Own Transport and cookie jar; nothing is shared with the wiki Session.
- A fresh cookie exchange precedes every operation. Discussion cookies are
  never reused across calls.
- Responses are not enveloped like the action API: bodies are parsed as
  JSON when possible and passed through as raw text otherwise. A parsed
  body carrying an ``error`` field raises ``APIError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import httpx

from ..core.errors import APIError, LoginError, TransportError
from ..transport import Transport, decode_lenient
from .models import build_thread_body

logger = logging.getLogger("mwbot.discussions")


ThreadId = Union[int, str]


class DiscussionSession:
    def __init__(
        self,
        username: str,
        password: str,
        wiki_id: str,
        *,
        services_url: str = "https://services.fandom.com",
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        username, password : str
            Full account credentials (bot passwords are not accepted by the
            discussion service).

        wiki_id : str
            The wiki's numeric site identifier.

        services_url : str
            Base URL of the service host.
        """
        self._username = username
        self._password = password
        self._wiki_id = str(wiki_id)
        self._services_url = services_url.rstrip("/")
        self._transport = Transport(
            timeout=timeout,
            user_agent=user_agent,
            transport=transport,
        )

    @property
    def wiki_id(self) -> str:
        return self._wiki_id

    @property
    def auth_url(self) -> str:
        return f"{self._services_url}/auth/token"

    @property
    def discussion_base(self) -> str:
        return f"{self._services_url}/discussion/{self._wiki_id}"

    @property
    def cookies(self) -> httpx.Cookies:
        return self._transport.cookies

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def refresh_cookies(self) -> Dict[str, str]:
        """
        Exchange the account credentials for a new discussion cookie set.

        Raises
        ------
        LoginError
            If the service rejects the credentials.
        """
        self._transport.clear_cookies()
        resp = await self._transport.send(
            "POST",
            self.auth_url,
            data={"username": self._username, "password": self._password},
        )
        body = decode_lenient(resp)

        if resp.is_error or (isinstance(body, dict) and body.get("error")):
            reason = None
            if isinstance(body, dict):
                reason = body.get("error_description") or body.get("error")
            logger.error(
                "Discussion authentication failed for %s (HTTP %s)",
                self._username,
                resp.status_code,
            )
            raise LoginError(str(reason) if reason else None)

        return dict(self._transport.cookies)

    # ------------------------------------------------------------------
    # Thread lifecycle
    # ------------------------------------------------------------------

    async def create_thread(self, title: str, content: str, forum_id: ThreadId) -> Any:
        """Open a new thread in the given forum (category)."""
        body = build_thread_body(
            title=title,
            content=content,
            forum_id=str(forum_id),
            site_id=self._wiki_id,
        )
        return await self._call(
            "POST",
            f"{self.discussion_base}/forums/{forum_id}/threads",
            json_body=body,
        )

    async def delete_thread(self, thread_id: ThreadId) -> Any:
        return await self._call("PUT", f"{self.discussion_base}/threads/{thread_id}/delete")

    async def undelete_thread(self, thread_id: ThreadId) -> Any:
        return await self._call("PUT", f"{self.discussion_base}/threads/{thread_id}/undelete")

    async def lock_thread(self, thread_id: ThreadId) -> Any:
        return await self._call("PUT", f"{self.discussion_base}/threads/{thread_id}/lock")

    async def unlock_thread(self, thread_id: ThreadId) -> Any:
        return await self._call("DELETE", f"{self.discussion_base}/threads/{thread_id}/lock")

    async def _call(self, method: str, url: str, json_body: Any = None) -> Any:
        await self.refresh_cookies()

        resp = await self._transport.send(method, url, json_body=json_body)
        body = decode_lenient(resp)

        if isinstance(body, dict) and body.get("error"):
            info = body.get("title") or body.get("message") or body.get("detail") or ""
            logger.error("Discussion %s %s failed: %s", method, url, body.get("error"))
            raise APIError(str(body["error"]), str(info))

        if resp.is_error:
            raise TransportError(
                f"HTTP {resp.status_code} from {url}",
                status_code=resp.status_code,
            )

        return body

    async def aclose(self) -> None:
        await self._transport.aclose()
