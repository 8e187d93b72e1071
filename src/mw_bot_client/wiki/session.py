"""
Wiki Session

Owns the mutable endpoint (server + script path) and the cookie store of
one client instance, and funnels every action API call through a single
Transport.

Design Goals
------------
- Exactly one cookie jar and one token cache per Session, never global
- Protocol-mandatory parameters (``format``, ``formatversion``) injected here
  and nowhere else
- Upstream error envelopes raised as typed ``APIError``
- Endpoint changes and logout reset all session-scoped state
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..core.errors import APIError
from ..transport import Transport
from .tokens import TokenCache

logger = logging.getLogger("mwbot.session")


# ---------------------------------------------------------------------
# Parameter Encoding
# ---------------------------------------------------------------------

def encode_params(params: Mapping[str, Any]) -> Dict[str, str]:
    """
    Convert a flat mapping of primitives to action API wire values.

    MediaWiki treats any present boolean parameter as true, so ``True`` is
    sent as an empty value while ``False`` and ``None`` are left out.

    Raises
    ------
    TypeError
        If a value is a list, tuple, set or mapping. Multi-value parameters
        must already be joined with ``|``.
    """
    encoded: Dict[str, str] = {}
    for key, value in params.items():
        if value is None or value is False:
            continue
        if value is True:
            encoded[key] = ""
        elif isinstance(value, (list, tuple, set, dict)):
            raise TypeError(
                f"Parameter '{key}' must be a primitive; join multiple values with '|'."
            )
        else:
            encoded[key] = str(value)
    return encoded


# ---------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------

class Session:
    """
    Cookie-backed session against one wiki's ``api.php``.
    """

    def __init__(
        self,
        server: str,
        path: str = "",
        *,
        format_version: Optional[int] = 2,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        server : str
            Scheme and host of the wiki, e.g. ``https://community.fandom.com``.

        path : str
            Script path under which ``api.php`` lives (may be empty).

        format_version : Optional[int]
            Value of ``formatversion`` sent with every call, or None to omit.

        transport : Optional[httpx.AsyncBaseTransport]
            Optional low-level transport override for testing.
        """
        self._server = server.rstrip("/")
        self._path = path.rstrip("/")
        self._format_version = format_version
        self._transport = Transport(
            timeout=timeout,
            user_agent=user_agent,
            transport=transport,
        )
        self.tokens = TokenCache(self)

    # ------------------------------------------------------------------
    # Endpoint
    # ------------------------------------------------------------------

    @property
    def server(self) -> str:
        return self._server

    @property
    def path(self) -> str:
        return self._path

    @property
    def endpoint(self) -> str:
        return f"{self._server}{self._path}/api.php"

    @property
    def format_version(self) -> Optional[int]:
        return self._format_version

    @property
    def cookies(self) -> httpx.Cookies:
        return self._transport.cookies

    def set_endpoint(self, server: str, path: str = "") -> "Session":
        """
        Re-point the session at another wiki.

        Cookies and the cached token belong to the old wiki and are dropped.
        """
        self._server = server.rstrip("/")
        self._path = path.rstrip("/")
        logger.info("Session endpoint changed to %s", self.endpoint)
        self.logout()
        return self

    def logout(self) -> None:
        """Clear all cookies and reset the cached token. No request is made."""
        self._transport.clear_cookies()
        self.tokens.invalidate()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def get(self, params: Mapping[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("GET", params, token)

    async def post(self, params: Mapping[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("POST", params, token)

    async def request(
        self,
        method: str,
        params: Mapping[str, Any],
        token: Optional[str] = None,
        token_param: str = "token",
    ) -> Dict[str, Any]:
        """
        Issue one action API call.

        Parameters
        ----------
        method : str
            ``GET`` (query string) or ``POST`` (form body).

        params : Mapping[str, Any]
            Flat action parameters.

        token : Optional[str]
            Token to attach, if the action requires one.

        token_param : str
            Parameter name under which the token is sent.

        Returns
        -------
        Dict[str, Any]
            The decoded JSON response.

        Raises
        ------
        APIError
            If the response carries an error envelope.

        TransportError
            If the request failed or returned no body.
        """
        payload = encode_params(params)
        payload["format"] = "json"
        if self._format_version is not None:
            payload["formatversion"] = str(self._format_version)
        if token is not None:
            payload[token_param] = token

        logger.debug("%s action=%s", method, payload.get("action"))

        if method == "POST":
            body = await self._transport.request_json("POST", self.endpoint, data=payload)
        else:
            body = await self._transport.request_json("GET", self.endpoint, params=payload)

        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise APIError(str(error.get("code", "unknown")), str(error.get("info", "")))
            raise APIError("unknown", str(error))

        return body

    async def aclose(self) -> None:
        await self._transport.aclose()
