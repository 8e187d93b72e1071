"""
HTTP Transport

Thin wrapper around a single ``httpx.AsyncClient``. Each owner (the wiki
session and the discussion session) holds its own Transport, and therefore
its own cookie jar.

Responsibilities
----------------
- Perform one GET/POST/PUT/DELETE per call
- Keep cookies returned by the server for subsequent calls
- Turn connection failures, HTTP error statuses and empty bodies into
  ``TransportError``
- Decode JSON bodies, strictly (wiki API) or leniently (discussion service)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .core.errors import TransportError

logger = logging.getLogger("mwbot.transport")


class Transport:
    def __init__(
        self,
        *,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        timeout : float
            Per-request timeout in seconds.

        user_agent : Optional[str]
            Value of the User-Agent header sent with every request.

        transport : Optional[httpx.AsyncBaseTransport]
            Optional low-level transport override (e.g. ``httpx.MockTransport``
            in tests).
        """
        headers = {"User-Agent": user_agent} if user_agent else None
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=headers,
            transport=transport,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # Cookie store
    # ------------------------------------------------------------------

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def clear_cookies(self) -> None:
        self._client.cookies.clear()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """
        Perform one HTTP request and return the raw response.

        Raises
        ------
        TransportError
            If the request could not be completed.
        """
        logger.debug("%s %s", method, url)
        try:
            return await self._client.request(
                method,
                url,
                params=params,
                data=data,
                json=json_body,
            )
        except httpx.HTTPError as exc:
            logger.error("HTTP %s %s failed (%s)", method, url, type(exc).__name__)
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

    async def request_json(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        """
        Perform a request whose response must be a JSON object.

        Raises
        ------
        TransportError
            On HTTP error status, empty body, or a body that is not a JSON
            object.
        """
        resp = await self.send(method, url, **kwargs)

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"HTTP {resp.status_code} from {url}",
                status_code=resp.status_code,
            ) from exc

        if not resp.content:
            raise TransportError("Request did not return a body", status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as exc:
            raise TransportError(
                "Response body is not valid JSON",
                status_code=resp.status_code,
            ) from exc

        if not isinstance(body, dict) or not body:
            raise TransportError("Request did not return a body", status_code=resp.status_code)

        return body

    async def aclose(self) -> None:
        await self._client.aclose()


def decode_lenient(resp: httpx.Response) -> Any:
    """
    Return the parsed JSON body of ``resp``, or its raw text when the body
    is not JSON.
    """
    text = resp.text
    try:
        return json.loads(text)
    except ValueError:
        return text
