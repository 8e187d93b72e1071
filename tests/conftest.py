"""
Shared fixtures: scriptable fakes of the action API and the discussion
service, served through ``httpx.MockTransport`` so every request is recorded.
"""

import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

import httpx
import pytest

from mw_bot_client.config import ClientConfig
from mw_bot_client.wiki.session import Session


WIKI_SERVER = "https://wiki.example.org"
WIKI_PATH = "/w"
SERVICES_URL = "https://services.example.org"
WIKI_ID = "1234"


def request_params(request: httpx.Request) -> Dict[str, str]:
    """Merged query-string and form parameters of a recorded request."""
    params = dict(request.url.params)
    if request.method == "POST" and request.content:
        params.update(parse_qsl(request.content.decode(), keep_blank_values=True))
    return params


class FakeWiki:
    """
    In-memory action API.

    Issues csrf tokens ``tok-1``, ``tok-2``... and rejects any token other
    than the latest one with ``badtoken``.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.issued = 0
        self.valid_token: Optional[str] = None
        self.always_badtoken = False
        self.legacy = False
        self.legacy_dict_pages = False
        self.anonymous_tokens = False
        self.login_mode = "Success"
        self.errors: Dict[str, Dict[str, str]] = {}
        self.empty_body = False
        self.status_code = 200

    # ------------------------------------------------------------------
    # Inspection helpers
    # ------------------------------------------------------------------

    @property
    def calls(self) -> List[Dict[str, str]]:
        return [request_params(r) for r in self.requests]

    def calls_for(self, **match: str) -> List[Dict[str, str]]:
        return [
            c for c in self.calls
            if all(c.get(k) == v for k, v in match.items())
        ]

    @property
    def csrf_fetches(self) -> int:
        return len(self.calls_for(action="query", meta="tokens", type="csrf"))

    def expire_tokens(self) -> None:
        self.valid_token = None

    # ------------------------------------------------------------------
    # Transport handler
    # ------------------------------------------------------------------

    async def handler(self, request: httpx.Request) -> httpx.Response:
        # Yield once so concurrent callers genuinely interleave.
        await asyncio.sleep(0)
        self.requests.append(request)

        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream failure")
        if self.empty_body:
            return httpx.Response(200, content=b"")

        params = request_params(request)
        action = params.get("action")

        if action in self.errors:
            return httpx.Response(200, json={"error": self.errors[action]})

        if action == "query":
            return self._query(params, request)
        if action == "login":
            return self._login(params)

        if action == "createaccount":
            if params.get("createtoken") != "create-tok":
                return self._error("badtoken", "Invalid CSRF token.")
            return httpx.Response(200, json={"createaccount": {"status": "PASS"}})

        if "token" in params:
            if self.always_badtoken or params["token"] != self.valid_token:
                return self._error("badtoken", "Invalid CSRF token.")

        return httpx.Response(200, json={action: {"result": "Success"}})

    def _error(self, code: str, info: str) -> httpx.Response:
        return httpx.Response(200, json={"error": {"code": code, "info": info}})

    def _query(self, params: Dict[str, str], request: httpx.Request) -> httpx.Response:
        if params.get("meta") == "tokens":
            kind = params.get("type")
            if kind == "csrf":
                if self.legacy:
                    return httpx.Response(
                        200,
                        json={"warnings": {"main": {"warnings": "Unrecognized value for parameter 'meta': tokens"}}},
                    )
                if self.anonymous_tokens:
                    return httpx.Response(200, json={"query": {"tokens": {"csrftoken": "+\\"}}})
                self.issued += 1
                self.valid_token = f"tok-{self.issued}"
                return httpx.Response(200, json={"query": {"tokens": {"csrftoken": self.valid_token}}})
            if kind == "login":
                if self.login_mode == "legacy":
                    return httpx.Response(200, json={"batchcomplete": True})
                return httpx.Response(200, json={"query": {"tokens": {"logintoken": "login-tok"}}})
            if kind == "createaccount":
                return httpx.Response(
                    200, json={"query": {"tokens": {"createaccounttoken": "create-tok"}}}
                )

        if params.get("intoken") == "edit":
            self.valid_token = "legacy-tok"
            page = {"pageid": 1, "title": "F", "edittoken": "legacy-tok"}
            pages: Any = {"1": page} if self.legacy_dict_pages else [page]
            return httpx.Response(200, json={"query": {"pages": pages}})

        if params.get("meta") == "userinfo":
            if "session=" in request.headers.get("cookie", ""):
                info = {"id": 7, "name": "Bot", "groups": ["bot", "*"], "rights": ["edit"], "editcount": 12}
            else:
                info = {"id": 0, "name": "127.0.0.1", "anon": True}
            return httpx.Response(200, json={"query": {"userinfo": info}})

        return httpx.Response(200, json={"batchcomplete": True, "query": {}})

    def _login(self, params: Dict[str, str]) -> httpx.Response:
        mode = self.login_mode
        if mode == "malformed":
            return httpx.Response(200, json={"unexpected": {}})
        if mode == "Failed":
            return httpx.Response(
                200,
                json={"login": {"result": "Failed", "reason": "Incorrect username or password entered."}},
            )
        if mode in ("NeedToken", "legacy") and params.get("lgtoken") != "second-tok":
            return httpx.Response(200, json={"login": {"result": "NeedToken", "token": "second-tok"}})
        return httpx.Response(
            200,
            json={"login": {"result": "Success", "lgusername": "Bot"}},
            headers=[("set-cookie", "session=abc123; Path=/")],
        )


class FakeDiscussionService:
    """In-memory discussion service recording (method, path) pairs."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.reject_auth = False
        self.responses: Dict[str, httpx.Response] = {}
        self.cookie_counter = 0

    @property
    def calls(self) -> List[tuple]:
        return [(r.method, r.url.path) for r in self.requests]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0)
        self.requests.append(request)
        path = request.url.path

        if path == "/auth/token":
            if self.reject_auth:
                return httpx.Response(
                    401,
                    json={"error": "invalid_grant", "error_description": "Bad credentials"},
                )
            self.cookie_counter += 1
            return httpx.Response(
                200,
                json={"user_id": "99", "access_token": "secret"},
                headers=[("set-cookie", f"access_token=cookie-{self.cookie_counter}; Path=/")],
            )

        key = f"{request.method} {path}"
        if key in self.responses:
            return self.responses[key]
        return httpx.Response(200, json={"id": "555", "status": "ok"})


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def fake_wiki():
    return FakeWiki()


@pytest.fixture
def fake_services():
    return FakeDiscussionService()


@pytest.fixture
def session(fake_wiki):
    return Session(WIKI_SERVER, WIKI_PATH, transport=httpx.MockTransport(fake_wiki.handler))


@pytest.fixture
def config():
    return ClientConfig(
        server=WIKI_SERVER,
        path=WIKI_PATH,
        bot_username="Bot@tests",
        bot_password="bot-secret",
        account_username="Bot",
        account_password="account-secret",
        wiki_id=WIKI_ID,
        discussion_services_url=SERVICES_URL,
    )
