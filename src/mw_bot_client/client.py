"""
Client Facade

``MediaWikiBot`` composes the wiki half (session, token cache, dispatcher,
identity, queries) and, when configured, the discussion half. The two
halves are separate owned objects and share no mutable state.

Usage
-----
    async with MediaWikiBot(load_config("config.json")) as bot:
        await bot.prime()
        await bot.edit(EditOptions(title="Sandbox", content="Hello"))
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Union

import httpx

from .config import ClientConfig
from .core.errors import ConfigError, TokenError
from .discussions import DiscussionSession
from .discussions.session import ThreadId
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
    build_block,
    build_create_account,
    build_delete,
    build_edit,
    build_email,
    build_move,
    build_protect,
    build_purge,
    build_restore,
    build_unblock,
    build_undo,
)
from .wiki.dispatcher import ActionDispatcher
from .wiki.identity import Identity, IdentityManager
from .wiki.queries import WikiQueries
from .wiki.session import Session

logger = logging.getLogger("mwbot.client")


class MediaWikiBot:
    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        discussion_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        config : ClientConfig
            Loaded client configuration.

        transport, discussion_transport : Optional[httpx.AsyncBaseTransport]
            Optional low-level transport overrides for the wiki and the
            discussion service respectively.
        """
        if config is None:
            raise ConfigError()

        self._config = config

        self.session = Session(
            config.server,
            config.path,
            format_version=config.format_version,
            timeout=config.timeout,
            user_agent=config.user_agent,
            transport=transport,
        )
        self.dispatcher = ActionDispatcher(self.session)
        self.identity = IdentityManager(self.session)
        self.queries = WikiQueries(self.session)

        self.discussions: Optional[DiscussionSession] = None
        if config.has_discussion_credentials:
            self.discussions = DiscussionSession(
                config.account_username,
                config.account_password.get_secret_value(),
                config.wiki_id,
                services_url=config.discussion_services_url,
                timeout=config.timeout,
                user_agent=config.user_agent,
                transport=discussion_transport,
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "MediaWikiBot":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.session.aclose()
        if self.discussions is not None:
            await self.discussions.aclose()

    async def prime(self) -> Identity:
        """
        Establish the session before use.

        Logs in when bot credentials are configured, otherwise only caches
        the (anonymous) identity. Failures propagate to the caller.
        """
        if self._config.has_bot_credentials:
            return await self.login()
        return await self.identity.who_am_i()

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Identity:
        """Log in with the given credentials, or the configured bot password."""
        if username is None and password is None:
            if not self._config.has_bot_credentials:
                raise ConfigError("bot_username and bot_password are not configured")
            username = self._config.bot_username
            password = self._config.bot_password.get_secret_value()
        return await self.identity.login(username, password)

    def logout(self) -> None:
        self.identity.logout()

    async def who_am_i(self) -> Identity:
        return await self.identity.who_am_i()

    def set_endpoint(self, server: str, path: str = "") -> "MediaWikiBot":
        self.session.set_endpoint(server, path)
        self.identity.forget()
        return self

    async def get_token(self) -> str:
        return await self.session.tokens.ensure()

    # ------------------------------------------------------------------
    # Write actions
    # ------------------------------------------------------------------

    async def edit(self, options: EditOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_edit(options, "text"))

    async def prepend(self, options: EditOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_edit(options, "prependtext"))

    async def append(self, options: EditOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_edit(options, "appendtext"))

    async def undo(self, options: UndoOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_undo(options))

    async def delete(self, options: DeleteOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_delete(options))

    async def restore(self, options: RestoreOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_restore(options))

    async def protect(self, options: ProtectOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_protect(options))

    async def block(self, options: BlockOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_block(options))

    async def unblock(self, options: UnblockOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_unblock(options))

    async def move(self, options: MoveOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_move(options))

    async def email(self, options: EmailOptions) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_email(options))

    async def purge(self, titles: Union[str, int, Sequence[Union[str, int]]]) -> Dict[str, Any]:
        return await self.dispatcher.dispatch(build_purge(titles))

    async def create_account(self, username: str, password: str) -> Dict[str, Any]:
        """
        Create a new account using a freshly fetched account creation token.

        The csrf token cache is neither used nor modified.
        """
        request = build_create_account(username, password, f"{self.session.server}/")

        body = await self.session.get({"action": "query", "meta": "tokens", "type": "createaccount"})
        create_token = body.get("query", {}).get("tokens", {}).get("createaccounttoken")
        if not create_token:
            raise TokenError("Could not obtain an account creation token.")

        return await self.session.request(
            request.method,
            request.to_params(),
            create_token,
            token_param="createtoken",
        )

    # ------------------------------------------------------------------
    # Discussions
    # ------------------------------------------------------------------

    def _require_discussions(self) -> DiscussionSession:
        if self.discussions is None:
            raise ConfigError(
                "account_username, account_password and wiki_id are required for discussions"
            )
        return self.discussions

    async def create_post(self, title: str, content: str, category: ThreadId) -> Any:
        return await self._require_discussions().create_thread(title, content, category)

    async def delete_post(self, thread_id: ThreadId) -> Any:
        return await self._require_discussions().delete_thread(thread_id)

    async def undelete_post(self, thread_id: ThreadId) -> Any:
        return await self._require_discussions().undelete_thread(thread_id)

    async def lock_post(self, thread_id: ThreadId) -> Any:
        return await self._require_discussions().lock_thread(thread_id)

    async def unlock_post(self, thread_id: ThreadId) -> Any:
        return await self._require_discussions().unlock_thread(thread_id)
