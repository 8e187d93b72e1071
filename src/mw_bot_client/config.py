"""
Client Configuration

Settings for the wiki session and the discussion-service session, loaded
from the environment (``MW_`` prefix, optional ``.env`` file), from a plain
mapping, or from a JSON file on disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pydantic import SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import ConfigError


DEFAULT_SERVICES_URL = "https://services.fandom.com"


class ClientConfig(BaseSettings):
    server: str
    path: str = ""

    # Bot password credentials (Special:BotPasswords)
    bot_username: Optional[str] = None
    bot_password: Optional[SecretStr] = None

    # Full account credentials, only used by the discussion service
    account_username: Optional[str] = None
    account_password: Optional[SecretStr] = None
    wiki_id: Optional[str] = None
    discussion_services_url: str = DEFAULT_SERVICES_URL

    timeout: float = 30.0
    user_agent: str = "mw-bot-client/1.0"
    format_version: Optional[int] = 2

    model_config = SettingsConfigDict(
        env_prefix="MW_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("server", "discussion_services_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must be a non-empty URL")
        return v.rstrip("/")

    @field_validator("wiki_id", mode="before")
    @classmethod
    def _coerce_wiki_id(cls, v: Any) -> Any:
        # Wiki ids are numeric on the service side but opaque to us.
        if isinstance(v, int):
            return str(v)
        return v

    @property
    def has_bot_credentials(self) -> bool:
        return bool(self.bot_username and self.bot_password)

    @property
    def has_discussion_credentials(self) -> bool:
        return bool(self.account_username and self.account_password and self.wiki_id)


# Older config files spell these keys in camelCase.
_CAMEL_CASE_KEYS = {
    "botUsername": "bot_username",
    "botPassword": "bot_password",
    "accountUsername": "account_username",
    "accountPassword": "account_password",
    "wikiId": "wiki_id",
}


ConfigSource = Union[None, str, Path, Mapping[str, Any]]


def load_config(source: ConfigSource = None) -> ClientConfig:
    """
    Build a ``ClientConfig`` from the given source.

    Parameters
    ----------
    source : None | str | Path | Mapping
        ``None`` reads the environment, a mapping is validated as-is and a
        path names a JSON file holding one object.

    Raises
    ------
    ConfigError
        If the source is empty, unreadable, or fails validation.
    """
    if source is None:
        try:
            return ClientConfig()
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    if not source:
        raise ConfigError()

    if isinstance(source, (str, Path)):
        try:
            data = json.loads(Path(source).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{source} must contain a JSON object")
    else:
        data = dict(source)

    data = {_CAMEL_CASE_KEYS.get(key, key): value for key, value in data.items()}

    try:
        return ClientConfig(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
