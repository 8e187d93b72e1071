"""
Write Action Builders

Each public write operation is described by a typed options model and a
pure builder that maps it to an ``ActionRequest``: the action name, the
wire parameters, the HTTP method, and whether the cached csrf token must
be attached.

Builders never perform I/O. ``ActionDispatcher`` drives the resulting
requests through the token cache and the session.
"""

from __future__ import annotations

from typing import Dict, Literal, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field


CATEGORY_PREFIX = "Category:"

ParamValue = Union[str, int, float, bool, None]
ContentField = Literal["text", "prependtext", "appendtext"]


# ---------------------------------------------------------------------
# Request Model
# ---------------------------------------------------------------------

class ActionRequest(BaseModel):
    """One action API call, built per operation and discarded after dispatch."""

    action: str = Field(..., min_length=1)
    params: Dict[str, ParamValue] = Field(default_factory=dict)
    method: Literal["GET", "POST"] = "POST"
    requires_token: bool = True

    model_config = ConfigDict(frozen=True)

    def to_params(self) -> Dict[str, ParamValue]:
        return {"action": self.action, **self.params}


# ---------------------------------------------------------------------
# Options Models
# ---------------------------------------------------------------------

class _Options(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class EditOptions(_Options):
    title: str = Field(..., min_length=1)
    content: str
    summary: str = ""
    minor: bool = True
    bot: bool = True


class UndoOptions(_Options):
    title: str = Field(..., min_length=1)
    revision: Union[int, str]
    summary: str = ""


class DeleteOptions(_Options):
    title: str = Field(..., min_length=1)
    reason: str = ""


class RestoreOptions(_Options):
    title: str = Field(..., min_length=1)
    reason: str = ""


class ProtectOptions(_Options):
    title: str = Field(..., min_length=1)
    protections: Dict[str, str] = Field(
        ...,
        description="Mapping of action (edit, move, ...) to the group allowed to perform it.",
    )
    expiry: Optional[str] = None
    reason: str = ""
    cascade: bool = False


class BlockOptions(_Options):
    user: str = Field(..., min_length=1)
    expiry: str = "infinite"
    reason: str = ""
    autoblock: bool = True
    reblock: bool = False


class UnblockOptions(_Options):
    user: str = Field(..., min_length=1)
    reason: str = ""


class MoveOptions(_Options):
    from_title: str = Field(..., min_length=1, alias="from")
    to_title: str = Field(..., min_length=1, alias="to")
    reason: str = ""
    bot: bool = True


class EmailOptions(_Options):
    user: str = Field(..., min_length=1)
    subject: str
    content: str
    ccme: bool = True


# ---------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------

def build_edit(options: EditOptions, field: ContentField = "text") -> ActionRequest:
    """
    Build the generic edit request.

    ``edit``, ``prepend`` and ``append`` differ only in which content
    parameter carries ``options.content``.
    """
    return ActionRequest(
        action="edit",
        params={
            "title": options.title,
            field: options.content,
            "summary": options.summary,
            "minor": options.minor,
            "bot": options.bot,
        },
    )


def build_undo(options: UndoOptions) -> ActionRequest:
    return ActionRequest(
        action="edit",
        params={
            "title": options.title,
            "undo": str(options.revision),
            "summary": options.summary,
            "bot": True,
        },
    )


def build_delete(options: DeleteOptions) -> ActionRequest:
    return ActionRequest(
        action="delete",
        params={"title": options.title, "reason": options.reason},
    )


def build_restore(options: RestoreOptions) -> ActionRequest:
    return ActionRequest(
        action="undelete",
        params={"title": options.title, "reason": options.reason},
    )


def serialize_protections(protections: Mapping[str, str]) -> str:
    """Join ``{action: level}`` as ``action=level`` pairs separated by ``|``."""
    return "|".join(f"{key}={value}" for key, value in protections.items())


def build_protect(options: ProtectOptions) -> ActionRequest:
    return ActionRequest(
        action="protect",
        params={
            "title": options.title,
            "protections": serialize_protections(options.protections),
            "expiry": options.expiry,
            "reason": options.reason,
            "cascade": options.cascade,
        },
    )


def build_block(options: BlockOptions) -> ActionRequest:
    return ActionRequest(
        action="block",
        params={
            "user": options.user,
            "expiry": options.expiry,
            "reason": options.reason,
            "autoblock": options.autoblock,
            "reblock": options.reblock,
        },
    )


def build_unblock(options: UnblockOptions) -> ActionRequest:
    return ActionRequest(
        action="unblock",
        params={"user": options.user, "reason": options.reason},
    )


def build_move(options: MoveOptions) -> ActionRequest:
    return ActionRequest(
        action="move",
        params={
            "from": options.from_title,
            "to": options.to_title,
            "reason": options.reason,
            "bot": options.bot,
        },
    )


def build_email(options: EmailOptions) -> ActionRequest:
    return ActionRequest(
        action="emailuser",
        params={
            "target": options.user,
            "subject": options.subject,
            "text": options.content,
            "ccme": options.ccme,
        },
    )


def build_purge(titles: Union[str, int, Sequence[Union[str, int]]]) -> ActionRequest:
    """
    Build a purge request.

    A single string starting with ``Category:`` purges every member of that
    category. Anything else is treated as one or more page ids (if numeric)
    or page titles. Purge needs no token.
    """
    if isinstance(titles, str) and titles.startswith(CATEGORY_PREFIX):
        params: Dict[str, ParamValue] = {
            "generator": "categorymembers",
            "gcmtitle": titles,
        }
        return ActionRequest(action="purge", params=params, requires_token=False)

    if isinstance(titles, (str, int)):
        items = [titles]
    else:
        items = list(titles)

    if not items:
        raise ValueError("purge requires at least one title or page id.")

    first = items[0]
    if isinstance(first, int) and not isinstance(first, bool):
        params = {"pageids": "|".join(str(item) for item in items)}
    else:
        params = {"titles": "|".join(str(item) for item in items)}

    return ActionRequest(action="purge", params=params, requires_token=False)


def build_create_account(
    username: str,
    password: str,
    return_url: str,
) -> ActionRequest:
    """
    Build an account creation request.

    The ``createtoken`` is not the csrf token, so the request is marked as
    not requiring one; the caller attaches the account creation token.
    """
    if not username or not password:
        raise ValueError("create_account requires a username and a password.")

    return ActionRequest(
        action="createaccount",
        params={
            "createreturnurl": return_url,
            "username": username,
            "password": password,
            "retype": password,
        },
        requires_token=False,
    )
