"""
Discussion thread payloads.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


THREAD_SOURCE = "DESKTOP_WEB_FEPO"
THREAD_FUNNEL = "TEXT"


class ThreadAttachments(BaseModel):
    contentImages: List[Any] = Field(default_factory=list)
    openGraphs: List[Any] = Field(default_factory=list)
    atMentions: List[Any] = Field(default_factory=list)


class NewThread(BaseModel):
    """Wire shape of ``POST /forums/{forumId}/threads``."""

    body: str
    jsonModel: str
    attachments: ThreadAttachments = Field(default_factory=ThreadAttachments)
    forumId: str
    siteId: str
    title: str
    source: str = THREAD_SOURCE
    funnel: str = THREAD_FUNNEL
    articleIds: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


def rich_text_document(content: str) -> Dict[str, Any]:
    """Wrap plain text in the service's rich-text document, one paragraph per line."""
    paragraphs = []
    for line in content.split("\n"):
        paragraph: Dict[str, Any] = {"type": "paragraph"}
        if line:
            paragraph["content"] = [{"type": "text", "text": line}]
        paragraphs.append(paragraph)
    return {"type": "doc", "content": paragraphs}


def build_thread_body(title: str, content: str, forum_id: str, site_id: str) -> Dict[str, Any]:
    thread = NewThread(
        body=content,
        jsonModel=json.dumps(rich_text_document(content)),
        forumId=forum_id,
        siteId=site_id,
        title=title,
    )
    return thread.model_dump()
