"""
Read-only Query Wrappers

Shape request parameters for common ``action=query`` (and parse/expand)
calls and reshape the JSON that comes back. None of these touch the token
cache; they only read through the session.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence, Union

from ..core.errors import APIError
from .responses import first_page, titles_of
from .session import Session


API_LIMIT = "max"

USER_PROPS = "blockinfo|groups|implicitgroups|rights|editcount|registration|emailable|gender"
RECENT_CHANGES_PROPS = "title|timestamp|comment|user|flags|sizes"


class WikiQueries:
    def __init__(self, session: Session) -> None:
        self._session = session

    async def _query(self, **params: Any) -> Dict[str, Any]:
        body = await self._session.get({"action": "query", **params})
        return body.get("query", {})

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    async def pages_in_category(self, category: str, only_titles: bool = False) -> List[Any]:
        query = await self._query(list="categorymembers", cmtitle=category, cmlimit=API_LIMIT)
        members = query.get("categorymembers", [])
        return titles_of(members) if only_titles else members

    async def search(self, keyword: str, only_titles: bool = False) -> List[Any]:
        query = await self._query(
            list="search",
            srsearch=keyword,
            srprop="timestamp",
            srlimit=API_LIMIT,
        )
        results = query.get("search", [])
        return titles_of(results) if only_titles else results

    async def user_contribs(
        self,
        user: str,
        start: str = "",
        namespace: str = "",
        only_titles: bool = False,
    ) -> List[Any]:
        query = await self._query(
            list="usercontribs",
            ucuser=user,
            ucstart=start or None,
            ucnamespace=namespace or None,
            uclimit=API_LIMIT,
        )
        contribs = query.get("usercontribs", [])
        return titles_of(contribs) if only_titles else contribs

    async def images(self, start: str = "", only_titles: bool = False) -> List[Any]:
        query = await self._query(list="allimages", aifrom=start or None, ailimit=API_LIMIT)
        images = query.get("allimages", [])
        return titles_of(images) if only_titles else images

    async def image_usage(self, file_name: str, only_titles: bool = False) -> List[Any]:
        query = await self._query(list="imageusage", iutitle=file_name, iulimit=API_LIMIT)
        usage = query.get("imageusage", [])
        return titles_of(usage) if only_titles else usage

    async def recent_changes(self, start: str = "", only_titles: bool = False) -> List[Any]:
        query = await self._query(
            list="recentchanges",
            rcprop=RECENT_CHANGES_PROPS,
            rcstart=start or None,
            rclimit=API_LIMIT,
        )
        changes = query.get("recentchanges", [])
        return titles_of(changes) if only_titles else changes

    async def query_page(self, page: str, only_titles: bool = False) -> List[Any]:
        query = await self._query(list="querypage", qppage=page, qplimit=API_LIMIT)
        results = query.get("querypage", {}).get("results", [])
        return titles_of(results) if only_titles else results

    async def back_links(self, page: str, only_titles: bool = False) -> List[Any]:
        query = await self._query(
            list="backlinks",
            blnamespace=0,
            bltitle=page,
            bllimit=API_LIMIT,
        )
        links = query.get("backlinks", [])
        return titles_of(links) if only_titles else links

    # ------------------------------------------------------------------
    # Page properties
    # ------------------------------------------------------------------

    async def article_categories(self, title: str, only_titles: bool = False) -> List[Any]:
        query = await self._query(prop="categories", titles=title, cllimit=API_LIMIT)
        page = first_page(query.get("pages")) or {}
        categories = page.get("categories", [])
        return titles_of(categories) if only_titles else categories

    async def images_from_article(
        self,
        page: str,
        only_titles: bool = False,
        **options: Any,
    ) -> List[Any]:
        query = await self._query(prop="images", titles=page, **options)
        article = first_page(query.get("pages")) or {}
        images = article.get("images", [])
        return titles_of(images) if only_titles else images

    async def external_links(self, page: str) -> List[str]:
        query = await self._query(prop="extlinks", titles=page, ellimit=API_LIMIT)
        article = first_page(query.get("pages")) or {}
        links = article.get("extlinks", [])
        # formatversion=2 names the field "url"; formatversion=1 uses "*".
        key = "url" if links and "url" in links[0] else "*"
        return titles_of(links, key)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def who_is(self, username: str) -> List[Dict[str, Any]]:
        return await self.who_are([username])

    async def who_are(self, usernames: Sequence[str]) -> List[Dict[str, Any]]:
        query = await self._query(
            list="users",
            ususers="|".join(usernames),
            usprop=USER_PROPS,
        )
        return query.get("users", [])

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    async def expand_templates(self, text: str, title: str) -> str:
        body = await self._session.get(
            {
                "action": "expandtemplates",
                "text": text,
                "title": title,
                "prop": "wikitext",
            }
        )
        return body.get("expandtemplates", {}).get("wikitext", "")

    async def parse(self, text: str, title: str) -> str:
        body = await self._session.get(
            {
                "action": "parse",
                "text": text,
                "title": title,
                "contentmodel": "wikitext",
                "disablelimitreport": True,
            }
        )
        parsed = body.get("parse", {}).get("text", "")
        # formatversion=1 wraps the HTML as {"*": html}.
        if isinstance(parsed, dict):
            return parsed.get("*", "")
        return parsed

    # ------------------------------------------------------------------
    # Site
    # ------------------------------------------------------------------

    async def site_info(self, props: Union[str, Sequence[str]]) -> Dict[str, Any]:
        if isinstance(props, str):
            props = [props]
        return await self._query(meta="siteinfo", siprop="|".join(props))

    async def site_stats(self) -> Dict[str, Any]:
        info = await self.site_info("statistics")
        return info.get("statistics", {})

    async def mw_version(self) -> str:
        """Return the MediaWiki version, e.g. ``1.39.3``."""
        info = await self.site_info("general")
        generator = info.get("general", {}).get("generator", "")
        match = re.search(r"[\d.]+", generator)
        if not match:
            raise APIError("unknowngenerator", f"Unrecognized generator string: {generator!r}")
        return match.group(0)
