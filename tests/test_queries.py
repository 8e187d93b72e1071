import httpx
import pytest

from mw_bot_client.core.errors import APIError
from mw_bot_client.wiki.queries import WikiQueries
from mw_bot_client.wiki.responses import first_page, titles_of
from mw_bot_client.wiki.session import Session

from conftest import WIKI_PATH, WIKI_SERVER, request_params


def canned(body):
    """Session whose backend always answers with ``body`` and records params."""
    seen = []

    def handler(request):
        seen.append(request_params(request))
        return httpx.Response(200, json=body)

    session = Session(WIKI_SERVER, WIKI_PATH, transport=httpx.MockTransport(handler))
    return WikiQueries(session), seen


def test_first_page_accepts_both_shapes():
    assert first_page([{"title": "A"}]) == {"title": "A"}
    assert first_page({"12": {"title": "B"}}) == {"title": "B"}
    assert first_page([]) is None
    assert first_page(None) is None


def test_titles_of():
    assert titles_of([{"title": "A"}, {"title": "B"}]) == ["A", "B"]
    assert titles_of(None) == []


@pytest.mark.asyncio
async def test_pages_in_category():
    members = [{"pageid": 1, "ns": 0, "title": "Alpha"}, {"pageid": 2, "ns": 0, "title": "Beta"}]
    queries, seen = canned({"query": {"categorymembers": members}})

    assert await queries.pages_in_category("Category:Greek") == members
    assert await queries.pages_in_category("Category:Greek", only_titles=True) == ["Alpha", "Beta"]
    assert seen[0]["list"] == "categorymembers"
    assert seen[0]["cmtitle"] == "Category:Greek"
    assert seen[0]["cmlimit"] == "max"


@pytest.mark.asyncio
async def test_article_categories_reads_first_page():
    queries, _ = canned(
        {"query": {"pages": [{"title": "Alpha", "categories": [{"ns": 14, "title": "Category:Greek"}]}]}}
    )

    assert await queries.article_categories("Alpha", only_titles=True) == ["Category:Greek"]


@pytest.mark.asyncio
async def test_user_contribs_omits_empty_filters():
    queries, seen = canned({"query": {"usercontribs": []}})

    await queries.user_contribs("Alice")

    assert seen[0]["ucuser"] == "Alice"
    assert "ucstart" not in seen[0]
    assert "ucnamespace" not in seen[0]


@pytest.mark.asyncio
async def test_who_are_joins_names():
    queries, seen = canned({"query": {"users": [{"name": "Alice"}, {"name": "Bob"}]}})

    users = await queries.who_are(["Alice", "Bob"])

    assert [u["name"] for u in users] == ["Alice", "Bob"]
    assert seen[0]["ususers"] == "Alice|Bob"


@pytest.mark.asyncio
async def test_external_links_formatversion_2():
    queries, _ = canned({"query": {"pages": [{"extlinks": [{"url": "https://a.example"}]}]}})

    assert await queries.external_links("Alpha") == ["https://a.example"]


@pytest.mark.asyncio
async def test_parse_returns_html():
    queries, seen = canned({"parse": {"title": "API", "text": "<p>Hi</p>"}})

    assert await queries.parse("Hi", "API") == "<p>Hi</p>"
    assert seen[0]["disablelimitreport"] == ""


@pytest.mark.asyncio
async def test_mw_version_is_extracted_from_generator():
    queries, seen = canned({"query": {"general": {"generator": "MediaWiki 1.39.3"}}})

    assert await queries.mw_version() == "1.39.3"
    assert seen[0]["siprop"] == "general"


@pytest.mark.asyncio
async def test_site_info_joins_props():
    queries, seen = canned({"query": {"general": {}, "statistics": {"pages": 10}}})

    await queries.site_info(["general", "statistics"])
    assert seen[0]["siprop"] == "general|statistics"
    assert await queries.site_stats() == {"pages": 10}


@pytest.mark.asyncio
async def test_mw_version_rejects_unknown_generator():
    queries, _ = canned({"query": {"general": {"generator": "SomethingElse"}}})

    with pytest.raises(APIError) as excinfo:
        await queries.mw_version()
    assert excinfo.value.code == "unknowngenerator"
