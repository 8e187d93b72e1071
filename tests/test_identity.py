import pytest

from mw_bot_client.core.errors import LoginError
from mw_bot_client.wiki.identity import Identity, IdentityManager


@pytest.fixture
def identity(session):
    return IdentityManager(session)


@pytest.mark.asyncio
async def test_login_success_caches_identity(identity, fake_wiki):
    user = await identity.login("Bot@tests", "secret")

    assert user.name == "Bot"
    assert user.anonymous is False
    assert "bot" in user.groups
    assert user.edit_count == 12
    assert identity.identity == user

    login_call = fake_wiki.calls_for(action="login")[0]
    assert login_call["lgname"] == "Bot@tests"
    assert login_call["lgtoken"] == "login-tok"
    assert fake_wiki.requests[-1].url.params["meta"] == "userinfo"


@pytest.mark.asyncio
async def test_login_then_logout_reflects_anonymous_user(identity):
    await identity.login("Bot@tests", "secret")
    assert (await identity.who_am_i()).anonymous is False

    identity.logout()
    assert identity.identity.anonymous is True

    after = await identity.who_am_i()
    assert after.anonymous is True
    assert after.id == 0


@pytest.mark.asyncio
async def test_logout_makes_no_request(identity, fake_wiki):
    identity.logout()
    assert fake_wiki.requests == []


@pytest.mark.asyncio
async def test_need_token_resubmits_with_second_token(identity, fake_wiki):
    fake_wiki.login_mode = "NeedToken"

    user = await identity.login("Bot@tests", "secret")

    attempts = fake_wiki.calls_for(action="login")
    assert [a["lgtoken"] for a in attempts] == ["login-tok", "second-tok"]
    assert user.name == "Bot"


@pytest.mark.asyncio
async def test_legacy_wiki_without_login_token(identity, fake_wiki):
    fake_wiki.login_mode = "legacy"

    await identity.login("Bot@tests", "secret")

    attempts = fake_wiki.calls_for(action="login")
    assert "lgtoken" not in attempts[0]
    assert attempts[1]["lgtoken"] == "second-tok"


@pytest.mark.asyncio
async def test_failed_login_carries_reason(identity, fake_wiki):
    fake_wiki.login_mode = "Failed"

    with pytest.raises(LoginError) as excinfo:
        await identity.login("Bot@tests", "wrong")

    assert excinfo.value.reason == "Incorrect username or password entered."
    assert identity.identity is None


@pytest.mark.asyncio
async def test_unrecognized_login_response_is_unspecified(identity, fake_wiki):
    fake_wiki.login_mode = "malformed"

    with pytest.raises(LoginError) as excinfo:
        await identity.login("Bot@tests", "secret")

    assert excinfo.value.reason == "unspecified"


@pytest.mark.asyncio
async def test_login_error_envelope_becomes_login_error(identity, fake_wiki):
    fake_wiki.errors["login"] = {"code": "readonly", "info": "The wiki is in read-only mode."}

    with pytest.raises(LoginError) as excinfo:
        await identity.login("Bot@tests", "secret")

    assert "read-only" in excinfo.value.reason


@pytest.mark.asyncio
async def test_login_requires_credentials(identity, fake_wiki):
    with pytest.raises(LoginError):
        await identity.login("", "")
    assert fake_wiki.requests == []


@pytest.mark.asyncio
async def test_login_discards_anonymous_token(identity, session):
    await session.tokens.ensure()
    await identity.login("Bot@tests", "secret")

    assert session.tokens.is_set is False


def test_identity_accepts_formatversion_1_anon_flag():
    assert Identity.model_validate({"id": 0, "name": "1.2.3.4", "anon": ""}).anonymous is True
    assert Identity.model_validate({"id": 3, "name": "Alice"}).anonymous is False
