"""Tests for the skill webhook endpoint through a real aiohttp app."""

from datetime import datetime, timedelta, timezone

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer
from conftest import CERT_URL, make_cert_pem, sign_body, skill_body, stub_fetcher

from skillgate.config import Settings
from skillgate.main import create_app
from skillgate.skill.payload import SkillRequest
from skillgate.skill.webhooks import SkillApplication

APP_ID = "amzn1.ask.skill.test"


def _client(pem: bytes, application_id: str = APP_ID, **settings):
    seen: list[tuple[SkillRequest, bytes]] = []

    async def record(request: web.Request, skill_request: SkillRequest) -> web.Response:
        # The gate already consumed the body; it must still be readable here.
        seen.append((skill_request, await request.read()))
        return web.json_response({"type": skill_request.request_type})

    apps = {"/echo/skill": SkillApplication(handler=record, application_id=application_id)}
    app = create_app(Settings(**settings), apps, fetcher=stub_fetcher(pem))
    return TestClient(TestServer(app)), seen


def _headers(key, body: bytes) -> dict[str, str]:
    return {"SignatureCertChainUrl": CERT_URL, "Signature": sign_body(key, body)}


@pytest.mark.asyncio
async def test_authentic_request_reaches_handler(rsa_key, cert_pem):
    """An authentic request should reach the handler with its body still readable."""
    body = skill_body()
    client, seen = _client(cert_pem)
    async with client:
        resp = await client.post("/echo/skill", data=body, headers=_headers(rsa_key, body))
        assert resp.status == 200
        assert await resp.json() == {"type": "LaunchRequest"}
        skill_request, handler_body = seen[0]
    assert skill_request.application_id == APP_ID
    assert handler_body == body


@pytest.mark.asyncio
async def test_forged_request_gets_generic_401(rsa_key, other_rsa_key):
    """A forged request should get a plain 401 without the rejection reason."""
    body = skill_body()
    pem = make_cert_pem(other_rsa_key)
    client, seen = _client(pem)
    async with client:
        resp = await client.post("/echo/skill", data=body, headers=_headers(rsa_key, body))
        assert resp.status == 401
        assert await resp.text() == "Not Authorized"
        assert seen == []


@pytest.mark.asyncio
async def test_missing_headers_401(cert_pem):
    """A request without signing headers should get 401."""
    client, seen = _client(cert_pem)
    async with client:
        resp = await client.post("/echo/skill", data=skill_body())
        assert resp.status == 401


@pytest.mark.asyncio
async def test_unparsable_body_400(rsa_key, cert_pem):
    """A body that is not JSON should get 400."""
    body = b"{not json"
    client, seen = _client(cert_pem)
    async with client:
        resp = await client.post("/echo/skill", data=body, headers=_headers(rsa_key, body))
        assert resp.status == 400
        assert await resp.text() == "Bad Request"


@pytest.mark.asyncio
async def test_stale_request_400(rsa_key, cert_pem):
    """An authentic but stale request should get 400."""
    body = skill_body(datetime.now(timezone.utc) - timedelta(seconds=200))
    client, seen = _client(cert_pem)
    async with client:
        resp = await client.post("/echo/skill", data=body, headers=_headers(rsa_key, body))
        assert resp.status == 400


@pytest.mark.asyncio
async def test_application_id_mismatch_400(rsa_key, cert_pem):
    """A request for another skill should get 400 and never reach the handler."""
    body = skill_body(app_id="amzn1.ask.skill.someone-else")
    client, seen = _client(cert_pem)
    async with client:
        resp = await client.post("/echo/skill", data=body, headers=_headers(rsa_key, body))
        assert resp.status == 400
        assert seen == []


@pytest.mark.asyncio
async def test_dev_override_only_with_dev_bypass(cert_pem):
    """?_dev should bypass the gate only when dev_bypass is enabled."""
    body = skill_body()
    client, seen = _client(cert_pem)
    async with client:
        resp = await client.post("/echo/skill?_dev=1", data=body)
        assert resp.status == 401

    client, seen = _client(cert_pem, dev_bypass=True)
    async with client:
        resp = await client.post("/echo/skill?_dev=1", data=body)
        assert resp.status == 200


@pytest.mark.asyncio
async def test_default_app_and_health(rsa_key, cert_pem):
    """create_app() should serve /health and the default skill, then close the fetcher."""
    fetcher = stub_fetcher(cert_pem)
    app = create_app(Settings(skill_route="/echo/default"), fetcher=fetcher)
    body = skill_body()
    async with TestClient(TestServer(app)) as client:
        assert (await client.get("/health")).status == 200
        resp = await client.post("/echo/default", data=body, headers=_headers(rsa_key, body))
        assert resp.status == 200
        assert (await resp.json())["response"]["shouldEndSession"] is True
    fetcher.close.assert_awaited_once()
