# test/test_api/test_advisor_api.py
import json

import httpx
import pytest

from medmentor.api.advisor import CORS_HEADERS
from medmentor.db.seed import seed_interactions
from medmentor.runtime.nodes.reply_extract import FALLBACK_TEXT
from medmentor.services.errors import GatewayError, QuotaExhausted, RateLimited, Unreachable
from medmentor.services.gateway_client import ModelGateway
from fakes import FakeGateway, content_reply, tool_call_reply

URL = "/functions/v1/drug-advisor"


def _assert_cors(res):
    assert res.headers["access-control-allow-origin"] == "*"
    assert res.headers["access-control-allow-headers"] == CORS_HEADERS["Access-Control-Allow-Headers"]


@pytest.mark.asyncio
async def test_preflight_returns_204_with_cors(client):
    res = await client.options(URL)

    assert res.status_code == 204
    _assert_cors(res)


@pytest.mark.asyncio
async def test_success_returns_structured_reply_and_uses_evidence(app, client):
    await seed_interactions(app.state.session_factory)
    args = {
        "response": "Warfarin with aspirin raises bleeding risk. This is not medical advice.",
        "confidence_level": "high",
        "evidence_sources": [{"source": "FDA Warfarin label", "snippet": "bleeding"}],
    }
    gateway = FakeGateway(reply=tool_call_reply(json.dumps(args)))
    app.state.gateway = gateway

    res = await client.post(URL, json={"messages": [{"role": "user", "content": "warfarin"}]})

    assert res.status_code == 200
    _assert_cors(res)
    assert res.json() == args

    system_prompt = gateway.calls[0][0]["content"]
    assert "1. Warfarin + Aspirin:" in system_prompt
    assert "- Evidence: FDA Warfarin label" in system_prompt


@pytest.mark.asyncio
async def test_fallback_reply_is_still_200(app, client):
    app.state.gateway = FakeGateway(reply=content_reply(None))

    res = await client.post(URL, json={"messages": [{"role": "user", "content": "xyz123"}]})

    assert res.status_code == 200
    assert res.json() == {
        "response": "Unable to generate response",
        "confidence_level": "low",
        "evidence_sources": [],
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, status, fragment",
    [
        (RateLimited(), 429, "Rate limit"),
        (QuotaExhausted(), 402, "credits"),
        (GatewayError(503, "down"), 500, "AI API error: 503"),
        (Unreachable("AI gateway unreachable: refused"), 500, "unreachable"),
    ],
)
async def test_gateway_errors_translate_to_status(app, client, error, status, fragment):
    app.state.gateway = FakeGateway(error=error)

    res = await client.post(URL, json={"messages": [{"role": "user", "content": "warfarin"}]})

    assert res.status_code == status
    _assert_cors(res)
    assert fragment in res.json()["error"]


@pytest.mark.asyncio
async def test_missing_api_key_is_500(app, client):
    app.state.settings = app.state.settings.model_copy(update={"AI_GATEWAY_API_KEY": None})
    app.state.gateway = None

    res = await client.post(URL, json={"messages": [{"role": "user", "content": "warfarin"}]})

    assert res.status_code == 500
    _assert_cors(res)
    assert "not configured" in res.json()["error"]


@pytest.mark.asyncio
async def test_malformed_body_is_500_with_error(app, client):
    app.state.gateway = FakeGateway(reply=content_reply("unused"))

    res = await client.post(URL, json={"msgs": []})

    assert res.status_code == 500
    _assert_cors(res)
    assert "error" in res.json()
    assert app.state.gateway.calls == []


@pytest.mark.asyncio
async def test_healthz(client):
    res = await client.get("/healthz")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_non_json_gateway_reply_degrades_to_low_confidence(app, client):
    app.state.gateway = ModelGateway(
        app.state.settings,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>")),
    )

    res = await client.post(URL, json={"messages": [{"role": "user", "content": "warfarin"}]})
    await app.state.gateway.aclose()

    assert res.status_code == 200
    _assert_cors(res)
    assert res.json() == {
        "response": FALLBACK_TEXT,
        "confidence_level": "low",
        "evidence_sources": [],
    }


def test_error_body_is_documented_on_the_route(app):
    responses = app.openapi()["paths"]["/functions/v1/drug-advisor"]["post"]["responses"]

    for status in ("429", "402", "500"):
        schema = responses[status]["content"]["application/json"]["schema"]
        assert schema["$ref"].endswith("/ErrorOut")
