# test/test_nodes/test_advisor.py
import httpx
import pytest
from typing import Any, Dict

from pocketflow import AsyncFlow as Flow

import medmentor.runtime.nodes.advisor as advisor_node
from medmentor.core.config import Settings
from medmentor.runtime.nodes.advisor import AdvisorChatNode
from medmentor.services.errors import GatewayError, RateLimited
from medmentor.services.gateway_client import ModelGateway
from fakes import FakeGateway, content_reply


@pytest.mark.asyncio
async def test_advisor_sends_assembled_messages_and_stores_raw_reply():
    gateway = FakeGateway(reply=content_reply("hello"))
    messages = [{"role": "system", "content": "SYS"}, {"role": "user", "content": "q"}]
    shared: Dict[str, Any] = {"gateway": gateway, "model_messages": messages}

    node = AdvisorChatNode()
    node.successors = {}
    action = await Flow(start=node).run_async(shared)

    assert action == "ok"
    assert gateway.calls == [messages]
    assert shared["gateway_reply"] == content_reply("hello")


@pytest.mark.asyncio
async def test_advisor_propagates_gateway_errors_without_retry():
    gateway = FakeGateway(error=RateLimited())
    shared: Dict[str, Any] = {"gateway": gateway, "model_messages": [{"role": "user", "content": "q"}]}

    node = AdvisorChatNode()
    node.successors = {}

    with pytest.raises(RateLimited):
        await Flow(start=node).run_async(shared)

    assert len(gateway.calls) == 1
    assert "gateway_reply" not in shared


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [200, 503])
async def test_advisor_closes_the_gateway_it_builds(monkeypatch, status):
    built = []

    def make_gateway(settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(status, json=content_reply("hi")))
        gateway = ModelGateway(settings, transport=transport)
        built.append(gateway)
        return gateway

    monkeypatch.setattr(advisor_node, "ModelGateway", make_gateway)
    shared: Dict[str, Any] = {
        "settings": Settings(AI_GATEWAY_API_KEY="test-key"),
        "model_messages": [{"role": "user", "content": "q"}],
    }

    node = AdvisorChatNode()
    node.successors = {}
    if status == 200:
        await Flow(start=node).run_async(shared)
        assert shared["gateway_reply"] == content_reply("hi")
    else:
        with pytest.raises(GatewayError):
            await Flow(start=node).run_async(shared)

    assert len(built) == 1
    assert built[0]._client.is_closed


@pytest.mark.asyncio
async def test_advisor_leaves_an_injected_gateway_open():
    gateway = ModelGateway(
        Settings(AI_GATEWAY_API_KEY="test-key"),
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=content_reply("hi"))),
    )
    shared: Dict[str, Any] = {"gateway": gateway, "model_messages": [{"role": "user", "content": "q"}]}

    node = AdvisorChatNode()
    node.successors = {}
    await Flow(start=node).run_async(shared)

    assert not gateway._client.is_closed
    await gateway.aclose()
