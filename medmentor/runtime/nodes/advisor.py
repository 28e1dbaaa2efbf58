# medmentor/runtime/nodes/advisor.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pocketflow import AsyncNode

from medmentor.services.gateway_client import ModelGateway

logger = logging.getLogger(__name__)


class AdvisorChatNode(AsyncNode):
    """LLM call with a forced structured tool invocation.
    - prep_async: pick up the assembled messages + resolve the gateway client
    - exec_async: call the gateway (single attempt, errors propagate)
    - post_async: store the raw reply in shared and route
    """

    async def prep_async(self, shared: Dict[str, Any]) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = shared["model_messages"]
        gateway = shared.get("gateway")
        # A gateway built here is closed once the call is done
        owned = gateway is None
        if owned:
            gateway = ModelGateway(shared["settings"])
        return {"messages": messages, "gateway": gateway, "owned": owned}

    async def exec_async(self, prep: Dict[str, Any]) -> Dict[str, Any]:
        gateway: ModelGateway = prep["gateway"]
        try:
            raw = await gateway.complete(prep["messages"])
        finally:
            if prep["owned"]:
                await gateway.aclose()
        logger.info("AI response received")
        return {"raw": raw}

    async def post_async(self, shared: Dict[str, Any], prep: Dict[str, Any], exec_res: Dict[str, Any]) -> str:
        shared["gateway_reply"] = exec_res["raw"]
        return "ok"
