# medmentor/runtime/nodes/retrieve.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pocketflow import AsyncNode

from medmentor.runtime.prompt import PromptAssembler, latest_user_text

logger = logging.getLogger(__name__)


class EvidenceRetrieveNode(AsyncNode):
    """
    Look up interaction facts for the latest utterance and build the model input.
    - prep_async: I/O to the evidence store (one read query) via PromptAssembler
    - exec_async: pure compute (prepend the system prompt to the request history)
    - post_async: write prompt/facts/messages back to shared, return routing token
    """

    async def prep_async(self, shared: Dict[str, Any]) -> Dict[str, Any]:
        history: List[Dict[str, str]] = list(shared.get("messages") or [])
        assembler: PromptAssembler = shared.get("prompt_assembler") or PromptAssembler(
            shared["repo"], shared["settings"]
        )

        query = latest_user_text(history)
        assembled = await assembler.assemble(query)
        logger.info("Found interactions: %d", len(assembled.facts))

        return {"history": history, "assembled": assembled}

    async def exec_async(self, prep: Dict[str, Any]) -> Dict[str, Any]:
        system_prompt: str = prep["assembled"].system_prompt
        messages: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
        for m in prep["history"]:
            messages.append({"role": m["role"], "content": m["content"]})
        return {"messages": messages}

    async def post_async(self, shared: Dict[str, Any], prep: Dict[str, Any], exec_res: Dict[str, Any]) -> str:
        shared["system_prompt"] = prep["assembled"].system_prompt
        shared["interactions"] = prep["assembled"].facts
        shared["model_messages"] = exec_res["messages"]
        return "ok"
