# medmentor/runtime/nodes/reply_extract.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pocketflow import AsyncNode
from pydantic import ValidationError

from medmentor.schemas.chat import AdvisorResponse

logger = logging.getLogger(__name__)

FALLBACK_TEXT = "Unable to generate response"


@dataclass(frozen=True)
class _Reply:
    response: str
    confidence_level: str
    evidence_sources: List[Dict[str, Any]] = field(default_factory=list)

    def as_payload(self) -> Dict[str, Any]:
        return {
            "response": self.response,
            "confidence_level": self.confidence_level,
            "evidence_sources": list(self.evidence_sources),
        }


@dataclass(frozen=True)
class StructuredReply(_Reply):
    """Arguments of the forced tool call, validated against the advice schema."""


@dataclass(frozen=True)
class FallbackReply(_Reply):
    """Plain-text answer used when no parseable tool call came back."""
    confidence_level: str = "low"
    reason: str = ""


AdvisorReply = Union[StructuredReply, FallbackReply]


def _first_message(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return {}
    message = choices[0].get("message")
    return message if isinstance(message, dict) else {}


def _tool_arguments(message: Dict[str, Any]) -> Optional[Any]:
    tool_calls = message.get("tool_calls")
    if not isinstance(tool_calls, list) or not tool_calls or not isinstance(tool_calls[0], dict):
        return None
    function = tool_calls[0].get("function")
    if not isinstance(function, dict):
        return None
    return function.get("arguments") or None


def _fallback(message: Dict[str, Any], reason: str) -> FallbackReply:
    content = message.get("content")
    text = content if isinstance(content, str) and content else FALLBACK_TEXT
    return FallbackReply(response=text, reason=reason)


def extract_reply(data: Any) -> AdvisorReply:
    """Pull the structured advice out of a chat-completion reply.

    Never raises: a missing, unparseable or off-schema tool call degrades to the
    plain message content with low confidence.
    """
    message = _first_message(data)
    arguments = _tool_arguments(message)
    if arguments is None:
        return _fallback(message, "no tool call")

    try:
        args = json.loads(arguments) if isinstance(arguments, str) else arguments
    except ValueError as e:
        return _fallback(message, f"invalid tool arguments: {e}")
    if not isinstance(args, dict):
        return _fallback(message, "tool arguments are not an object")

    if args.get("evidence_sources") is None:
        args = {**args, "evidence_sources": []}
    try:
        parsed = AdvisorResponse.model_validate(args)
    except ValidationError as e:
        return _fallback(message, f"tool arguments off schema: {e.error_count()} error(s)")

    return StructuredReply(
        response=parsed.response,
        confidence_level=parsed.confidence_level,
        evidence_sources=[s.model_dump(exclude_none=True) for s in parsed.evidence_sources],
    )


class ReplyExtractNode(AsyncNode):
    """Turn the raw gateway reply into the advisor response payload.
    - prep_async: gather the raw reply
    - exec_async: pure extraction (no side-effects, never raises)
    - post_async: write the result into shared and route
    """

    async def prep_async(self, shared: Dict[str, Any]) -> Dict[str, Any]:
        return {"raw": shared.get("gateway_reply")}

    async def exec_async(self, prep: Dict[str, Any]) -> Dict[str, Any]:
        return {"reply": extract_reply(prep["raw"])}

    async def post_async(self, shared: Dict[str, Any], prep: Dict[str, Any], exec_res: Dict[str, Any]) -> str:
        reply: AdvisorReply = exec_res["reply"]
        if isinstance(reply, FallbackReply):
            logger.warning("Structured output missing, using plain content (%s)", reply.reason)
        shared["advisor_reply"] = reply
        shared["response_payload"] = reply.as_payload()
        return "ok"
