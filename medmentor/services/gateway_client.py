# medmentor/services/gateway_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from medmentor.core.config import Settings
from medmentor.services.errors import (
    ConfigurationError,
    GatewayError,
    QuotaExhausted,
    RateLimited,
    Unreachable,
)

logger = logging.getLogger(__name__)

ADVICE_TOOL_NAME = "provide_drug_interaction_advice"

ADVICE_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": ADVICE_TOOL_NAME,
        "description": (
            "Provide structured medical advice including drug interactions, medication "
            "purposes, and symptom guidance with safety warnings"
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "response": {
                    "type": "string",
                    "description": (
                        "Complete response with relevant sections based on query type "
                        "(interaction summary/drug purpose/symptom guidance), mechanism, "
                        "safety advice, and medical disclaimer"
                    ),
                },
                "confidence_level": {
                    "type": "string",
                    "enum": ["low", "medium", "high"],
                    "description": "Confidence level based on evidence strength",
                },
                "evidence_sources": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "source": {"type": "string"},
                            "snippet": {"type": "string"},
                        },
                        "required": ["source"],
                    },
                    "description": "Array of evidence sources with optional snippets",
                },
            },
            "required": ["response", "confidence_level"],
            "additionalProperties": False,
        },
    },
}


class ModelGateway:
    """Thin client for an OpenAI-compatible chat completions gateway.

    Every request forces a single call of the advice tool so the reply is
    structured. No retries: any failure is raised to the caller immediately.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = settings.AI_GATEWAY_BASE_URL.rstrip("/")
        self.api_key = settings.AI_GATEWAY_API_KEY
        self.model = settings.AI_MODEL

        if not self.api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY not configured")

        # Single AsyncClient shared for the app lifetime; closed via aclose().
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(settings.GATEWAY_TIMEOUT),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_payload(self, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "tools": [ADVICE_TOOL],
            "tool_choice": {
                "type": "function",
                "function": {"name": ADVICE_TOOL_NAME},
            },
        }

    async def complete(self, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Submit the full conversation (system prompt first) and return the raw
        JSON reply. Raises RateLimited / QuotaExhausted / GatewayError / Unreachable.
        """
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            res = await self._client.post(
                "/chat/completions", headers=headers, json=self.build_payload(messages)
            )
        except httpx.TransportError as e:
            logger.error("AI gateway unreachable: %s", e)
            raise Unreachable(f"AI gateway unreachable: {e}") from e

        if res.is_success:
            try:
                return res.json()
            except ValueError as e:
                # Reply extraction turns an empty body into the low-confidence fallback
                logger.warning("AI gateway returned a non-JSON body: %s", e)
                return {}

        logger.error("AI API error: %s %s", res.status_code, res.text)
        if res.status_code == 429:
            raise RateLimited()
        if res.status_code == 402:
            raise QuotaExhausted()
        raise GatewayError(res.status_code, res.text)
