# medmentor/client/advisor_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from medmentor.schemas.chat import AdvisorResponse
from medmentor.schemas.conversation import ConversationView
from medmentor.services.errors import (
    AdvisorError,
    CreateConversationFailed,
    GatewayError,
    QuotaExhausted,
    RateLimited,
    Unreachable,
)

logger = logging.getLogger(__name__)

ADVISOR_PATH = "/functions/v1/drug-advisor"


def _headers(api_key: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {api_key}", "apikey": api_key} if api_key else {}


class HttpAdvisorClient:
    """Calls the drug-advisor endpoint and maps its status codes onto AdvisorError subclasses."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=_headers(api_key),
            timeout=httpx.Timeout(None),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def ask(self, messages: Sequence[Dict[str, str]]) -> AdvisorResponse:
        body = {"messages": [{"role": m["role"], "content": m["content"]} for m in messages]}
        try:
            res = await self._client.post(ADVISOR_PATH, json=body)
        except httpx.TransportError as e:
            raise Unreachable(f"Advisor unreachable: {e}") from e
        except httpx.HTTPError as e:
            raise AdvisorError(f"Advisor request failed: {e}") from e

        if res.status_code == 429:
            raise RateLimited()
        if res.status_code == 402:
            raise QuotaExhausted()
        if not res.is_success:
            logger.error("Advisor error: %s %s", res.status_code, res.text)
            raise GatewayError(res.status_code, res.text)

        try:
            return AdvisorResponse.model_validate(res.json())
        except ValueError as e:
            raise AdvisorError(f"Invalid advisor response: {e}") from e


class HttpConversationStore:
    """Conversation log over the /api/conversations endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=_headers(api_key),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_conversation(self, title: str = "New Conversation") -> ConversationView:
        try:
            res = await self._client.post("/api/conversations", json={"title": title})
            res.raise_for_status()
        except httpx.HTTPError as e:
            raise CreateConversationFailed(f"Failed to create conversation: {e}") from e
        try:
            return ConversationView.model_validate(res.json())
        except ValueError as e:
            raise CreateConversationFailed(f"Invalid conversation body: {e}") from e

    async def append_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        confidence_level: Optional[str] = None,
        evidence_sources: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        res = await self._client.post(
            f"/api/conversations/{conversation_id}/messages",
            json={
                "role": role,
                "content": content,
                "confidence_level": confidence_level,
                "evidence_sources": evidence_sources,
            },
        )
        res.raise_for_status()
