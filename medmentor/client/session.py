# medmentor/client/session.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

import httpx
from sqlalchemy.exc import SQLAlchemyError

from medmentor.schemas.chat import AdvisorResponse
from medmentor.services.errors import AdvisorError, CreateConversationFailed

logger = logging.getLogger(__name__)

# Failures a conversation store may raise (Repo in-process, HttpConversationStore remote).
STORE_ERRORS: Tuple[type, ...] = (SQLAlchemyError, httpx.HTTPError)


class Advisor(Protocol):
    async def ask(self, messages: Sequence[Dict[str, str]]) -> AdvisorResponse: ...


class ConversationStore(Protocol):
    async def create_conversation(self, title: str = ...) -> Any: ...

    async def append_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        confidence_level: Optional[str] = None,
        evidence_sources: Optional[List[Dict[str, Any]]] = None,
    ) -> Any: ...


@dataclass(frozen=True)
class Message:
    role: str
    content: str
    confidence_level: Optional[str] = None
    evidence_sources: Optional[Tuple[Dict[str, Any], ...]] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def as_request(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Notification:
    description: str
    title: str = "Error"
    variant: str = "destructive"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class ChatSession:
    """
    In-memory chat state for one conversation.

    State: Empty (conversation_id is None) -> Active(conversation_id), once,
    on the first successful conversation creation. One request in flight at
    a time; send() while busy is ignored, as the input is disabled.
    """

    def __init__(
        self,
        advisor: Advisor,
        store: ConversationStore,
        *,
        on_change: Optional[Callable[["ChatSession"], None]] = None,
        title: str = "New Conversation",
    ) -> None:
        self.advisor = advisor
        self.store = store
        self.on_change = on_change
        self.title = title

        self.messages: List[Message] = []
        self.notifications: List[Notification] = []
        self.conversation_id: Optional[str] = None
        self.is_loading = False
        self._busy = False

    @property
    def can_send(self) -> bool:
        return not self._busy

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def _notify(self, description: str) -> Notification:
        note = Notification(description=description)
        self.notifications.append(note)
        return note

    def dismiss(self, notification: Notification) -> None:
        self.notifications = [n for n in self.notifications if n.id != notification.id]

    def _append(self, message: Message) -> None:
        self.messages.append(message)
        self._changed()

    async def _ensure_conversation(self) -> Optional[str]:
        if self.conversation_id is not None:
            return self.conversation_id
        try:
            conversation = await self.store.create_conversation(self.title)
        except (CreateConversationFailed, SQLAlchemyError, httpx.HTTPError) as e:
            logger.error("Error creating conversation: %s", e)
            return None
        self.conversation_id = str(conversation.id)
        return self.conversation_id

    async def _save(self, conversation_id: str, message: Message) -> None:
        sources = list(message.evidence_sources) if message.evidence_sources is not None else None
        try:
            await self.store.append_message(
                conversation_id,
                message.role,
                message.content,
                message.confidence_level,
                sources,
            )
        except STORE_ERRORS as e:
            # The turn goes on; the log may miss this message.
            logger.error("Error saving %s message: %s", message.role, e)

    async def send(self, text: str) -> Optional[Message]:
        """Send one user turn. Returns the assistant message, or None on failure/busy."""
        if self._busy:
            return None
        self._busy = True
        try:
            conversation_id = await self._ensure_conversation()
            if conversation_id is None:
                self._notify(CreateConversationFailed.user_message)
                return None

            user_message = Message(role="user", content=text)
            self._append(user_message)
            await self._save(conversation_id, user_message)

            self.is_loading = True
            self._changed()
            try:
                reply = await self.advisor.ask([m.as_request() for m in self.messages])
            except AdvisorError as e:
                logger.error("Error: %s", e)
                self._notify(e.user_message)
                return None
            except httpx.HTTPError as e:
                logger.error("Error: %s", e)
                self._notify(AdvisorError.user_message)
                return None
            finally:
                self.is_loading = False
                self._changed()

            assistant_message = Message(
                role="assistant",
                content=reply.response,
                confidence_level=reply.confidence_level,
                evidence_sources=tuple(
                    s.model_dump(exclude_none=True) for s in reply.evidence_sources
                ),
            )
            self._append(assistant_message)
            await self._save(conversation_id, assistant_message)
            return assistant_message
        finally:
            self._busy = False
