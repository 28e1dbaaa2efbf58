from fastapi import APIRouter, Depends, HTTPException
from typing import List

from medmentor.api.deps import get_repo
from medmentor.db.models import ChatConversation, ChatMessage
from medmentor.schemas.conversation import (
    ConversationCreate,
    ConversationView,
    MessageCreate,
    MessageView,
)
from medmentor.services.repo import Repo

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


def _conversation_view(c: ChatConversation) -> ConversationView:
    return ConversationView(id=c.id, title=c.title, created_at=c.created_at)


def _message_view(m: ChatMessage) -> MessageView:
    return MessageView(
        id=m.id,
        conversation_id=m.conversation_id,
        role=m.role,
        content=m.content,
        confidence_level=m.confidence_level,
        evidence_sources=m.evidence_sources,
        created_at=m.created_at,
    )


async def _require_conversation(repo: Repo, conversation_id: str) -> ChatConversation:
    conversation = await repo.get_conversation(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.get("", response_model=List[ConversationView])
async def list_conversations(limit: int = 20, repo: Repo = Depends(get_repo)):
    conversations = await repo.list_conversations(limit=limit)
    return [_conversation_view(c) for c in conversations]


@router.post("", response_model=ConversationView)
async def create_conversation(payload: ConversationCreate, repo: Repo = Depends(get_repo)):
    conversation = await repo.create_conversation(payload.title)
    return _conversation_view(conversation)


@router.get("/{conversation_id}/messages", response_model=List[MessageView])
async def get_messages(conversation_id: str, repo: Repo = Depends(get_repo)):
    """Return the stored turns of one conversation in insertion order."""
    await _require_conversation(repo, conversation_id)
    messages = await repo.get_messages(conversation_id)
    return [_message_view(m) for m in messages]


@router.post("/{conversation_id}/messages", response_model=MessageView)
async def append_message(
    conversation_id: str,
    payload: MessageCreate,
    repo: Repo = Depends(get_repo),
):
    await _require_conversation(repo, conversation_id)
    sources = (
        [s.model_dump(exclude_none=True) for s in payload.evidence_sources]
        if payload.evidence_sources is not None
        else None
    )
    message = await repo.append_message(
        conversation_id,
        payload.role,
        payload.content,
        payload.confidence_level,
        sources,
    )
    return _message_view(message)
