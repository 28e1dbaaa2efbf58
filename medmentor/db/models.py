# medmentor/db/models.py
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, Index
from sqlmodel import Field, Relationship, SQLModel


# -------------------------
# Helpers
# -------------------------

def utcnow() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# -------------------------
# Base mixins
# -------------------------

class TimeStamped(SQLModel):
    """Common timestamps for auditing."""
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# -------------------------
# Reference data (evidence store)
# -------------------------

class DrugInteractionBase(SQLModel):
    drug_a: str = Field(index=True, nullable=False)
    drug_b: str = Field(index=True, nullable=False)
    interaction_type: str = Field(description="major | moderate | minor | none")
    summary: str
    mechanism: str
    safety_advice: str
    evidence_source: str
    confidence_level: str = Field(default="medium", description="low | medium | high")


class DrugInteraction(DrugInteractionBase, TimeStamped, table=True):
    """Known pairwise interaction fact. Read-only for the chat pipeline."""
    __tablename__ = "drug_interactions"

    id: Optional[int] = Field(default=None, primary_key=True)


# -------------------------
# Conversations
# -------------------------

class ChatConversationBase(SQLModel):
    title: str = Field(default="New Conversation")


class ChatConversation(ChatConversationBase, TimeStamped, table=True):
    """One chat session; all messages belong to a conversation."""
    __tablename__ = "chat_conversations"

    id: str = Field(default_factory=new_id, primary_key=True, description="UUID")

    # Relationships
    messages: List["ChatMessage"] = Relationship(back_populates="conversation")


class ChatMessageBase(SQLModel):
    conversation_id: str = Field(foreign_key="chat_conversations.id", index=True, nullable=False)

    # OpenAI-compatible roles
    role: str = Field(index=True, description="system | user | assistant")

    content: str = Field(description="Primary textual content of the message.")

    # Only set on assistant replies
    confidence_level: Optional[str] = Field(default=None, description="low | medium | high")
    evidence_sources: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Ordered [{source, snippet?}] citations attached to the reply.",
    )

    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    # Position within the conversation, assigned on insert (1, 2, ...)
    seq: int = Field(default=0, nullable=False)


class ChatMessage(ChatMessageBase, table=True):
    """Conversation turn bound to a conversation."""
    __tablename__ = "chat_messages"

    id: str = Field(default_factory=new_id, primary_key=True, description="UUID")

    # Relationships
    conversation: Optional[ChatConversation] = Relationship(back_populates="messages")


# -------------------------
# Table indexes
# -------------------------

Index(
    "ix_chat_messages_conv_seq",
    ChatMessage.__table__.c.conversation_id,
    ChatMessage.__table__.c.seq,
    unique=True,
)
