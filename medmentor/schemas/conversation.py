from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from medmentor.schemas.chat import ConfidenceLevel, EvidenceSource, Role


class ConversationCreate(BaseModel):
    title: str = "New Conversation"


class ConversationView(BaseModel):
    id: str
    title: str
    created_at: datetime


class MessageCreate(BaseModel):
    role: Role
    content: str
    confidence_level: Optional[ConfidenceLevel] = None
    evidence_sources: Optional[List[EvidenceSource]] = None


class MessageView(BaseModel):
    id: str
    conversation_id: str
    role: Role
    content: str
    confidence_level: Optional[ConfidenceLevel] = None
    evidence_sources: Optional[List[EvidenceSource]] = None
    created_at: datetime
