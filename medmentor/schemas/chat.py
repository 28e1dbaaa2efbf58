from pydantic import BaseModel, Field
from typing import List, Literal, Optional

ConfidenceLevel = Literal["low", "medium", "high"]
Role = Literal["user", "assistant", "system"]


class ChatMessageIn(BaseModel):
    role: Role
    content: str


class AdvisorRequest(BaseModel):
    messages: List[ChatMessageIn]


class EvidenceSource(BaseModel):
    source: str
    snippet: Optional[str] = None


class AdvisorResponse(BaseModel):
    response: str
    confidence_level: ConfidenceLevel
    # ordered citations; empty when the model gave none
    evidence_sources: List[EvidenceSource] = Field(default_factory=list)


class ErrorOut(BaseModel):
    error: str
