# test/fakes.py
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class Fact:
    drug_a: str
    drug_b: str
    interaction_type: str = "moderate"
    summary: str = "summary"
    mechanism: str = "mechanism"
    safety_advice: str = "advice"
    evidence_source: str = "source"
    confidence_level: str = "medium"


IBUPROFEN_AMOXICILLIN = Fact(
    drug_a="Ibuprofen",
    drug_b="Amoxicillin",
    interaction_type="none",
    summary="No clinically significant interaction is documented.",
    mechanism="Different elimination pathways.",
    safety_advice="Take ibuprofen with food.",
    evidence_source="Drug interaction reference databases",
    confidence_level="high",
)


def tool_call_reply(arguments: str, content: Optional[str] = None) -> Dict[str, Any]:
    """Chat-completion body with a single forced tool call."""
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": content,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {
                                "name": "provide_drug_interaction_advice",
                                "arguments": arguments,
                            },
                        }
                    ],
                }
            }
        ]
    }


def content_reply(content: Optional[str]) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeEvidenceRepo:
    """Evidence store returning canned rows; records every query."""

    def __init__(self, rows: List[Any]) -> None:
        self._rows = rows
        self.queries: List[Dict[str, Any]] = []

    async def search_interactions(self, query: str, *, limit: int = 5) -> List[Any]:
        self.queries.append({"query": query, "limit": limit})
        return self._rows[:limit]


class FakeGateway:
    """Captures last call and returns a canned reply or raises a canned error."""

    def __init__(self, reply: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[List[Dict[str, str]]] = []

    async def complete(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply or {}

    async def aclose(self) -> None:
        pass
