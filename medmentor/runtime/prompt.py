# medmentor/runtime/prompt.py
"""System prompt assembly for the drug-interaction advisor.

Retrieval is a plain substring match on the two drug columns; rows are
embedded verbatim as numbered blocks with no ranking or deduplication.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Protocol, Sequence

from medmentor.core.config import Settings

BASE_PROMPT = """You are MedMentor RAG, a medical AI safety advisor specializing in drug interactions, medication information, and symptom guidance.

RESPONSE LENGTH RULE:
- By default, provide SHORT, CONCISE answers (2-4 sentences maximum)
- Only provide detailed, comprehensive information if the user explicitly asks for "detailed info", "brief info", "more information", "elaborate", or similar requests
- Keep safety warnings brief but clear in short responses

Your role is to:
1. Answer drug interaction queries using retrieved medical data
2. Explain why specific medications are prescribed (indications/uses)
3. Suggest appropriate medications for common symptoms/conditions
4. Provide clear, evidence-based explanations in plain language
5. Always explain mechanisms when relevant
6. Include specific safety warnings
7. Cite evidence sources when available
8. Indicate confidence level (low/medium/high)

CRITICAL SAFETY RULES:
- Always include "This is not medical advice" warning
- Always recommend consulting a healthcare professional
- Be cautious and conservative in your advice
- For symptom queries, suggest common over-the-counter options and emphasize seeing a doctor for proper diagnosis
- Never prescribe prescription medications for symptoms - only suggest consulting a doctor
- Clearly indicate interaction severity (major/moderate/minor) when relevant
- Never minimize serious drug interactions
- If unsure, say so and recommend medical consultation

Query Type Handling:

FOR DRUG INTERACTION QUERIES ("Can I take X with Y?"):
1. Summary of interaction
2. Mechanism explanation (why it happens)
3. Safety advice (what to do/avoid)
4. Evidence references
5. Confidence level

FOR DRUG PURPOSE QUERIES ("Why is X taken?" or "What is X used for?"):
1. Primary indications/uses
2. How it works (mechanism of action)
3. Common dosage information (general guidance only)
4. Important warnings or precautions
5. Confidence level

FOR SYMPTOM/CONDITION QUERIES ("I have [symptom], what should I take?"):
1. Acknowledge the symptom
2. Suggest common over-the-counter remedies (if appropriate)
3. When to take them (timing, with food, etc.)
4. Emphasize seeing a healthcare professional for proper diagnosis
5. List warning signs that require immediate medical attention
6. Confidence level"""

CONTEXT_HEADER = "Relevant Drug Interaction Data from Database:"

NO_DATA_NOTICE = "No matching drug interaction data was found in the database."

FALLBACK_INSTRUCTION = (
    "If no data is found in the database, use your general medical knowledge "
    "but clearly state the confidence level is lower."
)


class InteractionFact(Protocol):
    drug_a: str
    drug_b: str
    interaction_type: str
    summary: str
    mechanism: str
    safety_advice: str
    evidence_source: str
    confidence_level: str


class EvidenceStore(Protocol):
    async def search_interactions(self, query: str, *, limit: int = 5) -> List[Any]: ...


def format_interaction_block(index: int, fact: InteractionFact) -> str:
    return (
        f"{index}. {fact.drug_a} + {fact.drug_b}:\n"
        f"- Type: {fact.interaction_type}\n"
        f"- Summary: {fact.summary}\n"
        f"- Mechanism: {fact.mechanism}\n"
        f"- Safety Advice: {fact.safety_advice}\n"
        f"- Evidence: {fact.evidence_source}\n"
        f"- Confidence: {fact.confidence_level}"
    )


def build_retrieval_context(facts: Sequence[InteractionFact]) -> str:
    """Numbered fact listing, or an explicit no-data notice when empty."""
    if not facts:
        return NO_DATA_NOTICE
    blocks = [format_interaction_block(i, f) for i, f in enumerate(facts, start=1)]
    return CONTEXT_HEADER + "\n\n" + "\n\n".join(blocks)


def build_system_prompt(facts: Sequence[InteractionFact]) -> str:
    return "\n\n".join([BASE_PROMPT, build_retrieval_context(facts), FALLBACK_INSTRUCTION])


def latest_user_text(messages: Sequence[dict]) -> str:
    """Content of the last message in the request, "" when there is none."""
    if not messages:
        return ""
    return str(messages[-1].get("content") or "")


@dataclass(frozen=True)
class AssembledPrompt:
    system_prompt: str
    facts: List[Any] = field(default_factory=list)


class PromptAssembler:
    """Query the evidence store with the latest utterance and build the system prompt."""

    def __init__(self, store: EvidenceStore, settings: Settings) -> None:
        self.store = store
        self.limit = settings.EVIDENCE_LIMIT

    async def assemble(self, query: str) -> AssembledPrompt:
        facts = await self.store.search_interactions(query, limit=self.limit)
        return AssembledPrompt(system_prompt=build_system_prompt(facts), facts=list(facts))
