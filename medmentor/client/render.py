# medmentor/client/render.py
from __future__ import annotations

from typing import List, Optional

from medmentor.client.session import ChatSession, Message

DISCLAIMER = (
    "Medical Disclaimer: This is NOT medical advice. MedMentor RAG provides educational "
    "information only. Always consult a licensed healthcare professional before making "
    "decisions about medications, dosages, or drug interactions. Never self-medicate or "
    "change prescribed treatments without medical supervision."
)

CONFIDENCE_LABELS = {
    "high": "High Confidence",
    "medium": "Medium Confidence",
    "low": "Low Confidence",
}

PENDING_INDICATOR = "MedMentor: ..."


def confidence_badge(level: Optional[str]) -> Optional[str]:
    if not level:
        return None
    return CONFIDENCE_LABELS.get(level)


def render_message(message: Message) -> str:
    if message.role == "user":
        return f"You: {message.content}"

    lines: List[str] = [f"MedMentor: {message.content}"]
    sources = list(message.evidence_sources or [])
    badge = confidence_badge(message.confidence_level)

    # Evidence panel only when there is something to show
    if message.confidence_level or sources:
        lines.append("-" * 40)
        if badge:
            lines.append(f"[{badge}]")
        if sources:
            lines.append("Evidence References:")
            for src in sources:
                lines.append(f"  * {src['source']}")
                if src.get("snippet"):
                    lines.append(f"    \"{src['snippet']}\"")
    return "\n".join(lines)


def render_transcript(session: ChatSession) -> str:
    parts = [render_message(m) for m in session.messages]
    if session.is_loading:
        parts.append(PENDING_INDICATOR)
    return "\n\n".join(parts)
