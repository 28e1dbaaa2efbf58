# medmentor/runtime/flow.py
from __future__ import annotations

from pocketflow import AsyncFlow
from medmentor.runtime.nodes.retrieve import EvidenceRetrieveNode
from medmentor.runtime.nodes.advisor import AdvisorChatNode
from medmentor.runtime.nodes.reply_extract import ReplyExtractNode


def make_advisor_flow() -> AsyncFlow:
    """Drug advisor flow:
    retrieve_evidence → advisor_chat → reply_extract

    Gateway failures raise out of advisor_chat (max_retries=1, no fallback);
    reply_extract never fails.
    """

    # Instantiate all nodes
    retrieve = EvidenceRetrieveNode()
    advisor = AdvisorChatNode()
    reply_extract = ReplyExtractNode()

    # --- Routing setup ---
    retrieve.successors = {"ok": advisor}
    advisor.successors = {"ok": reply_extract}

    # --- Flow entry point ---
    return AsyncFlow(start=retrieve)
