# medmentor/services/repo.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from medmentor.db.models import ChatConversation, ChatMessage, DrugInteraction


class Repo:
    """
    Data Access Layer (DAL) for the evidence table and the conversation log.

    Usage patterns:
      - Simple read/write (auto session/commit):
          await repo.append_message(...)

      - Composed writes with atomicity:
          async with repo.transaction() as s:
              conv = await repo.create_conversation(session=s)
              await repo.append_message(conv.id, "user", "hi", session=s)
              # any error -> full rollback
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    # ---------------------------
    # Transactions
    # ---------------------------
    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session with an active transaction. Rollbacks on exception."""
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    async def _write(self, obj: Any, session: Optional[AsyncSession]) -> Any:
        """Add + flush one row. If no session provided, autocommits."""
        created_here = session is None
        if session is None:
            session = self._session_factory()

        try:
            session.add(obj)
            # Flush to get PKs and defaults (created_at, etc.)
            await session.flush()
            if created_here:
                await session.commit()
            await session.refresh(obj)
            return obj
        except Exception:
            if created_here:
                await session.rollback()
            raise
        finally:
            if created_here:
                await session.close()

    async def _read(self, stmt: Any, session: Optional[AsyncSession]) -> list:
        close_session = session is None
        if session is None:
            session = self._session_factory()

        try:
            result = await session.execute(stmt)
            return list(result.scalars().all())
        finally:
            if close_session:
                await session.close()

    # ---------------------------
    # Evidence store
    # ---------------------------
    async def search_interactions(
        self,
        query: str,
        *,
        limit: int = 5,
        session: Optional[AsyncSession] = None,
    ) -> list[DrugInteraction]:
        """Match rows whose drug_a or drug_b contains `query` (ILIKE %query%).

        Unranked; ordered by id only so the result is stable for a given table state.
        """
        pattern = f"%{query}%"
        stmt = (
            select(DrugInteraction)
            .where(
                or_(
                    DrugInteraction.drug_a.ilike(pattern),
                    DrugInteraction.drug_b.ilike(pattern),
                )
            )
            .order_by(DrugInteraction.id.asc())
            .limit(limit)
        )
        return await self._read(stmt, session)

    async def add_interaction(
        self,
        *,
        session: Optional[AsyncSession] = None,
        **fields: Any,
    ) -> DrugInteraction:
        return await self._write(DrugInteraction(**fields), session)

    # ---------------------------
    # Conversations
    # ---------------------------
    async def create_conversation(
        self,
        title: str = "New Conversation",
        *,
        session: Optional[AsyncSession] = None,
    ) -> ChatConversation:
        """Insert a conversation row and return it with its generated id."""
        return await self._write(ChatConversation(title=title), session)

    async def get_conversation(
        self,
        conversation_id: str,
        *,
        session: Optional[AsyncSession] = None,
    ) -> Optional[ChatConversation]:
        stmt = select(ChatConversation).where(ChatConversation.id == conversation_id)
        rows = await self._read(stmt, session)
        return rows[0] if rows else None

    async def list_conversations(
        self,
        *,
        limit: int = 20,
        session: Optional[AsyncSession] = None,
    ) -> list[ChatConversation]:
        """Return recent conversations, newest first."""
        stmt = (
            select(ChatConversation)
            .order_by(ChatConversation.created_at.desc(), ChatConversation.id.desc())
            .limit(limit)
        )
        return await self._read(stmt, session)

    # ---------------------------
    # Messages
    # ---------------------------
    async def get_messages(
        self,
        conversation_id: str,
        *,
        session: Optional[AsyncSession] = None,
        limit: Optional[int] = None,
    ) -> list[ChatMessage]:
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.conversation_id == conversation_id)
            .order_by(ChatMessage.seq.asc())
        )
        if limit:
            stmt = stmt.limit(limit)
        return await self._read(stmt, session)

    async def append_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        confidence_level: Optional[str] = None,
        evidence_sources: Optional[Sequence[dict[str, Any]]] = None,
        *,
        session: Optional[AsyncSession] = None,
    ) -> ChatMessage:
        """Insert a new message at the end of the conversation. If no session provided, autocommits."""
        if session is None:
            async with self.transaction() as tx:
                return await self.append_message(
                    conversation_id, role, content, confidence_level, evidence_sources, session=tx
                )

        last = await session.scalar(
            select(func.coalesce(func.max(ChatMessage.seq), 0)).where(
                ChatMessage.conversation_id == conversation_id
            )
        )
        msg = ChatMessage(
            seq=last + 1,
            conversation_id=conversation_id,
            role=role,
            content=content,
            confidence_level=confidence_level,
            evidence_sources=list(evidence_sources) if evidence_sources is not None else None,
        )
        return await self._write(msg, session)
