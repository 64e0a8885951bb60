"""
Conversation store.

Durable, TTL-scoped storage for the transcript and interview context of each
session. The serialized context is the single source of truth shared by every
process handling a session; every write is a full overwrite that refreshes the
TTL, and absence after the TTL window means the session is gone.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from contextual_interviewer.schemas import (
    CandidateProfile,
    ConversationContext,
    ConversationStats,
    Message,
    MessageRole,
)

if TYPE_CHECKING:
    from contextual_interviewer.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = 3600  # 1 hour
CONTEXT_KEY_PREFIX = "interview_context:"


class ConversationStore(ABC):
    """
    Base class for conversation stores.

    Implements the read-modify-write logic shared by all backends on top of
    four raw key/value primitives. ``append`` is not atomic with respect to
    concurrent writers on the same session; callers serialize per session.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_SESSION_TTL) -> None:
        """
        Initialize the store.

        Args:
            ttl_seconds: Lifetime of a context after its last write.
        """
        self._ttl = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        """Get the context TTL in seconds."""
        return self._ttl

    @abstractmethod
    async def _get_raw(self, key: str) -> str | None:
        """Return the raw value stored under key, or None if absent/expired."""
        ...

    @abstractmethod
    async def _set_raw(self, key: str, value: str, ttl_seconds: int) -> None:
        """Overwrite key with value and (re)start its TTL."""
        ...

    @abstractmethod
    async def _expire(self, key: str, ttl_seconds: int) -> None:
        """Restart the TTL of key if it exists."""
        ...

    @abstractmethod
    async def _delete(self, key: str) -> None:
        """Delete key if it exists."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the backing storage is reachable."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None

    @staticmethod
    def _context_key(session_id: str) -> str:
        return f"{CONTEXT_KEY_PREFIX}{session_id}"

    async def _write(self, context: ConversationContext) -> None:
        await self._set_raw(
            self._context_key(context.session_id),
            context.model_dump_json(),
            self._ttl,
        )

    async def init(
        self,
        session_id: str,
        profile: CandidateProfile,
        focus: str = "Software Engineering",
        max_questions: int = 12,
    ) -> ConversationContext:
        """
        Initialize a new conversation context, replacing any previous one.

        Args:
            session_id: Session identifier.
            profile: Candidate profile.
            focus: Role or domain being interviewed for.
            max_questions: Planned question count.

        Returns:
            The freshly stored context.
        """
        context = ConversationContext(
            session_id=session_id,
            candidate_profile=profile,
            interview_focus=focus,
            max_questions=max_questions,
        )
        await self._write(context)
        logger.debug(f"Initialized conversation context for session {session_id}")
        return context

    async def read(self, session_id: str) -> ConversationContext | None:
        """
        Read the conversation context of a session.

        Returns:
            The context, or None when it never existed or has expired.
        """
        raw = await self._get_raw(self._context_key(session_id))
        if raw is None:
            return None
        return ConversationContext.model_validate_json(raw)

    async def append(self, session_id: str, message: Message) -> None:
        """
        Append a message to the transcript.

        Interviewer messages advance ``questions_asked`` and, unless they are
        follow-ups, move ``current_topic`` to the message category.
        """
        context = await self.read(session_id)
        if context is None:
            logger.warning(f"Cannot append to missing conversation {session_id}")
            return

        context.transcript.append(message)

        if message.role == MessageRole.INTERVIEWER:
            context.questions_asked += 1
            if message.category is not None and not message.is_follow_up:
                new_topic = message.category.value
                if new_topic != context.current_topic:
                    if context.current_topic not in context.topic_history:
                        context.topic_history.append(context.current_topic)
                    context.current_topic = new_topic

        await self._write(context)

    async def mark_complete(self, session_id: str) -> None:
        """Record that the interview has ended."""
        context = await self.read(session_id)
        if context is None or context.is_complete:
            return
        context.is_complete = True
        await self._write(context)

    async def touch(self, session_id: str) -> None:
        """Refresh the TTL of a session without modifying it."""
        await self._expire(self._context_key(session_id), self._ttl)

    async def delete(self, session_id: str) -> None:
        """Delete a session's context. Deleting an absent session is a no-op."""
        await self._delete(self._context_key(session_id))

    async def stats(self, session_id: str) -> ConversationStats | None:
        """
        Compute statistics about a conversation.

        Returns:
            Statistics, or None if the session is gone.
        """
        context = await self.read(session_id)
        if context is None:
            return None

        answers = context.candidate_messages
        average = sum(len(m.text) for m in answers) / len(answers) if answers else 0.0
        duration = (datetime.now(timezone.utc) - context.started_at).total_seconds()

        return ConversationStats(
            total_messages=len(context.transcript),
            questions_asked=context.questions_asked,
            average_response_length=round(average),
            topics_covered=[context.current_topic, *context.topic_history],
            duration_seconds=max(duration, 0.0),
        )


class InMemoryConversationStore(ConversationStore):
    """
    Process-local conversation store honouring TTLs.

    Values are kept serialized so that sessions never share mutable objects.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_SESSION_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._entries: dict[str, tuple[str, float]] = {}

    def _live_value(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def _get_raw(self, key: str) -> str | None:
        async with self._lock:
            return self._live_value(key)

    async def _set_raw(self, key: str, value: str, ttl_seconds: int) -> None:
        async with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    async def _expire(self, key: str, ttl_seconds: int) -> None:
        async with self._lock:
            value = self._live_value(key)
            if value is not None:
                self._entries[key] = (value, self._clock() + ttl_seconds)

    async def _delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def ping(self) -> bool:
        return True


class RedisConversationStore(ConversationStore):
    """
    Redis-backed conversation store.

    Keys:
    - interview_context:{session_id} (string, JSON, SETEX with TTL)
    """

    def __init__(
        self,
        redis_url: str | None = None,
        ttl_seconds: int = DEFAULT_SESSION_TTL,
        client=None,
    ) -> None:
        """
        Initialize the Redis store.

        Args:
            redis_url: Redis connection URL (ignored when client is given).
            ttl_seconds: Lifetime of a context after its last write.
            client: Pre-built ``redis.asyncio`` compatible client.
        """
        super().__init__(ttl_seconds=ttl_seconds)
        if client is None:
            if not redis_url:
                raise ValueError("redis_url or client is required")
            import redis.asyncio as redis_async

            client = redis_async.from_url(redis_url, decode_responses=True)
        self._redis = client

    async def _get_raw(self, key: str) -> str | None:
        value = await self._redis.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def _set_raw(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.setex(key, ttl_seconds, value)

    async def _expire(self, key: str, ttl_seconds: int) -> None:
        await self._redis.expire(key, ttl_seconds)

    async def _delete(self, key: str) -> None:
        await self._redis.delete(key)

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._redis.aclose()


def create_conversation_store(settings: Settings) -> ConversationStore:
    """
    Build the conversation store selected by configuration.

    Uses Redis when ``redis_url`` is configured, otherwise a process-local store.
    """
    if settings.redis_url:
        logger.info("Using Redis conversation store")
        return RedisConversationStore(
            redis_url=settings.redis_url,
            ttl_seconds=settings.session_ttl_seconds,
        )
    logger.info("Using in-memory conversation store")
    return InMemoryConversationStore(ttl_seconds=settings.session_ttl_seconds)
