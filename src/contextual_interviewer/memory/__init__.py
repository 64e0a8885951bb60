"""
Memory module for per-session conversation context.

Provides the durable, TTL-bound store that serves as the single source
of truth for every interview session.
"""

from contextual_interviewer.memory.conversation_store import (
    ConversationStore,
    InMemoryConversationStore,
    RedisConversationStore,
    create_conversation_store,
)

__all__ = [
    "ConversationStore",
    "InMemoryConversationStore",
    "RedisConversationStore",
    "create_conversation_store",
]
