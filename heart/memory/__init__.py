"""Bounded conversation and emotional memory."""
from heart.memory.schema import ConversationEntry, EmotionalSnapshot, MemorySnapshot
from heart.memory.store import ConversationMemoryStore

__all__ = [
    "ConversationEntry",
    "ConversationMemoryStore",
    "EmotionalSnapshot",
    "MemorySnapshot",
]
