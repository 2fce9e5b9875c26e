"""Persisted shapes for conversation and emotional memory.

Keys are camelCase on the wire (``conversationHistory``, ``lastSaved``...)
so snapshots written by the web companion load unchanged; snake_case names
are accepted too.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from heart.utils.clock import utc_now


MEMORY_VERSION = "1.0"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversationEntry(_CamelModel):
    """A user message on its own, or a full user/companion exchange."""

    kind: Literal["user", "exchange"] = "exchange"
    content: Optional[str] = None
    user: Optional[str] = None
    ai: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)
    mood: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _infer_kind(cls, data: Any) -> Any:
        # Older snapshots tag user-only entries with type="user"
        if isinstance(data, dict) and "kind" not in data:
            data = dict(data)
            if data.get("type") == "user" or ("content" in data and "user" not in data):
                data["kind"] = "user"
        return data

    def texts(self) -> List[str]:
        """Every piece of text stored in this entry."""
        if self.kind == "user":
            return [self.content or ""]
        return [self.user or "", self.ai or ""]


class EmotionalSnapshot(_CamelModel):
    """The mood at some moment and what triggered it."""

    mood: Dict[str, Any]
    trigger: str = ""
    timestamp: datetime = Field(default_factory=utc_now)

    @property
    def primary(self) -> Optional[str]:
        return self.mood.get("primary")


class MemorySnapshot(_CamelModel):
    """Everything handed to (and back from) the persistence sink."""

    conversation_history: List[ConversationEntry] = Field(default_factory=list)
    emotional_history: List[EmotionalSnapshot] = Field(default_factory=list)
    last_saved: datetime = Field(default_factory=utc_now)
    session_start: datetime = Field(default_factory=utc_now)
    total_messages: int = 0
    memory_version: str = MEMORY_VERSION

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
