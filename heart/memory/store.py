"""Bounded conversation and emotional memory.

Two FIFO buffers (conversation entries, emotional snapshots) share one
capacity. Once full, appending silently drops the oldest entry. Writing the
buffers to durable storage is someone else's job: this store only keeps
them in memory and converts them to/from ``MemorySnapshot``.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Deque, List, Optional, Union

import numpy as np

from heart.affect.state import Mood
from heart.memory.schema import ConversationEntry, EmotionalSnapshot, MemorySnapshot
from heart.utils.clock import minutes_between, utc_now

logger = logging.getLogger(__name__)


DEFAULT_MAX_HISTORY_SIZE = 100

# Snapshots considered by mood_trend()
MOOD_TREND_WINDOW = 10


def _mood_dict(mood: Union[Mood, dict, None]) -> Optional[dict]:
    if mood is None:
        return None
    if isinstance(mood, Mood):
        return mood.to_dict()
    return dict(mood)


class ConversationMemoryStore:
    """In-memory bounded history of conversation and mood."""

    def __init__(
        self,
        max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
        session_start: Optional[datetime] = None,
    ):
        if max_history_size < 1:
            raise ValueError(f"max_history_size must be >= 1, got {max_history_size}")
        self.max_history_size = max_history_size
        self.session_start = session_start or utc_now()
        self._conversations: Deque[ConversationEntry] = deque(maxlen=max_history_size)
        self._emotions: Deque[EmotionalSnapshot] = deque(maxlen=max_history_size)

    # ------------------------------------------------------------------
    # Appends
    # ------------------------------------------------------------------

    def append_user(self, text: str, now: Optional[datetime] = None) -> ConversationEntry:
        entry = ConversationEntry(kind="user", content=text, timestamp=now or utc_now())
        self._conversations.append(entry)
        logger.debug("Stored user message in memory")
        return entry

    def append_exchange(
        self,
        user_text: str,
        ai_text: Optional[str],
        mood: Union[Mood, dict, None] = None,
        now: Optional[datetime] = None,
    ) -> ConversationEntry:
        entry = ConversationEntry(
            kind="exchange",
            user=user_text,
            ai=ai_text or "",
            mood=_mood_dict(mood),
            timestamp=now or utc_now(),
        )
        self._conversations.append(entry)
        logger.debug("Stored conversation in memory")
        return entry

    def append_emotional_snapshot(
        self,
        mood: Union[Mood, dict],
        trigger: str,
        now: Optional[datetime] = None,
    ) -> EmotionalSnapshot:
        snapshot = EmotionalSnapshot(
            mood=_mood_dict(mood) or {},
            trigger=trigger,
            timestamp=now or utc_now(),
        )
        self._emotions.append(snapshot)
        logger.debug(f"Stored emotional state: {snapshot.primary}")
        return snapshot

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def conversation_history(self) -> List[ConversationEntry]:
        return list(self._conversations)

    @property
    def emotional_history(self) -> List[EmotionalSnapshot]:
        return list(self._emotions)

    def recent(self, n: int = 10) -> List[ConversationEntry]:
        """Last ``n`` conversation entries, oldest first."""
        if n <= 0:
            return []
        return list(self._conversations)[-n:]

    def recent_mood_changes(self, n: int = 5) -> List[EmotionalSnapshot]:
        if n <= 0:
            return []
        return list(self._emotions)[-n:]

    def find_similar(self, query: str, limit: int = 5) -> List[ConversationEntry]:
        """Entries containing ``query`` (case-insensitive), newest first."""
        if limit <= 0:
            return []
        needle = (query or "").lower()
        matches: List[ConversationEntry] = []
        for entry in reversed(self._conversations):
            if any(needle in text.lower() for text in entry.texts()):
                matches.append(entry)
                if len(matches) >= limit:
                    break
        return matches

    def mood_trend(self) -> str:
        """stable / changing / volatile over the last 10 snapshots."""
        window = list(self._emotions)[-MOOD_TREND_WINDOW:]
        if len(window) < 2:
            return "stable"

        distinct = {snapshot.primary for snapshot in window}
        if len(distinct) == 1:
            return "stable"
        if len(distinct) > 3:
            return "volatile"
        return "changing"

    def stats(self, now: Optional[datetime] = None) -> dict:
        entries = list(self._conversations)
        user_only = sum(1 for e in entries if e.kind == "user")

        intensities = np.array(
            [float(s.mood.get("intensity", 0.0)) for s in self._emotions], dtype=float
        )
        if intensities.size:
            mean_intensity = float(np.mean(intensities))
            intensity_std = float(np.std(intensities))
        else:
            mean_intensity = 0.0
            intensity_std = 0.0

        return {
            "total_entries": len(entries),
            "user_messages": user_only,
            "exchanges": len(entries) - user_only,
            "session_minutes": minutes_between(self.session_start, now or utc_now()),
            "mood_trend": self.mood_trend(),
            "mean_mood_intensity": mean_intensity,
            "mood_intensity_std": intensity_std,
        }

    def usage(self) -> dict:
        return {
            "conversation_history_size": len(self._conversations),
            "emotional_history_size": len(self._emotions),
            "max_size": self.max_history_size,
        }

    def clear(self) -> None:
        self._conversations.clear()
        self._emotions.clear()
        logger.info("Memory history cleared")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_snapshot(self, now: Optional[datetime] = None) -> MemorySnapshot:
        return MemorySnapshot(
            conversation_history=list(self._conversations),
            emotional_history=list(self._emotions),
            last_saved=now or utc_now(),
            session_start=self.session_start,
            total_messages=len(self._conversations),
        )

    def load_snapshot(self, snapshot: Union[MemorySnapshot, dict]) -> None:
        """Replace buffer contents; keeps only the newest entries that fit."""
        if not isinstance(snapshot, MemorySnapshot):
            snapshot = MemorySnapshot.model_validate(snapshot)

        self._conversations = deque(snapshot.conversation_history, maxlen=self.max_history_size)
        self._emotions = deque(snapshot.emotional_history, maxlen=self.max_history_size)
        self.session_start = snapshot.session_start
        logger.info(
            f"Loaded memory: {len(self._conversations)} conversations, "
            f"{len(self._emotions)} emotional states (saved {snapshot.last_saved.isoformat()})"
        )
