"""Mutable affective state shared by every component of a session.

One ``AffectiveState`` exists per companion session. The session owns it and
hands the same instance to each component; components mutate it in place
and never copy it.

Bounds:
    - mood.intensity: [0.1, 1.0]
    - affinity: [0.0, 1.0]
    - attention.engagement / attention.boredom: [0.0, 1.0]
    - thoughts: at most ``max_thoughts`` entries, oldest evicted first
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, Iterable, List, Mapping, Optional

from heart.utils.clock import clamp, parse_timestamp, utc_now


MIN_MOOD_INTENSITY = 0.1
MAX_MOOD_INTENSITY = 1.0

DEFAULT_MAX_THOUGHTS = 50

POSITIVE_EMOTIONS = ("happy", "excited", "calm")
NEGATIVE_EMOTIONS = ("sad", "angry")


def _number(
    data: Mapping[str, Any],
    keys: Iterable[str],
    default: float,
    cast: Callable[[Any], Any] = float,
) -> Any:
    """First present, non-null, non-NaN value among ``keys``, else default.

    Raises:
        TypeError, ValueError: value present but not numeric
    """
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, float) and math.isnan(value):
            continue
        return cast(value)
    return default


@dataclass(frozen=True)
class EmotionSample:
    """Result of classifying one piece of text.

    Attributes:
        emotion: Emotion name from the classifier lexicon
        intensity: Matched fraction of the emotion's keywords (0-1)
        confidence: Same value as intensity for the keyword classifier
    """

    emotion: str
    intensity: float
    confidence: float

    def to_dict(self) -> dict:
        return {
            "emotion": self.emotion,
            "intensity": self.intensity,
            "confidence": self.confidence,
        }


@dataclass
class Mood:
    """Dominant emotion, the previous one, and how strongly it is felt."""

    primary: str = "calm"
    secondary: Optional[str] = None
    intensity: float = 0.5
    last_update: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.intensity = clamp(self.intensity, MIN_MOOD_INTENSITY, MAX_MOOD_INTENSITY)

    def to_dict(self) -> dict:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "intensity": self.intensity,
            "lastUpdate": self.last_update.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Mood":
        return cls(
            primary=data.get("primary") or "calm",
            secondary=data.get("secondary"),
            intensity=_number(data, ("intensity",), 0.5),
            last_update=parse_timestamp(data.get("lastUpdate", data.get("last_update"))),
        )


@dataclass
class Attention:
    """Engagement/boredom pair and interaction recency."""

    engagement: float = 0.8
    boredom: float = 0.2
    last_interaction: datetime = field(default_factory=utc_now)
    interaction_count: int = 0

    def __post_init__(self):
        self.engagement = clamp(self.engagement, 0.0, 1.0)
        self.boredom = clamp(self.boredom, 0.0, 1.0)

    def to_dict(self) -> dict:
        return {
            "engagement": self.engagement,
            "boredom": self.boredom,
            "lastInteraction": self.last_interaction.isoformat(),
            "interactionCount": self.interaction_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Attention":
        return cls(
            engagement=_number(data, ("engagement",), 0.8),
            boredom=_number(data, ("boredom",), 0.2),
            last_interaction=parse_timestamp(
                data.get("lastInteraction", data.get("last_interaction"))
            ),
            interaction_count=_number(data, ("interactionCount", "interaction_count"), 0, int),
        )


@dataclass
class AutonomousState:
    """Counters for unprompted behavior."""

    idle_seconds: float = 0.0
    action_count: int = 0
    last_action: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "idleSeconds": self.idle_seconds,
            "actionCount": self.action_count,
            "lastAction": self.last_action.isoformat() if self.last_action else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AutonomousState":
        last_action = data.get("lastAction", data.get("last_action"))
        return cls(
            idle_seconds=max(0.0, _number(data, ("idleSeconds", "idleTime"), 0.0)),
            action_count=_number(data, ("actionCount", "action_count"), 0, int),
            last_action=parse_timestamp(last_action) if last_action else None,
        )


@dataclass(frozen=True)
class Thought:
    """An internal state record, optionally surfaced publicly."""

    content: str
    public: bool = False
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "public": self.public,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Thought":
        return cls(
            content=data.get("content") or "",
            public=bool(data.get("public", False)),
            timestamp=parse_timestamp(data.get("timestamp")),
        )


class AffectiveState:
    """The single mutable record every component reads and writes."""

    def __init__(
        self,
        mood: Optional[Mood] = None,
        affinity: float = 0.5,
        attention: Optional[Attention] = None,
        autonomous: Optional[AutonomousState] = None,
        thoughts: Optional[Iterable[Thought]] = None,
        max_thoughts: int = DEFAULT_MAX_THOUGHTS,
    ):
        self.mood = mood or Mood()
        self._affinity = clamp(affinity, 0.0, 1.0)
        self.attention = attention or Attention()
        self.autonomous = autonomous or AutonomousState()
        self.max_thoughts = max_thoughts
        self._thoughts: Deque[Thought] = deque(thoughts or (), maxlen=max_thoughts)

    @property
    def affinity(self) -> float:
        return self._affinity

    @affinity.setter
    def affinity(self, value: float) -> None:
        self._affinity = clamp(value, 0.0, 1.0)

    @property
    def thoughts(self) -> List[Thought]:
        """Thoughts oldest-first (a copy; append with ``add_thought``)."""
        return list(self._thoughts)

    def add_thought(self, thought: Thought) -> None:
        """Append a thought, evicting the oldest beyond the cap."""
        self._thoughts.append(thought)

    def set_mood_intensity(self, intensity: float, now: Optional[datetime] = None) -> float:
        self.mood.intensity = clamp(intensity, MIN_MOOD_INTENSITY, MAX_MOOD_INTENSITY)
        self.mood.last_update = now or utc_now()
        return self.mood.intensity

    def to_dict(self) -> dict:
        """Serialize for persistence."""
        return {
            "mood": self.mood.to_dict(),
            "affinity": self.affinity,
            "attention": self.attention.to_dict(),
            "autonomous": self.autonomous.to_dict(),
            "thoughts": [t.to_dict() for t in self._thoughts],
        }

    @classmethod
    def from_dict(cls, data: dict, max_thoughts: int = DEFAULT_MAX_THOUGHTS) -> "AffectiveState":
        """Build from a persisted snapshot; missing sections use defaults."""
        state = cls(max_thoughts=max_thoughts)
        state.restore(data)
        return state

    def restore(self, data: dict) -> None:
        """Overwrite this instance in place from a persisted snapshot.

        Components hold a reference to this object, so restoring must not
        replace it. Null or missing fields take their defaults. Nothing is
        overwritten unless the whole snapshot parses.

        Raises:
            TypeError, ValueError: a field holds a non-numeric value
        """
        mood = Mood.from_dict(data.get("mood") or {})
        affinity = _number(data, ("affinity",), 0.5)
        attention = Attention.from_dict(data.get("attention") or {})
        autonomous = AutonomousState.from_dict(data.get("autonomous") or {})
        thoughts = [Thought.from_dict(t) for t in data.get("thoughts") or []]

        self.mood = mood
        self.affinity = affinity
        self.attention = attention
        self.autonomous = autonomous
        self._thoughts = deque(thoughts, maxlen=self.max_thoughts)
