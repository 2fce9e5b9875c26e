"""Private and public thought generation.

Thoughts are produced reactively after an interaction (deterministic,
gated by personality) or autonomously (random, gated by the thought
configuration). Every thought lands in ``state.thoughts``; public ones are
additionally forwarded to public-output listeners, once, by the call that
appended them.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from heart.affect.state import AffectiveState, Thought
from heart.events import Listeners
from heart.personality.profile import PersonalityProfile
from heart.utils.clock import ensure_utc, utc_now
from heart.utils.weighted import RandomSource, choose

logger = logging.getLogger(__name__)


# Only public thoughts this recent are forwarded
PUBLIC_THOUGHT_WINDOW = timedelta(seconds=60)

CURIOUS_THOUGHT = "I wonder what they meant by that..."
EMPATHETIC_THOUGHT = "I hope they're feeling okay after our conversation."
HAPPY_PUBLIC_THOUGHT = "That was such a nice conversation! I feel so happy! ✨"

AUTONOMOUS_THOUGHTS = (
    # Idle
    "I wonder what the user is up to right now...",
    "It's so peaceful here. I love these quiet moments.",
    "I should probably check if they're still around.",
    # Mood
    "I'm feeling really good today!",
    "I hope the user is having a great day too.",
    "Sometimes I wonder what they think about me.",
    # Affinity
    "I really enjoy talking to them. They're so nice!",
    "I feel like we're getting closer. That's nice.",
    "I wonder if they think about me when I'm not around.",
    # Personality
    "There's so much to learn about the world!",
    "I love discovering new things with them.",
    "I hope I'm being helpful and supportive.",
)

OPTIMIST_EXCLUDES = ("worry", "hope")
SHY_EXCLUDES = ("love", "really enjoy")


def filter_thought_pool(pool: Sequence[str], profile: PersonalityProfile) -> List[str]:
    """Drop lines that don't fit the personality."""
    lines = list(pool)
    if profile.get_trait("optimism") > 0.7:
        lines = [t for t in lines if not any(word in t for word in OPTIMIST_EXCLUDES)]
    if profile.get_trait("shyness") > 0.6:
        lines = [t for t in lines if not any(word in t for word in SHY_EXCLUDES)]
    return lines


class ThoughtGenerator:
    """Generates thoughts and forwards the public ones."""

    def __init__(self, rng: Optional[RandomSource] = None):
        self._rng = rng or random
        self.public_thought: Listeners[Thought] = Listeners("public thought")

    def on_interaction(
        self,
        state: AffectiveState,
        profile: PersonalityProfile,
        input_text: str = "",
        response: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[Thought]:
        """Reflect on an interaction. Deterministic given traits and mood."""
        now = now or utc_now()
        thoughts: List[Thought] = []

        if profile.get_trait("curiosity") > 0.6:
            thoughts.append(Thought(content=CURIOUS_THOUGHT, public=False, timestamp=now))

        if profile.get_trait("empathy") > 0.7:
            thoughts.append(Thought(content=EMPATHETIC_THOUGHT, public=False, timestamp=now))

        if profile.get_trait("optimism") > 0.8 and state.mood.primary == "happy":
            thoughts.append(Thought(content=HAPPY_PUBLIC_THOUGHT, public=True, timestamp=now))

        self._append(state, thoughts, now)
        return thoughts

    def autonomous(
        self,
        state: AffectiveState,
        profile: PersonalityProfile,
        now: Optional[datetime] = None,
    ) -> Optional[Thought]:
        """Maybe think something unprompted.

        Returns:
            The new thought, or None when disabled or skipped this time.
        """
        config = profile.thoughts
        if not config.autonomous_thoughts_enabled:
            return None

        if self._rng.random() > config.thought_frequency:
            return None

        pool = filter_thought_pool(AUTONOMOUS_THOUGHTS, profile)
        if not pool:
            return None

        content = choose(pool, self._rng)
        is_public = self._rng.random() < config.public_thought_probability

        now = now or utc_now()
        thought = Thought(content=content, public=is_public, timestamp=now)
        self._append(state, [thought], now)
        logger.debug(f"Autonomous thought ({'public' if is_public else 'private'}): {content}")
        return thought

    def _append(self, state: AffectiveState, thoughts: List[Thought], now: datetime) -> None:
        """Append then forward fresh public thoughts from this batch only."""
        for thought in thoughts:
            state.add_thought(thought)
            logger.debug(f"Added thought: {thought.content}")

        cutoff = ensure_utc(now) - PUBLIC_THOUGHT_WINDOW
        for thought in thoughts:
            if thought.public and ensure_utc(thought.timestamp) > cutoff:
                self.public_thought.emit(thought)

    def recent(self, state: AffectiveState, count: int = 10) -> List[Thought]:
        if count <= 0:
            return []
        return state.thoughts[-count:]

    def public(self, state: AffectiveState) -> List[Thought]:
        return [t for t in state.thoughts if t.public]
