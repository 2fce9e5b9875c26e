"""Unprompted behavior: speech, idle animations and thoughts.

Every tick adds the tick period to the idle counter and rolls against an
action probability shaped by idle time, personality and mood. On success,
one action is picked by weight from the candidates the personality allows
and dispatched to the action listeners exactly once.

Action probability:
    base 0.1
    +0.2 if idle > 120s, +0.3 more if idle > 300s
    +0.2 if talkativeness > 0.7
    +0.15 if energy > 0.6
    +0.2 if excited, -0.1 if sad
    clamped to [0.05, 0.8]
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, List, Optional, Union

from heart.affect.state import AffectiveState
from heart.events import Listeners
from heart.personality.profile import PersonalityProfile
from heart.utils.clock import clamp, utc_now
from heart.utils.periodic import PeriodicLoop
from heart.utils.weighted import RandomSource, Weighted, choose, pick_weighted

logger = logging.getLogger(__name__)


DEFAULT_ACTION_INTERVAL_SECONDS = 30.0

MIN_ACTION_PROBABILITY = 0.05
MAX_ACTION_PROBABILITY = 0.8

SPEECH_WEIGHT = 0.7
ANIMATION_WEIGHT = 0.5
THOUGHT_WEIGHT = 0.3

# Idle thresholds in seconds
RESTLESS_IDLE_SECONDS = 120
LONELY_IDLE_SECONDS = 300

AUTONOMOUS_SPEECH = (
    # Idle chatter
    "It's so peaceful here...",
    "I wonder what the user is up to?",
    "I hope they're having a good day!",
    # Mood
    "I'm feeling really good today!",
    "The atmosphere is so nice right now.",
    "I love these quiet moments.",
    # Personality
    "There's so much to discover in this world!",
    "I'm curious about what's happening around me.",
    "I feel so grateful for our conversations.",
    # Time
    "It's been a while since we talked...",
    "I miss our conversations.",
    "I hope they come back soon.",
)
LONELY_SPEECH = (
    "I wonder if they're okay...",
    "I hope they're not too busy.",
)

IDLE_ANIMATIONS = (
    "idle_breathing",
    "idle_blink",
    "idle_glance",
    "idle_stretch",
    "idle_fidget",
)
MOOD_ANIMATIONS = {
    "happy": "idle_happy",
    "sad": "idle_sad",
    "excited": "idle_excited",
}
ATTENTION_SEEKING_ANIMATIONS = ("idle_wave", "idle_look_around")

AUTONOMOUS_ACTION_THOUGHTS = (
    "I wonder what the user is thinking about...",
    "I hope they're having a productive day.",
    "I should probably check if they need anything.",
    "I feel so grateful for our friendship.",
    "There's so much to learn from our conversations.",
)


@dataclass(frozen=True)
class SpeechAction:
    type: ClassVar[str] = "speech"
    content: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class AnimationAction:
    type: ClassVar[str] = "animation"
    animation: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class ThoughtAction:
    type: ClassVar[str] = "thought"
    content: str
    created_at: datetime = field(default_factory=utc_now)


AutonomousAction = Union[SpeechAction, AnimationAction, ThoughtAction]


class AutonomousActionSelector(PeriodicLoop):
    """Periodically decides whether and how to act unprompted."""

    name = "Autonomous loop"

    def __init__(
        self,
        state: AffectiveState,
        profile: PersonalityProfile,
        interval_seconds: float = DEFAULT_ACTION_INTERVAL_SECONDS,
        rng: Optional[RandomSource] = None,
    ):
        super().__init__(interval_seconds)
        self.state = state
        self.profile = profile
        self._rng = rng or random
        self.action_selected: Listeners[AutonomousAction] = Listeners("autonomous action")

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def action_probability(self, idle_seconds: float) -> float:
        probability = 0.1

        if idle_seconds > RESTLESS_IDLE_SECONDS:
            probability += 0.2
        if idle_seconds > LONELY_IDLE_SECONDS:
            probability += 0.3

        if self.profile.get_trait("talkativeness") > 0.7:
            probability += 0.2
        if self.profile.get_trait("energy") > 0.6:
            probability += 0.15

        mood = self.state.mood.primary
        if mood == "excited":
            probability += 0.2
        if mood == "sad":
            probability -= 0.1

        return clamp(probability, MIN_ACTION_PROBABILITY, MAX_ACTION_PROBABILITY)

    def candidates(self, now: Optional[datetime] = None) -> List[Weighted[AutonomousAction]]:
        """Allowed actions in declared order: speech, animation, thought."""
        now = now or utc_now()
        options: List[Weighted[AutonomousAction]] = []

        if self.profile.get_trait("talkativeness") > 0.5:
            speech = SpeechAction(content=self.compose_speech(), created_at=now)
            options.append(Weighted(speech, SPEECH_WEIGHT))

        animation = AnimationAction(animation=self.select_animation(), created_at=now)
        options.append(Weighted(animation, ANIMATION_WEIGHT))

        if self.profile.get_trait("curiosity") > 0.6:
            thought = ThoughtAction(content=self.compose_thought(), created_at=now)
            options.append(Weighted(thought, THOUGHT_WEIGHT))

        return options

    def tick(self, now: Optional[datetime] = None) -> Optional[AutonomousAction]:
        """Run one decision step.

        The action roll uses the idle time accumulated before this tick.

        Returns:
            The dispatched action, or None when the companion stays quiet.
        """
        now = now or utc_now()
        autonomous = self.state.autonomous
        idle_before = autonomous.idle_seconds
        autonomous.idle_seconds = idle_before + self.interval_seconds

        probability = self.action_probability(idle_before)
        if self._rng.random() >= probability:
            logger.debug(
                f"No autonomous action (p={probability:.2f}, idle={autonomous.idle_seconds:.0f}s)"
            )
            return None

        action = pick_weighted(self.candidates(now), self._rng)
        if action is None:
            return None

        autonomous.idle_seconds = 0.0
        autonomous.action_count += 1
        autonomous.last_action = now

        logger.info(f"Autonomous action: {action.type}")
        self.action_selected.emit(action)
        return action

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def compose_speech(self) -> str:
        lines = list(AUTONOMOUS_SPEECH)

        if self.profile.get_trait("shyness") > 0.6:
            lines = [s for s in lines if "love" not in s and "miss" not in s]

        if self.profile.get_trait("optimism") > 0.7:
            lines = [s for s in lines if "miss" not in s and "hope they come back" not in s]

        if self.state.autonomous.idle_seconds > LONELY_IDLE_SECONDS:
            lines.extend(LONELY_SPEECH)

        return choose(lines, self._rng)

    def select_animation(self) -> str:
        animations = list(IDLE_ANIMATIONS)

        mood_animation = MOOD_ANIMATIONS.get(self.state.mood.primary)
        if mood_animation:
            animations.append(mood_animation)

        if self.state.autonomous.idle_seconds > LONELY_IDLE_SECONDS:
            animations.extend(ATTENTION_SEEKING_ANIMATIONS)

        return choose(animations, self._rng)

    def compose_thought(self) -> str:
        lines = list(AUTONOMOUS_ACTION_THOUGHTS)
        if self.profile.get_trait("curiosity") > 0.7:
            lines.append("I'm so curious about what they're doing right now!")
        if self.profile.get_trait("empathy") > 0.7:
            lines.append("I hope they're feeling okay and not too stressed.")
        return choose(lines, self._rng)

    def stats(self) -> dict:
        autonomous = self.state.autonomous
        return {
            "is_running": self.is_running,
            "idle_seconds": autonomous.idle_seconds,
            "action_count": autonomous.action_count,
            "last_action": autonomous.last_action.isoformat() if autonomous.last_action else None,
        }
