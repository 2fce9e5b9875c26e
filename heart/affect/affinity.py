"""Relationship affinity between the companion and the user.

Each interaction contributes a small additive delta built from the detected
emotion, message length, greetings, thanks and questions. Personality then
scales the delta before it is applied to ``state.affinity``.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from heart.affect.state import NEGATIVE_EMOTIONS, POSITIVE_EMOTIONS, AffectiveState, EmotionSample
from heart.personality.profile import PersonalityProfile
from heart.utils.clock import clamp

logger = logging.getLogger(__name__)


GREETINGS = ("hello", "hi", "hey", "good morning", "good afternoon", "good evening")
THANKS = ("thank", "thanks")
QUESTION_WORDS = ("what", "how", "why")

# Delta terms
POSITIVE_EMOTION_WEIGHT = 0.05
NEGATIVE_EMOTION_WEIGHT = 0.02
LONG_MESSAGE_CHARS = 50
LONG_MESSAGE_BONUS = 0.02
SHORT_MESSAGE_CHARS = 10
SHORT_MESSAGE_PENALTY = 0.01
GREETING_BONUS = 0.03
THANKS_BONUS = 0.04
QUESTION_BONUS = 0.02

# Personality scaling
EMPATHY_THRESHOLD = 0.7
EMPATHY_MULTIPLIER = 1.2
SHYNESS_THRESHOLD = 0.6
SHYNESS_MULTIPLIER = 0.8
OPTIMISM_THRESHOLD = 0.7
OPTIMISM_FLOOR = -0.01

# Level boundaries, checked from the top
AFFINITY_LEVELS = (
    (0.8, "very_high"),
    (0.6, "high"),
    (0.4, "medium"),
    (0.2, "low"),
)

AFFINITY_DESCRIPTIONS = {
    "very_high": "We have a very close and trusting relationship! 💕",
    "high": "I really enjoy our conversations and feel close to you! 😊",
    "medium": "I'm getting to know you better and enjoying our time together.",
    "low": "I'm still learning about you, but I'm here to chat!",
    "very_low": "I'm here to help and get to know you better.",
}


@dataclass(frozen=True)
class ResponseStyle:
    """How the companion should pitch a reply at the current affinity.

    formal: affinity < 0.3
    friendly: 0.3 <= affinity < 0.7
    close: affinity >= 0.7
    playful: affinity > 0.6 and playfulness > 0.5
    supportive: affinity > 0.5 and empathy > 0.6
    """

    formal: bool
    friendly: bool
    close: bool
    playful: bool
    supportive: bool

    def to_dict(self) -> dict:
        return asdict(self)


def affinity_level(affinity: float) -> str:
    for threshold, level in AFFINITY_LEVELS:
        if affinity >= threshold:
            return level
    return "very_low"


class AffinityUpdater:
    """Computes and applies affinity deltas."""

    def compute_delta(self, input_text: str, sample: EmotionSample) -> float:
        """Raw delta before personality scaling."""
        text = input_text or ""
        lowered = text.lower()
        delta = 0.0

        if sample.emotion in POSITIVE_EMOTIONS:
            delta += POSITIVE_EMOTION_WEIGHT * sample.intensity
        if sample.emotion in NEGATIVE_EMOTIONS:
            delta -= NEGATIVE_EMOTION_WEIGHT * sample.intensity

        if len(text) > LONG_MESSAGE_CHARS:
            delta += LONG_MESSAGE_BONUS
        elif len(text) < SHORT_MESSAGE_CHARS:
            delta -= SHORT_MESSAGE_PENALTY

        if any(greeting in lowered for greeting in GREETINGS):
            delta += GREETING_BONUS

        if any(word in lowered for word in THANKS):
            delta += THANKS_BONUS

        if "?" in text or any(word in lowered for word in QUESTION_WORDS):
            delta += QUESTION_BONUS

        return delta

    def apply_personality(self, delta: float, profile: PersonalityProfile) -> float:
        if profile.get_trait("empathy") > EMPATHY_THRESHOLD:
            delta *= EMPATHY_MULTIPLIER
        if profile.get_trait("shyness") > SHYNESS_THRESHOLD:
            delta *= SHYNESS_MULTIPLIER
        if profile.get_trait("optimism") > OPTIMISM_THRESHOLD:
            delta = max(delta, OPTIMISM_FLOOR)
        return delta

    def update(
        self,
        state: AffectiveState,
        input_text: str,
        sample: EmotionSample,
        profile: PersonalityProfile,
    ) -> float:
        """Apply one interaction's delta to ``state.affinity``.

        Returns:
            The new affinity, clamped to [0, 1].
        """
        previous = state.affinity
        delta = self.apply_personality(self.compute_delta(input_text, sample), profile)
        state.affinity = clamp(previous + delta, 0.0, 1.0)

        old_level = affinity_level(previous)
        new_level = affinity_level(state.affinity)
        if old_level != new_level:
            logger.info(
                f"Affinity level {old_level} -> {new_level} "
                f"({previous:.2f} -> {state.affinity:.2f})"
            )
        else:
            logger.debug(f"Affinity updated: {previous:.2f} -> {state.affinity:.2f}")

        return state.affinity

    # ------------------------------------------------------------------
    # Derived queries
    # ------------------------------------------------------------------

    def level(self, state: AffectiveState) -> str:
        return affinity_level(state.affinity)

    def describe(self, state: AffectiveState) -> str:
        return AFFINITY_DESCRIPTIONS[self.level(state)]

    def should_show_affection(self, state: AffectiveState) -> bool:
        return state.affinity > 0.6

    def response_style(self, state: AffectiveState, profile: PersonalityProfile) -> ResponseStyle:
        affinity = state.affinity
        return ResponseStyle(
            formal=affinity < 0.3,
            friendly=0.3 <= affinity < 0.7,
            close=affinity >= 0.7,
            playful=affinity > 0.6 and profile.get_trait("playfulness") > 0.5,
            supportive=affinity > 0.5 and profile.get_trait("empathy") > 0.6,
        )
