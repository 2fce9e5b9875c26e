"""Mood updates driven by the emotion detected in user input.

The detected emotion proposes a candidate mood whose intensity is scaled by
the emotion's configured base intensity and by personality, then blended
into the current mood so a single message only nudges it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from heart.affect.state import (
    MAX_MOOD_INTENSITY,
    MIN_MOOD_INTENSITY,
    POSITIVE_EMOTIONS,
    AffectiveState,
    EmotionSample,
    Mood,
)
from heart.events import Listeners
from heart.personality.profile import PersonalityProfile
from heart.utils.clock import clamp, utc_now

logger = logging.getLogger(__name__)


# Share of the candidate mood blended into the current one
BLEND_FACTOR = 0.3

OPTIMISM_GAIN = 0.3
EMPATHY_GAIN = 0.2
SHYNESS_THRESHOLD = 0.5
SHYNESS_DAMPING = 0.8

DEFAULT_ANIMATION = "idle_calm"
DEFAULT_EXPRESSION = "neutral"


@dataclass(frozen=True)
class VoiceProjection:
    pitch: float
    speed: float
    intensity: float

    def to_dict(self) -> dict:
        return {"pitch": self.pitch, "speed": self.speed, "intensity": self.intensity}


@dataclass(frozen=True)
class MoodProjection:
    """Read-only view of the current mood for rendering and voice."""

    emotion: str
    animation_cue: str
    voice_modifier: VoiceProjection
    expression: str

    def to_dict(self) -> dict:
        return {
            "emotion": self.emotion,
            "animationCue": self.animation_cue,
            "voiceModifier": self.voice_modifier.to_dict(),
            "expression": self.expression,
        }


class MoodUpdater:
    """Blends detected emotions into the session mood."""

    def __init__(self, blend_factor: float = BLEND_FACTOR):
        self.blend_factor = blend_factor
        self.mood_changed: Listeners[Mood] = Listeners("mood change")

    def candidate_intensity(
        self,
        state: AffectiveState,
        sample: EmotionSample,
        profile: PersonalityProfile,
    ) -> float:
        """Candidate intensity after emotion weighting and personality."""
        base = profile.emotion(sample.emotion).base_intensity
        intensity = min(1.0, sample.intensity * base)

        if sample.emotion in POSITIVE_EMOTIONS:
            intensity *= 1 + profile.get_trait("optimism") * OPTIMISM_GAIN
        intensity *= 1 + profile.get_trait("empathy") * EMPATHY_GAIN
        if profile.get_trait("shyness") > SHYNESS_THRESHOLD:
            intensity *= SHYNESS_DAMPING

        return intensity

    def update(
        self,
        state: AffectiveState,
        sample: EmotionSample,
        profile: PersonalityProfile,
        now: Optional[datetime] = None,
    ) -> Mood:
        """Replace ``state.mood`` with the blended mood and notify listeners."""
        current = state.mood
        candidate = self.candidate_intensity(state, sample, profile)

        blended = current.intensity * (1 - self.blend_factor) + candidate * self.blend_factor
        new_mood = Mood(
            primary=sample.emotion,
            secondary=current.primary,
            intensity=clamp(blended, MIN_MOOD_INTENSITY, MAX_MOOD_INTENSITY),
            last_update=now or utc_now(),
        )
        state.mood = new_mood

        logger.info(
            f"Mood updated: {current.primary} ({current.intensity:.2f}) -> "
            f"{new_mood.primary} ({new_mood.intensity:.2f})"
        )
        self.mood_changed.emit(new_mood)
        return new_mood

    # ------------------------------------------------------------------
    # Projections for the rendering and voice collaborators
    # ------------------------------------------------------------------

    def animation_cue(self, state: AffectiveState, profile: PersonalityProfile) -> str:
        config = profile.emotions.get(state.mood.primary)
        return config.animation if config else DEFAULT_ANIMATION

    def expression_tag(self, state: AffectiveState, profile: PersonalityProfile) -> str:
        config = profile.emotions.get(state.mood.primary)
        return config.blendshape if config else DEFAULT_EXPRESSION

    def voice_modifier(self, state: AffectiveState, profile: PersonalityProfile) -> VoiceProjection:
        config = profile.emotions.get(state.mood.primary)
        if config is None:
            return VoiceProjection(pitch=1.0, speed=1.0, intensity=state.mood.intensity)
        return VoiceProjection(
            pitch=config.voice_modifier.pitch,
            speed=config.voice_modifier.speed,
            intensity=state.mood.intensity,
        )

    def projection(self, state: AffectiveState, profile: PersonalityProfile) -> MoodProjection:
        return MoodProjection(
            emotion=state.mood.primary,
            animation_cue=self.animation_cue(state, profile),
            voice_modifier=self.voice_modifier(state, profile),
            expression=self.expression_tag(state, profile),
        )
