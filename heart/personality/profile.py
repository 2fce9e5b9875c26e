"""Personality profile: trait weights plus emotion and behavior configuration.

The profile is built once per session from configuration and only changes
through the explicit trait-edit methods. Trait lookups never fail: a trait
that is not configured reads as ``DEFAULT_TRAIT_VALUE``.

Profiles can be loaded from JSON written either with the snake_case field
names used here or with the camelCase keys of the companion's web config
(``baseTraits``, ``speechBehavior``, ``thoughtBehavior``, ...).
"""

from __future__ import annotations

import json
import logging
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from heart.utils.clock import clamp
from heart.utils.weighted import RandomSource

logger = logging.getLogger(__name__)


DEFAULT_TRAIT_VALUE = 0.5

# Emotion used when an emotion name has no table entry
FALLBACK_EMOTION = "calm"


class VoiceModifier(BaseModel):
    """Pitch/speed multipliers handed to the voice collaborator."""

    model_config = ConfigDict(frozen=True)

    pitch: float = Field(default=1.0, gt=0)
    speed: float = Field(default=1.0, gt=0)


class EmotionConfig(BaseModel):
    """How one emotion is weighted and expressed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_intensity: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("base_intensity", "baseIntensity", "intensity"),
    )
    animation: str = "idle_calm"
    voice_modifier: VoiceModifier = Field(
        default_factory=VoiceModifier,
        validation_alias=AliasChoices("voice_modifier", "voiceModifier"),
    )
    blendshape: str = "neutral"


NEUTRAL_EMOTION = EmotionConfig()


def default_emotion_table() -> Dict[str, EmotionConfig]:
    """Emotion table used when configuration supplies none."""
    return {
        "happy": EmotionConfig(
            base_intensity=0.8,
            animation="idle_happy",
            voice_modifier=VoiceModifier(pitch=1.1, speed=1.1),
            blendshape="smile",
        ),
        "sad": EmotionConfig(
            base_intensity=0.6,
            animation="idle_sad",
            voice_modifier=VoiceModifier(pitch=0.9, speed=0.85),
            blendshape="frown",
        ),
        "angry": EmotionConfig(
            base_intensity=0.7,
            animation="idle_angry",
            voice_modifier=VoiceModifier(pitch=0.95, speed=1.15),
            blendshape="angry",
        ),
        "surprised": EmotionConfig(
            base_intensity=0.9,
            animation="idle_surprised",
            voice_modifier=VoiceModifier(pitch=1.2, speed=1.1),
            blendshape="surprised",
        ),
        "calm": EmotionConfig(
            base_intensity=0.5,
            animation="idle_calm",
            voice_modifier=VoiceModifier(pitch=1.0, speed=0.95),
            blendshape="neutral",
        ),
        "excited": EmotionConfig(
            base_intensity=0.9,
            animation="idle_excited",
            voice_modifier=VoiceModifier(pitch=1.15, speed=1.2),
            blendshape="grin",
        ),
    }


class SpeechConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    max_response_length: int = Field(
        default=200,
        gt=0,
        validation_alias=AliasChoices("max_response_length", "maxResponseLength"),
    )
    use_emojis: bool = Field(
        default=True, validation_alias=AliasChoices("use_emojis", "useEmojis")
    )
    use_contractions: bool = Field(
        default=True, validation_alias=AliasChoices("use_contractions", "useContractions")
    )


class ThoughtConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    autonomous_thoughts_enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "autonomous_thoughts_enabled", "autonomousThoughtsEnabled", "autonomousThoughts"
        ),
    )
    thought_frequency: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("thought_frequency", "thoughtFrequency"),
    )
    public_thought_probability: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices(
            "public_thought_probability", "publicThoughtProbability", "publicThoughts"
        ),
    )


# (trait, threshold, adjective) used to summarize a personality for prompts
SUMMARY_ADJECTIVES = [
    ("optimism", 0.7, "optimistic"),
    ("empathy", 0.7, "empathetic"),
    ("playfulness", 0.7, "playful"),
    ("intelligence", 0.8, "intelligent"),
    ("shyness", 0.6, "shy"),
    ("sarcasm", 0.5, "sarcastic"),
    ("creativity", 0.6, "creative"),
    ("analytical", 0.6, "analytical"),
    ("artistic", 0.5, "artistic"),
    ("scientific", 0.7, "scientific"),
    ("romanticism", 0.5, "romantic"),
    ("spirituality", 0.5, "spiritual"),
    ("competitiveness", 0.5, "competitive"),
    ("perfectionism", 0.6, "perfectionist"),
    ("impulsiveness", 0.5, "impulsive"),
    ("introversion", 0.6, "introverted"),
    ("extroversion", 0.6, "extroverted"),
]


class PersonalityProfile(BaseModel):
    """Trait weights and emotion/behavior configuration for one companion.

    Attributes:
        name: Display name used in prompt context
        description: Free-form description
        traits: Base trait weights in [0, 1]
        custom_traits: Additional user-defined traits in [0, 1]
        emotions: Emotion table keyed by emotion name
        speech: Response generation options
        thoughts: Thought generation options
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    name: str = "Heart"
    description: str = ""
    traits: Dict[str, float] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("traits", "baseTraits", "base_traits"),
    )
    custom_traits: Dict[str, float] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("custom_traits", "customTraits"),
    )
    emotions: Dict[str, EmotionConfig] = Field(default_factory=default_emotion_table)
    speech: SpeechConfig = Field(
        default_factory=SpeechConfig,
        validation_alias=AliasChoices("speech", "speechBehavior", "speech_config"),
    )
    thoughts: ThoughtConfig = Field(
        default_factory=ThoughtConfig,
        validation_alias=AliasChoices("thoughts", "thoughtBehavior", "thought_config"),
    )

    @field_validator("traits", "custom_traits")
    @classmethod
    def _clamp_traits(cls, value: Dict[str, float]) -> Dict[str, float]:
        return {name: clamp(float(v), 0.0, 1.0) for name, v in value.items()}

    # ------------------------------------------------------------------
    # Trait access
    # ------------------------------------------------------------------

    def get_trait(self, name: str) -> float:
        """Trait value, checking base then custom traits, else 0.5."""
        if name in self.traits:
            return self.traits[name]
        if name in self.custom_traits:
            return self.custom_traits[name]
        return DEFAULT_TRAIT_VALUE

    def has_trait(self, name: str, threshold: float = 0.5) -> bool:
        return self.get_trait(name) > threshold

    def all_traits(self) -> Dict[str, float]:
        return {**self.traits, **self.custom_traits}

    def trait_names(self) -> Dict[str, List[str]]:
        base = list(self.traits)
        custom = list(self.custom_traits)
        return {"base": base, "custom": custom, "all": base + custom}

    def update_trait(self, name: str, value: float) -> float:
        """Set a trait, updating the base trait if one exists by that name.

        Returns:
            The stored (clamped) value.
        """
        normalized = clamp(float(value), 0.0, 1.0)
        if name in self.traits:
            self.traits[name] = normalized
            logger.info(f"Updated base trait: {name} = {normalized:.2f}")
        else:
            self.custom_traits[name] = normalized
            logger.info(f"Updated custom trait: {name} = {normalized:.2f}")
        return normalized

    def add_custom_trait(self, name: str, value: float) -> float:
        normalized = clamp(float(value), 0.0, 1.0)
        self.custom_traits[name] = normalized
        logger.info(f"Added custom trait: {name} = {normalized:.2f}")
        return normalized

    def remove_custom_trait(self, name: str) -> bool:
        if name not in self.custom_traits:
            return False
        del self.custom_traits[name]
        logger.info(f"Removed custom trait: {name}")
        return True

    # ------------------------------------------------------------------
    # Emotions and behavior
    # ------------------------------------------------------------------

    def emotion(self, name: str) -> EmotionConfig:
        """Emotion config, falling back to calm and then a neutral default."""
        config = self.emotions.get(name)
        if config is not None:
            return config
        logger.debug(f"No emotion config for '{name}', using fallback")
        return self.emotions.get(FALLBACK_EMOTION, NEUTRAL_EMOTION)

    def should_respond(self, rng: Optional[RandomSource] = None) -> bool:
        """Talkativeness-weighted coin flip."""
        rng = rng or random
        return rng.random() < self.get_trait("talkativeness")

    def summary(self) -> str:
        """Comma-separated adjectives describing the dominant traits."""
        return ", ".join(
            adjective
            for trait, threshold, adjective in SUMMARY_ADJECTIVES
            if self.get_trait(trait) > threshold
        )

    def export(self) -> dict:
        data = self.model_dump(mode="json")
        data["export_date"] = datetime.now(timezone.utc).isoformat()
        return data


def load_profile(path: Optional[Union[str, Path]] = None) -> PersonalityProfile:
    """Load a profile from JSON, falling back to defaults.

    A missing or malformed file is logged and never raised, so a session
    can always start.
    """
    if path is None:
        return PersonalityProfile()

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        profile = PersonalityProfile.model_validate(data)
        logger.info(f"Loaded personality '{profile.name}' from {path}")
        return profile
    except FileNotFoundError:
        logger.warning(f"Personality file {path} not found, using defaults")
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Invalid personality file {path}: {e}; using defaults")
    return PersonalityProfile()
