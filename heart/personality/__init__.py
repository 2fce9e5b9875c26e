"""Personality model: traits, emotion table, behavior configuration."""
from heart.personality.profile import (
    DEFAULT_TRAIT_VALUE,
    EmotionConfig,
    PersonalityProfile,
    SpeechConfig,
    ThoughtConfig,
    VoiceModifier,
    default_emotion_table,
    load_profile,
)

__all__ = [
    "DEFAULT_TRAIT_VALUE",
    "EmotionConfig",
    "PersonalityProfile",
    "SpeechConfig",
    "ThoughtConfig",
    "VoiceModifier",
    "default_emotion_table",
    "load_profile",
]
