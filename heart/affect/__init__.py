"""Affective state and the components that update it."""
from heart.affect.affinity import AffinityUpdater, ResponseStyle, affinity_level
from heart.affect.attention import AttentionTracker
from heart.affect.classifier import EMOTION_LEXICON, EmotionClassifier
from heart.affect.drift import DriftResult, MoodDriftScheduler
from heart.affect.mood import MoodProjection, MoodUpdater, VoiceProjection
from heart.affect.state import (
    AffectiveState,
    Attention,
    AutonomousState,
    EmotionSample,
    Mood,
    Thought,
)

__all__ = [
    "AffectiveState",
    "AffinityUpdater",
    "Attention",
    "AttentionTracker",
    "AutonomousState",
    "DriftResult",
    "EMOTION_LEXICON",
    "EmotionClassifier",
    "EmotionSample",
    "Mood",
    "MoodDriftScheduler",
    "MoodProjection",
    "MoodUpdater",
    "ResponseStyle",
    "Thought",
    "VoiceProjection",
    "affinity_level",
]
