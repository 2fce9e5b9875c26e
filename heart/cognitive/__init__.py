"""Thought generation and autonomous behavior."""
from heart.cognitive.autonomous import (
    AnimationAction,
    AutonomousAction,
    AutonomousActionSelector,
    SpeechAction,
    ThoughtAction,
)
from heart.cognitive.thoughts import ThoughtGenerator

__all__ = [
    "AnimationAction",
    "AutonomousAction",
    "AutonomousActionSelector",
    "SpeechAction",
    "ThoughtAction",
    "ThoughtGenerator",
]
