"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from heart.affect.state import AffectiveState, Attention, Mood
from heart.personality.profile import PersonalityProfile


class ScriptedRandom:
    """Deterministic stand-in for ``random`` returning queued values.

    Once the script is exhausted, every further draw returns ``fallback``.
    """

    def __init__(self, *values: float, fallback: float = 0.99):
        self.values = list(values)
        self.fallback = fallback
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        if self.values:
            return self.values.pop(0)
        return self.fallback


@pytest.fixture
def now():
    """Fixed reference time."""
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def minutes_ago(now):
    def _ago(minutes: float) -> datetime:
        return now - timedelta(minutes=minutes)

    return _ago


@pytest.fixture
def profile():
    """Profile with every trait at the 0.5 default."""
    return PersonalityProfile()


@pytest.fixture
def make_profile():
    def _make(**traits) -> PersonalityProfile:
        return PersonalityProfile(traits=traits)

    return _make


@pytest.fixture
def state(now):
    """Fresh state whose last interaction is ``now``."""
    return AffectiveState(
        mood=Mood(last_update=now),
        attention=Attention(last_interaction=now),
    )


@pytest.fixture
def scripted():
    return ScriptedRandom
