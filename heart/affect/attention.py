"""Engagement and boredom tracking.

An interaction lowers boredom and raises engagement. Idle time (minutes
since the last interaction) drives the check-in decisions. Time-based
boredom growth lives in the drift scheduler.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Optional

from heart.affect.state import AffectiveState
from heart.personality.profile import PersonalityProfile
from heart.utils.clock import minutes_between, utc_now
from heart.utils.weighted import RandomSource

logger = logging.getLogger(__name__)


BOREDOM_RELIEF = 0.3
ENGAGEMENT_GAIN = 0.2
ENERGY_THRESHOLD = 0.7
ENERGY_ENGAGEMENT_BONUS = 0.1

CHECK_IN_IDLE_MINUTES = 5.0
STILL_THERE_IDLE_MINUTES = 3.0
MISSING_USER_IDLE_MINUTES = 10.0

ATTENTION_DESCRIPTIONS = {
    "high": "I'm fully engaged and paying attention! 😊",
    "medium": "I'm here and listening to you.",
    "low": "I'm getting a bit distracted... Are you still there?",
}


class AttentionTracker:
    """Applies interaction-driven attention changes and idle checks."""

    def __init__(self, rng: Optional[RandomSource] = None):
        self._rng = rng or random

    def idle_minutes(self, state: AffectiveState, now: Optional[datetime] = None) -> float:
        return minutes_between(state.attention.last_interaction, now or utc_now())

    def on_interaction(
        self,
        state: AffectiveState,
        profile: PersonalityProfile,
        now: Optional[datetime] = None,
    ) -> None:
        """Record an interaction: boredom down, engagement up."""
        attention = state.attention
        attention.last_interaction = now or utc_now()
        attention.interaction_count += 1

        attention.boredom = max(0.0, attention.boredom - BOREDOM_RELIEF)
        engagement = min(1.0, attention.engagement + ENGAGEMENT_GAIN)
        if profile.get_trait("energy") > ENERGY_THRESHOLD:
            engagement = min(1.0, engagement + ENERGY_ENGAGEMENT_BONUS)
        attention.engagement = engagement

        logger.debug(
            f"Engagement updated (interaction #{attention.interaction_count}): "
            f"engagement={attention.engagement:.2f} boredom={attention.boredom:.2f}"
        )

    def check_in_probability(self, state: AffectiveState, profile: PersonalityProfile) -> float:
        probability = 0.1
        if state.attention.boredom > 0.5:
            probability += 0.2
        if profile.get_trait("empathy") > 0.7:
            probability += 0.15
        if profile.get_trait("curiosity") > 0.8:
            probability += 0.1
        return probability

    def should_check_on_user(
        self,
        state: AffectiveState,
        profile: PersonalityProfile,
        now: Optional[datetime] = None,
    ) -> bool:
        """Randomly decide to check on a user who has been away > 5 minutes."""
        if self.idle_minutes(state, now) <= CHECK_IN_IDLE_MINUTES:
            return False
        return self._rng.random() < self.check_in_probability(state, profile)

    def should_ask_if_still_there(
        self, state: AffectiveState, now: Optional[datetime] = None
    ) -> bool:
        return self.idle_minutes(state, now) > STILL_THERE_IDLE_MINUTES

    def level(self, state: AffectiveState) -> str:
        engagement = state.attention.engagement
        boredom = state.attention.boredom
        if engagement > 0.8 and boredom < 0.2:
            return "high"
        if engagement > 0.5 and boredom < 0.5:
            return "medium"
        return "low"

    def describe(self, state: AffectiveState, now: Optional[datetime] = None) -> str:
        if self.idle_minutes(state, now) > MISSING_USER_IDLE_MINUTES:
            return "It's been a while since we talked. I miss you! 💕"
        return ATTENTION_DESCRIPTIONS[self.level(state)]

    def stats(self, state: AffectiveState, now: Optional[datetime] = None) -> dict:
        return {
            "interaction_count": state.attention.interaction_count,
            "idle_minutes": self.idle_minutes(state, now),
            "engagement": state.attention.engagement,
            "boredom": state.attention.boredom,
            "attention_level": self.level(state),
        }
