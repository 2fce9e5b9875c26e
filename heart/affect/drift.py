"""Time-driven mood and boredom drift.

Runs on a fixed period with no triggering message. Each tick looks at how
long the user has been idle and:

1. Drifts mood intensity: decay toward neutral after 10 idle minutes,
   plus emotion-specific adjustments (excitement and surprise fade, anger
   and lingering sadness push back up) and personality adjustments.
2. Grows boredom after 2 idle minutes and derives engagement from it.

Engagement set here overrides the interaction-based value until the next
interaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from heart.affect.state import MAX_MOOD_INTENSITY, MIN_MOOD_INTENSITY, AffectiveState, Mood
from heart.personality.profile import PersonalityProfile
from heart.utils.clock import clamp, minutes_between, utc_now
from heart.utils.periodic import PeriodicLoop

logger = logging.getLogger(__name__)


DEFAULT_DRIFT_INTERVAL_SECONDS = 60.0

# Intensity decay toward neutral
NEUTRAL_DECAY_AFTER_MINUTES = 10.0
NEUTRAL_DECAY_PER_MINUTE = 0.005
NEUTRAL_DECAY_MAX = 0.1

# Per-emotion drift applied on every tick
EMOTION_DRIFT = {
    "excited": -0.03,
    "angry": 0.05,
    "surprised": -0.04,
}
SAD_DRIFT = 0.02
SAD_DRIFT_AFTER_MINUTES = 5.0

OPTIMISM_THRESHOLD = 0.7
OPTIMISM_RECOVERY = 0.02
SHYNESS_THRESHOLD = 0.6
SHYNESS_DAMPING = 0.5

# Changes at or below this are ignored
MIN_APPLIED_DRIFT = 0.01

# Boredom growth
BOREDOM_AFTER_MINUTES = 2.0
BOREDOM_PER_MINUTE = 0.02
BOREDOM_MAX_STEP = 0.1
ENERGY_THRESHOLD = 0.7
ENERGY_BOREDOM_MULTIPLIER = 1.5
CURIOSITY_THRESHOLD = 0.8
CURIOSITY_BOREDOM_MULTIPLIER = 1.2


@dataclass(frozen=True)
class DriftResult:
    """What one drift tick did."""

    idle_minutes: float
    intensity_drift: float
    intensity_applied: bool
    boredom_delta: float


def compute_intensity_drift(
    idle_minutes: float, mood: Mood, profile: PersonalityProfile
) -> float:
    drift = 0.0

    if idle_minutes > NEUTRAL_DECAY_AFTER_MINUTES:
        drift -= min(
            NEUTRAL_DECAY_MAX,
            (idle_minutes - NEUTRAL_DECAY_AFTER_MINUTES) * NEUTRAL_DECAY_PER_MINUTE,
        )

    drift += EMOTION_DRIFT.get(mood.primary, 0.0)
    if mood.primary == "sad" and idle_minutes > SAD_DRIFT_AFTER_MINUTES:
        drift += SAD_DRIFT

    if profile.get_trait("optimism") > OPTIMISM_THRESHOLD and mood.primary in ("sad", "angry"):
        drift += OPTIMISM_RECOVERY

    if profile.get_trait("shyness") > SHYNESS_THRESHOLD:
        drift *= SHYNESS_DAMPING

    return drift


def compute_boredom_delta(idle_minutes: float, profile: PersonalityProfile) -> float:
    if idle_minutes <= BOREDOM_AFTER_MINUTES:
        return 0.0

    delta = min(BOREDOM_MAX_STEP, (idle_minutes - BOREDOM_AFTER_MINUTES) * BOREDOM_PER_MINUTE)
    if profile.get_trait("energy") > ENERGY_THRESHOLD:
        delta *= ENERGY_BOREDOM_MULTIPLIER
    if profile.get_trait("curiosity") > CURIOSITY_THRESHOLD:
        delta *= CURIOSITY_BOREDOM_MULTIPLIER
    return delta


class MoodDriftScheduler(PeriodicLoop):
    """Periodic mood/boredom drift for one session's state."""

    name = "Mood drift"

    def __init__(
        self,
        state: AffectiveState,
        profile: PersonalityProfile,
        interval_seconds: float = DEFAULT_DRIFT_INTERVAL_SECONDS,
    ):
        super().__init__(interval_seconds)
        self.state = state
        self.profile = profile
        self.last_result: Optional[DriftResult] = None

    def tick(self, now: Optional[datetime] = None) -> DriftResult:
        """Apply one drift step."""
        now = now or utc_now()
        state = self.state
        idle = minutes_between(state.attention.last_interaction, now)

        drift = compute_intensity_drift(idle, state.mood, self.profile)
        applied = abs(drift) > MIN_APPLIED_DRIFT
        if applied:
            before = state.mood.intensity
            state.mood.intensity = clamp(before + drift, MIN_MOOD_INTENSITY, MAX_MOOD_INTENSITY)
            state.mood.last_update = now
            logger.debug(f"Mood drifted: {before:.2f} -> {state.mood.intensity:.2f}")

        boredom_delta = compute_boredom_delta(idle, self.profile)
        state.attention.boredom = clamp(state.attention.boredom + boredom_delta, 0.0, 1.0)
        state.attention.engagement = clamp(1.0 - state.attention.boredom, 0.0, 1.0)

        self.last_result = DriftResult(
            idle_minutes=idle,
            intensity_drift=drift,
            intensity_applied=applied,
            boredom_delta=boredom_delta,
        )
        return self.last_result

    def stats(self, now: Optional[datetime] = None) -> dict:
        return {
            "is_running": self.is_running,
            "idle_minutes": minutes_between(self.state.attention.last_interaction, now or utc_now()),
            "mood": self.state.mood.to_dict(),
            "boredom": self.state.attention.boredom,
            "engagement": self.state.attention.engagement,
        }
