"""Companion session: owns the affective state and wires the components.

A session holds exactly one ``AffectiveState`` and passes that same object
to every component. User messages enter through ``process_user_input``;
two background loops (mood drift, autonomous actions) mutate the state on
their own timers.

Everything runs on one asyncio event loop. Tick bodies and each step of
the interaction pipeline are synchronous, so no update is ever
interleaved with another; the only await in the pipeline is the external
response generator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol

from heart.affect.affinity import AffinityUpdater
from heart.affect.attention import AttentionTracker
from heart.affect.classifier import EmotionClassifier
from heart.affect.drift import MoodDriftScheduler
from heart.affect.mood import MoodProjection, MoodUpdater
from heart.affect.state import AffectiveState, EmotionSample, Mood, Thought
from heart.cognitive.autonomous import AutonomousAction, AutonomousActionSelector, ThoughtAction
from heart.cognitive.thoughts import ThoughtGenerator
from heart.memory.store import ConversationMemoryStore
from heart.personality.profile import PersonalityProfile, load_profile
from heart.speech.responder import Responder, ResponseGenerator
from heart.utils.clock import utc_now
from heart.utils.weighted import RandomSource

if TYPE_CHECKING:
    from heart.config.settings import HeartSettings

logger = logging.getLogger(__name__)


class PersistenceSink(Protocol):
    """Durable storage for memory snapshots."""

    async def save(self, snapshot: dict) -> None:
        ...

    async def load(self) -> Optional[dict]:
        ...


@dataclass
class InteractionResult:
    """Everything one processed message produced."""

    input_text: str
    sample: EmotionSample
    affinity: float
    response: Optional[str]
    mood: Mood
    thoughts: List[Thought] = field(default_factory=list)


class CompanionSession:
    """One companion's state plus the components that act on it.

    Attributes:
        profile: Personality driving every component
        state: The single shared affective state
        memory: Bounded conversation/emotional history
        drift: Mood drift background loop
        autonomy: Autonomous action background loop
    """

    def __init__(
        self,
        profile: Optional[PersonalityProfile] = None,
        state: Optional[AffectiveState] = None,
        generator: Optional[ResponseGenerator] = None,
        persistence: Optional[PersistenceSink] = None,
        max_history_size: int = 100,
        drift_interval_seconds: float = 60.0,
        autonomous_interval_seconds: float = 30.0,
        rng: Optional[RandomSource] = None,
    ):
        self.profile = profile or PersonalityProfile()
        self.state = state or AffectiveState()
        self.persistence = persistence

        self.classifier = EmotionClassifier()
        self.affinity = AffinityUpdater()
        self.attention = AttentionTracker(rng=rng)
        self.mood = MoodUpdater()
        self.thoughts = ThoughtGenerator(rng=rng)
        self.responder = Responder(generator, rng=rng)
        self.memory = ConversationMemoryStore(max_history_size=max_history_size)

        self.drift = MoodDriftScheduler(
            self.state, self.profile, interval_seconds=drift_interval_seconds
        )
        self.autonomy = AutonomousActionSelector(
            self.state, self.profile, interval_seconds=autonomous_interval_seconds, rng=rng
        )
        self.autonomy.action_selected.connect(self._dispatch_action)

        self._processing = False

    @classmethod
    def from_settings(
        cls,
        settings: Optional["HeartSettings"] = None,
        generator: Optional[ResponseGenerator] = None,
        persistence: Optional[PersistenceSink] = None,
        rng: Optional[RandomSource] = None,
    ) -> "CompanionSession":
        """Build a session from environment settings and the personality file."""
        if settings is None:
            from heart.config.settings import get_settings

            settings = get_settings()

        return cls(
            profile=load_profile(settings.personality_path),
            state=AffectiveState(max_thoughts=settings.max_thoughts),
            generator=generator,
            persistence=persistence,
            max_history_size=settings.max_history_size,
            drift_interval_seconds=settings.drift_interval_seconds,
            autonomous_interval_seconds=settings.autonomous_interval_seconds,
            rng=rng,
        )

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------

    def on_mood_change(self, listener: Callable[[Mood], None]) -> Callable[[Mood], None]:
        return self.mood.mood_changed.connect(listener)

    def on_public_thought(
        self, listener: Callable[[Thought], None]
    ) -> Callable[[Thought], None]:
        return self.thoughts.public_thought.connect(listener)

    def on_action(
        self, listener: Callable[[AutonomousAction], None]
    ) -> Callable[[AutonomousAction], None]:
        return self.autonomy.action_selected.connect(listener)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    @property
    def is_processing(self) -> bool:
        return self._processing

    async def process_user_input(
        self, text: str, now: Optional[datetime] = None
    ) -> Optional[InteractionResult]:
        """Run one user message through the full pipeline.

        Returns:
            The interaction result, or None when another message is still
            being processed (or processing failed).
        """
        if self._processing:
            logger.warning("Already processing a message, rejecting new input")
            return None

        self._processing = True
        try:
            now = now or utc_now()
            state, profile = self.state, self.profile

            self.memory.append_user(text, now=now)
            self.attention.on_interaction(state, profile, now=now)
            sample = self.classifier.classify(text)
            affinity = self.affinity.update(state, text, sample, profile)

            response = await self.responder.respond(text, sample, state, profile)

            mood = self.mood.update(state, sample, profile, now=now)
            self.memory.append_emotional_snapshot(mood, trigger=text, now=now)
            thoughts = self.thoughts.on_interaction(state, profile, text, response, now=now)
            self.memory.append_exchange(text, response, mood=mood, now=now)

            logger.info(
                f"Processed input: emotion={sample.emotion} affinity={affinity:.2f} "
                f"mood={mood.primary}"
            )
            return InteractionResult(
                input_text=text,
                sample=sample,
                affinity=affinity,
                response=response,
                mood=mood,
                thoughts=thoughts,
            )
        except Exception as e:
            # Steps already applied stay applied; the traceback is kept
            logger.exception(f"Error processing user input: {e}")
            return None
        finally:
            self._processing = False

    # ------------------------------------------------------------------
    # Background loops
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start mood drift and autonomous behavior."""
        await self.drift.start()
        await self.autonomy.start()

    async def stop(self) -> None:
        await self.autonomy.stop()
        await self.drift.stop()

    def _dispatch_action(self, action: AutonomousAction) -> None:
        if isinstance(action, ThoughtAction):
            self.thoughts.autonomous(self.state, self.profile)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def projection(self) -> MoodProjection:
        """Emotion, animation cue and voice modifier for the current mood."""
        return self.mood.projection(self.state, self.profile)

    def should_check_on_user(self, now: Optional[datetime] = None) -> bool:
        return self.attention.should_check_on_user(self.state, self.profile, now=now)

    def should_ask_if_still_there(self, now: Optional[datetime] = None) -> bool:
        return self.attention.should_ask_if_still_there(self.state, now=now)

    def status(self, now: Optional[datetime] = None) -> dict:
        state = self.state
        return {
            "mood": state.mood.to_dict(),
            "affinity": state.affinity,
            "affinity_level": self.affinity.level(state),
            "response_style": self.affinity.response_style(state, self.profile).to_dict(),
            "attention": self.attention.stats(state, now=now),
            "drift": self.drift.stats(now=now),
            "autonomy": self.autonomy.stats(),
            "memory": self.memory.usage(),
            "speech": self.responder.speech_settings(state, self.profile).to_dict(),
            "thought_count": len(state.thoughts),
        }

    # ------------------------------------------------------------------
    # Snapshots and persistence
    # ------------------------------------------------------------------

    def state_snapshot(self) -> dict:
        return self.state.to_dict()

    def restore_state(self, data: dict) -> bool:
        """Restore the affective state in place, keeping component references.

        Returns:
            True if restored; False when the snapshot is malformed and the
            current state was kept.
        """
        try:
            self.state.restore(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Malformed state snapshot, keeping current state: {e}")
            return False
        logger.info(
            f"Restored state: mood={self.state.mood.primary} affinity={self.state.affinity:.2f}"
        )
        return True

    async def save_memory(self) -> bool:
        """Hand the memory snapshot to the persistence sink.

        Returns:
            True if saved; False when there is no sink or it failed.
        """
        if self.persistence is None:
            return False
        try:
            await self.persistence.save(self.memory.to_snapshot().to_wire())
            logger.debug("Memory saved")
            return True
        except Exception as e:
            logger.error(f"Failed to save memory, continuing in memory only: {e}")
            return False

    async def load_memory(self) -> bool:
        """Load memory from the persistence sink, if it has any."""
        if self.persistence is None:
            return False
        try:
            data = await self.persistence.load()
        except Exception as e:
            logger.error(f"Failed to load memory, starting empty: {e}")
            return False
        if not data:
            return False
        try:
            self.memory.load_snapshot(data)
        except ValueError as e:
            logger.error(f"Stored memory is malformed, starting empty: {e}")
            return False
        return True
