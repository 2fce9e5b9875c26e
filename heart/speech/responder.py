"""Response generation guard and canned fallbacks.

The actual text comes from an external (usually LLM-backed) generator. This
module makes sure at most one generation is in flight per session and that
a failed or empty generation degrades to a static phrase picked by the
current mood instead of leaving the user without an answer.
"""

from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass
from typing import Dict, Optional, Protocol, Sequence

from heart.affect.state import AffectiveState, EmotionSample, Mood
from heart.personality.profile import PersonalityProfile
from heart.utils.weighted import RandomSource, choose

logger = logging.getLogger(__name__)


class ResponseGenerator(Protocol):
    """Protocol for the external text generator."""

    async def generate_response(
        self, text: str, sample: EmotionSample, mood: Mood
    ) -> Optional[str]:
        """Reply to ``text``; None means no response."""
        ...


FALLBACK_RESPONSES: Dict[str, Sequence[str]] = {
    "happy": (
        "That's wonderful! 😊 I'm so glad to hear that!",
        "Oh, that makes me so happy! ✨",
        "That's amazing! I love hearing good news! 🌟",
    ),
    "sad": (
        "I'm so sorry to hear that... 😔 Is there anything I can do to help?",
        "That sounds really difficult. I'm here for you. 💙",
        "I wish I could make it better. You're not alone. 🤗",
    ),
    "calm": (
        "That's interesting! Tell me more about that.",
        "I see what you mean. That's quite thoughtful.",
        "That's a good point. I appreciate you sharing that with me.",
    ),
    "excited": (
        "Wow, that's incredible! 🤩 I'm so excited for you!",
        "That sounds absolutely amazing! ✨ I can't wait to hear more!",
        "Oh my goodness! That's fantastic! 🎉",
    ),
    "surprised": (
        "Really? That's unexpected! 😲",
        "Wow, I didn't see that coming! 🤯",
        "That's quite surprising! Tell me more!",
    ),
}

ENCOURAGEMENT = " But I'm sure things will get better! 🌈"

# Appended to generated replies by playful personalities
EMOTION_EMOJI = {
    "happy": "😊",
    "sad": "😔",
    "excited": "🤩",
    "calm": "😌",
    "surprised": "😲",
}

# Quiet personalities keep long replies to their first sentence
TERSE_REPLY_CHARS = 50

INFORMAL_CONTRACTIONS = (
    ("gonna", "going to"),
    ("wanna", "want to"),
    ("gotta", "got to"),
)


@dataclass(frozen=True)
class SpeechSettings:
    """Speech options for the current mood, handed to the voice side."""

    max_length: int
    use_emojis: bool
    use_contractions: bool
    mood: str

    def to_dict(self) -> dict:
        return asdict(self)


class Responder:
    """Wraps a ResponseGenerator with an in-flight guard and fallbacks."""

    def __init__(
        self,
        generator: Optional[ResponseGenerator] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.generator = generator
        self._rng = rng or random
        self._generating = False

    @property
    def is_generating(self) -> bool:
        return self._generating

    async def respond(
        self,
        text: str,
        sample: EmotionSample,
        state: AffectiveState,
        profile: PersonalityProfile,
    ) -> Optional[str]:
        """Generate a reply, or a fallback phrase when generation fails.

        Returns:
            The reply, or None if another generation is already in flight.
        """
        if self._generating:
            logger.warning("Response generation already in flight, skipping")
            return None

        self._generating = True
        try:
            response = None
            if self.generator is not None:
                try:
                    response = await self.generator.generate_response(text, sample, state.mood)
                except Exception as e:
                    logger.warning(f"Response generator failed, using fallback: {e}")
                    response = None

            if response and response.strip():
                return self.process_response(response.strip(), sample, profile)

            logger.debug(f"Using fallback response for mood '{state.mood.primary}'")
            return self.fallback(state, profile)
        finally:
            self._generating = False

    def fallback(self, state: AffectiveState, profile: PersonalityProfile) -> str:
        """Static phrase keyed by the current mood, shaped by personality."""
        mood = state.mood.primary
        phrases = FALLBACK_RESPONSES.get(mood) or FALLBACK_RESPONSES["calm"]
        response = choose(phrases, self._rng)

        if profile.get_trait("shyness") > 0.7:
            response = response.replace("!", ".").lower()

        if profile.speech.use_emojis and profile.get_trait("playfulness") > 0.8:
            response += " 😄"

        if profile.get_trait("optimism") > 0.8 and mood == "sad":
            response += ENCOURAGEMENT

        return response

    def process_response(
        self, response: str, sample: EmotionSample, profile: PersonalityProfile
    ) -> str:
        """Shape a generated reply to the personality.

        Quiet personalities (talkativeness < 0.5) keep only the first
        sentence of replies over 50 characters. Formal ones (> 0.7) expand
        slang contractions. Playful ones (> 0.6) get an emoji for the
        detected emotion when emojis are enabled.
        """
        processed = response

        if profile.get_trait("talkativeness") < 0.5 and len(processed) > TERSE_REPLY_CHARS:
            processed = processed.split(".")[0] + "."

        if profile.get_trait("formality") > 0.7:
            for slang, formal in INFORMAL_CONTRACTIONS:
                processed = processed.replace(slang, formal)

        if profile.speech.use_emojis and profile.get_trait("playfulness") > 0.6:
            emoji = EMOTION_EMOJI.get(sample.emotion)
            if emoji and emoji not in processed:
                processed += f" {emoji}"

        return processed

    def speech_settings(
        self, state: AffectiveState, profile: PersonalityProfile
    ) -> SpeechSettings:
        speech = profile.speech
        return SpeechSettings(
            max_length=speech.max_response_length,
            use_emojis=speech.use_emojis and profile.get_trait("playfulness") > 0.5,
            use_contractions=speech.use_contractions and profile.get_trait("formality") < 0.5,
            mood=state.mood.primary,
        )
