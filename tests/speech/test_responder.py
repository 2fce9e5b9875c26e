"""Tests for the response generation guard and fallbacks."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from heart.affect.state import AffectiveState, EmotionSample, Mood
from heart.personality.profile import PersonalityProfile
from heart.speech.responder import ENCOURAGEMENT, FALLBACK_RESPONSES, Responder

SAMPLE = EmotionSample(emotion="calm", intensity=0.3, confidence=0.5)


class StaticGenerator:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    async def generate_response(self, text, sample, mood):
        self.calls.append((text, sample, mood))
        return self.reply


class FailingGenerator:
    async def generate_response(self, text, sample, mood):
        raise ConnectionError("model unavailable")


class BlockingGenerator:
    def __init__(self):
        self.release = asyncio.Event()

    async def generate_response(self, text, sample, mood):
        await self.release.wait()
        return "done"


class TestRespond:
    """Generation and fallback."""

    @pytest.mark.asyncio
    async def test_generator_reply_used(self, profile, state):
        generator = StaticGenerator("  Hi there!  ")
        reply = await Responder(generator).respond("hello", SAMPLE, state, profile)

        assert reply == "Hi there!"
        assert generator.calls[0][2] is state.mood

    @pytest.mark.asyncio
    async def test_no_generator_uses_fallback(self, profile, scripted):
        state = AffectiveState(mood=Mood(primary="happy"))
        reply = await Responder(rng=scripted(0.0)).respond("hello", SAMPLE, state, profile)
        assert reply == FALLBACK_RESPONSES["happy"][0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("generator", [StaticGenerator(None), StaticGenerator("   "), FailingGenerator()])
    async def test_empty_or_failed_generation_falls_back(self, generator, profile, state, scripted):
        reply = await Responder(generator, rng=scripted(0.0)).respond("hello", SAMPLE, state, profile)
        assert reply == FALLBACK_RESPONSES["calm"][0]

    @pytest.mark.asyncio
    async def test_concurrent_request_rejected(self, profile, state):
        generator = BlockingGenerator()
        responder = Responder(generator)

        first = asyncio.create_task(responder.respond("one", SAMPLE, state, profile))
        await asyncio.sleep(0)
        assert responder.is_generating

        assert await responder.respond("two", SAMPLE, state, profile) is None

        generator.release.set()
        assert await first == "done"
        assert not responder.is_generating


class TestFallback:
    """Personality shaping of canned replies."""

    def test_unknown_mood_uses_calm(self, profile, scripted):
        state = AffectiveState(mood=Mood(primary="angry"))
        assert Responder(rng=scripted(0.0)).fallback(state, profile) == FALLBACK_RESPONSES["calm"][0]

    def test_shy_softens(self, make_profile, scripted):
        state = AffectiveState(mood=Mood(primary="happy"))
        reply = Responder(rng=scripted(0.0)).fallback(state, make_profile(shyness=0.8))
        assert "!" not in reply
        assert reply == reply.lower()

    def test_playful_emoji(self, make_profile, scripted):
        reply = Responder(rng=scripted(0.0)).fallback(AffectiveState(), make_profile(playfulness=0.9))
        assert reply.endswith(" 😄")

    def test_optimist_encourages_when_sad(self, make_profile, scripted):
        state = AffectiveState(mood=Mood(primary="sad"))
        reply = Responder(rng=scripted(0.0)).fallback(state, make_profile(optimism=0.9))
        assert reply == FALLBACK_RESPONSES["sad"][0] + ENCOURAGEMENT


class TestGeneratorTimeouts:
    @pytest.mark.asyncio
    async def test_timeout_falls_back_and_releases(self, profile, state, scripted):
        generator = MagicMock()
        generator.generate_response = AsyncMock(side_effect=asyncio.TimeoutError())
        responder = Responder(generator, rng=scripted(0.0))

        reply = await responder.respond("hello", SAMPLE, state, profile)

        assert reply == FALLBACK_RESPONSES["calm"][0]
        generator.generate_response.assert_awaited_once_with("hello", SAMPLE, state.mood)
        assert not responder.is_generating


def _speech_profile(use_emojis=True, use_contractions=True, **traits):
    return PersonalityProfile(
        traits=traits,
        speech={"use_emojis": use_emojis, "use_contractions": use_contractions},
    )


class TestSpeechConfig:
    """Speech options from the personality config."""

    def test_fallback_emoji_respects_config(self, scripted):
        profile = _speech_profile(use_emojis=False, playfulness=0.9)
        reply = Responder(rng=scripted(0.0)).fallback(AffectiveState(), profile)
        assert "😄" not in reply
        assert reply == FALLBACK_RESPONSES["calm"][0]

    def test_quiet_personality_keeps_first_sentence(self):
        text = "That is a long story. It goes on and on for quite a while after that."
        reply = Responder().process_response(text, SAMPLE, _speech_profile(talkativeness=0.3))
        assert reply == "That is a long story."

    def test_short_reply_not_trimmed(self):
        reply = Responder().process_response("Sure. Okay.", SAMPLE, _speech_profile(talkativeness=0.3))
        assert reply == "Sure. Okay."

    def test_formal_personality_expands_slang(self):
        reply = Responder().process_response("I'm gonna help, wanna see?", SAMPLE, _speech_profile(formality=0.8))
        assert reply == "I'm going to help, want to see?"

    def test_playful_reply_gets_emotion_emoji(self):
        happy = EmotionSample(emotion="happy", intensity=0.5, confidence=0.5)
        reply = Responder().process_response("Nice!", happy, _speech_profile(playfulness=0.7))
        assert reply == "Nice! 😊"

    def test_emoji_not_duplicated(self):
        happy = EmotionSample(emotion="happy", intensity=0.5, confidence=0.5)
        reply = Responder().process_response("Nice! 😊", happy, _speech_profile(playfulness=0.7))
        assert reply == "Nice! 😊"

    def test_emoji_disabled(self):
        happy = EmotionSample(emotion="happy", intensity=0.5, confidence=0.5)
        profile = _speech_profile(use_emojis=False, playfulness=0.7)
        assert Responder().process_response("Nice!", happy, profile) == "Nice!"

    @pytest.mark.asyncio
    async def test_generated_reply_processed(self, state):
        profile = _speech_profile(playfulness=0.7)
        reply = await Responder(StaticGenerator("Hello!")).respond("hi", SAMPLE, state, profile)
        assert reply == "Hello! 😌"

    def test_speech_settings(self):
        state = AffectiveState(mood=Mood(primary="happy"))
        profile = PersonalityProfile(
            traits={"playfulness": 0.6, "formality": 0.2},
            speech={"maxResponseLength": 120, "useEmojis": True, "useContractions": True},
        )
        settings = Responder().speech_settings(state, profile)

        assert settings.max_length == 120
        assert settings.use_emojis
        assert settings.use_contractions
        assert settings.mood == "happy"

    def test_speech_settings_gated_by_traits(self, profile, state):
        settings = Responder().speech_settings(state, profile).to_dict()
        assert settings == {"max_length": 200, "use_emojis": False, "use_contractions": False, "mood": "calm"}
