"""Tests for mood blending and projections."""
import pytest

from heart.affect.mood import MoodUpdater
from heart.affect.state import AffectiveState, EmotionSample, Mood
from heart.personality.profile import EmotionConfig, PersonalityProfile


class TestCandidateIntensity:
    """Emotion weighting and personality scaling."""

    def test_positive_emotion_default_traits(self, profile, state):
        sample = EmotionSample(emotion="happy", intensity=0.5, confidence=0.5)
        # 0.5 * 0.8 base, * 1.15 optimism, * 1.1 empathy
        expected = 0.4 * 1.15 * 1.1
        assert MoodUpdater().candidate_intensity(state, sample, profile) == pytest.approx(expected)

    def test_negative_emotion_skips_optimism(self, profile, state):
        sample = EmotionSample(emotion="sad", intensity=0.5, confidence=0.5)
        expected = 0.5 * 0.6 * 1.1
        assert MoodUpdater().candidate_intensity(state, sample, profile) == pytest.approx(expected)

    def test_shyness_dampens(self, make_profile, state):
        sample = EmotionSample(emotion="angry", intensity=1.0, confidence=1.0)
        shy = make_profile(shyness=0.6, empathy=0.0)
        assert MoodUpdater().candidate_intensity(state, sample, shy) == pytest.approx(0.7 * 0.8)

    def test_unknown_emotion_uses_calm_config(self, profile, state):
        sample = EmotionSample(emotion="bored", intensity=1.0, confidence=1.0)
        assert MoodUpdater().candidate_intensity(state, sample, profile) == pytest.approx(0.5 * 1.1)


class TestUpdate:
    """Replacing the session mood."""

    def test_blend(self, profile, now):
        state = AffectiveState(mood=Mood(primary="calm", intensity=0.5))
        sample = EmotionSample(emotion="sad", intensity=0.5, confidence=0.5)

        mood = MoodUpdater().update(state, sample, profile, now=now)

        candidate = 0.5 * 0.6 * 1.1
        assert mood.primary == "sad"
        assert mood.secondary == "calm"
        assert mood.intensity == pytest.approx(0.5 * 0.7 + candidate * 0.3)
        assert mood.last_update == now
        assert state.mood is mood

    def test_lower_bound(self, profile, now):
        state = AffectiveState(mood=Mood(intensity=0.1))
        sample = EmotionSample(emotion="sad", intensity=0.0, confidence=0.0)
        assert MoodUpdater().update(state, sample, profile, now=now).intensity == pytest.approx(0.1)

    def test_upper_bound(self, make_profile, now):
        state = AffectiveState(mood=Mood(intensity=1.0))
        sample = EmotionSample(emotion="excited", intensity=1.0, confidence=1.0)
        profile = make_profile(optimism=1.0, empathy=1.0)
        assert MoodUpdater().update(state, sample, profile, now=now).intensity == 1.0

    def test_listeners_notified_once(self, profile, state, now):
        updater = MoodUpdater()
        received = []
        updater.mood_changed.connect(received.append)

        sample = EmotionSample(emotion="happy", intensity=0.2, confidence=0.2)
        mood = updater.update(state, sample, profile, now=now)

        assert received == [mood]

    def test_failing_listener_does_not_block_update(self, profile, state, now):
        updater = MoodUpdater()

        def broken(_mood):
            raise RuntimeError("renderer offline")

        received = []
        updater.mood_changed.connect(broken)
        updater.mood_changed.connect(received.append)

        sample = EmotionSample(emotion="happy", intensity=0.2, confidence=0.2)
        updater.update(state, sample, profile, now=now)

        assert state.mood.primary == "happy"
        assert len(received) == 1


class TestProjection:
    def test_configured_emotion(self, profile):
        state = AffectiveState(mood=Mood(primary="happy", intensity=0.7))
        projection = MoodUpdater().projection(state, profile)

        assert projection.emotion == "happy"
        assert projection.animation_cue == "idle_happy"
        assert projection.expression == "smile"
        assert projection.voice_modifier.pitch == pytest.approx(1.1)
        assert projection.voice_modifier.intensity == pytest.approx(0.7)

    def test_unconfigured_emotion_defaults(self):
        profile = PersonalityProfile(emotions={"happy": EmotionConfig()})
        state = AffectiveState(mood=Mood(primary="sad", intensity=0.4))
        projection = MoodUpdater().projection(state, profile)

        assert projection.animation_cue == "idle_calm"
        assert projection.expression == "neutral"
        assert projection.voice_modifier.pitch == 1.0
        assert projection.voice_modifier.speed == 1.0

    def test_to_dict(self, profile):
        data = MoodUpdater().projection(AffectiveState(), profile).to_dict()
        assert data["animationCue"] == "idle_calm"
        assert set(data["voiceModifier"]) == {"pitch", "speed", "intensity"}
