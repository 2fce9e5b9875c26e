"""Tests for the autonomous action selector."""
import asyncio

import pytest

from heart.affect.state import AffectiveState, AutonomousState, Mood
from heart.cognitive.autonomous import (
    AUTONOMOUS_ACTION_THOUGHTS,
    AUTONOMOUS_SPEECH,
    IDLE_ANIMATIONS,
    LONELY_SPEECH,
    AnimationAction,
    AutonomousActionSelector,
    SpeechAction,
    ThoughtAction,
)


def _selector(profile, state=None, rng=None, interval_seconds=30.0):
    return AutonomousActionSelector(
        state or AffectiveState(), profile, interval_seconds=interval_seconds, rng=rng
    )


class TestActionProbability:
    """Probability shaping and bounds."""

    def test_base(self, profile):
        assert _selector(profile).action_probability(0) == pytest.approx(0.1)

    def test_idle_terms(self, profile):
        selector = _selector(profile)
        assert selector.action_probability(121) == pytest.approx(0.3)
        assert selector.action_probability(301) == pytest.approx(0.6)

    def test_sad_clamped_to_floor(self, profile):
        state = AffectiveState(mood=Mood(primary="sad"))
        assert _selector(profile, state).action_probability(0) == pytest.approx(0.05)

    def test_clamped_to_ceiling(self, make_profile):
        state = AffectiveState(mood=Mood(primary="excited"))
        selector = _selector(make_profile(talkativeness=0.8, energy=0.7), state)
        assert selector.action_probability(400) == pytest.approx(0.8)


class TestCandidates:
    def test_default_profile_only_animates(self, profile):
        candidates = _selector(profile).candidates()
        assert [type(c.item) for c in candidates] == [AnimationAction]

    def test_talkative_curious_profile(self, make_profile):
        candidates = _selector(make_profile(talkativeness=0.6, curiosity=0.7)).candidates()
        assert [type(c.item) for c in candidates] == [SpeechAction, AnimationAction, ThoughtAction]
        assert [c.weight for c in candidates] == [0.7, 0.5, 0.3]


class TestTick:
    """One decision step."""

    def test_quiet_tick_accumulates_idle(self, profile, scripted):
        state = AffectiveState()
        rng = scripted(0.1)
        assert _selector(profile, state, rng).tick() is None
        assert state.autonomous.idle_seconds == 30.0
        assert rng.draws == 1

    def test_roll_uses_idle_before_tick(self, profile, scripted):
        state = AffectiveState(autonomous=AutonomousState(idle_seconds=100))
        # idle after increment is 130s, but the roll still sees 100s (p=0.1)
        assert _selector(profile, state, scripted(0.2)).tick() is None
        assert state.autonomous.idle_seconds == 130.0

    def test_action_resets_idle_and_notifies(self, profile, now, scripted):
        state = AffectiveState(autonomous=AutonomousState(idle_seconds=90))
        selector = _selector(profile, state, scripted(0.05, 0.0, 0.5))
        received = []
        selector.action_selected.connect(received.append)

        action = selector.tick(now=now)

        assert isinstance(action, AnimationAction)
        assert action.animation == IDLE_ANIMATIONS[0]
        assert received == [action]
        assert state.autonomous.idle_seconds == 0.0
        assert state.autonomous.action_count == 1
        assert state.autonomous.last_action == now

    def test_weighted_pick_first_candidate(self, make_profile, scripted):
        profile = make_profile(talkativeness=0.6, curiosity=0.7)
        # roll, speech, animation, thought, pick
        selector = _selector(profile, rng=scripted(0.0, 0.0, 0.0, 0.0, 0.0))
        action = selector.tick()
        assert isinstance(action, SpeechAction)
        assert action.content == AUTONOMOUS_SPEECH[0]

    def test_weighted_pick_last_candidate(self, make_profile, scripted):
        profile = make_profile(talkativeness=0.6, curiosity=0.7)
        selector = _selector(profile, rng=scripted(0.0, 0.0, 0.0, 0.0, 0.9))
        action = selector.tick()
        assert isinstance(action, ThoughtAction)
        assert action.content == AUTONOMOUS_ACTION_THOUGHTS[0]

    def test_action_types(self):
        assert SpeechAction.type == "speech"
        assert AnimationAction.type == "animation"
        assert ThoughtAction.type == "thought"


class TestContent:
    def test_shy_speech_avoids_love_and_miss(self, make_profile, scripted):
        selector = _selector(make_profile(shyness=0.7), rng=scripted(fallback=0.99))
        line = selector.compose_speech()
        assert "love" not in line and "miss" not in line

    def test_lonely_speech_added_after_long_idle(self, profile, scripted):
        state = AffectiveState(autonomous=AutonomousState(idle_seconds=400))
        line = _selector(profile, state, scripted(0.99)).compose_speech()
        assert line == LONELY_SPEECH[-1]

    def test_mood_animation_included(self, profile, scripted):
        state = AffectiveState(mood=Mood(primary="happy"))
        assert _selector(profile, state, scripted(0.99)).select_animation() == "idle_happy"

    def test_attention_seeking_after_long_idle(self, profile, scripted):
        state = AffectiveState(autonomous=AutonomousState(idle_seconds=400))
        assert _selector(profile, state, scripted(0.99)).select_animation() == "idle_look_around"

    def test_empathetic_thought_option(self, make_profile, scripted):
        line = _selector(make_profile(empathy=0.8), rng=scripted(0.99)).compose_thought()
        assert line == "I hope they're feeling okay and not too stressed."

    def test_stats(self, profile):
        stats = _selector(profile).stats()
        assert stats == {"is_running": False, "idle_seconds": 0.0, "action_count": 0, "last_action": None}


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_background_ticks_accumulate_idle(self, profile, scripted):
        state = AffectiveState()
        selector = _selector(profile, state, scripted(fallback=0.99), interval_seconds=0.01)

        await selector.start()
        await asyncio.sleep(0.05)
        await selector.stop()

        assert state.autonomous.idle_seconds > 0
        assert state.autonomous.action_count == 0

    @pytest.mark.asyncio
    async def test_no_ticks_after_stop(self, profile, scripted):
        state = AffectiveState()
        selector = _selector(profile, state, scripted(fallback=0.99), interval_seconds=0.01)

        await selector.start()
        await selector.stop()
        idle = state.autonomous.idle_seconds

        await asyncio.sleep(0.03)
        assert state.autonomous.idle_seconds == idle


class TestActionTimestamps:
    def test_created_at_matches_last_action(self, make_profile, now, scripted):
        state = AffectiveState()
        profile = make_profile(talkativeness=0.6, curiosity=0.7)
        action = _selector(profile, state, scripted(0.0, 0.0, 0.0, 0.0, 0.0)).tick(now=now)

        assert action.created_at == now
        assert state.autonomous.last_action == now

    def test_every_candidate_stamped(self, make_profile, now):
        candidates = _selector(make_profile(talkativeness=0.6, curiosity=0.7)).candidates(now)
        assert all(c.item.created_at == now for c in candidates)
