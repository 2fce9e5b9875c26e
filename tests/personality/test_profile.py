"""Tests for personality profiles and loading."""
import json

import pytest

from heart.personality.profile import (
    NEUTRAL_EMOTION,
    EmotionConfig,
    PersonalityProfile,
    load_profile,
)


class TestTraits:
    """Trait lookup and editing."""

    def test_missing_trait_defaults(self, profile):
        assert profile.get_trait("curiosity") == 0.5

    def test_base_before_custom(self):
        profile = PersonalityProfile(traits={"humor": 0.9}, custom_traits={"humor": 0.1})
        assert profile.get_trait("humor") == 0.9

    def test_values_clamped_on_load(self):
        profile = PersonalityProfile(traits={"energy": 1.7, "shyness": -1})
        assert profile.get_trait("energy") == 1.0
        assert profile.get_trait("shyness") == 0.0

    def test_update_trait_targets_base_when_present(self):
        profile = PersonalityProfile(traits={"empathy": 0.5})
        assert profile.update_trait("empathy", 2.0) == 1.0
        assert profile.traits["empathy"] == 1.0
        assert profile.custom_traits == {}

    def test_update_trait_creates_custom(self, profile):
        profile.update_trait("whimsy", 0.4)
        assert profile.custom_traits == {"whimsy": 0.4}

    def test_add_and_remove_custom(self, profile):
        profile.add_custom_trait("stubbornness", 0.8)
        assert profile.has_trait("stubbornness")
        assert profile.remove_custom_trait("stubbornness")
        assert not profile.remove_custom_trait("stubbornness")

    def test_trait_names(self):
        profile = PersonalityProfile(traits={"a": 0.1}, custom_traits={"b": 0.2})
        assert profile.trait_names() == {"base": ["a"], "custom": ["b"], "all": ["a", "b"]}
        assert profile.all_traits() == {"a": 0.1, "b": 0.2}


class TestEmotions:
    def test_default_table(self, profile):
        assert profile.emotion("happy").base_intensity == 0.8
        assert profile.emotion("excited").animation == "idle_excited"

    def test_unknown_falls_back_to_calm(self, profile):
        assert profile.emotion("bored") == profile.emotion("calm")

    def test_no_calm_falls_back_to_neutral(self):
        profile = PersonalityProfile(emotions={"happy": EmotionConfig(base_intensity=0.9)})
        assert profile.emotion("sad") == NEUTRAL_EMOTION


class TestBehavior:
    def test_should_respond(self, scripted):
        profile = PersonalityProfile(traits={"talkativeness": 0.6})
        assert profile.should_respond(scripted(0.5))
        assert not profile.should_respond(scripted(0.6))

    def test_summary(self):
        profile = PersonalityProfile(traits={"optimism": 0.8, "shyness": 0.7, "empathy": 0.2})
        assert profile.summary() == "optimistic, shy"

    def test_summary_empty_at_defaults(self, profile):
        assert profile.summary() == ""

    def test_export(self, profile):
        data = profile.export()
        assert data["name"] == "Heart"
        assert "export_date" in data


class TestLoadProfile:
    """Loading from JSON config."""

    def test_none_gives_defaults(self):
        assert load_profile(None) == PersonalityProfile()

    def test_camel_case_config(self, tmp_path):
        path = tmp_path / "personality.json"
        path.write_text(
            json.dumps(
                {
                    "name": "Aiko",
                    "baseTraits": {"optimism": 0.9, "shyness": 0.3},
                    "emotions": {
                        "happy": {
                            "intensity": 0.7,
                            "animation": "wave",
                            "voiceModifier": {"pitch": 1.3, "speed": 1.0},
                            "blendshape": "smile",
                        }
                    },
                    "thoughtBehavior": {"autonomousThoughts": False, "publicThoughts": 0.4},
                }
            ),
            encoding="utf-8",
        )

        profile = load_profile(path)

        assert profile.name == "Aiko"
        assert profile.get_trait("optimism") == 0.9
        assert profile.emotion("happy").voice_modifier.pitch == 1.3
        assert profile.thoughts.autonomous_thoughts_enabled is False
        assert profile.thoughts.public_thought_probability == 0.4

    def test_missing_file_gives_defaults(self, tmp_path, caplog):
        profile = load_profile(tmp_path / "absent.json")
        assert profile == PersonalityProfile()
        assert "not found" in caplog.text

    @pytest.mark.parametrize("content", ["{not json", json.dumps({"traits": "nope"})])
    def test_invalid_file_gives_defaults(self, tmp_path, content):
        path = tmp_path / "bad.json"
        path.write_text(content, encoding="utf-8")
        assert load_profile(path) == PersonalityProfile()
