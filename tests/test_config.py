"""
Tests for Configuration Loading
================================
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from media_gestures.core.types import ConfigError
from media_gestures.modules.utils.config import Config, EngineConfig


@pytest.fixture
def config():
    Config.reset()
    yield Config()
    Config.reset()


class TestEngineConfig:
    """Test suite for the typed engine config record."""

    def test_defaults(self):
        c = EngineConfig()
        assert c.pinch_threshold_px == 50
        assert c.pinch_min_hold_ms == 300
        assert c.tap_max_duration_ms == 300
        assert c.double_tap_window_ms == 600
        assert c.discrete_cooldown_ms == 1200
        assert c.volume_sensitivity == 0.002
        assert c.seek_sensitivity == 0.08
        assert c.coarse_seek_seconds == 10
        assert c.mirror_input is True
        assert c.two_fist_action == "toggle_playback"

    def test_from_dict_ignores_unknown_keys(self):
        c = EngineConfig.from_dict({"discrete_cooldown_ms": 1000, "frame_skip": 2})
        assert c.discrete_cooldown_ms == 1000

    def test_from_empty_dict(self):
        assert EngineConfig.from_dict(None) == EngineConfig()

    def test_invalid_two_fist_action(self):
        with pytest.raises(ConfigError):
            EngineConfig(two_fist_action="mute")

    def test_negative_threshold(self):
        with pytest.raises(ConfigError):
            EngineConfig(pinch_threshold_px=-1)

    @pytest.mark.parametrize("field,value", [
        ("pinch_min_hold_ms", "300"),
        ("discrete_cooldown_ms", None),
        ("seek_sensitivity", True),
        ("mirror_input", 1),
        ("two_fist_action", 3),
    ])
    def test_wrong_type_rejected(self, field, value):
        with pytest.raises(ConfigError, match=field):
            EngineConfig(**{field: value})

    def test_ints_accepted_for_float_fields(self):
        assert EngineConfig(pinch_threshold_px=40).pinch_threshold_px == 40

    def test_with_overrides(self):
        c = EngineConfig().with_overrides(mirror_input=False)
        assert c.mirror_input is False
        assert c.discrete_cooldown_ms == 1200


class TestConfigManager:
    """Test suite for the YAML-backed singleton."""

    def test_singleton(self, config):
        assert Config() is config

    def test_bundled_yaml(self, config):
        config.load()
        assert config.get("engine.pinch_threshold_px") == 50
        assert config.engine_config() == EngineConfig()
        assert config.logging["level"] == "INFO"

    def test_youtube_profile(self, config):
        c = config.load().engine_config("youtube")
        assert c.discrete_cooldown_ms == 1000
        assert c.double_tap_window_ms == 500
        assert c.pinch_threshold_px == 50

    def test_fullscreen_profile(self, config):
        assert config.load().engine_config("fullscreen").two_fist_action == "fullscreen"

    def test_default_profile_is_base(self, config):
        config.load()
        assert config.engine_config("default") == config.engine_config(None)

    def test_unknown_profile(self, config):
        with pytest.raises(ConfigError):
            config.load().engine_config("vimeo")

    def test_missing_file_uses_defaults(self, config, tmp_path):
        config.load(str(tmp_path / "absent.yaml"))
        assert config.engine_config() == EngineConfig()

    def test_custom_file(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "engine:\n"
            "  discrete_cooldown_ms: 800\n"
            "  mirror_input: false\n"
            "profiles:\n"
            "  slow:\n"
            "    discrete_cooldown_ms: 2000\n"
        )
        config.load(str(path))
        assert config.engine_config().discrete_cooldown_ms == 800
        assert config.engine_config("slow").discrete_cooldown_ms == 2000
        assert config.engine_config("slow").mirror_input is False

    def test_mistyped_value_raises(self, config):
        config.load_dict({"engine": {"pinch_min_hold_ms": "300"}})
        with pytest.raises(ConfigError, match="pinch_min_hold_ms"):
            config.engine_config()

    def test_mistyped_profile_value_raises(self, config):
        config.load_dict({"profiles": {"fast": {"mirror_input": "no"}}})
        assert config.engine_config().mirror_input is True
        with pytest.raises(ConfigError, match="mirror_input"):
            config.engine_config("fast")

    def test_main_rejects_mistyped_config(self, config, tmp_path):
        from media_gestures.cli import main

        path = tmp_path / "config.yaml"
        path.write_text("engine:\n  pinch_min_hold_ms: \"300\"\n")
        frames = tmp_path / "frames.jsonl"
        frames.write_text("")
        assert main([str(frames), "--config", str(path), "--log-level", "WARNING"]) == 2

    def test_invalid_value_raises(self, config):
        config.load_dict({"engine": {"two_fist_action": "mute"}})
        with pytest.raises(ConfigError):
            config.engine_config()

    def test_bundled_yaml_type_checks_clean(self, config):
        config.load()
        assert config.check() == []
        assert config.path.endswith("config.yaml")

    def test_type_problems_reported(self, config):
        config.load_dict({
            "engine": {"pinch_threshold_px": "wide", "mirror_input": 1},
            "profiles": {"fast": {"discrete_cooldown_ms": True}},
        })
        problems = config.check()
        assert len(problems) == 3
        assert any(p.startswith("profiles.fast.discrete_cooldown_ms") for p in problems)
        assert config.path is None

    def test_get_default(self, config):
        config.load_dict({})
        assert config.get("engine.missing", 3) == 3
        assert config.get_section("engine") == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
