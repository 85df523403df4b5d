"""Test config resolution and validation with Pydantic."""

import math

import pytest
from pydantic import ValidationError

from vizloop.schemas import ParamConfig, UserConfig, CLIConfig, InternalConfig
from vizloop.schemas.resolve import deep_merge, resolve_config


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Defaults come from ParamConfig."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.mode == "offline"
        assert config.animation.framerate == 24
        assert config.animation.format == "mp4"
        assert config.animation.writer == "auto"
        assert config.colorrange.window == 30
        assert config.colorrange.fraction == 0.5
        assert config.live.ticks == 100
        assert config.live.steps_per_tick == 10
        assert config.stepper.extent == pytest.approx((2 * math.pi, 2 * math.pi))
        assert config.logging.level == "INFO"

    def test_param_config_is_optional(self):
        """ParamConfig defaults when omitted."""
        assert resolve_config() == resolve_config(ParamConfig(), None, None)

    def test_user_config_overrides_param_config(self):
        """User values override expert defaults."""
        config = resolve_config(ParamConfig(), UserConfig(window=10, cmap="magma"), None)

        assert config.colorrange.window == 10
        assert config.visualization.cmap == "magma"
        assert config.colorrange.fraction == 0.5

    def test_cli_overrides_user(self):
        """CLI values override user values."""
        user = UserConfig(framerate=12, output_format="gif")
        cli = CLIConfig(framerate=30)

        config = resolve_config(ParamConfig(), user, cli)

        assert config.animation.framerate == 30
        assert config.animation.format == "gif"

    def test_dict_inputs_are_validated(self):
        """Plain dicts are accepted at every layer."""
        config = resolve_config({"mode": "live"}, {"TICKS": 5}, {"log_level": "DEBUG"})

        assert config.mode == "live"
        assert config.live.ticks == 5
        assert config.logging.level == "DEBUG"

    def test_nested_user_overrides_merge_deeply(self):
        """Nested overrides keep sibling defaults."""
        user = UserConfig(stepper={"dt": 0.01})
        config = resolve_config(ParamConfig(), user, None)

        assert config.stepper.dt == 0.01
        assert config.stepper.shape == (128, 128)

    def test_png_format_selects_frames_writer(self):
        """PNG output picks the frames writer."""
        config = resolve_config(ParamConfig(), None, CLIConfig(output_format="png"))
        assert config.animation.writer == "frames"

    def test_explicit_writer_must_match_format(self):
        """Writer and format must agree."""
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(animation={"writer": "pillow"}), None)
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(animation={"writer": "frames", "format": "gif"}), None)

    def test_frame_range_must_be_ordered(self):
        """frame_stop before frame_start is rejected."""
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(frame_start=5, frame_stop=2), None)

    def test_internal_config_is_frozen(self):
        """InternalConfig is immutable."""
        config = resolve_config(ParamConfig(), None, None)
        with pytest.raises(ValidationError):
            config.mode = "live"

    def test_internal_config_rejects_unknown_fields(self):
        """InternalConfig forbids unknown fields."""
        data = resolve_config(ParamConfig(), None, None).model_dump()
        data["station"] = "unused"
        with pytest.raises(ValidationError):
            InternalConfig.model_validate(data)


def test_deep_merge():
    """Nested dicts merge; inputs are not modified."""
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    override = {"b": {"d": 4, "e": 5}, "f": 6}

    assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}
