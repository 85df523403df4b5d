"""UserConfig aliases and normalization."""

import pytest
from pydantic import ValidationError

from vizloop.schemas import UserConfig


def test_uppercase_aliases():
    """Uppercase aliases map to nested sections."""
    user = UserConfig.model_validate({"FPS": 10, "WINDOW": 5, "CMAP": "viridis", "MODE": "live"})
    overrides = user.to_internal_overrides()

    assert overrides["animation"]["framerate"] == 10
    assert overrides["colorrange"]["window"] == 5
    assert overrides["visualization"]["cmap"] == "viridis"
    assert overrides["mode"] == "live"


def test_framerate_wins_over_fps():
    """framerate wins when fps is also given."""
    user = UserConfig(fps=10, framerate=24)
    assert user.to_internal_overrides()["animation"]["framerate"] == 24


def test_empty_user_config_has_no_overrides():
    """Empty user config overrides nothing."""
    assert UserConfig().to_internal_overrides() == {}


def test_unknown_keys_are_ignored():
    """Unknown user keys are ignored."""
    user = UserConfig.model_validate({"RADAR_ID": "KDIX", "fps": 5})
    assert "RADAR_ID" not in user.to_internal_overrides()


def test_format_and_level_are_normalized():
    """Format and log level are normalized."""
    user = UserConfig(output_format=".GIF", log_level="debug")
    overrides = user.to_internal_overrides()

    assert overrides["animation"]["format"] == "gif"
    assert overrides["logging"]["level"] == "DEBUG"


def test_frame_range_implies_offline_mode():
    """A frame range implies offline unless a mode is given."""
    assert UserConfig(frame_stop=10).mode == "offline"
    assert UserConfig(animation={"frame_start": 2}).mode == "offline"
    assert UserConfig(frame_stop=10, mode="live").mode == "live"
    assert UserConfig().mode is None


def test_nested_sections_override_flat_aliases():
    """Nested sections win over flat aliases."""
    user = UserConfig(ticks=5, live={"ticks": 7}, seed=1, stepper={"seed": 2})
    overrides = user.to_internal_overrides()

    assert overrides["live"]["ticks"] == 7
    assert overrides["stepper"]["seed"] == 2


def test_invalid_framerate_rejected():
    """Framerate must be positive."""
    with pytest.raises(ValidationError):
        UserConfig(fps=0)
