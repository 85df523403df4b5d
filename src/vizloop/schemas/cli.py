"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: mode, output paths, format, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from vizloop.schemas.base import VizLoopBaseModel


class CLIConfig(VizLoopBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Notes
    -----
    If frame_start or frame_stop are provided but mode is not, mode is
    automatically set to "offline" (schema responsibility, not runtime).

    Usage
    -----
        cli_cfg = CLIConfig(
            base_dir="/scratch/movies",
            output_format="gif",
            frame_stop=50,
        )
        # mode automatically set to "offline"

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    mode: Optional[Literal["offline", "live"]] = None
    base_dir: Optional[str] = None
    output_format: Optional[Literal["mp4", "gif", "png"]] = None
    framerate: Optional[int] = Field(None, ge=1)
    frame_start: Optional[int] = Field(None, ge=1)
    frame_stop: Optional[int] = Field(None, ge=1)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("output_format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        if isinstance(v, str):
            return v.lower().strip().lstrip(".")
        return v

    @model_validator(mode="after")
    def infer_offline_mode_from_frames(self):
        """If a frame range is given but mode is not, the run is offline."""
        if self.mode is None:
            if self.frame_start is not None or self.frame_stop is not None:
                self.mode = "offline"
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.mode is not None:
            overrides["mode"] = self.mode

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        animation = {}
        if self.output_format is not None:
            animation["format"] = self.output_format
        if self.framerate is not None:
            animation["framerate"] = self.framerate
        if self.frame_start is not None:
            animation["frame_start"] = self.frame_start
        if self.frame_stop is not None:
            animation["frame_stop"] = self.frame_stop
        if animation:
            overrides["animation"] = animation

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
