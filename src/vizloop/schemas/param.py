"""ParamConfig: Expert defaults for vizloop.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define
fallback values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

import math
from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from vizloop.schemas.base import VizLoopBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class AnimationConfig(VizLoopBaseModel):
    """Recording of offline and live animations."""
    framerate: int = Field(24, ge=1, description="Frames per second of the movie")
    codec: Optional[str] = None
    writer: Literal["auto", "ffmpeg", "pillow", "frames"] = "auto"
    format: Literal["mp4", "gif", "png"] = "mp4"
    capture: bool = True
    frame_start: int = Field(1, ge=1)
    frame_stop: Optional[int] = Field(None, ge=1, description="Last frame (inclusive); None means all")

    @field_validator("format", "writer", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Accept upper case and a leading dot ('.GIF')."""
        if isinstance(v, str):
            return v.lower().strip().lstrip(".")
        return v

    @model_validator(mode="after")
    def check_frame_range(self):
        if self.frame_stop is not None and self.frame_stop < self.frame_start:
            raise ValueError(
                f"frame_stop ({self.frame_stop}) must be >= frame_start ({self.frame_start})"
            )
        return self


class LiveConfig(VizLoopBaseModel):
    """Live mode: the stepper advances between frames."""
    ticks: int = Field(100, ge=0, description="Number of live frames")
    steps_per_tick: int = Field(10, ge=1, description="Simulation iterations per frame")


class StepperConfig(VizLoopBaseModel):
    """Toy diffusion simulation used for live animations."""
    shape: tuple[int, int] = (128, 128)
    extent: tuple[float, float] = (2 * math.pi, 2 * math.pi)
    dt: float = Field(0.02, gt=0)
    diffusivity: float = Field(1e-2, gt=0)
    seed: Optional[int] = None
    snapshot_interval: int = Field(10, ge=1, description="Iterations between saved snapshots")


class ColorRangeConfig(VizLoopBaseModel):
    """Windowed dynamic color range."""
    window: int = Field(30, ge=1, description="Samples averaged ahead of the current frame")
    fraction: float = Field(0.5, gt=0, description="Scale applied to the averaged maximum")


class VisualizationConfig(VizLoopBaseModel):
    """Figure settings."""
    dpi: int = Field(100, ge=50)
    figsize: tuple[float, float] = (8.0, 6.0)
    cmap: str = "RdBu_r"
    nrows: int = Field(1, ge=1)
    ncols: int = Field(1, ge=1)


class LoggingConfig(VizLoopBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(VizLoopBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    mode: Literal["offline", "live"] = "offline"
    base_dir: str = "output"
    animation: AnimationConfig = Field(default_factory=AnimationConfig)
    live: LiveConfig = Field(default_factory=LiveConfig)
    stepper: StepperConfig = Field(default_factory=StepperConfig)
    colorrange: ColorRangeConfig = Field(default_factory=ColorRangeConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
