"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and frozen. Runtime code reads attributes directly; fallback
defaults and ``.get()`` calls belong in resolution, not here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict, model_validator
from vizloop.schemas.base import VizLoopBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalAnimationConfig(VizLoopBaseModel):
    """Runtime recording configuration."""
    framerate: int = Field(ge=1)
    codec: Optional[str]
    writer: Literal["auto", "ffmpeg", "pillow", "frames"]
    format: Literal["mp4", "gif", "png"]
    capture: bool
    frame_start: int = Field(ge=1)
    frame_stop: Optional[int] = Field(ge=1)


class InternalLiveConfig(VizLoopBaseModel):
    """Runtime live mode configuration."""
    ticks: int = Field(ge=0)
    steps_per_tick: int = Field(ge=1)


class InternalStepperConfig(VizLoopBaseModel):
    """Runtime simulation configuration."""
    shape: tuple[int, int]
    extent: tuple[float, float]
    dt: float
    diffusivity: float
    seed: Optional[int]
    snapshot_interval: int


class InternalColorRangeConfig(VizLoopBaseModel):
    """Runtime color range configuration."""
    window: int = Field(ge=1)
    fraction: float = Field(gt=0)


class InternalVisualizationConfig(VizLoopBaseModel):
    """Runtime figure settings."""
    dpi: int
    figsize: tuple[float, float]
    cmap: str
    nrows: int
    ncols: int


class InternalLoggingConfig(VizLoopBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(VizLoopBaseModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        session = VisualizationSession(config)
        framerate = config.animation.framerate  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code

    All of that happens during config resolution, not in runtime code.
    """

    mode: Literal["offline", "live"]
    base_dir: str
    animation: InternalAnimationConfig
    live: InternalLiveConfig
    stepper: InternalStepperConfig
    colorrange: InternalColorRangeConfig
    visualization: InternalVisualizationConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )

    @model_validator(mode="after")
    def check_animation(self):
        """Frame range is ordered; the frames writer is the only PNG writer."""
        animation = self.animation
        if animation.frame_stop is not None and animation.frame_stop < animation.frame_start:
            raise ValueError(
                f"animation.frame_stop ({animation.frame_stop}) must be >= "
                f"frame_start ({animation.frame_start})"
            )
        if (animation.writer == "frames") != (animation.format == "png"):
            raise ValueError(
                f"animation.writer={animation.writer!r} cannot produce "
                f"format {animation.format!r}; use writer 'frames' with format 'png'"
            )
        if animation.writer == "pillow" and animation.format != "gif":
            raise ValueError("animation.writer='pillow' only writes gif")
        return self
