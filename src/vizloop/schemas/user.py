"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., FPS → framerate, MODE → mode).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from vizloop.schemas.base import VizLoopBaseModel


class UserAnimationConfig(VizLoopBaseModel):
    """User-facing recording config."""
    framerate: Optional[int] = None
    codec: Optional[str] = None
    writer: Optional[str] = None
    format: Optional[str] = None
    capture: Optional[bool] = None
    frame_start: Optional[int] = None
    frame_stop: Optional[int] = None

    @field_validator("writer", "format", mode="before")
    @classmethod
    def normalize_names(cls, v):
        if isinstance(v, str):
            return v.lower().strip().lstrip(".")
        return v


class UserLiveConfig(VizLoopBaseModel):
    """User-facing live mode config."""
    ticks: Optional[int] = None
    steps_per_tick: Optional[int] = None


class UserStepperConfig(VizLoopBaseModel):
    """User-facing simulation config."""
    shape: Optional[tuple[int, int]] = None
    extent: Optional[tuple[float, float]] = None
    dt: Optional[float] = None
    diffusivity: Optional[float] = None
    seed: Optional[int] = None
    snapshot_interval: Optional[int] = None


class UserVisualizationConfig(VizLoopBaseModel):
    """User-facing figure config."""
    dpi: Optional[int] = None
    figsize: Optional[tuple[float, float]] = None
    cmap: Optional[str] = None
    nrows: Optional[int] = None
    ncols: Optional[int] = None


class UserConfig(VizLoopBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Notes
    -----
    ``fps`` is accepted as a synonym of ``framerate``; when both are given
    ``framerate`` wins. A frame range without a mode implies offline mode.

    Usage
    -----
        user_cfg = UserConfig(
            fps=30,
            window=20,
            cmap="balance",
            frame_stop=100,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    mode: Optional[Literal["offline", "live"]] = Field(None, alias="MODE")
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")

    # Recording (flat aliases)
    framerate: Optional[int] = Field(None, alias="FRAMERATE", ge=1)
    fps: Optional[int] = Field(None, alias="FPS", ge=1)
    output_format: Optional[str] = Field(None, alias="OUTPUT_FORMAT")
    codec: Optional[str] = Field(None, alias="CODEC")
    frame_start: Optional[int] = Field(None, alias="FRAME_START")
    frame_stop: Optional[int] = Field(None, alias="FRAME_STOP")

    # Live mode (flat aliases)
    ticks: Optional[int] = Field(None, alias="TICKS")
    steps_per_tick: Optional[int] = Field(None, alias="STEPS_PER_TICK")
    seed: Optional[int] = Field(None, alias="SEED")

    # Color range (flat aliases)
    window: Optional[int] = Field(None, alias="WINDOW")
    fraction: Optional[float] = Field(None, alias="FRACTION")

    # Figure (flat aliases)
    cmap: Optional[str] = Field(None, alias="CMAP")
    dpi: Optional[int] = Field(None, alias="DPI")
    figsize: Optional[tuple[float, float]] = Field(None, alias="FIGSIZE")

    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    animation: Optional[UserAnimationConfig] = None
    live: Optional[UserLiveConfig] = None
    stepper: Optional[UserStepperConfig] = None
    visualization: Optional[UserVisualizationConfig] = None

    model_config = VizLoopBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @model_validator(mode="after")
    def infer_offline_mode_from_frames(self):
        """A frame range only makes sense for an offline animation."""
        if self.mode is None:
            if self.frame_start is not None or self.frame_stop is not None:
                self.mode = "offline"
            elif self.animation and (
                self.animation.frame_start is not None or self.animation.frame_stop is not None
            ):
                self.mode = "offline"
        return self

    @field_validator("fraction", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("output_format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        if isinstance(v, str):
            return v.lower().strip().lstrip(".")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

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

        # Animation section
        animation = {}
        if self.fps is not None:
            animation["framerate"] = self.fps
        if self.framerate is not None:
            animation["framerate"] = self.framerate
        if self.output_format is not None:
            animation["format"] = self.output_format
        if self.codec is not None:
            animation["codec"] = self.codec
        if self.frame_start is not None:
            animation["frame_start"] = self.frame_start
        if self.frame_stop is not None:
            animation["frame_stop"] = self.frame_stop

        # Merge with explicit animation config
        if self.animation is not None:
            animation.update(self.animation.model_dump(exclude_none=True))

        if animation:
            overrides["animation"] = animation

        # Live section
        live = {}
        if self.ticks is not None:
            live["ticks"] = self.ticks
        if self.steps_per_tick is not None:
            live["steps_per_tick"] = self.steps_per_tick
        if self.live is not None:
            live.update(self.live.model_dump(exclude_none=True))
        if live:
            overrides["live"] = live

        # Stepper section
        stepper = {}
        if self.seed is not None:
            stepper["seed"] = self.seed
        if self.stepper is not None:
            stepper.update(self.stepper.model_dump(exclude_none=True))
        if stepper:
            overrides["stepper"] = stepper

        # Color range section
        colorrange = {}
        if self.window is not None:
            colorrange["window"] = self.window
        if self.fraction is not None:
            colorrange["fraction"] = self.fraction
        if colorrange:
            overrides["colorrange"] = colorrange

        # Visualization section
        visualization = {}
        if self.cmap is not None:
            visualization["cmap"] = self.cmap
        if self.dpi is not None:
            visualization["dpi"] = self.dpi
        if self.figsize is not None:
            visualization["figsize"] = self.figsize
        if self.visualization is not None:
            visualization.update(self.visualization.model_dump(exclude_none=True))
        if visualization:
            overrides["visualization"] = visualization

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
