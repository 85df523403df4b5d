"""Core animation rendering logic.

This module contains the actual renderers, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import json
import logging
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any

import numpy as np

from vizloop.data.diagnostics import zonal_mean
from vizloop.data.time_series import NetCDFTimeSeries
from vizloop.pipeline.session import VisualizationSession
from vizloop.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig
from vizloop.setup_directories import setup_output_directories, get_movie_path

__all__ = ['load_user_config_dict', 'resolve_run_config', 'render_time_series', 'render_live']

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load config module from {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def resolve_run_config(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
):
    """Resolve Param < User < CLI into an ``InternalConfig``."""
    param_cfg = ParamConfig()  # Expert defaults

    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"

    # Filter None values
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    return resolve_config(param_cfg, user_cfg, cli_cfg)


def _print_summary(title: str, config, source: str, output: Path, verbose: bool) -> None:
    print(f"\n{'='*60}")
    print(title)
    print('='*60)
    print(f"Source: {source}")
    print(f"Mode:   {config.mode}")
    print(f"Output: {output}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)


def render_time_series(
    netcdf_path: str,
    variable: str,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
):
    """Render an animation of one NetCDF variable, one frame per sample.

    The figure is a heatmap of the snapshot with a windowed dynamic color
    range and a title showing the sample time. The frame index drives
    everything; the recorder writes ``movies/<variable>.<ext>`` (or
    ``frames/<variable>/`` for PNG output).

    Parameters
    ----------
    netcdf_path : str
        NetCDF file with a ``(time, x, y)`` variable.
    variable : str
        Variable to animate.
    user_config_path : str, optional
        Python file with a CONFIG dict.
    cli_args : dict, optional
        CLI overrides. Keys: mode, base_dir, output_format, framerate,
        frame_start, frame_stop, log_level. All optional.
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    DriverReport

    Raises
    ------
    FileNotFoundError
        If a config or data file does not exist.
    ValueError
        If configuration validation fails, or the config asks for live mode.
    IndexOutOfRangeError
        If ``frame_start`` or ``frame_stop`` lies outside the stored samples.
    """
    config = resolve_run_config(user_config_path, cli_args, verbose)
    if config.mode != "offline":
        raise ValueError("render_time_series renders stored output; use render_live for mode='live'")

    output_dirs = setup_output_directories(config.base_dir)
    output = get_movie_path(output_dirs, variable, config.animation.format)
    _print_summary("vizloop offline animation", config, f"{netcdf_path}:{variable}", output, verbose)

    with VisualizationSession(config, output_dirs) as session:
        session.setup_logging()
        store = NetCDFTimeSeries(netcdf_path, variable)
        coords = {dim: store.coords[dim] for dim in ("x", "y") if dim in store.coords}

        n = session.frame_index(store)
        field = session.lift(n, store.snapshot_at, name=variable)
        limits = session.color_limits(store, n)
        title = session.lift(n, lambda i: f"{variable}, t = {store.time_at(i):.3f}", name="title")

        session.bind("heatmap", field, dict(coords, colorrange=limits, xlabel="x", ylabel="y"),
                     name=f"{variable}-map")
        session.bind("label", title, name="title")

        recorder = session.recorder(variable) if config.animation.capture else None
        driver = session.driver(n, recorder, name=variable)
        report = driver.start("offline", frames=session.offline_frames(n))

    logger.info("Offline animation of '%s' finished: %s", variable, report)
    return report


def render_live(
    variable: str = "tracer",
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
):
    """Run the diffusion stepper and record it while it runs.

    Every tick advances the simulation ``live.steps_per_tick`` iterations
    and sets the time cell; the heatmap, the zonal-mean profile and the
    title follow through derived cells. Snapshots are written every
    ``stepper.snapshot_interval`` iterations to ``snapshots/<variable>.nc``
    so the run can be re-rendered offline with ``render_time_series``.

    Returns
    -------
    DriverReport
    """
    cli_args = dict(cli_args or {})
    cli_args.setdefault("mode", "live")
    config = resolve_run_config(user_config_path, cli_args, verbose)

    output_dirs = setup_output_directories(config.base_dir)
    output = get_movie_path(output_dirs, variable, config.animation.format)
    _print_summary("vizloop live animation", config, "DiffusionStepper", output, verbose)

    with VisualizationSession(config, output_dirs) as session:
        session.setup_logging()
        stepper = session.stepper()
        fields = stepper.fields()
        if variable not in fields or np.ndim(fields[variable]) != 2:
            two_d = sorted(name for name, value in fields.items() if np.ndim(value) == 2)
            raise ValueError(f"Stepper has no 2D field '{variable}'; available: {two_d}")

        writer = session.snapshot_writer(stepper, name=variable)
        writer.capture()

        time = session.cell(stepper.current_time(), name="time")
        field = session.lift(time, lambda _: stepper.fields()[variable], name=variable)
        profile = session.lift(field, zonal_mean, name=f"{variable}-zonal-mean")
        limit = float(np.max(np.abs(fields[variable]))) or 1.0
        title = session.lift(time, lambda t: f"{variable}, t = {t:.3f}", name="title")

        time.watch(lambda _: writer.capture(), name="snapshot-writer")

        session.bind("heatmap", field,
                     {"x": stepper.x, "y": stepper.y, "colorrange": (-limit, limit), "axes": (0, 0)},
                     name=f"{variable}-map")
        if config.visualization.ncols >= 2:
            session.bind("line", profile,
                         {"coords": stepper.y, "orientation": "vertical", "axes": (0, 1),
                          "xlim": (-limit, limit)},
                         name=f"{variable}-profile")
        session.bind("label", title, name="title")

        recorder = session.recorder(variable) if config.animation.capture else None
        driver = session.driver(time, recorder, name=variable)
        report = driver.start(
            "live", stepper=stepper,
            ticks=config.live.ticks, steps_per_tick=config.live.steps_per_tick,
        )
        if writer.n_samples:
            writer.write()

    logger.info("Live animation of '%s' finished: %s", variable, report)
    return report
