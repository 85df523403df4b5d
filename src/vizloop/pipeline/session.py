"""Visualization session: one cell graph, one figure, its recorders and drivers.

The session is the composition root. Every cell, binding, recorder and
driver it creates is owned by the session instance; nothing lives at
module level, so two sessions never share state.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from vizloop.data.diagnostics import windowed_color_limits
from vizloop.pipeline.driver import AnimationDriver
from vizloop.reactive.derived import DerivedCell
from vizloop.reactive.frame_index import FrameIndex
from vizloop.reactive.observable import Observable
from vizloop.schemas import InternalConfig
from vizloop.setup_directories import (
    get_log_path,
    get_movie_path,
    get_snapshot_path,
    setup_output_directories,
)
from vizloop.simulation.stepper import DiffusionStepper
from vizloop.simulation.writer import SnapshotWriter
from vizloop.visualization.binding import PlotBinding
from vizloop.visualization.recorder import FrameDirectoryRecorder, MovieRecorder
from vizloop.visualization.surface import MatplotlibSurface

__all__ = ['VisualizationSession', 'setup_logging']

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_path=None) -> Optional[Path]:
    """Configure the root logger with a console and (optionally) a file handler.

    Existing root handlers are removed so repeated calls do not duplicate
    output.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Clear existing handlers and add new ones
    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)
    return log_path


class VisualizationSession:
    """Owns the figure, cells, bindings, recorders and drivers of one run.

    Parameters
    ----------
    config : InternalConfig
        Resolved configuration.
    output_dirs : dict, optional
        Output directories; created from ``config.base_dir`` on first use
        when omitted.

    Example usage::

        config = resolve_config(ParamConfig(), {"fps": 12})
        with VisualizationSession(config) as session:
            store = NetCDFTimeSeries("snapshots/diffusion.nc", "tracer")
            n = session.frame_index(store)
            field = session.lift(n, store.snapshot_at, name="tracer")
            limits = session.color_limits(store, n)
            session.bind("heatmap", field, {"colorrange": limits})
            session.bind("label", session.lift(n, lambda i: f"t = {store.time_at(i):.2f}"))
            recorder = session.recorder("tracer")
            report = session.driver(n, recorder).start("offline", frames=session.offline_frames(n))
    """

    def __init__(self, config: InternalConfig, output_dirs: Optional[Dict[str, Path]] = None):
        self.config = config
        self._output_dirs = output_dirs
        viz = config.visualization
        self.surface = MatplotlibSurface(
            nrows=viz.nrows, ncols=viz.ncols, figsize=viz.figsize, dpi=viz.dpi, cmap=viz.cmap,
        )
        self.cancel_event = threading.Event()
        self.cells: List[Observable] = []
        self.bindings: List[PlotBinding] = []
        self.recorders: list = []
        self.drivers: List[AnimationDriver] = []
        self._closed = False

    @property
    def output_dirs(self) -> Dict[str, Path]:
        if self._output_dirs is None:
            self._output_dirs = setup_output_directories(self.config.base_dir)
        return self._output_dirs

    def setup_logging(self) -> Path:
        """Log to the console and ``logs/vizloop.log`` at the configured level."""
        return setup_logging(self.config.logging.level, get_log_path(self.output_dirs))

    # ------------------------------------------------------------------
    # Cells
    # ------------------------------------------------------------------

    def cell(self, value: Any = None, name: Optional[str] = None) -> Observable:
        """A plain observable owned by this session."""
        cell = Observable(value, name=name)
        self.cells.append(cell)
        return cell

    def frame_index(self, store, start: int = 1, name: str = "frame") -> FrameIndex:
        """Frame index covering every sample of ``store``."""
        index = FrameIndex.for_store(store, start=start, name=name)
        self.cells.append(index)
        return index

    def lift(self, upstream: Observable, func: Callable[[Any], Any], name: Optional[str] = None) -> DerivedCell:
        derived = DerivedCell(upstream, func, name=name)
        self.cells.append(derived)
        return derived

    def color_limits(self, store, index: Observable, name: str = "colorrange") -> DerivedCell:
        """Windowed symmetric color range that follows ``index``."""
        window = self.config.colorrange.window
        fraction = self.config.colorrange.fraction
        return self.lift(
            index,
            lambda i: windowed_color_limits(store, i, window=window, fraction=fraction),
            name=name,
        )

    def offline_frames(self, index: FrameIndex) -> range:
        """Frames selected by ``animation.frame_start``/``frame_stop``.

        Raises
        ------
        IndexOutOfRangeError
            If either bound lies outside the store.
        """
        animation = self.config.animation
        return index.frames(animation.frame_start, animation.frame_stop)

    # ------------------------------------------------------------------
    # Rendering and recording
    # ------------------------------------------------------------------

    def bind(self, kind: str, data, style: Optional[Dict[str, Any]] = None,
             name: Optional[str] = None) -> PlotBinding:
        binding = PlotBinding(self.surface, kind, data, style=style, name=name)
        self.bindings.append(binding)
        return binding

    def recorder(self, target):
        """Recorder for this session's figure.

        Parameters
        ----------
        target : str or Path
            A variable name (output goes to ``movies/<name>.<format>`` or
            ``frames/<name>/``) or an explicit path.
        """
        animation = self.config.animation
        if isinstance(target, Path) or Path(str(target)).suffix or "/" in str(target):
            path = Path(target)
        else:
            path = get_movie_path(self.output_dirs, str(target), animation.format)

        dpi = self.config.visualization.dpi
        if animation.writer == "frames":
            recorder = FrameDirectoryRecorder(self.surface.figure, path, dpi=dpi)
        else:
            recorder = MovieRecorder(
                self.surface.figure, path,
                framerate=animation.framerate, dpi=dpi,
                codec=animation.codec, writer=animation.writer,
            )
        self.recorders.append(recorder)
        return recorder

    def driver(self, source: Observable, recorder=None, name: str = "animation") -> AnimationDriver:
        """Driver sharing this session's cancellation event."""
        driver = AnimationDriver(source, recorder=recorder, cancel_event=self.cancel_event, name=name)
        self.drivers.append(driver)
        return driver

    # ------------------------------------------------------------------
    # Live mode collaborators
    # ------------------------------------------------------------------

    def stepper(self) -> DiffusionStepper:
        cfg = self.config.stepper
        return DiffusionStepper(
            shape=cfg.shape, extent=cfg.extent, dt=cfg.dt,
            diffusivity=cfg.diffusivity, seed=cfg.seed,
        )

    def snapshot_writer(self, stepper, name: str = "snapshots", variables=None) -> SnapshotWriter:
        path = get_snapshot_path(self.output_dirs, name)
        return SnapshotWriter(stepper, path, interval=self.config.stepper.snapshot_interval,
                              variables=variables)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Cancel every driver of this session before its next frame."""
        self.cancel_event.set()

    def close(self) -> None:
        """Dispose bindings, abort recorders left open and close the figure."""
        if self._closed:
            return
        self._closed = True
        for binding in self.bindings:
            binding.dispose()
        for recorder in self.recorders:
            if recorder.is_open:
                recorder.abort()
        self.surface.close()
        logger.debug("Session closed (%d cells, %d bindings)", len(self.cells), len(self.bindings))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
