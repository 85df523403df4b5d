"""Animation driver: advance a source cell and capture each frame.

The driver is the only writer of its source cell during a run and the only
owner of its recorder. One step is always ``set`` (the full cascade runs
synchronously) followed by ``capture``; the two never interleave.
"""

import logging
import threading
import time
from enum import Enum
from typing import Iterable, List, Optional

from vizloop.contracts.base import require
from vizloop.contracts.failure import (
    AnimationCancelled,
    FailurePolicy,
    IndexOutOfRangeError,
    SubscriptionError,
    classify,
)
from vizloop.reactive.frame_index import FrameIndex

__all__ = ['DriverState', 'DriverMode', 'DriverReport', 'AnimationDriver']

logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class DriverMode(str, Enum):
    OFFLINE = "offline"
    LIVE = "live"


def _failed_bindings(exc: BaseException) -> List[str]:
    if isinstance(exc, SubscriptionError):
        return [subscriber for _, subscriber, _ in exc.failures]
    return []


class DriverReport:
    """Outcome of one animation run.

    Attributes
    ----------
    state : DriverState
        ``COMPLETED`` or ``ABORTED``.
    frames_advanced : int
        Steps whose cascade ran (including recovered ones).
    frames_captured : int
        Frames handed to the recorder.
    recovered : list of (frame, exception)
        Failures that were logged and skipped over.
    error : Exception or None
        The failure that aborted the run.
    failed_frame
        Frame at which the run aborted.
    failed_bindings : list of str
        Subscribers named by the aborting ``SubscriptionError``.
    output : Path or None
        Finalized output of the recorder.
    """

    def __init__(self, name: str, mode: DriverMode):
        self.name = name
        self.mode = mode
        self.state = DriverState.RUNNING
        self.frames_advanced = 0
        self.frames_captured = 0
        self.recovered: list = []
        self.error: Optional[BaseException] = None
        self.failed_frame = None
        self.failed_bindings: List[str] = []
        self.output = None
        self.elapsed = 0.0

    @property
    def ok(self) -> bool:
        return self.state is DriverState.COMPLETED

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, AnimationCancelled)

    def raise_for_status(self) -> None:
        """Re-raise the aborting error, if any."""
        if self.state is DriverState.ABORTED and self.error is not None:
            raise self.error

    def __repr__(self):
        return (
            f"DriverReport(name={self.name!r}, state={self.state.value}, "
            f"advanced={self.frames_advanced}, captured={self.frames_captured}, "
            f"recovered={len(self.recovered)})"
        )


class AnimationDriver:
    """Advance a source cell frame by frame and record the result.

    Parameters
    ----------
    source : Observable
        Cell the driver writes. Offline runs usually use a ``FrameIndex``;
        live runs use a time cell.
    recorder : FrameRecorder, optional
        Receives one ``capture`` per completed step.
    cancel_event : threading.Event, optional
        Shared cancellation flag. Checked between steps, never mid-cascade.
    name : str
        Used in logs and reports.

    Notes
    -----
    A step whose cascade fails only with rendering errors is recorded in
    ``DriverReport.recovered`` and still captured: the failing bindings keep
    their last-good drawing. Setting the source to a frame outside
    ``[1, N]`` is recorded and skipped. Any other failure (a derived cell
    that cannot recompute, a recorder error), cancellation or Ctrl+C aborts
    the recorder (removing partial output) and ends the run in ``ABORTED``.

    Example usage::

        n = FrameIndex.for_store(store)
        driver = AnimationDriver(n, recorder=MovieRecorder(fig, "movies/T.mp4"))
        report = driver.start("offline", frames=range(1, 101))
        report.raise_for_status()

        live = AnimationDriver(time_cell, recorder)
        live.start("live", stepper=stepper, ticks=100, steps_per_tick=10)
    """

    def __init__(self, source, recorder=None, cancel_event: Optional[threading.Event] = None,
                 name: str = "animation"):
        self.source = source
        self.recorder = recorder
        self.cancel_event = cancel_event or threading.Event()
        self.name = name
        self._state = DriverState.IDLE
        self.report: Optional[DriverReport] = None

    @property
    def state(self) -> DriverState:
        return self._state

    def cancel(self) -> None:
        """Request cancellation; takes effect before the next step."""
        self.cancel_event.set()
        logger.info("Cancellation requested for '%s'", self.name)

    def start(self, mode="offline", *, frames: Optional[Iterable[int]] = None,
              stepper=None, ticks: Optional[int] = None, steps_per_tick: int = 1) -> DriverReport:
        """Run the animation to completion, cancellation or a fatal failure.

        Parameters
        ----------
        mode : {"offline", "live"}
            Offline sets the source to each of ``frames`` in order. Live
            advances ``stepper`` by ``steps_per_tick`` then sets the source
            to ``stepper.current_time()``, ``ticks`` times.
        frames : iterable of int, optional
            Offline frames; defaults to every frame of a ``FrameIndex``.
        stepper : SimulationStepper, optional
            Required in live mode.
        ticks : int, optional
            Number of live steps.
        steps_per_tick : int
            Stepper iterations between live frames.

        Returns
        -------
        DriverReport

        Raises
        ------
        ContractViolation
            If the driver has already run or the arguments do not fit the mode.
        """
        require(self._state is DriverState.IDLE,
                f"Driver '{self.name}' contract violated: cannot start from {self._state.value}")
        mode = DriverMode(mode)

        if mode is DriverMode.OFFLINE:
            if frames is None:
                require(isinstance(self.source, FrameIndex),
                        f"Driver '{self.name}': offline run needs frames or a FrameIndex source")
                frames = self.source.frames()
            steps = list(frames)
        else:
            require(stepper is not None, f"Driver '{self.name}': live run needs a stepper")
            require(ticks is not None and ticks >= 0,
                    f"Driver '{self.name}': live run needs ticks >= 0, got {ticks}")
            require(steps_per_tick >= 1,
                    f"Driver '{self.name}': steps_per_tick must be >= 1, got {steps_per_tick}")
            steps = list(range(1, ticks + 1))

        self._state = DriverState.RUNNING
        report = DriverReport(self.name, mode)
        self.report = report
        started = time.time()
        logger.info("Animation '%s' starting: mode=%s, steps=%d", self.name, mode.value, len(steps))

        if self.recorder is not None:
            try:
                self.recorder.open()
            except Exception as exc:
                return self._abort(report, None, exc, started)

        frame = None
        try:
            for frame in steps:
                if self.cancel_event.is_set():
                    return self._abort(report, frame, AnimationCancelled(self.name, frame), started)

                try:
                    self._advance(mode, frame, stepper, steps_per_tick)
                except (SubscriptionError, IndexOutOfRangeError) as exc:
                    if classify(exc) is FailurePolicy.ABORT:
                        return self._abort(report, frame, exc, started)
                    report.recovered.append((frame, exc))
                    logger.warning("Frame %s of '%s' recovered: %s", frame, self.name, exc)
                    if isinstance(exc, IndexOutOfRangeError):
                        continue
                except Exception as exc:
                    return self._abort(report, frame, exc, started)

                report.frames_advanced += 1

                if self.recorder is not None:
                    try:
                        self.recorder.capture(frame)
                    except Exception as exc:
                        return self._abort(report, frame, exc, started)
                    report.frames_captured += 1
                logger.debug("Frame %s of '%s' done", frame, self.name)
        except KeyboardInterrupt:
            logger.info("Shutdown signal received (Ctrl+C)")
            return self._abort(report, frame, AnimationCancelled(self.name, frame), started)

        if self.recorder is not None:
            try:
                report.output = self.recorder.close()
            except Exception as exc:
                return self._abort(report, frame, exc, started)

        self._state = DriverState.COMPLETED
        report.state = DriverState.COMPLETED
        report.elapsed = time.time() - started
        logger.info(
            "Animation '%s' completed: %d advanced, %d captured, %d recovered (%.1f s)",
            self.name, report.frames_advanced, report.frames_captured,
            len(report.recovered), report.elapsed,
        )
        return report

    def _advance(self, mode: DriverMode, frame, stepper, steps_per_tick: int) -> None:
        if mode is DriverMode.OFFLINE:
            self.source.set(frame)
        else:
            stepper.advance(steps_per_tick)
            self.source.set(stepper.current_time())

    def _abort(self, report: DriverReport, frame, exc: BaseException, started: float) -> DriverReport:
        if self.recorder is not None:
            self.recorder.abort()
        self._state = DriverState.ABORTED
        report.state = DriverState.ABORTED
        report.error = exc
        report.failed_frame = frame
        report.failed_bindings = _failed_bindings(exc)
        report.elapsed = time.time() - started

        if isinstance(exc, AnimationCancelled):
            logger.info("Animation '%s' cancelled before frame %s", self.name, frame)
        else:
            logger.error(
                "Animation '%s' aborted at frame %s (bindings: %s): %s",
                self.name, frame, ", ".join(report.failed_bindings) or "-", exc,
            )
        return report
