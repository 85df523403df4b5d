"""Frame recorders: capture rendered figures into an ordered output.

A recorder is owned by exactly one animation driver. It is opened before
the first frame, receives one ``capture`` per frame after the cascade for
that frame has completed, and is either closed (normal completion) or
aborted (the partial output is removed).
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from matplotlib import animation

from vizloop.contracts.base import require
from vizloop.contracts.failure import CaptureError

__all__ = ['FrameRecorder', 'MovieRecorder', 'FrameDirectoryRecorder', 'build_writer']

logger = logging.getLogger(__name__)


def build_writer(path: Path, framerate: int, codec: Optional[str] = None, writer: str = "auto"):
    """Matplotlib movie writer for ``path``.

    ``writer="auto"`` picks Pillow for ``.gif`` and FFmpeg for everything
    else.
    """
    if writer == "auto":
        writer = "pillow" if path.suffix.lower() == ".gif" else "ffmpeg"
    if writer == "pillow":
        return animation.PillowWriter(fps=framerate)
    if writer == "ffmpeg":
        if codec:
            return animation.FFMpegWriter(fps=framerate, codec=codec)
        return animation.FFMpegWriter(fps=framerate)
    raise ValueError(f"Unknown movie writer '{writer}'; expected auto, pillow or ffmpeg")


class FrameRecorder(ABC):
    """Ordered sink for rendered frames."""

    def __init__(self, figure, path):
        self.figure = figure
        self.path = Path(path)
        self.captured = 0
        self.frames: List = []
        self.is_open = False

    def open(self) -> None:
        require(not self.is_open, f"Recorder contract violated: {self.path} already open")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._open()
        except Exception as exc:
            raise CaptureError("setup", self.path, str(exc)) from exc
        self.is_open = True
        logger.info("Recording to %s", self.path)

    def capture(self, frame) -> None:
        """Append the figure as it is rendered right now.

        Raises
        ------
        CaptureError
            If the writer fails; carries the frame and the output path.
        """
        require(self.is_open, f"Recorder contract violated: {self.path} is not open")
        try:
            self._capture(frame)
        except Exception as exc:
            raise CaptureError(frame, self.path, f"{type(exc).__name__}: {exc}") from exc
        self.captured += 1
        self.frames.append(frame)

    def close(self) -> Path:
        """Finalize the output."""
        if self.is_open:
            self.is_open = False
            try:
                self._close()
            except Exception as exc:
                raise CaptureError("finalize", self.path, str(exc)) from exc
            logger.info("Recording finalized: %s (%d frames)", self.path, self.captured)
        return self.path

    def abort(self) -> None:
        """Release the writer and remove partially written output."""
        was_open = self.is_open
        self.is_open = False
        if was_open:
            try:
                self._close()
            except Exception as exc:
                logger.warning("Writer for %s did not finish cleanly: %s", self.path, exc)
        self._discard()
        logger.warning("Recording aborted: %s (%d frames discarded)", self.path, self.captured)

    @abstractmethod
    def _open(self) -> None:
        ...

    @abstractmethod
    def _capture(self, frame) -> None:
        ...

    @abstractmethod
    def _close(self) -> None:
        ...

    @abstractmethod
    def _discard(self) -> None:
        ...


class MovieRecorder(FrameRecorder):
    """Record frames into one movie file with a matplotlib writer.

    Parameters
    ----------
    figure : matplotlib.figure.Figure
        Figure to grab.
    path : str or Path
        Output file; ``.gif`` uses Pillow, other suffixes use FFmpeg.
    framerate : int
        Frames per second.
    dpi : int, optional
        Output resolution (default: the figure's).
    codec : str, optional
        FFmpeg codec.
    writer : str
        ``auto``, ``pillow`` or ``ffmpeg``.
    """

    def __init__(self, figure, path, framerate: int = 24, dpi: Optional[int] = None,
                 codec: Optional[str] = None, writer: str = "auto"):
        super().__init__(figure, path)
        self.framerate = framerate
        self.dpi = dpi
        self.codec = codec
        self.writer_name = writer
        self._writer = None

    def _open(self) -> None:
        self._writer = build_writer(self.path, self.framerate, self.codec, self.writer_name)
        self._writer.setup(self.figure, str(self.path), dpi=self.dpi or self.figure.dpi)

    def _capture(self, frame) -> None:
        self._writer.grab_frame()

    def _close(self) -> None:
        writer, self._writer = self._writer, None
        if writer is not None:
            writer.finish()

    def _discard(self) -> None:
        if self.path.exists():
            self.path.unlink()


class FrameDirectoryRecorder(FrameRecorder):
    """Save every frame as its own image file in a directory.

    Parameters
    ----------
    figure : matplotlib.figure.Figure
        Figure to save.
    directory : str or Path
        Output directory.
    pattern : str
        File name pattern formatted with ``frame``.
    dpi : int, optional
        Output resolution.
    """

    def __init__(self, figure, directory, pattern: str = "frame_{frame:05d}.png", dpi: Optional[int] = None):
        super().__init__(figure, directory)
        self.pattern = pattern
        self.dpi = dpi
        self.files: List[Path] = []

    def _open(self) -> None:
        # The directory itself is the output.
        self.path.mkdir(parents=True, exist_ok=True)
        self.files = []

    def _capture(self, frame) -> None:
        target = self.path / self.pattern.format(frame=frame)
        self.figure.savefig(target, dpi=self.dpi or self.figure.dpi)
        self.files.append(target)

    def _close(self) -> None:
        pass

    def _discard(self) -> None:
        for target in self.files:
            if target.exists():
                target.unlink()
        self.files = []
