"""Rendering surfaces, plot bindings and frame recorders."""

from .surface import PlotHandle, RenderingSurface, MatplotlibSurface
from .binding import PlotBinding
from .recorder import FrameRecorder, MovieRecorder, FrameDirectoryRecorder

__all__ = [
    'PlotHandle',
    'RenderingSurface',
    'MatplotlibSurface',
    'PlotBinding',
    'FrameRecorder',
    'MovieRecorder',
    'FrameDirectoryRecorder',
]
