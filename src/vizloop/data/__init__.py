"""Time-series stores and snapshot diagnostics."""

from vizloop.data.time_series import TimeSeriesStore, ArrayTimeSeries, NetCDFTimeSeries
from vizloop.data.diagnostics import (
    max_abs,
    global_max_abs,
    windowed_color_limits,
    zonal_mean,
    cube_faces,
    nudged_faces,
)

__all__ = [
    "TimeSeriesStore",
    "ArrayTimeSeries",
    "NetCDFTimeSeries",
    "max_abs",
    "global_max_abs",
    "windowed_color_limits",
    "zonal_mean",
    "cube_faces",
    "nudged_faces",
]
