"""Frame and shape contracts.

Boundary checks shared by frame indices, time-series stores and plot
bindings. Unlike ``require()``, these raise the recoverable error types:
a bad index or a bad array shape is a data problem, not a wiring bug.
"""

import numbers

import numpy as np
import xarray as xr

from vizloop.contracts.base import require
from vizloop.contracts.failure import IndexOutOfRangeError, ShapeMismatchError


def assert_frame_in_range(index, count: int, cell: str = "frame") -> None:
    """Enforce ``1 <= index <= count`` for an integer frame index.

    Booleans and non-integral numbers are rejected even when they would
    compare inside the range.

    Raises
    ------
    IndexOutOfRangeError
        If the index is not an integer in [1, count].
    """
    if isinstance(index, bool) or not isinstance(index, numbers.Integral):
        raise IndexOutOfRangeError(index, count, cell)
    if not 1 <= index <= count:
        raise IndexOutOfRangeError(index, count, cell)


def assert_same_shape(expected, value, binding: str = None, cell: str = None) -> None:
    """Enforce that ``value`` has the shape a primitive was drawn with.

    Parameters
    ----------
    expected : tuple
        Shape recorded when the primitive was first drawn.
    value : array-like
        New data for the primitive.

    Raises
    ------
    ShapeMismatchError
        If the shapes differ.
    """
    actual = np.shape(value)
    if tuple(actual) != tuple(expected):
        raise ShapeMismatchError(expected, actual, binding=binding, cell=cell)


def assert_time_series(ds: xr.Dataset, variable: str, time_dim: str = "time") -> None:
    """Enforce the layout of a persisted time series.

    Parameters
    ----------
    ds : xr.Dataset
        Dataset opened from a snapshot file.
    variable : str
        Variable that will be animated.
    time_dim : str
        Name of the leading time dimension.

    Raises
    ------
    ContractViolation
        If the variable is missing, is not time-leading, or is empty.
    """
    require(
        variable in ds.data_vars,
        f"Time series contract violated: missing '{variable}' variable"
    )
    da = ds[variable]
    require(
        da.ndim >= 1 and da.dims[0] == time_dim,
        f"Time series contract violated: '{variable}' dims {da.dims} "
        f"do not start with '{time_dim}'"
    )
    require(
        da.sizes[time_dim] >= 1,
        f"Time series contract violated: '{variable}' has no samples"
    )
