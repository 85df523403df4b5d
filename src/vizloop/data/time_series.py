"""Read-only time series of simulation snapshots.

Stores are addressed by 1-based frame index, the same convention the
``FrameIndex`` cell uses, so ``store.snapshot_at(n.get())`` is always valid
for a frame index built with ``FrameIndex.for_store(store)``.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import xarray as xr

from vizloop.contracts.frames import assert_frame_in_range, assert_time_series

__all__ = ['TimeSeriesStore', 'ArrayTimeSeries', 'NetCDFTimeSeries']

logger = logging.getLogger(__name__)


class TimeSeriesStore(ABC):
    """Ordered ``(time, snapshot)`` pairs addressed by frame index."""

    name: str = "series"

    @abstractmethod
    def count(self) -> int:
        """Number of samples N."""
        ...

    @abstractmethod
    def _snapshot(self, position: int) -> np.ndarray:
        """Snapshot at 0-based position."""
        ...

    @property
    @abstractmethod
    def times(self) -> np.ndarray:
        ...

    def snapshot_at(self, index: int) -> np.ndarray:
        """Snapshot for frame ``index`` in ``[1, N]``.

        Raises
        ------
        IndexOutOfRangeError
            If ``index`` is outside the stored range.
        """
        assert_frame_in_range(index, self.count(), self.name)
        return self._snapshot(int(index) - 1)

    def time_at(self, index: int):
        assert_frame_in_range(index, self.count(), self.name)
        return self.times[int(index) - 1]

    def __len__(self):
        return self.count()

    def __iter__(self):
        for position in range(self.count()):
            yield self._snapshot(position)


class ArrayTimeSeries(TimeSeriesStore):
    """In-memory store backed by a ``(time, ...)`` numpy array.

    Parameters
    ----------
    snapshots : array-like
        Stacked snapshots with time as the leading axis.
    times : sequence, optional
        Sample times; defaults to ``0, 1, ..., N-1``.
    name : str
        Used in error reports.
    """

    def __init__(self, snapshots, times: Optional[Sequence] = None, name: str = "series"):
        data = np.asarray(snapshots)
        if data.ndim < 1 or data.shape[0] < 1:
            raise ValueError(f"Time series '{name}' needs at least one snapshot")
        if times is None:
            times = np.arange(data.shape[0], dtype=float)
        times = np.asarray(times)
        if times.shape[0] != data.shape[0]:
            raise ValueError(
                f"Time series '{name}' has {data.shape[0]} snapshots but {times.shape[0]} times"
            )
        data = data.view()
        data.setflags(write=False)
        self._data = data
        self._times = times
        self.name = name

    def count(self) -> int:
        return self._data.shape[0]

    @property
    def times(self) -> np.ndarray:
        return self._times

    @property
    def data(self) -> np.ndarray:
        return self._data

    def _snapshot(self, position: int) -> np.ndarray:
        return self._data[position]


class NetCDFTimeSeries(ArrayTimeSeries):
    """Store loaded once from a NetCDF variable with a leading time dimension.

    The file is opened with xarray, validated, loaded into memory and closed;
    afterwards the store never touches the file again.

    Parameters
    ----------
    path : str or Path
        NetCDF file, as written by ``SnapshotWriter`` or any tool producing
        CF-style ``(time, ...)`` variables.
    variable : str
        Variable to load.
    time_dim : str
        Name of the time dimension (default ``"time"``).

    Examples
    --------
    >>> store = NetCDFTimeSeries("output/snapshots/diffusion.nc", "tracer")
    >>> store.count()
    101
    >>> store.snapshot_at(1).shape
    (128, 128)
    """

    def __init__(self, path, variable: str, time_dim: str = "time"):
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Time series file not found: {self.path}")

        with xr.open_dataset(self.path) as ds:
            assert_time_series(ds, variable, time_dim)
            da = ds[variable].load()
            times = da[time_dim].values if time_dim in da.coords else None
            self.dims = da.dims[1:]
            self.coords = {
                dim: da[dim].values for dim in self.dims if dim in da.coords
            }
            self.attrs = dict(da.attrs)

        super().__init__(da.values, times=times, name=variable)
        logger.info("Loaded '%s' from %s: %d samples, shape %s",
                    variable, self.path, self.count(), self._data.shape[1:])
