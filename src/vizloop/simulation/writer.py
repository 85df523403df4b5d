"""Snapshot output writer: save model fields on an iteration interval.

Collects fields from a ``SimulationStepper`` every ``interval`` iterations
and writes them to one NetCDF file with a leading ``time`` dimension, which
``NetCDFTimeSeries`` reads back for post-hoc animation.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
import xarray as xr

__all__ = ['SnapshotWriter']

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """Record selected stepper fields every ``interval`` iterations.

    Parameters
    ----------
    stepper : SimulationStepper
        Model to sample.
    path : str or Path
        Output NetCDF file.
    interval : int
        Iteration interval between snapshots.
    variables : sequence of str, optional
        Field names to keep (default: every field the stepper exposes).

    Examples
    --------
    >>> writer = SnapshotWriter(stepper, "snapshots/diffusion.nc", interval=10)
    >>> writer.run(stop_iteration=1000)
    PosixPath('snapshots/diffusion.nc')
    """

    def __init__(self, stepper, path, interval: int = 10, variables: Optional[Sequence[str]] = None):
        if interval < 1:
            raise ValueError(f"interval must be >= 1, got {interval}")
        self.stepper = stepper
        self.path = Path(path)
        self.interval = interval
        self.variables = list(variables) if variables is not None else None
        self.times: List[float] = []
        self.iterations: List[int] = []
        self._samples: Dict[str, List[np.ndarray]] = {}

    @property
    def n_samples(self) -> int:
        return len(self.times)

    def capture(self) -> bool:
        """Store the current fields if the stepper is on the interval.

        Returns True when a snapshot was taken.
        """
        if self.stepper.iteration % self.interval != 0:
            return False
        if self.iterations and self.iterations[-1] == self.stepper.iteration:
            return False

        fields = self.stepper.fields()
        names = self.variables if self.variables is not None else sorted(fields)
        for name in names:
            if name not in fields:
                raise KeyError(f"Stepper has no field '{name}'; available: {sorted(fields)}")
            self._samples.setdefault(name, []).append(np.array(fields[name], copy=True))

        self.times.append(float(self.stepper.current_time()))
        self.iterations.append(int(self.stepper.iteration))
        logger.debug("Snapshot %d at iteration %d", self.n_samples, self.stepper.iteration)
        return True

    def run(self, stop_iteration: int) -> Path:
        """Advance the stepper to ``stop_iteration``, capturing on the way, then write."""
        self.capture()
        while self.stepper.iteration < stop_iteration:
            steps = min(self.interval - self.stepper.iteration % self.interval,
                        stop_iteration - self.stepper.iteration)
            self.stepper.advance(steps)
            self.capture()
        return self.write()

    def to_dataset(self) -> xr.Dataset:
        """Stack captured snapshots into an ``xarray.Dataset``."""
        if not self.times:
            raise ValueError("No snapshots captured")

        coords = {"time": np.asarray(self.times)}
        x = getattr(self.stepper, "x", None)
        y = getattr(self.stepper, "y", None)

        data_vars = {}
        for name, samples in self._samples.items():
            stacked = np.stack(samples)
            if stacked.ndim == 3:
                dims = ("time", "x", "y")
            elif stacked.ndim == 2:
                dims = ("time", "y")
            else:
                dims = ("time",) + tuple(f"{name}_dim{i}" for i in range(stacked.ndim - 1))
            data_vars[name] = (dims, stacked)
            if "x" in dims and x is not None and len(x) == stacked.shape[dims.index("x")]:
                coords["x"] = np.asarray(x)
            if "y" in dims and y is not None and len(y) == stacked.shape[dims.index("y")]:
                coords["y"] = np.asarray(y)

        ds = xr.Dataset(data_vars=data_vars, coords=coords)
        ds["iteration"] = ("time", np.asarray(self.iterations, dtype="int64"))
        ds.attrs["interval"] = self.interval
        return ds

    def write(self) -> Path:
        """Write all snapshots to ``path`` (overwrites)."""
        ds = self.to_dataset()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        encoding = {var: {"zlib": True, "complevel": 4} for var in ds.data_vars}
        ds.to_netcdf(self.path, mode="w", encoding=encoding)
        ds.close()
        logger.info("Saved %d snapshots [%s] to %s",
                    self.n_samples, ", ".join(self._samples), self.path)
        return self.path
