from pathlib import Path
import numpy as np
import xarray as xr


def make_decaying_snapshots(n_times: int = 10, shape=(4, 3), seed: int = 0):
    """Random snapshots whose amplitude halves every sample."""
    rng = np.random.default_rng(seed)
    base = rng.uniform(-1.0, 1.0, size=shape)
    return np.stack([base * 0.5 ** k for k in range(n_times)])


def write_fake_time_series_netcdf(
    path: Path,
    variable: str = "T",
    n_times: int = 10,
    shape=(4, 3),
    time_leading: bool = True,
):
    snapshots = make_decaying_snapshots(n_times, shape)
    times = np.linspace(0.0, 1.0, n_times)

    if time_leading:
        data_vars = {variable: (("time", "x", "y"), snapshots)}
    else:
        data_vars = {variable: (("x", "y", "time"), np.moveaxis(snapshots, 0, -1))}

    ds = xr.Dataset(
        data_vars=data_vars,
        coords={
            "time": times,
            "x": np.arange(shape[0], dtype=float),
            "y": np.arange(shape[1], dtype=float),
        },
        attrs={"source": "test"},
    )

    path.parent.mkdir(parents=True, exist_ok=True)
    ds.to_netcdf(path)
    ds.close()

    return path, snapshots, times
