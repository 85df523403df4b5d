"""Diagnostics computed from snapshots for plot styling.

These are the small numerical helpers the plotting tutorials lean on:
dynamic color ranges, zonal averages, and the six faces of a 3D field.
"""

import logging
from typing import Dict, Tuple

import numpy as np

from vizloop.contracts.frames import assert_frame_in_range

__all__ = [
    'max_abs',
    'global_max_abs',
    'windowed_color_limits',
    'zonal_mean',
    'cube_faces',
    'nudged_faces',
]

logger = logging.getLogger(__name__)

FACE_NAMES = ("east", "west", "south", "north", "bottom", "top")


def max_abs(array) -> float:
    """Largest absolute value, ignoring NaNs."""
    return float(np.nanmax(np.abs(np.asarray(array, dtype=float))))


def global_max_abs(store) -> float:
    """Largest absolute value over every snapshot of a store."""
    return max(max_abs(snapshot) for snapshot in store)


def windowed_color_limits(store, index: int, window: int = 30, fraction: float = 0.5) -> Tuple[float, float]:
    """Symmetric color range following the amplitude of a decaying field.

    The limit is ``fraction`` times the mean of the per-snapshot maxima over
    the ``window`` samples starting at ``index``. Near the end of the series,
    where a full window no longer fits (``index > N - window``), only the
    current snapshot is used.

    Parameters
    ----------
    store : TimeSeriesStore
        Source of snapshots.
    index : int
        Frame index in ``[1, N]``.
    window : int
        Number of samples averaged ahead of ``index``.
    fraction : float
        Scale applied to the averaged maximum (0.5 halves it).

    Returns
    -------
    tuple of float
        ``(-limit, limit)``

    Examples
    --------
    >>> store = ArrayTimeSeries([[1.0], [-3.0], [2.0]])
    >>> windowed_color_limits(store, 1, window=2)
    (-1.0, 1.0)
    >>> windowed_color_limits(store, 3, window=2)
    (-1.0, 1.0)
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    n_samples = store.count()
    assert_frame_in_range(index, n_samples, store.name)

    if index > n_samples - window:
        peak = max_abs(store.snapshot_at(index))
    else:
        peak = float(np.mean([
            max_abs(store.snapshot_at(nn)) for nn in range(index, index + window)
        ]))

    limit = peak * fraction
    return (-limit, limit)


def zonal_mean(field, axis: int = 0) -> np.ndarray:
    """Average along the zonal (x) axis, giving a meridional profile."""
    return np.nanmean(np.asarray(field, dtype=float), axis=axis)


def cube_faces(field) -> Dict[str, np.ndarray]:
    """The six boundary slices of a 3D ``(x, y, z)`` field.

    Returns
    -------
    dict
        ``east``/``west`` are the first/last x-planes, ``south``/``north``
        the first/last y-planes, ``bottom``/``top`` the first/last z-planes.
    """
    field = np.asarray(field)
    if field.ndim != 3:
        raise ValueError(f"cube_faces expects a 3D field, got {field.ndim} dims")
    return {
        "east": field[0, :, :],
        "west": field[-1, :, :],
        "south": field[:, 0, :],
        "north": field[:, -1, :],
        "bottom": field[:, :, 0],
        "top": field[:, :, -1],
    }


def nudged_faces(x, y, z, nudge: float):
    """Coordinate faces shifted by ``nudge`` to close gaps between surfaces.

    Parameters
    ----------
    x, y, z : array-like
        3D coordinate fields with the same shape as the data.
    nudge : float
        Shift applied along each face's normal.

    Returns
    -------
    tuple of dict
        ``(xfaces, yfaces, zfaces)`` as returned by ``cube_faces`` (copies).
    """
    xfaces = {k: v.astype(float) for k, v in cube_faces(x).items()}
    yfaces = {k: v.astype(float) for k, v in cube_faces(y).items()}
    zfaces = {k: v.astype(float) for k, v in cube_faces(z).items()}

    xfaces["west"] += nudge
    yfaces["south"] += nudge
    zfaces["top"] += nudge
    xfaces["east"] -= nudge
    yfaces["north"] -= nudge
    zfaces["bottom"] -= nudge

    return xfaces, yfaces, zfaces
