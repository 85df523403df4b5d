import numpy as np
import pytest

from vizloop.contracts.failure import IndexOutOfRangeError
from vizloop.data.diagnostics import (
    cube_faces,
    global_max_abs,
    max_abs,
    nudged_faces,
    windowed_color_limits,
    zonal_mean,
)
from vizloop.data.time_series import ArrayTimeSeries

pytestmark = [pytest.mark.unit, pytest.mark.data]


@pytest.fixture
def amplitude_store():
    """Snapshot k (1-based) has max |value| = k."""
    snapshots = [np.array([[0.0, -float(k)], [0.5, 0.1]]) for k in range(1, 11)]
    return ArrayTimeSeries(snapshots, name="amp")


def test_max_abs_ignores_sign_and_nan():
    """max_abs is the largest magnitude, NaN ignored."""
    assert max_abs([[1.0, -4.0], [np.nan, 2.0]]) == 4.0


def test_global_max_abs(amplitude_store):
    """Largest magnitude over the whole series."""
    assert global_max_abs(amplitude_store) == 10.0


def test_window_branch_averages_following_maxima(amplitude_store):
    """Mean of the maxima over the window ahead of the index."""
    # N=10, window=3: index 2 <= 7 so frames 2, 3, 4 are averaged
    assert windowed_color_limits(amplitude_store, 2, window=3) == (-1.5, 1.5)


def test_tail_branch_uses_current_snapshot_only(amplitude_store):
    """Near the end only the current snapshot counts."""
    # index 9 > 10 - 3
    assert windowed_color_limits(amplitude_store, 9, window=3) == (-4.5, 4.5)


def test_branch_boundary(amplitude_store):
    """Switch between branches happens at N - window."""
    # index == N - window still has a full window: frames 7, 8, 9
    assert windowed_color_limits(amplitude_store, 7, window=3) == (-4.0, 4.0)
    assert windowed_color_limits(amplitude_store, 8, window=3) == (-4.0, 4.0)


def test_window_larger_than_series_uses_current_snapshot(amplitude_store):
    """A window longer than the series falls back to the current snapshot."""
    assert windowed_color_limits(amplitude_store, 1, window=30) == (-0.5, 0.5)


def test_fraction_scales_the_limit(amplitude_store):
    """Fraction scales the limit linearly."""
    assert windowed_color_limits(amplitude_store, 10, window=3, fraction=1.0) == (-10.0, 10.0)


def test_invalid_window_and_index(amplitude_store):
    """Bad window or index raises."""
    with pytest.raises(ValueError):
        windowed_color_limits(amplitude_store, 1, window=0)
    with pytest.raises(IndexOutOfRangeError):
        windowed_color_limits(amplitude_store, 11)


def test_zonal_mean_averages_along_x():
    """Zonal mean averages over x."""
    field = np.array([[1.0, 2.0, 3.0], [3.0, 4.0, 5.0]])
    np.testing.assert_allclose(zonal_mean(field), [2.0, 3.0, 4.0])
    np.testing.assert_allclose(zonal_mean(field, axis=1), [2.0, 4.0])


def test_cube_faces_slices():
    """Six faces of a 3D field."""
    field = np.arange(2 * 3 * 4).reshape(2, 3, 4)
    faces = cube_faces(field)

    assert set(faces) == {"east", "west", "south", "north", "bottom", "top"}
    np.testing.assert_array_equal(faces["east"], field[0])
    np.testing.assert_array_equal(faces["west"], field[-1])
    np.testing.assert_array_equal(faces["south"], field[:, 0, :])
    np.testing.assert_array_equal(faces["north"], field[:, -1, :])
    np.testing.assert_array_equal(faces["bottom"], field[:, :, 0])
    np.testing.assert_array_equal(faces["top"], field[:, :, -1])


def test_cube_faces_requires_3d():
    """cube_faces rejects non-3D input."""
    with pytest.raises(ValueError):
        cube_faces(np.zeros((2, 2)))


def test_nudged_faces_shift_along_normals():
    """Faces move outwards along their normals."""
    x, y, z = np.meshgrid(np.arange(2.0), np.arange(3.0), np.arange(4.0), indexing="ij")
    xfaces, yfaces, zfaces = nudged_faces(x, y, z, 0.1)

    np.testing.assert_allclose(xfaces["west"], x[-1] + 0.1)
    np.testing.assert_allclose(xfaces["east"], x[0] - 0.1)
    np.testing.assert_allclose(yfaces["south"], y[:, 0, :] + 0.1)
    np.testing.assert_allclose(yfaces["north"], y[:, -1, :] - 0.1)
    np.testing.assert_allclose(zfaces["top"], z[:, :, -1] + 0.1)
    np.testing.assert_allclose(zfaces["bottom"], z[:, :, 0] - 0.1)
    # inputs untouched
    assert x[-1].max() == 1.0
