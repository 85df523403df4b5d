"""Contract and failure policy tests."""

import numpy as np
import pytest
import xarray as xr

from vizloop.contracts import (
    CaptureError,
    ContractViolation,
    FailurePolicy,
    IndexOutOfRangeError,
    RenderingError,
    ShapeMismatchError,
    SubscriptionError,
    assert_frame_in_range,
    assert_same_shape,
    assert_time_series,
    classify,
    require,
)

pytestmark = pytest.mark.unit


def test_require_passes_and_raises():
    """require() raises ContractViolation only when the condition is false."""
    require(True, "never raised")
    with pytest.raises(ContractViolation, match="wiring bug"):
        require(False, "wiring bug")


def test_contract_violation_is_runtime_error():
    """ContractViolation is a RuntimeError."""
    assert issubclass(ContractViolation, RuntimeError)


@pytest.mark.parametrize("index", [1, 5, 10, np.int64(3)])
def test_frame_in_range_accepts_integers(index):
    """Integers inside [1, N] pass."""
    assert_frame_in_range(index, 10)


@pytest.mark.parametrize("index", [0, 11, -1, 2.0, True, "3", None])
def test_frame_in_range_rejects(index):
    """Out-of-range and non-integer indices are rejected."""
    with pytest.raises(IndexOutOfRangeError) as excinfo:
        assert_frame_in_range(index, 10, cell="n")
    assert excinfo.value.count == 10
    assert excinfo.value.cell == "n"
    assert isinstance(excinfo.value, IndexError)


def test_same_shape():
    """Shape mismatch carries expected and actual shapes."""
    assert_same_shape((4, 3), np.zeros((4, 3)))
    with pytest.raises(ShapeMismatchError) as excinfo:
        assert_same_shape((4, 3), np.zeros((3, 4)), binding="map", cell="T")

    err = excinfo.value
    assert err.expected == (4, 3)
    assert err.actual == (3, 4)
    assert err.binding == "map"
    assert err.cell == "T"
    assert isinstance(err, RenderingError)


def test_time_series_layout():
    """Time series must have the variable, leading time and samples."""
    good = xr.Dataset({"T": (("time", "x"), np.zeros((2, 3)))})
    assert_time_series(good, "T")

    with pytest.raises(ContractViolation, match="missing"):
        assert_time_series(good, "S")

    transposed = xr.Dataset({"T": (("x", "time"), np.zeros((3, 2)))})
    with pytest.raises(ContractViolation, match="do not start"):
        assert_time_series(transposed, "T")

    empty = xr.Dataset({"T": (("time", "x"), np.zeros((0, 3)))})
    with pytest.raises(ContractViolation, match="no samples"):
        assert_time_series(empty, "T")


class TestClassify:

    def test_recoverable_errors(self):
        """Index and rendering errors recover."""
        assert classify(IndexOutOfRangeError(0, 5)) is FailurePolicy.RECOVER
        assert classify(RenderingError("bad")) is FailurePolicy.RECOVER
        assert classify(ShapeMismatchError((1,), (2,))) is FailurePolicy.RECOVER

    def test_fatal_errors(self):
        """Everything else aborts."""
        assert classify(CaptureError(3, "out.mp4")) is FailurePolicy.ABORT
        assert classify(ContractViolation("x")) is FailurePolicy.ABORT
        assert classify(ZeroDivisionError()) is FailurePolicy.ABORT

    def test_subscription_error_recoverable_only_if_all_failures_are(self):
        """One fatal failure makes the whole cascade fatal."""
        rendering = SubscriptionError("n", [("n", "map", RenderingError("bad"))])
        mixed = SubscriptionError("n", [
            ("n", "map", RenderingError("bad")),
            ("n", "callback", KeyError("k")),
        ])

        assert classify(rendering) is FailurePolicy.RECOVER
        assert classify(mixed) is FailurePolicy.ABORT
        assert classify(SubscriptionError("n", [])) is FailurePolicy.ABORT

    def test_index_error_inside_cascade_aborts(self):
        """Only setting the index itself may recover from an out-of-range error."""
        nested = SubscriptionError("n", [("n", "field", IndexOutOfRangeError(6, 5))])
        assert classify(nested) is FailurePolicy.ABORT


def test_subscription_error_lists_every_failure():
    """SubscriptionError keeps every failure in order."""
    first, second = ValueError("a"), KeyError("b")
    err = SubscriptionError("n", [("n", "s1", first), ("m", "s2", second)])

    assert err.exceptions == [first, second]
    assert "2 subscriber(s) failed" in str(err)
    assert "s1" in str(err) and "s2" in str(err)


def test_capture_error_message():
    """CaptureError names frame, path and reason."""
    err = CaptureError(7, "movies/T.mp4", reason="disk full")
    assert err.frame == 7
    assert str(err) == "Failed to capture frame 7 to movies/T.mp4: disk full"
