"""Contracts and failure policy for the visualization loop.

Key principle:
- Pydantic validates config correctness
- Contracts validate wiring and data boundaries
- The animation driver applies the failure policy
"""

from vizloop.contracts.failure import (
    FailurePolicy,
    VizLoopError,
    ContractViolation,
    IndexOutOfRangeError,
    RenderingError,
    ShapeMismatchError,
    SubscriptionError,
    CaptureError,
    AnimationCancelled,
    classify,
)
from vizloop.contracts.base import require
from vizloop.contracts.frames import (
    assert_frame_in_range,
    assert_same_shape,
    assert_time_series,
)

__all__ = [
    "FailurePolicy",
    "VizLoopError",
    "ContractViolation",
    "IndexOutOfRangeError",
    "RenderingError",
    "ShapeMismatchError",
    "SubscriptionError",
    "CaptureError",
    "AnimationCancelled",
    "classify",
    "require",
    "assert_frame_in_range",
    "assert_same_shape",
    "assert_time_series",
]
