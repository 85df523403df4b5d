"""Centralized failure policy for the visualization loop.

Every error raised by cells, bindings, recorders and the animation driver
lives here, together with the policy that decides whether a failure is
local-recoverable or fatal to the current animation run.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """What the animation driver does with a failure.

    RECOVER: Log it, keep every cell at its last-good value, continue
             with the next frame.
    ABORT:   Release the output resource and stop the run.
    """
    RECOVER = "recover"
    ABORT = "abort"


class VizLoopError(Exception):
    """Base class for all visualization-loop errors."""
    pass


class ContractViolation(VizLoopError, RuntimeError):
    """Raised when a component is used against its contract.

    This indicates a programming error (starting a finished driver,
    subscribing a cell to itself), not bad data.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - ContractViolation: Wiring bug (programmer error)
    - RenderingError: Bad data reached a plot, recoverable
    """
    pass


class IndexOutOfRangeError(VizLoopError, IndexError):
    """A frame index was set outside [1, N]."""

    def __init__(self, index, count: int, cell: str = "frame"):
        self.index = index
        self.count = count
        self.cell = cell
        super().__init__(
            f"Frame index {index!r} for '{cell}' is outside [1, {count}]"
        )


class RenderingError(VizLoopError):
    """A plot binding could not redraw from its bound cells.

    Recoverable: the binding keeps its last-good drawing.
    """

    def __init__(self, message: str, binding: str = None, cell: str = None):
        self.binding = binding
        self.cell = cell
        super().__init__(message)


class ShapeMismatchError(RenderingError, ValueError):
    """A bound cell holds data whose shape differs from the drawn primitive."""

    def __init__(self, expected, actual, binding: str = None, cell: str = None):
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(
            f"Binding '{binding}' cannot redraw from cell '{cell}': "
            f"expected shape {self.expected}, got {self.actual}",
            binding=binding,
            cell=cell,
        )


class SubscriptionError(VizLoopError):
    """One or more subscribers raised while a cell notified them.

    All subscribers still ran; ``failures`` lists every one that raised, as
    ``(cell_name, subscriber_name, exception)`` tuples in call order.
    Failures from nested cascades are flattened into the same list.
    """

    def __init__(self, cell: str, failures: list):
        self.cell = cell
        self.failures = list(failures)
        details = "; ".join(
            f"{sub} on '{src}': {type(exc).__name__}: {exc}"
            for src, sub, exc in self.failures
        )
        super().__init__(
            f"{len(self.failures)} subscriber(s) failed while '{cell}' "
            f"notified: {details}"
        )

    @property
    def exceptions(self) -> list:
        return [exc for _, _, exc in self.failures]


class CaptureError(VizLoopError):
    """Writing a rendered frame to the output sequence failed."""

    def __init__(self, frame, path, reason: str = ""):
        self.frame = frame
        self.path = path
        message = f"Failed to capture frame {frame} to {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


def classify(exc: BaseException) -> FailurePolicy:
    """Map an exception to the driver's failure policy.

    An ``IndexOutOfRangeError`` recovers only when it is raised directly by
    setting the source index. Inside a cascade it means a derived cell could
    not recompute, so a ``SubscriptionError`` recovers only when every
    failure it carries is a ``RenderingError``.
    """
    if isinstance(exc, SubscriptionError):
        if exc.failures and all(
            isinstance(inner, RenderingError) for inner in exc.exceptions
        ):
            return FailurePolicy.RECOVER
        return FailurePolicy.ABORT
    if isinstance(exc, (IndexOutOfRangeError, RenderingError)):
        return FailurePolicy.RECOVER
    return FailurePolicy.ABORT


class AnimationCancelled(VizLoopError):
    """An animation run was cancelled between two frames."""

    def __init__(self, name: str, frame):
        self.frame = frame
        super().__init__(f"Animation '{name}' cancelled before frame {frame}")
