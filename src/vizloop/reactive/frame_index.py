"""Frame index: the bounded integer that selects a time-series sample."""

import logging
from typing import Optional

from vizloop.contracts.frames import assert_frame_in_range
from vizloop.reactive.observable import Observable

__all__ = ['FrameIndex']

logger = logging.getLogger(__name__)


class FrameIndex(Observable):
    """An observable integer constrained to ``[1, count]``.

    Sliders, counters and the animation driver all write through ``set``,
    so every writer gets the same validation. An invalid value raises
    ``IndexOutOfRangeError`` before anything is stored or notified.

    Parameters
    ----------
    count : int
        Number of available samples (N >= 1).
    start : int, optional
        Initial index, default 1.
    name : str, optional
        Cell name used in error reports.

    Examples
    --------
    >>> n = FrameIndex(10)
    >>> n.set(10)
    >>> n.get()
    10
    >>> list(n.frames())[:3]
    [1, 2, 3]
    """

    def __init__(self, count: int, start: int = 1, name: Optional[str] = "frame"):
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValueError(f"Frame count must be an integer >= 1, got {count!r}")
        self.count = count
        assert_frame_in_range(start, count, name)
        super().__init__(int(start), name=name)

    @classmethod
    def for_store(cls, store, start: int = 1, name: Optional[str] = "frame") -> "FrameIndex":
        """Index covering every sample of a time-series store."""
        return cls(store.count(), start=start, name=name)

    def set(self, value: int) -> None:
        assert_frame_in_range(value, self.count, self.name)
        super().set(int(value))

    def frames(self, start: int = 1, stop: Optional[int] = None) -> range:
        """Valid indices from ``start`` to ``stop`` inclusive (default: all)."""
        stop = self.count if stop is None else stop
        assert_frame_in_range(start, self.count, self.name)
        assert_frame_in_range(stop, self.count, self.name)
        return range(start, stop + 1)
