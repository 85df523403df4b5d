"""Reactive cells.

- observable: Observable cells and the Subscriber interface
- derived: Cells recomputed from an upstream cell
- frame_index: Bounded frame index
"""

from vizloop.reactive.observable import Observable, Subscriber, CallbackSubscriber, Subscription
from vizloop.reactive.derived import DerivedCell, lift
from vizloop.reactive.frame_index import FrameIndex

__all__ = [
    "Observable",
    "Subscriber",
    "CallbackSubscriber",
    "Subscription",
    "DerivedCell",
    "lift",
    "FrameIndex",
]
