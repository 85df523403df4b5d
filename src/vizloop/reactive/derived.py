"""Derived cells: values recomputed eagerly from an upstream cell."""

import logging
import weakref
from typing import Any, Callable, Optional

from vizloop.reactive.observable import Observable, Subscriber

__all__ = ['DerivedCell', 'lift']

logger = logging.getLogger(__name__)


class DerivedCell(Observable, Subscriber):
    """An observable whose value is always ``func(upstream.get())``.

    The initial value is computed at construction. Every upstream update
    recomputes the value and cascades it through this cell's own
    subscribers before the upstream ``set`` returns.

    The derived cell owns the dependency edge (its ``Subscription``) and
    holds the upstream only through a weak reference, so a graph of cells
    never forms a reference cycle.

    If ``func`` raises, the cell keeps its last-good value, its own
    subscribers are not notified, and the exception surfaces in the
    upstream's ``SubscriptionError``.

    Parameters
    ----------
    upstream : Observable
        Source cell.
    func : callable
        Pure function of the upstream value.
    name : str, optional
        Defaults to ``func.__name__``.
    """

    def __init__(self, upstream: Observable, func: Callable[[Any], Any], name: Optional[str] = None):
        self.func = func
        func_name = getattr(func, "__name__", "derived")
        if func_name == "<lambda>":
            func_name = f"lift({upstream.name})"
        super().__init__(func(upstream.get()), name=name or func_name)
        self._upstream = weakref.ref(upstream)
        self._subscription = upstream.subscribe(self)

    @property
    def upstream(self) -> Optional[Observable]:
        """The upstream cell, or None once it has been released."""
        return self._upstream()

    @property
    def active(self) -> bool:
        return self._subscription.active

    def on_change(self, new_value: Any) -> None:
        value = self.func(new_value)
        logger.debug("Recomputed '%s'", self.name)
        self.set(value)

    def dispose(self) -> None:
        """Detach from the upstream cell; the current value is kept."""
        self._subscription.cancel()


def lift(upstream: Observable, func: Callable[[Any], Any], name: Optional[str] = None) -> DerivedCell:
    """Create a ``DerivedCell`` of ``upstream``.

    >>> n = Observable(2, name="n")
    >>> squared = lift(n, lambda v: v * v)
    >>> n.set(3)
    >>> squared.get()
    9
    """
    return DerivedCell(upstream, func, name=name)
