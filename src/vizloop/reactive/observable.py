"""Observable cells: mutable values that push changes to subscribers.

A cell holds one value and an ordered list of subscribers. ``set()`` stores
the value and calls ``notify()``, which runs every subscriber synchronously,
in registration order, before returning. There is no deduplication: setting
the same value twice cascades twice.
"""

import logging
import weakref
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from vizloop.contracts.base import require
from vizloop.contracts.failure import SubscriptionError

__all__ = ['Subscriber', 'CallbackSubscriber', 'Subscription', 'Observable']

logger = logging.getLogger(__name__)


class Subscriber(ABC):
    """Anything that reacts to a cell change."""

    name: str = ""

    @abstractmethod
    def on_change(self, new_value: Any) -> None:
        """Called with the cell's new value after every ``set``/``notify``."""
        ...


class CallbackSubscriber(Subscriber):
    """Adapts a plain callable to the ``Subscriber`` interface."""

    def __init__(self, callback: Callable[[Any], None], name: Optional[str] = None):
        self.callback = callback
        self.name = name or getattr(callback, "__name__", "callback")

    def on_change(self, new_value: Any) -> None:
        self.callback(new_value)

    def __repr__(self):
        return f"CallbackSubscriber({self.name!r})"


class Subscription:
    """Handle owned by the downstream side of a dependency edge."""

    def __init__(self, cell: "Observable", subscriber: Subscriber):
        self._cell = weakref.ref(cell)
        self.subscriber = subscriber
        self.active = True

    def cancel(self) -> None:
        """Stop receiving updates. Safe to call more than once."""
        if self.active:
            cell = self._cell()
            if cell is not None:
                cell.unsubscribe(self.subscriber)
            self.active = False


class Observable:
    """A mutable cell that notifies subscribers on every update.

    Parameters
    ----------
    value : any
        Initial value. Subscribers never see it unless ``notify()`` is called
        after they subscribe.
    name : str, optional
        Used in log messages and error reports.

    Examples
    --------
    >>> n = Observable(1, name="n")
    >>> seen = []
    >>> _ = n.watch(seen.append)
    >>> n.set(2)
    >>> seen
    [2]
    """

    def __init__(self, value: Any = None, name: Optional[str] = None):
        self._value = value
        self._subscribers: list = []
        self.name = name or f"cell-{id(self):x}"

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, value={self._value!r})"

    @property
    def subscribers(self) -> tuple:
        return tuple(self._subscribers)

    def get(self) -> Any:
        """Return the last stored value."""
        return self._value

    def set(self, value: Any) -> None:
        """Store ``value`` and cascade it to every subscriber.

        Raises
        ------
        SubscriptionError
            After all subscribers ran, if any of them raised.
        """
        self._value = value
        self.notify()

    def notify(self) -> None:
        """Push the current value to every subscriber, in order.

        A failing subscriber does not stop the ones registered after it.
        Failures are collected and raised together once the last subscriber
        has run.
        """
        value = self._value
        failures = []
        # Snapshot: subscribers may (un)subscribe while being notified.
        for subscriber in list(self._subscribers):
            try:
                subscriber.on_change(value)
            except SubscriptionError as exc:
                failures.extend(exc.failures)
            except Exception as exc:
                sub_name = getattr(subscriber, "name", "") or repr(subscriber)
                logger.debug("Subscriber %s of '%s' failed: %s", sub_name, self.name, exc)
                failures.append((self.name, sub_name, exc))

        if failures:
            raise SubscriptionError(self.name, failures)

    def subscribe(self, subscriber: Subscriber) -> Subscription:
        """Register ``subscriber`` for all future updates.

        The current value is not replayed.
        """
        require(
            isinstance(subscriber, Subscriber),
            f"Cell contract violated: {subscriber!r} does not implement on_change()"
        )
        require(
            subscriber is not self and not _reaches(subscriber, self),
            f"Cell contract violated: subscribing "
            f"{getattr(subscriber, 'name', subscriber)!r} to '{self.name}' "
            f"would create a cycle"
        )
        self._subscribers.append(subscriber)
        return Subscription(self, subscriber)

    def watch(self, callback: Callable[[Any], None], name: Optional[str] = None) -> Subscription:
        """Subscribe a plain callable."""
        return self.subscribe(CallbackSubscriber(callback, name=name))

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove ``subscriber``; unknown subscribers are ignored."""
        try:
            self._subscribers.remove(subscriber)
        except ValueError:
            pass


def _reaches(start, target) -> bool:
    """True if ``target`` is downstream of ``start`` in the cell graph."""
    stack = [start]
    seen = set()
    while stack:
        node = stack.pop()
        if node is target:
            return True
        if id(node) in seen or not isinstance(node, Observable):
            continue
        seen.add(id(node))
        stack.extend(node.subscribers)
    return False
