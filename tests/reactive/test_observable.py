import pytest

from vizloop.contracts.failure import ContractViolation, SubscriptionError
from vizloop.reactive.observable import CallbackSubscriber, Observable, Subscriber

pytestmark = [pytest.mark.unit, pytest.mark.reactive]


class Counter(Subscriber):
    def __init__(self, name="counter"):
        self.name = name
        self.values = []

    def on_change(self, new_value):
        self.values.append(new_value)


def test_get_returns_initial_value():
    """get() returns the initial value."""
    cell = Observable(3, name="n")
    assert cell.get() == 3
    assert cell.name == "n"


def test_default_name_is_unique():
    """Unnamed cells get distinct names."""
    assert Observable().name != Observable().name


def test_set_stores_then_notifies():
    """Subscribers see the stored value."""
    cell = Observable(0, name="n")
    seen = []
    cell.watch(lambda v: seen.append((v, cell.get())))

    cell.set(5)

    assert seen == [(5, 5)]


def test_subscribe_does_not_replay_current_value():
    """Subscribing does not replay the current value."""
    cell = Observable(1)
    counter = Counter()
    cell.subscribe(counter)
    assert counter.values == []


def test_subscribers_run_in_registration_order():
    """Subscribers run in registration order."""
    cell = Observable(0)
    order = []
    cell.watch(lambda v: order.append("a"))
    cell.watch(lambda v: order.append("b"))
    cell.watch(lambda v: order.append("c"))

    cell.set(1)

    assert order == ["a", "b", "c"]


def test_no_deduplication_of_equal_values():
    """Equal values still notify."""
    cell = Observable(0)
    counter = Counter()
    cell.subscribe(counter)

    cell.set(7)
    cell.set(7)

    assert counter.values == [7, 7]


def test_notify_pushes_current_value():
    """notify() pushes the current value."""
    cell = Observable("x")
    counter = Counter()
    cell.subscribe(counter)

    cell.notify()

    assert counter.values == ["x"]


def test_failing_subscriber_does_not_stop_later_ones():
    """Later subscribers still run after a failure."""
    cell = Observable(0, name="n")
    counter = Counter()

    def boom(value):
        raise ValueError("bad value")

    cell.watch(boom, name="boom")
    cell.subscribe(counter)

    with pytest.raises(SubscriptionError) as excinfo:
        cell.set(1)

    assert counter.values == [1]
    assert cell.get() == 1
    err = excinfo.value
    assert err.cell == "n"
    assert len(err.failures) == 1
    src, sub, exc = err.failures[0]
    assert (src, sub) == ("n", "boom")
    assert isinstance(exc, ValueError)


def test_all_failures_are_collected():
    """Every failure ends up in one SubscriptionError."""
    cell = Observable(0)

    def fail_a(value):
        raise RuntimeError("a")

    def fail_b(value):
        raise KeyError("b")

    cell.watch(fail_a)
    cell.watch(fail_b)

    with pytest.raises(SubscriptionError) as excinfo:
        cell.set(1)

    assert [type(e) for e in excinfo.value.exceptions] == [RuntimeError, KeyError]


def test_nested_failures_are_flattened():
    """Failures from nested cascades are flattened."""
    upstream = Observable(0, name="up")
    downstream = Observable(0, name="down")

    def fail(value):
        raise RuntimeError("deep")

    downstream.watch(fail, name="deep-sub")
    upstream.watch(downstream.set, name="forward")

    with pytest.raises(SubscriptionError) as excinfo:
        upstream.set(1)

    assert excinfo.value.failures[0][:2] == ("down", "deep-sub")


def test_subscribe_requires_subscriber():
    """Only Subscriber instances can subscribe."""
    with pytest.raises(ContractViolation):
        Observable().subscribe(lambda v: None)


def test_self_subscription_is_rejected():
    """A cell cannot subscribe to itself."""
    class Echo(Observable, Subscriber):
        def on_change(self, new_value):
            self.set(new_value)

    echo = Echo(0, name="echo")
    with pytest.raises(ContractViolation, match="cycle"):
        echo.subscribe(echo)


def test_cycle_through_intermediate_cell_is_rejected():
    """Indirect cycles are rejected."""
    class Relay(Observable, Subscriber):
        def on_change(self, new_value):
            self.set(new_value)

    a = Relay(0, name="a")
    b = Relay(0, name="b")
    a.subscribe(b)

    with pytest.raises(ContractViolation):
        b.subscribe(a)


def test_subscription_cancel_stops_updates_and_is_idempotent():
    """Cancelling stops updates and can be repeated."""
    cell = Observable(0)
    counter = Counter()
    subscription = cell.subscribe(counter)

    cell.set(1)
    subscription.cancel()
    subscription.cancel()
    cell.set(2)

    assert counter.values == [1]
    assert subscription.active is False
    assert cell.subscribers == ()


def test_unsubscribe_unknown_subscriber_is_ignored():
    """Unknown subscribers are ignored on unsubscribe."""
    Observable().unsubscribe(Counter())


def test_unsubscribe_during_notify_keeps_current_cascade():
    """Unsubscribing mid-cascade does not skip anyone this round."""
    cell = Observable(0)
    later = Counter("later")
    holder = {}

    def drop_later(value):
        holder["sub"].cancel()

    cell.watch(drop_later)
    holder["sub"] = cell.subscribe(later)

    cell.set(1)
    cell.set(2)

    assert later.values == [1]


def test_callback_subscriber_name_defaults_to_function_name():
    """Callback name defaults to the function name."""
    def on_frame(value):
        pass

    assert CallbackSubscriber(on_frame).name == "on_frame"
