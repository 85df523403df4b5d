import gc

import numpy as np
import pytest

from vizloop.contracts.failure import SubscriptionError
from vizloop.reactive.derived import DerivedCell, lift
from vizloop.reactive.observable import Observable

pytestmark = [pytest.mark.unit, pytest.mark.reactive]


def test_initial_value_is_computed_eagerly():
    """Value is computed at construction."""
    n = Observable(3, name="n")
    doubled = lift(n, lambda v: 2 * v)
    assert doubled.get() == 6


def test_propagation_equals_recomputation():
    """Propagated value equals a fresh recomputation."""
    n = Observable(1, name="n")
    square = lift(n, lambda v: v * v)
    plus_one = lift(square, lambda v: v + 1)

    for value in [2, 5, -3, 0]:
        n.set(value)
        assert square.get() == value * value
        assert plus_one.get() == value * value + 1


def test_cascade_completes_before_set_returns():
    """Whole chain is updated when set() returns."""
    n = Observable(0, name="n")
    derived = lift(n, lambda v: v + 10)
    seen = []
    derived.watch(seen.append)

    n.set(5)

    assert seen == [15]


def test_derived_cells_update_in_subscription_order():
    """Sibling derived cells update in subscription order."""
    n = Observable(0, name="n")
    order = []
    first = lift(n, lambda v: v, name="first")
    second = lift(n, lambda v: v, name="second")
    first.watch(lambda v: order.append("first"))
    second.watch(lambda v: order.append("second"))

    n.set(1)

    assert order == ["first", "second"]


def test_names():
    """Derived cell names."""
    n = Observable(0, name="n")

    def snapshot(i):
        return i

    assert lift(n, snapshot).name == "snapshot"
    assert lift(n, lambda v: v).name == "lift(n)"
    assert lift(n, lambda v: v, name="custom").name == "custom"


def test_failing_func_keeps_last_good_value():
    """Failed recompute keeps the last good value."""
    n = Observable(1, name="n")
    inverse = lift(n, lambda v: 1 / v, name="inverse")
    seen = []
    inverse.watch(seen.append)

    with pytest.raises(SubscriptionError) as excinfo:
        n.set(0)

    assert inverse.get() == 1.0
    assert seen == []
    assert isinstance(excinfo.value.exceptions[0], ZeroDivisionError)
    assert excinfo.value.failures[0][1] == "inverse"


def test_dispose_detaches_from_upstream():
    """dispose() stops updates but keeps the value."""
    n = Observable(1, name="n")
    derived = lift(n, lambda v: v * 3)

    derived.dispose()
    n.set(2)

    assert derived.get() == 3
    assert derived.active is False
    assert derived not in n.subscribers


def test_upstream_is_weakly_referenced():
    """Derived cell does not keep its upstream alive."""
    n = Observable(np.zeros(3), name="n")
    derived = DerivedCell(n, lambda v: v.sum())
    assert derived.upstream is n

    del n
    gc.collect()

    assert derived.upstream is None


def test_derived_from_array_cell():
    """Derived cells work on numpy arrays."""
    field = Observable(np.ones((2, 3)), name="field")
    column_mean = lift(field, lambda a: a.mean(axis=0))
    field.set(np.arange(6.0).reshape(2, 3))
    np.testing.assert_allclose(column_mean.get(), [1.5, 2.5, 3.5])
