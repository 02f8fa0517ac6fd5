"""Unit tests for the bounded-consumption wrapper."""

import itertools

import pytest

from jax_rk.integrate import limit_iterable


def countdown(n):
    """Yield n..1 and return 'liftoff'."""
    while n > 0:
        yield n
        n -= 1
    return "liftoff"


def drain(gen):
    """Collect all elements of a generator along with its return value."""
    items = []
    while True:
        try:
            items.append(next(gen))
        except StopIteration as stop:
            return items, stop.value


class TestLimitIterable:

    def test_natural_completion_returns_wrapped_value(self):
        calls = []
        items, value = drain(limit_iterable(countdown(3), 5, lambda *a: calls.append(a)))
        assert items == [3, 2, 1]
        assert value == "liftoff"
        assert calls == []

    def test_exact_limit_is_natural_completion(self):
        calls = []
        items, value = drain(limit_iterable(countdown(3), 3, lambda *a: calls.append(a)))
        assert items == [3, 2, 1]
        assert value == "liftoff"
        assert calls == []

    def test_callback_on_early_termination(self):
        calls = []

        def callback(item, count, iterator):
            calls.append((item, count))
            return "cut"

        items, value = drain(limit_iterable(itertools.count(), 4, callback))
        assert items == [0, 1, 2, 3]
        assert value == "cut"
        assert calls == [(4, 4)]

    def test_callback_can_resume_iterator(self):
        def callback(item, count, iterator):
            return [item, next(iterator)]

        _, value = drain(limit_iterable(itertools.count(), 2, callback))
        assert value == [2, 3]

    def test_no_further_draws_after_limit(self):
        gen = limit_iterable(itertools.count(), 2)
        assert list(gen) == [0, 1]
        assert list(gen) == []

    def test_callback_called_once(self):
        calls = []
        gen = limit_iterable(itertools.count(), 1, lambda *a: calls.append(a))
        list(gen)
        list(gen)
        assert len(calls) == 1

    @pytest.mark.parametrize("limit", [0, -1, 1.5, True])
    def test_invalid_limit(self, limit):
        with pytest.raises(ValueError):
            limit_iterable([1, 2], limit)

    def test_not_iterable(self):
        with pytest.raises(TypeError):
            limit_iterable(42, 1)

    def test_callback_not_callable(self):
        with pytest.raises(TypeError):
            limit_iterable([1, 2], 1, "callback")
