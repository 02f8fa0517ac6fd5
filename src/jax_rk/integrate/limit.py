"""Bounded consumption of (possibly very long) iterables."""

import numbers
from typing import Any, Generator, Iterable, Optional

from .custom_types import LimitCallback


def limit_iterable(
    iterable: Iterable,
    limit: int,
    callback: Optional[LimitCallback] = None,
) -> Generator[Any, Any, Any]:
    """
    Yield at most `limit` elements of `iterable`.

    If the iterable is exhausted first, the generator returns the wrapped
    iterator's own return value. Otherwise the generator stops and returns
    `callback(next_item, count, iterator)`, where `next_item` is the first
    element that was not yielded, `count` the number of elements yielded and
    `iterator` the underlying iterator, which can still be advanced from the
    callback. The callback runs at most once.

    Args:
        iterable: Source of elements.
        limit: Maximum number of elements to yield, an integer >= 1.
        callback: Optional function invoked on early termination.

    Raises:
        TypeError: If `iterable` is not iterable or `callback` not callable.
        ValueError: If `limit` is not an integer >= 1.
    """
    try:
        iterator = iter(iterable)
    except TypeError as err:
        raise TypeError("First argument must be iterable") from err
    if (
        isinstance(limit, bool)
        or not isinstance(limit, numbers.Integral)
        or limit < 1
    ):
        raise ValueError("limit must be an integer greater than or equal to 1")
    if callback is not None and not callable(callback):
        raise TypeError("callback, if provided, must be callable")

    return _limited(iterator, int(limit), callback)


def _limited(iterator, limit, callback):
    count = 0
    while True:
        try:
            item = next(iterator)
        except StopIteration as stop:
            return stop.value
        if count >= limit:
            return callback(item, count, iterator) if callback is not None else None
        yield item
        count += 1
