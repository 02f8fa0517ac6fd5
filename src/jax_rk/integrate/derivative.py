"""Helpers for calling user-supplied derivative functions."""

import inspect
from typing import Callable

import numpy as np

from .custom_types import Derivative, State, Time


def is_autonomous(fun: Callable) -> bool:
    """
    Check whether a derivative function ignores time.

    A function is treated as autonomous, f(y), when it declares exactly one
    positional parameter and no variadic positional parameter. NumPy ufuncs
    are judged by their number of inputs. Other callables whose signature
    cannot be inspected are assumed to take (y, t).
    """
    if isinstance(fun, np.ufunc):
        return fun.nin == 1
    try:
        signature = inspect.signature(fun)
    except (TypeError, ValueError):
        return False

    positional = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return False
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            positional += 1
    return positional == 1


def wrap_derivative(fun: Derivative, args: tuple = ()) -> Callable[[State, Time], State]:
    """
    Give a derivative function the uniform signature (y, t) -> dy/dt.

    Args:
        fun: Right-hand side with signature f(y), f(y, t) or f(y, t, *args).
        args: Additional arguments to pass to fun. When given, time is always
            passed so that the arguments line up.

    Returns:
        A function with signature (y, t) -> dy/dt.
    """
    if args:
        return lambda y, t: fun(y, t, *args)
    if is_autonomous(fun):
        return lambda y, t: fun(y)
    return fun
