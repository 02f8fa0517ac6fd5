"""
Vector-space operations on integrator states.

The stepping algorithm only ever adds states and scales them by real
numbers, so it is written against the small `VectorSpace` protocol below
rather than against a concrete state type. `PyTreeSpace` implements the
protocol for any JAX pytree whose leaves are scalars or arrays: a plain
float is the one-leaf (1-dimensional) instance, and a vector may be a JAX
array, a NumPy array, or a list/tuple of floats.
"""

import operator
from dataclasses import dataclass
from typing import Protocol, Sequence, Tuple, runtime_checkable

import jax
import numpy as np

from .custom_types import State


@runtime_checkable
class VectorSpace(Protocol):
    """
    Protocol for the arithmetic needed by explicit Runge-Kutta steps.
    """

    def zeros_like(self, x: State) -> State:
        """Additive identity with the same structure as x."""
        ...

    def add(self, x: State, y: State) -> State:
        """Element-wise sum x + y."""
        ...

    def scale(self, alpha: float, x: State) -> State:
        """Product alpha * x."""
        ...

    def norm(self, x: State) -> float:
        """Magnitude of x used for error estimation."""
        ...

    def shape(self, x: State) -> Tuple:
        """Structural signature of x, used to compare two states."""
        ...


@dataclass(frozen=True)
class PyTreeSpace:
    """
    Vector space over JAX pytrees.

    Implements: VectorSpace

    The norm is the infinity norm over every leaf, which reduces to the
    absolute value for a scalar state.
    """

    def zeros_like(self, x: State) -> State:
        return jax.tree_util.tree_map(lambda a: 0.0 * a, x)

    def add(self, x: State, y: State) -> State:
        return jax.tree_util.tree_map(operator.add, x, y)

    def scale(self, alpha: float, x: State) -> State:
        return jax.tree_util.tree_map(lambda a: alpha * a, x)

    def norm(self, x: State) -> float:
        leaves = jax.tree_util.tree_leaves(x)
        if not leaves:
            return 0.0
        return max(float(np.max(np.abs(np.asarray(leaf)))) for leaf in leaves)

    def shape(self, x: State) -> Tuple:
        leaves, treedef = jax.tree_util.tree_flatten(x)
        return (treedef, tuple(np.shape(leaf) for leaf in leaves))

    def size(self, x: State) -> int:
        """Total number of scalar components in x."""
        return sum(int(np.size(leaf)) for leaf in jax.tree_util.tree_leaves(x))

    def linear_combination(
        self,
        x: State,
        h: float,
        coefficients: Sequence[float],
        vectors: Sequence[State],
    ) -> State:
        """
        Compute x + h * sum_j c_j v_j, skipping zero coefficients.
        """
        acc = None
        for c, v in zip(coefficients, vectors):
            if c == 0.0:
                continue
            term = self.scale(c, v)
            acc = term if acc is None else self.add(acc, term)
        if acc is None:
            return x
        return self.add(x, self.scale(h, acc))


DEFAULT_SPACE = PyTreeSpace()
