"""
Butcher tableau representation of explicit Runge-Kutta methods.

An s-stage explicit method is defined by

    c_1 = 0  |
    c_2      | a_21
    c_3      | a_31  a_32
    ...      | ...
    c_s      | a_s1  a_s2  ...  a_s(s-1)
    ---------+--------------------------
             | b_1   b_2   ...  b_(s-1)  b_s

Stage 0 always has node 0 and no matrix row, so both are omitted from
storage: `nodes` holds c_2..c_s and `rk_matrix` holds the rows a_2..a_s.
Embedded methods carry a second set of weights of lower order that is used
to estimate the local truncation error.
"""

import logging
import math
import numbers
import warnings
from dataclasses import dataclass, field
from typing import Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from ..errors import InvalidTableau, WeightSumWarning

logger = logging.getLogger(__name__)

# Absolute tolerance for row-sum and weight-sum checks
TABLEAU_TOL = 1e-9


class EmbeddedWeights(NamedTuple):
    """High- and low-order weights of an embedded method."""
    high: Tuple[float, ...]
    low: Tuple[float, ...]


WeightsLike = Union[Sequence[float], EmbeddedWeights, Mapping[str, Sequence[float]]]


def _as_floats(values, what: str) -> Tuple[float, ...]:
    try:
        return tuple(float(v) for v in values)
    except (TypeError, ValueError) as err:
        raise InvalidTableau(f"{what} must be a sequence of numbers") from err


def _as_count(value, what: str) -> int:
    if (
        isinstance(value, bool)
        or not isinstance(value, numbers.Real)
        or value != int(value)
        or value < 1
    ):
        raise InvalidTableau(f"{what} must be an integer greater than or equal to 1")
    return int(value)


@dataclass(frozen=True)
class ButcherTableau:
    """
    Coefficients of an explicit Runge-Kutta method.

    Attributes:
        order: Convergence order of the method (of the high-order weights
            for an embedded method).
        num_stages: Number of stage evaluations per step, s.
        nodes: Nodes c_2..c_s, each in [0, 1].
        rk_matrix: Rows of the strictly lower-triangular Runge-Kutta matrix.
            Row i holds i + 1 entries summing to nodes[i].
        weights: Either s weights (fixed-step method) or an `EmbeddedWeights`
            pair (adaptive method). A mapping with keys 'high' and 'low' is
            also accepted.
        name: Optional label, set for catalog presets.

    Raises:
        InvalidTableau: If any of the structural constraints above fail.
    """

    order: int
    num_stages: int
    nodes: Tuple[float, ...]
    rk_matrix: Tuple[Tuple[float, ...], ...]
    weights: Union[Tuple[float, ...], EmbeddedWeights]
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        order = _as_count(self.order, "order")
        num_stages = _as_count(self.num_stages, "num_stages")

        if isinstance(self.nodes, (str, bytes)) or not isinstance(self.nodes, Sequence):
            raise InvalidTableau("nodes must be a sequence")
        nodes = _as_floats(self.nodes, "nodes")
        if len(nodes) != num_stages - 1:
            raise InvalidTableau(
                f"nodes must have length num_stages - 1 = {num_stages - 1}, "
                f"got {len(nodes)}"
            )
        if any(c < 0.0 or c > 1.0 for c in nodes):
            raise InvalidTableau("each node must lie in [0, 1]")

        if not isinstance(self.rk_matrix, Sequence):
            raise InvalidTableau("rk_matrix must be a sequence of rows")
        if len(self.rk_matrix) != num_stages - 1:
            raise InvalidTableau(
                f"rk_matrix must have length num_stages - 1 = {num_stages - 1}, "
                f"got {len(self.rk_matrix)}"
            )
        rows = []
        for i, row in enumerate(self.rk_matrix):
            if not isinstance(row, Sequence):
                raise InvalidTableau(f"rk_matrix row {i} must be a sequence")
            row = _as_floats(row, f"rk_matrix row {i}")
            if len(row) != i + 1:
                raise InvalidTableau(
                    f"rk_matrix row {i} must have length {i + 1}, got {len(row)}"
                )
            row_sum = math.fsum(row)
            if not math.isclose(row_sum, nodes[i], rel_tol=0.0, abs_tol=TABLEAU_TOL):
                raise InvalidTableau(
                    f"rk_matrix row {i} sums to {row_sum}, but must equal "
                    f"its node {nodes[i]}"
                )
            rows.append(row)

        weights = self._normalise_weights(self.weights, num_stages)

        object.__setattr__(self, "order", order)
        object.__setattr__(self, "num_stages", num_stages)
        object.__setattr__(self, "nodes", nodes)
        object.__setattr__(self, "rk_matrix", tuple(rows))
        object.__setattr__(self, "weights", weights)

    def _normalise_weights(self, weights, num_stages):
        if isinstance(weights, Mapping):
            if set(weights) != {"high", "low"}:
                raise InvalidTableau(
                    "embedded weights must have exactly the keys 'high' and 'low'"
                )
            weights = EmbeddedWeights(weights["high"], weights["low"])

        if isinstance(weights, EmbeddedWeights):
            high = self._check_weights(weights.high, num_stages, "high weights")
            low = self._check_weights(weights.low, num_stages, "low weights")
            return EmbeddedWeights(high, low)

        if isinstance(weights, (str, bytes)) or not isinstance(weights, Sequence):
            raise InvalidTableau("weights must be a sequence or an embedded pair")
        return self._check_weights(weights, num_stages, "weights")

    def _check_weights(self, weights, num_stages, what):
        if isinstance(weights, (str, bytes)) or not isinstance(weights, Sequence):
            raise InvalidTableau(f"{what} must be a sequence")
        b = _as_floats(weights, what)
        if len(b) != num_stages:
            raise InvalidTableau(
                f"{what} must have length num_stages = {num_stages}, got {len(b)}"
            )
        total = math.fsum(b)
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=TABLEAU_TOL):
            label = f" of {self.name!r}" if self.name else ""
            logger.debug("%s%s sum to %r", what, label, total)
            warnings.warn(
                f"sum of {what}{label} is not equal to 1. Current sum is {total}",
                WeightSumWarning,
                stacklevel=5,
            )
        return b

    @classmethod
    def from_preset(cls, name: str) -> "ButcherTableau":
        """Look up a tableau in the preset catalog by name."""
        from .presets import get_tableau
        return get_tableau(name)

    @property
    def is_adaptive(self) -> bool:
        """True for embedded methods carrying two weight sets."""
        return isinstance(self.weights, EmbeddedWeights)

    @property
    def c(self) -> Tuple[float, ...]:
        """All s nodes, including the implicit c_1 = 0."""
        return (0.0,) + self.nodes

    @property
    def high_weights(self) -> Tuple[float, ...]:
        """Weights of the propagated (high-order) solution."""
        return self.weights.high if self.is_adaptive else self.weights

    @property
    def low_weights(self) -> Optional[Tuple[float, ...]]:
        """Weights of the embedded low-order solution, or None."""
        return self.weights.low if self.is_adaptive else None
