"""Explicit Runge-Kutta time-stepping schemes."""

from typing import Callable, List, Tuple, Union

from flax import nnx

from ..custom_types import State
from ..derivative import wrap_derivative
from ..statespace import DEFAULT_SPACE, PyTreeSpace
from ..tableaus import ButcherTableau, get_tableau


def resolve_tableau(method: Union[str, ButcherTableau]) -> ButcherTableau:
    """
    Turn a preset name or tableau into a tableau.

    Raises:
        UnknownPreset: If `method` is a name missing from the catalog.
        TypeError: If `method` is neither a string nor a ButcherTableau.
    """
    if isinstance(method, ButcherTableau):
        return method
    if isinstance(method, str):
        return get_tableau(method)
    raise TypeError(
        "method must be a preset name or a ButcherTableau, "
        f"got {type(method).__name__}"
    )


class ExplicitRungeKutta(nnx.Module):
    """
    Explicit Runge-Kutta method defined by a Butcher tableau.

    Stage slopes:
        $$ k_1 = f(y_n, t_n) $$
        $$ k_i = f(y_n + h \\sum_{j<i} a_{ij} k_j, t_n + c_i h) $$

    Update:
        $$ y_{n+1} = y_n + h \\sum_i b_i k_i $$

    Implements: StepperProtocol, and EmbeddedStepperProtocol when the
    tableau is embedded.

    Attributes:
        tableau: Coefficients of the method.
        space: State arithmetic (default: any JAX pytree).
    """

    def __init__(
        self,
        tableau: Union[str, ButcherTableau],
        space: PyTreeSpace = DEFAULT_SPACE,
    ):
        self.tableau = resolve_tableau(tableau)
        self.space = space

    @property
    def order(self) -> int:
        return self.tableau.order

    @property
    def is_adaptive(self) -> bool:
        return self.tableau.is_adaptive

    def stages(
        self,
        fun: Callable,
        t: float,
        y: State,
        h: float,
    ) -> List[State]:
        """
        Evaluate the stage slopes k_1..k_s.

        Args:
            fun: Right-hand side with the uniform signature (y, t).
            t: Current time.
            y: Current solution.
            h: Time step size.

        Returns:
            List of the s stage slopes.
        """
        tab = self.tableau
        slopes = [fun(y, t)]
        for a_row, c in zip(tab.rk_matrix, tab.nodes):
            y_stage = self.space.linear_combination(y, h, a_row, slopes)
            slopes.append(fun(y_stage, t + c * h))
        return slopes

    def step(
        self,
        fun: Callable,
        t: float,
        y: State,
        h: float,
        args: tuple = ()
    ) -> State:
        """
        Perform a single Runge-Kutta step.

        For an embedded tableau the high-order weights are used.

        Args:
            fun: Right-hand side of system dy/dt = f(y, t, *args).
            t: Current time.
            y: Current solution.
            h: Time step size.
            args: Additional arguments to pass to fun.

        Returns:
            Solution at t + h.
        """
        slopes = self.stages(wrap_derivative(fun, args), t, y, h)
        return self.space.linear_combination(y, h, self.tableau.high_weights, slopes)

    def step_pair(
        self,
        fun: Callable,
        t: float,
        y: State,
        h: float,
        args: tuple = ()
    ) -> Tuple[State, State]:
        """
        Perform a single step of an embedded method.

        Both solutions reuse the same stage slopes, so the error estimate
        costs no extra derivative evaluations.

        Returns:
            (y_high, y_low) at t + h.
        """
        if not self.tableau.is_adaptive:
            raise ValueError(
                f"{self.tableau.name or 'tableau'} has a single set of weights; "
                "step_pair requires an embedded method"
            )
        slopes = self.stages(wrap_derivative(fun, args), t, y, h)
        y_high = self.space.linear_combination(y, h, self.tableau.weights.high, slopes)
        y_low = self.space.linear_combination(y, h, self.tableau.weights.low, slopes)
        return y_high, y_low


class ForwardEuler(ExplicitRungeKutta):
    """
    Forward Euler method.

    Discretisation:
        $$ \\frac{(y_{n+1} - y_n)}{h} = f(y_n, t_n) $$
    """

    def __init__(self):
        super().__init__("euler")


class Midpoint(ExplicitRungeKutta):
    """Explicit midpoint method, second order."""

    def __init__(self):
        super().__init__("midpoint")


class RK4(ExplicitRungeKutta):
    """Classical fourth (4th) order Runge-Kutta method."""

    def __init__(self):
        super().__init__("rk4")


class DormandPrince45(ExplicitRungeKutta):
    """Dormand-Prince 5(4) embedded pair."""

    def __init__(self):
        super().__init__("dp45")
