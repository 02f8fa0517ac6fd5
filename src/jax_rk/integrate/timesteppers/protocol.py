"""Protocols for time-stepping schemes."""

from typing import Callable, Protocol, Tuple, runtime_checkable

from ..custom_types import State
from ..statespace import VectorSpace


@runtime_checkable
class StepperProtocol(Protocol):
    """
    Protocol for time-stepping schemes.

    Defines the interface for advancing an ODE one time step.
    Any class implementing a step() method with this signature can be used
    as a fixed-step method by the integration session.
    """

    def step(
        self,
        fun: Callable,
        t: float,
        y: State,
        h: float,
        args: tuple = ()
    ) -> State:
        """
        Take a single time step.

        Args:
            fun: Right-hand side function, f(y, t, *args).
            t: Current time.
            y: Current solution.
            h: Time step size.
            args: Additional arguments to pass to fun.

        Returns:
            Solution at t + h.
        """
        ...


@runtime_checkable
class EmbeddedStepperProtocol(StepperProtocol, Protocol):
    """
    Protocol for embedded schemes that can estimate their own error.
    """

    order: int
    space: VectorSpace

    def step_pair(
        self,
        fun: Callable,
        t: float,
        y: State,
        h: float,
        args: tuple = ()
    ) -> Tuple[State, State]:
        """
        Take a single time step with both weight sets.

        Returns:
            (y_high, y_low): high- and low-order solutions at t + h.
        """
        ...
