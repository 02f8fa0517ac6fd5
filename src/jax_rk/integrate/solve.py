import enum
import logging
import math
import time
import warnings
from dataclasses import dataclass, replace
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple, Union

import jax
from jax import Array
import jax.numpy as jnp

from .custom_types import Derivative, LimitCallback, State
from .derivative import wrap_derivative
from .errors import EarlyTerminationWarning, IncompleteIntegrationWarning, TypeMismatch
from .limit import limit_iterable
from .statespace import DEFAULT_SPACE
from .tableaus import ButcherTableau
from .timesteppers import AdaptiveController, ExplicitRungeKutta

logger = logging.getLogger(__name__)

Method = Union[str, ButcherTableau, ExplicitRungeKutta]
TimeRange = Union[float, Tuple[float, float]]

# Relative slack when comparing a step's end time against t_final
_T_FINAL_RTOL = 1e-12


def warn_early_termination(sample, count: int, iterator) -> None:
    """Default callback when a solution sequence hits its element limit."""
    warnings.warn(
        f"Solution exited early after {count} samples. "
        "If more elements are needed, change limit",
        EarlyTerminationWarning,
        stacklevel=2,
    )


@dataclass(frozen=True)
class SolverOptions:
    """
    Configuration of an integration session.

    Attributes:
        step_size: Fixed step size, or the first attempted step size of an
            adaptive method.
        t_final: End of the integration interval. Default: t_initial + 20
            steps.
        step_size_min: Adaptive lower bound. Default: 1% of step_size.
        step_size_max: Adaptive upper bound. Default: 10 times step_size.
        error_threshold: Largest accepted local error estimate (adaptive).
        safety_factor: Step-size safety multiplier in (0, 1] (adaptive).
        use_local_extrapolation: Propagate the high-order solution of an
            embedded pair (adaptive).
        max_steps: Maximum number of steps after the initial sample.
        limit: Maximum number of samples drawn by make_iterator/solve, or
            None for no limit.
        limit_callback: Called as callback(next_sample, count, iterator)
            when the limit cuts the sequence short.

    The step-size bounds are filled in on construction, so replacing
    `step_size` later keeps the bounds derived from the original value.
    """

    step_size: float
    t_final: Optional[float] = None
    step_size_min: Optional[float] = None
    step_size_max: Optional[float] = None
    error_threshold: float = 1e-6
    safety_factor: float = 0.9
    use_local_extrapolation: bool = True
    max_steps: int = 500
    limit: Optional[int] = 1000
    limit_callback: Optional[LimitCallback] = warn_early_termination

    def __post_init__(self):
        if not self.step_size > 0.0:
            raise ValueError(f"step_size must be positive, got {self.step_size}")
        if self.step_size_min is None:
            object.__setattr__(self, "step_size_min", 0.01 * self.step_size)
        if self.step_size_max is None:
            object.__setattr__(self, "step_size_max", 10.0 * self.step_size)
        if not self.step_size_min > 0.0:
            raise ValueError("step_size_min must be positive")
        if self.step_size_min > self.step_size_max:
            raise ValueError(
                f"step_size_min ({self.step_size_min}) must not exceed "
                f"step_size_max ({self.step_size_max})"
            )
        if not self.error_threshold > 0.0:
            raise ValueError("error_threshold must be positive")
        if not 0.0 < self.safety_factor <= 1.0:
            raise ValueError("safety_factor must lie in (0, 1]")
        if self.max_steps < 1:
            raise ValueError("max_steps must be at least 1")

    def replace(self, **changes) -> "SolverOptions":
        return replace(self, **changes)

    def controller(self) -> AdaptiveController:
        """Step-size controller configured from these options."""
        return AdaptiveController(
            error_threshold=self.error_threshold,
            step_size_min=self.step_size_min,
            step_size_max=self.step_size_max,
            safety_factor=self.safety_factor,
            use_local_extrapolation=self.use_local_extrapolation,
        )


class Sample(NamedTuple):
    """
    One element of a solution sequence.

    The adaptive fields are None for fixed-step methods and for the initial
    sample.
    """
    t: float
    y: State
    step_size: Optional[float] = None
    step_error: Optional[float] = None
    accumulated_error: Optional[float] = None
    step_attempts: Optional[int] = None
    accumulated_attempts: Optional[int] = None


class _Phase(enum.Enum):
    START = "start"
    STEPPING = "stepping"
    DONE = "done"


class IntegrationSession:
    """
    Lazy sequence of samples from t_initial to t_final.

    The session is a single-pass iterator: START emits the initial
    condition, STEPPING emits one sample per accepted step, and DONE is
    reached once the next step would pass t_final or max_steps steps have
    been taken. The final sample is carried as the StopIteration value.
    An IncompleteIntegrationWarning is issued when the session ends short
    of t_final.

    Raises:
        TypeMismatch: On construction, if f(y0, t0) does not have the
            structure of y0.
    """

    def __init__(
        self,
        problem: "InitialValueProblem",
        method: Method,
        options: SolverOptions,
        t_initial: Optional[float] = None,
    ):
        self.stepper = (
            method if isinstance(method, ExplicitRungeKutta)
            else ExplicitRungeKutta(method)
        )
        self.options = options
        self.t_initial = problem.t_initial if t_initial is None else t_initial
        self.t_final = (
            self.t_initial + 20 * options.step_size
            if options.t_final is None else options.t_final
        )
        self._slack = _T_FINAL_RTOL * max(1.0, abs(self.t_final))
        self.y_initial = problem.y_initial
        self._rhs = wrap_derivative(problem.derivative, problem.args)
        self._check_shapes()

        self.controller = options.controller() if self.stepper.is_adaptive else None
        self._phase = _Phase.START
        self._t = self.t_initial
        self._y = self.y_initial
        self._steps = 0
        self._h_next = options.step_size
        self._accumulated_error = 0.0
        self._accumulated_attempts = 0
        self._last = None

    def _check_shapes(self):
        space = self.stepper.space
        dydt = self._rhs(self.y_initial, self.t_initial)
        expected = space.shape(self.y_initial)
        actual = space.shape(dydt)
        if expected != actual:
            raise TypeMismatch(expected, actual)

    def __iter__(self) -> "IntegrationSession":
        return self

    def __next__(self) -> Sample:
        if self._phase is _Phase.START:
            self._phase = _Phase.STEPPING
            logger.debug(
                "Integrating with %s from t=%g to t=%g",
                self.stepper.tableau.name or "custom tableau",
                self.t_initial, self.t_final,
            )
            self._last = Sample(t=self._t, y=self._y)
            return self._last

        if self._phase is _Phase.STEPPING:
            sample = self._advance()
            if sample is not None:
                self._last = sample
                return sample
            self._phase = _Phase.DONE
            logger.debug("Finished after %d steps at t=%g", self._steps, self._t)

        raise StopIteration(self._last)

    @property
    def done(self) -> bool:
        return self._phase is _Phase.DONE

    def _advance(self) -> Optional[Sample]:
        if self._steps >= self.options.max_steps:
            if not self._reached_end():
                warnings.warn(
                    f"Stopped after max_steps={self.options.max_steps} steps at "
                    f"t={self._t}, before t_final={self.t_final}",
                    IncompleteIntegrationWarning,
                    stacklevel=3,
                )
            return None
        if self.controller is None:
            return self._fixed_step()
        return self._adaptive_step()

    def _reached_end(self) -> bool:
        if self.controller is None:
            t_next = self.t_initial + (self._steps + 1) * self.options.step_size
            return t_next > self.t_final + self._slack
        return self.t_final - self._t <= self._slack

    def _fixed_step(self) -> Optional[Sample]:
        h = self.options.step_size
        # Step n lands on t0 + n h, so rounding does not accumulate
        t_next = self.t_initial + (self._steps + 1) * h
        if t_next > self.t_final + self._slack:
            return None
        self._y = self.stepper.step(self._rhs, self._t, self._y, h)
        self._t = t_next
        self._steps += 1
        return Sample(t=self._t, y=self._y, step_size=h)

    def _next_step_size(self, remaining: float) -> float:
        step_size_min = self.controller.step_size_min
        h = min(self._h_next, remaining)
        # Leave either nothing or at least one minimum step before t_final
        if h < remaining and remaining - h < step_size_min - self._slack:
            if remaining <= self.controller.step_size_max:
                h = remaining
            elif remaining - step_size_min >= step_size_min:
                h = remaining - step_size_min
        return h

    def _adaptive_step(self) -> Optional[Sample]:
        remaining = self.t_final - self._t
        if remaining < self.controller.step_size_min - self._slack:
            if remaining > self._slack:
                warnings.warn(
                    f"Stopped at t={self._t}, {remaining:.3e} before "
                    f"t_final={self.t_final}, since the gap is below "
                    f"step_size_min={self.controller.step_size_min}",
                    IncompleteIntegrationWarning,
                    stacklevel=3,
                )
            return None
        h = self._next_step_size(remaining)
        result = self.controller.attempt(self.stepper, self._rhs, self._t, self._y, h)

        if abs(result.step_size_used - remaining) <= self._slack:
            self._t = self.t_final
        else:
            self._t = result.t
        self._y = result.y
        self._h_next = result.step_size_next
        self._steps += 1
        self._accumulated_error += result.step_error
        self._accumulated_attempts += result.step_attempts
        return Sample(
            t=self._t,
            y=self._y,
            step_size=result.step_size_used,
            step_error=result.step_error,
            accumulated_error=self._accumulated_error,
            step_attempts=result.step_attempts,
            accumulated_attempts=self._accumulated_attempts,
        )


class InitialValueProblem:
    """
    First-order initial value problem y'(t) = f(y(t), t), y(t0) = y0.

    Attributes:
        derivative: Right-hand side f(y), f(y, t) or f(y, t, *args). A
            function declaring a single parameter is called without t.
        y_initial: Initial state; a scalar, an array or a pytree of arrays.
        t_initial: Initial time (default 0).
        args: Additional arguments to pass to derivative.

    Example usage:
    ```python
    from jax_rk.integrate import InitialValueProblem

    ivp = InitialValueProblem(lambda y: y, 1.0)

    # Eager, list of samples
    samples = ivp.solve('rk4', 0.5, t_final=2.0)

    # Lazy, restartable per call
    for sample in ivp.make_iterator('dp45', 0.1, t_final=2.0, error_threshold=1e-8):
        print(sample.t, sample.y, sample.step_error)
    ```
    """

    def __init__(
        self,
        derivative: Derivative,
        y_initial: State,
        t_initial: float = 0.0,
        args: tuple = (),
    ):
        if not callable(derivative):
            raise TypeError("derivative must be callable")
        self.derivative = derivative
        self.y_initial = y_initial
        self.t_initial = t_initial
        self.args = tuple(args)

    @property
    def num_dimensions(self) -> int:
        """Number of scalar components of the state."""
        return DEFAULT_SPACE.size(self.y_initial)

    def session(
        self,
        method: Method,
        step_size: float,
        t_final: Optional[TimeRange] = None,
        **options,
    ) -> IntegrationSession:
        """
        Create an unlimited integration session.

        Args:
            method: Preset name, ButcherTableau or stepper instance.
            step_size: Fixed or initial step size.
            t_final: End time, or a (t_initial, t_final) pair overriding the
                problem's initial time.
            **options: Remaining SolverOptions fields.
        """
        t_initial = None
        if isinstance(t_final, (tuple, list)):
            t_initial, t_final = t_final
        opts = SolverOptions(step_size=step_size, t_final=t_final, **options)
        return IntegrationSession(self, method, opts, t_initial=t_initial)

    def make_iterator(
        self,
        method: Method,
        step_size: float,
        t_final: Optional[TimeRange] = None,
        **options,
    ) -> Iterator[Sample]:
        """
        Lazy sequence of samples, capped at `limit` elements.

        Each call starts again from the initial condition.
        """
        session = self.session(method, step_size, t_final, **options)
        if session.options.limit is None:
            return session
        return limit_iterable(
            session, session.options.limit, session.options.limit_callback
        )

    def solve(
        self,
        method: Method,
        step_size: float,
        t_final: Optional[TimeRange] = None,
        **options,
    ) -> List[Sample]:
        """Eagerly collect the samples of make_iterator() into a list."""
        return list(self.make_iterator(method, step_size, t_final, **options))


def _run(session: IntegrationSession) -> Sample:
    last = None
    for last in session:
        pass
    return last


def solve_ivp(
    fun: Callable,
    t_span: Tuple[float, float],
    y0: State,
    method: Method,
    step_size: float,
    args: tuple = (),
    **options,
) -> Tuple[float, State]:
    """
    Integrate dy/dt = fun(y, t, *args) over the time interval t_span.

    Args:
        fun: Callable right-hand side of system dy/dt = fun(y, t, *args)
        t_span: (t_start, t_end) time interval
        y0: Initial condition
        method: Preset name (e.g. 'rk4', 'dp45'), ButcherTableau, or stepper
            instance (e.g. RK4())
        step_size: Time step size (initial step size for adaptive methods)
        args: Additional arguments to pass to fun
        **options: Remaining SolverOptions fields, e.g. max_steps or
            error_threshold

    Returns:
        t_final: Time of the last step
        y_final: Solution at t_final

    Example usage:
    ```python
    import jax.numpy as jnp
    from jax_rk.integrate import solve_ivp, RK4

    # Define ODE: dy/dt = -k*y
    def fun(y, t, k):
        return -k * y

    y0 = jnp.array([1.0])
    t, y = solve_ivp(fun, (0.0, 2.0), y0, RK4(), step_size=0.01,
                     args=(0.5,), max_steps=1000)
    ```
    """
    t_start, t_end = t_span
    problem = InitialValueProblem(fun, y0, t_start, args)
    last = _run(problem.session(method, step_size, t_end, **options))
    return last.t, last.y


def solve_with_history(
    fun: Callable,
    t_span: Tuple[float, float],
    y0: State,
    method: Method,
    step_size: float,
    args: tuple = (),
    verbose: bool = False,
    **options,
) -> Tuple[Array, State]:
    """
    Integrate dy/dt = fun(y, t, *args) and return every sample.

    Args:
        fun: Right-hand side function with signature (y, t, *args) -> dydt
        t_span: (t_start, t_end) time interval
        y0: Initial condition
        method: Preset name, ButcherTableau, or stepper instance
        step_size: Time step size (initial step size for adaptive methods)
        args: Additional arguments to pass to fun
        verbose: Log progress information at INFO level
        **options: Remaining SolverOptions fields

    Returns:
        t: Array of time points, shape (n_points,)
        y: Solution values at times t, each leaf of y0 stacked along a new
            leading axis of length n_points
    """
    t_start, t_end = t_span
    problem = InitialValueProblem(fun, y0, t_start, args)
    session = problem.session(method, step_size, t_end, **options)

    if verbose:
        method_name = session.stepper.tableau.name or type(session.stepper).__name__
        logger.info("Solving with %s", method_name)
        logger.info(
            "Time: [%s, %s], h=%s, ~%d total steps",
            t_start, t_end, step_size,
            int(math.ceil((t_end - t_start) / step_size)),
        )

    start_wallclock = time.time()
    samples = list(session)
    elapsed_wallclock = time.time() - start_wallclock

    if verbose:
        n_steps = len(samples) - 1
        logger.info(
            "Completed %d steps in %.3fs (%.1f steps/s)",
            n_steps, elapsed_wallclock, n_steps / max(elapsed_wallclock, 1e-12),
        )

    t_arr = jnp.asarray([s.t for s in samples])
    y_arr = jax.tree_util.tree_map(
        lambda *leaves: jnp.stack(leaves), *[s.y for s in samples]
    )
    return t_arr, y_arr
