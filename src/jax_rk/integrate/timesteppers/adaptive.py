"""
Step-size control for embedded Runge-Kutta methods.

Each attempt advances the solution with both weight sets of an embedded
tableau and takes the difference as the local error estimate. A step whose
error exceeds the threshold is retried with a smaller step until it is
accepted or the minimum step size is reached.
"""

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

from ..custom_types import State
from ..derivative import wrap_derivative
from ..errors import AccuracyWarning
from .protocol import EmbeddedStepperProtocol

logger = logging.getLogger(__name__)


class StepResult(NamedTuple):
    """Outcome of one accepted step."""
    t: float
    y: State
    step_size_used: float
    step_error: Optional[float] = None
    step_size_next: Optional[float] = None
    step_attempts: Optional[int] = None


@dataclass(frozen=True)
class AdaptiveController:
    """
    Accept/reject logic and step-size selection for embedded methods.

    Attributes:
        error_threshold: Largest accepted local error estimate.
        step_size_min: Lower bound on the step size. A step at this size is
            accepted even when its error is too large.
        step_size_max: Upper bound on the step size.
        safety_factor: Multiplier in (0, 1] applied to every new step size.
        use_local_extrapolation: Propagate the high-order solution (True) or
            the low-order one (False). The error estimate is the same either
            way.
    """

    error_threshold: float
    step_size_min: float
    step_size_max: float
    safety_factor: float = 0.9
    use_local_extrapolation: bool = True

    def __post_init__(self):
        if self.error_threshold <= 0.0:
            raise ValueError("error_threshold must be positive")
        if self.step_size_min <= 0.0:
            raise ValueError("step_size_min must be positive")
        if self.step_size_min > self.step_size_max:
            raise ValueError("step_size_min must not exceed step_size_max")
        if not 0.0 < self.safety_factor <= 1.0:
            raise ValueError("safety_factor must lie in (0, 1]")

    def clamp(self, h: float) -> float:
        return min(max(h, self.step_size_min), self.step_size_max)

    def adapt_step_size(
        self, h: float, step_error: float, order: int, failed: bool
    ) -> float:
        """
        Recommend the size of the next attempt.

        $$ h' = h \\cdot s \\cdot |\\epsilon / e|^{1/p} $$

        with p = order on failure and order + 1 on success, clamped to
        [step_size_min, step_size_max]. Above the floor a failed step always
        recommends a strictly smaller h.
        """
        if step_error == 0.0:
            return self.step_size_max
        p = order if failed else order + 1
        ratio = abs(self.error_threshold / step_error)
        h_new = self.clamp(h * self.safety_factor * ratio ** (1.0 / p))
        if failed and h_new >= h > self.step_size_min:
            # ratio ** (1/p) rounds to 1 when the error barely exceeds the threshold
            h_new = math.nextafter(h, 0.0)
        return h_new

    def attempt(
        self,
        stepper: EmbeddedStepperProtocol,
        fun: Callable,
        t: float,
        y: State,
        h: float,
        args: tuple = (),
    ) -> StepResult:
        """
        Advance one accepted step, shrinking h on rejection.

        Args:
            stepper: Embedded method providing step_pair().
            fun: Right-hand side of system dy/dt = f(y, t, *args).
            t: Current time.
            y: Current solution.
            h: Initial attempt size, clamped to the step-size bounds.
            args: Additional arguments to pass to fun.

        Returns:
            The accepted step. step_attempts counts the rejected attempts
            that preceded it.
        """
        rhs = wrap_derivative(fun, args)
        space = stepper.space
        h = self.clamp(h)
        attempts = 0

        while True:
            y_high, y_low = stepper.step_pair(rhs, t, y, h)
            step_error = space.norm(space.add(y_high, space.scale(-1.0, y_low)))
            failed = step_error > self.error_threshold
            h_next = self.adapt_step_size(h, step_error, stepper.order, failed)

            if not failed:
                break
            if h <= self.step_size_min:
                warnings.warn(
                    f"Step at t={t} accepted at the minimum step size "
                    f"{self.step_size_min} with error {step_error:.3e} above "
                    f"the threshold {self.error_threshold:.3e}",
                    AccuracyWarning,
                    stacklevel=2,
                )
                break

            logger.debug(
                "Rejected step at t=%g with h=%g (error %.3e), retrying with h=%g",
                t, h, step_error, h_next,
            )
            h = h_next
            attempts += 1

        return StepResult(
            t=t + h,
            y=y_high if self.use_local_extrapolation else y_low,
            step_size_used=h,
            step_error=step_error,
            step_size_next=h_next,
            step_attempts=attempts,
        )
