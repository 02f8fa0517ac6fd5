"""Exceptions and warnings raised by the integrator."""

from typing import Iterable, Tuple

__all__ = [
    "RungeKuttaError",
    "InvalidTableau",
    "UnknownPreset",
    "TypeMismatch",
    "RungeKuttaWarning",
    "AccuracyWarning",
    "WeightSumWarning",
    "EarlyTerminationWarning",
    "IncompleteIntegrationWarning",
]


class RungeKuttaError(Exception):
    """Base error for the jax_rk package."""


class InvalidTableau(RungeKuttaError, ValueError):
    """Raised when Butcher tableau coefficients fail structural validation."""


class UnknownPreset(RungeKuttaError, LookupError):
    """Raised when a method name does not match any tableau in the catalog."""
    def __init__(self, name: str, available: Iterable[str] = ()):
        self.name = name
        self.available = tuple(available)
        msg = f"Unknown Runge-Kutta method: {name!r}"
        if self.available:
            msg += f". Available methods: {', '.join(self.available)}"
        super().__init__(msg)

    def __str__(self) -> str:
        # LookupError would otherwise repr() the message
        return self.args[0]


class TypeMismatch(RungeKuttaError, TypeError):
    """Raised when the derivative's output does not match the initial state."""
    def __init__(self, expected: Tuple, actual: Tuple):
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Return value of the derivative must match the shape of the "
            f"initial state: expected {expected}, got {actual}"
        )


class RungeKuttaWarning(UserWarning):
    """Base category for recoverable integration problems."""


class AccuracyWarning(RungeKuttaWarning):
    """Adaptive step accepted at the minimum step size above the error threshold."""


class WeightSumWarning(RungeKuttaWarning):
    """Tableau weights do not sum to one."""


class EarlyTerminationWarning(RungeKuttaWarning):
    """Solution sequence was cut off by its element limit."""


class IncompleteIntegrationWarning(RungeKuttaWarning):
    """Session ended before reaching t_final."""
