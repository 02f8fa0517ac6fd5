"""
JAX Runge-Kutta

Explicit Runge-Kutta integrators for initial value problems
y'(t) = f(y, t), y(t0) = y0, with scalar or vector states.

Main components:
- integrate.tableaus: Butcher tableaus and the catalog of named methods
- integrate.timesteppers: Generic Runge-Kutta stepping and adaptive step-size control
- integrate.solve: Lazy integration sessions and solver entry points
"""

from .integrate import (
    InitialValueProblem,
    ButcherTableau,
    solve_ivp,
    solve_with_history,
    ForwardEuler,
    Midpoint,
    RK4,
    DormandPrince45,
)

__all__ = [
    # Problem definition
    "InitialValueProblem",
    "ButcherTableau",

    # Solver interfaces
    "solve_ivp",
    "solve_with_history",

    # Time-stepping methods
    "ForwardEuler",
    "Midpoint",
    "RK4",
    "DormandPrince45",
]
