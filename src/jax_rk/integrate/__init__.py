"""
Explicit Runge-Kutta time integration for initial value problems written in JAX.
"""

# Solver interfaces
from .solve import (
    InitialValueProblem,
    IntegrationSession,
    Sample,
    SolverOptions,
    solve_ivp,
    solve_with_history,
)

# Butcher tableaus
from .tableaus import ButcherTableau, EmbeddedWeights, PRESETS, get_tableau, list_presets

# Time-stepping schemes
from .timesteppers import (
    StepperProtocol,
    EmbeddedStepperProtocol,
    ExplicitRungeKutta,
    ForwardEuler,
    Midpoint,
    RK4,
    DormandPrince45,
    AdaptiveController,
    StepResult,
)

# State arithmetic
from .statespace import VectorSpace, PyTreeSpace

# Utilities
from .derivative import is_autonomous
from .limit import limit_iterable

# Errors and warnings
from .errors import (
    RungeKuttaError,
    InvalidTableau,
    UnknownPreset,
    TypeMismatch,
    RungeKuttaWarning,
    AccuracyWarning,
    WeightSumWarning,
    EarlyTerminationWarning,
    IncompleteIntegrationWarning,
)

__all__ = [
    # Solver interfaces
    'InitialValueProblem',
    'IntegrationSession',
    'Sample',
    'SolverOptions',
    'solve_ivp',
    'solve_with_history',

    # Butcher tableaus
    'ButcherTableau',
    'EmbeddedWeights',
    'PRESETS',
    'get_tableau',
    'list_presets',

    # Time-stepping methods
    'StepperProtocol',
    'EmbeddedStepperProtocol',
    'ExplicitRungeKutta',
    'ForwardEuler',
    'Midpoint',
    'RK4',
    'DormandPrince45',
    'AdaptiveController',
    'StepResult',

    # State arithmetic
    'VectorSpace',
    'PyTreeSpace',

    # Utilities
    'is_autonomous',
    'limit_iterable',

    # Errors and warnings
    'RungeKuttaError',
    'InvalidTableau',
    'UnknownPreset',
    'TypeMismatch',
    'RungeKuttaWarning',
    'AccuracyWarning',
    'WeightSumWarning',
    'EarlyTerminationWarning',
    'IncompleteIntegrationWarning',
]
