"""Time-stepping schemes for initial value problems."""

from .protocol import StepperProtocol, EmbeddedStepperProtocol
from .explicit import (
    ExplicitRungeKutta,
    ForwardEuler,
    Midpoint,
    RK4,
    DormandPrince45,
    resolve_tableau,
)
from .adaptive import AdaptiveController, StepResult

__all__ = [
    # Protocols
    'StepperProtocol',
    'EmbeddedStepperProtocol',

    # Explicit methods
    'ExplicitRungeKutta',
    'ForwardEuler',
    'Midpoint',
    'RK4',
    'DormandPrince45',
    'resolve_tableau',

    # Step-size control
    'AdaptiveController',
    'StepResult',
]
