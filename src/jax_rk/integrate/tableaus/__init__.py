"""Butcher tableaus and the catalog of named methods."""

from .tableau import ButcherTableau, EmbeddedWeights, TABLEAU_TOL
from .presets import PRESETS, get_tableau, list_presets


__all__ = [
    "ButcherTableau",
    "EmbeddedWeights",
    "TABLEAU_TOL",
    "PRESETS",
    "get_tableau",
    "list_presets",
]
