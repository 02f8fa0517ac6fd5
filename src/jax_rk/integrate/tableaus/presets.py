"""
Catalog of named Butcher tableaus.

Fixed-step methods:
    euler, midpoint, heun, ralston, rk3, heun3, ralston3, ssprk3, rk4,
    ralston4

Embedded (adaptive) methods, `order` is that of the high-order weights:
    euler-heun, euler-midpoint, rkf12, bs23, rkf45, ck45, dp45
"""

from types import MappingProxyType
from typing import List, Optional

from ..errors import UnknownPreset
from .tableau import ButcherTableau, EmbeddedWeights


def _preset(name, order, nodes, rk_matrix, weights):
    return ButcherTableau(
        order=order,
        num_stages=len(nodes) + 1,
        nodes=nodes,
        rk_matrix=rk_matrix,
        weights=weights,
        name=name,
    )


_FIXED = (
    _preset("euler", 1, [], [], [1.0]),
    _preset("midpoint", 2, [1/2], [[1/2]], [0.0, 1.0]),
    _preset("heun", 2, [1.0], [[1.0]], [1/2, 1/2]),
    _preset("ralston", 2, [2/3], [[2/3]], [1/4, 3/4]),
    _preset(
        "rk3", 3,
        [1/2, 1.0],
        [[1/2],
         [-1.0, 2.0]],
        [1/6, 2/3, 1/6],
    ),
    _preset(
        "heun3", 3,
        [1/3, 2/3],
        [[1/3],
         [0.0, 2/3]],
        [1/4, 0.0, 3/4],
    ),
    _preset(
        "ralston3", 3,
        [1/2, 3/4],
        [[1/2],
         [0.0, 3/4]],
        [2/9, 1/3, 4/9],
    ),
    _preset(
        "ssprk3", 3,
        [1.0, 1/2],
        [[1.0],
         [1/4, 1/4]],
        [1/6, 1/6, 2/3],
    ),
    _preset(
        "rk4", 4,
        [1/2, 1/2, 1.0],
        [[1/2],
         [0.0, 1/2],
         [0.0, 0.0, 1.0]],
        [1/6, 1/3, 1/3, 1/6],
    ),
    _preset(
        "ralston4", 4,
        [0.4, 0.45573725, 1.0],
        [[0.4],
         [0.29697761, 0.15875964],
         [0.21810040, -3.05096516, 3.83286476]],
        [0.17476028, -0.55148066, 1.20553560, 0.17118478],
    ),
)

_EMBEDDED = (
    _preset(
        "euler-heun", 2,
        [1.0],
        [[1.0]],
        EmbeddedWeights(high=[1/2, 1/2], low=[1.0, 0.0]),
    ),
    _preset(
        "euler-midpoint", 2,
        [1/2],
        [[1/2]],
        EmbeddedWeights(high=[0.0, 1.0], low=[1.0, 0.0]),
    ),
    # Fehlberg 1(2)
    _preset(
        "rkf12", 2,
        [1/2, 1.0],
        [[1/2],
         [1/256, 255/256]],
        EmbeddedWeights(
            high=[1/512, 255/256, 1/512],
            low=[1/256, 255/256, 0.0],
        ),
    ),
    # Bogacki-Shampine 3(2)
    _preset(
        "bs23", 3,
        [1/2, 3/4, 1.0],
        [[1/2],
         [0.0, 3/4],
         [2/9, 1/3, 4/9]],
        EmbeddedWeights(
            high=[2/9, 1/3, 4/9, 0.0],
            low=[7/24, 1/4, 1/3, 1/8],
        ),
    ),
    # Runge-Kutta-Fehlberg 4(5)
    _preset(
        "rkf45", 5,
        [1/4, 3/8, 12/13, 1.0, 1/2],
        [[1/4],
         [3/32, 9/32],
         [1932/2197, -7200/2197, 7296/2197],
         [439/216, -8.0, 3680/513, -845/4104],
         [-8/27, 2.0, -3544/2565, 1859/4104, -11/40]],
        EmbeddedWeights(
            high=[16/135, 0.0, 6656/12825, 28561/56430, -9/50, 2/55],
            low=[25/216, 0.0, 1408/2565, 2197/4104, -1/5, 0.0],
        ),
    ),
    # Cash-Karp 4(5)
    _preset(
        "ck45", 5,
        [1/5, 3/10, 3/5, 1.0, 7/8],
        [[1/5],
         [3/40, 9/40],
         [3/10, -9/10, 6/5],
         [-11/54, 5/2, -70/27, 35/27],
         [1631/55296, 175/512, 575/13824, 44275/110592, 253/4096]],
        EmbeddedWeights(
            high=[37/378, 0.0, 250/621, 125/594, 0.0, 512/1771],
            low=[2825/27648, 0.0, 18575/48384, 13525/55296, 277/14336, 1/4],
        ),
    ),
    # Dormand-Prince 5(4)
    _preset(
        "dp45", 5,
        [1/5, 3/10, 4/5, 8/9, 1.0, 1.0],
        [[1/5],
         [3/40, 9/40],
         [44/45, -56/15, 32/9],
         [19372/6561, -25360/2187, 64448/6561, -212/729],
         [9017/3168, -355/33, 46732/5247, 49/176, -5103/18656],
         [35/384, 0.0, 500/1113, 125/192, -2187/6784, 11/84]],
        EmbeddedWeights(
            high=[35/384, 0.0, 500/1113, 125/192, -2187/6784, 11/84, 0.0],
            low=[5179/57600, 0.0, 7571/16695, 393/640, -92097/339200,
                 187/2100, 1/40],
        ),
    ),
)

PRESETS = MappingProxyType({t.name: t for t in _FIXED + _EMBEDDED})


def get_tableau(name: str) -> ButcherTableau:
    """
    Return the catalog tableau called `name`.

    Raises:
        UnknownPreset: If no tableau has that name.
    """
    try:
        return PRESETS[name]
    except (KeyError, TypeError):
        raise UnknownPreset(name, PRESETS) from None


def list_presets(adaptive: Optional[bool] = None) -> List[str]:
    """
    Names in the catalog.

    Args:
        adaptive: If given, keep only embedded (True) or fixed-step (False)
            methods.
    """
    return [
        name for name, tableau in PRESETS.items()
        if adaptive is None or tableau.is_adaptive == adaptive
    ]
