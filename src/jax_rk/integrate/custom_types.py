"""Type aliases to improve type hint readability."""

from typing import Any, Callable, TypeAlias

State: TypeAlias = Any  # scalar, array or pytree of arrays
Time: TypeAlias = float
Derivative: TypeAlias = Callable[..., State]
LimitCallback: TypeAlias = Callable[[Any, int, Any], Any]
