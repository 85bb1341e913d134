"""
Floating-point capability contract shared by every numerical routine.

Solvers and pricers never call :mod:`math` directly on their working values;
they go through a :class:`ScalarOps` bound to a numpy floating dtype so the same
code runs in single or double precision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Self

import numpy as np
from numpy.typing import DTypeLike

from ..typing import FloatArray, FloatDType


class Scalar(Protocol):
    """Ordering and arithmetic required of a working value."""

    def __lt__(self, other: Any, /) -> bool: ...
    def __le__(self, other: Any, /) -> bool: ...
    def __gt__(self, other: Any, /) -> bool: ...
    def __ge__(self, other: Any, /) -> bool: ...
    def __add__(self, other: Any, /) -> Self: ...
    def __sub__(self, other: Any, /) -> Self: ...
    def __mul__(self, other: Any, /) -> Self: ...
    def __truediv__(self, other: Any, /) -> Self: ...
    def __neg__(self) -> Self: ...
    def __abs__(self) -> Self: ...


@dataclass(frozen=True, slots=True)
class ScalarOps:
    """Elementary operations evaluated in one fixed floating dtype.

    Every method returns values of ``dtype``; Python floats passed in are cast
    first so that constants never silently widen a float32 computation.
    """

    dtype: type[np.floating]

    def __post_init__(self) -> None:
        if not np.issubdtype(self.dtype, np.floating):
            raise ValueError(f"dtype must be a floating type, got {self.dtype!r}")

    @property
    def name(self) -> str:
        return np.dtype(self.dtype).name

    def cast(self, x: Any) -> Scalar:
        return self.dtype(x)

    def array(self, values: Any) -> FloatArray:
        return np.asarray(values, dtype=self.dtype)

    def zero(self) -> Scalar:
        return self.dtype(0.0)

    def one(self) -> Scalar:
        return self.dtype(1.0)

    def exp(self, x: Any) -> Any:
        return np.exp(x, dtype=self.dtype)

    def log(self, x: Any) -> Any:
        return np.log(x, dtype=self.dtype)

    def sqrt(self, x: Any) -> Any:
        return np.sqrt(x, dtype=self.dtype)

    def pow(self, x: Any, y: Any) -> Any:
        return np.power(x, y, dtype=self.dtype)

    def abs(self, x: Any) -> Any:
        return np.abs(self.cast(x) if np.isscalar(x) else self.array(x))

    def sign(self, x: Any) -> Any:
        return np.sign(self.cast(x) if np.isscalar(x) else self.array(x))

    def half(self, x: Any) -> Any:
        """Return ``x / 2``; used to narrow bisection steps."""
        return (self.cast(x) if np.isscalar(x) else self.array(x)) * self.dtype(0.5)

    def is_finite(self, x: Any) -> bool:
        return bool(np.all(np.isfinite(x)))


FLOAT64 = ScalarOps(np.float64)
FLOAT32 = ScalarOps(np.float32)


def scalar_ops(dtype: DTypeLike | ScalarOps = FloatDType) -> ScalarOps:
    """Resolve a dtype-like (``np.float32``, ``"float64"``, ...) to its :class:`ScalarOps`."""
    if isinstance(dtype, ScalarOps):
        return dtype
    resolved = np.dtype(dtype).type
    if resolved is np.float64:
        return FLOAT64
    if resolved is np.float32:
        return FLOAT32
    return ScalarOps(resolved)
